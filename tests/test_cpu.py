"""Tests for the CPU module."""

import pytest
from chip8.cpu import CPU, STACK_DEPTH
from chip8.errors import StackOverflowError, StackUnderflowError


class TestCPU:
    """CPU module tests."""

    def test_default_initialization(self):
        """CPU starts with zeroed registers, PC at 0x200 and an empty stack."""
        cpu = CPU()
        assert cpu.v == [0] * 16
        assert cpu.index == 0
        assert cpu.pc == 0x200
        assert cpu.sp == -1
        assert cpu.stack == [0] * 16
        assert cpu.delay_timer == 0
        assert cpu.sound_timer == 0

    def test_set_v_wraps(self):
        """Registers wrap modulo 256."""
        cpu = CPU()
        cpu.set_v(3, 0x101)
        assert cpu.v[3] == 0x01
        cpu.set_v(3, -1)
        assert cpu.v[3] == 0xFF

    def test_set_flag(self):
        """Flag writes 0/1 into VF."""
        cpu = CPU()
        cpu.set_flag(True)
        assert cpu.v[0xF] == 1
        cpu.set_flag(0)
        assert cpu.v[0xF] == 0

    def test_set_index_wraps(self):
        """I is a 16-bit register."""
        cpu = CPU()
        cpu.set_index(0x10005)
        assert cpu.index == 0x0005

    def test_push_pop(self):
        """Push pre-increments SP, pop post-decrements it."""
        cpu = CPU()
        cpu.push(0x202)
        assert cpu.sp == 0
        assert cpu.stack[0] == 0x202
        cpu.push(0x304)
        assert cpu.sp == 1
        assert cpu.pop() == 0x304
        assert cpu.pop() == 0x202
        assert cpu.sp == -1

    def test_stack_overflow(self):
        """The seventeenth nested push faults and leaves SP untouched."""
        cpu = CPU()
        for i in range(STACK_DEPTH):
            cpu.push(0x200 + i * 2)
        with pytest.raises(StackOverflowError):
            cpu.push(0x400)
        assert cpu.sp == STACK_DEPTH - 1

    def test_stack_underflow(self):
        """Popping an empty stack faults."""
        cpu = CPU()
        with pytest.raises(StackUnderflowError):
            cpu.pop()
        assert cpu.sp == -1

    def test_get_state(self):
        """Get state returns correct dict."""
        cpu = CPU()
        cpu.v[1] = 10
        cpu.index = 0x300
        cpu.delay_timer = 7
        state = cpu.get_state()
        assert state["v"][1] == 10
        assert state["i"] == 0x300
        assert state["pc"] == 0x200
        assert state["sp"] == -1
        assert state["dt"] == 7
        assert state["st"] == 0

    def test_reset(self):
        """Reset returns CPU to initial state."""
        cpu = CPU()
        cpu.v[0] = 100
        cpu.index = 50
        cpu.pc = 0x250
        cpu.push(0x202)
        cpu.sound_timer = 3
        cpu.reset()
        assert cpu.v == [0] * 16
        assert cpu.index == 0
        assert cpu.pc == 0x200
        assert cpu.sp == -1
        assert cpu.sound_timer == 0
