"""Tests for the Memory module."""

import pytest
from chip8.memory import Memory
from chip8.errors import BoundsError


class TestMemory:
    """Memory module tests."""

    def test_default_initialization(self):
        """Memory is 4096 zero bytes."""
        mem = Memory()
        assert mem.size == 4096
        assert mem.snapshot() == bytes(4096)

    def test_write_and_read(self):
        """Can write and read back values."""
        mem = Memory()
        mem.write(0x300, 42)
        assert mem.read(0x300) == 42

    def test_write_truncates_to_byte(self):
        """Values are stored as bytes."""
        mem = Memory()
        mem.write(0x300, 0x1AB)
        assert mem.read(0x300) == 0xAB

    def test_bounds_check(self):
        """Out of range access raises BoundsError."""
        mem = Memory()
        with pytest.raises(BoundsError):
            mem.read(4096)
        with pytest.raises(BoundsError):
            mem.read(-1)
        with pytest.raises(BoundsError):
            mem.write(4096, 0)

    def test_read_word_big_endian(self):
        """Words are read most-significant byte first."""
        mem = Memory()
        mem.write_block(0x200, [0xA2, 0x2A])
        assert mem.read_word(0x200) == 0xA22A

    def test_read_word_last_byte(self):
        """A word cannot start at the last address."""
        mem = Memory()
        assert mem.read_word(4094) == 0
        with pytest.raises(BoundsError):
            mem.read_word(4095)

    def test_write_block_is_all_or_nothing(self):
        """A block that overruns memory writes nothing."""
        mem = Memory()
        with pytest.raises(BoundsError):
            mem.write_block(4094, [1, 2, 3])
        assert mem.read(4094) == 0
        assert mem.read(4095) == 0

    def test_read_block(self):
        mem = Memory()
        mem.write_block(0x10, [1, 2, 3])
        assert mem.read_block(0x10, 3) == b"\x01\x02\x03"
        with pytest.raises(BoundsError):
            mem.read_block(4090, 10)

    def test_dump(self):
        """Dump emits paired hex bytes per line."""
        mem = Memory(size=6)
        mem.write_block(0, [0x00, 0xE0, 0xA2, 0x2A])
        assert mem.dump() == "00e0\na22a\n0000"

    def test_snapshot(self):
        """Snapshot returns an independent copy."""
        mem = Memory(size=4)
        mem.write(0, 1)
        snap = mem.snapshot()
        mem.write(0, 2)
        assert snap[0] == 1

    def test_clear(self):
        mem = Memory()
        mem.write(0x200, 9)
        mem.clear()
        assert mem.read(0x200) == 0
