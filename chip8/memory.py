"""Memory model for the CHIP-8 interpreter."""

from typing import Iterable
from .errors import BoundsError

MEMORY_SIZE = 4096


class Memory:
    """Flat byte-addressable memory with bounds checking."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)

    def check_range(self, addr: int, length: int = 1) -> None:
        """Check that ``length`` bytes starting at ``addr`` are addressable."""
        if addr < 0 or addr + length > self.size:
            raise BoundsError(
                f"Memory access out of range: {addr:#05x}+{length}",
                addr=addr,
            )

    def read(self, addr: int) -> int:
        """Read a byte."""
        self.check_range(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write a byte, truncated to 8 bits."""
        self.check_range(addr)
        self._data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word."""
        self.check_range(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        self.check_range(addr, length)
        return bytes(self._data[addr:addr + length])

    def write_block(self, addr: int, data: Iterable[int]) -> None:
        """Write a sequence of bytes; nothing is written if it does not fit."""
        data = bytes(value & 0xFF for value in data)
        self.check_range(addr, len(data))
        self._data[addr:addr + len(data)] = data

    def dump(self, start: int = 0) -> str:
        """Return memory from ``start`` as lines of paired hex bytes."""
        lines = []
        for addr in range(start, self.size - 1, 2):
            lines.append(f"{self._data[addr]:02x}{self._data[addr + 1]:02x}")
        return "\n".join(lines)

    def snapshot(self) -> bytes:
        """Return a copy of the entire memory."""
        return bytes(self._data)

    def clear(self) -> None:
        self._data = bytearray(self.size)
