"""Program image loading for the CHIP-8 interpreter."""

import re
from typing import Sequence, Union
from .cpu import PROGRAM_START
from .errors import BoundsError, ImageFormatError
from .memory import Memory

FONT_START = 0x000

# Hex digit glyphs 0-F, 5 rows of 8 pixels each (high nibble used)
FONT: tuple[int, ...] = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)

ProgramImage = Union[bytes, bytearray, Sequence[int]]

_HEX_WORD_RE = re.compile(r"^(?:0[xX])?([0-9A-Fa-f]{4})$")


def words_from_bytes(data: bytes) -> list[int]:
    """Group a raw byte stream into big-endian 16-bit words.

    A trailing odd byte is padded with 0x00.
    """
    if len(data) % 2:
        data = bytes(data) + b"\x00"
    return [(data[i] << 8) | data[i + 1] for i in range(0, len(data), 2)]


def image_bytes(image: ProgramImage) -> bytes:
    """Normalise a program image to bytes.

    ``bytes``/``bytearray`` are taken as-is; any other sequence is treated as
    16-bit opcodes and split most-significant byte first.
    """
    if isinstance(image, (bytes, bytearray)):
        return bytes(image)
    out = bytearray()
    for pos, word in enumerate(image):
        if not 0 <= word <= 0xFFFF:
            raise ImageFormatError(f"Word {pos}: {word:#x} is not a 16-bit opcode")
        out.append((word >> 8) & 0xFF)
        out.append(word & 0xFF)
    return bytes(out)


def load_font(mem: Memory) -> None:
    mem.write_block(FONT_START, FONT)


def load_program(mem: Memory, image: ProgramImage, start_address: int = PROGRAM_START) -> int:
    """Write the glyph table and the program image into memory.

    Returns the number of program bytes written.
    """
    data = image_bytes(image)
    if start_address + len(data) > mem.size:
        raise BoundsError(
            f"Program of {len(data)} bytes does not fit at {start_address:#05x}",
            addr=start_address,
        )
    load_font(mem)
    mem.write_block(start_address, data)
    return len(data)


def parse_hex_image(text: str) -> list[int]:
    """Parse a textual image of hex opcodes.

    Words are separated by whitespace or commas, may carry a ``0x`` prefix and
    ``;`` starts a comment running to end of line.
    """
    words: list[int] = []
    for line_no, line in enumerate(text.split("\n"), 1):
        line = line.split(";", 1)[0]
        for token in line.replace(",", " ").split():
            match = _HEX_WORD_RE.match(token)
            if not match:
                raise ImageFormatError(f"Line {line_no}: invalid opcode {token!r}")
            words.append(int(match.group(1), 16))
    return words
