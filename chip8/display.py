"""Monochrome framebuffer for the CHIP-8 interpreter."""

WIDTH = 64
HEIGHT = 32
SPRITE_WIDTH = 8

COLLISION_ANY = "any"
COLLISION_LAST_BIT = "last_bit"
COLLISION_MODES = {COLLISION_ANY, COLLISION_LAST_BIT}


class Framebuffer:
    """64x32 grid of on/off cells stored row-major.

    Sprites are XOR-blitted. Collision reporting comes in two flavours:

    - ``"any"``: the flag is set when any lit cell is turned off during the
      whole blit. This is the standard instruction-set behaviour.
    - ``"last_bit"``: the flag is re-evaluated for every bit and the last
      evaluated bit wins, as some early interpreters did. Only useful for
      bit-exact compatibility with programs that depend on it.
    """

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        self.width = width
        self.height = height
        self._cells: list[int] = [0] * (width * height)

    @property
    def cells(self) -> tuple[int, ...]:
        """Read-only view of the cells, row-major."""
        return tuple(self._cells)

    def clear(self) -> None:
        """Turn every cell off."""
        for i in range(len(self._cells)):
            self._cells[i] = 0

    def pixel(self, x: int, y: int) -> int:
        return self._cells[y * self.width + x]

    def draw_sprite(self, x: int, y: int, sprite: bytes, collision_mode: str = COLLISION_ANY) -> bool:
        """XOR ``sprite`` rows onto the screen with its top-left corner at (x, y).

        The start position wraps around the screen; cells past the right or
        bottom edge are clipped. Returns the collision flag.
        """
        if collision_mode not in COLLISION_MODES:
            raise ValueError(f"Unknown collision mode: {collision_mode}")

        x %= self.width
        y %= self.height
        collided = False
        last_bit = False

        for row, line in enumerate(sprite):
            py = y + row
            if py >= self.height:
                break
            for bit in range(SPRITE_WIDTH):
                px = x + bit
                if px >= self.width:
                    break
                value = (line >> (7 - bit)) & 1
                pos = py * self.width + px
                hit = bool(self._cells[pos] and value)
                collided = collided or hit
                last_bit = hit
                self._cells[pos] ^= value

        if collision_mode == COLLISION_LAST_BIT:
            return last_bit
        return collided

    def rows(self) -> list[list[int]]:
        """Return the cells as a list of rows."""
        return [self._cells[y * self.width:(y + 1) * self.width] for y in range(self.height)]

    def render_text(self, on: str = "#", off: str = ".") -> list[str]:
        """Render each row as a string, one character per cell."""
        return ["".join(on if cell else off for cell in row) for row in self.rows()]
