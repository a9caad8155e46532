"""CHIP-8 framebuffer model."""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import Iterable, List, Tuple

Snapshot = Tuple[Tuple[int, ...], ...]


@dataclass
class Chip8Display:
    WIDTH: int = 64
    HEIGHT: int = 32
    SPRITE_WIDTH: int = 8

    foreground: int = 0xFFFFFF
    background: int = 0x000000
    pixels: bytearray = field(default_factory=lambda: bytearray(64 * 32))

    def __post_init__(self) -> None:
        if len(self.pixels) != self.WIDTH * self.HEIGHT:
            raise ValueError("framebuffer must be 64x32 pixels")
        self._lock = threading.Lock()
        self._generation = 0

    # ------------------------------------------------------------------
    # Mutation (engine side)
    # ------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self.pixels[:] = bytes(len(self.pixels))
            self._generation += 1

    def draw_sprite(self, x: int, y: int, sprite: Iterable[int]) -> bool:
        """XOR ``sprite`` onto the screen at (x, y).

        Each sprite byte is one row of eight pixels, most significant bit on
        the left. Coordinates wrap around both edges. Returns True when any
        previously lit pixel was switched off.
        """

        collided = False
        with self._lock:
            for row, bits in enumerate(sprite):
                py = (y + row) % self.HEIGHT
                base = py * self.WIDTH
                for col in range(self.SPRITE_WIDTH):
                    if not (bits >> (7 - col)) & 0x01:
                        continue
                    index = base + (x + col) % self.WIDTH
                    if self.pixels[index]:
                        collided = True
                    self.pixels[index] ^= 0x01
            self._generation += 1
        return collided

    # ------------------------------------------------------------------
    # Read access (presentation side)
    # ------------------------------------------------------------------
    @property
    def generation(self) -> int:
        """Counter bumped on every mutation, used to skip redundant redraws."""

        return self._generation

    def get_pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.WIDTH and 0 <= y < self.HEIGHT):
            raise ValueError("pixel coordinate out of range")
        return self.pixels[y * self.WIDTH + x]

    def snapshot(self) -> Snapshot:
        with self._lock:
            data = bytes(self.pixels)
        return tuple(
            tuple(data[row * self.WIDTH:(row + 1) * self.WIDTH]) for row in range(self.HEIGHT)
        )

    def render_text(self, on: str = "#", off: str = ".") -> str:
        return "\n".join("".join(on if pixel else off for pixel in row) for row in self.snapshot())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_pixels(self) -> List[List[int]]:
        colors = (self.background, self.foreground)
        return [[colors[pixel] for pixel in row] for row in self.snapshot()]

    def render_pygame_surface(self, scaling: int = 1):
        """Render the framebuffer into a pygame Surface.

        Parameters
        ----------
        scaling:
            Integer scale factor applied to both axes.

        Returns
        -------
        pygame.Surface
            RGB surface representing the current screen.

        Raises
        ------
        RuntimeError
            If pygame is not available.
        """

        if scaling <= 0:
            raise ValueError("scaling factor must be positive")

        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for render_pygame_surface") from exc

        surface = pygame.Surface((self.WIDTH * scaling, self.HEIGHT * scaling))
        surface.fill(self.background)
        for y, row in enumerate(self.snapshot()):
            for x, pixel in enumerate(row):
                if pixel:
                    surface.fill(self.foreground, (x * scaling, y * scaling, scaling, scaling))
        return surface

    def reset(self) -> None:
        self.clear()
