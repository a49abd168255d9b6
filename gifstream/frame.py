"""Palette-indexed frames and color table helpers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .errors import FrameError

Color = Union[Tuple[int, int, int], Tuple[int, int, int, int]]
ColorTable = Sequence[Color]

MAX_COLORS = 256
MAX_DIMENSION = 0xFFFF


class Disposal(enum.IntEnum):
    """How a frame's area is treated before the next frame is drawn."""

    UNSPECIFIED = 0
    NONE = 1
    BACKGROUND = 2
    PREVIOUS = 3


def validate_color(color: Color) -> Tuple[int, ...]:
    if len(color) not in (3, 4):
        raise ValueError(f"color must be an RGB or RGBA tuple, got {color!r}")
    values = tuple(int(c) for c in color)
    if min(values) < 0 or max(values) > 255:
        raise ValueError(f"color values must be in range 0..255, got {color!r}")
    return values


def validate_color_table(table: ColorTable) -> Tuple[Tuple[int, ...], ...]:
    """Return ``table`` as a tuple of int tuples, raising ValueError if invalid."""
    if len(table) > MAX_COLORS:
        raise ValueError(f"color table cannot exceed {MAX_COLORS} colors, got {len(table)}")
    return tuple(validate_color(c) for c in table)


def table_size_bits(n_colors: int) -> int:
    """Size field for a table of ``n_colors``: the table holds 2 ** (bits + 1) entries."""
    bits = 0
    while (2 << bits) < n_colors:
        bits += 1
    return bits


def encode_color_table(table: ColorTable) -> bytes:
    """RGB triples padded with black up to the next power of two."""
    size = 2 << table_size_bits(len(table))
    out = bytearray()
    for color in table:
        out.extend(color[:3])
    out.extend(b"\x00" * (3 * (size - len(table))))
    return bytes(out)


def transparent_index(table: ColorTable) -> Optional[int]:
    for i, color in enumerate(table):
        if len(color) == 4 and color[3] == 0:
            return i
    return None


@dataclass(frozen=True, eq=False)
class Frame:
    """Single palette-indexed frame.

    Attributes:
        pixels: Palette indexes, shape (height, width).
        palette: Local color table, or None to use the global one.
        delay: Delay in centiseconds (1/100 sec).
        disposal: Disposal method applied after the frame is shown.
        left: Horizontal offset on the canvas.
        top: Vertical offset on the canvas.
    """

    pixels: np.ndarray
    palette: Optional[ColorTable] = None
    delay: int = 0
    disposal: Disposal = Disposal.UNSPECIFIED
    left: int = 0
    top: int = 0
    _max_index: int = field(init=False, repr=False, default=0)

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 2 or pixels.size == 0:
            raise FrameError(f"pixels must be a non-empty 2D array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            if pixels.min() < 0 or pixels.max() > 255:
                raise FrameError("pixel indexes must be in range 0..255")
            pixels = pixels.astype(np.uint8)
        object.__setattr__(self, "pixels", pixels)
        object.__setattr__(self, "_max_index", int(pixels.max()))

        if not 0 <= self.delay <= 0xFFFF:
            raise FrameError(f"delay must be in range 0..65535, got {self.delay}")
        try:
            object.__setattr__(self, "disposal", Disposal(self.disposal))
        except ValueError:
            raise FrameError(f"unknown disposal method: {self.disposal!r}") from None
        if self.left < 0 or self.top < 0:
            raise FrameError("frame offsets must be >= 0")

        if self.palette is not None:
            if len(self.palette) == 0:
                raise FrameError("local palette must not be empty")
            try:
                palette = validate_color_table(self.palette)
            except ValueError as exc:
                raise FrameError(str(exc)) from exc
            if self._max_index >= len(palette):
                raise FrameError(f"palette index out of range: {self._max_index}")
            object.__setattr__(self, "palette", palette)

    @classmethod
    def from_flat(
        cls,
        width: int,
        height: int,
        pixels: Sequence[int],
        **kwargs,
    ) -> "Frame":
        """Build a frame from a flat row-major sequence of indexes."""
        if width <= 0 or height <= 0:
            raise FrameError("width and height must be > 0")
        if len(pixels) != width * height:
            raise FrameError("pixels length must be width * height")
        return cls(np.asarray(pixels).reshape(height, width), **kwargs)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.left + self.width, self.top + self.height)

    @property
    def max_index(self) -> int:
        """Largest palette index used by the bitmap."""
        return self._max_index
