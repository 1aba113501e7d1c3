# dump_map/core_types.py
from __future__ import annotations

"""
Core type aliases, scan value objects, and callable signatures.
"""

from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]

ByteWindows = NDArray[np.uint8]  # (N, bytes_per_pixel)
PrevBytes = NDArray[np.uint8]  # (N,)
U8Pixels = NDArray[np.uint8]  # (N, 3)
U8Row = NDArray[np.uint8]  # (W, 3)
U8Image = NDArray[np.uint8]  # (H, W, 3)

# Callable signatures

PaletteMapper = Callable[[ByteWindows, PrevBytes], U8Pixels]
ProgressCallback = Callable[[int, int], None]  # (rows_done, rows_total)

# Value objects


@dataclass(frozen=True)
class ScanParams:
    """
    Validated, immutable parameters for one scan.

    width/height: output raster size in pixels
    palette     : palette name (see palette_data.PALETTES)
    skip        : row stride multiplier; 3 shows 1 out of 3 rows of data
    zoom        : sample windows averaged into one pixel
    seek        : byte offset the caller positioned the source at
    mask        : clear the low bit of every channel
    """

    width: int
    height: int
    palette: str = "x86"
    skip: int = 1
    zoom: int = 1
    seek: int = 0
    mask: bool = True

    def __post_init__(self) -> None:
        # deferred import: palette_data imports this module
        from .palette_data import get_palette

        for name in ("width", "height", "skip", "zoom"):
            value = getattr(self, name)
            if int(value) < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")
        if int(self.seek) < 0:
            raise ValueError(f"seek must be >= 0, got {self.seek}")
        get_palette(self.palette)

    @property
    def bytes_per_pixel(self) -> int:
        from .palette_data import get_palette

        return get_palette(self.palette).bytes_per_pixel

    @property
    def pixel_bytes(self) -> int:
        """Bytes that carry pixels in one row: width * zoom * bpp."""
        return self.width * self.zoom * self.bytes_per_pixel

    @property
    def row_bytes(self) -> int:
        """Bytes consumed per output row: width * bpp * skip * zoom."""
        return self.pixel_bytes * self.skip


@dataclass
class ScanState:
    """Mutable per-scan state owned by the raster builder."""

    last: int = 0  # previous raw byte, read by the dvi palette
    rows_written: int = 0
    bytes_read: int = 0
    bytes_rendered: int = 0


@dataclass(frozen=True)
class ScanReport:
    """Summary of a completed scan."""

    width: int
    height: int
    palette: str
    rows_written: int
    bytes_read: int
    bytes_rendered: int
    bytes_written: int = 0


__all__ = [
    "RGBTuple",
    "ByteWindows",
    "PrevBytes",
    "U8Pixels",
    "U8Row",
    "U8Image",
    "PaletteMapper",
    "ProgressCallback",
    "ScanParams",
    "ScanState",
    "ScanReport",
]
