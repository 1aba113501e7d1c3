# dump_map/palette_data.py
from __future__ import annotations

"""
Palette registry.

Exports:
  Palette                          # frozen (name, bytes_per_pixel, mapper, description)
  PALETTES: dict[str, Palette]     # in help-text order
  get_palette(name) -> Palette     # raises InvalidPalette
  palette_names() -> list[str]
  map_window(name, window, previous=0) -> RGBTuple
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Union

import numpy as np

from . import colour_map as cm
from .core_types import PaletteMapper, RGBTuple
from .errors import InvalidPalette


@dataclass(frozen=True)
class Palette:
    """A named byte-window to RGB strategy."""

    name: str
    bytes_per_pixel: int
    mapper: PaletteMapper
    description: str

    def map(self, windows: np.ndarray, previous: np.ndarray) -> np.ndarray:
        return self.mapper(windows, previous)


_PALETTE_LIST: List[Palette] = [
    Palette("gray", 1, cm.map_gray, "grayscale, per byte"),
    Palette("gray16b", 2, cm.map_gray16b, "grayscale, per short (big-endian)"),
    Palette("gray16l", 2, cm.map_gray16l, "grayscale, per short (little-endian)"),
    Palette("gray32b", 4, cm.map_gray32b, "grayscale, per long (big-endian)"),
    Palette("gray32l", 4, cm.map_gray32l, "grayscale, per long (little-endian)"),
    Palette("hues", 1, cm.map_hues, "map to 3 hue ranges (rgb), per byte (zoom safe)"),
    Palette("hues6", 1, cm.map_hues6, "map to 6 hue ranges (rgbcmy), per byte"),
    Palette("fhues", 1, cm.map_fhues, "map to 3 full hue ranges (rgb), per byte (zoom safe)"),
    Palette("color", 1, cm.map_color, "full colorized scale, per byte"),
    Palette("color16", 2, cm.map_color16, "full colorized scale, per short (16-bit)"),
    Palette("color32", 4, cm.map_color32, "full colorized scale, per long (32-bit)"),
    Palette("rgb", 3, cm.map_rgb, "treat 3 sequential bytes as RGB"),
    Palette("dvi", 1, cm.map_dvi, "use RGB to convey differential, value, integral"),
    Palette("x86", 1, cm.map_x86, "grayscale with some (9) color indicators"),
]

PALETTES: Dict[str, Palette] = {p.name: p for p in _PALETTE_LIST}


def get_palette(name: str) -> Palette:
    """Look up a palette by name."""
    try:
        return PALETTES[name]
    except (KeyError, TypeError):
        raise InvalidPalette(str(name)) from None


def palette_names() -> List[str]:
    return list(PALETTES.keys())


def map_window(
    name: str, window: Union[bytes, Sequence[int]], previous: int = 0
) -> RGBTuple:
    """
    Map a single window of exactly bytes_per_pixel bytes to an RGB tuple.

    previous is the raw byte seen before this window (only dvi uses it).
    """
    palette = get_palette(name)
    raw = np.frombuffer(bytes(window), dtype=np.uint8)
    if raw.size != palette.bytes_per_pixel:
        raise ValueError(
            f"palette {name} needs {palette.bytes_per_pixel} bytes, got {raw.size}"
        )
    prev = np.array([previous], dtype=np.uint8)
    r, g, b = palette.map(raw.reshape(1, -1), prev)[0].tolist()
    return (int(r), int(g), int(b))


__all__ = ["Palette", "PALETTES", "get_palette", "palette_names", "map_window"]
