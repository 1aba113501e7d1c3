# dump_map/colour_map.py
from __future__ import annotations

"""
Byte-window to RGB mappers. All vectorised over N windows.

Every mapper has the signature
  mapper(windows: uint8 [N, bpp], previous: uint8 [N]) -> uint8 [N, 3]
where previous[i] is the raw byte processed just before windows[i]. Only
map_dvi reads it.

Exports:
  map_gray, map_gray16b, map_gray16l, map_gray32b, map_gray32l
  map_hues, map_hues6, map_fhues
  map_color, map_color16, map_color32
  map_rgb, map_x86, map_dvi
  mask_low_bit(rgb, mask_byte=BYTE_MASK)
"""

import numpy as np
from numpy.typing import NDArray

from .byte_order import assemble_uint, most_significant_byte
from .constants import BINARY_VALUES, BYTE_MASK, ENGLISH_CHARS, X86_OPCODES
from .core_types import ByteWindows, PrevBytes, U8Pixels


def _grey(values: NDArray[np.integer]) -> U8Pixels:
    """R=G=B=value."""
    v = np.asarray(values, dtype=np.uint8)
    return np.repeat(v[:, None], 3, axis=1)


def _lut(table: dict) -> NDArray[np.uint8]:
    out = np.zeros(256, dtype=np.uint8)
    for byte, level in table.items():
        out[byte] = level
    return out


_X86_RED = _lut(X86_OPCODES)
_X86_GREEN = _lut(ENGLISH_CHARS)
_X86_BLUE = _lut(BINARY_VALUES)


# Grayscale


def map_gray(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    return _grey(windows[:, 0])


def map_gray16b(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    return _grey(most_significant_byte(windows, "big"))


def map_gray16l(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    return _grey(most_significant_byte(windows, "little"))


def map_gray32b(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    return _grey(most_significant_byte(windows, "big"))


def map_gray32l(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    return _grey(most_significant_byte(windows, "little"))


# Hue bands


def map_hues(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """
    value*3 spread over three single-channel bands (R, G, B).
    Each pixel lights one channel, so averaged sums stay meaningful under zoom.
    """
    v = windows[:, 0].astype(np.int32) * 3
    band = np.minimum(v // 256, 2)
    level = (v % 256).astype(np.uint8)
    out = np.zeros((v.shape[0], 3), dtype=np.uint8)
    out[np.arange(v.shape[0]), band] = level
    return out


# (R, G, B) channel selection per band for hues6; 1 copies the ramp level.
_HUES6_BANDS = np.array(
    [
        [1, 0, 0],
        [0, 1, 0],
        [0, 0, 1],
        [0, 1, 1],
        [1, 0, 1],
        [1, 1, 0],
    ],
    dtype=np.uint8,
)

# fhues: -1 copies the ramp level, 255 is full, 0 is off.
_FHUES_BANDS = np.array(
    [
        [-1, 0, 0],
        [255, -1, -1],
        [0, -1, 0],
        [-1, 255, -1],
        [0, 0, -1],
        [-1, -1, 255],
    ],
    dtype=np.int16,
)


def map_hues6(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """value*6 cycling R, G, B, G+B, R+B, R+G."""
    v = windows[:, 0].astype(np.int32) * 6
    band = v // 256
    level = (v % 256).astype(np.uint8)
    return _HUES6_BANDS[band] * level[:, None]


def map_fhues(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """value*6 over a full-saturation hue wheel."""
    v = windows[:, 0].astype(np.int32) * 6
    band = v // 256
    level = (v % 256).astype(np.int16)
    sel = _FHUES_BANDS[band]
    out = np.where(sel < 0, level[:, None], sel)
    return out.astype(np.uint8)


# Bit-sliced colour


def map_color(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    b = windows[:, 0].astype(np.uint8)
    return np.stack([b & 0xE0, (b & 0x1C) << 3, (b & 0x03) << 6], axis=1).astype(
        np.uint8
    )


def map_color16(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """16-bit little-endian value sliced 6/4/5 bits into R/G/B."""
    v = assemble_uint(windows, "little")
    r = (v & np.uint64(0xFC00)) >> np.uint64(8)
    g = (v & np.uint64(0x03C0)) >> np.uint64(2)
    b = (v & np.uint64(0x001F)) << np.uint64(3)
    return np.stack([r, g, b], axis=1).astype(np.uint8)


def map_color32(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """32-bit little-endian value: top byte to R, two middle slices to G and B."""
    v = assemble_uint(windows, "little")
    r = (v & np.uint64(0xFF000000)) >> np.uint64(24)
    g = (v & np.uint64(0x001FE000)) >> np.uint64(13)
    b = (v & np.uint64(0x000001FE)) >> np.uint64(1)
    return np.stack([r, g, b], axis=1).astype(np.uint8)


def map_rgb(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    return np.ascontiguousarray(windows[:, :3], dtype=np.uint8)


# Highlighting


def map_x86(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """
    Grayscale with nine highlighted byte values:
      red   = x86 movl/call/testl opcodes
      green = 'e', 't', 'a'
      blue  = 0x01, 0x02, 0x03
    """
    b = windows[:, 0].astype(np.uint8)
    out = np.stack([_X86_RED[b], _X86_GREEN[b], _X86_BLUE[b]], axis=1)
    plain = ~out.any(axis=1)
    out[plain] = _grey(b[plain])
    return out


def map_dvi(windows: ByteWindows, previous: PrevBytes) -> U8Pixels:
    """R = |b - prev| (differential), G = b (value), B = (b + prev) / 2 (integral)."""
    b = windows[:, 0].astype(np.int16)
    p = np.asarray(previous, dtype=np.int16)
    return np.stack([np.abs(b - p), b, (b + p) // 2], axis=1).astype(np.uint8)


# Masking


def mask_low_bit(rgb: np.ndarray, mask_byte: int = BYTE_MASK) -> np.ndarray:
    """AND every channel with mask_byte (default clears bit 0)."""
    return np.bitwise_and(rgb, np.uint8(mask_byte), dtype=np.uint8)


__all__ = [
    "map_gray",
    "map_gray16b",
    "map_gray16l",
    "map_gray32b",
    "map_gray32l",
    "map_hues",
    "map_hues6",
    "map_fhues",
    "map_color",
    "map_color16",
    "map_color32",
    "map_rgb",
    "map_x86",
    "map_dvi",
    "mask_low_bit",
]
