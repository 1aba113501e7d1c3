# dump_map/byte_order.py
from __future__ import annotations

"""
Explicit integer assembly for multi-byte windows.

Exports:
  assemble_uint(windows, byteorder) -> uint64 [N]
  most_significant_byte(windows, byteorder) -> uint8 [N]
"""

from typing import Literal

import numpy as np
from numpy.typing import NDArray

from .core_types import ByteWindows

ByteOrder = Literal["little", "big"]


def assemble_uint(windows: ByteWindows, byteorder: ByteOrder) -> NDArray[np.uint64]:
    """
    Combine each (N, k) row of bytes into one unsigned integer.

    Args:
      windows  : uint8 [N, k], k in 1..8
      byteorder: "little" (first byte least significant) or "big"
    Returns:
      uint64 [N]
    """
    if byteorder not in ("little", "big"):
        raise ValueError(f"byteorder must be 'little' or 'big', got {byteorder!r}")
    win = np.asarray(windows, dtype=np.uint8)
    if win.ndim != 2 or not 1 <= win.shape[1] <= 8:
        raise ValueError(f"expected (N, 1..8) byte windows, got shape {win.shape}")
    width = win.shape[1]
    shifts = np.arange(width, dtype=np.uint64) * np.uint64(8)
    if byteorder == "big":
        shifts = shifts[::-1]
    return np.bitwise_or.reduce(win.astype(np.uint64) << shifts, axis=1)


def most_significant_byte(windows: ByteWindows, byteorder: ByteOrder) -> NDArray[np.uint8]:
    """Top byte of the integer each window encodes."""
    values = assemble_uint(windows, byteorder)
    shift = np.uint64(8 * (np.asarray(windows).shape[1] - 1))
    return (values >> shift).astype(np.uint8)


__all__ = ["ByteOrder", "assemble_uint", "most_significant_byte"]
