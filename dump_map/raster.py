# dump_map/raster.py
from __future__ import annotations

"""
Raster builder: bytes in, rows of RGB pixels out, one forward pass.

Exports:
  build_image(source, sink, params, *, progress=None, text=None) -> ScanReport
  write_png(source, stream, params, *, progress=None) -> ScanReport
  render_row(data, count, row, palette, params, state) -> int
  render_array(data, params) -> uint8 [H, W, 3]
  render_image(data, params) -> PIL.Image.Image

Row layout (bpp = palette bytes per pixel):
  | width*zoom*bpp bytes shown | (skip-1)*width*zoom*bpp bytes discarded |
Pixel x averages the zoom windows starting at x*zoom*bpp. A pixel whose first
window is incomplete is black, as is everything to its right.
"""

import io
from typing import BinaryIO, Dict, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .colour_map import mask_low_bit
from .constants import PNG_TITLE, PNG_TITLE_KEY
from .core_types import ProgressCallback, ScanParams, ScanReport, ScanState, U8Image, U8Row
from .errors import AllocationFailure, DumpMapError, WriteFailure
from .palette_data import Palette, get_palette
from .png_sink import ArrayRowSink, PngRowSink, RowSink


# Buffers and input


def _allocate_buffers(params: ScanParams) -> Tuple[bytearray, NDArray[np.uint8], U8Row]:
    """(raw input buffer, uint8 view of it, zeroed (W, 3) row)."""
    try:
        raw = bytearray(params.row_bytes)
    except MemoryError as exc:
        raise AllocationFailure(f"input buffer of {params.row_bytes:,} bytes") from exc
    try:
        row = np.zeros((params.width, 3), dtype=np.uint8)
    except MemoryError as exc:
        raise AllocationFailure(f"row buffer for width {params.width:,}") from exc
    return raw, np.frombuffer(raw, dtype=np.uint8), row


def _read_row(source: BinaryIO, buf: bytearray) -> int:
    """Fill buf from source until full or end of stream. Returns bytes read."""
    view = memoryview(buf)
    readinto = getattr(source, "readinto", None)
    total = 0
    while total < len(buf):
        if readinto is not None:
            got = readinto(view[total:]) or 0
        else:
            chunk = source.read(len(buf) - total)
            got = len(chunk)
            view[total : total + got] = chunk
        if got == 0:
            break
        total += got
    return total


# Row rendering


def render_row(
    data: NDArray[np.uint8],
    count: int,
    row: U8Row,
    palette: Palette,
    params: ScanParams,
    state: ScanState,
) -> int:
    """
    Render one row of pixels into `row` (overwritten in place).

    Args:
      data   : uint8 input buffer for this row
      count  : bytes actually read into data
      row    : uint8 [W, 3] destination
      palette: mapper to apply
      params : scan parameters
      state  : carries the previous raw byte across rows; updated here
    Returns:
      number of non-black-filled pixels
    """
    row.fill(0)
    bpp = palette.bytes_per_pixel
    zoom = params.zoom
    usable = min(int(count), params.pixel_bytes)
    if usable < bpp:
        return 0

    pixels = min(params.width, (usable - bpp) // (bpp * zoom) + 1)
    n_windows = min(pixels * zoom, usable // bpp)
    windows = data[: n_windows * bpp].reshape(n_windows, bpp)

    previous = np.empty(n_windows, dtype=np.uint8)
    previous[0] = state.last
    previous[1:] = windows[:-1, -1]
    rgb = palette.map(windows, previous)
    state.last = int(windows[-1, -1])
    state.bytes_rendered += n_windows * bpp

    if zoom > 1:
        # windows past the end of data contribute (0, 0, 0)
        sums = np.zeros((pixels * zoom, 3), dtype=np.int64)
        sums[:n_windows] = rgb
        rgb = (sums.reshape(pixels, zoom, 3).sum(axis=1) // zoom).astype(np.uint8)

    if params.mask:
        rgb = mask_low_bit(rgb)

    row[:pixels] = rgb
    return pixels


# Scan


def build_image(
    source: BinaryIO,
    sink: RowSink,
    params: ScanParams,
    *,
    progress: Optional[ProgressCallback] = None,
    text: Optional[Dict[str, str]] = None,
) -> ScanReport:
    """
    Read params.height rows from source and hand each to sink.

    source must already be positioned at params.seek. The sink's encoder state
    is released on every path; the underlying streams stay open for the caller.

    Raises:
      InvalidPalette, AllocationFailure, EncoderInitFailure, WriteFailure
    """
    palette = get_palette(params.palette)
    state = ScanState()
    meta = {PNG_TITLE_KEY: PNG_TITLE} if text is None else dict(text)

    try:
        raw, data, row = _allocate_buffers(params)
        sink.start(params.width, params.height, meta)
        for y in range(params.height):
            count = _read_row(source, raw)
            state.bytes_read += count
            render_row(data, count, row, palette, params, state)
            try:
                sink.write_row(row)
            except DumpMapError:
                raise
            except (OSError, ValueError) as exc:
                raise WriteFailure(f"row {y}: {exc}") from exc
            state.rows_written += 1
            if progress is not None:
                progress(y + 1, params.height)
        sink.finish()
    finally:
        sink.close()

    return ScanReport(
        width=params.width,
        height=params.height,
        palette=palette.name,
        rows_written=state.rows_written,
        bytes_read=state.bytes_read,
        bytes_rendered=state.bytes_rendered,
        bytes_written=sink.bytes_written,
    )


def write_png(
    source: BinaryIO,
    stream: BinaryIO,
    params: ScanParams,
    *,
    progress: Optional[ProgressCallback] = None,
) -> ScanReport:
    """build_image into a streaming PNG on `stream`."""
    return build_image(source, PngRowSink(stream), params, progress=progress)


def render_array(data: bytes, params: ScanParams) -> U8Image:
    """Render in-memory bytes (from params.seek on) to a uint8 (H, W, 3) array."""
    sink = ArrayRowSink()
    build_image(io.BytesIO(bytes(data)[params.seek :]), sink, params)
    if sink.array is None:
        raise WriteFailure("array sink produced no image")
    return sink.array


def render_image(data: bytes, params: ScanParams) -> Image.Image:
    """render_array as a Pillow RGB image."""
    sink = ArrayRowSink()
    build_image(io.BytesIO(bytes(data)[params.seek :]), sink, params)
    return sink.to_image()


__all__ = [
    "build_image",
    "write_png",
    "render_row",
    "render_array",
    "render_image",
]
