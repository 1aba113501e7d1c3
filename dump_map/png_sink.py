# dump_map/png_sink.py
from __future__ import annotations

"""
Row sinks: where the raster builder sends finished rows.

Exports:
  RowSink       # base: start(width, height, text) / write_row(row) / finish() / close()
  PngRowSink    # streams an 8-bit RGB PNG to a binary stream, one forward pass
  ArrayRowSink  # collects rows into a uint8 (H, W, 3) array (Pillow image on demand)

Notes:
  PngRowSink never seeks and never holds more than one row plus the pending
  compressed bytes, so it works on pipes and arbitrarily tall images.
"""

import struct
import zlib
from typing import BinaryIO, Dict, Optional

import numpy as np
from PIL import Image

from .constants import (
    PNG_COMPRESS_LEVEL,
    PNG_IDAT_CHUNK_BYTES,
    PNG_MAX_DIMENSION,
    PNG_SIGNATURE,
)
from .core_types import U8Image, U8Row
from .errors import AllocationFailure, EncoderInitFailure, WriteFailure

_COLOUR_TYPE_RGB = 2
_FILTER_NONE = b"\x00"


class RowSink:
    """Accepts a declared size, then exactly `height` rows, top to bottom."""

    width: int = 0
    height: int = 0
    rows_written: int = 0
    bytes_written: int = 0  # encoded output bytes, 0 for in-memory sinks

    def start(self, width: int, height: int, text: Optional[Dict[str, str]] = None) -> None:
        raise NotImplementedError

    def write_row(self, row: U8Row) -> None:
        raise NotImplementedError

    def finish(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release encoder state. Safe to call more than once."""

    def __enter__(self) -> "RowSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_dimensions(self, width: int, height: int) -> None:
        if not (1 <= width <= PNG_MAX_DIMENSION and 1 <= height <= PNG_MAX_DIMENSION):
            raise EncoderInitFailure(f"invalid image size {width}x{height}")

    def _check_row(self, row: U8Row) -> np.ndarray:
        if self.rows_written >= self.height:
            raise WriteFailure(f"row {self.rows_written} exceeds declared height {self.height}")
        arr = np.asarray(row)
        if arr.dtype != np.uint8 or arr.shape != (self.width, 3):
            raise WriteFailure(
                f"expected uint8 ({self.width}, 3) row, got {arr.dtype} {arr.shape}"
            )
        return arr


def _text_chunk_payload(keyword: str, text: str) -> bytes:
    """tEXt payload: latin-1 keyword (1-79 chars), NUL, latin-1 text."""
    if not 1 <= len(keyword) <= 79:
        raise EncoderInitFailure(f"PNG text keyword must be 1-79 chars: {keyword!r}")
    try:
        return keyword.encode("latin-1") + b"\x00" + text.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise EncoderInitFailure(f"PNG text must be latin-1: {exc}") from exc


class PngRowSink(RowSink):
    """
    Streaming PNG encoder (8-bit RGB, no interlace, filter type 0 on every row).

    The caller owns the stream; close() drops encoder state but leaves the
    stream open.
    """

    def __init__(
        self,
        stream: BinaryIO,
        compress_level: int = PNG_COMPRESS_LEVEL,
        chunk_bytes: int = PNG_IDAT_CHUNK_BYTES,
    ) -> None:
        self._stream = stream
        self._compress_level = int(compress_level)
        self._chunk_bytes = max(1, int(chunk_bytes))
        self._compressor = None
        self._pending = bytearray()
        self._finished = False
        self.width = 0
        self.height = 0
        self.rows_written = 0
        self.bytes_written = 0

    def _write_chunk(self, kind: bytes, data: bytes) -> None:
        crc = zlib.crc32(data, zlib.crc32(kind)) & 0xFFFFFFFF
        blob = struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)
        self._stream.write(blob)
        self.bytes_written += len(blob)

    def _flush_idat(self, final: bool = False) -> None:
        """Write pending compressed data as IDAT chunks of at most chunk_bytes."""
        size = self._chunk_bytes
        while len(self._pending) >= size or (final and self._pending):
            self._write_chunk(b"IDAT", bytes(self._pending[:size]))
            del self._pending[:size]

    def start(self, width: int, height: int, text: Optional[Dict[str, str]] = None) -> None:
        if self._compressor is not None or self._finished:
            raise EncoderInitFailure("PNG sink already started")
        self._check_dimensions(width, height)
        payloads = [_text_chunk_payload(k, v) for k, v in (text or {}).items()]
        try:
            compressor = zlib.compressobj(self._compress_level)
        except (ValueError, zlib.error, MemoryError) as exc:
            raise EncoderInitFailure(f"could not create compressor: {exc}") from exc

        ihdr = struct.pack(
            ">IIBBBBB", width, height, 8, _COLOUR_TYPE_RGB, 0, 0, 0
        )
        try:
            self._stream.write(PNG_SIGNATURE)
            self.bytes_written += len(PNG_SIGNATURE)
            self._write_chunk(b"IHDR", ihdr)
            for payload in payloads:
                self._write_chunk(b"tEXt", payload)
        except (OSError, ValueError) as exc:
            raise EncoderInitFailure(f"could not write PNG header: {exc}") from exc

        self._compressor = compressor
        self.width, self.height = int(width), int(height)

    def write_row(self, row: U8Row) -> None:
        if self._compressor is None:
            raise WriteFailure("PNG sink not started")
        arr = self._check_row(row)
        try:
            self._pending += self._compressor.compress(_FILTER_NONE + arr.tobytes())
            self._flush_idat()
        except (OSError, ValueError, zlib.error) as exc:
            raise WriteFailure(f"row {self.rows_written}: {exc}") from exc
        self.rows_written += 1

    def finish(self) -> None:
        if self._compressor is None:
            raise WriteFailure("PNG sink not started")
        if self.rows_written != self.height:
            raise WriteFailure(
                f"wrote {self.rows_written} rows, header declares {self.height}"
            )
        try:
            self._pending += self._compressor.flush()
            self._flush_idat(final=True)
            self._write_chunk(b"IEND", b"")
            self._stream.flush()
        except (OSError, ValueError, zlib.error) as exc:
            raise WriteFailure(f"could not finish PNG: {exc}") from exc
        self._compressor = None
        self._finished = True

    def close(self) -> None:
        self._compressor = None
        self._pending = bytearray()


class ArrayRowSink(RowSink):
    """Keeps every row in memory. Meant for tests and small in-process renders."""

    def __init__(self) -> None:
        self.array: Optional[U8Image] = None
        self.text: Dict[str, str] = {}
        self.width = 0
        self.height = 0
        self.rows_written = 0
        self.finished = False

    def start(self, width: int, height: int, text: Optional[Dict[str, str]] = None) -> None:
        self._check_dimensions(width, height)
        try:
            self.array = np.zeros((height, width, 3), dtype=np.uint8)
        except MemoryError as exc:
            raise AllocationFailure(f"cannot hold {width}x{height} image") from exc
        self.width, self.height = int(width), int(height)
        self.text = dict(text or {})

    def write_row(self, row: U8Row) -> None:
        if self.array is None:
            raise WriteFailure("array sink not started")
        self.array[self.rows_written] = self._check_row(row)
        self.rows_written += 1

    def finish(self) -> None:
        if self.rows_written != self.height:
            raise WriteFailure(
                f"wrote {self.rows_written} rows, expected {self.height}"
            )
        self.finished = True

    def to_image(self) -> Image.Image:
        """Pillow RGB image of the collected rows, with text metadata in .info."""
        if self.array is None:
            raise WriteFailure("array sink not started")
        img = Image.fromarray(self.array)
        img.info.update(self.text)
        return img


__all__ = ["RowSink", "PngRowSink", "ArrayRowSink"]
