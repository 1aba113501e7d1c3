"""
PNG inspection helpers shared by tests.
"""

import io
import struct
import zlib
from typing import List, Tuple

import numpy as np
from PIL import Image


def decode_png(blob: bytes) -> np.ndarray:
    """Decode PNG bytes with Pillow into a uint8 (H, W, 3) array."""
    with Image.open(io.BytesIO(blob)) as img:
        assert img.mode == "RGB"
        return np.array(img, dtype=np.uint8)


def png_chunks(blob: bytes) -> List[Tuple[bytes, bytes, bool]]:
    """Split PNG bytes into (type, data, crc_ok) after the signature."""
    out = []
    offset = 8
    while offset + 8 <= len(blob):
        (length,) = struct.unpack(">I", blob[offset : offset + 4])
        kind = blob[offset + 4 : offset + 8]
        data = blob[offset + 8 : offset + 8 + length]
        (crc,) = struct.unpack(">I", blob[offset + 8 + length : offset + 12 + length])
        out.append((kind, data, crc == (zlib.crc32(kind + data) & 0xFFFFFFFF)))
        offset += 12 + length
    return out
