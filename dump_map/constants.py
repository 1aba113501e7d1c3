# dump_map/constants.py
"""
Defaults and tunables used across the project.

- CLI defaults (DEFAULT_*)
- Masking (BYTE_MASK)
- x86 palette highlight tables
- PNG encoder settings (PNG_*)
"""
from __future__ import annotations

from typing import Dict

# =========================
# CLI defaults
# =========================
DEFAULT_WIDTH: int = 1024
DEFAULT_HEIGHT_MAX: int = 1024 * 10
DEFAULT_PALETTE: str = "x86"
DEFAULT_OUTFILE: str = "dump2png.png"
DEFAULT_ZOOM: int = 1
DEFAULT_SKIP: int = 1
DEFAULT_SEEK: int = 0

# =========================
# Masking
# =========================
# Cleared bits cannot be recovered from the image. Lower this to mask more.
BYTE_MASK: int = 0xFE

# =========================
# x86 palette: byte -> channel intensity
# =========================
# red: common x86 instructions
X86_OPCODES: Dict[int, int] = {
    0x8B: 0xFF,  # movl
    0xE8: 0xCF,  # call
    0x85: 0xAF,  # testl
}
# green: common english chars
ENGLISH_CHARS: Dict[int, int] = {
    ord("e"): 0xFF,
    ord("t"): 0xCF,
    ord("a"): 0xAF,
}
# blue: small binary values
BINARY_VALUES: Dict[int, int] = {
    0x01: 0xFF,
    0x02: 0xCF,
    0x03: 0xAF,
}

# =========================
# PNG encoder
# =========================
PNG_SIGNATURE: bytes = b"\x89PNG\r\n\x1a\n"
PNG_TITLE_KEY: str = "Title"
PNG_TITLE: str = "dump2png"
PNG_COMPRESS_LEVEL: int = 6
PNG_IDAT_CHUNK_BYTES: int = 1 << 16  # flush compressed data at this size
PNG_MAX_DIMENSION: int = 0x7FFFFFFF

# =========================
# Progress
# =========================
PROGRESS_MIN_INTERVAL_S: float = 0.25

__all__ = [
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT_MAX",
    "DEFAULT_PALETTE",
    "DEFAULT_OUTFILE",
    "DEFAULT_ZOOM",
    "DEFAULT_SKIP",
    "DEFAULT_SEEK",
    "BYTE_MASK",
    "X86_OPCODES",
    "ENGLISH_CHARS",
    "BINARY_VALUES",
    "PNG_SIGNATURE",
    "PNG_TITLE_KEY",
    "PNG_TITLE",
    "PNG_COMPRESS_LEVEL",
    "PNG_IDAT_CHUNK_BYTES",
    "PNG_MAX_DIMENSION",
    "PROGRESS_MIN_INTERVAL_S",
]
