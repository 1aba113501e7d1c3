"""
dump_map package.

Purpose:
  Render binary files (memory dumps, core files, firmware) as RGB images, one
  pixel per group of bytes. See dump2png.py for the CLI.

Public API:
  build_image   : stream a byte source into a row sink.
  write_png     : build_image into a streaming PNG.
  render_array  : in-memory bytes -> uint8 (H, W, 3) array.
  render_image  : in-memory bytes -> Pillow image.
  ScanParams    : validated scan parameters.
  PALETTES      : palette registry (name -> Palette).
  plan_height   : height auto-scaling.

Quick start:
  from dump_map import ScanParams, write_png
  with open("core", "rb") as src, open("core.png", "wb") as dst:
      write_png(src, dst, ScanParams(width=1024, height=512, palette="gray"))
"""

__version__ = "1.0.0"

from . import byte_order
from . import colour_map
from . import constants
from . import core_types
from . import errors
from . import palette_data
from . import png_sink
from . import sizing
from . import utils

from .core_types import ScanParams, ScanReport  # noqa: E402,F401
from .errors import (  # noqa: E402,F401
    AllocationFailure,
    DumpMapError,
    EncoderInitFailure,
    InvalidPalette,
    WriteFailure,
)
from .palette_data import PALETTES, get_palette, map_window  # noqa: E402,F401
from .png_sink import ArrayRowSink, PngRowSink, RowSink  # noqa: E402,F401
from .raster import build_image, render_array, render_image, write_png  # noqa: E402,F401
from .sizing import HeightPlan, plan_height  # noqa: E402,F401

__all__ = [
    "__version__",
    "byte_order",
    "colour_map",
    "constants",
    "core_types",
    "errors",
    "palette_data",
    "png_sink",
    "sizing",
    "utils",
    "ScanParams",
    "ScanReport",
    "DumpMapError",
    "AllocationFailure",
    "EncoderInitFailure",
    "InvalidPalette",
    "WriteFailure",
    "PALETTES",
    "get_palette",
    "map_window",
    "RowSink",
    "PngRowSink",
    "ArrayRowSink",
    "build_image",
    "write_png",
    "render_array",
    "render_image",
    "HeightPlan",
    "plan_height",
]
