#!/usr/bin/env python3
"""
dump2png.py
Visualize file data as a PNG. Intended for memory dumps.

Usage:
  python dump2png.py [-HM] [-w width] [-h height_max] [-p palette] [-o outfile.png]
                     [-k skip_factor] [-s seek_bytes] [-z zoom_factor] [--progress] [--debug] file
  python dump2png.py --help

Each byte (or group of bytes, depending on the palette) becomes one pixel and the
image is built line by line, so very large dumps can be rendered without holding
them in memory. This is for eyeballing structure; it does not parse dump metadata.

By default the least significant bit of every channel is masked, so the image
cannot be converted back into the input file. Use -M to disable masking.

Output:
  8-bit RGB PNG, dump2png.png unless -o is given. Removed again if rendering fails.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from dump_map.constants import (
    DEFAULT_HEIGHT_MAX,
    DEFAULT_OUTFILE,
    DEFAULT_PALETTE,
    DEFAULT_SEEK,
    DEFAULT_SKIP,
    DEFAULT_WIDTH,
    DEFAULT_ZOOM,
)
from dump_map.core_types import ScanParams
from dump_map.errors import DumpMapError, InvalidPalette
from dump_map.palette_data import PALETTES, get_palette
from dump_map.raster import write_png
from dump_map.sizing import HeightPlan, plan_height
from dump_map.utils import (
    RowProgress,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_byte_size,
    format_percentage,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_config_line,
    warn,
)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_IO = 2
EXIT_PALETTE = 3

SHORT_USAGE = (
    "USAGE: dump2png [-HM] [-w width] [-h height_max]\n"
    "                [-p palette] [-o outfile.png]\n"
    "                [-k skip_factor] [-s seek_bytes]\n"
    "                [-z zoom_factor] file\n\n"
    "                [--help]\t# for full help\n"
)

X86_LEGEND = (
    "\t    green = common english chars: 'e', 't', 'a'\n"
    "\t    red = common x86 instructions: movl, call, testl\n"
    "\t    blue = binary values: 0x01, 0x02, 0x03\n"
)


def full_usage() -> str:
    """Usage plus option and palette descriptions."""
    names = ", ".join(PALETTES)
    lines = [
        SHORT_USAGE,
        f"palette types: {names} (default: {DEFAULT_PALETTE}).\n",
        "\t-H            \tdon't autoscale height",
        "\t-M            \tdon't mask least significant bit",
        "\t-k skip_factor\tskips horiz lines; eg, 3 means show 1 out of 3",
        "\t-s seek_bytes\tthe byte offset of the infile to begin reading",
        "\t-z zoom_factor\taverages multiple bytes; eg, 16 avgs 16 as 1",
        "\t-p palette\tpalette type for colorization:\n",
    ]
    for pal in PALETTES.values():
        tabs = "\t\t" if len(pal.name) < 8 else "\t"
        lines.append(f"\t{pal.name}{tabs}{pal.description}")
    return "\n".join(lines) + ":\n\n" + X86_LEGEND


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    """argparse that reports problems as usage errors instead of exiting 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


# CLI args & small helpers


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        file: input path (None when omitted)
        width, height, skip, zoom, seek: ints as given
        palette: palette name (validated later)
        outfile: output PNG path
        autoscale: False with -H
        mask: False with -M
        progress, debug, help: bools
    Raises:
      _UsageError on malformed arguments
    """
    parser = _Parser(prog="dump2png", add_help=False)
    parser.add_argument("file", nargs="?", default=None)
    parser.add_argument("-w", dest="width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("-h", dest="height", type=int, default=DEFAULT_HEIGHT_MAX)
    parser.add_argument("-p", dest="palette", default=DEFAULT_PALETTE)
    parser.add_argument("-o", dest="outfile", type=Path, default=Path(DEFAULT_OUTFILE))
    parser.add_argument("-k", dest="skip", type=int, default=DEFAULT_SKIP)
    parser.add_argument("-s", dest="seek", type=int, default=DEFAULT_SEEK)
    parser.add_argument("-z", dest="zoom", type=int, default=DEFAULT_ZOOM)
    parser.add_argument("-H", dest="autoscale", action="store_false")
    parser.add_argument("-M", dest="mask", action="store_false")
    parser.add_argument("--progress", action="store_true")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--help", action="store_true")
    return parser.parse_args(argv)


def _report_plan(plan: HeightPlan, debug: bool) -> None:
    if plan.truncated:
        log(
            f"Truncating height: showing {plan.shown_bytes} of {plan.total_bytes} bytes. "
            "Use -h to allow larger heights."
        )
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Input", format_byte_size(plan.total_bytes)),
                    ("Full height", plan.full_height),
                    ("Shown", format_percentage(plan.shown_fraction)),
                ]
            )
        )


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        error(f"could not remove partial output {path}: {e}")


# Rendering


def render_file(
    src: Path, out: Path, params: ScanParams, progress: bool, debug: bool
) -> int:
    """Open src at params.seek, stream it into out as PNG. Returns an exit code."""
    t_start = time.perf_counter()
    try:
        infile = open(src, "rb")
    except OSError as e:
        error(f"Can't read {src}: {e}")
        return EXIT_IO

    with infile:
        if params.seek:
            try:
                infile.seek(params.seek)
            except (OSError, ValueError) as e:
                error(f"Seek failed: {e}")
                return EXIT_IO
        try:
            outfile = open(out, "wb")
        except OSError as e:
            error(f"Could not write to {out}: {e}")
            return EXIT_IO

        log(f"Writing {out}...")
        try:
            with outfile:
                report = write_png(
                    infile, outfile, params, progress=RowProgress() if progress else None
                )
        except (DumpMapError, OSError) as e:
            error(f"Error during png creation: {e}")
            _discard(out)
            return EXIT_USAGE

    t_end = time.perf_counter()
    log(
        f"Wrote {out.name} | size={report.width}x{report.height} | palette={report.palette}"
    )
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Bytes read", report.bytes_read),
                    ("Bytes rendered", report.bytes_rendered),
                    ("Rows", report.rows_written),
                    ("PNG size", format_byte_size(report.bytes_written)),
                ]
            )
        )
    log(f"Total time {format_total_duration_compact(t_end - t_start)}")
    return EXIT_OK


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point. Returns the process exit code:
      0 ok, 1 usage or render failure, 2 file access, 3 invalid palette.
    """
    enable_line_buffered_stdout()
    try:
        args = parse_cli_args(argv)
    except _UsageError as e:
        error(str(e))
        print(SHORT_USAGE, end="", flush=True)
        return EXIT_USAGE

    # --help is a successful request and exits 0; only usage errors exit 1
    if args.help:
        print(full_usage(), end="", flush=True)
        return EXIT_OK
    if args.file is None or min(args.width, args.height, args.skip, args.zoom) <= 0 or args.seek < 0:
        print(SHORT_USAGE, end="", flush=True)
        return EXIT_USAGE

    try:
        palette = get_palette(args.palette)
    except InvalidPalette:
        error("invalid palette. See USAGE (--help).")
        return EXIT_PALETTE

    src = Path(args.file)
    try:
        size = src.stat().st_size
    except OSError as e:
        error(f"Can't access infile: {e}")
        return EXIT_IO
    if args.seek > size:
        warn(f"seek offset {args.seek:,} is past end of file ({size:,} bytes); output will be black")

    plan = plan_height(
        max(0, size - args.seek),
        args.width,
        palette.bytes_per_pixel,
        args.skip,
        args.zoom,
        args.height,
        autoscale=args.autoscale,
    )
    _report_plan(plan, args.debug)

    params = ScanParams(
        width=args.width,
        height=plan.height,
        palette=palette.name,
        skip=args.skip,
        zoom=args.zoom,
        seek=args.seek,
        mask=args.mask,
    )
    print_config_line(
        "scan",
        [
            ("Palette", params.palette),
            ("Zoom", params.zoom),
            ("Skip", params.skip),
            ("Seek", params.seek),
            ("Mask", params.mask),
        ],
        debug=args.debug,
    )
    log(f"Output image: height:{params.height}, width:{params.width}")
    return render_file(src, args.outfile, params, args.progress or args.debug, args.debug)


if __name__ == "__main__":
    sys.exit(main())
