# dump_map/utils.py
from __future__ import annotations

"""
Shared utilities for dump_map.

Duration and size formatting, a throttled row-progress printer, and tidy
print-based logging used by the CLI.
"""

import math
import sys
import time
from typing import Any, Iterable, List, Optional, Tuple

from .constants import PROGRESS_MIN_INTERVAL_S


#  Time / size formatting


def format_eta(seconds: Optional[float]) -> str:
    """ETA as 'Hh Mm', 'Mm Ss', 'Ss', or '--:--' when unknown."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "--:--"
    total = int(round(seconds))
    if total >= 3600:
        return f"{total // 3600}h {(total % 3600) // 60}m"
    if total >= 60:
        return f"{total // 60}m {total % 60}s"
    return f"{total}s"


def format_total_duration_compact(seconds: float) -> str:
    """'Mm Ss', 'S.Ss', or 'ms'."""
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        return f"{minutes}m {int(round(seconds - 60 * minutes))}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


def format_byte_size(num_bytes: int) -> str:
    """Binary-prefixed size, e.g. '1.5 MiB'. Bytes are shown exactly."""
    value = float(num_bytes)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if value < 1024.0 or unit == "TiB":
            return f"{int(value)} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024.0
    return f"{value:.1f} TiB"


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """1,234 style for ints; trimmed floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def format_percentage(x: float, decimals: int = 1) -> str:
    """Accepts 0..1 fractions."""
    return f"{x * 100.0:.{decimals}f}%"


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """Format (name, value) pairs as 'Name: value' blocks."""
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool = False
) -> None:
    """
    Emit one config line, e.g.:
      [scan] Palette: x86  Width: 1,024  Height: 512  Zoom: 1  Skip: 1  Mask: on
    Routes to debug_log() when debug=True, else log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def log(message: str) -> None:
    print(message, flush=True)


def debug_log(message: str) -> None:
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


#  Progress


def print_progress_line(message: str, final: bool = False) -> None:
    """Single progress line that overwrites the previous one."""
    sys.stdout.write("\r\033[K" + message)
    if final:
        sys.stdout.write("\n")
    sys.stdout.flush()


def enable_line_buffered_stdout() -> None:
    """Line-buffer stdout where .reconfigure() exists."""
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (ValueError, OSError):
            pass


class RowProgress:
    """
    Throttled 'rows done / total, percent, ETA' printer.

    Instances are callables matching ProgressCallback so they can be handed to
    raster.build_image directly.
    """

    def __init__(
        self, label: str = "rows", min_interval: float = PROGRESS_MIN_INTERVAL_S
    ) -> None:
        self.label = label
        self.min_interval = float(min_interval)
        self._t0 = time.perf_counter()
        self._last_print = 0.0

    def __call__(self, done: int, total: int) -> None:
        now = time.perf_counter()
        final = done >= total
        if not final and now - self._last_print < self.min_interval:
            return
        self._last_print = now
        frac = (done / total) if total else 1.0
        elapsed = now - self._t0
        eta = (elapsed / frac - elapsed) if frac > 0 else None
        print_progress_line(
            f"{self.label} {done:,}/{total:,}  {format_percentage(frac)}  ETA {format_eta(eta)}",
            final=final,
        )


__all__ = [
    "format_eta",
    "format_total_duration_compact",
    "format_byte_size",
    "format_bool_on_off",
    "format_number_compact",
    "format_percentage",
    "key_value_pairs_to_string",
    "print_config_line",
    "log",
    "debug_log",
    "warn",
    "error",
    "print_progress_line",
    "enable_line_buffered_stdout",
    "RowProgress",
]
