# dump_map/sizing.py
from __future__ import annotations

"""
Output height planning.

Exports:
  HeightPlan
  plan_height(total_bytes, width, bytes_per_pixel, skip, zoom, height_max, autoscale=True) -> HeightPlan
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class HeightPlan:
    """Chosen height plus what it means for coverage of the input."""

    height: int
    full_height: int  # rows needed to show every byte
    truncated: bool
    shown_bytes: int
    total_bytes: int

    @property
    def shown_fraction(self) -> float:
        if self.total_bytes <= 0:
            return 1.0
        return min(1.0, self.shown_bytes / self.total_bytes)


def plan_height(
    total_bytes: int,
    width: int,
    bytes_per_pixel: int,
    skip: int,
    zoom: int,
    height_max: int,
    autoscale: bool = True,
) -> HeightPlan:
    """
    Rows needed to cover total_bytes, capped at height_max.

    - full_height = ceil((total_bytes // (zoom*skip*bpp)) / width)
    - Above the cap: truncate to height_max.
    - Otherwise: full_height when autoscale, else height_max as given.
    Height is never below 1 so an empty input still yields a valid image.
    """
    if min(width, bytes_per_pixel, skip, zoom, height_max) < 1:
        raise ValueError("width, bytes_per_pixel, skip, zoom and height_max must be >= 1")
    total = max(0, int(total_bytes))
    per_row = width * bytes_per_pixel * skip * zoom
    full_height = math.ceil((total // (zoom * skip * bytes_per_pixel)) / width)

    if full_height > height_max:
        return HeightPlan(
            height=height_max,
            full_height=full_height,
            truncated=True,
            shown_bytes=per_row * height_max,
            total_bytes=total,
        )

    height = max(1, full_height) if autoscale else height_max
    return HeightPlan(
        height=height,
        full_height=full_height,
        truncated=False,
        shown_bytes=min(total, per_row * height),
        total_bytes=total,
    )


__all__ = ["HeightPlan", "plan_height"]
