"""
Shared fixtures for dump_map tests.
"""

from pathlib import Path

import numpy as np
import pytest

from dump_map.core_types import ScanParams


@pytest.fixture
def make_params():
    """Factory for ScanParams with unmasked gray defaults."""

    def _make(**overrides) -> ScanParams:
        values = dict(width=5, height=2, palette="gray", skip=1, zoom=1, seek=0, mask=False)
        values.update(overrides)
        return ScanParams(**values)

    return _make


@pytest.fixture
def dump_file(tmp_path: Path):
    """Write bytes to a temporary input file and return its path."""

    def _write(data: bytes, name: str = "input.bin") -> Path:
        path = tmp_path / name
        path.write_bytes(bytes(data))
        return path

    return _write


@pytest.fixture
def random_bytes():
    def _make(count: int, seed: int = 0) -> bytes:
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, size=count, dtype=np.uint8).tobytes()

    return _make

