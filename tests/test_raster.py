"""
Tests for the raster builder: row layout, zoom, skip, masking, failures.
"""

import io

import numpy as np
import pytest

from dump_map import raster
from dump_map.core_types import ScanParams
from dump_map.errors import (
    AllocationFailure,
    EncoderInitFailure,
    InvalidPalette,
    WriteFailure,
)
from dump_map.png_sink import ArrayRowSink, PngRowSink
from dump_map.raster import build_image, render_array, render_image, write_png
from tests.helpers import decode_png


class TrickleReader:
    """read()-only source returning at most `step` bytes per call."""

    def __init__(self, data: bytes, step: int = 2) -> None:
        self._buf = io.BytesIO(data)
        self.step = step

    def read(self, n: int) -> bytes:
        return self._buf.read(min(n, self.step))


class FailingStream(io.BytesIO):
    """Raises OSError on the Nth write (1-based)."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.writes = 0

    def write(self, data) -> int:
        self.writes += 1
        if self.writes >= self.fail_on:
            raise OSError("disk full")
        return super().write(data)


class ClosingSpy(ArrayRowSink):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


class TestScanParams:
    @pytest.mark.parametrize("field", ["width", "height", "skip", "zoom"])
    def test_rejects_non_positive(self, make_params, field):
        with pytest.raises(ValueError):
            make_params(**{field: 0})

    def test_rejects_negative_seek(self, make_params):
        with pytest.raises(ValueError):
            make_params(seek=-1)

    def test_rejects_unknown_palette(self, make_params):
        with pytest.raises(InvalidPalette):
            make_params(palette="plaid")

    def test_row_bytes(self, make_params):
        params = make_params(width=4, palette="rgb", skip=2, zoom=3)
        assert params.bytes_per_pixel == 3
        assert params.pixel_bytes == 4 * 3 * 3
        assert params.row_bytes == 4 * 3 * 3 * 2


class TestRowLayout:
    def test_exact_fill(self, make_params):
        data = bytes(range(10, 20))
        out = render_array(data, make_params())
        assert out.shape == (2, 5, 3)
        assert out[0, :, 0].tolist() == [10, 11, 12, 13, 14]
        assert out[1, :, 0].tolist() == [15, 16, 17, 18, 19]
        assert np.array_equal(out[..., 0], out[..., 1])
        assert np.array_equal(out[..., 0], out[..., 2])

    def test_short_input_is_black_filled(self, make_params):
        out = render_array(bytes([7, 8, 9]), make_params())
        assert out[0, :3, 0].tolist() == [7, 8, 9]
        assert not out[0, 3:].any()
        assert not out[1].any()

    def test_empty_input(self, make_params):
        out = render_array(b"", make_params())
        assert not out.any()

    def test_partial_multibyte_window_is_black(self, make_params):
        # 7 bytes, rgb: two full pixels, third would need bytes 6..8
        data = bytes([1, 2, 3, 4, 5, 6, 7])
        out = render_array(data, make_params(width=3, height=1, palette="rgb"))
        assert out[0].tolist() == [[1, 2, 3], [4, 5, 6], [0, 0, 0]]

    def test_seek_offsets_input(self, make_params):
        out = render_array(bytes(range(10)), make_params(height=1, seek=5))
        assert out[0, :, 0].tolist() == [5, 6, 7, 8, 9]

    def test_skip_discards_remaining_rows(self, make_params):
        out = render_array(bytes(range(8)), make_params(width=2, height=2, skip=2))
        assert out[:, :, 0].tolist() == [[0, 1], [4, 5]]


class TestZoom:
    def test_identical_samples(self, make_params):
        out = render_array(bytes([100] * 4), make_params(width=1, height=1, zoom=4))
        assert out[0, 0].tolist() == [100, 100, 100]

    def test_truncating_average(self, make_params):
        out = render_array(bytes([0, 0, 0, 255]), make_params(width=1, height=1, zoom=4))
        assert out[0, 0].tolist() == [63, 63, 63]

    def test_missing_samples_count_as_black(self, make_params):
        data = bytes([40, 40, 40, 40, 200, 100])
        out = render_array(data, make_params(width=2, height=1, zoom=4))
        assert out[0, 0].tolist() == [40, 40, 40]
        assert out[0, 1].tolist() == [75, 75, 75]

    def test_zoom_with_multibyte_palette(self, make_params):
        data = bytes([10, 20, 30, 30, 40, 50])
        out = render_array(data, make_params(width=1, height=1, palette="rgb", zoom=2))
        assert out[0, 0].tolist() == [20, 30, 40]


class TestMasking:
    def test_mask_clears_low_bit(self, make_params):
        out = render_array(bytes([255, 1, 2, 3, 129]), make_params(height=1, mask=True))
        assert out[0, :, 0].tolist() == [254, 0, 2, 2, 128]

    def test_mask_applies_after_zoom(self, make_params):
        out = render_array(bytes([3, 4]), make_params(width=1, height=1, zoom=2, mask=True))
        # (3 + 4) // 2 = 3 -> 2
        assert out[0, 0].tolist() == [2, 2, 2]

    def test_mask_is_default(self):
        params = ScanParams(width=1, height=1, palette="gray")
        assert params.mask is True
        assert render_array(b"\xff", params)[0, 0].tolist() == [254, 254, 254]


class TestDifferentialState:
    def test_previous_carries_across_rows(self, make_params):
        out = render_array(bytes([10, 30, 20]), make_params(width=1, height=3, palette="dvi"))
        assert out[:, 0].tolist() == [[10, 10, 5], [20, 30, 20], [10, 20, 25]]

    def test_skipped_bytes_do_not_feed_previous(self, make_params):
        data = bytes([10, 99, 30, 99])
        out = render_array(data, make_params(width=1, height=2, skip=2, palette="dvi"))
        assert out[1, 0].tolist() == [20, 30, 20]

    def test_previous_is_every_sample_under_zoom(self, make_params):
        # samples 10, 20: (10,10,5) and (10,20,15) -> (10,15,10)
        out = render_array(bytes([10, 20]), make_params(width=1, height=1, zoom=2, palette="dvi"))
        assert out[0, 0].tolist() == [10, 15, 10]


class TestSources:
    def test_read_only_source_with_short_reads(self, make_params):
        sink = ArrayRowSink()
        build_image(TrickleReader(bytes(range(10)), step=2), sink, make_params())
        assert sink.array[:, :, 0].tolist() == [[0, 1, 2, 3, 4], [5, 6, 7, 8, 9]]

    def test_report(self, make_params):
        sink = ArrayRowSink()
        report = build_image(io.BytesIO(bytes(range(7))), sink, make_params())
        assert report.rows_written == 2
        assert report.bytes_read == 7
        assert report.bytes_rendered == 7
        assert (report.width, report.height, report.palette) == (5, 2, "gray")

    def test_progress_callback(self, make_params):
        calls = []
        build_image(
            io.BytesIO(bytes(10)),
            ArrayRowSink(),
            make_params(),
            progress=lambda done, total: calls.append((done, total)),
        )
        assert calls == [(1, 2), (2, 2)]

    def test_render_image(self, make_params):
        img = render_image(bytes(range(10)), make_params())
        assert img.size == (5, 2)
        assert img.mode == "RGB"
        assert img.getpixel((4, 1)) == (9, 9, 9)
        assert img.info["Title"] == "dump2png"


class TestPngOutput:
    def test_png_matches_array(self, make_params, random_bytes):
        data = random_bytes(3000)
        params = make_params(width=32, height=40, palette="x86", zoom=2, mask=True)
        stream = io.BytesIO()
        write_png(io.BytesIO(data), stream, params)
        assert np.array_equal(decode_png(stream.getvalue()), render_array(data, params))

    def test_report_counts_encoded_bytes(self, make_params):
        stream = io.BytesIO()
        report = write_png(io.BytesIO(bytes(range(10))), stream, make_params())
        assert report.bytes_written == len(stream.getvalue())
        assert build_image(io.BytesIO(bytes(10)), ArrayRowSink(), make_params()).bytes_written == 0

    def test_idempotent(self, make_params, random_bytes):
        data = random_bytes(4096, seed=3)
        params = make_params(width=16, height=64, palette="hues6")
        first, second = io.BytesIO(), io.BytesIO()
        write_png(io.BytesIO(data), first, params)
        write_png(io.BytesIO(data), second, params)
        assert first.getvalue() == second.getvalue()


class TestFailures:
    def test_header_write_failure(self, make_params):
        with pytest.raises(EncoderInitFailure):
            write_png(io.BytesIO(bytes(10)), FailingStream(fail_on=1), make_params())

    def test_row_write_failure(self, make_params):
        # signature, IHDR and tEXt succeed; the first IDAT write fails
        sink = PngRowSink(FailingStream(fail_on=4), chunk_bytes=1)
        with pytest.raises(WriteFailure):
            build_image(io.BytesIO(bytes(10)), sink, make_params())

    def test_sink_os_error_becomes_write_failure(self, make_params):
        class BrokenSink(ArrayRowSink):
            def write_row(self, row):
                raise OSError("gone")

        with pytest.raises(WriteFailure):
            build_image(io.BytesIO(bytes(10)), BrokenSink(), make_params())

    def test_allocation_failure(self, make_params, monkeypatch):
        def no_memory(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(raster.np, "zeros", no_memory)
        spy = ClosingSpy()
        with pytest.raises(AllocationFailure):
            build_image(io.BytesIO(bytes(10)), spy, make_params())
        assert spy.closed
        assert spy.rows_written == 0

    def test_sink_closed_on_success(self, make_params):
        spy = ClosingSpy()
        build_image(io.BytesIO(bytes(10)), spy, make_params())
        assert spy.closed

    def test_render_array_without_rows(self, make_params, monkeypatch):
        monkeypatch.setattr(raster, "build_image", lambda *args, **kwargs: None)
        with pytest.raises(WriteFailure):
            render_array(bytes(10), make_params())
