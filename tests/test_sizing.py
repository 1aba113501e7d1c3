"""
Tests for height planning.
"""

import pytest

from dump_map.sizing import plan_height


class TestPlanHeight:
    def test_exact_fit(self):
        plan = plan_height(10, width=5, bytes_per_pixel=1, skip=1, zoom=1, height_max=100)
        assert plan.height == 2
        assert not plan.truncated
        assert plan.shown_bytes == 10

    def test_rounds_up_partial_row(self):
        plan = plan_height(11, 5, 1, 1, 1, 100)
        assert plan.height == plan.full_height == 3

    def test_whole_windows_only(self):
        # 7 bytes of 2-byte windows -> 3 pixels -> 3 rows of width 1
        assert plan_height(7, 1, 2, 1, 1, 100).height == 3

    def test_zoom_and_skip_divide_rows(self):
        assert plan_height(100, 5, 1, skip=2, zoom=2, height_max=100).height == 5

    def test_truncates_above_cap(self):
        plan = plan_height(1000, 10, 1, 1, 1, height_max=5)
        assert plan.truncated
        assert plan.height == 5
        assert plan.full_height == 100
        assert plan.shown_bytes == 50
        assert plan.total_bytes == 1000
        assert plan.shown_fraction == pytest.approx(0.05)

    def test_autoscale_off_keeps_cap(self):
        plan = plan_height(10, 5, 1, 1, 1, height_max=40, autoscale=False)
        assert plan.height == 40
        assert not plan.truncated

    def test_empty_input_is_one_row(self):
        plan = plan_height(0, 5, 1, 1, 1, 100)
        assert plan.height == 1
        assert plan.full_height == 0
        assert plan.shown_fraction == 1.0

    def test_rejects_zero_width(self):
        with pytest.raises(ValueError):
            plan_height(10, 0, 1, 1, 1, 10)
