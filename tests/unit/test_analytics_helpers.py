"""
Unit tests for the pure arithmetic helpers of the analytics engine.
"""

import pytest

from backend.abattoir_server.analytics import profit_margin, round_half_away
from backend.abattoir_server.operations import tracking_number


class TestRoundHalfAway:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (2.5, 3.0),
            (3.5, 4.0),
            (2.4, 2.0),
            (-2.5, -3.0),
            (33.333, 33.0),
            (66.667, 67.0),
            (0.0, 0.0),
            (0.49999999999999994, 0.0),
            (1.4999999999999998, 1.0),
            (-0.49999999999999994, -0.0),
        ],
    )
    def test_rounding(self, value, expected):
        assert round_half_away(value) == expected


class TestProfitMargin:
    def test_positive_margin(self):
        assert profit_margin(200.0, 50.0) == 75.0

    def test_clamped_at_zero(self):
        """Losses never produce a negative margin."""
        assert profit_margin(100.0, 150.0) == 0.0

    def test_undefined_without_revenue(self):
        assert profit_margin(0.0, 0.0) is None
        assert profit_margin(0.0, 30.0) is None


class TestTrackingNumber:
    def test_zero_padded(self):
        assert tracking_number(42) == "SH000042"

    def test_wide_ids_not_truncated(self):
        assert tracking_number(1234567) == "SH1234567"
