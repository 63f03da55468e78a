"""Tests for numeric bounds validation."""

from pb_portal.validators.bounds_validator import (
    FIELD_BOUNDS,
    clamp_to_bounds,
    get_bounds,
    is_within_bounds,
)


class TestGetBounds:
    def test_known_field(self):
        assert get_bounds("matrix_score") == (0, 3)

    def test_alias(self):
        assert get_bounds("coefficientFactor") == FIELD_BOUNDS["coefficient_factor"]

    def test_unknown_field(self):
        assert get_bounds("favourite_colour") is None


class TestIsWithinBounds:
    def test_in_range(self):
        assert is_within_bounds("coefficient_factor", 1.5) is True

    def test_inclusive_edges(self):
        assert is_within_bounds("coefficient_factor", 1.0) is True
        assert is_within_bounds("coefficient_factor", 2.0) is True

    def test_out_of_range(self):
        assert is_within_bounds("coefficient_factor", 2.5) is False
        assert is_within_bounds("reach_figure", -1) is False

    def test_alias(self):
        assert is_within_bounds("amountRequested", 5_000_000) is False

    def test_unbounded_passthrough(self):
        assert is_within_bounds("unknown", -1e9) is True


class TestClampToBounds:
    def test_clamps_high(self):
        assert clamp_to_bounds("matrix_score", 4) == 3

    def test_clamps_low(self):
        assert clamp_to_bounds("slider_score", -5) == 0

    def test_in_range_unchanged(self):
        assert clamp_to_bounds("slider_score", 55) == 55

    def test_unbounded_unchanged(self):
        assert clamp_to_bounds("whatever", -7) == -7

    def test_logs_context(self, caplog):
        clamp_to_bounds("matrix_score", 4, context="budget_value")
        assert "budget_value" in caplog.text
        assert "valid range: 0-3" in caplog.text

    def test_quiet(self, caplog):
        clamp_to_bounds("matrix_score", 4, log_warning=False)
        assert caplog.text == ""
