"""Tests for position range evaluation."""
import logging

import pytest

from clmm_router.core.types import Position
from clmm_router.core.v3_math import MAX_TICK, MIN_TICK
from clmm_router.routing import evaluate_position_range, is_position_in_range


class TestFullRange:
    """Test cases for full-range positions."""

    @pytest.mark.parametrize("current_tick", [-500000, 0, 500000])
    def test_full_range_by_price(self, current_tick):
        """Test priceMin=0 and priceMax=1e45 is in range whatever the current values."""
        position = Position(
            tick_lower=-100,
            tick_upper=100,
            current_tick=current_tick,
            price_min=0.0,
            price_max=1e45,
            current_price=123456.0,
        )
        result = evaluate_position_range(position)
        assert result.in_range is True
        assert result.full_range is True
        assert result.method == "full_range"

    def test_full_range_by_ticks(self):
        """Test ticks at the usable extremes of the fee tier are full range."""
        position = Position(tick_lower=-887220, tick_upper=887220, current_tick=10, fee=3000)
        assert evaluate_position_range(position).full_range is True

    def test_extreme_ticks_derive_full_range_prices(self):
        """Test MIN/MAX_TICK map to the 0 and sentinel prices."""
        position = Position(tick_lower=MIN_TICK, tick_upper=MAX_TICK, current_tick=0)
        assert is_position_in_range(position) is True


class TestPriceAndTickChecks:
    """Test cases for the price-primary, tick-validated check."""

    def test_in_range_by_both(self):
        position = Position(tick_lower=-600, tick_upper=600, current_tick=0, fee=3000)
        result = evaluate_position_range(position)
        assert result.in_range is True
        assert result.method == "price"
        assert result.mismatch is None

    def test_out_of_range_by_both(self):
        position = Position(tick_lower=600, tick_upper=1200, current_tick=0, fee=3000)
        result = evaluate_position_range(position)
        assert result.in_range is False
        assert result.mismatch is None

    def test_mismatch_prefers_price_and_warns(self, caplog):
        """Test disagreement keeps the price result and records a structured warning."""
        position = Position(
            tick_lower=-600,
            tick_upper=600,
            current_tick=0,
            price_min=2.0,
            price_max=3.0,
            current_price=1.0,
            fee=3000,
        )
        with caplog.at_level(logging.WARNING, logger="clmm_router.routing.position_range"):
            result = evaluate_position_range(position)

        assert result.in_range is False
        assert result.mismatch is not None
        assert result.mismatch.tick_in_range is True
        assert result.mismatch.price_in_range is False
        record = next(r for r in caplog.records if "mismatch" in r.getMessage())
        assert record.range_mismatch["current_tick"] == 0

    def test_invalid_price_falls_back_to_ticks(self):
        """Test NaN prices fall back to the tick comparison."""
        position = Position(
            tick_lower=-600,
            tick_upper=600,
            current_tick=0,
            price_min=float("nan"),
            price_max=3.0,
            current_price=1.0,
            fee=3000,
        )
        result = evaluate_position_range(position)
        assert result.in_range is True
        assert result.method == "tick"

    def test_tick_order_enforced(self):
        with pytest.raises(ValueError, match="tick_lower"):
            Position(tick_lower=10, tick_upper=10, current_tick=0)
