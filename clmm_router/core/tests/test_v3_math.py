"""Tests for fixed-point price/tick math."""

from decimal import Decimal
from fractions import Fraction

import pytest

from clmm_router.core.v3_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    FULL_RANGE_MAX_PRICE,
    align_ticks_to_spacing,
    estimate_amount_out,
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    is_full_range_price,
    is_full_range_ticks,
    max_usable_tick,
    min_usable_tick,
    price_range_to_ticks,
    price_to_sqrt_price_x96,
    price_to_tick,
    round_tick_down,
    round_tick_up,
    spot_amount_out,
    sqrt_price_x96_to_price,
    tick_spacing_for_fee,
    tick_to_price,
)


class TestSqrtRatioAtTick:
    """Test cases for the tick -> sqrt ratio conversion."""

    def test_tick_zero_is_q96(self):
        assert get_sqrt_ratio_at_tick(0) == Q96

    def test_extreme_ticks_match_contract_constants(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    def test_out_of_range_tick_rejected(self):
        with pytest.raises(ValueError, match="out of range"):
            get_sqrt_ratio_at_tick(MAX_TICK + 1)
        with pytest.raises(ValueError, match="out of range"):
            get_sqrt_ratio_at_tick(MIN_TICK - 1)

    def test_monotonic(self):
        ratios = [get_sqrt_ratio_at_tick(tick) for tick in (-50000, -1, 0, 1, 50000)]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)


class TestTickAtSqrtRatio:
    """Test cases for the sqrt ratio -> tick conversion."""

    def test_bounds(self):
        assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    def test_q96_is_tick_zero(self):
        assert get_tick_at_sqrt_ratio(Q96) == 0

    @pytest.mark.parametrize("tick", [-887000, -20000, -1, 1, 60, 201234, 887000])
    def test_inverse_of_sqrt_ratio_at_tick(self, tick):
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    def test_between_ticks_rounds_down(self):
        ratio = get_sqrt_ratio_at_tick(100) + 1
        assert get_tick_at_sqrt_ratio(ratio) == 100

    def test_out_of_range_ratio_rejected(self):
        with pytest.raises(ValueError):
            get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)


class TestPriceConversions:
    """Test cases for human price conversions."""

    def test_sqrt_price_to_price_equal_decimals(self):
        assert sqrt_price_x96_to_price(Q96, 18, 18) == Decimal(1)
        assert sqrt_price_x96_to_price(2 * Q96, 18, 18) == Decimal(4)

    def test_sqrt_price_to_price_decimal_adjustment(self):
        # raw 1:1 between a 6 decimal token0 and an 18 decimal token1
        assert sqrt_price_x96_to_price(Q96, 6, 18) == Decimal("1e-12")

    def test_price_to_sqrt_price_exact(self):
        assert price_to_sqrt_price_x96(1, 18, 18) == Q96
        assert price_to_sqrt_price_x96(4, 18, 18) == 2 * Q96
        assert price_to_sqrt_price_x96(Decimal("1e-12"), 6, 18) == Q96

    def test_price_to_sqrt_price_rejects_non_positive(self):
        with pytest.raises(ValueError):
            price_to_sqrt_price_x96(0, 18, 18)

    def test_tick_to_price_sentinels(self):
        assert tick_to_price(MAX_TICK, 18, 18) == FULL_RANGE_MAX_PRICE
        assert tick_to_price(MIN_TICK, 18, 18) == 0.0
        assert tick_to_price(0, 18, 18) == 1.0

    def test_price_to_tick_rejects_non_positive(self):
        with pytest.raises(ValueError):
            price_to_tick(0, 18, 18)

    def test_price_to_tick_clamped(self):
        assert price_to_tick(1e300, 0, 0) == MAX_TICK

    @pytest.mark.parametrize(
        "price,expected",
        [
            (float("inf"), MAX_TICK),
            (Decimal("1e400"), MAX_TICK),
            (Decimal("1e-400"), MIN_TICK),
        ],
    )
    def test_price_to_tick_beyond_float_range(self, price, expected):
        assert price_to_tick(price, 18, 18) == expected

    @pytest.mark.parametrize("price", [float("nan"), float("-inf")])
    def test_price_to_tick_rejects_non_finite(self, price):
        with pytest.raises(ValueError):
            price_to_tick(price, 18, 18)

    @pytest.mark.parametrize(
        "price,decimals0,decimals1",
        [
            (1.0, 18, 18),
            (1.7, 18, 18),
            (0.0005, 18, 6),
            (2500.0, 18, 6),
            (2500.0, 6, 18),
            (3.3e6, 6, 18),
            (42000.0, 8, 18),
        ],
    )
    def test_price_tick_round_trip(self, price, decimals0, decimals1):
        """tick_to_price(price_to_tick(p)) lands within one tick below p."""
        tick = price_to_tick(price, decimals0, decimals1)
        back = tick_to_price(tick, decimals0, decimals1)
        assert back <= price * (1 + 1e-9)
        assert back >= price / 1.0001 * (1 - 1e-9)


class TestTickSpacing:
    """Test cases for tick-spacing rounding."""

    def test_fee_spacings(self):
        assert [tick_spacing_for_fee(fee) for fee in (100, 500, 3000, 10000)] == [1, 10, 60, 200]

    def test_unknown_fee(self):
        with pytest.raises(ValueError, match="Unsupported fee tier"):
            tick_spacing_for_fee(1234)

    def test_rounding_directions(self):
        assert round_tick_down(-100, 60) == -120
        assert round_tick_up(-100, 60) == -60
        assert round_tick_down(100, 60) == 60
        assert round_tick_up(100, 60) == 120
        assert round_tick_up(120, 60) == 120

    def test_align_widens_range(self):
        assert align_ticks_to_spacing(-100, 100, 60) == (-120, 120)

    def test_collapsed_range_becomes_one_spacing(self):
        assert align_ticks_to_spacing(120, 120, 60) == (120, 180)
        assert align_ticks_to_spacing(200, 100, 60) == (120, 180)

    def test_collapse_at_max_tick_stays_usable(self):
        lower, upper = align_ticks_to_spacing(MAX_TICK, MAX_TICK, 60)
        assert (lower, upper) == (max_usable_tick(60) - 60, max_usable_tick(60))

    def test_collapse_at_min_tick_stays_usable(self):
        lower, upper = align_ticks_to_spacing(MIN_TICK, MIN_TICK, 200)
        assert lower == min_usable_tick(200)
        assert upper == lower + 200

    @pytest.mark.parametrize("spacing", [1, 10, 60, 200])
    @pytest.mark.parametrize(
        "raw_lower,raw_upper",
        [(0, 0), (5, 3), (-7, -7), (1000, 1001), (-887272, 887272), (887100, 887000), (-3, 500)],
    )
    def test_lower_always_below_upper(self, spacing, raw_lower, raw_upper):
        lower, upper = align_ticks_to_spacing(raw_lower, raw_upper, spacing)
        assert lower < upper
        assert lower % spacing == 0
        assert upper % spacing == 0
        assert min_usable_tick(spacing) <= lower
        assert upper <= max_usable_tick(spacing)


class TestFullRange:
    """Test cases for full-range detection."""

    def test_full_range_prices(self):
        assert is_full_range_price(0, 1e45) is True
        assert is_full_range_price(0, 1e39) is False
        assert is_full_range_price(1, 1e45) is False

    def test_full_range_ticks(self):
        assert is_full_range_ticks(min_usable_tick(60), max_usable_tick(60), 60) is True
        assert is_full_range_ticks(-60, 60, 60) is False

    def test_price_range_snaps_to_full_range(self):
        assert price_range_to_ticks(0, 1e45, 18, 18, 3000) == (-887220, 887220)

    def test_price_range_to_ticks(self):
        lower, upper = price_range_to_ticks(0.5, 2.0, 18, 18, 3000)
        assert lower % 60 == 0 and upper % 60 == 0
        assert tick_to_price(lower, 18, 18) <= 0.5
        assert tick_to_price(upper, 18, 18) >= 2.0 / 1.0001

    def test_price_range_rejects_negative(self):
        with pytest.raises(ValueError):
            price_range_to_ticks(-1, 2.0, 18, 18, 500)


class TestAmounts:
    """Test cases for amount math and spot estimates."""

    def test_amount_deltas(self):
        liquidity = 10**18
        assert get_amount1_delta(sqrt_ratio_a_x96=Q96, sqrt_ratio_b_x96=2 * Q96, liquidity=liquidity) == 10**18
        assert get_amount0_delta(sqrt_ratio_a_x96=2 * Q96, sqrt_ratio_b_x96=Q96, liquidity=liquidity) == 5 * 10**17

    def test_amount0_rounding(self):
        kwargs = dict(sqrt_ratio_a_x96=Q96, sqrt_ratio_b_x96=Q96 + 1, liquidity=3)
        assert get_amount0_delta(round_up=True, **kwargs) == 1
        assert get_amount0_delta(round_up=False, **kwargs) == 0

    def test_next_sqrt_price_one_for_zero(self):
        assert get_next_sqrt_price_from_input(Q96, 10**18, 10**18, zero_for_one=False) == 2 * Q96

    def test_next_sqrt_price_zero_for_one_moves_down(self):
        after = get_next_sqrt_price_from_input(Q96, 10**18, 10**18, zero_for_one=True)
        assert after == Q96 // 2

    def test_estimate_amount_out_applies_fee(self):
        assert estimate_amount_out(10**18, Q96, 3000, zero_for_one=True) == 997 * 10**15
        assert estimate_amount_out(10**18, Q96, 3000, zero_for_one=False) == 997 * 10**15

    def test_estimate_amount_out_uses_spot_price(self):
        assert estimate_amount_out(10**18, 2 * Q96, 3000, zero_for_one=True) == 3988 * 10**15
        assert estimate_amount_out(10**18, 2 * Q96, 3000, zero_for_one=False) == 24925 * 10**13

    def test_spot_amount_out_is_exact(self):
        assert spot_amount_out(10, 2 * Q96, zero_for_one=True) == 40
        assert spot_amount_out(10, 2 * Q96, zero_for_one=False) == Fraction(5, 2)
