"""
Uniswap V3 fixed-point price/tick math.

Pure functions converting between sqrtPriceX96, human prices and ticks.
Based on the UniswapV3 TickMath / SqrtPriceMath contracts.

Key concepts:
- sqrtPriceX96: Square root of the raw price (token1 units per token0 unit)
  in Q96 fixed-point format
- Tick: logarithmic price representation where raw price = 1.0001^tick
- Tick spacing: only multiples of the fee tier's spacing can bound a position

Everything that feeds a quote (sqrt ratios, amounts, estimates) stays in exact
integer or Fraction arithmetic. Float results are for display only.
"""

import math
from decimal import Decimal
from fractions import Fraction
from typing import Dict, Tuple, Union

# Q96 constants
Q96 = 2**96
Q192 = Q96 * Q96
MAX_UINT256 = (1 << 256) - 1

MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

FEE_DENOMINATOR = 1_000_000

FEE_TICK_SPACING: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# Prices at or beyond the extreme ticks
FULL_RANGE_MAX_PRICE = 1e50
FULL_RANGE_PRICE_THRESHOLD = 1e40

LN_1_0001 = math.log(1.0001)

Number = Union[int, float, Decimal, Fraction]


def _mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    return -((-a * b) // denominator)


def _div_rounding_up(a: int, b: int) -> int:
    return -(-a // b)


def tick_spacing_for_fee(fee: int) -> int:
    """
    Tick spacing of a fee tier.

    Raises:
        ValueError: If the fee is not one of the enabled tiers
    """
    try:
        return FEE_TICK_SPACING[fee]
    except KeyError:
        raise ValueError(f"Unsupported fee tier: {fee}")


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """
    Calculate sqrtPriceX96 from tick.

    Exact port of TickMath.getSqrtRatioAtTick: the ratio is accumulated in
    Q128 from precomputed 1/sqrt(1.0001)^(2^i) factors, inverted for positive
    ticks and rounded up into Q96.

    Args:
        tick: The tick value

    Returns:
        sqrtPriceX96

    Raises:
        ValueError: If tick is outside [MIN_TICK, MAX_TICK]
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise ValueError(f"Tick {tick} out of range [{MIN_TICK}, {MAX_TICK}]")

    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128

    if abs_tick & 0x2:
        ratio = (ratio * 0xFFF97272373D413259A46990580E213A) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xFFF2E50F5F656932EF12357CF3C7FDCC) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xFFE5CACA7E10E4E61C3624EAA0941CD0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xFFCB9843D60F6159C9DB58835C926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xFF973B41FA98C081472E6896DFB254C0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xFF2EA16466C96A3843EC78B326B52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xFE5DEE046A99A2A811C461F1969C3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xFCBE86C7900A88AEDCFFC83B479AA3A4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xF987A7253AC413176F2B074CF7815E54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xF3392B0822B70005940C7A398E4B70F3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xE7159475A2C29B7443B29C7FA6E889D9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xD097F3BDFD2022B8845AD8F792AA5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xA9F746462D870FDF8A65DC1F90E061E5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70D869A156D2A1B890BB3DF62BAF32F7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31BE135F97D08FD981231505542FCFA6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9AA508B5B7A84E1C677DE54F3E99BC9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5D6AF8DEDB81196699C329225EE604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216E584F5FA1EA926041BEDFE98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48A170391F7DC42444E8FA2) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128 -> Q96, rounding up
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """
    Greatest tick whose sqrt ratio is less than or equal to sqrt_price_x96.

    Uses a bisection over get_sqrt_ratio_at_tick, so the result is the exact
    integer inverse of that function.

    Raises:
        ValueError: If the ratio is outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO)
    """
    if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
        raise ValueError(f"sqrtPriceX96 {sqrt_price_x96} out of range")

    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if get_sqrt_ratio_at_tick(mid) <= sqrt_price_x96:
            low = mid
        else:
            high = mid - 1
    return low


def get_amount0_delta(
    *,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True,
) -> int:
    """
    Calculate token0 amount from sqrt price range and liquidity.

    Formula: amount0 = L * (√Pb - √Pa) / (√Pa * √Pb)

    Args:
        sqrt_ratio_a_x96: One sqrt price bound in Q96 format
        sqrt_ratio_b_x96: Other sqrt price bound in Q96 format
        liquidity: Pool liquidity L
        round_up: Whether to round the result up

    Returns:
        Amount of token0
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 <= 0:
        raise ValueError("sqrt ratio must be positive")

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return _div_rounding_up(
            _mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96,
        )
    return (numerator1 * numerator2 // sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    *,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True,
) -> int:
    """
    Calculate token1 amount from sqrt price range and liquidity.

    Formula: amount1 = L * (√Pb - √Pa) / Q96

    Args:
        sqrt_ratio_a_x96: One sqrt price bound in Q96 format
        sqrt_ratio_b_x96: Other sqrt price bound in Q96 format
        liquidity: Pool liquidity L
        round_up: Whether to round the result up

    Returns:
        Amount of token1
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return _mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return (liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)) // Q96


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int, liquidity: int, amount_in: int, zero_for_one: bool
) -> int:
    """
    Sqrt price after adding amount_in of the input token to a single range.

    Rounds in the direction that never overstates the output, matching
    SqrtPriceMath.getNextSqrtPriceFromInput.
    """
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValueError("sqrt price and liquidity must be positive")
    if amount_in == 0:
        return sqrt_price_x96

    if zero_for_one:
        numerator1 = liquidity << 96
        denominator = numerator1 + amount_in * sqrt_price_x96
        return _mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)

    return sqrt_price_x96 + (amount_in << 96) // liquidity


def estimate_amount_out(
    amount_in: int, sqrt_price_x96: int, fee: int, zero_for_one: bool
) -> int:
    """
    Optimistic output at the current spot price, net of the pool fee.

    amountOut = amountIn * spotPrice * (1 - fee). Ignores price impact
    entirely, so it is only usable as a flagged approximation.

    Args:
        amount_in: Raw input amount
        sqrt_price_x96: Pool sqrt price
        fee: Fee in hundredths of a bip (3000 = 0.3%)
        zero_for_one: True when token0 is the input token

    Returns:
        Raw output amount, rounded down
    """
    if sqrt_price_x96 <= 0:
        raise ValueError("sqrt price must be positive")
    net_in = amount_in * (FEE_DENOMINATOR - fee)
    price_num = sqrt_price_x96 * sqrt_price_x96
    if zero_for_one:
        return net_in * price_num // (FEE_DENOMINATOR * Q192)
    return net_in * Q192 // (FEE_DENOMINATOR * price_num)


def spot_amount_out(amount_in: int, sqrt_price_x96: int, zero_for_one: bool) -> Fraction:
    """Exact output at the spot price with no fee and no impact."""
    price = Fraction(sqrt_price_x96 * sqrt_price_x96, Q192)
    return amount_in * price if zero_for_one else amount_in / price


def raw_price_from_sqrt_price_x96(sqrt_price_x96: int) -> Fraction:
    """Exact raw price (token1 base units per token0 base unit)."""
    return Fraction(sqrt_price_x96 * sqrt_price_x96, Q192)


def sqrt_price_x96_to_price(sqrt_price_x96: int, decimals0: int, decimals1: int) -> Decimal:
    """
    Human price of token0 in token1.

    price = (sqrtPriceX96 / 2^96)^2 * 10^(decimals0 - decimals1)
    """
    price = raw_price_from_sqrt_price_x96(sqrt_price_x96) * Fraction(10) ** (decimals0 - decimals1)
    return Decimal(price.numerator) / Decimal(price.denominator)


def price_to_sqrt_price_x96(price: Number, decimals0: int, decimals1: int) -> int:
    """
    Convert a human price to sqrtPriceX96 using an integer square root.

    Raises:
        ValueError: If price is not positive
    """
    exact = Fraction(Decimal(str(price))) if isinstance(price, float) else Fraction(price)
    if exact <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    raw = exact / Fraction(10) ** (decimals0 - decimals1)
    return math.isqrt(raw.numerator * Q192 // raw.denominator)


def tick_to_price(tick: int, decimals0: int, decimals1: int) -> float:
    """
    Human price at a tick, for display.

    price = 1.0001^tick * 10^(decimals0 - decimals1). The extreme ticks map to
    0 and FULL_RANGE_MAX_PRICE instead of overflowing.
    """
    if tick >= MAX_TICK:
        return FULL_RANGE_MAX_PRICE
    if tick <= MIN_TICK:
        return 0.0

    log_price = tick * LN_1_0001 + (decimals0 - decimals1) * math.log(10)
    if log_price > math.log(FULL_RANGE_MAX_PRICE):
        return FULL_RANGE_MAX_PRICE
    return math.exp(log_price)


def price_to_tick(price: Number, decimals0: int, decimals1: int) -> int:
    """
    Tick at or below a human price.

    tick = floor(ln(rawPrice) / ln(1.0001)), rawPrice = price / 10^(d0 - d1),
    clamped to [MIN_TICK, MAX_TICK].

    Raises:
        ValueError: If price is not positive or is NaN
    """
    value = float(price)
    if math.isnan(value) or price <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    # Outside float range
    if math.isinf(value):
        return MAX_TICK
    if value == 0:
        return MIN_TICK
    log_raw = math.log(value) - (decimals0 - decimals1) * math.log(10)
    tick = math.floor(log_raw / LN_1_0001)
    return max(MIN_TICK, min(MAX_TICK, tick))


def round_tick_down(tick: int, spacing: int) -> int:
    """Nearest multiple of spacing at or below tick."""
    return (tick // spacing) * spacing


def round_tick_up(tick: int, spacing: int) -> int:
    """Nearest multiple of spacing at or above tick."""
    return -((-tick) // spacing) * spacing


def min_usable_tick(spacing: int) -> int:
    return -(MAX_TICK // spacing) * spacing


def max_usable_tick(spacing: int) -> int:
    return (MAX_TICK // spacing) * spacing


def align_ticks_to_spacing(tick_lower: int, tick_upper: int, spacing: int) -> Tuple[int, int]:
    """
    Snap a raw tick range onto usable ticks.

    The lower bound rounds down and the upper bound rounds up. When that still
    leaves lower >= upper, the range becomes a single spacing-wide window
    around the midpoint of the raw bounds. Result always satisfies lower < upper.
    """
    low_bound = min_usable_tick(spacing)
    high_bound = max_usable_tick(spacing)

    lower = max(low_bound, round_tick_down(tick_lower, spacing))
    upper = min(high_bound, round_tick_up(tick_upper, spacing))

    if lower >= upper:
        mid = (tick_lower + tick_upper) // 2
        lower = round_tick_down(mid, spacing)
        upper = lower + spacing
        if upper > high_bound:
            upper = high_bound
            lower = upper - spacing
        if lower < low_bound:
            lower = low_bound
            upper = lower + spacing

    return lower, upper


def is_full_range_price(price_min: Number, price_max: Number) -> bool:
    """A range is full-range when it starts at 0 and ends at a huge price."""
    return price_min == 0 and price_max >= FULL_RANGE_PRICE_THRESHOLD


def is_full_range_ticks(tick_lower: int, tick_upper: int, spacing: int = 1) -> bool:
    """A tick range is full-range when it reaches the usable extremes for its spacing."""
    return tick_lower <= min_usable_tick(spacing) and tick_upper >= max_usable_tick(spacing)


def price_range_to_ticks(
    price_min: Number, price_max: Number, decimals0: int, decimals1: int, fee: int
) -> Tuple[int, int]:
    """
    Convert a human price range into usable position ticks for a fee tier.

    Full-range input (0 to a huge price) maps to the usable extremes.
    """
    spacing = tick_spacing_for_fee(fee)
    if is_full_range_price(price_min, price_max):
        return min_usable_tick(spacing), max_usable_tick(spacing)
    if price_max <= 0 or price_min < 0:
        raise ValueError(f"Invalid price range: [{price_min}, {price_max}]")

    raw_lower = price_to_tick(price_min, decimals0, decimals1) if price_min > 0 else MIN_TICK
    raw_upper = price_to_tick(price_max, decimals0, decimals1)
    return align_ticks_to_spacing(raw_lower, raw_upper, spacing)
