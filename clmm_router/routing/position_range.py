"""
Position range evaluation.

The displayed price range is the source of truth for "in range"; the tick
comparison runs alongside it as a consistency check. Disagreements between
the two are logged as structured warnings and returned with the result.
"""

import logging
import math
from dataclasses import asdict

from ..core.types import Position, RangeMismatch, RangeResult
from ..core.v3_math import FEE_TICK_SPACING, is_full_range_price, is_full_range_ticks, tick_spacing_for_fee

logger = logging.getLogger(__name__)

WIDEST_TICK_SPACING = max(FEE_TICK_SPACING.values())


def _valid_price(value: float) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


def is_full_range(position: Position) -> bool:
    """Full-range by price bounds or by ticks at the usable extremes."""
    spacing = tick_spacing_for_fee(position.fee) if position.fee is not None else WIDEST_TICK_SPACING
    if is_full_range_ticks(position.tick_lower, position.tick_upper, spacing):
        return True
    price_min, price_max = position.resolved_price_min, position.resolved_price_max
    return _valid_price(price_min) and _valid_price(price_max) and is_full_range_price(price_min, price_max)


def tick_in_range(position: Position) -> bool:
    return position.tick_lower <= position.current_tick <= position.tick_upper


def evaluate_position_range(position: Position) -> RangeResult:
    """
    Decide whether a position's range contains the current price.

    Returns:
        RangeResult with method "full_range", "price" or "tick" (the latter
        only when the prices are unusable) and the mismatch, if any
    """
    if is_full_range(position):
        return RangeResult(in_range=True, full_range=True, method="full_range")

    by_tick = tick_in_range(position)
    price_min = position.resolved_price_min
    price_max = position.resolved_price_max
    current = position.resolved_current_price

    if not all(_valid_price(value) for value in (price_min, price_max, current)):
        logger.debug(f"Unusable prices for range check, using ticks: {price_min}, {price_max}, {current}")
        return RangeResult(in_range=by_tick, full_range=False, method="tick")

    by_price = price_min <= current <= price_max
    mismatch = None
    if by_price != by_tick:
        mismatch = RangeMismatch(
            price_in_range=by_price,
            tick_in_range=by_tick,
            current_price=current,
            price_min=price_min,
            price_max=price_max,
            current_tick=position.current_tick,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
        )
        logger.warning(
            f"⚠️ Position range mismatch: price says {by_price}, ticks say {by_tick}",
            extra={"range_mismatch": asdict(mismatch)},
        )

    return RangeResult(in_range=by_price, full_range=False, method="price", mismatch=mismatch)


def is_position_in_range(position: Position) -> bool:
    return evaluate_position_range(position).in_range
