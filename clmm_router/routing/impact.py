"""
Price impact and slippage protection.

Price impact compares the quoted output with what the same input would buy
at the pre-trade spot price of every pool on the route, fees excluded, so a
small trade through a 0.3% pool shows roughly 0.3% impact. All amount math
is exact (integers and Fractions); only the display string is formatted.
"""

import logging
from decimal import ROUND_DOWN, Decimal
from fractions import Fraction
from typing import Any, Optional

from ..config import RoutingConfig, get_config
from ..core.types import ImpactAssessment, ImpactSeverity, Quote, Route, format_amount
from ..core.v3_math import spot_amount_out

logger = logging.getLogger(__name__)

BASE_SUGGESTED_SLIPPAGE = Decimal("0.5")
SLIPPAGE_SAFETY_BUFFER = Decimal("0.5")
MAX_SUGGESTED_SLIPPAGE = Decimal("20")
# Amounts below this are shown in scientific notation
SCIENTIFIC_DISPLAY_THRESHOLD = Decimal("0.000001")


def _to_fraction(value: Any) -> Fraction:
    return Fraction(str(value))


def expected_amount_out(route: Route, amount_in: int) -> Fraction:
    """Output at the pre-trade spot price of each hop, no fees."""
    amount = Fraction(amount_in)
    for pool, token_in in zip(route.pools, route.token_path):
        if not pool.sqrt_price_x96:
            return Fraction(0)
        amount = spot_amount_out(amount, pool.sqrt_price_x96, pool.zero_for_one(token_in))
    return amount


def calculate_price_impact(route: Route, amount_in: int, amount_out: int) -> Decimal:
    """Shortfall of amount_out against the spot expectation, in percent."""
    expected = expected_amount_out(route, amount_in)
    if expected <= 0 or amount_out <= 0:
        return Decimal(0)
    impact = (expected - amount_out) / expected * 100
    if impact <= 0:
        return Decimal(0)
    return Decimal(impact.numerator) / Decimal(impact.denominator)


def minimum_amount_out(amount_out: int, slippage: Any) -> int:
    """amount_out * (1 - slippage / 100), rounded down to a raw unit."""
    return int(amount_out * (100 - _to_fraction(slippage)) // 100)


def format_min_amount(raw: int, decimals: int) -> str:
    """Human string for a raw amount; tiny amounts use scientific notation."""
    amount = format_amount(raw, decimals)
    # Truncate so the displayed minimum never exceeds the real one
    if 0 < amount < SCIENTIFIC_DISPLAY_THRESHOLD:
        step = Decimal(1).scaleb(amount.adjusted() - 4)
        return f"{amount.quantize(step, rounding=ROUND_DOWN):.4e}"
    if decimals > 6:
        amount = format_amount(raw - raw % 10 ** (decimals - 6), decimals)
    return f"{amount:.6f}"


def suggest_slippage(price_impact: Decimal) -> Decimal:
    """Advisory slippage tolerance for a given price impact."""
    if price_impact > 10:
        multiplier = Decimal("1.5")
    elif price_impact > 5:
        multiplier = Decimal("1.3")
    elif price_impact > 2:
        multiplier = Decimal("1.2")
    else:
        multiplier = Decimal("1.1")
    suggested = max(BASE_SUGGESTED_SLIPPAGE, price_impact * multiplier) + SLIPPAGE_SAFETY_BUFFER
    return min(suggested, MAX_SUGGESTED_SLIPPAGE)


class PriceImpactCalculator:
    """Turns a quote and a slippage tolerance into an ImpactAssessment."""

    def __init__(self, config: Optional[RoutingConfig] = None):
        self.config = config or get_config().routing
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def severity(self, price_impact: Decimal) -> ImpactSeverity:
        if price_impact > Decimal(str(self.config.PRICE_IMPACT_HIGH)):
            return ImpactSeverity.HIGH
        if price_impact > Decimal(str(self.config.PRICE_IMPACT_WARNING)):
            return ImpactSeverity.WARNING
        return ImpactSeverity.NONE

    def assess(self, quote: Quote, slippage: Any = None) -> ImpactAssessment:
        """
        Assess a quote.

        Args:
            quote: Quote to assess
            slippage: Tolerance in percent; defaults to DEFAULT_SLIPPAGE

        Returns:
            ImpactAssessment
        """
        slippage = Decimal(str(self.config.DEFAULT_SLIPPAGE if slippage is None else slippage))
        if not Decimal(0) <= slippage < Decimal(100):
            raise ValueError(f"Slippage must be within [0, 100), got {slippage}")

        price_impact = calculate_price_impact(quote.route, quote.amount_in, quote.amount_out)
        expected = expected_amount_out(quote.route, quote.amount_in)
        min_out = minimum_amount_out(quote.amount_out, slippage)
        severity = self.severity(price_impact)

        if severity is not ImpactSeverity.NONE:
            self.logger.warning(
                f"⚠️ Price impact {price_impact:.2f}% on {quote.route.describe()}",
                extra={"price_impact": str(price_impact), "severity": severity.value},
            )

        return ImpactAssessment(
            price_impact=price_impact,
            expected_amount_out=int(expected),
            min_amount_out=min_out,
            min_amount_out_display=format_min_amount(min_out, quote.token_out.decimals),
            suggested_slippage=suggest_slippage(price_impact) if price_impact > 0 else slippage,
            severity=severity,
            slippage_insufficient=price_impact > slippage * Decimal("0.8"),
        )
