"""
Routing engine components.
"""

from .calldata import build_execution_parameters, encode_path
from .diagnostics import RouteDiagnostics, build_diagnostic
from .direct_quoter import DirectQuoter
from .engine import RoutingEngine
from .impact import (
    PriceImpactCalculator,
    calculate_price_impact,
    minimum_amount_out,
    suggest_slippage,
)
from .path_optimizer import PathOptimizer, extract_search_result
from .position_range import evaluate_position_range, is_position_in_range
from .route_cache import CacheLookup, RouteCache

__all__ = [
    "build_execution_parameters",
    "encode_path",
    "RouteDiagnostics",
    "build_diagnostic",
    "DirectQuoter",
    "RoutingEngine",
    "PriceImpactCalculator",
    "calculate_price_impact",
    "minimum_amount_out",
    "suggest_slippage",
    "PathOptimizer",
    "extract_search_result",
    "evaluate_position_range",
    "is_position_in_range",
    "CacheLookup",
    "RouteCache",
]
