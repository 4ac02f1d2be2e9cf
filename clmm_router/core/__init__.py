"""
Core domain layer: data model, error taxonomy and price/tick math.

This package performs no I/O.
"""

from .errors import (
    DataSourceUnavailable,
    ExtractionFailure,
    InvalidAmount,
    NoLiquidPool,
    NoRouteFound,
    QuoteError,
    QuoteExecutionError,
    RouteValidationError,
    SearchTimeout,
    UnsupportedSwapType,
)
from .graph import TokenGraph
from .types import (
    ZERO_ADDRESS,
    CacheOutcome,
    CacheSignature,
    DiagnosticReason,
    ExecutionParameters,
    FeeTier,
    ImpactAssessment,
    ImpactSeverity,
    Pool,
    Position,
    Quote,
    QuoteResult,
    RangeMismatch,
    RangeResult,
    Route,
    RouteCacheEntry,
    RouteDiagnostic,
    RouteKind,
    SwapOptions,
    SwapType,
    Token,
    format_amount,
    normalize_address,
    parse_amount,
)

__all__ = [
    "DataSourceUnavailable",
    "ExtractionFailure",
    "InvalidAmount",
    "NoLiquidPool",
    "NoRouteFound",
    "QuoteError",
    "QuoteExecutionError",
    "RouteValidationError",
    "SearchTimeout",
    "UnsupportedSwapType",
    "TokenGraph",
    "ZERO_ADDRESS",
    "CacheOutcome",
    "CacheSignature",
    "DiagnosticReason",
    "ExecutionParameters",
    "FeeTier",
    "ImpactAssessment",
    "ImpactSeverity",
    "Pool",
    "Position",
    "Quote",
    "QuoteResult",
    "RangeMismatch",
    "RangeResult",
    "Route",
    "RouteCacheEntry",
    "RouteDiagnostic",
    "RouteKind",
    "SwapOptions",
    "SwapType",
    "Token",
    "format_amount",
    "normalize_address",
    "parse_amount",
]
