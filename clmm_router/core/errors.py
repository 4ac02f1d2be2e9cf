"""
Error taxonomy for the routing engine.

Collaborators and engine components raise these exceptions; the public
RoutingEngine translates expected failures into QuoteResult values so that
callers never have to catch them for ordinary "no route" outcomes.
"""

from typing import Any, Optional


class QuoteError(Exception):
    """Base exception for quoting operations."""

    code = "quote_error"

    def __init__(self, message: str = ""):
        self.message = message or (self.__class__.__doc__ or "").strip()
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializable view of the error for logs and API responses."""
        return {"code": self.code, "message": self.message}


class NoLiquidPool(QuoteError):
    """No fee tier has a pool with usable liquidity."""

    code = "no_liquid_pool"


class NoRouteFound(QuoteError):
    """Path search finished without finding a route."""

    code = "no_route_found"


class SearchTimeout(QuoteError):
    """Path search exceeded its time bound."""

    code = "search_timeout"

    def __init__(self, message: str = "", timeout: Optional[float] = None):
        super().__init__(message or f"Route search timed out after {timeout}s")
        self.timeout = timeout


class ExtractionFailure(QuoteError):
    """Path search returned a result whose output amount could not be read."""

    code = "extraction_failure"

    def __init__(self, message: str = "", payload: Any = None):
        super().__init__(message)
        self.payload = payload


class InvalidAmount(QuoteError):
    """Amount is non-positive or cannot be parsed."""

    code = "invalid_amount"

    def __init__(self, message: str = "", value: Any = None):
        super().__init__(message or f"Invalid amount: {value!r}")
        self.value = value


class DataSourceUnavailable(QuoteError):
    """Pool data source failed or is unreachable."""

    code = "data_source_unavailable"

    def __init__(self, message: str = "", source: Optional[str] = None):
        super().__init__(message)
        self.source = source

    def to_dict(self) -> dict:
        return {**super().to_dict(), "source": self.source}


class UnsupportedSwapType(QuoteError):
    """Only exact-input swaps are supported."""

    code = "unsupported_swap_type"


class QuoteExecutionError(Exception):
    """Raised when a single-pool quote call reverts or fails."""

    code = "quote_execution_failed"

    def __init__(self, message: str, pool_address: Optional[str] = None, fee: Optional[int] = None):
        super().__init__(message)
        self.pool_address = pool_address
        self.fee = fee


class RouteValidationError(ValueError):
    """Raised when a Route violates its path invariants."""

    code = "invalid_route"
