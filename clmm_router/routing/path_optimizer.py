"""
Multi-hop route search with a time bound.

Wraps a PathSearchProvider: races the search against PATH_SEARCH_TIMEOUT,
reads the output amount out of whatever the provider returned and wraps the
result as a Quote plus ready-to-submit execution parameters.
"""

import asyncio
import logging
import time
from typing import Any, Mapping, Optional, Tuple

from ..config import ChainConfig, RoutingConfig, get_config
from ..core.errors import ExtractionFailure, NoRouteFound, SearchTimeout, UnsupportedSwapType
from ..core.types import (
    CacheSignature,
    Quote,
    Route,
    RouteCacheEntry,
    SwapOptions,
    SwapType,
    Token,
)
from ..fetchers.base import PathSearchProvider, PathSearchResult
from .calldata import build_execution_parameters

# Where router payloads have been seen to carry the output amount
AMOUNT_ACCESSORS: Tuple[Tuple[Any, ...], ...] = (
    ("amount_out",),
    ("quote",),
    ("trade", "quote"),
    ("trade", "outputAmount"),
    ("trade", "routes", 0, "quote"),
    ("trade", "routes", 0, "outputAmount"),
)
ROUTE_ACCESSORS: Tuple[Tuple[Any, ...], ...] = (
    ("route",),
    ("trade", "route"),
    ("trade", "routes", 0, "route"),
)
GAS_ACCESSORS: Tuple[Tuple[Any, ...], ...] = (
    ("gas_estimate",),
    ("estimatedGasUsed",),
    ("trade", "estimatedGasUsed"),
)


def _dig(payload: Any, path: Tuple[Any, ...]) -> Any:
    current = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, (list, tuple)) or len(current) <= key:
                return None
            current = current[key]
        elif isinstance(current, Mapping):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
        if current is None:
            return None
    return current


def _as_raw_amount(value: Any) -> Optional[int]:
    """Accept ints, decimal strings and objects exposing a raw 'quotient'."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0) if value.startswith("0x") else int(value)
        except ValueError:
            return None
    quotient = getattr(value, "quotient", None)
    if quotient is None and isinstance(value, Mapping):
        quotient = value.get("quotient")
    return _as_raw_amount(quotient) if quotient is not None else None


def extract_search_result(payload: Any) -> PathSearchResult:
    """
    Normalize a provider payload into a PathSearchResult.

    Raises:
        ExtractionFailure: If no usable route or output amount is found
    """
    if isinstance(payload, PathSearchResult):
        if _as_raw_amount(payload.amount_out) is None or payload.amount_out <= 0:
            raise ExtractionFailure("Route search result carries no usable output amount", payload=payload)
        return payload

    amount_out = None
    for path in AMOUNT_ACCESSORS:
        amount_out = _as_raw_amount(_dig(payload, path))
        if amount_out is not None:
            break
    route = None
    for path in ROUTE_ACCESSORS:
        candidate = _dig(payload, path)
        if isinstance(candidate, Route):
            route = candidate
            break
    gas = 0
    for path in GAS_ACCESSORS:
        value = _as_raw_amount(_dig(payload, path))
        if value is not None:
            gas = value
            break

    if amount_out is None or amount_out <= 0:
        raise ExtractionFailure("Route search result carries no usable output amount", payload=payload)
    if route is None:
        raise ExtractionFailure("Route search result carries no route", payload=payload)
    return PathSearchResult(route=route, amount_out=amount_out, gas_estimate=gas)


class PathOptimizer:
    """Time-bounded multi-hop search producing cache entries."""

    def __init__(
        self,
        provider: PathSearchProvider,
        config: Optional[RoutingConfig] = None,
        chain_config: Optional[ChainConfig] = None,
    ):
        manager = None
        if config is None or chain_config is None:
            manager = get_config()
        self.provider = provider
        self.config = config or manager.routing
        self.router_address = (chain_config or manager.chain).SWAP_ROUTER_02_ADDRESS
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def find_route(
        self, token_in: Token, token_out: Token, amount_in: int, options: SwapOptions
    ) -> RouteCacheEntry:
        """
        Search for the best route and build its execution parameters.

        Raises:
            UnsupportedSwapType: For anything but exact-input swaps
            SearchTimeout: If the search did not finish in time
            NoRouteFound: If the search finished without a route
            ExtractionFailure: If the search result could not be read
        """
        if options.swap_type is not SwapType.EXACT_INPUT:
            raise UnsupportedSwapType(f"{options.swap_type.value} swaps are not supported")

        timeout = self.config.PATH_SEARCH_TIMEOUT
        start = time.time()
        self.logger.info(
            f"🔍 Searching route {token_in.label} -> {token_out.label} for {amount_in} "
            f"via {self.provider.name} (max {self.config.MAX_HOPS} hops)"
        )
        try:
            payload = await asyncio.wait_for(
                self.provider.search(token_in, token_out, amount_in, options.swap_type, options),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.logger.error(f"❌ Route search timed out after {timeout}s")
            raise SearchTimeout(timeout=timeout)

        duration = time.time() - start
        if payload is None:
            self.logger.info(f"No route found in {duration:.2f}s")
            raise NoRouteFound(f"No route from {token_in.label} to {token_out.label}")

        try:
            result = extract_search_result(payload)
        except ExtractionFailure as e:
            self.logger.error(f"❌ Extraction failed: {e.message}", extra={"payload": repr(payload)[:500]})
            raise

        if result.route.token_in != token_in or result.route.token_out != token_out:
            raise ExtractionFailure("Route search returned a route for a different pair", payload=payload)

        quote = Quote.from_route(
            result.route, amount_in, result.amount_out, result.gas_estimate, source=self.provider.name
        )
        self.logger.info(
            f"✅ Route {result.route.describe()} -> {result.amount_out} in {duration:.2f}s"
        )
        return self.build_entry(quote, options)

    def build_entry(self, quote: Quote, options: SwapOptions) -> RouteCacheEntry:
        signature = CacheSignature.from_request(quote.token_in, quote.token_out, quote.amount_in, options)
        execution = build_execution_parameters(quote, options, self.router_address)
        return RouteCacheEntry(signature=signature, route=quote.route, quote=quote, execution=execution)

    def regenerate(self, entry: RouteCacheEntry, options: SwapOptions) -> RouteCacheEntry:
        """Fresh execution parameters for a cached path under new options. No search."""
        self.logger.debug(f"Regenerating execution parameters for {entry.route.describe()}")
        return self.build_entry(entry.quote, options)

