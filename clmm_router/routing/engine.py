"""
Routing engine orchestrator.

Ties the components together for callers:

    quote -> route cache -> direct quoter -> path optimizer -> diagnostics

and exposes diagnose, assess_impact and is_position_in_range. quote() never
raises for expected failures; it returns a QuoteResult carrying either the
quote and execution parameters or the error (and a diagnostic when no route
exists).
"""

import logging
import time
from typing import Any, Optional

from ..config import ChainConfig, RoutingConfig, get_config
from ..core.errors import (
    DataSourceUnavailable,
    InvalidAmount,
    NoLiquidPool,
    NoRouteFound,
    QuoteError,
    UnsupportedSwapType,
)
from ..core.types import (
    CacheOutcome,
    CacheSignature,
    ImpactAssessment,
    Position,
    Quote,
    QuoteResult,
    RangeResult,
    RouteCacheEntry,
    RouteDiagnostic,
    SwapOptions,
    SwapType,
    Token,
    parse_amount,
)
from ..fetchers.base import PathSearchProvider, PoolDataSource, QuoteExecutor
from .diagnostics import RouteDiagnostics
from .direct_quoter import DirectQuoter
from .impact import PriceImpactCalculator, calculate_price_impact
from .path_optimizer import PathOptimizer
from .position_range import evaluate_position_range
from .route_cache import RouteCache


class RoutingEngine:
    """
    Swap routing engine over a pool data source, a single-pool quote executor
    and a multi-hop path search provider.

    Example:
        engine = RoutingEngine(data_source, executor, provider)
        result = await engine.quote(weth, usdc, "1.5")
        if result.success:
            print(result.quote.amount_out, result.execution.calldata)
        else:
            print(result.error.message, result.diagnostic.suggestions)
    """

    def __init__(
        self,
        data_source: PoolDataSource,
        executor: QuoteExecutor,
        path_search: PathSearchProvider,
        config: Optional[RoutingConfig] = None,
        chain_config: Optional[ChainConfig] = None,
        cache: Optional[RouteCache] = None,
    ):
        manager = None
        if config is None or chain_config is None:
            manager = get_config()
        self.config = config or manager.routing
        self.chain_config = chain_config or manager.chain

        self.direct_quoter = DirectQuoter(data_source, executor, self.config)
        self.path_optimizer = PathOptimizer(path_search, self.config, self.chain_config)
        self.diagnostics = RouteDiagnostics(data_source, self.config)
        self.impact_calculator = PriceImpactCalculator(self.config)
        self.cache = cache or RouteCache(self.config)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def default_options(self, now: Optional[float] = None) -> SwapOptions:
        return SwapOptions.create(
            slippage=str(self.config.DEFAULT_SLIPPAGE),
            deadline_minutes=self.config.DEFAULT_DEADLINE_MINUTES,
            now=now,
        )

    def _with_impact(self, entry: RouteCacheEntry) -> RouteCacheEntry:
        quote = entry.quote
        impact = calculate_price_impact(quote.route, quote.amount_in, quote.amount_out)
        quote = quote.with_price_impact(impact)
        return RouteCacheEntry(entry.signature, quote.route, quote, entry.execution)

    def _failure(self, error: QuoteError, diagnostic: Optional[RouteDiagnostic] = None, **metadata) -> QuoteResult:
        return QuoteResult(success=False, error=error, diagnostic=diagnostic, metadata=metadata)

    async def _resolve(self, token_in: Token, token_out: Token, amount_in: int, options: SwapOptions) -> RouteCacheEntry:
        """Direct quoter first, path optimizer on failure or approximation."""
        try:
            quote = await self.direct_quoter.quote(token_in, token_out, amount_in)
        except (NoLiquidPool, DataSourceUnavailable) as e:
            self.logger.info(f"Direct quote unavailable ({e.message}), escalating to path search")
            return await self.path_optimizer.find_route(token_in, token_out, amount_in, options)

        if quote.is_approximate and self.config.ESCALATE_APPROXIMATE_QUOTES:
            try:
                return await self.path_optimizer.find_route(token_in, token_out, amount_in, options)
            except QuoteError as e:
                self.logger.warning(f"⚠️ Path search after approximate quote failed ({e.code}), keeping estimate")
        return self.path_optimizer.build_entry(quote, options)

    async def quote(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: Any,
        options: Optional[SwapOptions] = None,
    ) -> QuoteResult:
        """
        Quote a swap of a human amount of token_in into token_out.

        Args:
            token_in: Input token
            token_out: Output token
            amount_in: Human amount ("1.5", Decimal or int)
            options: Recipient, slippage and deadline; config defaults when None

        Returns:
            QuoteResult
        """
        start = time.time()
        if token_in == token_out:
            return self._failure(QuoteError("Input and output tokens must differ"))
        try:
            raw_amount = parse_amount(amount_in, token_in.decimals)
        except InvalidAmount as e:
            self.logger.warning(f"⚠️ {e.message}")
            return self._failure(e)

        options = options or self.default_options()
        if options.swap_type is not SwapType.EXACT_INPUT:
            return self._failure(UnsupportedSwapType(f"{options.swap_type.value} swaps are not supported"))
        signature = CacheSignature.from_request(token_in, token_out, raw_amount, options)
        lookup = self.cache.lookup(signature)

        if lookup.outcome is CacheOutcome.EXACT_HIT:
            entry = lookup.entry
            return QuoteResult(
                success=True,
                quote=entry.quote,
                execution=entry.execution,
                cache_outcome=CacheOutcome.EXACT_HIT,
                metadata={"duration": time.time() - start},
            )

        if lookup.outcome is CacheOutcome.PARTIAL_HIT:
            entry = self.path_optimizer.regenerate(lookup.entry, options)
        else:
            try:
                entry = self._with_impact(await self._resolve(token_in, token_out, raw_amount, options))
            except (NoRouteFound, DataSourceUnavailable) as e:
                diagnostic = await self.diagnostics.diagnose(token_in, token_out)
                return self._failure(e, diagnostic, duration=time.time() - start)
            except QuoteError as e:
                self.logger.error(f"❌ Quote failed: {e.code}: {e.message}")
                return self._failure(e, duration=time.time() - start)

        self.cache.put(signature, entry)
        if entry.quote.is_approximate:
            self.logger.warning(f"⚠️ Returning approximate quote for {entry.route.describe()}")
        return QuoteResult(
            success=True,
            quote=entry.quote,
            execution=entry.execution,
            cache_outcome=lookup.outcome,
            metadata={"duration": time.time() - start, "source": entry.quote.source},
        )

    async def diagnose(self, token_in: Token, token_out: Token) -> RouteDiagnostic:
        return await self.diagnostics.diagnose(token_in, token_out)

    def is_quote_expired(self, quote: Quote, now: Optional[float] = None) -> bool:
        """True once a quote is older than QUOTE_TTL_SECONDS and should be refreshed."""
        now = time.time() if now is None else now
        return now - quote.quoted_at >= self.config.QUOTE_TTL_SECONDS

    def is_expired(self, entry: RouteCacheEntry, now: Optional[float] = None) -> bool:
        return entry.is_expired(now=now, ttl=self.config.QUOTE_TTL_SECONDS)

    def assess_impact(self, quote: Quote, slippage: Any = None) -> ImpactAssessment:
        return self.impact_calculator.assess(quote, slippage)

    def is_position_in_range(self, position: Position) -> RangeResult:
        return evaluate_position_range(position)
