"""
Direct (single-pool) quoting across fee tiers.

Fee tiers are tried in priority order, lowest fee first. The first exact
quote wins. When the quote call fails for a pool that exists and holds
liquidity, an optimistic spot-price estimate is remembered and the remaining
tiers are still tried; the estimate is only returned, flagged approximate,
if no tier produces an exact quote.
"""

import asyncio
import logging
from typing import Optional

from ..config import RoutingConfig, get_config
from ..core.errors import DataSourceUnavailable, NoLiquidPool, QuoteExecutionError
from ..core.types import Quote, Route, Token
from ..core.v3_math import estimate_amount_out
from ..fetchers.base import PoolDataSource, QuoteExecutor


class DirectQuoter:
    """Single-pool quoter over a pool data source and a quote executor."""

    def __init__(
        self,
        data_source: PoolDataSource,
        executor: QuoteExecutor,
        config: Optional[RoutingConfig] = None,
    ):
        self.data_source = data_source
        self.executor = executor
        self.config = config or get_config().routing
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _fetch_pool(self, token_in: Token, token_out: Token, fee: int):
        try:
            return await asyncio.wait_for(
                self.data_source.get_pool(token_in, token_out, fee),
                timeout=self.config.DIRECT_QUOTE_TIMEOUT,
            )
        except asyncio.TimeoutError:
            raise DataSourceUnavailable(
                f"Pool lookup timed out after {self.config.DIRECT_QUOTE_TIMEOUT}s",
                source=self.data_source.get_identifier(),
            )

    async def quote(self, token_in: Token, token_out: Token, amount_in: int) -> Quote:
        """
        Quote amount_in of token_in through the best single pool.

        Returns:
            Exact DIRECT quote, or an APPROXIMATE estimate when every quote
            call for an existing liquid pool failed

        Raises:
            NoLiquidPool: If no fee tier has a pool with liquidity
            DataSourceUnavailable: If the pool lookup failed for every fee tier
        """
        estimate = None
        lookup_errors = []

        for fee in self.config.FEE_TIERS:
            try:
                pool = await self._fetch_pool(token_in, token_out, fee)
            except DataSourceUnavailable as e:
                self.logger.warning(f"⚠️ Pool lookup failed for fee {fee}: {e.message}")
                lookup_errors.append(e)
                continue
            if pool is None:
                self.logger.debug(f"No {fee} pool for {token_in.label}/{token_out.label}")
                continue
            if not pool.is_liquid:
                self.logger.debug(f"Pool {pool.address} (fee {fee}) has no liquidity, skipping")
                continue

            try:
                result = await asyncio.wait_for(
                    self.executor.quote_exact_input_single(token_in, token_out, amount_in, fee),
                    timeout=self.config.DIRECT_QUOTE_TIMEOUT,
                )
            except (QuoteExecutionError, asyncio.TimeoutError) as e:
                self.logger.info(f"Quote failed for fee {fee} in pool {pool.address}: {e}")
                if estimate is None:
                    amount_out = estimate_amount_out(
                        amount_in, pool.sqrt_price_x96, fee, pool.zero_for_one(token_in)
                    )
                    if amount_out > 0:
                        estimate = Quote.from_route(
                            Route.approximate(token_in, token_out, pool),
                            amount_in,
                            amount_out,
                            self.config.FALLBACK_GAS_ESTIMATE,
                            source="spot_estimate",
                        )
                continue

            self.logger.info(
                f"✅ Direct quote {token_in.label}->{token_out.label} fee {fee}: "
                f"{amount_in} -> {result.amount_out}"
            )
            return Quote.from_route(
                Route.direct(token_in, token_out, pool),
                amount_in,
                result.amount_out,
                result.gas_estimate,
                source=self.executor.name,
            )

        if estimate is not None:
            self.logger.warning(
                f"⚠️ Using spot-price estimate for {token_in.label}->{token_out.label} "
                f"(fee {estimate.fee_tier}); price impact not accounted for"
            )
            return estimate

        if len(lookup_errors) == len(self.config.FEE_TIERS):
            raise lookup_errors[-1]
        raise NoLiquidPool(
            f"No liquid pool for {token_in.label}/{token_out.label} in fee tiers {list(self.config.FEE_TIERS)}"
        )
