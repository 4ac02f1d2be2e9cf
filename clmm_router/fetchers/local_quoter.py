"""
Pool-state quote executor.

Simulates an exact-input swap against a pool's current in-range liquidity
with exact integer math, the way a single SwapMath step does on-chain. Used
when no quoter contract is reachable and as the hop quoter of the graph
path search.
"""

from ..core.errors import QuoteExecutionError
from ..core.types import Token
from ..core.v3_math import (
    FEE_DENOMINATOR,
    MAX_SQRT_RATIO,
    MIN_SQRT_RATIO,
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
)
from .base import PoolDataSource, QuoteExecutor, SingleQuote

# Rough cost of a single-pool swap that crosses no initialized tick
SINGLE_HOP_GAS = 110000


class PoolStateQuoteExecutor(QuoteExecutor):
    """
    Quote executor that reads pool state from a PoolDataSource.

    The simulation assumes the trade stays inside the current liquidity
    range, so large trades are quoted pessimistically rather than crossing
    into neighbouring ticks.
    """

    name = "pool_state"

    def __init__(self, data_source: PoolDataSource, gas_estimate: int = SINGLE_HOP_GAS):
        super().__init__()
        self.data_source = data_source
        self.gas_estimate = gas_estimate

    async def quote_exact_input_single(
        self, token_in: Token, token_out: Token, amount_in: int, fee: int
    ) -> SingleQuote:
        pool = await self.data_source.get_pool(token_in, token_out, fee)
        if pool is None:
            raise QuoteExecutionError(f"No pool for {token_in.label}/{token_out.label} fee {fee}", fee=fee)
        if not pool.is_liquid:
            raise QuoteExecutionError(
                f"Pool {pool.address} has no liquidity", pool_address=pool.address, fee=fee
            )
        if amount_in <= 0:
            raise QuoteExecutionError("Amount must be positive", pool_address=pool.address, fee=fee)

        zero_for_one = pool.zero_for_one(token_in)
        amount_less_fee = amount_in * (FEE_DENOMINATOR - fee) // FEE_DENOMINATOR
        sqrt_after = get_next_sqrt_price_from_input(
            pool.sqrt_price_x96, pool.liquidity, amount_less_fee, zero_for_one
        )

        if not MIN_SQRT_RATIO < sqrt_after < MAX_SQRT_RATIO:
            raise QuoteExecutionError(
                f"Swap of {amount_in} exhausts pool {pool.address} liquidity",
                pool_address=pool.address,
                fee=fee,
            )

        if zero_for_one:
            amount_out = get_amount1_delta(
                sqrt_ratio_a_x96=sqrt_after,
                sqrt_ratio_b_x96=pool.sqrt_price_x96,
                liquidity=pool.liquidity,
                round_up=False,
            )
        else:
            amount_out = get_amount0_delta(
                sqrt_ratio_a_x96=pool.sqrt_price_x96,
                sqrt_ratio_b_x96=sqrt_after,
                liquidity=pool.liquidity,
                round_up=False,
            )

        if amount_out <= 0:
            raise QuoteExecutionError(
                f"Swap of {amount_in} through {pool.address} rounds to zero output",
                pool_address=pool.address,
                fee=fee,
            )

        self.logger.debug(
            f"Simulated {amount_in} {token_in.label} -> {amount_out} {token_out.label} "
            f"in pool {pool.address}"
        )
        return SingleQuote(
            amount_out=amount_out,
            gas_estimate=self.gas_estimate,
            sqrt_price_x96_after=sqrt_after,
            initialized_ticks_crossed=0,
        )
