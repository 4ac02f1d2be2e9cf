"""Tests for the pool-state quote executor."""
import pytest

from clmm_router.core.errors import QuoteExecutionError
from clmm_router.fetchers import InMemoryPoolDataSource, PoolStateQuoteExecutor
from clmm_router.fetchers.local_quoter import SINGLE_HOP_GAS


class TestPoolStateQuoteExecutor:
    """Test cases for single-step swap simulation."""

    @pytest.mark.asyncio
    async def test_small_swap_close_to_spot_less_fee(self, tokens, make_pool):
        """Test a tiny trade in a deep pool returns about amount * (1 - fee)."""
        source = InMemoryPoolDataSource([make_pool("a", tokens.a, tokens.c, liquidity=10**24)])
        executor = PoolStateQuoteExecutor(source)

        result = await executor.quote_exact_input_single(tokens.a, tokens.c, 10**18, 3000)

        expected = 10**18 * 997 // 1000
        assert expected * 999 // 1000 < result.amount_out <= expected
        assert result.gas_estimate == SINGLE_HOP_GAS

    @pytest.mark.asyncio
    async def test_both_directions(self, tokens, make_pool):
        """Test token0->token1 and token1->token0 both produce output."""
        source = InMemoryPoolDataSource([make_pool("a", tokens.a, tokens.c, liquidity=10**20)])
        executor = PoolStateQuoteExecutor(source)

        forward = await executor.quote_exact_input_single(tokens.a, tokens.c, 10**17, 3000)
        backward = await executor.quote_exact_input_single(tokens.c, tokens.a, 10**17, 3000)

        assert forward.amount_out > 0
        assert backward.amount_out > 0
        assert forward.sqrt_price_x96_after < backward.sqrt_price_x96_after

    @pytest.mark.asyncio
    async def test_large_swap_has_slippage(self, tokens, make_pool):
        """Test a trade of 10% of liquidity loses about 9% to price movement."""
        source = InMemoryPoolDataSource([make_pool("a", tokens.a, tokens.c, fee=100, liquidity=10**18)])
        executor = PoolStateQuoteExecutor(source)

        result = await executor.quote_exact_input_single(tokens.a, tokens.c, 10**17, 100)

        assert 0.90 * 10**17 < result.amount_out < 0.92 * 10**17

    @pytest.mark.asyncio
    async def test_missing_pool(self, tokens):
        """Test missing pools raise QuoteExecutionError."""
        executor = PoolStateQuoteExecutor(InMemoryPoolDataSource())
        with pytest.raises(QuoteExecutionError, match="No pool"):
            await executor.quote_exact_input_single(tokens.a, tokens.b, 10**18, 3000)

    @pytest.mark.asyncio
    async def test_dry_pool(self, tokens, make_pool):
        """Test zero-liquidity pools raise QuoteExecutionError."""
        source = InMemoryPoolDataSource([make_pool("a", tokens.a, tokens.b, liquidity=0)])
        executor = PoolStateQuoteExecutor(source)
        with pytest.raises(QuoteExecutionError, match="no liquidity") as exc_info:
            await executor.quote_exact_input_single(tokens.a, tokens.b, 10**18, 3000)
        assert exc_info.value.fee == 3000

    @pytest.mark.asyncio
    async def test_zero_output(self, tokens, make_pool):
        """Test dust input that rounds to zero output is rejected."""
        source = InMemoryPoolDataSource([make_pool("a", tokens.a, tokens.b)])
        executor = PoolStateQuoteExecutor(source)
        with pytest.raises(QuoteExecutionError, match="zero output"):
            await executor.quote_exact_input_single(tokens.a, tokens.b, 1, 3000)
