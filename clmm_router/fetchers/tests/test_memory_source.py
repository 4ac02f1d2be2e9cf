"""Tests for the in-memory pool data source."""
import pytest

from clmm_router.fetchers import InMemoryPoolDataSource


class TestInMemoryPoolDataSource:
    """Test cases for InMemoryPoolDataSource."""

    @pytest.mark.asyncio
    async def test_get_pool_either_order(self, tokens, make_pool):
        """Test pair lookup ignores token order."""
        pool = make_pool("a", tokens.b, tokens.a, fee=500)
        source = InMemoryPoolDataSource([pool])

        assert await source.get_pool(tokens.a, tokens.b, 500) == pool
        assert await source.get_pool(tokens.b, tokens.a, 500) == pool
        assert await source.get_pool(tokens.a, tokens.b, 3000) is None
        assert source.call_counts["get_pool"] == 3

    @pytest.mark.asyncio
    async def test_pools_for_token_ordered_and_limited(self, tokens, make_pool):
        """Test pools come back deepest first and respect the page size."""
        shallow = make_pool("a", tokens.a, tokens.b, liquidity=10)
        deep = make_pool("b", tokens.a, tokens.c, liquidity=10**20)
        dry = make_pool("c", tokens.a, tokens.d, liquidity=0)
        unrelated = make_pool("d", tokens.b, tokens.c)
        source = InMemoryPoolDataSource([shallow, deep, dry, unrelated])

        assert await source.get_pools_for_token(tokens.a) == [deep, shallow, dry]
        assert await source.get_pools_for_token(tokens.a, first=1) == [deep]

    @pytest.mark.asyncio
    async def test_get_pools_for_pair_across_tiers(self, tokens, make_pool):
        """Test the default pair lookup gathers every fee tier."""
        low = make_pool("a", tokens.a, tokens.b, fee=500)
        high = make_pool("b", tokens.a, tokens.b, fee=10000)
        source = InMemoryPoolDataSource([low, high])

        pools = await source.get_pools_for_pair(tokens.a, tokens.b)

        assert sorted(pools, key=lambda pool: pool.fee) == [low, high]
        assert source.call_counts["get_pool"] == 4

    @pytest.mark.asyncio
    async def test_upsert_replaces_state(self, tokens, make_pool):
        """Test upsert overwrites an existing pool's state."""
        source = InMemoryPoolDataSource([make_pool("a", tokens.a, tokens.b, liquidity=1)])
        source.upsert(make_pool("a", tokens.a, tokens.b, liquidity=0))

        pool = await source.get_pool(tokens.a, tokens.b, 3000)

        assert pool.liquidity == 0
        assert len(source.pools) == 1
        assert source.get_identifier() == "memory"
