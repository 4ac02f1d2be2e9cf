"""Test configuration for fetchers."""
from types import SimpleNamespace

import pytest

from clmm_router.config import RoutingConfig
from clmm_router.core.types import Pool, Token
from clmm_router.core.v3_math import Q96
from clmm_router.fetchers import InMemoryPoolDataSource, PoolStateQuoteExecutor


@pytest.fixture
def tokens():
    """Four test tokens with distinct decimals."""
    return SimpleNamespace(
        a=Token("0x" + "1" * 40, "AAA", "Token A", 18),
        b=Token("0x" + "2" * 40, "BBB", "Token B", 6),
        c=Token("0x" + "3" * 40, "CCC", "Token C", 18),
        d=Token("0x" + "4" * 40, "DDD", "Token D", 8),
    )


@pytest.fixture
def make_pool():
    """Factory for pools priced at 1:1 raw."""
    def _make(suffix, token_a, token_b, fee=3000, liquidity=10**18, sqrt_price_x96=Q96):
        return Pool.create("0x" + suffix * 40, token_a, token_b, fee, liquidity, sqrt_price_x96, 0)
    return _make


@pytest.fixture
def routing_config():
    """Routing configuration with test-friendly bounds."""
    return RoutingConfig(MAX_HOPS=3, MAX_CANDIDATE_PATHS=8, PATH_SEARCH_PAGE_SIZE=100)


@pytest.fixture
def shallow_direct_source(tokens, make_pool):
    """A/B direct pool is shallow; A/C and C/B are deep."""
    return InMemoryPoolDataSource([
        make_pool("a", tokens.a, tokens.b, liquidity=10**16),
        make_pool("b", tokens.a, tokens.c, fee=500, liquidity=10**21),
        make_pool("c", tokens.c, tokens.b, fee=500, liquidity=10**21),
    ])


@pytest.fixture
def pool_state_executor(shallow_direct_source):
    """Pool-state executor over the shallow-direct universe."""
    return PoolStateQuoteExecutor(shallow_direct_source)
