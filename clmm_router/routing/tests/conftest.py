"""Test configuration for the routing engine."""
import asyncio
from types import SimpleNamespace

import pytest

from clmm_router.config import ChainConfig, RoutingConfig
from clmm_router.core.types import Pool, Route, SwapOptions, Token
from clmm_router.core.v3_math import Q96
from clmm_router.fetchers import (
    InMemoryPoolDataSource,
    PathSearchProvider,
    PathSearchResult,
    PoolStateQuoteExecutor,
)

NOW = 1_700_000_000
RECIPIENT = "0x" + "9" * 40


@pytest.fixture
def tokens():
    """Test tokens; x and y serve as intermediates."""
    return SimpleNamespace(
        a=Token("0x" + "1" * 40, "AAA", "Token A", 18),
        b=Token("0x" + "2" * 40, "BBB", "Token B", 6),
        c=Token("0x" + "3" * 40, "CCC", "Token C", 18),
        d=Token("0x" + "4" * 40, "DDD", "Token D", 8),
        x=Token("0x" + "5" * 40, "XXX", "Token X", 18),
        y=Token("0x" + "6" * 40, "YYY", "Token Y", 18),
        e=Token("0x" + "7" * 40, "EEE", "Token E", 18),
    )


@pytest.fixture
def make_pool():
    """Factory for pools priced at 1:1 raw."""
    def _make(suffix, token_a, token_b, fee=3000, liquidity=10**18, sqrt_price_x96=Q96):
        return Pool.create("0x" + suffix * 40, token_a, token_b, fee, liquidity, sqrt_price_x96, 0)
    return _make


@pytest.fixture
def routing_config():
    """Routing configuration with short timeouts."""
    return RoutingConfig(
        PATH_SEARCH_TIMEOUT=1.0,
        DIRECT_QUOTE_TIMEOUT=1.0,
        DIAGNOSTICS_TIMEOUT=1.0,
        ROUTE_CACHE_MAX_ENTRIES=4,
    )


@pytest.fixture
def chain_config():
    return ChainConfig()


@pytest.fixture
def options():
    """Swap options with a fixed deadline."""
    return SwapOptions.create(recipient=RECIPIENT, slippage="0.5", deadline_minutes=20, now=NOW)


class StaticPathSearch(PathSearchProvider):
    """Path search returning a canned payload and counting calls."""

    name = "static"

    def __init__(self, payload=None, delay=0.0):
        super().__init__()
        self.payload = payload
        self.delay = delay
        self.calls = 0

    async def search(self, token_in, token_out, amount_in, swap_type, options):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.payload


@pytest.fixture
def static_search():
    return StaticPathSearch


@pytest.fixture
def two_hop_universe(tokens, make_pool):
    """A and B joined only through C, with deep pools."""
    ac = make_pool("a", tokens.a, tokens.c, fee=500, liquidity=10**22)
    cb = make_pool("b", tokens.c, tokens.b, fee=500, liquidity=10**22)
    source = InMemoryPoolDataSource([ac, cb])
    route = Route.multi_hop(tokens.a, tokens.b, [ac, cb])
    return SimpleNamespace(source=source, executor=PoolStateQuoteExecutor(source), route=route)


@pytest.fixture
def two_hop_result(two_hop_universe):
    return PathSearchResult(route=two_hop_universe.route, amount_out=99 * 10**15, gas_estimate=220000)
