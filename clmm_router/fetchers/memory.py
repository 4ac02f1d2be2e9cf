"""
In-memory pool data source.

Serves a fixed snapshot of Pool records. Useful for tests and for callers
that already hold a pool universe (for example one loaded from an indexer
export) and want to route over it without network access.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ..core.types import Pool, Token
from .base import PoolDataSource


class InMemoryPoolDataSource(PoolDataSource):
    """Pool data source backed by a list of pools."""

    name = "memory"

    def __init__(self, pools: Iterable[Pool] = ()):
        super().__init__()
        self._pools: Dict[str, Pool] = {}
        self._by_pair: Dict[Tuple[str, str, int], Pool] = {}
        self.call_counts: Dict[str, int] = {"get_pool": 0, "get_pools_for_token": 0}
        for pool in pools:
            self.upsert(pool)

    def upsert(self, pool: Pool) -> None:
        """Add a pool or replace the stored state of an existing one."""
        self._pools[pool.address] = pool
        self._by_pair[(pool.token0.address, pool.token1.address, pool.fee)] = pool

    @property
    def pools(self) -> List[Pool]:
        return list(self._pools.values())

    async def get_pool(self, token_a: Token, token_b: Token, fee: int) -> Optional[Pool]:
        self.call_counts["get_pool"] += 1
        low, high = sorted((token_a.address, token_b.address))
        return self._by_pair.get((low, high, fee))

    async def get_pools_for_token(self, token: Token, first: int = 200) -> List[Pool]:
        self.call_counts["get_pools_for_token"] += 1
        matching = [pool for pool in self._pools.values() if pool.contains(token)]
        # Liquidity stands in for TVL ordering
        matching.sort(key=lambda pool: pool.liquidity, reverse=True)
        self.logger.debug(f"Found {len(matching)} pools for {token.label}")
        return matching[:first]
