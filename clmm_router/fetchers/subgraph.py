"""
Subgraph pool data source.

Reads pool state from a Uniswap V3 compatible subgraph over GraphQL using
aiohttp. Pools whose liquidity is missing or zero are returned as dry pools;
the engine decides what to do with them.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from ..core.errors import DataSourceUnavailable
from ..core.types import Pool, Token
from .base import PoolDataSource

POOL_FIELDS = """
    id
    token0 { id symbol name decimals }
    token1 { id symbol name decimals }
    feeTier
    liquidity
    sqrtPrice
    tick
"""

POOL_BY_PAIR_AND_FEE_QUERY = f"""
query PoolByPairAndFee($token0: Bytes!, $token1: Bytes!, $fee: BigInt!) {{
  pools(where: {{ token0: $token0, token1: $token1, feeTier: $fee }}, first: 1) {{
    {POOL_FIELDS}
  }}
}}
"""

POOLS_BY_PAIR_QUERY = f"""
query PoolsByPair($token0: Bytes!, $token1: Bytes!) {{
  pools(where: {{ token0: $token0, token1: $token1 }}, first: 10) {{
    {POOL_FIELDS}
  }}
}}
"""

POOLS_WITH_TOKEN_QUERY = f"""
query PoolsWithToken($token: Bytes!, $first: Int!) {{
  pools(
    where: {{ or: [{{ token0: $token }}, {{ token1: $token }}] }}
    first: $first
    orderBy: totalValueLockedUSD
    orderDirection: desc
  ) {{
    {POOL_FIELDS}
  }}
}}
"""


def _parse_token(data: Dict[str, Any]) -> Token:
    decimals = data.get("decimals")
    return Token(
        address=data["id"],
        symbol=data.get("symbol") or "",
        name=data.get("name") or "",
        decimals=int(decimals) if decimals not in (None, "") else 18,
    )


def parse_pool(data: Dict[str, Any]) -> Pool:
    """
    Build a Pool from a subgraph pool record.

    Raises:
        KeyError, TypeError, ValueError: If the record is malformed
    """
    return Pool.create(
        address=data["id"],
        token_a=_parse_token(data["token0"]),
        token_b=_parse_token(data["token1"]),
        fee=int(data["feeTier"]),
        liquidity=int(data.get("liquidity") or 0),
        sqrt_price_x96=int(data.get("sqrtPrice") or 0),
        tick=int(data.get("tick") or 0),
    )


class SubgraphPoolDataSource(PoolDataSource):
    """Pool data source backed by a GraphQL subgraph endpoint."""

    name = "subgraph"

    def __init__(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize the subgraph data source.

        Args:
            url: GraphQL endpoint
            headers: Extra HTTP headers, e.g. a bearer token
            timeout: Total request timeout in seconds
        """
        super().__init__()
        self.url = url
        self.headers = headers or {"Content-Type": "application/json"}
        self.timeout = timeout

    @classmethod
    def from_config(cls, chain_config) -> "SubgraphPoolDataSource":
        """Build from a ChainConfig."""
        return cls(
            chain_config.SUBGRAPH_URL,
            headers=chain_config.subgraph_headers,
            timeout=chain_config.SUBGRAPH_TIMEOUT,
        )

    async def _query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a GraphQL query.

        Returns:
            The "data" object of the response

        Raises:
            DataSourceUnavailable: On HTTP, transport or GraphQL errors
        """
        try:
            async with aiohttp.ClientSession(headers=self.headers) as session:
                async with session.post(
                    self.url,
                    json={"query": query, "variables": variables},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise DataSourceUnavailable(
                            f"Subgraph returned HTTP {response.status}", source=self.name
                        )
                    payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"❌ Subgraph request failed: {e}")
            raise DataSourceUnavailable(f"Subgraph request failed: {e}", source=self.name)

        if not isinstance(payload, dict):
            raise DataSourceUnavailable("Subgraph returned a non-object payload", source=self.name)
        if payload.get("errors"):
            messages = "; ".join(str(error.get("message", error)) for error in payload["errors"])
            raise DataSourceUnavailable(f"Subgraph query error: {messages}", source=self.name)
        return payload.get("data") or {}

    def _parse_pools(self, records: Iterable[Dict[str, Any]]) -> List[Pool]:
        pools = []
        for record in records or []:
            try:
                pools.append(parse_pool(record))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"⚠️ Skipping malformed pool record {record.get('id')}: {e}")
        return pools

    async def get_pool(self, token_a: Token, token_b: Token, fee: int) -> Optional[Pool]:
        token0, token1 = sorted((token_a.address, token_b.address))
        data = await self._query(
            POOL_BY_PAIR_AND_FEE_QUERY, {"token0": token0, "token1": token1, "fee": str(fee)}
        )
        pools = self._parse_pools(data.get("pools"))
        return pools[0] if pools else None

    async def get_pools_for_pair(
        self, token_a: Token, token_b: Token, fees: Optional[Iterable[int]] = None
    ) -> List[Pool]:
        token0, token1 = sorted((token_a.address, token_b.address))
        data = await self._query(POOLS_BY_PAIR_QUERY, {"token0": token0, "token1": token1})
        pools = self._parse_pools(data.get("pools"))
        if fees is not None:
            allowed = set(fees)
            pools = [pool for pool in pools if pool.fee in allowed]
        return pools

    async def get_pools_for_token(self, token: Token, first: int = 200) -> List[Pool]:
        data = await self._query(POOLS_WITH_TOKEN_QUERY, {"token": token.address, "first": first})
        pools = self._parse_pools(data.get("pools"))
        liquid = sum(1 for pool in pools if pool.is_liquid)
        self.logger.debug(
            f"Fetched {len(pools)} pools for {token.label} ({liquid} liquid, {len(pools) - liquid} dry)"
        )
        return pools
