"""
Token adjacency graph over a pool universe.

Tokens are vertices; every pool is an edge between its two tokens. Edges are
kept twice: once for pools that can be traded through (liquid) and once for
every known pool, dry ones included. Built once per search or diagnosis.
"""

from collections import deque
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from .types import Pool, Token


class TokenGraph:
    """Adjacency structure token -> neighbouring tokens."""

    def __init__(self):
        self._tokens: Dict[str, Token] = {}
        self._liquid: Dict[str, Set[str]] = {}
        self._any: Dict[str, Set[str]] = {}
        self._edges: Dict[Tuple[str, str], List[Pool]] = {}
        self._seen: Set[str] = set()

    @classmethod
    def from_pools(cls, pools: Iterable[Pool]) -> "TokenGraph":
        graph = cls()
        for pool in pools:
            graph.add_pool(pool)
        return graph

    def add_pool(self, pool: Pool) -> None:
        """Add a pool edge. Adding the same pool twice is a no-op."""
        if pool.address in self._seen:
            return
        self._seen.add(pool.address)

        a, b = pool.token0.address, pool.token1.address
        self._tokens.setdefault(a, pool.token0)
        self._tokens.setdefault(b, pool.token1)
        self._any.setdefault(a, set()).add(b)
        self._any.setdefault(b, set()).add(a)
        self._edges.setdefault((a, b), []).append(pool)
        if pool.is_liquid:
            self._liquid.setdefault(a, set()).add(b)
            self._liquid.setdefault(b, set()).add(a)

    def __len__(self) -> int:
        return len(self._tokens)

    def token(self, address: str) -> Token:
        return self._tokens[address]

    def neighbors(self, token: Token, include_dry: bool = False) -> Set[Token]:
        """Tokens one pool away from token."""
        adjacency = self._any if include_dry else self._liquid
        return {self._tokens[address] for address in adjacency.get(token.address, ())}

    def common_neighbors(self, token_a: Token, token_b: Token, include_dry: bool = False) -> Set[Token]:
        """Tokens adjacent to both token_a and token_b, excluding the two themselves."""
        shared = self.neighbors(token_a, include_dry) & self.neighbors(token_b, include_dry)
        shared.discard(token_a)
        shared.discard(token_b)
        return shared

    def pools_between(self, token_a: Token, token_b: Token, liquid_only: bool = True) -> List[Pool]:
        """Pools joining two tokens, lowest fee first."""
        key = tuple(sorted((token_a.address, token_b.address)))
        pools = self._edges.get(key, [])
        if liquid_only:
            pools = [pool for pool in pools if pool.is_liquid]
        return sorted(pools, key=lambda pool: pool.fee)

    def simple_paths(self, start: Token, end: Token, max_hops: int) -> Iterator[Tuple[Token, ...]]:
        """
        Loop-free token paths from start to end over liquid edges.

        Breadth-first, so shorter paths are yielded before longer ones.
        Neighbours are visited in address order to keep results stable.
        """
        if start.address not in self._liquid or max_hops < 1:
            return
        queue = deque([(start.address,)])
        while queue:
            path = queue.popleft()
            for address in sorted(self._liquid.get(path[-1], ())):
                if address in path:
                    continue
                if address == end.address:
                    yield tuple(self._tokens[step] for step in path + (address,))
                elif len(path) < max_hops:
                    queue.append(path + (address,))
