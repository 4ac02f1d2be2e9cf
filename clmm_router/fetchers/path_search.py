"""
Graph-based multi-hop path search.

Default PathSearchProvider: loads the pools around the two tokens, builds the
liquid token graph, enumerates loop-free paths shortest first and quotes each
candidate hop by hop through a single-pool QuoteExecutor. The candidate with
the largest output wins.
"""

import asyncio
import time
from typing import List, Optional, Tuple

from ..config import RoutingConfig, get_config
from ..core.errors import QuoteExecutionError
from ..core.graph import TokenGraph
from ..core.types import Pool, Route, SwapOptions, SwapType, Token
from .base import PathSearchProvider, PathSearchResult, PoolDataSource, QuoteExecutor

# Liquid neighbours of token_in whose pools are loaded for 3-hop paths
NEIGHBOR_EXPANSION_LIMIT = 10


class GraphPathSearchProvider(PathSearchProvider):
    """Multi-hop search over pools supplied by a PoolDataSource."""

    name = "graph_search"

    def __init__(
        self,
        data_source: PoolDataSource,
        executor: QuoteExecutor,
        config: Optional[RoutingConfig] = None,
    ):
        super().__init__()
        self.data_source = data_source
        self.executor = executor
        self.config = config or get_config().routing
        self.search_count = 0

    async def _load_graph(self, token_in: Token, token_out: Token) -> TokenGraph:
        page_size = self.config.PATH_SEARCH_PAGE_SIZE
        pools_in, pools_out = await asyncio.gather(
            self.data_source.get_pools_for_token(token_in, first=page_size),
            self.data_source.get_pools_for_token(token_out, first=page_size),
        )
        graph = TokenGraph.from_pools(pools_in + pools_out)

        if self.config.MAX_HOPS >= 3:
            # in -> A -> B -> out needs the A/B pools, which neither listing contains
            neighbors = [
                token for token in graph.neighbors(token_in) if token != token_out
            ]
            neighbors.sort(key=lambda token: token.address)
            expansions = await asyncio.gather(
                *(
                    self.data_source.get_pools_for_token(token, first=page_size)
                    for token in neighbors[:NEIGHBOR_EXPANSION_LIMIT]
                )
            )
            for pools in expansions:
                for pool in pools:
                    graph.add_pool(pool)

        return graph

    async def _quote_hop(
        self, pools: List[Pool], token_in: Token, token_out: Token, amount_in: int
    ) -> Optional[Tuple[Pool, int, int]]:
        """Best (pool, amount_out, gas) across the pools joining one hop."""
        best = None
        for pool in pools:
            try:
                result = await self.executor.quote_exact_input_single(
                    token_in, token_out, amount_in, pool.fee
                )
            except QuoteExecutionError as e:
                self.logger.debug(f"Hop {token_in.label}->{token_out.label} fee {pool.fee} failed: {e}")
                continue
            if best is None or result.amount_out > best[1]:
                best = (pool, result.amount_out, result.gas_estimate)
        return best

    async def _quote_path(
        self, graph: TokenGraph, path: Tuple[Token, ...], amount_in: int
    ) -> Optional[PathSearchResult]:
        amount = amount_in
        gas = 0
        chosen: List[Pool] = []
        for hop_in, hop_out in zip(path, path[1:]):
            best = await self._quote_hop(graph.pools_between(hop_in, hop_out), hop_in, hop_out, amount)
            if best is None:
                return None
            pool, amount, hop_gas = best
            chosen.append(pool)
            gas += hop_gas

        if len(chosen) == 1:
            route = Route.direct(path[0], path[-1], chosen[0])
        else:
            route = Route.multi_hop(path[0], path[-1], chosen)
        return PathSearchResult(route=route, amount_out=amount, gas_estimate=gas)

    async def search(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        swap_type: SwapType,
        options: SwapOptions,
    ) -> Optional[PathSearchResult]:
        self.search_count += 1
        start = time.time()

        graph = await self._load_graph(token_in, token_out)
        candidates = []
        for path in graph.simple_paths(token_in, token_out, self.config.MAX_HOPS):
            candidates.append(path)
            if len(candidates) >= self.config.MAX_CANDIDATE_PATHS:
                break

        self.logger.info(
            f"🔍 {len(candidates)} candidate paths {token_in.label} -> {token_out.label} "
            f"over {len(graph)} tokens"
        )
        if not candidates:
            return None

        results = await asyncio.gather(
            *(self._quote_path(graph, path, amount_in) for path in candidates)
        )
        quoted = [result for result in results if result is not None]
        if not quoted:
            return None

        best = max(quoted, key=lambda result: (result.amount_out, -result.route.hops))
        self.logger.info(
            f"✅ Best path {best.route.describe()} -> {best.amount_out} "
            f"({time.time() - start:.2f}s)"
        )
        return best
