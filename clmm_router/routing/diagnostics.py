"""
Route failure diagnostics.

Runs after both quoting paths failed and explains why: loads the pools of
both tokens (liquid and dry), builds the token graph once and intersects the
neighbourhoods of the two tokens, over liquid edges and over every edge.
An ordered decision table turns the counts into a reason and up to three
suggestions. Diagnostics never raise; any failure yields the generic
"unable to diagnose" result.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import RoutingConfig, get_config
from ..core.graph import TokenGraph
from ..core.types import DiagnosticReason, Pool, RouteDiagnostic, Token
from ..fetchers.base import PoolDataSource

logger = logging.getLogger(__name__)

MAX_POSSIBLE_PATHS = 5
MAX_SUGGESTIONS = 3

DIRECT_POOL_REASON = "A direct pool exists but may have insufficient liquidity for this swap amount."
DIRECT_POOL_SUGGESTIONS = (
    "Try reducing the swap amount",
    "Wait for more liquidity to be added to the pool",
    "Check if the pool is active and has sufficient reserves",
)
NEITHER_LISTED_REASON = "Neither token has any active pools in the DEX."
NEITHER_LISTED_SUGGESTIONS = (
    "These tokens may not be listed on this DEX yet",
    "Check if you have the correct token addresses",
    "Consider creating a pool for these tokens if you have liquidity",
)
UNLISTED_SUGGESTIONS = (
    "This token may not be listed on the DEX",
    "Consider creating a pool for this token",
    "Try swapping through a different token pair",
)
NO_INTERMEDIATE_REASON = "No intermediate tokens found that connect these two tokens."
NO_INTERMEDIATE_SUGGESTIONS = (
    "These tokens may not share any common trading pairs",
    "Try swapping through a more liquid token",
    "Consider creating a pool that connects these tokens",
)
MULTIHOP_REASON = (
    "Multi-hop route exists but router could not find a valid path. "
    "This may be due to insufficient liquidity or routing constraints."
)
MULTIHOP_SUGGESTIONS = (
    "Try reducing the swap amount",
    "Try swapping through a more liquid intermediate token",
    "Check if all pools in the path have sufficient liquidity",
)
UNABLE_REASON = "Unable to diagnose route failure. Please check your connection and try again."
UNABLE_SUGGESTIONS = (
    "Check your internet connection",
    "Verify the token addresses are correct",
    "Try again in a few moments",
)


def unable_to_diagnose() -> RouteDiagnostic:
    """Generic result used when the pool data could not be loaded."""
    return RouteDiagnostic(
        has_direct_pool=False,
        pools_with_token_in=0,
        pools_with_token_out=0,
        pools_with_token_in_no_liquidity=0,
        pools_with_token_out_no_liquidity=0,
        intermediate_tokens=(),
        dry_intermediate_tokens=(),
        possible_paths=(),
        reason_code=DiagnosticReason.UNABLE_TO_DIAGNOSE,
        reason=UNABLE_REASON,
        suggestions=UNABLE_SUGGESTIONS,
    )


def _listing_order(tokens: Iterable[Token], pools: Sequence[Pool], anchor: Token) -> Tuple[Token, ...]:
    """Order tokens by where they first appear in anchor's pool listing."""
    rank = {}
    for index, pool in enumerate(pools):
        if pool.contains(anchor):
            rank.setdefault(pool.other(anchor), index)
    return tuple(sorted(tokens, key=lambda token: (rank.get(token, len(pools)), token.address)))


def _dry_connections(graph: TokenGraph, token_in: Token, token_out: Token, via: Sequence[Token]) -> List[str]:
    """Pair labels of the dry pools joining the ends through the given tokens."""
    pairs = []
    for token in via:
        for start, end in ((token_in, token), (token, token_out)):
            if any(not pool.is_liquid for pool in graph.pools_between(start, end, liquid_only=False)):
                label = f"{start.label}/{end.label}"
                if label not in pairs:
                    pairs.append(label)
    return pairs


def build_diagnostic(
    token_in: Token,
    token_out: Token,
    pools_in: Sequence[Pool],
    pools_out: Sequence[Pool],
    pair_pools: Sequence[Pool] = (),
) -> RouteDiagnostic:
    """
    Diagnose from already-loaded pool listings. Pure.

    Args:
        token_in: Input token
        token_out: Output token
        pools_in: Pools containing token_in, liquid and dry
        pools_out: Pools containing token_out, liquid and dry
        pair_pools: Pools directly joining the two tokens, if looked up separately
    """
    graph = TokenGraph.from_pools(list(pools_in) + list(pools_out) + list(pair_pools))

    has_direct_pool = bool(graph.pools_between(token_in, token_out))
    liquid_in = sum(1 for pool in pools_in if pool.is_liquid)
    liquid_out = sum(1 for pool in pools_out if pool.is_liquid)
    dry_in = len(pools_in) - liquid_in
    dry_out = len(pools_out) - liquid_out

    liquid_intermediates = graph.common_neighbors(token_in, token_out)
    dry_intermediates = graph.common_neighbors(token_in, token_out, include_dry=True) - liquid_intermediates
    intermediates = _listing_order(liquid_intermediates, pools_in, token_in)
    dry = _listing_order(dry_intermediates, pools_in, token_in)

    possible_paths = tuple(
        (token_in.label, token.label, token_out.label) for token in intermediates[:MAX_POSSIBLE_PATHS]
    )

    if has_direct_pool:
        code, reason, suggestions = (
            DiagnosticReason.DIRECT_POOL_INSUFFICIENT, DIRECT_POOL_REASON, DIRECT_POOL_SUGGESTIONS
        )
    elif liquid_in == 0 and liquid_out == 0:
        code, reason, suggestions = (
            DiagnosticReason.NEITHER_TOKEN_LISTED, NEITHER_LISTED_REASON, NEITHER_LISTED_SUGGESTIONS
        )
    elif liquid_in == 0:
        code, reason, suggestions = (
            DiagnosticReason.TOKEN_IN_UNLISTED,
            f"{token_in.label} has no active pools.",
            UNLISTED_SUGGESTIONS,
        )
    elif liquid_out == 0:
        code, reason, suggestions = (
            DiagnosticReason.TOKEN_OUT_UNLISTED,
            f"{token_out.label} has no active pools.",
            UNLISTED_SUGGESTIONS,
        )
    elif not intermediates and dry:
        via = ", ".join(token.label for token in dry[:MAX_SUGGESTIONS])
        pairs = ", ".join(_dry_connections(graph, token_in, token_out, dry[:MAX_SUGGESTIONS]))
        code = DiagnosticReason.DRY_INTERMEDIATES
        reason = (
            "No route found. Pools exist but have no liquidity. "
            f"Found {dry_in + dry_out} pool(s) without liquidity that could potentially connect these tokens."
        )
        suggestions = (
            f"Add liquidity to the pools connecting through {via} ({pairs})",
            "Wait for liquidity providers to add funds to these pools",
            "Try swapping through a different token pair that has active liquidity",
        )
    elif not intermediates:
        code, reason, suggestions = (
            DiagnosticReason.NO_INTERMEDIATE, NO_INTERMEDIATE_REASON, NO_INTERMEDIATE_SUGGESTIONS
        )
    else:
        code, reason, suggestions = (
            DiagnosticReason.MULTIHOP_UNRESOLVED, MULTIHOP_REASON, MULTIHOP_SUGGESTIONS
        )

    return RouteDiagnostic(
        has_direct_pool=has_direct_pool,
        pools_with_token_in=liquid_in,
        pools_with_token_out=liquid_out,
        pools_with_token_in_no_liquidity=dry_in,
        pools_with_token_out_no_liquidity=dry_out,
        intermediate_tokens=intermediates,
        dry_intermediate_tokens=dry,
        possible_paths=possible_paths,
        reason_code=code,
        reason=reason,
        suggestions=tuple(suggestions[:MAX_SUGGESTIONS]),
    )


class RouteDiagnostics:
    """Loads pool listings and explains missing routes."""

    def __init__(self, data_source: PoolDataSource, config: Optional[RoutingConfig] = None):
        self.data_source = data_source
        self.config = config or get_config().routing
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _load(self, token_in: Token, token_out: Token):
        page_size = self.config.DIAGNOSTICS_PAGE_SIZE
        return await asyncio.gather(
            self.data_source.get_pools_for_token(token_in, first=page_size),
            self.data_source.get_pools_for_token(token_out, first=page_size),
            self.data_source.get_pools_for_pair(token_in, token_out),
        )

    async def diagnose(self, token_in: Token, token_out: Token) -> RouteDiagnostic:
        """Explain why no route joins token_in and token_out. Never raises."""
        self.logger.info(f"🔍 Diagnosing route failure: {token_in.label} -> {token_out.label}")
        try:
            pools_in, pools_out, pair_pools = await asyncio.wait_for(
                self._load(token_in, token_out), timeout=self.config.DIAGNOSTICS_TIMEOUT
            )
            diagnostic = build_diagnostic(token_in, token_out, pools_in, pools_out, pair_pools)
        except Exception as e:
            self.logger.error(f"❌ Error diagnosing route failure: {type(e).__name__}: {e}")
            return unable_to_diagnose()

        self.logger.info(
            f"Diagnosis {diagnostic.reason_code.value}: direct={diagnostic.has_direct_pool}, "
            f"pools in={diagnostic.pools_with_token_in} (+{diagnostic.pools_with_token_in_no_liquidity} dry), "
            f"pools out={diagnostic.pools_with_token_out} (+{diagnostic.pools_with_token_out_no_liquidity} dry), "
            f"intermediates={[token.label for token in diagnostic.intermediate_tokens]}, "
            f"dry intermediates={[token.label for token in diagnostic.dry_intermediate_tokens]}",
            extra={"diagnostic": diagnostic.to_dict()},
        )
        return diagnostic
