"""
Route cache with a two-tier reuse policy.

Entries are keyed by the part of the request that fixes the path topology
(token pair and exact input amount). A lookup then classifies the request:

- EXACT_HIT: recipient identical, deadline and slippage within tolerance;
  the cached execution parameters can be replayed verbatim.
- PARTIAL_HIT: same tokens and amount, other parameters differ; the cached
  path is reused but execution parameters must be regenerated.
- MISS: nothing usable, a full quote is required.

Entries are immutable and replaced wholesale, last writer wins. The cache is
bounded with LRU eviction and never evicts by age.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import RoutingConfig, get_config
from ..core.types import CacheOutcome, CacheSignature, RouteCacheEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheLookup:
    """Outcome of a cache lookup and the entry it refers to, if any."""
    outcome: CacheOutcome
    entry: Optional[RouteCacheEntry] = None

    @property
    def hit(self) -> bool:
        return self.outcome is not CacheOutcome.MISS


class RouteCache:
    """Bounded in-memory store of resolved routes."""

    def __init__(self, config: Optional[RoutingConfig] = None):
        config = config or get_config().routing
        self.max_entries = config.ROUTE_CACHE_MAX_ENTRIES
        self.deadline_tolerance = config.DEADLINE_REUSE_TOLERANCE
        self.slippage_tolerance_bps = config.SLIPPAGE_REUSE_TOLERANCE_BPS
        self._entries: "OrderedDict[Tuple[str, str, int], RouteCacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.stats = {outcome: 0 for outcome in CacheOutcome}

    def __len__(self) -> int:
        return len(self._entries)

    def classify(self, signature: CacheSignature, entry: Optional[RouteCacheEntry]) -> CacheOutcome:
        """Decide how an entry can serve a request signature."""
        if entry is None or entry.signature.route_key != signature.route_key:
            return CacheOutcome.MISS
        cached = entry.signature
        if (
            cached.recipient == signature.recipient
            and abs(cached.deadline - signature.deadline) < self.deadline_tolerance
            and abs(cached.slippage_bps - signature.slippage_bps) < self.slippage_tolerance_bps
        ):
            return CacheOutcome.EXACT_HIT
        return CacheOutcome.PARTIAL_HIT

    def lookup(self, signature: CacheSignature) -> CacheLookup:
        """Classify a request against the cache."""
        with self._lock:
            entry = self._entries.get(signature.route_key)
            if entry is not None:
                self._entries.move_to_end(signature.route_key, last=True)
        outcome = self.classify(signature, entry)
        self.stats[outcome] += 1
        logger.info(
            f"Route cache {outcome.value} for {signature.token_in[:10]}->{signature.token_out[:10]} "
            f"amount {signature.amount_in}"
        )
        if outcome is CacheOutcome.MISS:
            return CacheLookup(outcome)
        return CacheLookup(outcome, entry)

    def get(self, signature: CacheSignature) -> Optional[RouteCacheEntry]:
        """Entry whose execution parameters can be reused verbatim, or None."""
        result = self.lookup(signature)
        return result.entry if result.outcome is CacheOutcome.EXACT_HIT else None

    def put(self, signature: CacheSignature, entry: RouteCacheEntry) -> None:
        """Store an entry, replacing any entry for the same token pair and amount."""
        if entry.signature != signature:
            raise ValueError("Cache entry signature does not match the key it is stored under")
        with self._lock:
            self._entries[signature.route_key] = entry
            self._entries.move_to_end(signature.route_key, last=True)
            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted route cache entry {evicted_key}")

    def invalidate(self, signature: CacheSignature) -> bool:
        """Drop the entry for a signature's token pair and amount."""
        with self._lock:
            return self._entries.pop(signature.route_key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
