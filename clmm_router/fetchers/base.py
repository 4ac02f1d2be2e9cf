"""
Base classes for the routing engine's external collaborators.

The engine never talks to a chain or an indexer directly. Pool state, single
pool quotes and multi-hop searches come from implementations of the
interfaces below.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union
import logging

from ..core.types import Pool, Route, SwapOptions, SwapType, Token
from ..core.v3_math import FEE_TICK_SPACING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SingleQuote:
    """Output of a single-pool exact-input quote."""
    amount_out: int
    gas_estimate: int
    sqrt_price_x96_after: int = 0
    initialized_ticks_crossed: int = 0


@dataclass(frozen=True)
class PathSearchResult:
    """Route found by a multi-hop search provider."""
    route: Route
    amount_out: int
    gas_estimate: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


class PoolDataSource(ABC):
    """
    Abstract source of live pool records.

    Implementations may be backed by an indexer or by direct chain reads and
    are allowed to return stale or partial data.
    """

    name = "pool_data_source"

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def get_pool(self, token_a: Token, token_b: Token, fee: int) -> Optional[Pool]:
        """
        Get the pool for a pair and fee tier.

        Args:
            token_a: Either token of the pair
            token_b: The other token
            fee: Fee tier in hundredths of a bip

        Returns:
            Pool, or None when no pool is deployed

        Raises:
            DataSourceUnavailable: If the backing service fails
        """
        pass

    @abstractmethod
    async def get_pools_for_token(self, token: Token, first: int = 200) -> List[Pool]:
        """
        Get pools containing a token, liquid and dry, largest first.

        Args:
            token: Token to look up
            first: Maximum number of pools to return

        Returns:
            List of pools

        Raises:
            DataSourceUnavailable: If the backing service fails
        """
        pass

    async def get_pools_for_pair(
        self, token_a: Token, token_b: Token, fees: Optional[Iterable[int]] = None
    ) -> List[Pool]:
        """Get every deployed pool joining two tokens, across fee tiers."""
        fees = list(fees) if fees is not None else list(FEE_TICK_SPACING)
        pools = await asyncio.gather(*(self.get_pool(token_a, token_b, fee) for fee in fees))
        return [pool for pool in pools if pool is not None]

    def get_identifier(self) -> str:
        """Get unique identifier for this data source."""
        return self.name


class QuoteExecutor(ABC):
    """Abstract single-pool quote executor."""

    name = "quote_executor"

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def quote_exact_input_single(
        self, token_in: Token, token_out: Token, amount_in: int, fee: int
    ) -> SingleQuote:
        """
        Quote an exact-input swap through one pool.

        Args:
            token_in: Input token
            token_out: Output token
            amount_in: Raw input amount
            fee: Fee tier of the pool to use

        Returns:
            SingleQuote with the exact output and gas estimate

        Raises:
            QuoteExecutionError: If the quote call reverts or fails
        """
        pass


class PathSearchProvider(ABC):
    """Abstract multi-hop path search."""

    name = "path_search"

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def search(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        swap_type: SwapType,
        options: SwapOptions,
    ) -> Union[PathSearchResult, Dict[str, Any], None]:
        """
        Search for the best route.

        Returns:
            PathSearchResult, a provider-specific mapping carrying a route and
            an output amount, or None when no route exists
        """
        pass
