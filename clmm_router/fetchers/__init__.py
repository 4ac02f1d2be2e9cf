"""
External collaborators: pool data sources, quote executors and path search.
"""

from .base import (
    PathSearchProvider,
    PathSearchResult,
    PoolDataSource,
    QuoteExecutor,
    SingleQuote,
)
from .local_quoter import PoolStateQuoteExecutor
from .memory import InMemoryPoolDataSource
from .onchain import Web3PoolDataSource, Web3QuoteExecutor
from .path_search import GraphPathSearchProvider
from .subgraph import SubgraphPoolDataSource

__all__ = [
    "PathSearchProvider",
    "PathSearchResult",
    "PoolDataSource",
    "QuoteExecutor",
    "SingleQuote",
    "PoolStateQuoteExecutor",
    "InMemoryPoolDataSource",
    "Web3PoolDataSource",
    "Web3QuoteExecutor",
    "GraphPathSearchProvider",
    "SubgraphPoolDataSource",
]
