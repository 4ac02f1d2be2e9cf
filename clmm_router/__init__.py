"""
Swap routing engine for concentrated-liquidity (Uniswap V3 style) pools.

Example:
    from clmm_router import RoutingEngine, Token
    from clmm_router.config import get_config
    from clmm_router.fetchers import (
        GraphPathSearchProvider,
        SubgraphPoolDataSource,
        Web3QuoteExecutor,
    )

    config = get_config()
    source = SubgraphPoolDataSource.from_config(config.chain)
    executor = Web3QuoteExecutor(web3, config.chain.QUOTER_V2_ADDRESS)
    engine = RoutingEngine(source, executor, GraphPathSearchProvider(source, executor))

    result = await engine.quote(weth, usdc, "1.5")
"""

from .core.types import Position, QuoteResult, SwapOptions, Token
from .routing import RoutingEngine

__version__ = "0.1.0"

__all__ = ["Position", "QuoteResult", "RoutingEngine", "SwapOptions", "Token"]
