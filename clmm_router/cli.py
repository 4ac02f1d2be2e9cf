#!/usr/bin/env python3
"""
Command-line interface for the swap routing engine.

Usage:
    # Quote 1.5 units of token A into token B
    clmm-router quote 0xA...:WKAIA:18 0xB...:USDT:6 1.5 --recipient 0x...

    # Explain why two tokens cannot be routed
    clmm-router diagnose 0xA...:WKAIA:18 0xB...:USDT:6

    # Check whether a position's range contains the current tick
    clmm-router tick-range --tick-lower -600 --tick-upper 600 --current-tick 12 --fee 3000
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from web3 import Web3

from .config import get_config
from .core.types import (
    Position,
    QuoteResult,
    RouteDiagnostic,
    SwapOptions,
    Token,
    ZERO_ADDRESS,
    format_amount,
)
from .fetchers import (
    GraphPathSearchProvider,
    PoolStateQuoteExecutor,
    SubgraphPoolDataSource,
    Web3QuoteExecutor,
)
from .routing import RoutingEngine, evaluate_position_range

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_token(value: str) -> Token:
    """Parse ADDRESS[:SYMBOL[:DECIMALS]] into a Token."""
    parts = value.split(":")
    if len(parts) > 3:
        raise argparse.ArgumentTypeError(f"Expected ADDRESS[:SYMBOL[:DECIMALS]], got {value}")
    try:
        decimals = int(parts[2]) if len(parts) == 3 else 18
        return Token(parts[0], parts[1] if len(parts) > 1 else "", decimals=decimals)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_engine(quoter: str) -> RoutingEngine:
    """Wire the engine to the configured subgraph and quoter."""
    config = get_config()
    data_source = SubgraphPoolDataSource.from_config(config.chain)
    if quoter == "onchain":
        web3 = Web3(Web3.HTTPProvider(config.chain.RPC_URL))
        executor = Web3QuoteExecutor(web3, config.chain.QUOTER_V2_ADDRESS)
    else:
        executor = PoolStateQuoteExecutor(data_source)
    path_search = GraphPathSearchProvider(data_source, executor, config.routing)
    return RoutingEngine(data_source, executor, path_search, config.routing, config.chain)


def format_diagnostic(diagnostic: RouteDiagnostic) -> None:
    logger.info(f"🔍 {diagnostic.reason}")
    logger.info(
        f"📊 Pools with input token: {diagnostic.pools_with_token_in} "
        f"(+{diagnostic.pools_with_token_in_no_liquidity} without liquidity), "
        f"with output token: {diagnostic.pools_with_token_out} "
        f"(+{diagnostic.pools_with_token_out_no_liquidity} without liquidity)"
    )
    for path in diagnostic.possible_paths:
        logger.info(f"   Possible path: {' -> '.join(path)}")
    for suggestion in diagnostic.suggestions:
        logger.info(f"💡 {suggestion}")


def format_quote_result(result: QuoteResult, engine: RoutingEngine, slippage) -> None:
    if result.failed:
        logger.error(f"❌ Quote failed ({result.error.code}): {result.error.message}")
        if result.diagnostic is not None:
            format_diagnostic(result.diagnostic)
        return

    quote = result.quote
    assessment = engine.assess_impact(quote, slippage)
    marker = "⚠️ approximate " if quote.is_approximate else ""
    logger.info(f"✅ {marker}quote via {quote.route.describe()} ({quote.source}, cache {result.cache_outcome.value})")
    logger.info(
        f"   {format_amount(quote.amount_in, quote.token_in.decimals)} {quote.token_in.label} -> "
        f"{format_amount(quote.amount_out, quote.token_out.decimals)} {quote.token_out.label}"
    )
    logger.info(f"   Price impact: {assessment.price_impact:.2f}% ({assessment.severity.value})")
    logger.info(f"   Minimum received: {assessment.min_amount_out_display} {quote.token_out.label}")
    logger.info(f"   Gas estimate: {quote.gas_estimate}")
    if assessment.slippage_insufficient:
        logger.warning(f"⚠️ Slippage {slippage}% may be too low, suggested {assessment.suggested_slippage}%")
    logger.info(f"   Router: {result.execution.router}")
    logger.info(f"   Calldata: {result.execution.calldata}")


async def run_quote(args) -> bool:
    engine = build_engine(args.quoter)
    options = SwapOptions.create(
        recipient=args.recipient,
        slippage=args.slippage,
        deadline_minutes=args.deadline_minutes,
    )
    result = await engine.quote(args.token_in, args.token_out, args.amount, options)
    format_quote_result(result, engine, options.slippage)
    return result.success


async def run_diagnose(args) -> bool:
    engine = build_engine("local")
    diagnostic = await engine.diagnose(args.token_in, args.token_out)
    format_diagnostic(diagnostic)
    return True


def run_tick_range(args) -> bool:
    position = Position(
        tick_lower=args.tick_lower,
        tick_upper=args.tick_upper,
        current_tick=args.current_tick,
        price_min=args.price_min,
        price_max=args.price_max,
        current_price=args.current_price,
        fee=args.fee,
    )
    result = evaluate_position_range(position)
    status = "in range" if result.in_range else "out of range"
    logger.info(f"{'✅' if result.in_range else '❌'} Position {status} (method: {result.method})")
    if result.full_range:
        logger.info("   Full-range position")
    if result.mismatch is not None:
        logger.warning(
            f"⚠️ Tick check disagrees: tick_in_range={result.mismatch.tick_in_range}, "
            f"price_in_range={result.mismatch.price_in_range}"
        )
    return result.in_range


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Concentrated-liquidity swap routing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Tokens are given as ADDRESS[:SYMBOL[:DECIMALS]]; decimals default to 18.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Quote an exact-input swap")
    quote.add_argument("token_in", type=parse_token)
    quote.add_argument("token_out", type=parse_token)
    quote.add_argument("amount", help="Human amount of token_in, e.g. 1.5")
    quote.add_argument("--recipient", default=ZERO_ADDRESS, help="Address receiving token_out")
    quote.add_argument("--slippage", default="0.5", help="Slippage tolerance in percent")
    quote.add_argument("--deadline-minutes", type=int, default=20)
    quote.add_argument(
        "--quoter",
        choices=["onchain", "local"],
        default="onchain",
        help="Quote through the QuoterV2 contract or from indexed pool state",
    )

    diagnose = subparsers.add_parser("diagnose", help="Explain why no route exists")
    diagnose.add_argument("token_in", type=parse_token)
    diagnose.add_argument("token_out", type=parse_token)

    tick_range = subparsers.add_parser("tick-range", help="Check a position's range")
    tick_range.add_argument("--tick-lower", type=int, required=True)
    tick_range.add_argument("--tick-upper", type=int, required=True)
    tick_range.add_argument("--current-tick", type=int, required=True)
    tick_range.add_argument("--fee", type=int, help="Pool fee tier, selects the tick spacing")
    tick_range.add_argument("--price-min", type=float)
    tick_range.add_argument("--price-max", type=float)
    tick_range.add_argument("--current-price", type=float)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "quote":
            success = asyncio.run(run_quote(args))
        elif args.command == "diagnose":
            success = asyncio.run(run_diagnose(args))
        else:
            try:
                success = run_tick_range(args)
            except ValueError as e:
                parser.error(str(e))
        return 0 if success else 1

    except KeyboardInterrupt:
        logger.info("⏹️  Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"💥 Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
