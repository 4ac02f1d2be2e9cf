"""
On-chain collaborators over web3.

Pool state is read straight from the factory and pool contracts, and exact
single-pool quotes come from the QuoterV2 periphery contract. Calls are
encoded with eth_abi and sent through eth.call(); the blocking web3 calls run
in the default executor so they do not stall the event loop.
"""

import asyncio
from functools import partial
from typing import Any, List, Optional

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

from ..core.errors import DataSourceUnavailable, QuoteExecutionError
from ..core.types import ZERO_ADDRESS, Pool, Token
from .base import PoolDataSource, QuoteExecutor, SingleQuote

GET_POOL_SELECTOR = function_signature_to_4byte_selector("getPool(address,address,uint24)")
SLOT0_SELECTOR = function_signature_to_4byte_selector("slot0()")
LIQUIDITY_SELECTOR = function_signature_to_4byte_selector("liquidity()")
QUOTE_EXACT_INPUT_SINGLE_SELECTOR = function_signature_to_4byte_selector(
    "quoteExactInputSingle((address,address,uint256,uint24,uint160))"
)

SLOT0_TYPES = ["uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool"]
QUOTE_RESULT_TYPES = ["uint256", "uint160", "uint32", "uint256"]


async def _eth_call(web3: Web3, to: str, data: bytes, block_identifier: Any = "latest") -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        partial(
            web3.eth.call,
            {"to": Web3.to_checksum_address(to), "data": "0x" + data.hex()},
            block_identifier,
        ),
    )


class Web3PoolDataSource(PoolDataSource):
    """
    Pool data source reading the Uniswap V3 factory and pools directly.

    Per-token pool listings need an index of PoolCreated events, which plain
    RPC does not offer, so get_pools_for_token is unavailable here.
    """

    name = "web3"

    def __init__(self, web3: Web3, factory_address: str):
        super().__init__()
        if not Web3.is_address(factory_address):
            raise ValueError(f"Invalid factory address: {factory_address}")
        self.web3 = web3
        self.factory_address = Web3.to_checksum_address(factory_address)

    async def get_pool_address(self, token_a: Token, token_b: Token, fee: int) -> Optional[str]:
        """Pool address from factory.getPool, or None when not deployed."""
        call_data = GET_POOL_SELECTOR + encode(
            ["address", "address", "uint24"],
            [
                Web3.to_checksum_address(token_a.address),
                Web3.to_checksum_address(token_b.address),
                fee,
            ],
        )
        raw = await _eth_call(self.web3, self.factory_address, call_data)
        (address,) = decode(["address"], bytes(raw))
        if address.lower() == ZERO_ADDRESS:
            return None
        return address

    async def get_pool(self, token_a: Token, token_b: Token, fee: int) -> Optional[Pool]:
        try:
            address = await self.get_pool_address(token_a, token_b, fee)
            if address is None:
                return None
            slot0_raw, liquidity_raw = await asyncio.gather(
                _eth_call(self.web3, address, SLOT0_SELECTOR),
                _eth_call(self.web3, address, LIQUIDITY_SELECTOR),
            )
            sqrt_price_x96, tick = decode(SLOT0_TYPES, bytes(slot0_raw))[:2]
            (liquidity,) = decode(["uint128"], bytes(liquidity_raw))
        except Exception as e:
            self.logger.error(f"Failed to read pool {token_a.label}/{token_b.label} fee {fee}: {e}")
            raise DataSourceUnavailable(f"On-chain pool read failed: {e}", source=self.name)

        return Pool.create(address, token_a, token_b, fee, liquidity, sqrt_price_x96, tick)

    async def get_pools_for_token(self, token: Token, first: int = 200) -> List[Pool]:
        raise DataSourceUnavailable(
            "Per-token pool listing requires an indexed data source", source=self.name
        )


class Web3QuoteExecutor(QuoteExecutor):
    """Exact single-pool quotes from the QuoterV2 contract."""

    name = "quoter_v2"

    def __init__(self, web3: Web3, quoter_address: str):
        super().__init__()
        if not Web3.is_address(quoter_address):
            raise ValueError(f"Invalid quoter address: {quoter_address}")
        self.web3 = web3
        self.quoter_address = Web3.to_checksum_address(quoter_address)

    @staticmethod
    def encode_quote_call(token_in: Token, token_out: Token, amount_in: int, fee: int) -> bytes:
        """Calldata for quoteExactInputSingle with no price limit."""
        params = (
            Web3.to_checksum_address(token_in.address),
            Web3.to_checksum_address(token_out.address),
            amount_in,
            fee,
            0,
        )
        return QUOTE_EXACT_INPUT_SINGLE_SELECTOR + encode(
            ["(address,address,uint256,uint24,uint160)"], [params]
        )

    @staticmethod
    def decode_quote_result(raw: bytes) -> SingleQuote:
        amount_out, sqrt_after, ticks_crossed, gas_estimate = decode(QUOTE_RESULT_TYPES, bytes(raw))
        return SingleQuote(
            amount_out=amount_out,
            gas_estimate=gas_estimate,
            sqrt_price_x96_after=sqrt_after,
            initialized_ticks_crossed=ticks_crossed,
        )

    async def quote_exact_input_single(
        self, token_in: Token, token_out: Token, amount_in: int, fee: int
    ) -> SingleQuote:
        call_data = self.encode_quote_call(token_in, token_out, amount_in, fee)
        try:
            raw = await _eth_call(self.web3, self.quoter_address, call_data)
            result = self.decode_quote_result(raw)
        except Exception as e:
            self.logger.debug(f"QuoterV2 call failed for fee {fee}: {str(e)[:150]}")
            raise QuoteExecutionError(f"QuoterV2 call failed: {e}", fee=fee)

        if result.amount_out == 0:
            raise QuoteExecutionError("QuoterV2 returned zero output", fee=fee)
        return result
