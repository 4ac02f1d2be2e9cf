"""
SwapRouter02 calldata for resolved routes.

Routes are encoded as the V3 packed path (token | fee | token | ...) and
submitted through exactInput, wrapped in the deadline-checking multicall.
Nothing here signs or sends anything; the result is handed to the caller's
transaction executor.
"""

import time
from typing import Optional

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from ..core.types import ExecutionParameters, Quote, Route, SwapOptions
from .impact import minimum_amount_out

EXACT_INPUT_SELECTOR = function_signature_to_4byte_selector(
    "exactInput((bytes,address,uint256,uint256))"
)
MULTICALL_DEADLINE_SELECTOR = function_signature_to_4byte_selector("multicall(uint256,bytes[])")


def encode_path(route: Route) -> bytes:
    """Packed path: 20-byte token, 3-byte fee, 20-byte token, ..."""
    path = bytes.fromhex(route.token_in.address[2:])
    for pool, token in zip(route.pools, route.token_path[1:]):
        path += pool.fee.to_bytes(3, "big") + bytes.fromhex(token.address[2:])
    return path


def encode_exact_input(route: Route, recipient: str, amount_in: int, amount_out_minimum: int) -> bytes:
    params = (
        encode_path(route),
        to_checksum_address(recipient),
        amount_in,
        amount_out_minimum,
    )
    return EXACT_INPUT_SELECTOR + encode(["(bytes,address,uint256,uint256)"], [params])


def encode_multicall(deadline: int, calls) -> bytes:
    return MULTICALL_DEADLINE_SELECTOR + encode(["uint256", "bytes[]"], [deadline, list(calls)])


def build_execution_parameters(
    quote: Quote,
    options: SwapOptions,
    router_address: str,
    native_input: bool = False,
    now: Optional[float] = None,
) -> ExecutionParameters:
    """
    Build ready-to-submit router parameters for a quote.

    Args:
        quote: Quote whose route and amounts are encoded
        options: Recipient, slippage and deadline
        router_address: SwapRouter02 address
        native_input: Send amount_in as call value (router wraps it)
        now: Generation timestamp override

    Returns:
        ExecutionParameters
    """
    amount_out_minimum = minimum_amount_out(quote.amount_out, options.slippage)
    swap_call = encode_exact_input(quote.route, options.recipient, quote.amount_in, amount_out_minimum)
    calldata = encode_multicall(options.deadline, [swap_call])
    return ExecutionParameters(
        router=to_checksum_address(router_address),
        calldata="0x" + calldata.hex(),
        value=quote.amount_in if native_input else 0,
        recipient=options.recipient,
        deadline=options.deadline,
        slippage_bps=options.slippage_bps,
        amount_out_minimum=amount_out_minimum,
        generated_at=time.time() if now is None else now,
    )
