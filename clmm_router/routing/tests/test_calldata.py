"""Tests for router calldata encoding."""
from decimal import Decimal

from eth_abi import decode

from clmm_router.core.types import Quote, SwapOptions
from clmm_router.routing.calldata import (
    EXACT_INPUT_SELECTOR,
    MULTICALL_DEADLINE_SELECTOR,
    build_execution_parameters,
    encode_path,
)

ROUTER = "0x" + "8" * 40
RECIPIENT = "0x" + "9" * 40


class TestEncodePath:
    """Test cases for the packed V3 path."""

    def test_two_hop_path_layout(self, tokens, two_hop_universe):
        """Test token | fee | token | fee | token packing."""
        path = encode_path(two_hop_universe.route)

        assert len(path) == 20 + 2 * 23
        assert path[:20] == bytes.fromhex(tokens.a.address[2:])
        assert int.from_bytes(path[20:23], "big") == 500
        assert path[23:43] == bytes.fromhex(tokens.c.address[2:])
        assert path[-20:] == bytes.fromhex(tokens.b.address[2:])


class TestBuildExecutionParameters:
    """Test cases for SwapRouter02 execution parameters."""

    def test_multicall_wraps_exact_input(self, two_hop_universe):
        """Test the deadline multicall carries one exactInput call with min-out applied."""
        quote = Quote.from_route(two_hop_universe.route, 10**18, 2 * 10**6, 200000, "test")
        options = SwapOptions(recipient=RECIPIENT, slippage=Decimal("1"), deadline=1_700_001_200)

        params = build_execution_parameters(quote, options, ROUTER, now=123.0)
        calldata = bytes.fromhex(params.calldata[2:])

        assert calldata[:4] == MULTICALL_DEADLINE_SELECTOR
        deadline, calls = decode(["uint256", "bytes[]"], calldata[4:])
        assert deadline == 1_700_001_200
        assert len(calls) == 1
        assert calls[0][:4] == EXACT_INPUT_SELECTOR

        ((path, recipient, amount_in, amount_out_minimum),) = decode(
            ["(bytes,address,uint256,uint256)"], calls[0][4:]
        )
        assert path == encode_path(two_hop_universe.route)
        assert recipient.lower() == RECIPIENT
        assert amount_in == 10**18
        assert amount_out_minimum == 1_980_000

        assert params.amount_out_minimum == 1_980_000
        assert params.slippage_bps == 100
        assert params.value == 0
        assert params.router.lower() == ROUTER
        assert params.generated_at == 123.0

    def test_native_input_sets_value(self, two_hop_universe):
        """Test native input is sent as call value."""
        quote = Quote.from_route(two_hop_universe.route, 5 * 10**17, 10**6, 200000, "test")
        options = SwapOptions(recipient=RECIPIENT, deadline=1)

        params = build_execution_parameters(quote, options, ROUTER, native_input=True)

        assert params.value == 5 * 10**17
