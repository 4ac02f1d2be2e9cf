"""Tests for the command-line interface."""
import argparse
import logging
from unittest.mock import patch

import pytest

from clmm_router import cli
from clmm_router.config import ChainConfig, RoutingConfig
from clmm_router.core.types import Pool, Token
from clmm_router.core.v3_math import Q96
from clmm_router.fetchers import GraphPathSearchProvider, InMemoryPoolDataSource, PoolStateQuoteExecutor
from clmm_router.routing import RoutingEngine

TOKEN_A = "0x" + "1" * 40
TOKEN_B = "0x" + "2" * 40


def in_memory_engine(quoter):
    a = Token(TOKEN_A, "AAA")
    b = Token(TOKEN_B, "BBB", decimals=6)
    source = InMemoryPoolDataSource([Pool.create("0x" + "a" * 40, a, b, 500, 10**22, Q96, 0)])
    executor = PoolStateQuoteExecutor(source)
    config = RoutingConfig()
    return RoutingEngine(source, executor, GraphPathSearchProvider(source, executor, config), config, ChainConfig())


class TestParseToken:
    """Test cases for token arguments."""

    def test_full_form(self):
        token = cli.parse_token(f"{TOKEN_B}:USDT:6")
        assert token.address == TOKEN_B
        assert token.symbol == "USDT"
        assert token.decimals == 6

    def test_address_only_defaults_to_18_decimals(self):
        assert cli.parse_token(TOKEN_A).decimals == 18

    @pytest.mark.parametrize("value", ["0x1234", f"{TOKEN_A}:X:abc", f"{TOKEN_A}:X:6:extra"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_token(value)


class TestCommands:
    """Test cases for the subcommands."""

    def test_tick_range_in_range(self, caplog):
        with caplog.at_level(logging.INFO, logger="clmm_router.cli"):
            code = cli.main(["tick-range", "--tick-lower", "-600", "--tick-upper", "600", "--current-tick", "0", "--fee", "3000"])
        assert code == 0
        assert "in range" in caplog.text

    def test_tick_range_out_of_range(self):
        code = cli.main(["tick-range", "--tick-lower", "600", "--tick-upper", "1200", "--current-tick", "0"])
        assert code == 1

    def test_tick_range_rejects_inverted_ticks(self):
        with pytest.raises(SystemExit):
            cli.main(["tick-range", "--tick-lower", "600", "--tick-upper", "-600", "--current-tick", "0"])

    def test_quote(self, caplog):
        with patch.object(cli, "build_engine", side_effect=in_memory_engine):
            with caplog.at_level(logging.INFO, logger="clmm_router.cli"):
                code = cli.main(["quote", f"{TOKEN_A}:AAA:18", f"{TOKEN_B}:BBB:6", "1", "--quoter", "local"])
        assert code == 0
        assert "Minimum received" in caplog.text
        assert "Calldata: 0x" in caplog.text

    def test_quote_invalid_amount_fails(self, caplog):
        with patch.object(cli, "build_engine", side_effect=in_memory_engine):
            code = cli.main(["quote", TOKEN_A, TOKEN_B, "-5"])
        assert code == 1

    def test_diagnose(self, caplog):
        with patch.object(cli, "build_engine", side_effect=in_memory_engine):
            with caplog.at_level(logging.INFO, logger="clmm_router.cli"):
                code = cli.main(["diagnose", TOKEN_A, TOKEN_B])
        assert code == 0
        assert "direct pool exists" in caplog.text
