"""
Chain-specific configuration for clmm-router.

Defaults point at the Kairos testnet deployment of the Uniswap V3 contracts
and its indexed subgraph. Override any value through the environment.
"""

from dataclasses import dataclass
from typing import Dict

from eth_utils import is_hex_address

from .base import BaseConfig, ConfigError


@dataclass
class ChainConfig(BaseConfig):
    """Network and contract configuration for the target chain."""

    CHAIN_NAME: str = BaseConfig.get_env("CHAIN_NAME", "kairos-testnet")
    CHAIN_ID: int = BaseConfig.get_env_int("CHAIN_ID", 1001)
    RPC_URL: str = BaseConfig.get_env("RPC_URL", "https://public-en-kairos.node.kaia.io")

    # Indexed pool data
    SUBGRAPH_URL: str = BaseConfig.get_env(
        "SUBGRAPH_URL",
        "https://api.studio.thegraph.com/query/102730/kairos-dex/version/latest",
    )
    SUBGRAPH_BEARER_TOKEN: str = BaseConfig.get_env("SUBGRAPH_BEARER_TOKEN", "")
    SUBGRAPH_TIMEOUT: float = BaseConfig.get_env_float("SUBGRAPH_TIMEOUT", 10.0)

    # Uniswap V3 periphery / core contracts
    FACTORY_ADDRESS: str = BaseConfig.get_env_address(
        "V3_CORE_FACTORY", "0xb522cF1A5579c0EAe37Da6797aeBcE1bac2D4a29"
    )
    QUOTER_V2_ADDRESS: str = BaseConfig.get_env_address(
        "QUOTER_V2", "0x56a4BD4a66785Af030A2003254E93f111892BfB5"
    )
    SWAP_ROUTER_02_ADDRESS: str = BaseConfig.get_env_address(
        "SWAP_ROUTER_02", "0xd28909Ef8bd258DCeFD8B5A380ff55f92eD8ae4b"
    )
    WRAPPED_NATIVE_TOKEN: str = BaseConfig.get_env_address(
        "WRAPPED_NATIVE_TOKEN", "0x043c471bee060e00a56ccd02c0ca286808a5a436"
    )

    def _validate_config(self):
        """Validate chain settings on top of the base checks."""
        super()._validate_config()
        if self.CHAIN_ID <= 0:
            raise ConfigError(f"Invalid chain id: {self.CHAIN_ID}")
        for name in ("FACTORY_ADDRESS", "QUOTER_V2_ADDRESS", "SWAP_ROUTER_02_ADDRESS", "WRAPPED_NATIVE_TOKEN"):
            address = getattr(self, name)
            if not is_hex_address(address):
                raise ConfigError(f"{name} is not a valid address: {address}")

    def get_chain_config(self) -> Dict:
        """Get the connection settings for the configured chain."""
        return {
            "chain_name": self.CHAIN_NAME,
            "chain_id": self.CHAIN_ID,
            "rpc_url": self.RPC_URL,
            "subgraph_url": self.SUBGRAPH_URL,
            "factory": self.FACTORY_ADDRESS,
            "quoter_v2": self.QUOTER_V2_ADDRESS,
            "swap_router_02": self.SWAP_ROUTER_02_ADDRESS,
        }

    @property
    def subgraph_headers(self) -> Dict[str, str]:
        """HTTP headers for subgraph requests."""
        headers = {"Content-Type": "application/json"}
        if self.SUBGRAPH_BEARER_TOKEN:
            headers["Authorization"] = f"Bearer {self.SUBGRAPH_BEARER_TOKEN}"
        return headers
