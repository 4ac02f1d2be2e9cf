"""
Configuration management for clmm-router.

Use get_config() to access all configuration settings.

Example:
    from clmm_router.config import get_config

    config = get_config()

    # Routing settings
    timeout = config.routing.PATH_SEARCH_TIMEOUT

    # Chain settings
    quoter = config.chain.QUOTER_V2_ADDRESS
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config
from .routing import DEFAULT_FEE_TIERS, RoutingConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "RoutingConfig",
    "DEFAULT_FEE_TIERS",
    "ConfigManager",
    "get_config",
    "reload_config",
]
