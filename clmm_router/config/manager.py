"""
Process-wide configuration access for clmm-router.

ConfigManager builds one instance of each configuration section and checks
them together; get_config() hands out a shared manager so the engine, its
collaborators and the CLI all read the same settings.
"""

import logging
from typing import Any, Dict, Optional, Type

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .routing import DEFAULT_FEE_TIERS, RoutingConfig

logger = logging.getLogger(__name__)

SECTIONS: Dict[str, Type[BaseConfig]] = {
    "base": BaseConfig,
    "chain": ChainConfig,
    "routing": RoutingConfig,
}


class ConfigManager:
    """
    Holds the base, chain and routing configuration sections.

    Args:
        environment: Overrides ENVIRONMENT for every section
            (local, dev, staging, production, test)
    """

    def __init__(self, environment: Optional[str] = None):
        overrides = {"ENVIRONMENT": environment} if environment else {}
        try:
            self._sections: Dict[str, BaseConfig] = {
                name: section(**overrides) for name, section in SECTIONS.items()
            }
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Configuration initialization failed: {e}")
        logger.info(f"Configuration initialized for environment: {self.environment}")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        return self._sections["base"]

    @property
    def chain(self) -> ChainConfig:
        return self._sections["chain"]

    @property
    def routing(self) -> RoutingConfig:
        return self._sections["routing"]

    def validate_configuration(self) -> bool:
        """
        Re-run every section's checks and warn about risky combinations.

        Raises:
            ConfigError: If any section is invalid
        """
        for name, section in self._sections.items():
            try:
                section._validate_config()
            except ConfigError as e:
                logger.error(f"❌ {name} configuration invalid: {e}")
                raise

        routing = self.routing
        unknown = [fee for fee in routing.FEE_TIERS if fee not in DEFAULT_FEE_TIERS]
        if unknown:
            logger.warning(f"⚠️ Non-standard fee tiers {unknown} have no known tick spacing")
        if routing.MAX_HOPS > 3:
            logger.warning(f"⚠️ MAX_HOPS={routing.MAX_HOPS} widens the path search considerably")
        if routing.DEADLINE_REUSE_TOLERANCE >= routing.DEFAULT_DEADLINE_MINUTES * 60:
            logger.warning("⚠️ Deadline reuse tolerance exceeds the default deadline window")
        if not self.chain.SUBGRAPH_URL:
            logger.warning("⚠️ No subgraph URL configured, pool discovery will be unavailable")

        logger.info("✅ Configuration validation successful")
        return True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"environment": self.environment}
        data.update({name: section.to_dict() for name, section in self._sections.items()})
        return data

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """Shared, validated ConfigManager; built on first use or when force_reload is set."""
    global _config_manager

    if _config_manager is None or force_reload:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _config_manager = manager

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """Rebuild the shared manager, picking up environment changes."""
    return get_config(environment=environment, force_reload=True)
