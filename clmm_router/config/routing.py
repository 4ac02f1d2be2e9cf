"""
Routing engine configuration for clmm-router.
"""

from dataclasses import dataclass, field
from typing import Tuple

from .base import BaseConfig, ConfigError

# Fee tiers in hundredths of a basis point, lowest fee first
DEFAULT_FEE_TIERS = (100, 500, 3000, 10000)


@dataclass
class RoutingConfig(BaseConfig):
    """Quoting, path search, caching and slippage settings."""

    # Direct quoting
    FEE_TIERS: Tuple[int, ...] = field(
        default_factory=lambda: BaseConfig.get_env_int_tuple("FEE_TIERS", DEFAULT_FEE_TIERS)
    )
    DIRECT_QUOTE_TIMEOUT: float = BaseConfig.get_env_float("DIRECT_QUOTE_TIMEOUT", 10.0)
    FALLBACK_GAS_ESTIMATE: int = BaseConfig.get_env_int("FALLBACK_GAS_ESTIMATE", 150000)
    ESCALATE_APPROXIMATE_QUOTES: bool = BaseConfig.get_env_bool("ESCALATE_APPROXIMATE_QUOTES", True)

    # Multi-hop search
    MAX_HOPS: int = BaseConfig.get_env_int("MAX_HOPS", 3)
    PATH_SEARCH_TIMEOUT: float = BaseConfig.get_env_float("PATH_SEARCH_TIMEOUT", 20.0)
    PATH_SEARCH_PAGE_SIZE: int = BaseConfig.get_env_int("PATH_SEARCH_PAGE_SIZE", 1000)
    MAX_CANDIDATE_PATHS: int = BaseConfig.get_env_int("MAX_CANDIDATE_PATHS", 8)

    # Diagnostics
    DIAGNOSTICS_TIMEOUT: float = BaseConfig.get_env_float("DIAGNOSTICS_TIMEOUT", 15.0)
    DIAGNOSTICS_PAGE_SIZE: int = BaseConfig.get_env_int("DIAGNOSTICS_PAGE_SIZE", 200)

    # Route cache
    ROUTE_CACHE_MAX_ENTRIES: int = BaseConfig.get_env_int("ROUTE_CACHE_MAX_ENTRIES", 128)
    DEADLINE_REUSE_TOLERANCE: int = BaseConfig.get_env_int("DEADLINE_REUSE_TOLERANCE", 300)
    SLIPPAGE_REUSE_TOLERANCE_BPS: int = BaseConfig.get_env_int("SLIPPAGE_REUSE_TOLERANCE_BPS", 10)
    QUOTE_TTL_SECONDS: int = BaseConfig.get_env_int("QUOTE_TTL_SECONDS", 60)

    # Swap defaults, percentages
    DEFAULT_SLIPPAGE: float = BaseConfig.get_env_float("DEFAULT_SLIPPAGE", 0.5)
    DEFAULT_DEADLINE_MINUTES: int = BaseConfig.get_env_int("DEFAULT_DEADLINE_MINUTES", 20)
    PRICE_IMPACT_WARNING: float = BaseConfig.get_env_float("PRICE_IMPACT_WARNING", 3.0)
    PRICE_IMPACT_HIGH: float = BaseConfig.get_env_float("PRICE_IMPACT_HIGH", 5.0)

    def _validate_config(self):
        """Validate routing settings on top of the base checks."""
        super()._validate_config()
        if not self.FEE_TIERS:
            raise ConfigError("At least one fee tier must be configured")
        if self.MAX_HOPS < 1:
            raise ConfigError(f"MAX_HOPS must be at least 1, got: {self.MAX_HOPS}")
        for name in ("PATH_SEARCH_TIMEOUT", "DIRECT_QUOTE_TIMEOUT", "DIAGNOSTICS_TIMEOUT"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.ROUTE_CACHE_MAX_ENTRIES < 1:
            raise ConfigError("ROUTE_CACHE_MAX_ENTRIES must be at least 1")
        if self.PRICE_IMPACT_WARNING > self.PRICE_IMPACT_HIGH:
            raise ConfigError("PRICE_IMPACT_WARNING must not exceed PRICE_IMPACT_HIGH")
