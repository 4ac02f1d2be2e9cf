"""
Base configuration for clmm-router.

Settings are dataclass fields whose defaults are read from the environment
(and a local .env file) when the module is imported. Malformed values raise
ConfigError immediately rather than surfacing later inside the engine.
"""

import os
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar
from dataclasses import dataclass
from dotenv import load_dotenv
from eth_utils import is_hex_address

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = ("local", "dev", "staging", "production", "test")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TRUTHY = ("true", "1", "yes", "on")

T = TypeVar("T")


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


def configure_logging(level_name: str) -> None:
    """Install the root handler at the named level."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Invalid log level: {level_name}")
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _convert(key: str, raw: Optional[str], parse: Callable[[str], T], kind: str) -> T:
    try:
        return parse(raw)
    except (ValueError, TypeError):
        raise ConfigError(f"Environment variable '{key}' must be {kind}, got: {raw}")


@dataclass
class BaseConfig:
    """Base configuration class with environment variable management."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        configure_logging(self.LOG_LEVEL)
        self._validate_config()

    def _validate_config(self):
        """Validate configuration values. Subclasses extend this."""
        if self.ENVIRONMENT not in VALID_ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT}")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Read a raw environment variable.

        Raises:
            ConfigError: If required and unset
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        raw = BaseConfig.get_env(key, None if default is None else str(default), required)
        return _convert(key, raw, int, "an integer")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        raw = BaseConfig.get_env(key, None if default is None else str(default), required)
        return _convert(key, raw, float, "a float")

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        return BaseConfig.get_env(key, str(default)).strip().lower() in TRUTHY

    @staticmethod
    def get_env_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Comma-separated variable as a list of stripped, non-empty items."""
        raw = BaseConfig.get_env(key)
        if raw is None:
            return list(default or [])
        return [item.strip() for item in raw.split(separator) if item.strip()]

    @staticmethod
    def get_env_int_tuple(key: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
        """Comma-separated integers, e.g. FEE_TIERS=500,3000."""
        items = BaseConfig.get_env_list(key, [str(value) for value in default])
        return _convert(key, items, lambda values: tuple(int(value) for value in values), "a list of integers")

    @staticmethod
    def get_env_address(key: str, default: str) -> str:
        """Hex contract address; checksum casing is not enforced."""
        value = BaseConfig.get_env(key, default).strip()
        if not is_hex_address(value):
            raise ConfigError(f"Environment variable '{key}' must be a 20-byte hex address, got: {value}")
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Public settings as a JSON-friendly dictionary."""
        data = {}
        for name in self.__dataclass_fields__:
            if name.startswith("_"):
                continue
            value = getattr(self, name)
            data[name] = list(value) if isinstance(value, tuple) else value
        return data
