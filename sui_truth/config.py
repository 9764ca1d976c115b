"""
Address Trust - Configuration.

============================================================
CONFIGURABLE RESOLUTION PARAMETERS
============================================================

- RPC endpoint and hard per-call timeout
- Profile cache TTL
- Circuit breaker cooldown
- Batch concurrency bound

Configuration can be loaded from:
- Default values
- Environment variables (SUI_TRUTH_*)
- A .env file in the working directory

============================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from dotenv import load_dotenv

from sui_truth.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


DEFAULT_RPC_ENDPOINT = "https://fullnode.mainnet.sui.io:443"
DEFAULT_RPC_TIMEOUT_SECONDS = 3.0
DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_BREAKER_COOLDOWN_SECONDS = 60.0
DEFAULT_BATCH_CONCURRENCY = 5

ENV_PREFIX = "SUI_TRUTH_"


@dataclass
class ServiceConfig:
    """Settings for the address trust resolution service."""

    rpc_endpoint: str = DEFAULT_RPC_ENDPOINT
    """Fullnode JSON-RPC endpoint."""

    rpc_timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS
    """Hard timeout for a single RPC call."""

    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    """Lifetime of a cached profile."""

    breaker_cooldown_seconds: float = DEFAULT_BREAKER_COOLDOWN_SECONDS
    """How long the breaker stays open after a rate-limit signal."""

    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY
    """Maximum in-flight RPC calls during batch resolution."""

    log_level: str = "INFO"
    """Logging level used by the CLI."""

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "ServiceConfig":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: If a numeric variable does not parse
        """
        if load_dotenv_file:
            load_dotenv()

        errors: List[str] = []

        def env(name: str, default: str) -> str:
            return os.getenv(f"{ENV_PREFIX}{name}", default)

        def number(name: str, default: Any, cast: Callable[[str], Any]) -> Any:
            raw = env(name, str(default))
            try:
                return cast(raw)
            except ValueError:
                errors.append(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")
                return default

        config = cls(
            rpc_endpoint=env("RPC_ENDPOINT", DEFAULT_RPC_ENDPOINT),
            rpc_timeout_seconds=number("RPC_TIMEOUT_SECONDS", DEFAULT_RPC_TIMEOUT_SECONDS, float),
            cache_ttl_seconds=number("CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS, float),
            breaker_cooldown_seconds=number(
                "BREAKER_COOLDOWN_SECONDS", DEFAULT_BREAKER_COOLDOWN_SECONDS, float
            ),
            batch_concurrency=number("BATCH_CONCURRENCY", DEFAULT_BATCH_CONCURRENCY, int),
            log_level=env("LOG_LEVEL", "INFO").upper(),
        )

        if errors:
            raise ConfigurationError("Invalid environment configuration", errors=errors)
        return config

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.rpc_endpoint.startswith(("http://", "https://")):
            errors.append("rpc_endpoint must be an http(s) URL")

        if self.rpc_timeout_seconds <= 0:
            errors.append("rpc_timeout_seconds must be positive")

        if self.cache_ttl_seconds <= 0:
            errors.append("cache_ttl_seconds must be positive")

        if self.breaker_cooldown_seconds <= 0:
            errors.append("breaker_cooldown_seconds must be positive")

        if self.batch_concurrency < 1:
            errors.append("batch_concurrency must be at least 1")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"unknown log_level: {self.log_level}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rpc_endpoint": self.rpc_endpoint,
            "rpc_timeout_seconds": self.rpc_timeout_seconds,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "breaker_cooldown_seconds": self.breaker_cooldown_seconds,
            "batch_concurrency": self.batch_concurrency,
            "log_level": self.log_level,
        }
