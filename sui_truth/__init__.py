"""
Sui Truth - Address trust resolution for Sui.

Turns an on-chain address (or coin type string) into a verdict a page
annotator can render: type, risk level, and an explanatory label.

Features:
- Official package / coin whitelist, exact-match only
- Fullnode RPC with a hard timeout and typed failures
- Circuit breaker on upstream rate limiting
- Time-boxed profile cache
- Fake coin detection
- Never raises to the caller - failures become degraded profiles

Quick Start:
    from sui_truth import AddressTrustService, RiskLevel

    async def annotate(addresses):
        async with AddressTrustService() as service:
            profiles = await service.resolve_many(addresses)

            for address, profile in profiles.items():
                if profile.risk_level is RiskLevel.DANGER:
                    print(f"{address}: {profile.label}")

Testing with a stub transport:
    service = AddressTrustService(
        rpc_client=stub_client,
        breaker=CircuitBreaker(clock=MockClock()),
        cache=ProfileCache(clock=clock),
    )
"""

from sui_truth.cache import ProfileCache
from sui_truth.circuit_breaker import CircuitBreaker
from sui_truth.clock import ClockProtocol, MockClock, SystemClock
from sui_truth.config import ServiceConfig
from sui_truth.exceptions import (
    CircuitOpenError,
    ConfigurationError,
    InvalidAddressError,
    ProtocolError,
    RateLimitError,
    RpcError,
    RpcTimeoutError,
    SuiTruthError,
    TransportError,
)
from sui_truth.fake_detector import PHISHING_RULES, FakeAssetDetector
from sui_truth.inference import OBJECT_TYPE_RULES, TypeInferenceEngine
from sui_truth.models import (
    AddressProfile,
    AddressType,
    BreakerState,
    CacheStats,
    CoinEntry,
    CoinInfo,
    Confidence,
    FakeCheck,
    ObjectSubType,
    RiskLevel,
    RpcFailureKind,
    RpcResult,
    TypeInference,
    WhitelistEntry,
)
from sui_truth.normalizer import (
    extract_addresses,
    is_valid_address_format,
    normalize_address,
)
from sui_truth.rpc_client import SuiRpcClient
from sui_truth.service import (
    AddressTrustService,
    get_default_service,
    set_default_service,
)
from sui_truth.whitelist import (
    OFFICIAL_COINS,
    OFFICIAL_PACKAGES,
    Whitelist,
    get_default_whitelist,
)


__version__ = "1.0.0"

__all__ = [
    # Service
    "AddressTrustService",
    "get_default_service",
    "set_default_service",

    # Components
    "Whitelist",
    "get_default_whitelist",
    "OFFICIAL_PACKAGES",
    "OFFICIAL_COINS",
    "SuiRpcClient",
    "CircuitBreaker",
    "ProfileCache",
    "TypeInferenceEngine",
    "OBJECT_TYPE_RULES",
    "FakeAssetDetector",
    "PHISHING_RULES",
    "ServiceConfig",

    # Clock
    "ClockProtocol",
    "SystemClock",
    "MockClock",

    # Normalization
    "normalize_address",
    "is_valid_address_format",
    "extract_addresses",

    # Models
    "AddressProfile",
    "AddressType",
    "RiskLevel",
    "Confidence",
    "ObjectSubType",
    "RpcFailureKind",
    "RpcResult",
    "TypeInference",
    "FakeCheck",
    "CoinInfo",
    "CoinEntry",
    "WhitelistEntry",
    "CacheStats",
    "BreakerState",

    # Exceptions
    "SuiTruthError",
    "InvalidAddressError",
    "CircuitOpenError",
    "ConfigurationError",
    "RpcError",
    "RateLimitError",
    "RpcTimeoutError",
    "TransportError",
    "ProtocolError",
]
