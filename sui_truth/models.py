"""
Address Trust Models - Profiles, RPC results and classification records.

An AddressProfile is the only thing callers ever receive. Every other
model here is an intermediate produced by one component and consumed by
the next.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class AddressType(Enum):
    """What an address resolves to on chain."""
    ACCOUNT = "ACCOUNT"
    PACKAGE = "PACKAGE"
    OBJECT = "OBJECT"
    UNKNOWN = "UNKNOWN"


class RiskLevel(Enum):
    """Trust verdict used for annotation."""
    SAFE = "SAFE"
    NEUTRAL = "NEUTRAL"
    SUSPICIOUS = "SUSPICIOUS"
    DANGER = "DANGER"


class Confidence(Enum):
    """Strength of an RPC-derived classification."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ObjectSubType(Enum):
    """Refinement of AddressType.OBJECT."""
    COIN = "COIN"
    OTHER = "OTHER"


class RpcFailureKind(Enum):
    """Typed failure of a single RPC call."""
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"


class BreakerState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"


# ─────────────────────────────────────────────────────────────
# Whitelist records
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WhitelistEntry:
    """Known-good package."""
    address: str
    name: str
    description: str
    is_system_package: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "address": self.address,
            "name": self.name,
            "description": self.description,
            "isSystemPackage": self.is_system_package,
        }


@dataclass(frozen=True)
class CoinEntry:
    """Known-good coin type."""
    symbol: str
    coin_type: str
    decimals: int
    name: str
    description: str = ""


@dataclass(frozen=True)
class CoinInfo:
    """Coin facts attached to a profile of a recognized official coin."""
    symbol: str
    decimals: int
    registered_type: str

    @classmethod
    def from_entry(cls, entry: CoinEntry) -> "CoinInfo":
        return cls(
            symbol=entry.symbol,
            decimals=entry.decimals,
            registered_type=entry.coin_type,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "symbol": self.symbol,
            "decimals": self.decimals,
            "registeredType": self.registered_type,
        }


# ─────────────────────────────────────────────────────────────
# RPC
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RpcResult:
    """
    Outcome of one RPC call.

    Either ok with the upstream `result` payload, or a failure with a
    kind and message. For PROTOCOL_ERROR, `code` and `message` are the
    upstream values, untouched.
    """
    ok: bool
    payload: Any = None
    kind: Optional[RpcFailureKind] = None
    message: str = ""
    code: Any = None
    status: Optional[int] = None
    request_id: Optional[int] = None

    @classmethod
    def success(cls, payload: Any, request_id: Optional[int] = None) -> "RpcResult":
        return cls(ok=True, payload=payload, request_id=request_id)

    @classmethod
    def failure(
        cls,
        kind: RpcFailureKind,
        message: str,
        code: Any = None,
        status: Optional[int] = None,
        request_id: Optional[int] = None,
    ) -> "RpcResult":
        return cls(
            ok=False,
            kind=kind,
            message=message,
            code=code,
            status=status,
            request_id=request_id,
        )


# ─────────────────────────────────────────────────────────────
# Classification
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TypeInference:
    """Result of mapping an RPC response to an address type."""
    type: AddressType
    confidence: Confidence
    reason: str
    sub_type: Optional[ObjectSubType] = None
    object_type: Optional[str] = None  # declared Move type, when known
    display_symbol: Optional[str] = None

    @property
    def is_coin(self) -> bool:
        return self.sub_type is ObjectSubType.COIN


@dataclass(frozen=True)
class FakeCheck:
    """Fake-asset verdict. Audit fields are kept for tooltips."""
    is_fake: bool
    reason: Optional[str] = None
    claimed_symbol: Optional[str] = None
    actual_type: Optional[str] = None
    official_type: Optional[str] = None
    matched_pattern: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "isFake": self.is_fake,
            "reason": self.reason,
            "claimedSymbol": self.claimed_symbol,
            "actualType": self.actual_type,
            "officialType": self.official_type,
            "matchedPattern": self.matched_pattern,
        }


# ─────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddressProfile:
    """
    Trust verdict for one address or coin type.

    Immutable once produced. A profile with `error` set is a degraded
    default, not a confirmed classification.
    """
    address: str
    type: AddressType
    risk_level: RiskLevel
    label: Optional[str] = None
    is_contract: bool = False
    is_whitelisted: bool = False
    is_fake: bool = False
    confidence: Optional[Confidence] = None
    coin_info: Optional[CoinInfo] = None
    metadata: Optional[WhitelistEntry] = None
    error: Optional[str] = None
    reason: Optional[str] = None
    fake_details: Optional[FakeCheck] = None

    @classmethod
    def degraded(cls, address: str, error: str) -> "AddressProfile":
        """Inconclusive answer returned on any failure path."""
        return cls(
            address=address,
            type=AddressType.UNKNOWN,
            risk_level=RiskLevel.NEUTRAL,
            error=error,
        )

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase shape consumed by the page scanner."""
        data: dict[str, Any] = {
            "address": self.address,
            "type": self.type.value,
            "riskLevel": self.risk_level.value,
            "label": self.label,
            "isContract": self.is_contract,
            "isWhitelisted": self.is_whitelisted,
            "isFake": self.is_fake,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence.value
        if self.coin_info is not None:
            data["coinInfo"] = self.coin_info.to_dict()
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        if self.error is not None:
            data["error"] = self.error
        if self.reason is not None:
            data["reason"] = self.reason
        if self.fake_details is not None:
            data["fakeDetails"] = self.fake_details.to_dict()
        return data


# ─────────────────────────────────────────────────────────────
# Cache
# ─────────────────────────────────────────────────────────────

@dataclass
class CacheEntry:
    """Cached profile with its insertion time (clock timestamp)."""
    profile: AddressProfile
    inserted_at: float
    hits: int = 0

    def age_seconds(self, now: float) -> float:
        return now - self.inserted_at

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return self.age_seconds(now) > ttl_seconds


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy."""
    total: int
    valid: int
    expired: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "valid": self.valid,
            "expired": self.expired,
        }


@dataclass
class ClientStats:
    """Running counters for the RPC client."""
    requests: int = 0
    successes: int = 0
    failures: dict[str, int] = field(default_factory=dict)
    last_latency_ms: Optional[float] = None
    last_error: Optional[str] = None

    def record_failure(self, kind: RpcFailureKind, message: str) -> None:
        self.failures[kind.value] = self.failures.get(kind.value, 0) + 1
        self.last_error = message

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests": self.requests,
            "successes": self.successes,
            "failures": dict(self.failures),
            "last_latency_ms": self.last_latency_ms,
            "last_error": self.last_error,
        }
