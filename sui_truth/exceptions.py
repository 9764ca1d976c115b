"""
Address Trust Exceptions - Custom exception hierarchy.

These never reach callers of the resolution service: the RPC client
turns them into typed RpcResult failures and the service turns anything
left over into a degraded profile. ConfigurationError is the exception,
raised at construction time.
"""

from datetime import datetime
from typing import Any, Optional


class SuiTruthError(Exception):
    """Base exception for all address trust errors."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.address = address
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "address": self.address,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.address:
            parts.append(f"[address={self.address}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class InvalidAddressError(SuiTruthError):
    """Input is absent, not a string, or blank."""


class CircuitOpenError(SuiTruthError):
    """Outbound call suppressed by the circuit breaker."""

    def __init__(
        self,
        message: str = "circuit breaker open",
        remaining_seconds: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.remaining_seconds = remaining_seconds


class ConfigurationError(SuiTruthError):
    """Invalid service configuration."""

    def __init__(
        self,
        message: str,
        errors: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["errors"] = self.errors
        return data


# ─────────────────────────────────────────────────────────────
# RPC errors
# ─────────────────────────────────────────────────────────────

class RpcError(SuiTruthError):
    """Error during a single RPC call."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        request_id: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.method = method
        self.request_id = request_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "method": self.method,
            "request_id": self.request_id,
        })
        return data


class RateLimitError(RpcError):
    """Upstream answered HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limited by RPC",
        retry_after_seconds: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.retry_after_seconds = retry_after_seconds


class RpcTimeoutError(RpcError):
    """Call exceeded the hard timeout."""


class TransportError(RpcError):
    """Connection failure, non-2xx status, or unreadable body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.response_body = response_body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "response_body": self.response_body,
        })
        return data


class ProtocolError(RpcError):
    """Well-formed JSON-RPC error envelope. Code and message are verbatim."""

    def __init__(
        self,
        message: str,
        code: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["code"] = self.code
        return data
