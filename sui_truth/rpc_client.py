"""
Sui JSON-RPC Client - One remote call, hard timeout, typed outcome.

call() never raises for upstream trouble. Every failure comes back as
an RpcResult with a kind:

- HTTP 429               -> RATE_LIMITED (and the circuit breaker is tripped)
- timeout                -> TIMEOUT
- other non-2xx / socket -> TRANSPORT_ERROR (status kept)
- JSON-RPC error object  -> PROTOCOL_ERROR (code and message verbatim)
"""

import asyncio
import itertools
import logging
import time
from typing import Any, Optional

import aiohttp

from sui_truth.circuit_breaker import CircuitBreaker
from sui_truth.config import DEFAULT_RPC_ENDPOINT, DEFAULT_RPC_TIMEOUT_SECONDS
from sui_truth.exceptions import (
    ProtocolError,
    RateLimitError,
    RpcError,
    RpcTimeoutError,
    TransportError,
)
from sui_truth.models import ClientStats, RpcFailureKind, RpcResult


logger = logging.getLogger(__name__)


GET_OBJECT_METHOD = "sui_getObject"
RESOLVE_NAME_METHOD = "suix_resolveNameServiceAddress"

DEFAULT_OBJECT_OPTIONS = {
    "showType": True,
    "showOwner": True,
    "showContent": True,
    "showDisplay": True,
}


class SuiRpcClient:
    """
    Thin aiohttp JSON-RPC client for a Sui fullnode.

    Usage:
        async with SuiRpcClient(breaker=breaker) as client:
            result = await client.get_object("0x5")
            if result.ok:
                data = result.payload["data"]
    """

    JSONRPC_VERSION = "2.0"

    # Shared by every instance: ids are unique for the process lifetime
    _request_ids = itertools.count(1)

    def __init__(
        self,
        endpoint: str = DEFAULT_RPC_ENDPOINT,
        timeout: float = DEFAULT_RPC_TIMEOUT_SECONDS,
        breaker: Optional[CircuitBreaker] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._breaker = breaker
        self._session = session
        self._owns_session = session is None
        self._stats = ClientStats()

    @property
    def name(self) -> str:
        return "rpc"

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def breaker(self) -> Optional[CircuitBreaker]:
        return self._breaker

    def attach_breaker(self, breaker: CircuitBreaker) -> None:
        """Breaker to trip on HTTP 429."""
        self._breaker = breaker

    @classmethod
    def next_request_id(cls) -> int:
        return next(cls._request_ids)

    # ─────────────────────────────────────────────────────────────
    # Public calls
    # ─────────────────────────────────────────────────────────────

    async def call(self, method: str, params: list[Any]) -> RpcResult:
        """Issue one JSON-RPC call. Never raises for upstream failures."""
        request_id = self.next_request_id()
        self._stats.requests += 1
        start_time = time.monotonic()

        try:
            payload = await asyncio.wait_for(
                self._make_request(method, params, request_id),
                timeout=self._timeout,
            )
        except RateLimitError as e:
            if self._breaker is not None:
                self._breaker.trip()
            result = RpcResult.failure(
                RpcFailureKind.RATE_LIMITED, e.message, status=429, request_id=request_id,
            )
        except (asyncio.TimeoutError, RpcTimeoutError):
            logger.warning(f"[{self.name}] {method} #{request_id} timed out after {self._timeout}s")
            result = RpcResult.failure(
                RpcFailureKind.TIMEOUT, "Request timeout", request_id=request_id,
            )
        except ProtocolError as e:
            result = RpcResult.failure(
                RpcFailureKind.PROTOCOL_ERROR, e.message, code=e.code, request_id=request_id,
            )
        except TransportError as e:
            logger.warning(f"[{self.name}] {method} #{request_id} failed: {e.message}")
            result = RpcResult.failure(
                RpcFailureKind.TRANSPORT_ERROR, e.message,
                status=e.status_code, request_id=request_id,
            )
        except RpcError as e:
            result = RpcResult.failure(
                RpcFailureKind.TRANSPORT_ERROR, e.message, request_id=request_id,
            )
        else:
            result = RpcResult.success(payload, request_id=request_id)

        self._stats.last_latency_ms = (time.monotonic() - start_time) * 1000
        if result.ok:
            self._stats.successes += 1
        else:
            self._stats.record_failure(result.kind, result.message)
            logger.debug(
                f"[{self.name}] {method} #{request_id} -> {result.kind.value}: {result.message}"
            )
        return result

    async def get_object(
        self,
        object_id: str,
        options: Optional[dict[str, bool]] = None,
    ) -> RpcResult:
        """sui_getObject with type, owner, content and display requested."""
        return await self.call(
            GET_OBJECT_METHOD,
            [object_id, dict(options or DEFAULT_OBJECT_OPTIONS)],
        )

    async def resolve_name_service_address(self, domain: str) -> RpcResult:
        """suix_resolveNameServiceAddress for a .sui name."""
        return await self.call(RESOLVE_NAME_METHOD, [domain])

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "SuiTruth/1.0",
        }

    async def _make_request(
        self,
        method: str,
        params: list[Any],
        request_id: int,
    ) -> Any:
        """POST the envelope and return its `result`, raising typed RpcErrors."""
        session = await self._get_session()
        body = {
            "jsonrpc": self.JSONRPC_VERSION,
            "id": request_id,
            "method": method,
            "params": params,
        }

        try:
            async with session.post(self._endpoint, json=body) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else None,
                        method=method,
                        request_id=request_id,
                    )

                if not 200 <= response.status < 300:
                    text = await response.text()
                    raise TransportError(
                        message=f"HTTP {response.status}: {response.reason}",
                        status_code=response.status,
                        response_body=text[:500],
                        method=method,
                        request_id=request_id,
                    )

                try:
                    envelope = await response.json(content_type=None)
                except ValueError as e:
                    raise TransportError(
                        message="Invalid JSON response",
                        status_code=response.status,
                        method=method,
                        request_id=request_id,
                        original_error=e,
                    )

        except asyncio.TimeoutError as e:
            raise RpcTimeoutError(
                message="Request timeout",
                method=method,
                request_id=request_id,
                original_error=e,
            )
        except aiohttp.ClientError as e:
            raise TransportError(
                message=f"Connection error: {e}",
                method=method,
                request_id=request_id,
                original_error=e,
            )

        if not isinstance(envelope, dict):
            raise TransportError(
                message="Malformed JSON-RPC envelope",
                method=method,
                request_id=request_id,
            )

        error = envelope.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = error.get("message", "")
                raise ProtocolError(
                    message=message if isinstance(message, str) else str(message),
                    code=error.get("code"),
                    method=method,
                    request_id=request_id,
                )
            raise ProtocolError(message=str(error), method=method, request_id=request_id)

        return envelope.get("result")

    # ─────────────────────────────────────────────────────────────
    # Stats & Lifecycle
    # ─────────────────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Request counters and last latency."""
        return self._stats.to_dict()

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "SuiRpcClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(endpoint={self._endpoint}, timeout={self._timeout}s)>"
