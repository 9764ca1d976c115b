"""
Address Trust Service - Single and batch resolution entry points.

Flow for one address:

    normalize -> whitelist (SAFE, uncached) -> cache -> breaker gate
              -> sui_getObject -> type inference -> fake detection (coins)
              -> cache write -> profile

Contract: resolve() and resolve_many() always return profiles and never
raise. Failures become degraded profiles (UNKNOWN / NEUTRAL / error set),
which are never cached, so the next request retries.
"""

import asyncio
import logging
import threading
from typing import Any, Iterable, Optional

from sui_truth.cache import ProfileCache
from sui_truth.circuit_breaker import CircuitBreaker
from sui_truth.clock import ClockProtocol, get_system_clock
from sui_truth.config import ServiceConfig
from sui_truth.exceptions import (
    CircuitOpenError,
    ConfigurationError,
    InvalidAddressError,
    SuiTruthError,
)
from sui_truth.fake_detector import FakeAssetDetector
from sui_truth.inference import TypeInferenceEngine
from sui_truth.models import (
    AddressProfile,
    AddressType,
    CoinInfo,
    RiskLevel,
    RpcFailureKind,
    TypeInference,
)
from sui_truth.normalizer import is_type_string, normalize_address
from sui_truth.rpc_client import SuiRpcClient
from sui_truth.whitelist import Whitelist, get_default_whitelist


logger = logging.getLogger(__name__)


INVALID_INPUT_ERROR = "invalid input"
CIRCUIT_OPEN_ERROR = "circuit breaker open"

TYPE_LABELS = {
    AddressType.ACCOUNT: "Account",
    AddressType.PACKAGE: "Contract package",
    AddressType.OBJECT: "On-chain object",
}


class AddressTrustService:
    """
    Resolves addresses and coin types into trust verdicts.

    Every collaborator can be injected, so tests build isolated
    instances with their own breaker, cache and RPC stub.

    Usage:
        async with AddressTrustService() as service:
            profile = await service.resolve("0x2")
            profiles = await service.resolve_many(["0x2", "0x5", "0x5"])
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        whitelist: Optional[Whitelist] = None,
        rpc_client: Optional[SuiRpcClient] = None,
        breaker: Optional[CircuitBreaker] = None,
        cache: Optional[ProfileCache] = None,
        inference: Optional[TypeInferenceEngine] = None,
        detector: Optional[FakeAssetDetector] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._config = config or ServiceConfig()
        errors = self._config.validate()
        if errors:
            raise ConfigurationError("Invalid service configuration", errors=errors)

        clock = clock or get_system_clock()
        self._whitelist = whitelist or get_default_whitelist()
        self._breaker = breaker or CircuitBreaker(
            cooldown_seconds=self._config.breaker_cooldown_seconds,
            clock=clock,
        )
        self._cache = cache or ProfileCache(
            ttl_seconds=self._config.cache_ttl_seconds,
            clock=clock,
        )
        self._rpc = rpc_client or SuiRpcClient(
            endpoint=self._config.rpc_endpoint,
            timeout=self._config.rpc_timeout_seconds,
            breaker=self._breaker,
        )
        # An injected client must still open this service's breaker on 429
        if isinstance(self._rpc, SuiRpcClient) and self._rpc.breaker is None:
            self._rpc.attach_breaker(self._breaker)
        self._inference = inference or TypeInferenceEngine()
        self._detector = detector or FakeAssetDetector(self._whitelist)

        # address -> shared lookup, so concurrent callers make one RPC call
        self._inflight: dict[str, asyncio.Future] = {}

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def cache(self) -> ProfileCache:
        return self._cache

    @property
    def whitelist(self) -> Whitelist:
        return self._whitelist

    # ─────────────────────────────────────────────────────────────
    # Single resolution
    # ─────────────────────────────────────────────────────────────

    async def resolve(self, raw_address: Any) -> AddressProfile:
        """Trust profile for one address or coin type. Never raises."""
        normalized = normalize_address(raw_address)

        try:
            if normalized is None:
                raise InvalidAddressError(INVALID_INPUT_ERROR)

            local = self._resolve_local(normalized)
            if local is not None:
                return local

            return await self._resolve_remote(normalized)

        except SuiTruthError as e:
            logger.debug(f"[service] Degraded profile for {normalized!r}: {e.message}")
            return AddressProfile.degraded(normalized or "", e.message)
        except Exception as e:
            logger.error(f"[service] Unexpected error resolving {normalized!r}: {e}", exc_info=True)
            return AddressProfile.degraded(normalized or "", f"Unexpected error: {e}")

    def _resolve_local(self, address: str) -> Optional[AddressProfile]:
        """Whitelist, coin-type and cache fast paths. None means go remote."""
        entry = self._whitelist.package_info(address)
        if entry is not None:
            return AddressProfile(
                address=address,
                type=AddressType.PACKAGE,
                risk_level=RiskLevel.SAFE,
                label=entry.name,
                is_contract=True,
                is_whitelisted=True,
                metadata=entry,
            )

        if is_type_string(address):
            return self._classify_type_string(address)

        cached = self._cache.get(address)
        if cached is not None:
            logger.debug(f"[service] Cache hit for {address}")
        return cached

    def _classify_type_string(self, type_string: str) -> AddressProfile:
        """Coin type strings are judged locally; there is no object to fetch."""
        coin = self._whitelist.coin_info(type_string)
        if coin is not None:
            symbol, entry = coin
            return AddressProfile(
                address=type_string,
                type=AddressType.OBJECT,
                risk_level=RiskLevel.SAFE,
                label=f"Official {symbol}",
                is_whitelisted=True,
                coin_info=CoinInfo.from_entry(entry),
            )

        check = self._detector.detect(type_string)
        if check.is_fake:
            return AddressProfile(
                address=type_string,
                type=AddressType.OBJECT,
                risk_level=RiskLevel.DANGER,
                label=f"Fake coin warning: {check.reason}",
                is_fake=True,
                reason=check.reason,
                fake_details=check,
            )

        return AddressProfile(
            address=type_string,
            type=AddressType.OBJECT,
            risk_level=RiskLevel.NEUTRAL,
            label="Unregistered coin type",
        )

    async def _resolve_remote(self, address: str) -> AddressProfile:
        pending = self._inflight.get(address)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_profile(address))
            self._inflight[address] = pending
            pending.add_done_callback(lambda _: self._inflight.pop(address, None))
        else:
            logger.debug(f"[service] Joining in-flight lookup for {address}")
        return await asyncio.shield(pending)

    async def _fetch_profile(self, address: str) -> AddressProfile:
        if self._breaker.is_open():
            raise CircuitOpenError(
                CIRCUIT_OPEN_ERROR,
                remaining_seconds=self._breaker.remaining_seconds(),
                address=address,
            )

        result = await self._rpc.get_object(address)

        if not result.ok and result.kind is not RpcFailureKind.PROTOCOL_ERROR:
            logger.warning(f"[service] {address} degraded: {result.kind.value} {result.message}")
            return AddressProfile.degraded(address, result.message)

        inference = self._inference.infer(result)

        if not result.ok and inference.type is AddressType.UNKNOWN:
            logger.warning(f"[service] {address} degraded: {inference.reason}")
            return AddressProfile.degraded(address, result.message)

        profile = self._build_profile(address, inference)
        self._cache.put(address, profile)
        return profile

    def _build_profile(self, address: str, inference: TypeInference) -> AddressProfile:
        risk_level = RiskLevel.NEUTRAL
        label = TYPE_LABELS.get(inference.type)
        is_fake = False
        coin_info = None
        fake_details = None

        if inference.is_coin:
            check = self._detector.detect(inference.object_type, inference.display_symbol)
            if check.is_fake:
                risk_level = RiskLevel.DANGER
                label = f"Fake coin warning: {check.reason}"
                is_fake = True
                fake_details = check
            else:
                coin = self._whitelist.coin_info(inference.object_type)
                if coin is not None:
                    symbol, entry = coin
                    risk_level = RiskLevel.SAFE
                    label = f"Official {symbol}"
                    coin_info = CoinInfo.from_entry(entry)

        return AddressProfile(
            address=address,
            type=inference.type,
            risk_level=risk_level,
            label=label,
            is_contract=inference.type is AddressType.PACKAGE,
            is_fake=is_fake,
            confidence=inference.confidence,
            coin_info=coin_info,
            reason=inference.reason,
            fake_details=fake_details,
        )

    # ─────────────────────────────────────────────────────────────
    # Batch resolution
    # ─────────────────────────────────────────────────────────────

    async def resolve_many(
        self,
        raw_addresses: Optional[Iterable[Any]],
    ) -> dict[str, AddressProfile]:
        """
        Profiles keyed by normalized address, one per distinct input.

        Whitelist and cache hits are answered without I/O. Misses are
        resolved with at most `batch_concurrency` calls in flight; an
        open breaker degrades every miss without calling upstream.
        Invalid inputs are skipped. A bare string is a batch of one.
        """
        if not raw_addresses:
            return {}
        if isinstance(raw_addresses, str):
            raw_addresses = [raw_addresses]

        unique = list(dict.fromkeys(
            normalized
            for normalized in map(normalize_address, raw_addresses)
            if normalized is not None
        ))
        if not unique:
            return {}

        profiles: dict[str, AddressProfile] = {}
        misses: list[str] = []
        for address in unique:
            local = self._resolve_local(address)
            if local is not None:
                profiles[address] = local
            else:
                misses.append(address)

        if misses and self._breaker.is_open():
            logger.warning(f"[service] Circuit open, degrading {len(misses)} batch misses")
            for address in misses:
                profiles[address] = AddressProfile.degraded(address, CIRCUIT_OPEN_ERROR)
        elif misses:
            semaphore = asyncio.Semaphore(self._config.batch_concurrency)

            async def resolve_one(address: str) -> AddressProfile:
                async with semaphore:
                    return await self.resolve(address)

            results = await asyncio.gather(
                *(resolve_one(address) for address in misses),
                return_exceptions=True,
            )
            for address, result in zip(misses, results):
                if isinstance(result, BaseException):
                    profiles[address] = AddressProfile.degraded(
                        address, str(result) or "Unknown error"
                    )
                else:
                    profiles[address] = result

        logger.debug(
            f"[service] Batch of {len(unique)}: {len(unique) - len(misses)} local, "
            f"{len(misses)} remote"
        )
        return {address: profiles[address] for address in unique}

    # ─────────────────────────────────────────────────────────────
    # Name service
    # ─────────────────────────────────────────────────────────────

    async def resolve_name(self, domain: Any) -> Optional[str]:
        """Address behind a .sui name, or None. Never raises."""
        if not isinstance(domain, str):
            return None
        name = domain.strip().lower()
        if not name.endswith(".sui"):
            return None

        if self._breaker.is_open():
            logger.debug(f"[service] Circuit open, skipping name lookup for {name}")
            return None

        try:
            result = await self._rpc.resolve_name_service_address(name)
        except Exception as e:
            logger.warning(f"[service] Name lookup failed for {name}: {e}")
            return None

        if not result.ok or not isinstance(result.payload, str):
            return None
        return normalize_address(result.payload)

    # ─────────────────────────────────────────────────────────────
    # Cache management
    # ─────────────────────────────────────────────────────────────

    def clear_cache(self) -> None:
        self._cache.clear()

    def prune_expired_cache(self) -> int:
        return self._cache.prune_expired()

    def cache_stats(self) -> dict[str, Any]:
        """Cache counts plus breaker state."""
        stats: dict[str, Any] = self._cache.stats().to_dict()
        breaker = self._breaker.snapshot()
        stats["breaker_open"] = breaker["breaker_open"]
        stats["breaker_remaining_ms"] = breaker["breaker_remaining_ms"]
        return stats

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close the RPC client's HTTP session."""
        await self._rpc.close()

    async def __aenter__(self) -> "AddressTrustService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__}(cache={len(self._cache)}, "
            f"breaker={self._breaker.state.value})>"
        )


# =============================================================
# GLOBAL SERVICE SINGLETON
# =============================================================


_default_service: Optional[AddressTrustService] = None
_service_lock = threading.Lock()


def get_default_service() -> AddressTrustService:
    """
    Get the process-wide service.

    Creates one from environment configuration if it doesn't exist.
    """
    global _default_service

    with _service_lock:
        if _default_service is None:
            _default_service = AddressTrustService(config=ServiceConfig.from_env())
        return _default_service


def set_default_service(service: Optional[AddressTrustService]) -> None:
    """Replace (or with None, drop) the process-wide service."""
    global _default_service

    with _service_lock:
        _default_service = service
