"""
Type Inference Engine - Map an RPC outcome to an address type.

Decision order:
1. PROTOCOL_ERROR saying the object does not exist -> ACCOUNT / medium
2. any other failure                               -> UNKNOWN / low
3. success without a body                          -> UNKNOWN / low
4. package                                         -> PACKAGE / high
5. first matching OBJECT_TYPE_RULES entry          -> OBJECT / rule confidence

A missing object is the accepted heuristic for a plain wallet address,
not a guarantee.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from sui_truth.models import (
    AddressType,
    Confidence,
    ObjectSubType,
    RpcFailureKind,
    RpcResult,
    TypeInference,
)


logger = logging.getLogger(__name__)


# Upstream phrasing for "there is no object at this id"
NOT_FOUND_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"not exist", re.IGNORECASE),
    re.compile(r"notexist", re.IGNORECASE),
    re.compile(r"not found", re.IGNORECASE),
    re.compile(r"deleted", re.IGNORECASE),
)


@dataclass(frozen=True)
class ObjectTypeRule:
    """One row of the object classification table."""
    name: str
    pattern: re.Pattern[str]
    sub_type: ObjectSubType
    confidence: Confidence
    reason: str

    def matches(self, object_type: str) -> bool:
        return bool(self.pattern.search(object_type))


# First match wins
OBJECT_TYPE_RULES: tuple[ObjectTypeRule, ...] = (
    ObjectTypeRule(
        name="coin",
        pattern=re.compile(r"::coin::Coin<.+>$", re.IGNORECASE),
        sub_type=ObjectSubType.COIN,
        confidence=Confidence.HIGH,
        reason="Object is a Coin",
    ),
    ObjectTypeRule(
        name="struct",
        pattern=re.compile(r"^0x[0-9a-f]+::\w+::\w+", re.IGNORECASE),
        sub_type=ObjectSubType.OTHER,
        confidence=Confidence.HIGH,
        reason="Typed on-chain object",
    ),
)

GENERIC_OBJECT_REASON = "Generic on-chain object"


def _looks_missing(text: Any) -> bool:
    return isinstance(text, str) and any(p.search(text) for p in NOT_FOUND_PATTERNS)


def _declared_kind(data: dict[str, Any]) -> str:
    content = data.get("content")
    content_kind = content.get("dataType") if isinstance(content, dict) else None
    for value in (data.get("type"), data.get("dataType"), content_kind):
        if isinstance(value, str) and value:
            return value
    return ""


def extract_display_symbol(data: dict[str, Any]) -> Optional[str]:
    """Symbol advertised by the object's display metadata or content fields."""
    display = data.get("display")
    if isinstance(display, dict) and isinstance(display.get("data"), dict):
        symbol = display["data"].get("symbol")
        if isinstance(symbol, str) and symbol.strip():
            return symbol.strip()

    content = data.get("content")
    if isinstance(content, dict) and isinstance(content.get("fields"), dict):
        symbol = content["fields"].get("symbol")
        if isinstance(symbol, str) and symbol.strip():
            return symbol.strip()
    return None


class TypeInferenceEngine:
    """Stateless classifier over sui_getObject outcomes."""

    def __init__(
        self,
        object_rules: tuple[ObjectTypeRule, ...] = OBJECT_TYPE_RULES,
    ) -> None:
        self._object_rules = object_rules

    def infer(self, result: RpcResult) -> TypeInference:
        if not result.ok:
            return self._infer_failure(result)
        return self._infer_payload(result.payload)

    def _infer_failure(self, result: RpcResult) -> TypeInference:
        if result.kind is RpcFailureKind.PROTOCOL_ERROR and _looks_missing(result.message):
            return TypeInference(
                type=AddressType.ACCOUNT,
                confidence=Confidence.MEDIUM,
                reason="Object not found, likely an account address",
            )

        return TypeInference(
            type=AddressType.UNKNOWN,
            confidence=Confidence.LOW,
            reason=f"RPC error: {result.message}",
        )

    def _infer_payload(self, payload: Any) -> TypeInference:
        if not isinstance(payload, dict):
            return self._no_data()

        # The fullnode reports a missing object inside a successful envelope
        object_error = payload.get("error")
        if isinstance(object_error, dict):
            code = object_error.get("code")
            if _looks_missing(code) or _looks_missing(object_error.get("message")):
                return TypeInference(
                    type=AddressType.ACCOUNT,
                    confidence=Confidence.MEDIUM,
                    reason="Object not found, likely an account address",
                )
            return TypeInference(
                type=AddressType.UNKNOWN,
                confidence=Confidence.LOW,
                reason=f"Object error: {code}",
            )

        data = payload.get("data")
        if not isinstance(data, dict) or not data:
            return self._no_data()

        kind = _declared_kind(data)
        if kind == "package":
            return TypeInference(
                type=AddressType.PACKAGE,
                confidence=Confidence.HIGH,
                reason="Object type is package",
            )

        object_type = data.get("type") if isinstance(data.get("type"), str) else ""
        display_symbol = extract_display_symbol(data)

        for rule in self._object_rules:
            if object_type and rule.matches(object_type):
                logger.debug(f"[inference] {object_type} matched rule '{rule.name}'")
                return TypeInference(
                    type=AddressType.OBJECT,
                    confidence=rule.confidence,
                    reason=rule.reason,
                    sub_type=rule.sub_type,
                    object_type=object_type,
                    display_symbol=display_symbol,
                )

        return TypeInference(
            type=AddressType.OBJECT,
            confidence=Confidence.MEDIUM,
            reason=GENERIC_OBJECT_REASON,
            sub_type=ObjectSubType.OTHER,
            object_type=object_type or None,
            display_symbol=display_symbol,
        )

    @staticmethod
    def _no_data() -> TypeInference:
        return TypeInference(
            type=AddressType.UNKNOWN,
            confidence=Confidence.LOW,
            reason="No data in response",
        )
