"""
Fake-Asset Detector - Heuristics for impersonating and phishing coins.

Independent checks, any one is enough to flag:

- Impersonation by type: the coin's own type names an official symbol
  (::USDC, ::SUI as a whole segment) but is not that symbol's registered
  type.
- Impersonation by display: the object's display symbol is an official
  symbol but its type is not the registered one.
- Phishing names: the coin type matches a PHISHING_RULES pattern.

Marking a genuine official coin SAFE is the caller's job.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sui_truth.models import FakeCheck
from sui_truth.whitelist import Whitelist, get_default_whitelist, unwrap_coin_type


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhishingRule:
    """One row of the phishing name table."""
    name: str
    pattern: re.Pattern[str]
    reason: str


PHISHING_RULES: tuple[PhishingRule, ...] = (
    PhishingRule("fake", re.compile(r"fake", re.IGNORECASE), 'Type name contains "fake"'),
    PhishingRule("scam", re.compile(r"scam", re.IGNORECASE), 'Type name contains "scam"'),
    PhishingRule("test...coin", re.compile(r"test.*coin", re.IGNORECASE), "Looks like a test token"),
    PhishingRule("airdrop...claim", re.compile(r"airdrop.*claim", re.IGNORECASE), "Looks like an airdrop claim lure"),
)


def _head_type(type_string: str) -> str:
    """Type without its generic arguments: 0xa::lp::LP<...> -> 0xa::lp::LP."""
    return type_string.split("<", 1)[0]


class FakeAssetDetector:
    """Scores coin types against the official coin table and phishing rules."""

    def __init__(
        self,
        whitelist: Optional[Whitelist] = None,
        phishing_rules: tuple[PhishingRule, ...] = PHISHING_RULES,
    ) -> None:
        self._whitelist = whitelist or get_default_whitelist()
        self._phishing_rules = phishing_rules
        self._symbol_patterns: dict[str, re.Pattern[str]] = {
            symbol: re.compile(rf"::{re.escape(symbol)}(?:::|$)", re.IGNORECASE)
            for symbol in self._whitelist.official_coins()
        }

    def detect(
        self,
        declared_type: Optional[str],
        display_symbol: Optional[str] = None,
    ) -> FakeCheck:
        if not declared_type:
            return FakeCheck(is_fake=False)

        coin_type = unwrap_coin_type(declared_type)

        check = self._check_impersonation(declared_type, coin_type)
        if check is None and display_symbol:
            check = self._check_display_symbol(declared_type, display_symbol)
        if check is None:
            check = self._check_phishing(declared_type, coin_type)

        if check is None:
            return FakeCheck(is_fake=False)

        logger.warning(f"[detector] Fake coin {declared_type}: {check.reason}")
        return check

    def _check_impersonation(self, declared_type: str, coin_type: str) -> Optional[FakeCheck]:
        head = _head_type(coin_type)
        coins = self._whitelist.official_coins()

        for symbol, pattern in self._symbol_patterns.items():
            if not pattern.search(head):
                continue
            if self._whitelist.is_official_type_for(symbol, declared_type):
                continue

            official_type = coins[symbol].coin_type
            return FakeCheck(
                is_fake=True,
                reason=f"Impersonates {symbol}: type {coin_type} is not the official {official_type}",
                claimed_symbol=symbol,
                actual_type=declared_type,
                official_type=official_type,
            )
        return None

    def _check_display_symbol(self, declared_type: str, display_symbol: str) -> Optional[FakeCheck]:
        coins = self._whitelist.official_coins()
        symbol = display_symbol.strip().upper()
        entry = coins.get(symbol)
        if entry is None or self._whitelist.is_official_type_for(symbol, declared_type):
            return None

        return FakeCheck(
            is_fake=True,
            reason=f"Displays as {symbol} but type differs from the official {entry.coin_type}",
            claimed_symbol=symbol,
            actual_type=declared_type,
            official_type=entry.coin_type,
        )

    def _check_phishing(self, declared_type: str, coin_type: str) -> Optional[FakeCheck]:
        for rule in self._phishing_rules:
            if rule.pattern.search(coin_type):
                return FakeCheck(
                    is_fake=True,
                    reason=f'{rule.reason} (pattern "{rule.name}")',
                    actual_type=declared_type,
                    matched_pattern=rule.name,
                )
        return None
