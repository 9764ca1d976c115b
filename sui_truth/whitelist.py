"""
Whitelist Classifier - Static tables of official packages and coin types.

Lookups are exact-equality only. A full-length address matches a short
entry when, and only when, both denote the same 32-byte value after
zero-padding; an address that merely starts with the digits of a short
entry (0x2abc...) never matches.
"""

import logging
import re
from types import MappingProxyType
from typing import Mapping, Optional

from sui_truth.models import CoinEntry, WhitelistEntry
from sui_truth.normalizer import is_hex_address


logger = logging.getLogger(__name__)


ADDRESS_HEX_LENGTH = 64

OFFICIAL_PACKAGES: Mapping[str, WhitelistEntry] = MappingProxyType({
    "0x1": WhitelistEntry(
        address="0x1",
        name="Move Stdlib",
        description="Move language standard library",
        is_system_package=True,
    ),
    "0x2": WhitelistEntry(
        address="0x2",
        name="Sui Framework",
        description="Core Sui logic: Coin, Object, Transfer",
        is_system_package=True,
    ),
    "0x3": WhitelistEntry(
        address="0x3",
        name="Sui System",
        description="Staking and validator logic",
        is_system_package=True,
    ),
    "0xdee9": WhitelistEntry(
        address="0xdee9",
        name="DeepBook",
        description="Official central limit order book",
        is_system_package=True,
    ),
    "0xd22b24490e0bae52676651b4f56660a5ff8022a2576e0089f79b3c88d44e08f0": WhitelistEntry(
        address="0xd22b24490e0bae52676651b4f56660a5ff8022a2576e0089f79b3c88d44e08f0",
        name="SuiNS",
        description="Sui name service",
    ),
    "0x5306f64e312b581766351c07af79c72fcb1cd25147157fdc2f8ad76de9a3fb6a": WhitelistEntry(
        address="0x5306f64e312b581766351c07af79c72fcb1cd25147157fdc2f8ad76de9a3fb6a",
        name="Wormhole Bridge",
        description="Official cross-chain bridge",
    ),
})

OFFICIAL_COINS: Mapping[str, CoinEntry] = MappingProxyType({
    "SUI": CoinEntry(
        symbol="SUI",
        coin_type="0x2::sui::SUI",
        decimals=9,
        name="Sui",
        description="Native Sui token",
    ),
    "USDC": CoinEntry(
        symbol="USDC",
        coin_type="0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC",
        decimals=6,
        name="USD Coin",
        description="Circle native USDC",
    ),
    "USDT": CoinEntry(
        symbol="USDT",
        coin_type="0xc060006111016b8a020ad5b338349841437adb20874067361659545ed8199e06::coin::COIN",
        decimals=6,
        name="Tether USD",
        description="Tether USDT via Wormhole",
    ),
})

_TYPE_ADDRESS = re.compile(r"0x([0-9a-f]+)")
_COIN_WRAPPER = re.compile(r"^0x0*2::coin::coin<(.+)>$")


def pad_address(address: str) -> str:
    """Zero-pad a hex address to its full 32-byte form."""
    return "0x" + address[2:].zfill(ADDRESS_HEX_LENGTH)


def canonical_type(type_string: str) -> str:
    """
    Comparison key for a Move type tag.

    Lowercased, with every embedded address stripped of leading zeros,
    so 0x0000...0002::sui::SUI and 0x2::sui::sui compare equal.
    """
    lowered = type_string.strip().lower()
    return _TYPE_ADDRESS.sub(lambda m: "0x" + (m.group(1).lstrip("0") or "0"), lowered)


def unwrap_coin_type(type_string: str) -> str:
    """Inner T of 0x2::coin::Coin<T>; other type strings unchanged."""
    match = _COIN_WRAPPER.match(type_string.strip().lower())
    if match:
        # Slice from the original to keep the caller's casing
        stripped = type_string.strip()
        return stripped[stripped.index("<") + 1:-1]
    return type_string.strip()


class Whitelist:
    """
    Read-only membership and metadata lookups.

    Usage:
        whitelist = Whitelist()
        whitelist.is_known_package("0x2")                       # True
        whitelist.is_known_package("0x" + "0" * 63 + "2")       # True
        whitelist.coin_info("0x2::coin::Coin<0x2::sui::SUI>")   # ("SUI", CoinEntry)
    """

    def __init__(
        self,
        packages: Optional[Mapping[str, WhitelistEntry]] = None,
        coins: Optional[Mapping[str, CoinEntry]] = None,
    ) -> None:
        packages = OFFICIAL_PACKAGES if packages is None else packages
        coins = OFFICIAL_COINS if coins is None else coins

        self._packages: dict[str, WhitelistEntry] = {
            key.lower(): entry for key, entry in packages.items()
        }
        self._packages_by_full: dict[str, WhitelistEntry] = {
            pad_address(key): entry
            for key, entry in self._packages.items()
            if is_hex_address(key)
        }
        self._coins: dict[str, CoinEntry] = dict(coins)
        self._coins_by_type: dict[str, tuple[str, CoinEntry]] = {
            canonical_type(entry.coin_type): (symbol, entry)
            for symbol, entry in self._coins.items()
        }
        logger.debug(
            f"[whitelist] Loaded {len(self._packages)} packages, {len(self._coins)} coins"
        )

    # ─────────────────────────────────────────────────────────────
    # Packages
    # ─────────────────────────────────────────────────────────────

    def package_info(self, address: Optional[str]) -> Optional[WhitelistEntry]:
        """Whitelist entry for a normalized address, or None."""
        if not address:
            return None

        entry = self._packages.get(address)
        if entry is not None:
            return entry

        if is_hex_address(address):
            return self._packages_by_full.get(pad_address(address))
        return None

    def is_known_package(self, address: Optional[str]) -> bool:
        return self.package_info(address) is not None

    # ─────────────────────────────────────────────────────────────
    # Coins
    # ─────────────────────────────────────────────────────────────

    def coin_info(self, type_string: Optional[str]) -> Optional[tuple[str, CoinEntry]]:
        """(symbol, entry) when type_string is exactly an official coin type."""
        if not type_string:
            return None
        return self._coins_by_type.get(canonical_type(unwrap_coin_type(type_string)))

    def is_known_coin_type(self, type_string: Optional[str]) -> bool:
        return self.coin_info(type_string) is not None

    def official_coins(self) -> dict[str, CoinEntry]:
        """Symbol -> entry, a copy."""
        return dict(self._coins)

    def is_official_type_for(self, symbol: str, type_string: str) -> bool:
        """True when type_string is the registered type of the given symbol."""
        entry = self._coins.get(symbol)
        if entry is None:
            return False
        return canonical_type(unwrap_coin_type(type_string)) == canonical_type(entry.coin_type)

    def __len__(self) -> int:
        return len(self._packages) + len(self._coins)

    def __repr__(self) -> str:
        return f"<Whitelist(packages={len(self._packages)}, coins={len(self._coins)})>"


_default_whitelist: Optional[Whitelist] = None


def get_default_whitelist() -> Whitelist:
    """Get or create the process-wide whitelist."""
    global _default_whitelist
    if _default_whitelist is None:
        _default_whitelist = Whitelist()
    return _default_whitelist
