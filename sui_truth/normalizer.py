"""
Address normalization and text helpers.

normalize_address() is the single entry point used by the resolution
service. Short/full-length equivalence is NOT handled here; the
whitelist does that lookup so the normalized string stays exactly what
the caller supplied, minus case and whitespace.
"""

import re
from typing import Any, Optional


ADDRESS_PATTERNS = {
    # Full 32-byte address
    "STANDARD": re.compile(r"^0x[a-f0-9]{64}$", re.IGNORECASE),
    # System short addresses
    "SYSTEM": re.compile(r"^0x[1-3]$"),
    # Abbreviated explorer display form, e.g. 0x123...abc
    "ABBREVIATED": re.compile(r"^0x[a-f0-9]{3,8}\.{3}[a-f0-9]{3,8}$", re.IGNORECASE),
    # Loose hex run, for pulling candidates out of free text
    "LOOSE": re.compile(r"0x[a-f0-9]+(?:\.{3}[a-f0-9]+)?", re.IGNORECASE),
}

_HEX_ADDRESS = re.compile(r"^0x[0-9a-f]+$")


def normalize_address(raw: Any) -> Optional[str]:
    """
    Canonical lowercase, trimmed form of an address or coin type string.

    Returns None for anything that is not a non-blank string.
    """
    if not isinstance(raw, str):
        return None
    normalized = raw.strip().lower()
    if not normalized:
        return None
    return normalized


def is_type_string(value: str) -> bool:
    """True for Move type tags such as 0x2::sui::SUI."""
    return "::" in value


def is_hex_address(value: str) -> bool:
    """True for a normalized 0x-prefixed hex string of any length up to 32 bytes."""
    return bool(_HEX_ADDRESS.match(value)) and len(value) <= 66


def is_valid_address_format(address: Optional[str]) -> bool:
    """Full, system-short, or abbreviated display form."""
    if not address:
        return False
    return any(
        ADDRESS_PATTERNS[name].match(address)
        for name in ("STANDARD", "SYSTEM", "ABBREVIATED")
    )


def extract_addresses(text: Optional[str]) -> list[str]:
    """Unique well-formed addresses found in text, in order of appearance."""
    if not text:
        return []
    found = dict.fromkeys(ADDRESS_PATTERNS["LOOSE"].findall(text))
    return [candidate for candidate in found if is_valid_address_format(candidate)]
