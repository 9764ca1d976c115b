"""
Whitelist Classifier Tests.

============================================================
PURPOSE
============================================================
Membership and metadata lookups for official packages and coins.

TEST CATEGORIES:
- Package lookups: short and zero-padded forms
- Prefix regression: look-alike addresses must never match
- Coin lookups: exact type equality, Coin<T> unwrapping

============================================================
"""

import pytest

from sui_truth.whitelist import (
    OFFICIAL_COINS,
    OFFICIAL_PACKAGES,
    Whitelist,
    canonical_type,
    pad_address,
    unwrap_coin_type,
)


FULL_0X2 = "0x" + "0" * 63 + "2"
USDC_TYPE = OFFICIAL_COINS["USDC"].coin_type


@pytest.fixture
def whitelist():
    return Whitelist()


# ============================================================
# PACKAGE TESTS
# ============================================================

class TestPackageLookup:
    """Tests for official package lookups."""

    @pytest.mark.parametrize("address", list(OFFICIAL_PACKAGES))
    def test_every_canonical_entry_is_known(self, whitelist, address):
        """Test each table key is recognized as-is."""
        assert whitelist.is_known_package(address)
        assert whitelist.package_info(address) is OFFICIAL_PACKAGES[address]

    @pytest.mark.parametrize("short", ["0x1", "0x2", "0x3", "0xdee9"])
    def test_zero_padded_form_matches_short_entry(self, whitelist, short):
        """Test the full 32-byte form of a short address."""
        full = pad_address(short)

        assert len(full) == 66
        assert whitelist.package_info(full) is OFFICIAL_PACKAGES[short]

    def test_framework_metadata(self, whitelist):
        """Test metadata of 0x2."""
        entry = whitelist.package_info(FULL_0X2)

        assert entry.name == "Sui Framework"
        assert entry.is_system_package is True

    def test_unknown_address(self, whitelist):
        """Test a random address is not whitelisted."""
        assert whitelist.package_info("0x" + "a" * 64) is None

    def test_empty_input(self, whitelist):
        """Test None and empty string."""
        assert whitelist.is_known_package(None) is False
        assert whitelist.is_known_package("") is False


class TestPrefixRegression:
    """Look-alike addresses sharing a whitelisted prefix must not match."""

    @pytest.mark.parametrize("address", [
        "0x2" + "b" * 63,
        "0x20",
        "0x2abc",
        "0x1" + "0" * 63,
        "0xdee91",
        "0xdee9" + "f" * 60,
        "0xd22b24490e0bae52676651b4f56660a5ff8022a2576e0089f79b3c88d44e08f000",
    ])
    def test_prefix_lookalike_is_not_whitelisted(self, whitelist, address):
        """Test exact-equality matching."""
        assert whitelist.is_known_package(address) is False

    def test_padding_on_the_wrong_side(self, whitelist):
        """Test trailing zeros do not denote the same address."""
        assert whitelist.is_known_package("0x2" + "0" * 63) is False


# ============================================================
# COIN TESTS
# ============================================================

class TestCoinLookup:
    """Tests for official coin type lookups."""

    def test_plain_type(self, whitelist):
        """Test the registered SUI type."""
        symbol, entry = whitelist.coin_info("0x2::sui::SUI")

        assert symbol == "SUI"
        assert entry.decimals == 9

    def test_coin_object_type_is_unwrapped(self, whitelist):
        """Test Coin<T> resolves to T."""
        symbol, entry = whitelist.coin_info(f"0x2::coin::Coin<{USDC_TYPE}>")

        assert symbol == "USDC"
        assert entry.coin_type == USDC_TYPE

    def test_case_and_padding_insensitive(self, whitelist):
        """Test lowercased and zero-padded SUI type."""
        assert whitelist.is_known_coin_type(f"{FULL_0X2}::sui::sui")

    def test_lookalike_type(self, whitelist):
        """Test same module and struct under another address."""
        assert whitelist.is_known_coin_type("0xabc::usdc::USDC") is False

    def test_type_with_suffix_is_not_known(self, whitelist):
        """Test substring containment is not enough."""
        assert whitelist.is_known_coin_type("0x2::sui::SUI2") is False

    def test_is_official_type_for(self, whitelist):
        """Test per-symbol comparison."""
        assert whitelist.is_official_type_for("SUI", "0x2::coin::Coin<0x2::sui::SUI>")
        assert not whitelist.is_official_type_for("USDC", "0x2::sui::SUI")
        assert not whitelist.is_official_type_for("DOGE", "0x2::sui::SUI")


class TestTypeHelpers:
    """Tests for type string helpers."""

    def test_canonical_type_strips_leading_zeros(self):
        assert canonical_type(f"{FULL_0X2}::SUI::SUI") == "0x2::sui::sui"

    def test_unwrap_keeps_casing(self):
        assert unwrap_coin_type("0x2::coin::Coin<0xAb::x::X>") == "0xAb::x::X"

    def test_unwrap_leaves_other_types(self):
        assert unwrap_coin_type("0x5::nft::Nft") == "0x5::nft::Nft"
