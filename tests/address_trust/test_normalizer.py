"""
Normalizer Tests.
"""

import pytest

from sui_truth.normalizer import (
    extract_addresses,
    is_hex_address,
    is_type_string,
    is_valid_address_format,
    normalize_address,
)


class TestNormalizeAddress:
    """Tests for normalize_address."""

    @pytest.mark.parametrize("raw", [" 0x2 ", "0x2", "0X2", "\t0x2\n"])
    def test_case_and_whitespace(self, raw):
        """Test equivalent spellings collapse to one key."""
        assert normalize_address(raw) == "0x2"

    @pytest.mark.parametrize("raw", [None, "", "   ", 12345, 0x2, [], {}])
    def test_invalid_input(self, raw):
        """Test non-strings and blanks are rejected."""
        assert normalize_address(raw) is None

    def test_type_string_is_lowercased(self):
        assert normalize_address("0x2::sui::SUI") == "0x2::sui::sui"


class TestPredicates:
    """Tests for address shape predicates."""

    def test_is_type_string(self):
        assert is_type_string("0x2::sui::sui")
        assert not is_type_string("0x2")

    def test_is_hex_address(self):
        assert is_hex_address("0x" + "f" * 64)
        assert not is_hex_address("0x" + "f" * 65)
        assert not is_hex_address("0xzz")

    @pytest.mark.parametrize("address,expected", [
        ("0x1", True),
        ("0x" + "a" * 64, True),
        ("0x123...abc", True),
        ("0xabc", False),
        ("0x4", False),
        ("", False),
        (None, False),
    ])
    def test_is_valid_address_format(self, address, expected):
        assert is_valid_address_format(address) is expected


class TestExtractAddresses:
    """Tests for pulling addresses out of text."""

    def test_mixed_text(self):
        text = "Account: 0x123...abc, Package: 0x2 and again 0x2"

        assert extract_addresses(text) == ["0x123...abc", "0x2"]

    def test_full_address(self):
        full = "0x" + "b" * 64

        assert extract_addresses(f"sent to {full}.") == [full]

    def test_empty(self):
        assert extract_addresses("") == []
        assert extract_addresses(None) == []
