"""Tests for address helpers."""

from src.seaport_market.utils.addresses import is_valid_address, same_address


class TestAddressHelpers:
    """Test address validation and comparison."""

    def test_is_valid_address(self):
        assert is_valid_address("0x" + "a" * 40)
        assert not is_valid_address("0x" + "g" * 40)
        assert not is_valid_address("a" * 42)
        assert not is_valid_address("0x1234")
        assert not is_valid_address(None)

    def test_same_address_ignores_case(self):
        assert same_address("0xABCDEF" + "0" * 34, "0xabcdef" + "0" * 34)

    def test_missing_addresses_never_match(self):
        assert not same_address(None, None)
        assert not same_address("", "")
        assert not same_address("0x1", None)
