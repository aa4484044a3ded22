"""Ethereum address helpers."""


def is_valid_address(address: object) -> bool:
    """Validate Ethereum address format (0x + 40 hex chars)."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def same_address(a: str | None, b: str | None) -> bool:
    """Compare two addresses case-insensitively; missing addresses never match."""
    if not a or not b:
        return False
    return a.lower() == b.lower()
