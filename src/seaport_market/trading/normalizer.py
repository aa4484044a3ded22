"""Normalization of marketplace order payloads into Seaport signed orders.

The OpenSea API returns orders with the Seaport data either nested under
``protocol_data`` or at the top level. All shape resolution happens here so
every consumer works with :class:`SignedOrder`.
"""

import copy
from collections.abc import Mapping
from typing import Any

from src.seaport_market.models.order import SignedOrder

PROTOCOL_DATA_KEY = "protocol_data"


def _first_present(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def normalize_order(raw_order: Any, require_signature: bool = True) -> SignedOrder | None:
    """Convert a raw order payload into a canonical signed order.

    Args:
        raw_order: Order payload as returned by the marketplace API
        require_signature: Reject orders without a signature (fulfillment needs
            one, on-chain cancellation does not)

    Returns:
        SignedOrder | None: Canonical order, or None when the payload has no
        usable order data

    Examples:
        >>> normalize_order({"parameters": {"offerer": "0xabc"}}, False).parameters["counter"]
        '0'
        >>> normalize_order({"parameters": {"offerer": "0xabc"}}, True) is None
        True
    """
    if not isinstance(raw_order, Mapping):
        return None

    protocol_data = raw_order.get(PROTOCOL_DATA_KEY)
    if not isinstance(protocol_data, Mapping):
        protocol_data = {}

    parameters = _first_present(protocol_data.get("parameters"), raw_order.get("parameters"))
    if not isinstance(parameters, Mapping):
        return None

    signature = _first_present(protocol_data.get("signature"), raw_order.get("signature"), "")
    if not isinstance(signature, str):
        signature = str(signature)
    if require_signature and not signature:
        return None

    # Never mutate the caller's payload
    parameters = copy.deepcopy(dict(parameters))

    counter = _first_present(
        parameters.get("counter"),
        protocol_data.get("counter"),
        raw_order.get("counter"),
        "0",
    )
    parameters["counter"] = str(counter)

    return SignedOrder(parameters=parameters, signature=signature)


def extract_maker(raw_order: Any) -> str | None:
    """Get the maker address of a raw order.

    The API reports ``maker`` either as a plain address or as an account
    object with an ``address`` field.
    """
    if not isinstance(raw_order, Mapping):
        return None

    maker = raw_order.get("maker")
    if isinstance(maker, str):
        return maker or None
    if isinstance(maker, Mapping) and isinstance(maker.get("address"), str):
        return maker["address"] or None
    return None


def extract_order_hash(raw_order: Any) -> str | None:
    """Get the order hash of a raw order, if reported."""
    if not isinstance(raw_order, Mapping):
        return None
    order_hash = raw_order.get("order_hash")
    return order_hash if isinstance(order_hash, str) and order_hash else None


def extract_protocol_address(raw_order: Any) -> str | None:
    """Get the protocol contract address of a raw order, if reported."""
    if not isinstance(raw_order, Mapping):
        return None
    address = raw_order.get("protocol_address")
    return address if isinstance(address, str) and address else None


def extract_offer_asset(raw_order: Any) -> tuple[str, str] | None:
    """Get ``(token, identifier)`` of the first offered item of a listing."""
    order = normalize_order(raw_order, require_signature=False)
    if order is None:
        return None
    offer = order.parameters.get("offer") or []
    if not offer or not isinstance(offer[0], Mapping):
        return None
    token = offer[0].get("token")
    identifier = offer[0].get("identifierOrCriteria")
    if not token or identifier is None or identifier == "":
        return None
    return str(token), str(identifier)
