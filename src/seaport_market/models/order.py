"""Seaport order models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.seaport_market.core.enums import ItemType


class SignedOrder(BaseModel):
    """Canonical order submittable to Seaport.

    ``parameters`` always carries ``counter`` as a decimal string. ``signature``
    may be empty when the order is only used for on-chain cancellation.
    """

    model_config = ConfigDict(frozen=True)

    parameters: dict[str, Any] = Field(..., description="Seaport order parameters")
    signature: str = Field(default="", description="Offerer signature (hex)")

    @field_validator("parameters")
    @classmethod
    def validate_counter(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Ensure the counter is encoded as a string."""
        if not isinstance(v.get("counter"), str):
            raise ValueError("parameters.counter must be a string")
        return v

    @property
    def offerer(self) -> str | None:
        """Order offerer address, if present."""
        offerer = self.parameters.get("offerer")
        return offerer if isinstance(offerer, str) else None

    @property
    def counter(self) -> str:
        """Order counter."""
        return self.parameters["counter"]

    def to_api_payload(self, protocol_address: str) -> dict[str, Any]:
        """Build the OpenSea order submission body."""
        return {
            "parameters": self.parameters,
            "signature": self.signature,
            "protocol_address": protocol_address,
        }


class OfferItemInput(BaseModel):
    """Item offered by the order maker when creating an order."""

    item_type: ItemType
    token: str
    identifier: str = "0"
    amount: str = "1"

    @field_validator("identifier", "amount", mode="before")
    @classmethod
    def coerce_int_string(cls, v: Any) -> str:
        """Accept ints and digit strings, store as digit strings."""
        text = str(v).strip()
        if not text.isdigit():
            raise ValueError(f"Expected a non-negative integer, got {v!r}")
        return text


class ConsiderationItemInput(OfferItemInput):
    """Item the maker expects to receive."""

    recipient: str


class TransactionResult(BaseModel):
    """Result of a submitted transaction."""

    hash: str | None = Field(None, description="Transaction hash, when the wallet returns one")
