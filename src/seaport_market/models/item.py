"""NFT item model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.seaport_market.core.enums import ItemType, TokenStandard


class Price(BaseModel):
    """Display price of a listing."""

    model_config = ConfigDict(frozen=True)

    amount: str = Field(..., description="Human-decimal amount, e.g. '0.5'")
    currency: str = Field(..., description="Payment token symbol, e.g. 'ETH'")


class NftItem(BaseModel):
    """NFT as presented to the action engine.

    Items are immutable. A change of price or ownership produces a new item.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique key '<contract>-<token_id>'")
    name: str = Field(default="Untitled")
    token_id: str = Field(..., description="Token identifier")
    contract_address: str = Field(..., description="NFT contract address")
    image_url: str = Field(default="")
    collection: str | None = None
    description: str | None = None
    opensea_url: str | None = None
    token_standard: TokenStandard = TokenStandard.ERC721
    price: Price | None = None
    listing_order: dict[str, Any] | None = Field(
        None, description="Raw order payload as returned by the marketplace API"
    )
    is_owner: bool | None = None
    owner_address: str | None = None

    @field_validator("token_standard", mode="before")
    @classmethod
    def parse_token_standard(cls, v: Any) -> Any:
        """Accept any casing and default unknown standards to ERC-721."""
        if isinstance(v, str):
            try:
                return TokenStandard(v.lower())
            except ValueError:
                return TokenStandard.ERC721
        return v

    @classmethod
    def make_id(cls, contract_address: str, token_id: str) -> str:
        """Build the item identity key."""
        return f"{contract_address}-{token_id}"

    @property
    def is_listed(self) -> bool:
        """Whether the item currently has a listing price."""
        return self.price is not None

    @property
    def item_type(self) -> ItemType:
        """Seaport item type matching the token standard."""
        if self.token_standard == TokenStandard.ERC1155:
            return ItemType.ERC1155
        return ItemType.ERC721

    def with_price(self, price: Price | None, listing_order: dict[str, Any] | None) -> "NftItem":
        """Return a copy with a new price and raw order."""
        return self.model_copy(update={"price": price, "listing_order": listing_order})

    def with_owner(self, owner_address: str | None, is_owner: bool | None) -> "NftItem":
        """Return a copy with new ownership information."""
        return self.model_copy(update={"owner_address": owner_address, "is_owner": is_owner})
