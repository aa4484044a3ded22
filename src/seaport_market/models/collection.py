"""Read-only projections of OpenSea collection and NFT data."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class OpenSeaNft(BaseModel):
    """Raw NFT record from the OpenSea API (matches API format)."""

    identifier: str
    contract: str
    collection: str = ""
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    display_image_url: str | None = None
    metadata_url: str | None = None
    opensea_url: str | None = None
    token_standard: str | None = None

    @field_validator("identifier", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> str:
        """Token IDs may arrive as numbers."""
        return str(v)

    @property
    def best_image_url(self) -> str:
        """Display image, falling back to the raw image."""
        return self.display_image_url or self.image_url or ""


class AccountNfts(BaseModel):
    """Page of NFTs plus the opaque pagination cursor."""

    nfts: list[OpenSeaNft] = Field(default_factory=list)
    next: str | None = None


class NftPrice(BaseModel):
    """Best current listing price for a token."""

    price: str = Field(..., description="Human-decimal price")
    currency: str = Field(default="ETH")
    raw_price: str = Field(..., description="Price in the token's smallest unit")
    decimals: int = Field(default=18, ge=0)
    order: dict[str, Any] | None = Field(None, description="Raw listing order")


class CollectionContract(BaseModel):
    """Contract deployment of a collection."""

    address: str
    chain: str


class CollectionDetail(BaseModel):
    """Collection as returned by the single-collection endpoint."""

    collection: str
    name: str = "Untitled"
    description: str | None = None
    image_url: str | None = None
    banner_image_url: str | None = None
    total_supply: int | None = None
    contracts: list[CollectionContract] = Field(default_factory=list)

    @property
    def primary_chain(self) -> str | None:
        """Chain of the first contract deployment."""
        return self.contracts[0].chain if self.contracts else None


class CollectionSummary(BaseModel):
    """Collection entry from the list/search endpoint."""

    slug: str | None = None
    collection: str | None = None
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    banner_image_url: str | None = None
    stats: dict[str, Any] | None = None


class CollectionStats(BaseModel):
    """Collection statistics (all optional)."""

    floor_price: float | None = None
    total_supply: int | None = None
    total_volume: float | None = None
    num_owners: int | None = None
    top_offer: float | None = None


class Collection(BaseModel):
    """Marketplace collection as exposed to callers."""

    slug: str
    name: str
    description: str = ""
    image_url: str = ""
    banner_image_url: str = ""
    floor_price: float | None = None
    total_supply: int | None = None
    total_volume: float | None = None
    top_offer: float | None = None
    num_owners: int | None = None

    def with_stats(self, stats: CollectionStats | None) -> "Collection":
        """Merge statistics, keeping existing values where stats are missing."""
        if stats is None:
            return self
        return self.model_copy(
            update={
                "floor_price": stats.floor_price
                if stats.floor_price is not None
                else self.floor_price,
                "total_supply": stats.total_supply
                if stats.total_supply is not None
                else self.total_supply,
                "total_volume": stats.total_volume,
                "num_owners": stats.num_owners,
                "top_offer": stats.top_offer,
            }
        )
