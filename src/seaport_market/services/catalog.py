"""Read paths: marketplace items and collections assembled from the gateway.

Browsing tolerates partial data. A failed price lookup marks the item as
not listed, and a collection page renders from whatever parts loaded.
"""

import asyncio
import re
from typing import Any

from pydantic import BaseModel, Field

from src.seaport_market.config.constants import get_opensea_chain
from src.seaport_market.connectors.platforms.opensea import OpenSeaClient, payment_decimals
from src.seaport_market.core.exceptions import (
    MarketplaceApiError,
    NotFoundError,
    PreconditionError,
)
from src.seaport_market.models.collection import (
    Collection,
    CollectionStats,
    CollectionSummary,
    NftPrice,
    OpenSeaNft,
)
from src.seaport_market.models.item import NftItem, Price
from src.seaport_market.trading.normalizer import extract_offer_asset, extract_order_hash
from src.seaport_market.utils.logger import get_logger
from src.seaport_market.utils.units import format_units

logger = get_logger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$", re.IGNORECASE)
COLLECTION_PAGE_SIZE = 20
COLLECTION_LIST_SIZE = 20


class AccountItems(BaseModel):
    """NFTs of an account with the pagination cursor."""

    items: list[NftItem] = Field(default_factory=list)
    next: str | None = None


class CollectionPage(BaseModel):
    """A collection with its first NFTs."""

    collection: Collection
    items: list[NftItem] = Field(default_factory=list)


def item_from_nft(
    nft: OpenSeaNft | dict[str, Any],
    price: NftPrice | None = None,
    owner_address: str | None = None,
) -> NftItem:
    """Project an OpenSea NFT record (and optional price) onto an item."""
    if not isinstance(nft, OpenSeaNft):
        nft = OpenSeaNft.model_validate(nft)

    return NftItem(
        id=NftItem.make_id(nft.contract, nft.identifier),
        name=nft.name or "Untitled",
        token_id=nft.identifier,
        contract_address=nft.contract,
        image_url=nft.best_image_url,
        collection=nft.collection,
        description=nft.description or "",
        opensea_url=nft.opensea_url or "",
        token_standard=nft.token_standard or "erc721",
        price=Price(amount=price.price, currency=price.currency) if price else None,
        listing_order=price.order if price else None,
        is_owner=True if owner_address else None,
        owner_address=owner_address,
    )


class MarketplaceCatalog:
    """Read-side assembly of items and collections."""

    def __init__(self, gateway: OpenSeaClient):
        self.gateway = gateway

    async def _price_or_none(
        self, nft: OpenSeaNft, chain_override: str | None
    ) -> NftPrice | None:
        try:
            return await self.gateway.fetch_nft_price(nft.contract, nft.identifier, chain_override)
        except MarketplaceApiError as e:
            logger.warning(
                "Price lookup failed, treating as not listed",
                contract=nft.contract,
                token_id=nft.identifier,
                error=str(e),
            )
            return None

    async def _priced_items(
        self,
        nfts: list[OpenSeaNft],
        chain_override: str | None,
        owner_address: str | None = None,
    ) -> list[NftItem]:
        prices = await asyncio.gather(*(self._price_or_none(nft, chain_override) for nft in nfts))
        return [
            item_from_nft(nft, price, owner_address)
            for nft, price in zip(nfts, prices, strict=True)
        ]

    async def account_items(self, address: str | None, chain_id: int | None = None) -> AccountItems:
        """NFTs owned by ``address``, each with its best listing price.

        Raises:
            PreconditionError: If the address is missing
            MarketplaceApiError: If the NFT list cannot be fetched
        """
        if not address:
            raise PreconditionError("Missing address", field="address")

        chain_override = get_opensea_chain(chain_id) if chain_id else None
        page = await self.gateway.fetch_account_nfts(address, chain_id)
        items = await self._priced_items(page.nfts, chain_override, owner_address=address)
        logger.info("Loaded account items", address=address, count=len(items))
        return AccountItems(items=items, next=page.next)

    async def collection_page(self, slug: str | None, chain_id: int | None = None) -> CollectionPage:
        """A collection with its first NFTs and statistics.

        Each part is fetched independently and failures are tolerated unless
        neither the collection nor any NFT could be loaded.

        Raises:
            PreconditionError: If the slug is missing
            NotFoundError: If neither the collection nor its NFTs exist
        """
        if not slug or slug == "undefined":
            raise PreconditionError("Collection slug is required.", field="slug")

        collection_result, nfts_result, stats_result = await asyncio.gather(
            self.gateway.fetch_collection(slug),
            self.gateway.fetch_collection_nfts(slug, COLLECTION_PAGE_SIZE),
            self.gateway.fetch_collection_stats(slug),
            return_exceptions=True,
        )
        for part, result in (
            ("collection", collection_result),
            ("nfts", nfts_result),
            ("stats", stats_result),
        ):
            if isinstance(result, Exception):
                if not isinstance(result, MarketplaceApiError):
                    raise result
                logger.warning("Collection part unavailable", slug=slug, part=part, error=str(result))

        detail = None if isinstance(collection_result, Exception) else collection_result
        nfts = [] if isinstance(nfts_result, Exception) else nfts_result
        stats = None if isinstance(stats_result, Exception) else stats_result

        if detail is None and not nfts:
            message = (
                str(collection_result)
                if isinstance(collection_result, Exception)
                else "Collection not found."
            )
            raise NotFoundError(message)

        chain_override = (
            get_opensea_chain(chain_id) if chain_id else (detail.primary_chain if detail else None)
        )
        items = await self._priced_items(nfts, chain_override)
        fallback_image = next((item.image_url for item in items if item.image_url), "")

        if detail is not None:
            collection = Collection(
                slug=detail.collection or slug,
                name=detail.name or "Untitled",
                description=detail.description or "",
                image_url=detail.image_url or fallback_image,
                banner_image_url=detail.banner_image_url or "",
                total_supply=detail.total_supply,
            )
        else:
            collection = Collection(
                slug=slug,
                name=(items[0].collection if items else None) or slug,
                image_url=fallback_image,
            )

        return CollectionPage(collection=collection.with_stats(stats), items=items)

    async def collections(
        self, query: str | None = None, chain_id: int | None = None
    ) -> list[Collection]:
        """Trending collections, or search results when ``query`` is given.

        Entries without a usable slug are dropped. Statistics are merged in
        where they load.
        """
        query = (query or "").strip()
        if query:
            summaries = await self.gateway.fetch_collections_by_search(
                query, COLLECTION_LIST_SIZE, chain_id
            )
        else:
            summaries = await self.gateway.fetch_trending_collections(
                COLLECTION_LIST_SIZE, chain_id
            )

        collections = [
            collection
            for collection in (self._collection_from_summary(s) for s in summaries)
            if collection is not None
        ]
        stats = await asyncio.gather(*(self._stats_or_none(c.slug) for c in collections))
        return [
            collection.with_stats(stat)
            for collection, stat in zip(collections, stats, strict=True)
        ]

    async def _stats_or_none(self, slug: str) -> CollectionStats | None:
        try:
            return await self.gateway.fetch_collection_stats(slug)
        except MarketplaceApiError as e:
            logger.warning("Collection stats unavailable", slug=slug, error=str(e))
            return None

    @staticmethod
    def resolve_slug(summary: CollectionSummary) -> str:
        """Use ``slug``, else ``collection`` when it looks like a slug."""
        if summary.slug:
            return summary.slug
        fallback = summary.collection or ""
        return fallback if SLUG_PATTERN.match(fallback) else ""

    def _collection_from_summary(self, summary: CollectionSummary) -> Collection | None:
        slug = self.resolve_slug(summary)
        if not slug:
            return None

        stats = summary.stats or {}

        def _number(key: str) -> Any:
            value = stats.get(key)
            return value if isinstance(value, int | float) and not isinstance(value, bool) else None

        total_supply = _number("total_supply")
        return Collection(
            slug=slug,
            name=summary.name or summary.collection or "Untitled",
            description=summary.description or "",
            image_url=summary.image_url or "",
            banner_image_url=summary.banner_image_url or "",
            floor_price=_number("floor_price"),
            total_supply=int(total_supply) if total_supply is not None else None,
        )

    async def user_listings(
        self, address: str | None, chain_id: int | None = None, limit: int = 10
    ) -> list[NftItem]:
        """Active listings made by ``address`` as items carrying their order.

        Raises:
            PreconditionError: If the address is missing
            MarketplaceApiError: If the listings cannot be fetched
        """
        if not address:
            raise PreconditionError("Missing address", field="address")

        orders = await self.gateway.fetch_user_listings(address, chain_id, limit)
        assets = [extract_offer_asset(order) for order in orders]
        details = await asyncio.gather(
            *(self._nft_or_none(asset, chain_id) for asset in assets)
        )

        listings = []
        for order, asset, nft in zip(orders, assets, details, strict=True):
            nft = nft or {}
            token, identifier = asset or ("", "")
            contract = nft.get("contract") or token
            token_id = str(nft.get("identifier") or identifier)

            payment_token = order.get("payment_token") or {}
            try:
                amount = format_units(
                    order.get("current_price") or "0", payment_decimals(payment_token)
                )
            except ValueError as e:
                logger.warning("Skipping listing with malformed price", contract=contract, error=str(e))
                continue

            listings.append(
                NftItem(
                    id=extract_order_hash(order) or NftItem.make_id(contract, token_id),
                    name=nft.get("name") or "Untitled",
                    token_id=token_id,
                    contract_address=contract,
                    image_url=nft.get("display_image_url") or nft.get("image_url") or "",
                    collection=nft.get("collection") or "",
                    description=nft.get("description") or "",
                    opensea_url=nft.get("opensea_url") or "",
                    token_standard=nft.get("token_standard") or "erc721",
                    price=Price(amount=amount, currency=payment_token.get("symbol") or "ETH"),
                    listing_order=order,
                    is_owner=True,
                    owner_address=address,
                )
            )

        return listings

    async def _nft_or_none(
        self, asset: tuple[str, str] | None, chain_id: int | None
    ) -> dict[str, Any] | None:
        if asset is None:
            return None
        token, identifier = asset
        try:
            return await self.gateway.fetch_nft(token, identifier, chain_id)
        except MarketplaceApiError as e:
            logger.warning("NFT details unavailable", contract=token, token_id=identifier, error=str(e))
            return None

    async def popular_items(self, limit: int = 20) -> list[NftItem]:
        """One NFT from each of the top collections."""
        nfts = await self.gateway.fetch_popular_nfts(limit)
        return [item_from_nft(nft) for nft in nfts]
