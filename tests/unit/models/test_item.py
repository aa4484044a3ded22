"""Tests for item and collection models."""

import pytest
from pydantic import ValidationError

from src.seaport_market.core.enums import ItemType, TokenStandard
from src.seaport_market.models.collection import Collection, CollectionDetail, CollectionStats
from src.seaport_market.models.item import NftItem, Price
from tests.fixtures.orders import ACCOUNT, NFT_CONTRACT


def make_item(**overrides) -> NftItem:
    """Helper to create test items with defaults."""
    defaults = {
        "id": NftItem.make_id(NFT_CONTRACT, "1"),
        "token_id": "1",
        "contract_address": NFT_CONTRACT,
    }
    defaults.update(overrides)
    return NftItem(**defaults)


class TestNftItem:
    """Test the immutable NFT item."""

    def test_defaults(self):
        item = make_item()

        assert item.name == "Untitled"
        assert item.token_standard == TokenStandard.ERC721
        assert item.item_type == ItemType.ERC721
        assert item.is_listed is False

    def test_token_standard_parsing(self):
        assert make_item(token_standard="ERC1155").item_type == ItemType.ERC1155
        assert make_item(token_standard="cryptopunks").token_standard == TokenStandard.ERC721

    def test_items_are_immutable(self):
        item = make_item()

        with pytest.raises(ValidationError):
            item.name = "Renamed"

    def test_with_price_and_owner_return_copies(self):
        item = make_item()

        listed = item.with_price(Price(amount="1", currency="ETH"), {"order_hash": "0x1"})
        owned = listed.with_owner(ACCOUNT, True)

        assert item.price is None
        assert listed.is_listed
        assert owned.owner_address == ACCOUNT
        assert owned.listing_order == {"order_hash": "0x1"}


class TestCollectionModels:
    """Test collection projections."""

    def test_with_stats_keeps_existing_values(self):
        collection = Collection(slug="a", name="A", floor_price=1.0, total_supply=10)

        merged = collection.with_stats(CollectionStats(total_volume=5.0))

        assert merged.floor_price == 1.0
        assert merged.total_supply == 10
        assert merged.total_volume == 5.0

    def test_with_no_stats(self):
        collection = Collection(slug="a", name="A")

        assert collection.with_stats(None) is collection

    def test_primary_chain(self):
        assert CollectionDetail(collection="a").primary_chain is None
        detail = CollectionDetail(
            collection="a", contracts=[{"address": NFT_CONTRACT, "chain": "base"}]
        )
        assert detail.primary_chain == "base"
