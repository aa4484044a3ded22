"""Pytest configuration and shared fixtures."""

import copy
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.seaport_market.config.settings import Settings
from src.seaport_market.connectors.platforms.opensea import OpenSeaClient
from src.seaport_market.models.item import NftItem, Price
from src.seaport_market.models.wallet import WalletSession
from src.seaport_market.trading.notifier import ToastNotifier
from tests.fixtures.nfts import SAMPLE_NFT
from tests.fixtures.orders import ACCOUNT, NFT_CONTRACT, SAMPLE_LISTING_ORDER
from tests.mocks.protocol import MockOrderProtocol
from tests.mocks.wallet import MockWalletSigner

# ===== Pytest Markers =====


def pytest_configure(config: Any) -> None:
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "slow: Slow tests (may take several seconds)")


# ===== Configuration Fixtures =====


@pytest.fixture
def settings() -> Settings:
    """Settings with no retry or settle delays."""
    return Settings(
        opensea_api_key="test-api-key",
        default_chain="base",
        retry_delay_ms=0,
        listing_settle_seconds=0,
        wallet_request_timeout_seconds=0.2,
    )


# ===== Mock Client Fixtures =====


@pytest.fixture
def mock_wallet() -> MockWalletSigner:
    """Create a connected mock wallet on Base."""
    return MockWalletSigner()


@pytest.fixture
def mock_protocol() -> MockOrderProtocol:
    """Create a mock order protocol."""
    return MockOrderProtocol()


@pytest.fixture
def mock_gateway() -> MagicMock:
    """Create a mock OpenSea gateway with async order endpoints."""
    gateway = MagicMock(spec=OpenSeaClient)
    gateway.post_listing = AsyncMock(return_value={"order": {}})
    gateway.post_offer = AsyncMock(return_value={"order": {}})
    gateway.cancel_order_offchain = AsyncMock(return_value={"last_signature_issued_valid_until": None})
    return gateway


@pytest.fixture
def notifier() -> ToastNotifier:
    """Create a notifier with a short dismiss delay."""
    return ToastNotifier(duration_seconds=0.05)


@pytest.fixture
def session(mock_wallet: MockWalletSigner) -> WalletSession:
    """Wallet session bound to the mock wallet."""
    return WalletSession(address=ACCOUNT, client=mock_wallet)


@pytest.fixture
def action_kwargs(settings, session, mock_gateway, notifier, mock_protocol) -> dict[str, Any]:
    """Constructor arguments shared by the order actions."""
    return {
        "settings": settings,
        "session": lambda: session,
        "gateway": mock_gateway,
        "notifier": notifier,
        "protocol_factory": mock_protocol.factory,
    }


# ===== Item Fixtures =====


@pytest.fixture
def owned_item() -> NftItem:
    """Unlisted NFT owned by the connected account."""
    return NftItem(
        id=NftItem.make_id(NFT_CONTRACT, "42"),
        name=SAMPLE_NFT["name"],
        token_id="42",
        contract_address=NFT_CONTRACT,
        is_owner=True,
        owner_address=ACCOUNT,
    )


@pytest.fixture
def listed_item() -> NftItem:
    """NFT listed for 0.5 ETH by the connected account."""
    return NftItem(
        id=NftItem.make_id(NFT_CONTRACT, "42"),
        name=SAMPLE_NFT["name"],
        token_id="42",
        contract_address=NFT_CONTRACT,
        price=Price(amount="0.5", currency="ETH"),
        listing_order=copy.deepcopy(SAMPLE_LISTING_ORDER),
        is_owner=True,
        owner_address=ACCOUNT,
    )
