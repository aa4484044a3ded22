"""Tests for the command line interface."""

import copy
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from src.seaport_market.connectors.platforms.opensea import OpenSeaClient
from src.seaport_market.main import main
from src.seaport_market.models.collection import CollectionSummary, NftPrice
from tests.fixtures.nfts import SAMPLE_NFT
from tests.fixtures.orders import ACCOUNT, NFT_CONTRACT, SAMPLE_LISTING_ORDER
from tests.mocks.protocol import MockOrderProtocol
from tests.mocks.wallet import MockWalletSigner


@pytest.fixture
def env(monkeypatch):
    """Minimal environment for the CLI."""
    for name in ("API_KEY", "OPENSEA_CHAIN", "DEFAULT_CHAIN", "CHAIN_ID", "PRIVATE_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENSEA_API_KEY", "test-api-key")
    monkeypatch.setenv("RETRY_DELAY_MS", "0")
    monkeypatch.setenv("LISTING_SETTLE_SECONDS", "0")
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.delenv("WALLET_PRIVATE_KEY", raising=False)
    return monkeypatch


@pytest.fixture
def gateway():
    """Mock gateway returned in place of the OpenSea client."""
    gateway = MagicMock(spec=OpenSeaClient)
    gateway.resolve_chain.return_value = "base"
    gateway.fetch_trending_collections = AsyncMock(
        return_value=[CollectionSummary(slug="cool-cats", name="Cool Cats")]
    )
    gateway.fetch_collection_stats = AsyncMock(return_value=None)
    gateway.fetch_nft = AsyncMock(return_value={**SAMPLE_NFT, "owners": [{"address": ACCOUNT}]})
    gateway.fetch_nft_price = AsyncMock(
        return_value=NftPrice(
            price="0.5",
            currency="ETH",
            raw_price="500000000000000000",
            order=copy.deepcopy(SAMPLE_LISTING_ORDER),
        )
    )
    with patch("src.seaport_market.main.OpenSeaClient", return_value=gateway):
        yield gateway


def invoke(*args: str):
    """Run the CLI in an empty directory and parse its JSON output."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["--log-level", "ERROR", *args])
    return result, json.loads(result.stdout)


class TestReadCommands:
    """Test read-only commands."""

    def test_collections(self, env, gateway):
        result, payload = invoke("collections")

        assert result.exit_code == 0
        assert payload["collections"][0]["slug"] == "cool-cats"
        assert "error" not in payload

    def test_collection_requires_slug(self, env, gateway):
        result, payload = invoke("collection", "undefined")

        assert result.exit_code == 1
        assert payload == {
            "collection": None,
            "nfts": [],
            "error": "Collection slug is required.",
        }

    def test_missing_api_key(self, env):
        env.delenv("OPENSEA_API_KEY")

        result, payload = invoke("popular")

        assert result.exit_code == 1
        assert payload["nfts"] == []
        assert payload["error"].startswith("Invalid configuration")


class TestTradeCommands:
    """Test wallet-backed commands."""

    def test_buy_requires_wallet_configuration(self, env, gateway):
        result, payload = invoke("buy", NFT_CONTRACT, "42")

        assert result.exit_code == 1
        assert payload == {
            "status": "error",
            "error": "RPC_URL and WALLET_PRIVATE_KEY are required for this command",
        }

    def test_buy(self, env, gateway):
        env.setenv("RPC_URL", "https://rpc.example")
        env.setenv("WALLET_PRIVATE_KEY", "0x" + "a" * 64)
        wallet = MockWalletSigner()
        wallet.connect = AsyncMock(return_value=8453)
        protocol = MockOrderProtocol()

        with (
            patch("src.seaport_market.main.LocalWalletSigner", return_value=wallet),
            patch(
                "src.seaport_market.trading.base.SeaportClient",
                side_effect=lambda wallet, *args: protocol.factory(wallet),
            ),
        ):
            result, payload = invoke("buy", NFT_CONTRACT, "42")

        assert result.exit_code == 0
        assert payload["status"] == "success"
        assert payload["history"] == ["idle", "confirm", "wallet", "success"]
        assert payload["tx_hash"] == "0x" + "c" * 64
        assert payload["error"] == ""
        assert protocol.fulfilled[0][1] == ACCOUNT

    @pytest.mark.parametrize(
        ("extra_args", "expected_chain"),
        [([], 1), (["--chain-id", "8453"], 8453)],
    )
    def test_trade_item_is_read_on_wallet_chain(self, env, gateway, extra_args, expected_chain):
        """Without --chain-id the item is looked up where the wallet signs."""
        env.setenv("RPC_URL", "https://rpc.example")
        env.setenv("WALLET_PRIVATE_KEY", "0x" + "a" * 64)
        wallet = MockWalletSigner(chain_id=1)
        wallet.connect = AsyncMock(return_value=1)
        protocol = MockOrderProtocol()

        with (
            patch("src.seaport_market.main.LocalWalletSigner", return_value=wallet),
            patch(
                "src.seaport_market.trading.base.SeaportClient",
                side_effect=lambda wallet, *args: protocol.factory(wallet),
            ),
        ):
            result, payload = invoke("buy", NFT_CONTRACT, "42", *extra_args)

        assert result.exit_code == 0
        gateway.fetch_nft.assert_awaited_once_with(NFT_CONTRACT, "42", expected_chain)
        gateway.resolve_chain.assert_called_once_with(expected_chain)
