"""Tests for the order action engine."""

import asyncio
from unittest.mock import MagicMock

import pytest

from src.seaport_market.core.enums import BuyStatus, CancelStatus, SellStatus
from src.seaport_market.models.wallet import WalletSession
from src.seaport_market.trading.engine import OrderActionEngine
from tests.fixtures.orders import OTHER_ACCOUNT
from tests.mocks.wallet import MockWalletSigner


@pytest.fixture
def engine(settings, session, mock_gateway, mock_protocol, notifier) -> OrderActionEngine:
    """Create an engine wired to mocks."""
    return OrderActionEngine(
        settings,
        session,
        mock_gateway,
        protocol_factory=mock_protocol.factory,
        notifier=notifier,
    )


class TestOrderActionEngine:
    """Test the engine's convenience entry points."""

    @pytest.mark.asyncio
    async def test_sell_and_buy_share_notifier(self, engine, owned_item, listed_item, notifier):
        sell = await engine.sell(owned_item, "1")
        buy = await engine.buy(listed_item)

        assert sell.status == SellStatus.SUCCESS
        assert buy.status == BuyStatus.SUCCESS
        assert [toast.message for toast in notifier.shown] == [
            "Listing created.",
            "Purchase submitted.",
        ]

    @pytest.mark.asyncio
    async def test_busy_action_ignores_new_invocation(self, engine, owned_item, mock_protocol):
        engine.sell_action.open(owned_item)
        engine.sell_action.record.transition_to(SellStatus.VALIDATING)

        record = await engine.sell(owned_item, "2")

        assert record.status == SellStatus.VALIDATING
        assert mock_protocol.created == []

    @pytest.mark.asyncio
    async def test_different_actions_run_concurrently(self, engine, owned_item, listed_item):
        sell, buy = await asyncio.gather(engine.sell(owned_item, "1"), engine.buy(listed_item))

        assert sell.status == SellStatus.SUCCESS
        assert buy.status == BuyStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_cancel_refusal_returns_idle_record(self, engine, owned_item):
        record = await engine.cancel(owned_item)

        assert record.status == CancelStatus.IDLE
        assert record.error == "Listing data missing for this item."

    @pytest.mark.asyncio
    async def test_cancel_refusal_does_not_depend_on_toast_state(self, engine, listed_item, notifier):
        notifier.show = MagicMock()

        record = await engine.cancel(listed_item.with_owner(None, False))

        assert record.status == CancelStatus.IDLE
        assert record.error == "Only the creator can cancel this listing."
        assert notifier.current is None

    @pytest.mark.asyncio
    async def test_session_is_read_at_submit_time(
        self, settings, mock_gateway, mock_protocol, notifier, owned_item
    ):
        """Switching accounts between invocations is picked up."""
        current = {"session": WalletSession()}
        engine = OrderActionEngine(
            settings,
            lambda: current["session"],
            mock_gateway,
            protocol_factory=mock_protocol.factory,
            notifier=notifier,
        )

        first = await engine.sell(owned_item, "1")
        assert first.error == "Connect your wallet to create a listing."

        current["session"] = WalletSession(client=MockWalletSigner(address=OTHER_ACCOUNT))
        second = await engine.sell(owned_item, "1")

        assert second.error == "Wallet does not match the NFT owner."

    @pytest.mark.asyncio
    async def test_offer_through_engine(self, engine, owned_item, mock_gateway):
        record = await engine.offer(owned_item, "0.5")

        assert record.error is None
        mock_gateway.post_offer.assert_awaited_once()
