"""Tests for the cancel-order action."""

import copy
from unittest.mock import AsyncMock

import pytest

from src.seaport_market.config.constants import ONLY_CREATOR_CAN_CANCEL
from src.seaport_market.core.enums import CancelStatus, ToastVariant
from src.seaport_market.core.exceptions import (
    TransactionFailedError,
    WalletError,
    WalletTimeoutError,
)
from src.seaport_market.trading.cancellation import (
    CancelAction,
    friendly_cancel_error,
    require_wallet_account,
)
from src.seaport_market.trading.normalizer import normalize_order
from tests.fixtures.orders import (
    ACCOUNT,
    ORDER_HASH,
    OTHER_ACCOUNT,
    SAMPLE_LISTING_ORDER,
    SAMPLE_UNSIGNED_ORDER,
    SEAPORT_ADDRESS,
    SIGNATURE,
)


@pytest.fixture
def cancel_action(action_kwargs) -> CancelAction:
    """Create an on-chain CancelAction wired to mocks."""
    return CancelAction(**action_kwargs)


class TestFriendlyCancelError:
    """Test protocol error remapping."""

    def test_invalid_canceller_name_is_remapped(self):
        assert friendly_cancel_error("execution reverted: InvalidCanceller()") == ONLY_CREATOR_CAN_CANCEL

    def test_invalid_canceller_selector_is_remapped(self):
        assert friendly_cancel_error("execution reverted 0x80EC7374") == ONLY_CREATOR_CAN_CANCEL

    def test_other_errors_pass_through(self):
        assert friendly_cancel_error("gas too low") == "gas too low"


class TestRequireWalletAccount:
    """Test wallet account discovery."""

    @pytest.mark.asyncio
    async def test_uses_client_address(self, mock_wallet):
        assert await require_wallet_account(mock_wallet, 1) == ACCOUNT
        assert mock_wallet.requests == []

    @pytest.mark.asyncio
    async def test_falls_back_to_eth_accounts(self, mock_wallet):
        mock_wallet._address = None
        mock_wallet.accounts = [OTHER_ACCOUNT]

        assert await require_wallet_account(mock_wallet, 1) == OTHER_ACCOUNT
        assert mock_wallet.requests == ["eth_accounts"]

    @pytest.mark.asyncio
    async def test_requests_accounts_when_none_exposed(self, mock_wallet):
        mock_wallet._address = None
        mock_wallet.requested_accounts = [ACCOUNT]

        assert await require_wallet_account(mock_wallet, 1) == ACCOUNT
        assert mock_wallet.requests == ["eth_accounts", "eth_requestAccounts"]

    @pytest.mark.asyncio
    async def test_raises_when_no_account(self, mock_wallet):
        mock_wallet._address = None

        with pytest.raises(WalletError, match="Wallet is not ready for signing."):
            await require_wallet_account(mock_wallet, 1)

    @pytest.mark.asyncio
    async def test_times_out_slow_wallet(self, mock_wallet):
        mock_wallet._address = None
        mock_wallet.request_delay = 1.0

        with pytest.raises(WalletTimeoutError):
            await require_wallet_account(mock_wallet, 0.01)


class TestCancelActionOpen:
    """Test refusing items that cannot be cancelled."""

    @pytest.mark.asyncio
    async def test_open_refuses_item_without_order(self, cancel_action, owned_item, notifier):
        assert cancel_action.open(owned_item) is None
        assert notifier.current.message == "Listing data missing for this item."
        assert cancel_action.refusal == "Listing data missing for this item."

    @pytest.mark.asyncio
    async def test_open_refuses_item_not_owned(self, cancel_action, listed_item, notifier):
        assert cancel_action.open(listed_item.with_owner(None, False)) is None
        assert notifier.current.message == ONLY_CREATOR_CAN_CANCEL

    @pytest.mark.asyncio
    async def test_refusal_outlives_the_toast(self, cancel_action, listed_item, notifier):
        cancel_action.open(listed_item.with_owner(None, False))
        notifier.show("Purchase submitted.")

        assert cancel_action.refusal == ONLY_CREATOR_CAN_CANCEL

    @pytest.mark.asyncio
    async def test_open_binds_cancellable_item(self, cancel_action, listed_item):
        record = cancel_action.open(listed_item)

        assert record.item == listed_item
        assert record.status == CancelStatus.IDLE
        assert cancel_action.refusal is None


class TestCancelActionSubmit:
    """Test on-chain and off-chain cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_onchain_success(self, action_kwargs, listed_item, mock_protocol, notifier):
        refreshed = []
        action = CancelAction(on_refresh=lambda: refreshed.append(True), **action_kwargs)
        action.open(listed_item)

        record = await action.submit()

        assert record.history == [
            CancelStatus.IDLE,
            CancelStatus.VALIDATING,
            CancelStatus.WALLET,
            CancelStatus.SUCCESS,
        ]
        orders, canceller = mock_protocol.cancelled[0]
        assert orders == [normalize_order(SAMPLE_LISTING_ORDER).parameters]
        assert canceller == ACCOUNT
        assert refreshed == [True]
        assert notifier.current.message == "Listing canceled. Refreshing..."
        assert notifier.current.variant == ToastVariant.SUCCESS

    @pytest.mark.asyncio
    async def test_cancel_awaits_async_refresh(self, action_kwargs, listed_item):
        on_refresh = AsyncMock()
        action = CancelAction(on_refresh=on_refresh, **action_kwargs)
        action.open(listed_item)

        await action.submit()

        on_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_without_signature_is_allowed(self, cancel_action, listed_item, mock_protocol):
        """On-chain cancellation only needs the order parameters."""
        cancel_action.open(listed_item.with_price(listed_item.price, SAMPLE_UNSIGNED_ORDER))

        record = await cancel_action.submit()

        assert record.status == CancelStatus.SUCCESS
        assert len(mock_protocol.cancelled) == 1

    @pytest.mark.asyncio
    async def test_cancel_maker_mismatch(self, cancel_action, listed_item, mock_protocol, mock_wallet):
        """A listing made by another account is refused without a transaction."""
        raw = copy.deepcopy(SAMPLE_LISTING_ORDER)
        raw["maker"] = OTHER_ACCOUNT
        cancel_action.open(listed_item.with_price(listed_item.price, raw))

        record = await cancel_action.submit()

        assert record.status == CancelStatus.ERROR
        assert record.error == ONLY_CREATOR_CAN_CANCEL
        assert mock_protocol.cancelled == []
        assert mock_wallet.transactions_sent == []

    @pytest.mark.asyncio
    async def test_cancel_owner_mismatch(self, cancel_action, listed_item, mock_protocol):
        cancel_action.open(listed_item.with_owner(OTHER_ACCOUNT, None))

        record = await cancel_action.submit()

        assert record.error == ONLY_CREATOR_CAN_CANCEL
        assert mock_protocol.cancelled == []

    @pytest.mark.asyncio
    async def test_cancel_remaps_invalid_canceller(self, cancel_action, listed_item, mock_protocol):
        mock_protocol.cancel_error = TransactionFailedError("execution reverted: InvalidCanceller")
        cancel_action.open(listed_item)

        record = await cancel_action.submit()

        assert record.history[-2:] == [CancelStatus.WALLET, CancelStatus.ERROR]
        assert record.error == ONLY_CREATOR_CAN_CANCEL

    @pytest.mark.asyncio
    async def test_cancel_fails_when_wallet_times_out(
        self, cancel_action, listed_item, mock_wallet, mock_protocol
    ):
        mock_wallet._address = None
        mock_wallet.request_delay = 1.0
        cancel_action.open(listed_item.with_owner(None, True))

        record = await cancel_action.submit()

        assert record.status == CancelStatus.ERROR
        assert record.error == "Wallet request timed out."
        assert mock_protocol.cancelled == []

    @pytest.mark.asyncio
    async def test_cancel_offchain(self, action_kwargs, listed_item, mock_wallet, mock_gateway, mock_protocol):
        action = CancelAction(offchain=True, **action_kwargs)
        action.open(listed_item)

        record = await action.submit()

        assert record.status == CancelStatus.SUCCESS
        signed = mock_wallet.signed[0]
        assert signed["types"] == {"OrderHash": [{"name": "orderHash", "type": "bytes32"}]}
        assert signed["domain"]["version"] == "1.6"
        assert signed["message"] == {"orderHash": ORDER_HASH}
        mock_gateway.cancel_order_offchain.assert_awaited_once_with(
            ORDER_HASH, SEAPORT_ADDRESS, SIGNATURE, chain_id=8453
        )
        assert mock_protocol.cancelled == []

    @pytest.mark.asyncio
    async def test_cancel_offchain_requires_order_hash(self, action_kwargs, listed_item, mock_wallet):
        raw = copy.deepcopy(SAMPLE_LISTING_ORDER)
        del raw["order_hash"]
        action = CancelAction(offchain=True, **action_kwargs)
        action.open(listed_item.with_price(listed_item.price, raw))

        record = await action.submit()

        assert record.history[-2:] == [CancelStatus.VALIDATING, CancelStatus.ERROR]
        assert record.error == "Listing order data is missing."
        assert mock_wallet.signed == []
