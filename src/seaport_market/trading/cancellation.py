"""Cancel-order action."""

import inspect
from collections.abc import Callable
from typing import Any

from src.seaport_market.config.constants import (
    INVALID_CANCELLER_ERROR,
    INVALID_CANCELLER_SELECTOR,
    ONLY_CREATOR_CAN_CANCEL,
    get_seaport_version,
)
from src.seaport_market.core.enums import CancelStatus, ToastVariant
from src.seaport_market.core.exceptions import WalletError
from src.seaport_market.core.interfaces import WalletSigner
from src.seaport_market.models.item import NftItem
from src.seaport_market.trading.base import OrderAction
from src.seaport_market.trading.normalizer import (
    extract_maker,
    extract_order_hash,
    extract_protocol_address,
    normalize_order,
)
from src.seaport_market.trading.state import CancelRecord
from src.seaport_market.utils.addresses import same_address
from src.seaport_market.utils.decorators import with_timeout
from src.seaport_market.utils.logger import action_context, get_logger

logger = get_logger(__name__)

CANCEL_FAILED = "Failed to cancel listing."
ORDER_DATA_MISSING = "Listing order data is missing."
WALLET_NOT_READY = "Wallet is not ready for signing."


def friendly_cancel_error(message: str) -> str:
    """Remap protocol error codes to user-facing messages."""
    if INVALID_CANCELLER_ERROR in message or INVALID_CANCELLER_SELECTOR in message.lower():
        return ONLY_CREATOR_CAN_CANCEL
    return message


async def require_wallet_account(client: WalletSigner, timeout_seconds: float) -> str:
    """Confirm the wallet exposes an authorized account.

    Uses the client's address when present. Otherwise asks ``eth_accounts``
    and then ``eth_requestAccounts``, each bounded by ``timeout_seconds``.

    Raises:
        WalletTimeoutError: If a step does not answer in time
        WalletError: If no account is available after both steps
    """
    if client.address:
        return client.address

    accounts = await with_timeout(client.request("eth_accounts"), timeout_seconds)
    if isinstance(accounts, list) and accounts:
        return accounts[0]

    requested = await with_timeout(client.request("eth_requestAccounts"), timeout_seconds)
    if isinstance(requested, list) and requested:
        return requested[0]

    raise WalletError(WALLET_NOT_READY)


class CancelAction(OrderAction):
    """Cancel the connected account's listing of an NFT.

    Cancellation is on-chain by default. With ``offchain=True`` the order hash
    is signed instead and the signature is posted to the marketplace API.
    """

    name = "cancel"

    def __init__(
        self,
        *args,
        on_refresh: Callable[[], Any] | None = None,
        offchain: bool = False,
        **kwargs,
    ):
        super().__init__(CancelRecord(), *args, **kwargs)
        self.on_refresh = on_refresh
        self.offchain = offchain
        self.refusal: str | None = None

    @staticmethod
    def refusal_for(item: NftItem) -> str | None:
        """Reason an item clearly cannot be cancelled, if any."""
        if not item.listing_order:
            return "Listing data missing for this item."
        if item.is_owner is False:
            return ONLY_CREATOR_CAN_CANCEL
        return None

    def open(self, item: NftItem) -> CancelRecord | None:
        """Bind an item, refusing items that clearly cannot be cancelled.

        A refused item leaves the record untouched and the reason in
        ``refusal``.
        """
        self.refusal = self.refusal_for(item)
        if self.refusal:
            self.notifier.show(self.refusal, ToastVariant.ERROR)
            return None

        self.record.reset(item)
        return self.record

    async def submit(self) -> CancelRecord:
        """Validate ownership and cancel the listing."""
        record = self.record
        item = record.item
        if item is None:
            return record
        if record.is_busy or record.status == CancelStatus.SUCCESS:
            logger.debug("Ignoring cancel submit", status=record.status.value)
            return record

        if record.status == CancelStatus.ERROR:
            record.reset(item)

        with action_context(self.name, item.id):
            record.error = None
            self._advance(CancelStatus.VALIDATING)

            session = self.session()
            account = session.account_address
            if not account:
                self._fail("Connect your wallet to cancel the listing.", CancelStatus.ERROR)
                return record

            client = session.client
            if client is None:
                self._fail("Wallet client not available.", CancelStatus.ERROR)
                return record

            raw_order = item.listing_order
            if not raw_order:
                self._fail(ORDER_DATA_MISSING, CancelStatus.ERROR)
                return record

            if item.is_owner is False:
                self._fail(ONLY_CREATOR_CAN_CANCEL, CancelStatus.ERROR)
                return record

            if item.owner_address and not same_address(item.owner_address, account):
                self._fail(ONLY_CREATOR_CAN_CANCEL, CancelStatus.ERROR)
                return record

            maker = extract_maker(raw_order)
            if maker and not same_address(maker, account):
                self._fail(ONLY_CREATOR_CAN_CANCEL, CancelStatus.ERROR)
                return record

            order = normalize_order(raw_order, require_signature=False)
            if order is None or (self.offchain and not extract_order_hash(raw_order)):
                self._fail(ORDER_DATA_MISSING, CancelStatus.ERROR)
                return record

            try:
                await require_wallet_account(
                    client, self.settings.wallet_request_timeout_seconds
                )
                self._advance(CancelStatus.WALLET)
                if self.offchain:
                    await self._cancel_offchain(client, raw_order, session.chain_id)
                else:
                    protocol = self.protocol_factory(client)
                    result = await protocol.cancel_orders([order.parameters], account)
                    logger.info("Cancellation submitted", tx_hash=result.hash)
            except Exception as e:
                logger.error("Cancellation failed", error=str(e))
                self._fail(friendly_cancel_error(str(e) or CANCEL_FAILED), CancelStatus.ERROR)
                return record

            self._succeed(CancelStatus.SUCCESS, "Listing canceled. Refreshing...")
            if self.on_refresh:
                refreshed = self.on_refresh()
                if inspect.isawaitable(refreshed):
                    await refreshed
            return record

    async def _cancel_offchain(
        self, client: WalletSigner, raw_order: dict[str, Any], chain_id: int | None
    ) -> None:
        order_hash = extract_order_hash(raw_order)
        protocol_address = extract_protocol_address(raw_order) or self.settings.seaport_address

        signature = await client.sign_order_hash(
            order_hash, protocol_address, get_seaport_version(protocol_address)
        )
        await self.gateway.cancel_order_offchain(
            order_hash, protocol_address, signature, chain_id=chain_id
        )
