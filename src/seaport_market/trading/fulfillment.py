"""Fulfill-order (buy) action."""

from src.seaport_market.core.enums import BuyStatus
from src.seaport_market.models.item import NftItem
from src.seaport_market.trading.base import OrderAction
from src.seaport_market.trading.normalizer import normalize_order
from src.seaport_market.trading.state import BuyRecord
from src.seaport_market.utils.logger import action_context, get_logger

logger = get_logger(__name__)

BUY_FAILED = "Failed to buy listing."
ORDER_DATA_MISSING = "Listing order data is missing."


class BuyAction(OrderAction):
    """Buy a listed NFT by fulfilling its signed listing.

    Unlike the read paths, a listing whose order data cannot be normalized is
    a hard failure here: no transaction is sent on ambiguous data.
    """

    name = "buy"

    def __init__(self, *args, **kwargs):
        super().__init__(BuyRecord(), *args, **kwargs)

    def open(self, item: NftItem) -> BuyRecord:
        """Bind an item and ask for confirmation."""
        self.record.reset(item)
        self.record.tx_hash = None
        self._advance(BuyStatus.CONFIRM)
        return self.record

    async def submit(self) -> BuyRecord:
        """Fulfill the item's listing with the connected wallet."""
        record = self.record
        item = record.item
        if item is None:
            return record
        if record.is_busy or record.status == BuyStatus.SUCCESS:
            logger.debug("Ignoring buy submit", status=record.status.value)
            return record

        if record.status == BuyStatus.ERROR:
            record.reset(item)
            self._advance(BuyStatus.CONFIRM)

        with action_context(self.name, item.id):
            record.error = None
            record.tx_hash = None

            session = self.session()
            account = session.account_address
            if not account:
                self._fail("Connect your wallet to buy.", BuyStatus.ERROR)
                return record

            client = session.client
            if client is None:
                self._fail("Wallet client not available.", BuyStatus.ERROR)
                return record

            if item.price is None:
                self._fail("This NFT is not listed.", BuyStatus.ERROR)
                return record

            order = normalize_order(item.listing_order, require_signature=True)
            if order is None:
                self._fail(ORDER_DATA_MISSING, BuyStatus.ERROR)
                return record

            try:
                self._advance(BuyStatus.WALLET)
                protocol = self.protocol_factory(client)
                result = await protocol.fulfill_order(order, account)
            except Exception as e:
                logger.error("Purchase failed", error=str(e))
                self._fail(str(e) or BUY_FAILED, BuyStatus.ERROR)
                return record

            record.tx_hash = result.hash
            logger.info("Purchase submitted", tx_hash=result.hash)
            self._succeed(BuyStatus.SUCCESS, "Purchase submitted.")
            return record
