"""Order action engine: Sell, Offer, Buy and Cancel bound to one wallet session."""

from collections.abc import Callable
from typing import Any

from src.seaport_market.config.settings import Settings
from src.seaport_market.connectors.platforms.opensea import OpenSeaClient
from src.seaport_market.models.item import NftItem
from src.seaport_market.models.wallet import WalletSession
from src.seaport_market.trading.base import ProtocolFactory, SessionProvider
from src.seaport_market.trading.cancellation import CancelAction
from src.seaport_market.trading.fulfillment import BuyAction
from src.seaport_market.trading.listing import SellAction
from src.seaport_market.trading.notifier import ToastNotifier
from src.seaport_market.trading.offers import OfferAction
from src.seaport_market.trading.state import BuyRecord, CancelRecord, OfferRecord, SellRecord
from src.seaport_market.utils.logger import get_logger

logger = get_logger(__name__)


class OrderActionEngine:
    """Four independent order actions sharing a wallet session and a notifier.

    Each action holds a single in-flight invocation. Calls made while an action is
    busy return its current record unchanged. Actions of different
    types may run concurrently on different items.
    """

    def __init__(
        self,
        settings: Settings,
        session: WalletSession | SessionProvider,
        gateway: OpenSeaClient,
        protocol_factory: ProtocolFactory | None = None,
        notifier: ToastNotifier | None = None,
        on_refresh: Callable[[], Any] | None = None,
        offchain_cancel: bool = False,
    ):
        """Initialize the engine.

        Args:
            settings: Application settings
            session: Wallet session, or a callable returning the current one
            gateway: Marketplace API client used to register orders
            protocol_factory: Builds the order protocol for a wallet (Seaport by default)
            notifier: Notification sink (a new one is created when omitted)
            on_refresh: Called after a successful cancellation
            offchain_cancel: Cancel through the marketplace API instead of on-chain
        """
        self.settings = settings
        self.notifier = notifier or ToastNotifier(settings.toast_duration_seconds)

        self._session = session

        shared = {
            "settings": settings,
            "session": self.current_session,
            "gateway": gateway,
            "notifier": self.notifier,
            "protocol_factory": protocol_factory,
        }
        self.sell_action = SellAction(**shared)
        self.offer_action = OfferAction(**shared)
        self.buy_action = BuyAction(**shared)
        self.cancel_action = CancelAction(
            on_refresh=on_refresh, offchain=offchain_cancel, **shared
        )

    def current_session(self) -> WalletSession:
        """Wallet session as of now."""
        return self._session() if callable(self._session) else self._session

    async def sell(self, item: NftItem, price: str) -> SellRecord:
        """Open and submit a listing for ``item`` at ``price``."""
        if self.sell_action.record.is_busy:
            return self.sell_action.record
        self.sell_action.open(item)
        return await self.sell_action.submit(price)

    async def offer(self, item: NftItem, amount: str) -> OfferRecord:
        """Open (loading the WETH balance) and submit an offer."""
        if self.offer_action.record.is_busy:
            return self.offer_action.record
        await self.offer_action.open(item)
        return await self.offer_action.submit(amount)

    async def buy(self, item: NftItem) -> BuyRecord:
        """Confirm and fulfill the listing of ``item``."""
        if self.buy_action.record.is_busy:
            return self.buy_action.record
        self.buy_action.open(item)
        return await self.buy_action.submit()

    async def cancel(self, item: NftItem) -> CancelRecord:
        """Cancel the listing of ``item``.

        Items without order data or not owned by the account are refused up
        front with a notification. The returned record then stays idle and
        carries the refusal message.
        """
        if self.cancel_action.record.is_busy:
            return self.cancel_action.record
        record = self.cancel_action.open(item)
        if record is None:
            refused = CancelRecord(item=item)
            refused.error = self.cancel_action.refusal
            logger.info("Cancel refused", item_id=item.id, error=refused.error)
            return refused
        return await self.cancel_action.submit()
