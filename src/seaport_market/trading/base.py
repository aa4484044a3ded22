"""Shared plumbing for order actions."""

from collections.abc import Callable
from enum import Enum

from src.seaport_market.config.settings import Settings
from src.seaport_market.connectors.blockchain.seaport import SeaportClient
from src.seaport_market.connectors.platforms.opensea import OpenSeaClient
from src.seaport_market.core.enums import ToastVariant
from src.seaport_market.core.interfaces import OrderProtocol, WalletSigner
from src.seaport_market.models.wallet import WalletSession
from src.seaport_market.trading.notifier import ToastNotifier
from src.seaport_market.trading.state import ActionRecord
from src.seaport_market.utils.logger import get_logger

logger = get_logger(__name__)

ProtocolFactory = Callable[[WalletSigner], OrderProtocol]
SessionProvider = Callable[[], WalletSession]


def seaport_factory(settings: Settings) -> ProtocolFactory:
    """Build Seaport clients for whichever wallet is connected at submit time."""

    def _factory(wallet: WalletSigner) -> OrderProtocol:
        return SeaportClient(wallet, settings.seaport_address, settings.conduit_key)

    return _factory


class OrderAction:
    """Base class of the four order actions.

    Each action owns one record, reads the wallet session fresh on every
    submit and reports every terminal status through the notifier.
    """

    name = "action"

    def __init__(
        self,
        record: ActionRecord,
        settings: Settings,
        session: SessionProvider,
        gateway: OpenSeaClient,
        notifier: ToastNotifier,
        protocol_factory: ProtocolFactory | None = None,
    ):
        self.record = record
        self.settings = settings
        self.session = session
        self.gateway = gateway
        self.notifier = notifier
        self.protocol_factory = protocol_factory or seaport_factory(settings)

    def close(self) -> None:
        """Unbind the target item."""
        self.record.reset()

    def _advance(self, status: Enum) -> None:
        self.record.transition_to(status)
        logger.info(
            "Action status changed",
            action=self.name,
            item_id=self.record.item.id if self.record.item else None,
            status=status.value,
        )

    def _fail(self, message: str, error_status: Enum) -> None:
        """Terminate the invocation with an error."""
        self.record.error = message
        self._advance(error_status)
        logger.warning("Action failed", action=self.name, error=message)
        self.notifier.show(message, ToastVariant.ERROR)

    def _succeed(self, success_status: Enum, message: str) -> None:
        """Terminate the invocation successfully."""
        self._advance(success_status)
        self.notifier.show(message, ToastVariant.SUCCESS)
