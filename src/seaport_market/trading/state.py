"""Action records and their status transition tables."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from src.seaport_market.core.enums import BuyStatus, CancelStatus, OfferStatus, SellStatus
from src.seaport_market.core.exceptions import InvalidStateTransitionError
from src.seaport_market.models.item import NftItem
from src.seaport_market.models.wallet import TokenBalance


class ActionRecord(BaseModel):
    """State of one action bound to a single target item.

    Subclasses declare their status enum through ``status`` and the allowed
    moves through ``TRANSITIONS``. ``history`` lists every status entered since
    the last reset, starting with the initial one.
    """

    TRANSITIONS: ClassVar[dict[Enum, set[Enum]]] = {}
    BUSY: ClassVar[frozenset[Enum]] = frozenset()
    INITIAL: ClassVar[Enum]

    item: NftItem | None = None
    status: Any = None
    error: str | None = None
    history: list[Any] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def model_post_init(self, __context: Any) -> None:
        if not self.history:
            self.history = [self.status]

    def transition_to(self, new_status: Enum) -> None:
        """Move to a new status.

        Raises:
            InvalidStateTransitionError: If the move is not allowed
        """
        if new_status not in self.TRANSITIONS.get(self.status, set()):
            raise InvalidStateTransitionError(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )

        self.status = new_status
        self.history.append(new_status)
        self.updated_at = datetime.now(timezone.utc)

    def reset(self, item: NftItem | None = None, status: Enum | None = None) -> None:
        """Start a new invocation, optionally bound to another item."""
        self.item = item
        self.status = status if status is not None else self.INITIAL
        self.error = None
        self.history = [self.status]
        self.updated_at = datetime.now(timezone.utc)

    @property
    def is_busy(self) -> bool:
        """True while a submission is in flight."""
        return self.status in self.BUSY


class SellRecord(ActionRecord):
    """Create-listing action."""

    TRANSITIONS: ClassVar[dict[Enum, set[Enum]]] = {
        SellStatus.IDLE: {SellStatus.VALIDATING},
        SellStatus.VALIDATING: {SellStatus.WALLET, SellStatus.ERROR},
        SellStatus.WALLET: {SellStatus.LISTING, SellStatus.ERROR},
        SellStatus.LISTING: {SellStatus.SUCCESS, SellStatus.ERROR},
        SellStatus.SUCCESS: set(),  # Terminal state
        SellStatus.ERROR: set(),  # Terminal state
    }
    BUSY: ClassVar[frozenset[Enum]] = frozenset(
        {SellStatus.VALIDATING, SellStatus.WALLET, SellStatus.LISTING}
    )
    INITIAL: ClassVar[Enum] = SellStatus.IDLE

    status: SellStatus = SellStatus.IDLE
    price: str = ""


class OfferRecord(ActionRecord):
    """Create-offer action.

    ``balance`` is the offer-currency balance loaded when the action opened,
    together with the token it was read for.
    """

    TRANSITIONS: ClassVar[dict[Enum, set[Enum]]] = {
        OfferStatus.IDLE: {OfferStatus.CHECKING},
        OfferStatus.CHECKING: {OfferStatus.IDLE, OfferStatus.WALLET, OfferStatus.ERROR},
        OfferStatus.WALLET: {OfferStatus.SUCCESS, OfferStatus.ERROR},
        OfferStatus.SUCCESS: set(),  # Terminal state
        OfferStatus.ERROR: set(),  # Terminal state
    }
    BUSY: ClassVar[frozenset[Enum]] = frozenset({OfferStatus.CHECKING, OfferStatus.WALLET})
    INITIAL: ClassVar[Enum] = OfferStatus.IDLE

    status: OfferStatus = OfferStatus.IDLE
    amount: str = ""
    balance: TokenBalance | None = None
    balance_token: str | None = None

    @property
    def balance_label(self) -> str:
        return self.balance.label if self.balance is not None else "Unavailable"


class BuyRecord(ActionRecord):
    """Fulfill-order action."""

    TRANSITIONS: ClassVar[dict[Enum, set[Enum]]] = {
        BuyStatus.IDLE: {BuyStatus.CONFIRM},
        BuyStatus.CONFIRM: {BuyStatus.WALLET, BuyStatus.ERROR},
        BuyStatus.WALLET: {BuyStatus.SUCCESS, BuyStatus.ERROR},
        BuyStatus.SUCCESS: set(),  # Terminal state
        BuyStatus.ERROR: set(),  # Terminal state
    }
    BUSY: ClassVar[frozenset[Enum]] = frozenset({BuyStatus.WALLET})
    INITIAL: ClassVar[Enum] = BuyStatus.IDLE

    status: BuyStatus = BuyStatus.IDLE
    tx_hash: str | None = None


class CancelRecord(ActionRecord):
    """Cancel-order action."""

    TRANSITIONS: ClassVar[dict[Enum, set[Enum]]] = {
        CancelStatus.IDLE: {CancelStatus.VALIDATING},
        CancelStatus.VALIDATING: {CancelStatus.WALLET, CancelStatus.ERROR},
        CancelStatus.WALLET: {CancelStatus.SUCCESS, CancelStatus.ERROR},
        CancelStatus.SUCCESS: set(),  # Terminal state
        CancelStatus.ERROR: set(),  # Terminal state
    }
    BUSY: ClassVar[frozenset[Enum]] = frozenset({CancelStatus.VALIDATING, CancelStatus.WALLET})
    INITIAL: ClassVar[Enum] = CancelStatus.IDLE

    status: CancelStatus = CancelStatus.IDLE
