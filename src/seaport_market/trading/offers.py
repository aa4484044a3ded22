"""Create-offer action (WETH offered for a specific NFT)."""

from decimal import Decimal

from src.seaport_market.config.constants import get_weth_address
from src.seaport_market.core.enums import ItemType, OfferStatus
from src.seaport_market.models.item import NftItem
from src.seaport_market.models.order import ConsiderationItemInput, OfferItemInput
from src.seaport_market.models.wallet import TokenBalance
from src.seaport_market.trading.base import OrderAction
from src.seaport_market.trading.state import OfferRecord
from src.seaport_market.utils.addresses import same_address
from src.seaport_market.utils.logger import action_context, get_logger
from src.seaport_market.utils.units import fraction_digits, parse_amount, parse_units

logger = get_logger(__name__)

OFFER_FAILED = "Failed to create offer."


class OfferAction(OrderAction):
    """Offer WETH for an NFT.

    Opening the action loads the WETH balance of the connected account
    (``checking -> idle``). Submitting validates the amount against it and
    signs the offer (``idle -> checking -> wallet -> success``).
    """

    name = "offer"

    def __init__(self, *args, **kwargs):
        super().__init__(OfferRecord(), *args, **kwargs)

    async def open(self, item: NftItem) -> OfferRecord:
        """Bind an item and load the offer-currency balance."""
        record = self.record
        record.reset(item, OfferStatus.CHECKING)
        record.amount = ""
        record.balance = None
        record.balance_token = None

        session = self.session()
        weth = get_weth_address(session.chain_id)
        if session.client is not None and session.account_address and weth:
            try:
                record.balance = await session.client.get_token_balance(weth)
                record.balance_token = weth
            except Exception as e:
                # A finished query without data counts as an empty balance
                logger.warning("Failed to load WETH balance", error=str(e), token=weth)
                record.balance = TokenBalance(value=0, symbol="WETH")
                record.balance_token = weth

        self._advance(OfferStatus.IDLE)
        return record

    def _balance_for(self, weth: str):
        """Balance loaded for the given token, or None if stale or missing."""
        record = self.record
        if record.balance is None or not same_address(record.balance_token, weth):
            return None
        return record.balance

    async def submit(self, amount: str | None = None) -> OfferRecord:
        """Validate the offer amount and sign the offer.

        Args:
            amount: Offer amount in WETH

        Returns:
            OfferRecord: Record in its terminal status, or unchanged when the
            submit was ignored
        """
        record = self.record
        item = record.item
        if item is None:
            return record
        if record.is_busy or record.status == OfferStatus.SUCCESS:
            logger.debug("Ignoring offer submit", status=record.status.value)
            return record

        if record.status == OfferStatus.ERROR:
            record.reset(item)
        if amount is not None:
            record.amount = amount

        with action_context(self.name, item.id):
            record.error = None
            self._advance(OfferStatus.CHECKING)

            session = self.session()
            account = session.account_address
            if not account:
                self._fail("Connect your wallet to make an offer.", OfferStatus.ERROR)
                return record

            client = session.client
            if client is None:
                self._fail("Wallet client not available.", OfferStatus.ERROR)
                return record

            # Re-derived on every submit: the active chain may have changed
            weth = get_weth_address(session.chain_id)
            if not weth:
                self._fail("WETH is not supported on this network.", OfferStatus.ERROR)
                return record

            amount_text = record.amount.strip()
            amount_value = parse_amount(amount_text)
            if amount_value is None or amount_value <= 0:
                self._fail("Enter a valid offer amount.", OfferStatus.ERROR)
                return record

            if fraction_digits(amount_text) > self.settings.max_offer_decimals:
                self._fail(
                    f"Offer amount supports up to {self.settings.max_offer_decimals} decimal places.",
                    OfferStatus.ERROR,
                )
                return record

            if amount_value < Decimal(self.settings.min_offer_amount):
                self._fail(
                    f"Minimum offer amount is {self.settings.min_offer_amount} WETH.",
                    OfferStatus.ERROR,
                )
                return record

            balance = self._balance_for(weth)
            if balance is None:
                self._fail("WETH balance is still loading.", OfferStatus.ERROR)
                return record

            try:
                amount_wei = parse_units(amount_text, balance.decimals)
            except ValueError:
                self._fail("Enter a valid offer amount.", OfferStatus.ERROR)
                return record
            if amount_wei > balance.value:
                self._fail("Insufficient WETH balance for this offer.", OfferStatus.ERROR)
                return record

            try:
                self._advance(OfferStatus.WALLET)
                protocol = self.protocol_factory(client)
                order = await protocol.create_order(
                    offer=[
                        OfferItemInput(
                            item_type=ItemType.ERC20,
                            token=weth,
                            amount=str(amount_wei),
                        )
                    ],
                    consideration=[
                        ConsiderationItemInput(
                            item_type=item.item_type,
                            token=item.contract_address,
                            identifier=item.token_id,
                            recipient=account,
                        )
                    ],
                    offerer=account,
                )
                await self.gateway.post_offer(
                    order, protocol.protocol_address, chain_id=session.chain_id
                )
            except Exception as e:
                logger.error("Offer failed", error=str(e))
                self._fail(str(e) or OFFER_FAILED, OfferStatus.ERROR)
                return record

            self._succeed(OfferStatus.SUCCESS, "Offer submitted.")
            return record
