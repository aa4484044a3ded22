"""Create-listing action."""

import asyncio

from src.seaport_market.config.constants import NATIVE_DECIMALS, ZERO_ADDRESS
from src.seaport_market.core.enums import ItemType, SellStatus
from src.seaport_market.models.item import NftItem
from src.seaport_market.models.order import ConsiderationItemInput, OfferItemInput
from src.seaport_market.trading.base import OrderAction
from src.seaport_market.trading.state import SellRecord
from src.seaport_market.utils.addresses import same_address
from src.seaport_market.utils.logger import action_context, get_logger
from src.seaport_market.utils.units import parse_amount, parse_units

logger = get_logger(__name__)

LISTING_FAILED = "Failed to create listing."


class SellAction(OrderAction):
    """List an owned NFT for a fixed native-currency price.

    Status flow: ``idle -> validating -> wallet -> listing -> success``, with
    ``error`` reachable from every non-terminal status.
    """

    name = "sell"

    def __init__(self, *args, **kwargs):
        super().__init__(SellRecord(), *args, **kwargs)

    def open(self, item: NftItem) -> SellRecord:
        """Bind an item, prefilling its current price."""
        self.record.reset(item)
        self.record.price = item.price.amount if item.price else ""
        return self.record

    async def submit(self, price: str | None = None) -> SellRecord:
        """Validate the listing and sign it with the connected wallet.

        Args:
            price: Listing price in native currency (defaults to the prefilled price)

        Returns:
            SellRecord: Record in its terminal status, or unchanged when the
            submit was ignored
        """
        record = self.record
        item = record.item
        if item is None:
            return record
        if record.is_busy or record.status == SellStatus.SUCCESS:
            logger.debug("Ignoring sell submit", status=record.status.value)
            return record

        if record.status == SellStatus.ERROR:
            record.reset(item)
        if price is not None:
            record.price = price

        with action_context(self.name, item.id):
            record.error = None
            self._advance(SellStatus.VALIDATING)

            session = self.session()
            account = session.account_address
            if not account:
                self._fail("Connect your wallet to create a listing.", SellStatus.ERROR)
                return record

            if item.is_owner is False:
                self._fail("Only the owner can create a listing.", SellStatus.ERROR)
                return record

            if item.owner_address and not same_address(item.owner_address, account):
                self._fail("Wallet does not match the NFT owner.", SellStatus.ERROR)
                return record

            price_value = parse_amount(record.price)
            if price_value is None or price_value <= 0:
                self._fail("Enter a valid price greater than 0.", SellStatus.ERROR)
                return record
            try:
                price_wei = parse_units(record.price, NATIVE_DECIMALS)
            except ValueError:
                self._fail("Enter a valid price greater than 0.", SellStatus.ERROR)
                return record

            client = session.client
            if client is None:
                self._fail("Wallet client not available.", SellStatus.ERROR)
                return record

            try:
                self._advance(SellStatus.WALLET)
                protocol = self.protocol_factory(client)
                order = await protocol.create_order(
                    offer=[
                        OfferItemInput(
                            item_type=item.item_type,
                            token=item.contract_address,
                            identifier=item.token_id,
                        )
                    ],
                    consideration=[
                        ConsiderationItemInput(
                            item_type=ItemType.NATIVE,
                            token=ZERO_ADDRESS,
                            amount=str(price_wei),
                            recipient=account,
                        )
                    ],
                    offerer=account,
                )

                self._advance(SellStatus.LISTING)
                await self.gateway.post_listing(
                    order, protocol.protocol_address, chain_id=session.chain_id
                )
                await asyncio.sleep(self.settings.listing_settle_seconds)
            except Exception as e:
                logger.error("Listing failed", error=str(e))
                self._fail(str(e) or LISTING_FAILED, SellStatus.ERROR)
                return record

            self._succeed(SellStatus.SUCCESS, "Listing created.")
            return record
