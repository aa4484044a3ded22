"""Seaport protocol client using Web3.py for ABI encoding."""

import secrets
import time
from typing import Any, ClassVar

from web3 import Web3

from src.seaport_market.config.constants import (
    CONDUIT_ADDRESS_BY_KEY,
    ORDER_DURATION_SECONDS,
    SEAPORT_NAME,
    ZERO_ADDRESS,
    ZERO_BYTES32,
    get_seaport_version,
)
from src.seaport_market.core.enums import ItemType, OrderType
from src.seaport_market.core.exceptions import TransactionFailedError, WalletError
from src.seaport_market.core.interfaces import OrderProtocol, WalletSigner
from src.seaport_market.models.order import (
    ConsiderationItemInput,
    OfferItemInput,
    SignedOrder,
    TransactionResult,
)
from src.seaport_market.utils.addresses import is_valid_address
from src.seaport_market.utils.logger import get_logger

logger = get_logger(__name__)

_OFFER_ITEM_COMPONENTS = [
    {"name": "itemType", "type": "uint8"},
    {"name": "token", "type": "address"},
    {"name": "identifierOrCriteria", "type": "uint256"},
    {"name": "startAmount", "type": "uint256"},
    {"name": "endAmount", "type": "uint256"},
]
_CONSIDERATION_ITEM_COMPONENTS = [
    *_OFFER_ITEM_COMPONENTS,
    {"name": "recipient", "type": "address"},
]
_ORDER_HEAD_COMPONENTS = [
    {"name": "offerer", "type": "address"},
    {"name": "zone", "type": "address"},
    {"name": "offer", "type": "tuple[]", "components": _OFFER_ITEM_COMPONENTS},
    {
        "name": "consideration",
        "type": "tuple[]",
        "components": _CONSIDERATION_ITEM_COMPONENTS,
    },
    {"name": "orderType", "type": "uint8"},
    {"name": "startTime", "type": "uint256"},
    {"name": "endTime", "type": "uint256"},
    {"name": "zoneHash", "type": "bytes32"},
    {"name": "salt", "type": "uint256"},
    {"name": "conduitKey", "type": "bytes32"},
]
_ORDER_PARAMETERS_COMPONENTS = [
    *_ORDER_HEAD_COMPONENTS,
    {"name": "totalOriginalConsiderationItems", "type": "uint256"},
]
_ORDER_COMPONENTS_COMPONENTS = [
    *_ORDER_HEAD_COMPONENTS,
    {"name": "counter", "type": "uint256"},
]


def _eip712_fields(components: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Convert ABI components to EIP-712 field definitions."""
    fields = []
    for component in components:
        if component["name"] == "offer":
            fields.append({"name": "offer", "type": "OfferItem[]"})
        elif component["name"] == "consideration":
            fields.append({"name": "consideration", "type": "ConsiderationItem[]"})
        else:
            fields.append({"name": component["name"], "type": component["type"]})
    return fields


ORDER_COMPONENTS_TYPES: dict[str, list[dict[str, str]]] = {
    "OrderComponents": _eip712_fields(_ORDER_COMPONENTS_COMPONENTS),
    "OfferItem": _eip712_fields(_OFFER_ITEM_COMPONENTS),
    "ConsiderationItem": _eip712_fields(_CONSIDERATION_ITEM_COMPONENTS),
}


class SeaportClient(OrderProtocol):
    """Seaport order protocol bound to a wallet signer.

    Calls are ABI-encoded locally and sent through the wallet, so the client
    never holds keys itself.
    """

    APPROVAL_ABI: ClassVar[list[dict[str, Any]]] = [
        {
            "inputs": [
                {"name": "owner", "type": "address"},
                {"name": "operator", "type": "address"},
            ],
            "name": "isApprovedForAll",
            "outputs": [{"name": "", "type": "bool"}],
            "stateMutability": "view",
            "type": "function",
        },
        {
            "inputs": [
                {"name": "operator", "type": "address"},
                {"name": "approved", "type": "bool"},
            ],
            "name": "setApprovalForAll",
            "outputs": [],
            "stateMutability": "nonpayable",
            "type": "function",
        },
        {
            "inputs": [
                {"name": "owner", "type": "address"},
                {"name": "spender", "type": "address"},
            ],
            "name": "allowance",
            "outputs": [{"name": "", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function",
        },
        {
            "inputs": [
                {"name": "spender", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "name": "approve",
            "outputs": [{"name": "", "type": "bool"}],
            "stateMutability": "nonpayable",
            "type": "function",
        },
    ]

    SEAPORT_ABI: ClassVar[list[dict[str, Any]]] = [
        {
            "inputs": [{"name": "offerer", "type": "address"}],
            "name": "getCounter",
            "outputs": [{"name": "counter", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function",
        },
        {
            "inputs": [
                {
                    "name": "order",
                    "type": "tuple",
                    "components": [
                        {
                            "name": "parameters",
                            "type": "tuple",
                            "components": _ORDER_PARAMETERS_COMPONENTS,
                        },
                        {"name": "signature", "type": "bytes"},
                    ],
                },
                {"name": "fulfillerConduitKey", "type": "bytes32"},
            ],
            "name": "fulfillOrder",
            "outputs": [{"name": "fulfilled", "type": "bool"}],
            "stateMutability": "payable",
            "type": "function",
        },
        {
            "inputs": [
                {
                    "name": "orders",
                    "type": "tuple[]",
                    "components": _ORDER_COMPONENTS_COMPONENTS,
                }
            ],
            "name": "cancel",
            "outputs": [{"name": "cancelled", "type": "bool"}],
            "stateMutability": "nonpayable",
            "type": "function",
        },
    ]

    def __init__(
        self,
        wallet: WalletSigner,
        protocol_address: str,
        conduit_key: str = ZERO_BYTES32,
        order_duration_seconds: int = ORDER_DURATION_SECONDS,
    ):
        """Initialize Seaport client.

        Args:
            wallet: Wallet used for signing, reads and transactions
            protocol_address: Seaport contract address
            conduit_key: Conduit key used for new orders and fulfillment
            order_duration_seconds: Lifetime of newly created orders

        Raises:
            ValueError: If the protocol address is invalid
        """
        if not is_valid_address(protocol_address):
            raise ValueError(f"Invalid Seaport address: {protocol_address}")

        self.wallet = wallet
        self._protocol_address = Web3.to_checksum_address(protocol_address)
        self.conduit_key = conduit_key
        self.order_duration_seconds = order_duration_seconds
        self.version = get_seaport_version(protocol_address)

        # Web3 instance for encoding only (no provider needed)
        self.w3 = Web3()
        self.contract = self.w3.eth.contract(address=self._protocol_address, abi=self.SEAPORT_ABI)

    @property
    def protocol_address(self) -> str:
        return self._protocol_address

    async def get_counter(self, offerer: str) -> int:
        """Read the offerer's current counter from the contract."""
        data = self.contract.functions.getCounter(
            Web3.to_checksum_address(offerer)
        )._encode_transaction_data()
        raw = await self.wallet.call(self._protocol_address, data)
        (counter,) = self.w3.codec.decode(["uint256"], raw)
        return counter

    @property
    def approval_operator(self) -> str:
        """Address that moves offered tokens: the conduit, or Seaport itself."""
        if int(self.conduit_key, 16) == 0:
            return self._protocol_address
        conduit = CONDUIT_ADDRESS_BY_KEY.get(self.conduit_key.lower())
        if conduit is None:
            raise ValueError(f"Unknown conduit key: {self.conduit_key}")
        return Web3.to_checksum_address(conduit)

    async def ensure_approvals(self, offer: list[OfferItemInput], offerer: str) -> None:
        """Approve the operator for every offered token that lacks an approval.

        NFTs get ``setApprovalForAll``; ERC-20 tokens get ``approve`` for the
        offered amount when the current allowance is below it.

        Raises:
            TransactionFailedError: If an approval transaction fails
        """
        operator = self.approval_operator
        owner = Web3.to_checksum_address(offerer)

        for item in offer:
            if item.item_type == ItemType.NATIVE:
                continue
            token = self.w3.eth.contract(
                address=Web3.to_checksum_address(item.token), abi=self.APPROVAL_ABI
            )

            if item.item_type == ItemType.ERC20:
                data = token.functions.allowance(owner, operator)._encode_transaction_data()
                (allowance,) = self.w3.codec.decode(
                    ["uint256"], await self.wallet.call(item.token, data)
                )
                if allowance >= int(item.amount):
                    continue
                approve = token.functions.approve(operator, int(item.amount))
            else:
                data = token.functions.isApprovedForAll(owner, operator)._encode_transaction_data()
                (approved,) = self.w3.codec.decode(
                    ["bool"], await self.wallet.call(item.token, data)
                )
                if approved:
                    continue
                approve = token.functions.setApprovalForAll(operator, True)

            logger.info("Approving token for Seaport", token=item.token, operator=operator)
            try:
                await self.wallet.send_transaction(
                    to=item.token, data=approve._encode_transaction_data()
                )
            except WalletError:
                raise
            except Exception as e:
                raise TransactionFailedError(f"Token approval failed: {e}") from e

    async def create_order(
        self,
        offer: list[OfferItemInput],
        consideration: list[ConsiderationItemInput],
        offerer: str,
    ) -> SignedOrder:
        """Build an order, read the counter and sign the order components."""
        await self.ensure_approvals(offer, offerer)
        counter = await self.get_counter(offerer)
        start_time = int(time.time())

        parameters: dict[str, Any] = {
            "offerer": Web3.to_checksum_address(offerer),
            "zone": ZERO_ADDRESS,
            "offer": [
                {
                    "itemType": int(item.item_type),
                    "token": Web3.to_checksum_address(item.token),
                    "identifierOrCriteria": item.identifier,
                    "startAmount": item.amount,
                    "endAmount": item.amount,
                }
                for item in offer
            ],
            "consideration": [
                {
                    "itemType": int(item.item_type),
                    "token": Web3.to_checksum_address(item.token),
                    "identifierOrCriteria": item.identifier,
                    "startAmount": item.amount,
                    "endAmount": item.amount,
                    "recipient": Web3.to_checksum_address(item.recipient),
                }
                for item in consideration
            ],
            "orderType": int(OrderType.FULL_OPEN),
            "startTime": str(start_time),
            "endTime": str(start_time + self.order_duration_seconds),
            "zoneHash": ZERO_BYTES32,
            "salt": str(secrets.randbits(256)),
            "conduitKey": self.conduit_key,
            "totalOriginalConsiderationItems": len(consideration),
            "counter": str(counter),
        }

        logger.debug(
            "Signing Seaport order",
            offerer=parameters["offerer"],
            offer_items=len(offer),
            consideration_items=len(consideration),
            counter=counter,
        )
        signature = await self.wallet.sign_typed_data(
            domain=self._domain(),
            types=ORDER_COMPONENTS_TYPES,
            message=self._order_components_message(parameters),
        )
        if not signature:
            raise WalletError("Wallet returned an empty signature.")

        return SignedOrder(parameters=parameters, signature=signature)

    async def fulfill_order(self, order: SignedOrder, fulfiller: str) -> TransactionResult:
        """Submit ``fulfillOrder`` paying native consideration as msg.value."""
        data = self.contract.functions.fulfillOrder(
            (self._order_parameters_tuple(order.parameters), Web3.to_bytes(hexstr=order.signature)),
            Web3.to_bytes(hexstr=self.conduit_key),
        )._encode_transaction_data()
        value = self.native_payment_total(order.parameters)

        logger.info(
            "Fulfilling Seaport order",
            fulfiller=fulfiller,
            offerer=order.offerer,
            value=value,
        )
        try:
            tx_hash = await self.wallet.send_transaction(
                to=self._protocol_address, data=data, value=value
            )
        except WalletError:
            raise
        except Exception as e:
            raise TransactionFailedError(str(e)) from e

        return TransactionResult(hash=tx_hash or None)

    async def cancel_orders(
        self, orders: list[dict[str, Any]], canceller: str
    ) -> TransactionResult:
        """Submit ``cancel`` for the given order parameters."""
        components = [self._order_components_tuple(parameters) for parameters in orders]
        data = self.contract.functions.cancel(components)._encode_transaction_data()

        logger.info("Cancelling Seaport orders", canceller=canceller, count=len(orders))
        try:
            tx_hash = await self.wallet.send_transaction(to=self._protocol_address, data=data)
        except WalletError:
            raise
        except Exception as e:
            raise TransactionFailedError(str(e)) from e

        return TransactionResult(hash=tx_hash or None)

    @staticmethod
    def native_payment_total(parameters: dict[str, Any]) -> int:
        """Sum of native-currency consideration owed by the fulfiller."""
        total = 0
        for item in parameters.get("consideration", []):
            if int(item.get("itemType", -1)) == ItemType.NATIVE:
                total += int(item.get("startAmount", 0))
        return total

    def _domain(self) -> dict[str, Any]:
        return {
            "name": SEAPORT_NAME,
            "version": self.version,
            "chainId": self.wallet.chain_id,
            "verifyingContract": self._protocol_address,
        }

    @staticmethod
    def _offer_item_tuple(item: dict[str, Any]) -> tuple:
        return (
            int(item["itemType"]),
            Web3.to_checksum_address(item["token"]),
            int(item["identifierOrCriteria"]),
            int(item["startAmount"]),
            int(item["endAmount"]),
        )

    @classmethod
    def _consideration_item_tuple(cls, item: dict[str, Any]) -> tuple:
        return (*cls._offer_item_tuple(item), Web3.to_checksum_address(item["recipient"]))

    @classmethod
    def _order_head(cls, parameters: dict[str, Any]) -> tuple:
        return (
            Web3.to_checksum_address(parameters["offerer"]),
            Web3.to_checksum_address(parameters.get("zone") or ZERO_ADDRESS),
            [cls._offer_item_tuple(item) for item in parameters.get("offer", [])],
            [cls._consideration_item_tuple(item) for item in parameters.get("consideration", [])],
            int(parameters["orderType"]),
            int(parameters["startTime"]),
            int(parameters["endTime"]),
            Web3.to_bytes(hexstr=parameters.get("zoneHash") or ZERO_BYTES32),
            cls._salt(parameters["salt"]),
            Web3.to_bytes(hexstr=parameters.get("conduitKey") or ZERO_BYTES32),
        )

    @staticmethod
    def _salt(value: Any) -> int:
        return int(value, 0) if isinstance(value, str) else int(value)

    @classmethod
    def _order_parameters_tuple(cls, parameters: dict[str, Any]) -> tuple:
        total = parameters.get("totalOriginalConsiderationItems")
        if total is None:
            total = len(parameters.get("consideration", []))
        return (*cls._order_head(parameters), int(total))

    @classmethod
    def _order_components_tuple(cls, parameters: dict[str, Any]) -> tuple:
        return (*cls._order_head(parameters), int(parameters.get("counter", "0")))

    @classmethod
    def _order_components_message(cls, parameters: dict[str, Any]) -> dict[str, Any]:
        """EIP-712 message for OrderComponents with integer-typed values."""
        head = cls._order_head(parameters)
        return {
            "offerer": head[0],
            "zone": head[1],
            "offer": [
                dict(zip([c["name"] for c in _OFFER_ITEM_COMPONENTS], item, strict=True))
                for item in head[2]
            ],
            "consideration": [
                dict(zip([c["name"] for c in _CONSIDERATION_ITEM_COMPONENTS], item, strict=True))
                for item in head[3]
            ],
            "orderType": head[4],
            "startTime": head[5],
            "endTime": head[6],
            "zoneHash": head[7],
            "salt": head[8],
            "conduitKey": head[9],
            "counter": int(parameters.get("counter", "0")),
        }
