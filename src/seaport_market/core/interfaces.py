"""Core interfaces for the Seaport marketplace core."""

from abc import ABC, abstractmethod
from typing import Any

from src.seaport_market.models.order import (
    ConsiderationItemInput,
    OfferItemInput,
    SignedOrder,
    TransactionResult,
)
from src.seaport_market.models.wallet import TokenBalance


class WalletSigner(ABC):
    """Interface for a connected wallet client."""

    @property
    @abstractmethod
    def chain_id(self) -> int | None:
        """Currently active chain ID (may change between calls)."""
        pass

    @property
    @abstractmethod
    def address(self) -> str | None:
        """Authorized account address, or None until explicitly requested."""
        pass

    @abstractmethod
    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """Send a low-level JSON-RPC request through the wallet.

        Must support at least ``eth_accounts`` and ``eth_requestAccounts``.

        Args:
            method: JSON-RPC method name
            params: Method parameters

        Returns:
            Any: Decoded JSON-RPC result

        Raises:
            WalletError: If the wallet rejects or fails the request
        """
        pass

    @abstractmethod
    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> str:
        """Sign EIP-712 typed data.

        Args:
            domain: EIP-712 domain (name, version, chainId, verifyingContract)
            types: Struct type definitions, excluding EIP712Domain
            message: Primary struct values

        Returns:
            str: 0x-prefixed signature

        Raises:
            WalletError: If the user rejects or signing fails
        """
        pass

    @abstractmethod
    async def send_transaction(self, to: str, data: str = "0x", value: int = 0) -> str:
        """Build, sign, and broadcast a transaction.

        Returns:
            str: Transaction hash

        Raises:
            TransactionFailedError: If the transaction cannot be sent
            WalletError: If the user rejects the request
        """
        pass

    @abstractmethod
    async def call(self, to: str, data: str) -> bytes:
        """Execute a read-only contract call.

        Returns:
            bytes: Raw ABI-encoded return data
        """
        pass

    @abstractmethod
    async def get_token_balance(self, token_address: str) -> TokenBalance:
        """Get the ERC-20 balance of the connected account."""
        pass

    async def sign_order_hash(
        self, order_hash: str, protocol_address: str, version: str = "1.6"
    ) -> str:
        """Sign a Seaport order hash with the ``OrderHash`` EIP-712 type.

        Used to authorize off-chain cancellation through the marketplace API.
        """
        return await self.sign_typed_data(
            domain={
                "name": "Seaport",
                "version": version,
                "chainId": self.chain_id,
                "verifyingContract": protocol_address,
            },
            types={"OrderHash": [{"name": "orderHash", "type": "bytes32"}]},
            message={"orderHash": order_hash},
        )


class OrderProtocol(ABC):
    """Interface for the on-chain order-matching protocol."""

    @property
    @abstractmethod
    def protocol_address(self) -> str:
        """Address of the protocol contract."""
        pass

    @abstractmethod
    async def create_order(
        self,
        offer: list[OfferItemInput],
        consideration: list[ConsiderationItemInput],
        offerer: str,
    ) -> SignedOrder:
        """Build and sign an order.

        Args:
            offer: Items the offerer gives
            consideration: Items the offerer expects, with recipients
            offerer: Maker account address

        Returns:
            SignedOrder: Order parameters with counter and signature

        Raises:
            WalletError: If signing fails
        """
        pass

    @abstractmethod
    async def fulfill_order(self, order: SignedOrder, fulfiller: str) -> TransactionResult:
        """Fulfill a signed order on-chain.

        Raises:
            TransactionFailedError: If the transaction fails
        """
        pass

    @abstractmethod
    async def cancel_orders(
        self, orders: list[dict[str, Any]], canceller: str
    ) -> TransactionResult:
        """Cancel orders on-chain by their parameters (no signature needed).

        Raises:
            TransactionFailedError: If the transaction fails
        """
        pass
