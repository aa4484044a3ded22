"""Mock wallet signer for testing."""

import asyncio
from typing import Any

from src.seaport_market.core.exceptions import WalletError
from src.seaport_market.core.interfaces import WalletSigner
from src.seaport_market.models.wallet import TokenBalance
from tests.fixtures.orders import ACCOUNT, SIGNATURE


class MockWalletSigner(WalletSigner):
    """Mock wallet implementing the WalletSigner interface."""

    def __init__(
        self,
        address: str | None = ACCOUNT,
        chain_id: int | None = 8453,
        balance: TokenBalance | None = None,
    ) -> None:
        """Initialize mock wallet."""
        self._address = address
        self._chain_id = chain_id
        self.balance = balance or TokenBalance(value=10**18, decimals=18, symbol="WETH")

        # Account discovery answers
        self.accounts: list[str] = []
        self.requested_accounts: list[str] = []
        self.request_delay = 0.0

        # Failure injection
        self.sign_error: Exception | None = None
        self.send_error: Exception | None = None
        self.balance_error: Exception | None = None

        # Canned eth_call results keyed by lowercase contract address
        self.call_results: dict[str, bytes] = {}

        # Track calls for testing
        self.requests: list[str] = []
        self.signed: list[dict[str, Any]] = []
        self.transactions_sent: list[dict[str, Any]] = []
        self.calls: list[dict[str, Any]] = []
        self.balance_requests: list[str] = []

    @property
    def chain_id(self) -> int | None:
        return self._chain_id

    @property
    def address(self) -> str | None:
        return self._address

    def switch_chain(self, chain_id: int | None) -> None:
        """Simulate the user switching networks."""
        self._chain_id = chain_id

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        self.requests.append(method)
        if self.request_delay:
            await asyncio.sleep(self.request_delay)
        if method == "eth_accounts":
            return list(self.accounts)
        if method == "eth_requestAccounts":
            return list(self.requested_accounts)
        if method == "eth_chainId":
            return hex(self._chain_id or 0)
        raise WalletError(f"Unsupported method {method}")

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> str:
        if self.sign_error:
            raise self.sign_error
        self.signed.append({"domain": domain, "types": types, "message": message})
        return SIGNATURE

    async def send_transaction(self, to: str, data: str = "0x", value: int = 0) -> str:
        if self.send_error:
            raise self.send_error
        self.transactions_sent.append({"to": to, "data": data, "value": value})
        return "0x" + format(len(self.transactions_sent), "064x")

    async def call(self, to: str, data: str) -> bytes:
        self.calls.append({"to": to, "data": data})
        return self.call_results.get(to.lower(), b"\x00" * 32)

    async def get_token_balance(self, token_address: str) -> TokenBalance:
        self.balance_requests.append(token_address)
        if self.balance_error:
            raise self.balance_error
        return self.balance
