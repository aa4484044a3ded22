"""Local private-key wallet signer using Web3.py and eth-account."""

import asyncio
import threading
from typing import Any, ClassVar

from eth_account import Account
from eth_account.messages import encode_typed_data
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception

from src.seaport_market.config.constants import WALLET_REQUEST_TIMEOUT_SECONDS
from src.seaport_market.core.exceptions import (
    ConfigurationError,
    TransactionFailedError,
    WalletError,
)
from src.seaport_market.core.interfaces import WalletSigner
from src.seaport_market.models.wallet import TokenBalance
from src.seaport_market.utils.addresses import is_valid_address
from src.seaport_market.utils.decorators import async_timeout
from src.seaport_market.utils.logger import get_logger

logger = get_logger(__name__)

MAX_RETRIES = 3
RETRY_BACKOFF_SECONDS = 1


class LocalWalletSigner(WalletSigner):
    """Wallet backed by a private key and a JSON-RPC endpoint.

    With ``authorized=False`` the account is only exposed through ``address``
    after ``eth_requestAccounts`` has been answered, like an injected browser
    wallet that needs an explicit connection.
    """

    ERC20_ABI: ClassVar[list[dict[str, Any]]] = [
        {
            "constant": True,
            "inputs": [{"name": "_owner", "type": "address"}],
            "name": "balanceOf",
            "outputs": [{"name": "balance", "type": "uint256"}],
            "type": "function",
        },
        {
            "constant": True,
            "inputs": [],
            "name": "decimals",
            "outputs": [{"name": "", "type": "uint8"}],
            "type": "function",
        },
        {
            "constant": True,
            "inputs": [],
            "name": "symbol",
            "outputs": [{"name": "", "type": "string"}],
            "type": "function",
        },
    ]

    def __init__(self, rpc_url: str, private_key: str, authorized: bool = True):
        """Initialize the local signer.

        Args:
            rpc_url: JSON-RPC endpoint URL
            private_key: Private key for signing
            authorized: Expose the account without an explicit connection request

        Raises:
            ConfigurationError: If the RPC URL or key is unusable
        """
        if not rpc_url:
            raise ConfigurationError("RPC_URL is required for the local wallet")

        try:
            self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        except Exception as e:
            raise ConfigurationError(f"Failed to initialize Web3: {e}") from e

        try:
            self.account = Account.from_key(private_key)
        except Exception as e:
            raise ConfigurationError(f"Invalid private key: {e}") from e

        self.rpc_url = rpc_url
        self._authorized = authorized
        self._chain_id: int | None = None

        # Serializes nonce fetching and transaction submission
        self._nonce_lock = threading.Lock()

    @property
    def chain_id(self) -> int | None:
        return self._chain_id

    @property
    def address(self) -> str | None:
        return self.account.address if self._authorized else None

    @async_timeout(WALLET_REQUEST_TIMEOUT_SECONDS, "Wallet connection timed out.")
    async def connect(self) -> int:
        """Read the active chain ID from the node."""
        self._chain_id = await asyncio.to_thread(lambda: self.w3.eth.chain_id)
        logger.info("Wallet connected", address=self.account.address, chain_id=self._chain_id)
        return self._chain_id

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        if method == "eth_accounts":
            return [self.account.address] if self._authorized else []
        if method == "eth_requestAccounts":
            self._authorized = True
            return [self.account.address]
        if method == "eth_chainId":
            chain_id = self._chain_id if self._chain_id is not None else await self.connect()
            return hex(chain_id)

        try:
            response = await asyncio.to_thread(
                self.w3.provider.make_request, method, params or []
            )
        except Exception as e:
            raise WalletError(f"Wallet request {method} failed: {e}") from e

        if "error" in response:
            error = response["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise WalletError(message or f"Wallet request {method} failed")
        return response.get("result")

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> str:
        try:
            signable = encode_typed_data(
                domain_data=domain, message_types=types, message_data=message
            )
            signed = self.account.sign_message(signable)
        except Exception as e:
            raise WalletError(f"Failed to sign typed data: {e}") from e

        signature = signed.signature.hex()
        return signature if signature.startswith("0x") else "0x" + signature

    async def send_transaction(self, to: str, data: str = "0x", value: int = 0) -> str:
        if not is_valid_address(to):
            raise ValueError(f"Invalid recipient address: {to}")
        return await asyncio.to_thread(self._send_transaction_sync, to, data, value)

    def _send_transaction_sync(self, to: str, data: str, value: int) -> str:
        to = Web3.to_checksum_address(to)

        @retry(
            stop=stop_after_attempt(MAX_RETRIES),
            wait=wait_exponential(multiplier=RETRY_BACKOFF_SECONDS, min=1, max=10),
            retry=retry_if_exception_type((ConnectionError, TimeoutError)),
        )
        def _send_with_retry(tx):
            signed_tx = self.account.sign_transaction(tx)
            return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        try:
            with self._nonce_lock:
                nonce = self.w3.eth.get_transaction_count(self.account.address, "pending")
                tx = {
                    "from": self.account.address,
                    "to": to,
                    "value": value,
                    "data": data,
                    "nonce": nonce,
                    "chainId": self.w3.eth.chain_id,
                    "gasPrice": self.w3.eth.gas_price,
                }
                # Reverts surface here with the contract's custom error name
                tx["gas"] = self.w3.eth.estimate_gas(tx)
                tx_hash = _send_with_retry(tx)
        except ContractLogicError as e:
            # Custom errors arrive as selector data (e.g. InvalidCanceller)
            parts = (e.message or str(e), e.data)
            details = [part for part in parts if isinstance(part, str) and part]
            raise TransactionFailedError(" ".join(details)) from e
        except (ConnectionError, TimeoutError) as e:
            raise WalletError(f"Failed to send transaction after retries: {e}") from e
        except (ValueError, Web3Exception) as e:
            raise TransactionFailedError(f"Transaction failed: {e}") from e

        logger.info("Transaction sent", to=to, value=value)
        if isinstance(tx_hash, bytes):
            result = tx_hash.hex()
            return result if result.startswith("0x") else "0x" + result
        return tx_hash

    async def call(self, to: str, data: str) -> bytes:
        tx = {"to": Web3.to_checksum_address(to), "data": data}
        try:
            return bytes(await asyncio.to_thread(self.w3.eth.call, tx))
        except Web3Exception as e:
            raise WalletError(f"Contract call failed: {e}") from e

    async def get_token_balance(self, token_address: str) -> TokenBalance:
        if not is_valid_address(token_address):
            raise ValueError(f"Invalid token address: {token_address}")
        return await asyncio.to_thread(self._get_token_balance_sync, token_address)

    def _get_token_balance_sync(self, token_address: str) -> TokenBalance:
        @retry(
            stop=stop_after_attempt(MAX_RETRIES),
            wait=wait_exponential(multiplier=RETRY_BACKOFF_SECONDS, min=1, max=10),
            retry=retry_if_exception_type((ConnectionError, TimeoutError)),
        )
        def _read_balance():
            contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(token_address), abi=self.ERC20_ABI
            )
            value = contract.functions.balanceOf(self.account.address).call()
            decimals = contract.functions.decimals().call()
            symbol = contract.functions.symbol().call()
            return value, decimals, symbol

        try:
            value, decimals, symbol = _read_balance()
        except (ConnectionError, TimeoutError, Web3Exception) as e:
            raise WalletError(f"Failed to get token balance: {e}") from e

        return TokenBalance(value=value, decimals=decimals, symbol=symbol)
