"""Wallet models."""

from typing import Any

from pydantic import BaseModel, Field

from src.seaport_market.utils.units import format_units


class TokenBalance(BaseModel):
    """ERC-20 balance in the token's smallest unit."""

    value: int = Field(..., ge=0, description="Balance in smallest units")
    decimals: int = Field(default=18, ge=0, le=77)
    symbol: str = Field(default="")

    @property
    def formatted(self) -> str:
        """Human-decimal balance."""
        return format_units(self.value, self.decimals)

    @property
    def label(self) -> str:
        """Balance with its symbol, e.g. '1.5 WETH'."""
        return f"{self.formatted} {self.symbol}".strip()


class WalletSession(BaseModel):
    """Connected wallet as seen by the action engine.

    ``address`` is the account reported by the connection layer. The client's
    own address takes precedence once it exposes one. Both are re-read on every
    action, so a session may change between invocations.
    """

    address: str | None = None
    client: Any | None = Field(None, description="WalletSigner of the connected wallet")

    @property
    def account_address(self) -> str | None:
        """Account used as maker, fulfiller or canceller."""
        client_address = getattr(self.client, "address", None) if self.client else None
        return client_address or self.address

    @property
    def chain_id(self) -> int | None:
        """Active chain of the wallet client."""
        return getattr(self.client, "chain_id", None) if self.client else None
