"""Tests for wallet timeout helpers."""

import asyncio

import pytest

from src.seaport_market.core.exceptions import WalletError, WalletTimeoutError
from src.seaport_market.utils.decorators import async_timeout, with_timeout


class TestWithTimeout:
    """Test call-time timeouts."""

    @pytest.mark.asyncio
    async def test_returns_result_within_timeout(self):
        async def quick():
            return "ok"

        assert await with_timeout(quick(), 1) == "ok"

    @pytest.mark.asyncio
    async def test_raises_wallet_timeout(self):
        with pytest.raises(WalletTimeoutError, match="Wallet request timed out."):
            await with_timeout(asyncio.sleep(1), 0.01)

    @pytest.mark.asyncio
    async def test_timeout_is_a_wallet_error(self):
        with pytest.raises(WalletError):
            await with_timeout(asyncio.sleep(1), 0.01, "Too slow")


class TestAsyncTimeoutDecorator:
    """Test the fixed-timeout decorator."""

    @pytest.mark.asyncio
    async def test_decorated_function_times_out(self):
        @async_timeout(0.01, "Wallet connection timed out.")
        async def slow():
            await asyncio.sleep(1)

        with pytest.raises(WalletTimeoutError, match="Wallet connection timed out."):
            await slow()

    @pytest.mark.asyncio
    async def test_decorator_preserves_metadata(self):
        @async_timeout(1)
        async def read_accounts():
            """Docstring."""
            return ["0x1"]

        assert read_accounts.__name__ == "read_accounts"
        assert await read_accounts() == ["0x1"]
