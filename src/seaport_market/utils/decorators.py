"""Timeout helpers for wallet interaction."""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from src.seaport_market.core.exceptions import WalletTimeoutError

T = TypeVar("T")

WALLET_TIMEOUT_MESSAGE = "Wallet request timed out."


async def with_timeout(
    awaitable: Awaitable[T], seconds: float, message: str = WALLET_TIMEOUT_MESSAGE
) -> T:
    """Await with a timeout chosen at call time.

    Raises:
        WalletTimeoutError: If the awaitable takes longer than ``seconds``
    """
    # Handle negative or zero timeout
    timeout = max(0, seconds)

    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise WalletTimeoutError(message) from e


def async_timeout(seconds: float, message: str = WALLET_TIMEOUT_MESSAGE):
    """Add a fixed timeout to an async function.

    Args:
        seconds: Timeout in seconds
        message: Message of the raised WalletTimeoutError

    Returns:
        Decorated async function with timeout

    Raises:
        WalletTimeoutError: If the function takes longer than specified timeout

    Example:
        @async_timeout(seconds=10.0)
        async def read_accounts():
            return await wallet.request("eth_accounts")
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await with_timeout(func(*args, **kwargs), seconds, message)

        return wrapper

    return decorator
