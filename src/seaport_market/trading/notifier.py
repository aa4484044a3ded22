"""Transient notifications emitted on action completion."""

import asyncio
from collections import deque
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from src.seaport_market.config.constants import TOAST_DURATION_SECONDS
from src.seaport_market.core.enums import ToastVariant
from src.seaport_market.utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_SIZE = 50


class Toast(BaseModel):
    """A single notification."""

    model_config = ConfigDict(frozen=True)

    message: str
    variant: ToastVariant = ToastVariant.ERROR


class ToastNotifier:
    """Holds at most one notification and dismisses it after a fixed delay.

    Showing a new notification replaces the current one and restarts the
    dismiss timer.
    """

    def __init__(
        self,
        duration_seconds: float = TOAST_DURATION_SECONDS,
        on_change: Callable[[Toast | None], None] | None = None,
    ):
        self.duration_seconds = duration_seconds
        self.on_change = on_change
        self.current: Toast | None = None
        # Most recent notifications, oldest first
        self.shown: deque[Toast] = deque(maxlen=HISTORY_SIZE)
        self._timer: asyncio.TimerHandle | None = None

    def show(self, message: str, variant: ToastVariant = ToastVariant.ERROR) -> Toast:
        """Show a notification and schedule its dismissal.

        Must be called from a running event loop.
        """
        toast = Toast(message=message, variant=variant)
        self.current = toast
        self.shown.append(toast)

        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.duration_seconds, self.dismiss)

        logger.debug("Toast shown", message=message, variant=variant.value)
        if self.on_change:
            self.on_change(toast)
        return toast

    def dismiss(self) -> None:
        """Clear the current notification."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.current is None:
            return
        self.current = None
        if self.on_change:
            self.on_change(None)
