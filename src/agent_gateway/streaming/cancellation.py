"""Cooperative cancellation signal threaded through every async step."""

from __future__ import annotations

import asyncio

from loguru import logger

from agent_gateway.errors import OperationCancelled


class CancellationToken:
    """Shared abort signal.

    Any component may observe the token. Code that is about to start new
    oracle work calls :meth:`raise_if_cancelled`; code that awaits a long
    operation can race it against :meth:`wait`.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()
        logger.info("Cancellation requested: {}", reason)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled(self.reason or "cancelled")

    async def wait(self) -> None:
        await self._event.wait()
