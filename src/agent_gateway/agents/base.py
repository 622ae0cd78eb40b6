"""
Base agent class for the streaming gateway.

Every agent turns one user message into an :class:`EventChannel`. The base
class owns the channel lifecycle and the top-level error contract, so
subclasses only implement :meth:`Agent.execute`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from loguru import logger

from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import OperationCancelled
from agent_gateway.llm.oracle import Oracle
from agent_gateway.streaming.cancellation import CancellationToken
from agent_gateway.streaming.channel import EventChannel
from agent_gateway.streaming.events import response


class Agent(ABC):
    """
    Abstract base for all gateway agents.

    Attributes:
        name (str): Mode under which the agent is dispatched.
        description (str): One-line summary shown by the CLI.
    """

    name: str = "base"
    description: str = ""

    def __init__(
        self,
        oracle: Oracle | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._oracle = oracle

    @property
    def oracle(self) -> Oracle:
        """Oracle client, built lazily so agents that never call the LLM need no provider."""
        if self._oracle is None:
            self._oracle = Oracle(settings=self.settings)
        return self._oracle

    # ----- public interface ------------------------------------------

    def run(
        self,
        message: str,
        token: CancellationToken | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> EventChannel:
        """
        Start the agent on the running event loop.

        Returns immediately; events arrive on the returned channel, which
        always ends with exactly one ``end`` event.
        """
        channel = EventChannel(token=token, name=self.name)
        channel.start(self._guarded(message, channel, dict(options or {})))
        return channel

    @abstractmethod
    async def execute(
        self,
        message: str,
        channel: EventChannel,
        options: dict[str, Any],
    ) -> None:
        """Produce the agent's events; ``end`` is emitted by the base class."""

    # ----- helpers -----------------------------------------------------

    def stream_text(self, channel: EventChannel, text: str, chunk_size: int | None = None) -> None:
        """Emit ``text`` as consecutive ``response`` chunks."""
        size = chunk_size or self.settings.response_chunk_size
        for start in range(0, len(text), size):
            if channel.token.cancelled:
                break
            channel.emit(response(text[start : start + size]))

    async def _guarded(
        self,
        message: str,
        channel: EventChannel,
        options: dict[str, Any],
    ) -> None:
        try:
            await self.execute(message, channel, options)
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.exception("[{}] agent failed", self.name)
            channel.emit(response(f"Error: {exc}"))
