"""Base class for oracle-backed clustering components with shared logic."""

from __future__ import annotations

from typing import Sequence

from agent_gateway.clustering.models import Item
from agent_gateway.config import Settings, get_settings
from agent_gateway.llm.oracle import Oracle


class BaseLLMComponent:
    """Base class for ClusterEngine and Reassigner with shared oracle wiring."""

    def __init__(
        self,
        oracle: Oracle | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize component with oracle and configuration.

        Args:
            oracle: Oracle client. If None, one is built from settings.
            settings: Configuration settings. If None, loads from environment.
        """
        self.settings = settings or get_settings()
        self.oracle = oracle or Oracle(settings=self.settings)
        self.uncategorized_label = self.settings.uncategorized_label

    @staticmethod
    def _as_pairs(items: Sequence[Item]) -> list[tuple[str, str]]:
        """Project items onto the ``(id, text)`` pairs the prompts expect."""
        return [(item.id, item.text) for item in items]
