"""Mode -> agent lookup used by the CLI and embedding applications."""

from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from agent_gateway.agents.base import Agent
from agent_gateway.agents.data import DataAgent
from agent_gateway.agents.image import ImageAgent
from agent_gateway.agents.retrieval import RetrievalAgent
from agent_gateway.agents.survey import SurveyAgent
from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import UnknownAgentError
from agent_gateway.llm.oracle import Oracle
from agent_gateway.streaming.cancellation import CancellationToken
from agent_gateway.streaming.channel import EventChannel


def default_agents(oracle: Oracle | None = None, settings: Settings | None = None) -> list[Agent]:
    """Built-in agents sharing one settings object (and oracle, when given)."""
    settings = settings or get_settings()
    return [
        SurveyAgent(oracle=oracle, settings=settings),
        RetrievalAgent(oracle=oracle, settings=settings),
        DataAgent(oracle=oracle, settings=settings),
        ImageAgent(settings=settings),
    ]


class AgentDispatcher:
    """Routes a request to the agent registered under its mode."""

    def __init__(
        self,
        agents: Mapping[str, Agent] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if agents is None:
            agents = {agent.name: agent for agent in default_agents(settings=self.settings)}
        self._agents: dict[str, Agent] = dict(agents)

    @property
    def modes(self) -> list[str]:
        return sorted(self._agents)

    def register(self, agent: Agent, mode: str | None = None) -> None:
        """Register ``agent`` under ``mode`` (defaults to ``agent.name``)."""
        self._agents[mode or agent.name] = agent

    def get(self, mode: str) -> Agent:
        try:
            return self._agents[mode]
        except KeyError:
            available = ", ".join(self.modes)
            raise UnknownAgentError(f"Unknown agent mode: {mode}. Available: {available}") from None

    def dispatch(
        self,
        mode: str,
        message: str,
        token: CancellationToken | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> EventChannel:
        """Start the agent for ``mode`` and return its event channel."""
        agent = self.get(mode)
        logger.info("Dispatching request to {}", mode)
        return agent.run(message, token=token, options=options)
