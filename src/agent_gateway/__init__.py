"""Multi-agent streaming gateway with LLM-based survey clustering.

Example:
    >>> import asyncio
    >>> from agent_gateway import AgentDispatcher
    >>>
    >>> async def ask():
    ...     channel = AgentDispatcher().dispatch("agentSurvey", "123")
    ...     async for event in channel:
    ...         print(event.to_json())
    >>>
    >>> asyncio.run(ask())
"""

__version__ = "0.1.0"

# Public API exports
from agent_gateway.agents import Agent, AgentDispatcher
from agent_gateway.clustering import Cluster, ClusteringResult, Item, QuestionAnalyzer
from agent_gateway.config import Settings
from agent_gateway.llm.base import BaseLLMProvider
from agent_gateway.llm.oracle import Oracle
from agent_gateway.streaming import CancellationToken, Event, EventChannel

__all__ = [
    # Agents
    "Agent",
    "AgentDispatcher",
    # Clustering
    "QuestionAnalyzer",
    "Cluster",
    "ClusteringResult",
    "Item",
    # Streaming
    "CancellationToken",
    "Event",
    "EventChannel",
    # Configuration
    "Settings",
    # LLM integration
    "BaseLLMProvider",
    "Oracle",
    # Version
    "__version__",
]
