"""Gateway agents and the dispatcher that routes requests to them."""

from agent_gateway.agents.base import Agent
from agent_gateway.agents.data import DataAgent, QueryExecutor, SqliteQueryExecutor
from agent_gateway.agents.dispatcher import AgentDispatcher, default_agents
from agent_gateway.agents.image import ComfyImageBackend, ImageAgent, ImageBackend
from agent_gateway.agents.retrieval import RagflowRetriever, RetrievalAgent, Retriever
from agent_gateway.agents.survey import SurveyAgent

__all__ = [
    "Agent",
    "AgentDispatcher",
    "default_agents",
    "SurveyAgent",
    "RetrievalAgent",
    "Retriever",
    "RagflowRetriever",
    "DataAgent",
    "QueryExecutor",
    "SqliteQueryExecutor",
    "ImageAgent",
    "ImageBackend",
    "ComfyImageBackend",
]
