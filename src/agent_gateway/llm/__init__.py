"""LLM providers and the async oracle client."""

from agent_gateway.llm.base import BaseLLMProvider
from agent_gateway.llm.factory import LLMFactory, get_llm_provider
from agent_gateway.llm.ollama_provider import OllamaProvider
from agent_gateway.llm.openai_provider import OpenAIProvider
from agent_gateway.llm.openrouter_provider import OpenRouterProvider
from agent_gateway.llm.oracle import Oracle

__all__ = [
    "BaseLLMProvider",
    "LLMFactory",
    "get_llm_provider",
    "OllamaProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "Oracle",
]
