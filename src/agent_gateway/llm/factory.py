"""Factory for creating LLM provider instances."""

from loguru import logger

from agent_gateway.config import Settings, get_settings
from agent_gateway.llm.base import BaseLLMProvider
from agent_gateway.llm.ollama_provider import OllamaProvider
from agent_gateway.llm.openai_provider import OpenAIProvider
from agent_gateway.llm.openrouter_provider import OpenRouterProvider


class LLMFactory:
    """Factory for creating LLM providers."""

    _providers: dict[str, type[BaseLLMProvider]] = {
        "openai": OpenAIProvider,
        "openrouter": OpenRouterProvider,
        "ollama": OllamaProvider,
    }

    @classmethod
    def create(cls, provider: str | None = None, settings: Settings | None = None) -> BaseLLMProvider:
        """Create an LLM provider instance."""
        settings = settings or get_settings()

        if provider and provider != "auto":
            logger.info("Using explicitly requested LLM provider: {}", provider)
            return cls._create_provider(provider, settings)

        provider_name = cls._resolve_provider(settings)
        logger.info("Selected LLM provider: {}", provider_name)
        return cls._create_provider(provider_name, settings)

    @classmethod
    def _create_provider(cls, provider_name: str, settings: Settings) -> BaseLLMProvider:
        """Create provider instance with error handling."""
        if provider_name not in cls._providers:
            available = ", ".join(cls._providers.keys())
            raise ValueError(
                f"Unknown LLM provider: {provider_name}. Available: {available}"
            )

        provider_class = cls._providers[provider_name]
        logger.debug("Initializing {} with model={}", provider_name, settings.llm_model)
        return provider_class(settings=settings)

    @classmethod
    def register_provider(cls, name: str, provider_class: type[BaseLLMProvider]) -> None:
        """Register a new LLM provider."""
        cls._providers[name] = provider_class

    @classmethod
    def _resolve_provider(cls, settings: Settings) -> str:
        """Choose the most suitable provider based on settings."""
        if settings.llm_provider != "auto":
            return settings.llm_provider

        if settings.openai_api_key:
            logger.info("Auto-select: Using 'openai' provider (api key configured)")
            return "openai"

        if settings.openrouter_api_key:
            logger.info("Auto-select: Using 'openrouter' provider (api key configured)")
            return "openrouter"

        if settings.llm_allow_local_fallback:
            logger.info("Auto-select: Using 'ollama' provider (allow_local_fallback=True)")
            return "ollama"

        raise ValueError("No LLM provider configured and local fallback is disabled.")


def get_llm_provider(provider: str | None = None, settings: Settings | None = None) -> BaseLLMProvider:
    """Get an LLM provider instance."""
    return LLMFactory.create(provider, settings=settings)
