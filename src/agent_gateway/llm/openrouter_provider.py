"""OpenRouter LLM provider implementation for Qwen and other models."""

from typing import Any

import requests
from loguru import logger

from agent_gateway.config import Settings, get_settings
from agent_gateway.llm.base import BaseLLMProvider


class OpenRouterProvider(BaseLLMProvider):
    """OpenRouter provider for Qwen 3 Next and other models."""

    API_URL = "https://openrouter.ai/api/v1"

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize OpenRouter provider."""
        settings = settings or get_settings()
        self.api_key = settings.openrouter_api_key
        self.model = settings.openrouter_model or "qwen/qwen-3-next"
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.timeout = settings.oracle_timeout_seconds

        if not self.api_key:
            raise ValueError(
                "OpenRouter API key is required. Set OPENROUTER_API_KEY in .env file"
            )

    def _make_request(
        self,
        endpoint: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Make a request to OpenRouter API."""
        url = f"{self.API_URL}/{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "Agent Gateway",
        }

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error("OpenRouter API error: {}", e)
            if getattr(e, "response", None) is not None:
                logger.error("Response: {}", e.response.text[:500])
            raise ConnectionError(f"OpenRouter request failed: {e}") from e

    def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Make a chat completion request."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        response = self._make_request("chat/completions", payload)

        try:
            return response["choices"][0]["message"]["content"]
        except (KeyError, IndexError) as e:
            logger.error("Unexpected response format: {}", response)
            raise ValueError(f"Failed to extract content from response: {e}") from e
