"""OpenAI-compatible chat completions provider."""

from typing import Any

import requests
from loguru import logger

from agent_gateway.config import Settings, get_settings
from agent_gateway.llm.base import BaseLLMProvider


class OpenAIProvider(BaseLLMProvider):
    """Provider for OpenAI and any server exposing ``/chat/completions``."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize OpenAI provider."""
        settings = settings or get_settings()
        self.api_url = settings.openai_api_url.rstrip("/")
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.timeout = settings.oracle_timeout_seconds

    def _make_request(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.api_url}/{endpoint}"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error("OpenAI API error: {}", e)
            if getattr(e, "response", None) is not None:
                logger.error("Response: {}", e.response.text[:500])
            raise ConnectionError(f"OpenAI-compatible API request failed: {e}") from e

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
            return response["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected response format: {}", response)
            raise ValueError(f"Failed to extract content from response: {e}") from e
