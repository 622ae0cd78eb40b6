"""Ollama LLM provider implementation for local models."""

import json
from typing import Any
from urllib.parse import urlsplit

import urllib3
from loguru import logger

from agent_gateway.config import Settings, get_settings
from agent_gateway.llm.base import BaseLLMProvider


class OllamaProvider(BaseLLMProvider):
    """Ollama provider for local models like Qwen3 30B."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize Ollama provider."""
        settings = settings or get_settings()
        self.api_url = settings.ollama_api_url.rstrip("/")
        self.model = settings.ollama_model or settings.llm_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.read_timeout = settings.oracle_timeout_seconds

    def _make_request(
        self,
        endpoint: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Make a request to Ollama API.

        Uses urllib3 directly instead of requests due to compatibility issues
        with Ollama server (requests returns 503, urllib3 works correctly).
        """
        parts = urlsplit(f"{self.api_url}/{endpoint}")
        host = parts.hostname or "localhost"
        port = parts.port or (11434 if host in {"localhost", "127.0.0.1"} else 80)
        url = f"{parts.scheme or 'http'}://{host}:{port}{parts.path}"

        try:
            http = urllib3.PoolManager(
                num_pools=1,
                maxsize=1,
                timeout=urllib3.Timeout(connect=10, read=self.read_timeout),
            )

            response = http.request(
                "POST",
                url,
                body=json.dumps(payload).encode("utf-8"),
                headers={
                    "Content-Type": "application/json",
                    "Connection": "close",
                },
            )

            if response.status != 200:
                logger.error("Ollama API error: {}", response.status)
                if response.data:
                    logger.error("Response: {}", response.data.decode("utf-8", errors="ignore")[:200])
                raise ConnectionError(
                    f"Cannot connect to Ollama at {self.api_url}. "
                    f"Status: {response.status}. "
                    "Make sure Ollama is running: 'ollama serve'"
                )

            return json.loads(response.data.decode("utf-8"))

        except urllib3.exceptions.HTTPError as e:
            logger.error("Ollama connection error. Is Ollama running on {}? Error: {}", self.api_url, e)
            raise ConnectionError(
                f"Cannot connect to Ollama at {self.api_url}. "
                "Make sure Ollama is running: 'ollama serve'"
            ) from e
        except json.JSONDecodeError as e:
            logger.error("Failed to parse Ollama response: {}", e)
            raise ValueError(f"Invalid response from Ollama: {e}") from e

    def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Make a chat completion request using Ollama chat API."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.temperature if temperature is None else temperature,
                "num_predict": max_tokens or self.max_tokens,
            },
        }
        if json_mode:
            payload["format"] = "json"

        response = self._make_request("chat", payload)

        try:
            return response.get("message", {}).get("content", "").strip()
        except AttributeError as e:
            logger.error("Unexpected response format: {}", response)
            raise ValueError(f"Failed to extract content from response: {e}") from e
