"""Base class for LLM providers."""

from abc import ABC, abstractmethod


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Providers are synchronous HTTP clients; the oracle moves calls off the
    event loop.
    """

    @abstractmethod
    def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Run a chat-style completion request.

        Args:
            messages: Chat messages in OpenAI format.
            temperature: Optional sampling temperature override.
            max_tokens: Optional completion length override.
            json_mode: Ask the backend to constrain the reply to a JSON object.

        Returns:
            Generated text response from the LLM.
        """
        pass
