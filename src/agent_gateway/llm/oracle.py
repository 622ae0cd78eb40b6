"""Async oracle client: the only way agents talk to an LLM."""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import (
    OperationCancelled,
    OracleSchemaError,
    OracleTimeoutError,
    OracleTransportError,
)
from agent_gateway.llm.base import BaseLLMProvider
from agent_gateway.llm.factory import get_llm_provider
from agent_gateway.llm.parsing import extract_json_from_response, strip_reasoning
from agent_gateway.llm.prompts import PromptLogEntry, PromptLogger, RenderedPrompt
from agent_gateway.streaming.cancellation import CancellationToken

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class Oracle:
    """Wraps a blocking :class:`BaseLLMProvider` behind a cancellable async API.

    Every call checks the token before it starts. While a call is in flight it
    races against the token; if the token wins, the provider call is left to
    finish in its worker thread and its result is discarded.
    """

    def __init__(
        self,
        llm: BaseLLMProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.llm = llm or get_llm_provider(settings=self.settings)
        self.prompt_logger = PromptLogger(self.settings)
        self.calls = 0

    async def generate_text(
        self,
        prompt: RenderedPrompt,
        token: CancellationToken | None = None,
    ) -> str:
        """Return the plain-text reply with reasoning tags removed."""
        response_text = await self._complete(prompt, token, json_mode=False)
        return strip_reasoning(response_text).strip()

    async def generate_structured(
        self,
        prompt: RenderedPrompt,
        schema: type[SchemaT],
        token: CancellationToken | None = None,
    ) -> SchemaT:
        """Return the reply validated against ``schema``.

        Raises:
            OracleSchemaError: The reply is not JSON or does not fit ``schema``.
        """
        response_text = await self._complete(prompt, token, json_mode=True)
        try:
            payload = extract_json_from_response(response_text)
        except json.JSONDecodeError as err:
            logger.error("Failed to parse {} response: {}", prompt.name, err)
            logger.error("Original response: {}", response_text[:500])
            raise OracleSchemaError(f"LLM {prompt.name} returned invalid JSON.") from err

        if not isinstance(payload, dict):
            raise OracleSchemaError(f"LLM {prompt.name} returned non-object payload.")

        try:
            return schema.model_validate(payload)
        except ValidationError as err:
            logger.error("{} response failed schema validation: {}", prompt.name, err)
            raise OracleSchemaError(
                f"LLM {prompt.name} response does not match {schema.__name__}: {err.error_count()} error(s)"
            ) from err

    async def _complete(
        self,
        prompt: RenderedPrompt,
        token: CancellationToken | None,
        json_mode: bool,
    ) -> str:
        if token is not None:
            token.raise_if_cancelled()

        self.calls += 1
        start = time.perf_counter()
        call = asyncio.ensure_future(
            asyncio.wait_for(
                asyncio.to_thread(
                    self.llm.chat_completion,
                    prompt.to_messages(),
                    temperature=self.settings.llm_temperature,
                    max_tokens=self.settings.llm_max_tokens,
                    json_mode=json_mode,
                ),
                timeout=self.settings.oracle_timeout_seconds,
            )
        )
        waiters: set[asyncio.Future[Any]] = {call}
        cancel_waiter: asyncio.Future[Any] | None = None
        if token is not None:
            cancel_waiter = asyncio.ensure_future(token.wait())
            waiters.add(cancel_waiter)

        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()

        if not call.done():
            # token fired first; result of the in-flight request is discarded
            call.add_done_callback(_consume_result)
            logger.info("Discarding in-flight {} call after cancellation", prompt.name)
            raise OperationCancelled(token.reason if token else "cancelled")

        try:
            response_text = call.result()
        except asyncio.TimeoutError as err:
            logger.warning(
                "{} timed out after {}s", prompt.name, self.settings.oracle_timeout_seconds
            )
            raise OracleTimeoutError(
                f"LLM did not answer within {self.settings.oracle_timeout_seconds:g}s"
            ) from err
        except (ConnectionError, OSError) as err:
            raise OracleTransportError(str(err)) from err
        except ValueError as err:
            raise OracleTransportError(f"Malformed provider response: {err}") from err

        if token is not None and token.cancelled:
            raise OperationCancelled(token.reason or "cancelled")

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug("{} answered in {:.0f} ms", prompt.name, latency_ms)
        self.prompt_logger.log(
            PromptLogEntry(
                prompt_name=prompt.name,
                prompt={"system": prompt.system, "user": prompt.user},
                response=response_text,
                latency_ms=round(latency_ms, 2),
                metadata={"json_mode": json_mode, "token_estimate": _estimate_tokens(prompt, response_text)},
            )
        )
        return response_text or ""


def _estimate_tokens(prompt: RenderedPrompt, response_text: str) -> int:
    total_chars = len(prompt.system) + len(prompt.user) + len(response_text or "")
    return max(1, total_chars // 4)


def _consume_result(future: asyncio.Future[Any]) -> None:
    if not future.cancelled():
        future.exception()
