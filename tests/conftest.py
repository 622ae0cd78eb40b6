"""Shared fixtures: scripted LLM provider, isolated settings and agent runner."""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Callable

import pytest

from agent_gateway.config.settings import Settings
from agent_gateway.llm.base import BaseLLMProvider
from agent_gateway.llm.oracle import Oracle
from agent_gateway.streaming.events import Event


class FakeLLMProvider(BaseLLMProvider):
    """Replays scripted replies in order.

    A scripted entry may be a string, a dict (sent as JSON), an exception
    instance (raised) or a callable receiving the messages.
    """

    def __init__(self, replies: list[Any] | None = None, delay: float = 0.0) -> None:
        self.replies = list(replies or [])
        self.delay = delay
        self.calls: list[list[dict[str, str]]] = []

    def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(messages)
        if self.delay:
            time.sleep(self.delay)
        if not self.replies:
            raise AssertionError("FakeLLMProvider ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(messages)
        if isinstance(reply, (dict, list)):
            return json.dumps(reply, ensure_ascii=False)
        return reply


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        llm_provider="ollama",
        surveys_dir=tmp_path / "surveys",
        data_db_path=tmp_path / "data.db",
        log_file=tmp_path / "gateway.log",
        log_prompt_dir=tmp_path / "prompts",
        save_prompts=False,
        oracle_timeout_seconds=5.0,
        image_poll_attempts=3,
        image_poll_delay_seconds=0.0,
    )


@pytest.fixture()
def make_oracle(settings: Settings) -> Callable[..., tuple[Oracle, FakeLLMProvider]]:
    def _make(replies: list[Any] | None = None, delay: float = 0.0) -> tuple[Oracle, FakeLLMProvider]:
        provider = FakeLLMProvider(replies, delay=delay)
        return Oracle(llm=provider, settings=settings), provider

    return _make


def collect_events(agent: Any, message: str, **kwargs: Any) -> list[Event]:
    async def _run() -> list[Event]:
        channel = agent.run(message, **kwargs)
        events = await channel.collect()
        await channel.join()
        return events

    return asyncio.run(_run())


@pytest.fixture()
def run_agent() -> Callable[..., list[Event]]:
    return collect_events
