"""Tests for the async oracle client."""

from __future__ import annotations

import asyncio
import json

import pytest
from pydantic import BaseModel

from agent_gateway.errors import (
    OperationCancelled,
    OracleSchemaError,
    OracleTimeoutError,
    OracleTransportError,
)
from agent_gateway.llm.oracle import Oracle
from agent_gateway.llm.prompts import RenderedPrompt
from agent_gateway.streaming.cancellation import CancellationToken

from conftest import FakeLLMProvider

PROMPT = RenderedPrompt(name="unit", system="system", user="user")


class Answer(BaseModel):
    value: int


def test_generate_text_strips_reasoning(make_oracle) -> None:
    oracle, provider = make_oracle(["<think>hmm</think>\n 房屋政策 \n"])

    text = asyncio.run(oracle.generate_text(PROMPT))

    assert text == "房屋政策"
    assert provider.calls[0][0] == {"role": "system", "content": "system"}


def test_generate_structured_extracts_json_from_chatter(make_oracle) -> None:
    oracle, _ = make_oracle(['Sure! ```json\n{"value": 3}\n``` done'])

    answer = asyncio.run(oracle.generate_structured(PROMPT, Answer))

    assert answer.value == 3


@pytest.mark.parametrize(
    "reply",
    ["not json at all", '{"value": "three"}', "[1, 2]"],
)
def test_generate_structured_raises_schema_error(make_oracle, reply) -> None:
    oracle, _ = make_oracle([reply])

    with pytest.raises(OracleSchemaError):
        asyncio.run(oracle.generate_structured(PROMPT, Answer))


def test_transport_errors_are_wrapped(make_oracle) -> None:
    oracle, _ = make_oracle([ConnectionError("refused")])

    with pytest.raises(OracleTransportError, match="refused"):
        asyncio.run(oracle.generate_text(PROMPT))


def test_slow_provider_times_out(settings) -> None:
    settings.oracle_timeout_seconds = 0.05
    oracle = Oracle(llm=FakeLLMProvider(["late"], delay=0.3), settings=settings)

    with pytest.raises(OracleTimeoutError):
        asyncio.run(oracle.generate_text(PROMPT))


def test_cancelled_token_prevents_the_call(make_oracle) -> None:
    oracle, provider = make_oracle(["never"])

    async def _run() -> None:
        token = CancellationToken()
        token.cancel()
        await oracle.generate_text(PROMPT, token)

    with pytest.raises(OperationCancelled):
        asyncio.run(_run())
    assert provider.calls == []
    assert oracle.calls == 0


def test_cancellation_abandons_in_flight_call(make_oracle) -> None:
    oracle, provider = make_oracle(["discarded"], delay=0.3)

    async def _run() -> None:
        token = CancellationToken()
        task = asyncio.create_task(oracle.generate_text(PROMPT, token))
        await asyncio.sleep(0.05)
        token.cancel("user stopped")
        await task

    with pytest.raises(OperationCancelled):
        asyncio.run(_run())
    assert len(provider.calls) == 1


def test_prompts_are_saved_when_enabled(settings, tmp_path) -> None:
    settings.save_prompts = True
    oracle = Oracle(llm=FakeLLMProvider(['{"value": 1}']), settings=settings)

    asyncio.run(oracle.generate_structured(PROMPT, Answer))

    saved = list((tmp_path / "prompts").glob("prompts-*.jsonl"))
    assert len(saved) == 1
    entry = json.loads(saved[0].read_text(encoding="utf-8").splitlines()[0])
    assert entry["prompt_name"] == "unit"
    assert entry["metadata"]["json_mode"] is True
