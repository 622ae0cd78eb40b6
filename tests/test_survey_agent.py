"""Tests for the survey agent and its data source."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pandas as pd
import pytest

from agent_gateway.agents.survey import (
    INVALID_ID_MESSAGE,
    NO_FREE_TEXT_MESSAGE,
    NOT_FOUND_MESSAGE,
    SurveyAgent,
    is_survey_id,
)
from agent_gateway.data import FileSurveySource, InMemorySurveySource, build_items
from agent_gateway.errors import OracleTimeoutError, SurveyNotFoundError
from agent_gateway.streaming import CancellationToken

SURVEY = {
    "123": {
        "What did you like?": [
            {"id": "r1", "value": "講者生動"},
            {"id": "r2", "value": "時間太短"},
            {"id": "r3", "value": "很好"},
        ],
        "Anything else?": [{"id": "r4", "value": "No"}],
    }
}


def _agent(make_oracle, settings, replies, survey=SURVEY, delay=0.0):
    oracle, provider = make_oracle(replies, delay=delay)
    agent = SurveyAgent(source=InMemorySurveySource(survey), oracle=oracle, settings=settings)
    return agent, provider


@pytest.mark.parametrize("value", ["abc", "12a", "", " 12", "012", "1.5", "+5"])
def test_is_survey_id_rejects_non_canonical_integers(value) -> None:
    assert not is_survey_id(value)


def test_non_numeric_id_responds_without_oracle_calls(make_oracle, settings, run_agent) -> None:
    agent, provider = _agent(make_oracle, settings, [])

    events = run_agent(agent, "abc")

    assert [(e.type, e.data) for e in events] == [("response", INVALID_ID_MESSAGE), ("end", None)]
    assert provider.calls == []


def test_unknown_survey_reports_not_found(make_oracle, settings, run_agent) -> None:
    agent, provider = _agent(make_oracle, settings, [])

    events = run_agent(agent, "999")

    assert [(e.type, e.data) for e in events] == [("response", NOT_FOUND_MESSAGE), ("end", None)]
    assert provider.calls == []


def test_survey_without_free_text(make_oracle, settings, run_agent) -> None:
    agent, _ = _agent(make_oracle, settings, [], survey={"5": {"Q": [{"value": "  "}]}})

    events = run_agent(agent, "5")

    assert [(e.type, e.data) for e in events] == [("response", NO_FREE_TEXT_MESSAGE), ("end", None)]


def test_full_run_streams_progress_then_aggregated_markdown(make_oracle, settings, run_agent) -> None:
    agent, provider = _agent(
        make_oracle,
        settings,
        [
            {"clusters": [{"label": "Speakers", "item_ids": ["r1"]}]},
            {"clusters": [{"label": "Nothing", "item_ids": ["r4"]}]},
        ],
    )

    events = run_agent(agent, "123")

    types = [e.type for e in events]
    assert types[-2:] == ["response", "end"]
    assert types.count("end") == 1
    statuses = [e.data.status for e in events if e.type == "progress"]
    assert statuses == ["started", "processing", "completed", "processing", "completed", "finished"]
    currents = [e.data.current for e in events if e.type == "progress"]
    assert currents == sorted(currents)

    body = events[-2].data
    assert body.index("## What did you like?") < body.index("## Anything else?")
    assert "- **Speakers** (1)\n  - 講者生動 `#r1`" in body
    assert "- **uncategorized** (2)\n  - 時間太短 `#r2`\n  - 很好 `#r3`" in body
    assert len(provider.calls) == 2


def test_failed_question_is_reported_and_processing_continues(make_oracle, settings, run_agent) -> None:
    agent, provider = _agent(
        make_oracle,
        settings,
        [
            OracleTimeoutError("LLM did not answer within 5s"),
            {"clusters": [{"label": "Nothing", "item_ids": ["r4"]}]},
        ],
    )

    events = run_agent(agent, "123")

    errors = [e.data for e in events if e.type == "error"]
    assert errors == ['Error processing question "What did you like?": LLM did not answer within 5s']
    body = events[-2].data
    assert '> **Error processing question "What did you like?"**: LLM did not answer within 5s' in body
    assert "- **Nothing** (1)" in body
    assert events[-1].type == "end"
    assert len(provider.calls) == 2


def test_reassigning_progress_is_reported(make_oracle, settings, run_agent) -> None:
    answers = [{"id": f"a{i}", "value": f"answer {i}"} for i in range(1, 8)]
    agent, provider = _agent(
        make_oracle,
        settings,
        [
            {"clusters": [{"label": "One", "item_ids": ["a1"]}]},
            {"assignments": {"One": ["a2"]}, "uncategorized": []},
        ],
        survey={"7": {"Q": answers}},
    )

    events = run_agent(agent, "7")

    statuses = [e.data.status for e in events if e.type == "progress"]
    assert statuses == ["started", "processing", "reassigning", "completed", "finished"]
    assert len(provider.calls) == 2


def test_unexpected_errors_become_a_single_response(make_oracle, settings, run_agent) -> None:
    class BrokenSource(InMemorySurveySource):
        def fetch_free_text(self, survey_id):
            raise RuntimeError("database offline")

    oracle, _ = make_oracle([])
    agent = SurveyAgent(source=BrokenSource({}), oracle=oracle, settings=settings)

    events = run_agent(agent, "1")

    assert [(e.type, e.data) for e in events] == [("response", "Error: database offline"), ("end", None)]


def test_cancellation_stops_oracle_calls_and_ends_stream(make_oracle, settings) -> None:
    agent, provider = _agent(
        make_oracle,
        settings,
        [{"clusters": []}, {"clusters": []}],
        delay=0.2,
    )

    async def _run():
        token = CancellationToken()
        channel = agent.run("123", token=token)
        await asyncio.sleep(0.05)
        token.cancel()
        events = await channel.collect()
        await channel.join()
        return events

    events = asyncio.run(_run())

    assert events[-1].type == "end"
    assert all(e.type in {"progress", "end"} for e in events)
    assert len(provider.calls) == 1


def test_build_items_trims_drops_and_deduplicates_ids() -> None:
    items = build_items(
        [
            {"id": "x", "value": "  first "},
            {"value": ""},
            {"id": "x", "value": "second"},
            {"value": "third"},
            "fourth",
            {"id": "x", "value": "fifth"},
        ]
    )

    assert [(item.id, item.text) for item in items] == [
        ("x", "first"),
        ("x-2", "second"),
        ("a4", "third"),
        ("a5", "fourth"),
        ("x-3", "fifth"),
    ]


def test_file_source_reads_csv_and_skips_rating_rows(settings) -> None:
    surveys_dir = Path(settings.surveys_dir)
    surveys_dir.mkdir(parents=True)
    pd.DataFrame(
        {
            "question": ["Q2", "Q1", "Q2", "Rate us", "Q1"],
            "answer": ["b", "a", " ", "5", "c"],
            "response_id": ["10", "11", "12", "13", "14"],
            "type": ["text", "text", "text", "rating", "text"],
        }
    ).to_csv(surveys_dir / "survey_42.csv", index=False)

    answers = FileSurveySource(settings=settings).fetch_free_text("42")

    assert list(answers) == ["Q2", "Q1"]
    assert answers["Q2"] == [{"value": "b", "id": "10"}]
    assert answers["Q1"] == [{"value": "a", "id": "11"}, {"value": "c", "id": "14"}]


def test_file_source_raises_for_missing_survey(settings) -> None:
    with pytest.raises(SurveyNotFoundError):
        FileSurveySource(settings=settings).fetch_free_text("404")
