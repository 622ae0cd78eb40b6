"""Tests for prompt templates."""

from __future__ import annotations

import pytest

from agent_gateway.llm.prompts import (
    PromptTemplate,
    render_clustering_prompt,
    render_keyword_prompt,
    render_reassignment_prompt,
    render_sql_prompt,
)


def test_render_rejects_missing_placeholders() -> None:
    template = PromptTemplate(name="t", system="", user="$question about $topic")

    with pytest.raises(KeyError, match="topic"):
        template.render({"question": "q"})


def test_rendered_prompts_leave_no_placeholders() -> None:
    prompts = [
        render_clustering_prompt('He said "hi"', [("1", "line\nbreak")]),
        render_reassignment_prompt("q", [("2", "text")], ["Speakers"]),
        render_keyword_prompt("房屋政策"),
        render_sql_prompt("How many courses?", ""),
    ]

    for prompt in prompts:
        assert "$" not in prompt.system + prompt.user


def test_clustering_prompt_flattens_answers_and_escapes_question() -> None:
    prompt = render_clustering_prompt('He said "hi"', [("1", "line\nbreak")])

    assert "- [1] line break" in prompt.user
    assert '"question": "He said \\"hi\\""' in prompt.user


def test_keyword_prompt_has_no_system_message() -> None:
    messages = render_keyword_prompt("q").to_messages()

    assert [m["role"] for m in messages] == ["user"]
