"""Prompt templates for clustering survey answers and reassigning stragglers."""

from __future__ import annotations

from textwrap import dedent
from typing import Iterable, Sequence

from agent_gateway.llm.prompts.template import PromptTemplate, RenderedPrompt

CLUSTERING_TEMPLATE = PromptTemplate(
    name="survey_clustering_v1",
    system=dedent(
        """
        /nothink

        You are a strict semantic clustering engine for free-text survey answers.
        Group answers only when their meaning or intent is clearly similar;
        otherwise keep them in separate clusters.

        CRITICAL: Do NOT use <think> tags or any reasoning markup.
        Reply ONLY with valid JSON, no text before or after.
        """
    ),
    user=dedent(
        """
        ## Question
        $question

        ## Answers (format: [id] text)
        $items_block

        Return JSON with schema:
        {
          "question": "$question_json",
          "clusters": [
            {"label": "short label in the answers' language", "item_ids": ["id-1", "id-2"]}
          ]
        }

        Rules:
        - every id listed above must appear in exactly one cluster
        - output ids only; NEVER copy, rewrite or translate the answer text
        - do not invent ids that are not listed above
        - keep labels short (<= 8 words)
        """
    ),
)

REASSIGNMENT_TEMPLATE = PromptTemplate(
    name="survey_reassignment_v1",
    system=dedent(
        """
        /nothink

        You place leftover survey answers into clusters. Prefer one of the
        existing labels; create a new label only for a clear new theme.

        CRITICAL: Do NOT use <think> tags or any reasoning markup.
        Reply ONLY with valid JSON, no text before or after.
        """
    ),
    user=dedent(
        """
        ## Question
        $question

        ## Existing labels
        $labels_block

        ## Answers to place (format: [id] text)
        $items_block

        Return JSON with schema:
        {
          "assignments": {"label": ["id-1", "id-2"]},
          "uncategorized": ["id-x"]
        }

        Rules:
        - every id listed above must appear exactly once, either under a label or in uncategorized
        - reuse an existing label verbatim when it fits
        - output ids only; never copy the answer text
        - use uncategorized only for answers that fit no theme at all
        """
    ),
)


def render_clustering_prompt(question: str, items: Sequence[tuple[str, str]]) -> RenderedPrompt:
    """Render the first-pass clustering prompt."""
    context = {
        "question": question,
        "question_json": _json_escape(question),
        "items_block": _format_items(items),
    }
    return CLUSTERING_TEMPLATE.render(context)


def render_reassignment_prompt(
    question: str,
    items: Sequence[tuple[str, str]],
    labels: Iterable[str],
) -> RenderedPrompt:
    """Render the second-pass prompt for the uncategorized bucket."""
    context = {
        "question": question,
        "labels_block": _format_labels(labels),
        "items_block": _format_items(items),
    }
    return REASSIGNMENT_TEMPLATE.render(context)


def _format_items(items: Sequence[tuple[str, str]]) -> str:
    if not items:
        return "No answers."
    return "\n".join(f"- [{item_id}] {' '.join(text.split())}" for item_id, text in items)


def _format_labels(labels: Iterable[str]) -> str:
    formatted = [f"- {label}" for label in labels]
    return "\n".join(formatted) if formatted else "No existing labels. Create new ones if themes are clear."


def _json_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")
