"""Markdown rendering of clustered survey answers."""

from __future__ import annotations

from typing import Mapping, Sequence

from agent_gateway.clustering.models import Cluster, Item

NO_ANSWERS = "_No answers._"


def render_markdown(
    question: str,
    clusters: Sequence[Cluster],
    items_by_id: Mapping[str, Item],
) -> str:
    """Render one question section.

    Pure function: the same input always yields the same string, and
    embedded line breaks are collapsed so the list structure survives.
    """
    lines = [f"## {_one_line(question)}", ""]
    if not clusters:
        lines.append(NO_ANSWERS)
    for cluster in clusters:
        lines.append(f"- **{_one_line(cluster.label)}** ({cluster.size})")
        for item_id in cluster.item_ids:
            item = items_by_id.get(item_id)
            text = _one_line(item.text) if item is not None else ""
            lines.append(f"  - {text} `#{item_id}`" if text else f"  - `#{item_id}`")
    return "\n".join(lines) + "\n"


def render_error_block(question: str, message: str) -> str:
    """Inline block that replaces the cluster list of a failed question."""
    return f'> **Error processing question "{_one_line(question)}"**: {_one_line(message)}\n'


def render_failed_section(question: str, message: str) -> str:
    return f"## {_one_line(question)}\n\n" + render_error_block(question, message)


def _one_line(value: str) -> str:
    return " ".join(str(value).split())
