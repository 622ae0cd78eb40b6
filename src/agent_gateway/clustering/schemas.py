"""Pydantic models for LLM response validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _coerce_ids(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int)):
        return [str(value).strip()]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


class ClusterPayload(BaseModel):
    """Schema for a single cluster returned by the clustering prompt."""

    label: str = ""
    item_ids: list[str] = Field(default_factory=list)

    @field_validator("label", mode="before")
    @classmethod
    def normalize_label(cls, v: Any) -> str:
        """Collapse whitespace inside the label."""
        return " ".join(str(v or "").split())

    @field_validator("item_ids", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure item_ids is a list of strings."""
        return _coerce_ids(v)


class ClusteringResponse(BaseModel):
    """Schema for the full clustering response."""

    question: str = ""
    clusters: list[ClusterPayload]


class ReassignmentResponse(BaseModel):
    """Schema for the reassignment response."""

    assignments: dict[str, list[str]] = Field(default_factory=dict)
    uncategorized: list[str] = Field(default_factory=list)

    @field_validator("assignments", mode="before")
    @classmethod
    def ensure_mapping(cls, v: Any) -> dict[str, list[str]]:
        """Accept a mapping, or a list of ``{label, item_ids}`` objects."""
        if v is None:
            return {}
        if isinstance(v, list):
            pairs = [
                (entry.get("label"), entry.get("item_ids"))
                for entry in v
                if isinstance(entry, dict)
            ]
        elif isinstance(v, dict):
            pairs = list(v.items())
        else:
            return {}

        mapping: dict[str, list[str]] = {}
        for label, ids in pairs:
            key = " ".join(str(label or "").split())
            mapping.setdefault(key, []).extend(_coerce_ids(ids))
        return mapping

    @field_validator("uncategorized", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure uncategorized is a list of strings."""
        return _coerce_ids(v)
