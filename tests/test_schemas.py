"""Tests for LLM response schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from agent_gateway.clustering.schemas import ClusteringResponse, ReassignmentResponse


def test_clustering_response_coerces_ids_and_labels() -> None:
    payload = ClusteringResponse.model_validate(
        {
            "clusters": [
                {"label": "  Speakers\nwere  great ", "item_ids": [1, " 2 ", None, ""]},
                {"label": None, "item_ids": "3"},
            ]
        }
    )

    assert payload.clusters[0].label == "Speakers were great"
    assert payload.clusters[0].item_ids == ["1", "2"]
    assert payload.clusters[1].label == ""
    assert payload.clusters[1].item_ids == ["3"]


def test_clustering_response_requires_clusters() -> None:
    with pytest.raises(ValidationError):
        ClusteringResponse.model_validate({"question": "q"})


def test_reassignment_response_accepts_list_form_and_merges_labels() -> None:
    payload = ReassignmentResponse.model_validate(
        {
            "assignments": [
                {"label": "Timing", "item_ids": ["1"]},
                {"label": " Timing ", "item_ids": ["2"]},
                "garbage",
            ],
            "uncategorized": "3",
        }
    )

    assert payload.assignments == {"Timing": ["1", "2"]}
    assert payload.uncategorized == ["3"]


def test_reassignment_response_defaults_when_fields_missing() -> None:
    payload = ReassignmentResponse.model_validate({})

    assert payload.assignments == {}
    assert payload.uncategorized == []
