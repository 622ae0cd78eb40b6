"""Data access helpers."""

from agent_gateway.data.survey_source import (
    FileSurveySource,
    InMemorySurveySource,
    SurveyDataSource,
    build_items,
)

__all__ = ["SurveyDataSource", "FileSurveySource", "InMemorySurveySource", "build_items"]
