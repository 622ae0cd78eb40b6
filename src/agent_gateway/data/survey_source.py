"""Survey answer sources and conversion of raw answers into clustering items."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd
from loguru import logger

from agent_gateway.clustering.models import Item
from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import SurveyNotFoundError

SURVEY_FILE_STEM = "survey_{survey_id}"
RATING_TYPES = frozenset({"rating", "ratings", "scale"})

FreeTextAnswers = dict[str, list[dict[str, Any]]]


class SurveyDataSource(ABC):
    """Fetches the free-text answers of a survey grouped by question."""

    @abstractmethod
    def fetch_free_text(self, survey_id: str) -> FreeTextAnswers:
        """Return ``{question: [{"id": ..., "value": ...}, ...]}`` in survey order.

        Raises:
            SurveyNotFoundError: The survey does not exist.
        """


class InMemorySurveySource(SurveyDataSource):
    """Source backed by a plain mapping; used for embedding and tests."""

    def __init__(self, surveys: Mapping[str, FreeTextAnswers]) -> None:
        self._surveys = {str(key): value for key, value in surveys.items()}

    def fetch_free_text(self, survey_id: str) -> FreeTextAnswers:
        if survey_id not in self._surveys:
            raise SurveyNotFoundError(survey_id)
        return {question: list(answers) for question, answers in self._surveys[survey_id].items()}


class FileSurveySource(SurveyDataSource):
    """Reads ``survey_<id>.parquet`` or ``survey_<id>.csv`` exports with pandas.

    Expected columns: ``question`` and ``answer``; optional ``response_id``
    (used as item id) and ``type`` (rating rows are ignored).
    """

    def __init__(
        self,
        surveys_dir: Path | str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.surveys_dir = Path(surveys_dir or self.settings.surveys_dir).expanduser()

    def fetch_free_text(self, survey_id: str) -> FreeTextAnswers:
        dataframe = self._read(survey_id)
        missing = {"question", "answer"} - set(dataframe.columns)
        if missing:
            raise ValueError(f"Survey {survey_id} export lacks columns: {sorted(missing)}")

        if "type" in dataframe.columns:
            kinds = dataframe["type"].fillna("").astype(str).str.strip().str.lower()
            dataframe = dataframe[~kinds.isin(RATING_TYPES)]

        dataframe = dataframe.copy()
        dataframe["answer"] = dataframe["answer"].fillna("").astype(str).str.strip()
        dataframe = dataframe[dataframe["answer"] != ""]

        result: FreeTextAnswers = {}
        has_ids = "response_id" in dataframe.columns
        for question, group in dataframe.groupby("question", sort=False):
            answers = []
            for row in group.itertuples(index=False):
                entry: dict[str, Any] = {"value": row.answer}
                if has_ids and not pd.isna(row.response_id):
                    entry["id"] = str(row.response_id)
                answers.append(entry)
            result[str(question)] = answers

        logger.info(
            "Loaded survey {}: {} free-text questions, {} answers",
            survey_id,
            len(result),
            sum(len(answers) for answers in result.values()),
        )
        return result

    def _read(self, survey_id: str) -> pd.DataFrame:
        stem = SURVEY_FILE_STEM.format(survey_id=survey_id)
        parquet_path = self.surveys_dir / f"{stem}.parquet"
        csv_path = self.surveys_dir / f"{stem}.csv"
        if parquet_path.exists():
            return pd.read_parquet(parquet_path)
        if csv_path.exists():
            return pd.read_csv(csv_path, dtype=str)
        logger.warning("No export for survey {} under {}", survey_id, self.surveys_dir)
        raise SurveyNotFoundError(survey_id)


def build_items(answers: Iterable[Mapping[str, Any] | str]) -> list[Item]:
    """Turn raw answers into items with unique ids.

    Answers are trimmed and empty ones dropped. Missing ids are derived from
    the row position (``a1``, ``a2``, ...); repeated ids get ``-2``, ``-3``
    suffixes in order of appearance.
    """
    items: list[Item] = []
    seen: dict[str, int] = {}
    used: set[str] = set()

    for position, answer in enumerate(answers, start=1):
        if isinstance(answer, Mapping):
            raw_text = answer.get("value", answer.get("answer"))
            raw_id = answer.get("id")
        else:
            raw_text, raw_id = answer, None

        text = str(raw_text or "").strip()
        if not text:
            continue

        base_id = str(raw_id).strip() if raw_id is not None and str(raw_id).strip() else f"a{position}"
        item_id = base_id
        if item_id in used:
            count = seen.get(base_id, 1)
            while item_id in used:
                count += 1
                item_id = f"{base_id}-{count}"
            seen[base_id] = count
        used.add(item_id)
        items.append(Item(id=item_id, text=text))

    return items
