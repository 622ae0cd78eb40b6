"""Survey agent: clusters the free-text answers of a LimeSurvey survey."""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from agent_gateway.agents.base import Agent
from agent_gateway.clustering.analyzer import QuestionAnalyzer
from agent_gateway.clustering.models import Item
from agent_gateway.config import Settings
from agent_gateway.data.survey_source import FileSurveySource, SurveyDataSource, build_items
from agent_gateway.errors import OracleError, SurveyNotFoundError
from agent_gateway.llm.oracle import Oracle
from agent_gateway.rendering.markdown import render_failed_section, render_markdown
from agent_gateway.streaming.channel import EventChannel
from agent_gateway.streaming.events import error, response
from agent_gateway.streaming.progress import ProgressReporter

INVALID_ID_MESSAGE = "Please provide limeSurvery ID"
NOT_FOUND_MESSAGE = "No such LimeSurvey ID exists"
NO_FREE_TEXT_MESSAGE = "No free text questions found in the survey."


def is_survey_id(value: str) -> bool:
    """True when ``value`` is the canonical decimal form of an integer."""
    try:
        return str(int(value)) == value
    except ValueError:
        return False


class SurveyAgent(Agent):
    """Runs cluster -> reassign -> render for every free-text question."""

    name = "agentSurvey"
    description = "Clusters free-text survey answers into labelled themes"

    def __init__(
        self,
        source: SurveyDataSource | None = None,
        oracle: Oracle | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(oracle=oracle, settings=settings)
        self.source = source or FileSurveySource(settings=self.settings)

    async def execute(
        self,
        message: str,
        channel: EventChannel,
        options: dict[str, Any],
    ) -> None:
        token = channel.token
        survey_id = message.strip()
        if not is_survey_id(survey_id):
            channel.emit(response(INVALID_ID_MESSAGE))
            return

        try:
            answers = await asyncio.to_thread(self.source.fetch_free_text, survey_id)
        except SurveyNotFoundError:
            logger.info("Survey {} not found", survey_id)
            channel.emit(response(NOT_FOUND_MESSAGE))
            return
        token.raise_if_cancelled()

        questions: list[tuple[str, list[Item]]] = []
        for question, raw_answers in answers.items():
            items = build_items(raw_answers)
            if items:
                questions.append((question, items))
        if not questions:
            channel.emit(response(NO_FREE_TEXT_MESSAGE))
            return

        analyzer = QuestionAnalyzer(oracle=self.oracle, settings=self.settings)
        reporter = ProgressReporter(channel.emit, total=len(questions))
        reporter.started(f"Analyzing {len(questions)} questions of survey {survey_id}")

        sections: dict[str, str] = {}
        for question, items in questions:
            token.raise_if_cancelled()
            reporter.processing(question)
            try:
                result = await analyzer.analyze(
                    question,
                    items,
                    token,
                    on_reassign=reporter.reassigning,
                )
                section = render_markdown(
                    question,
                    result.clusters,
                    {item.id: item for item in items},
                )
            except OracleError as exc:
                logger.error("Error processing question '{}': {}", question[:60], exc)
                section = render_failed_section(question, str(exc))
                channel.emit(error(f'Error processing question "{question}": {exc}'))
            reporter.completed(question)
            sections.setdefault(" ".join(question.split()), section)

        reporter.finished()
        channel.emit(response("\n".join(sections.values())))
