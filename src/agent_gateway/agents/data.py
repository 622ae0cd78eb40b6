"""Data agent: natural language -> SQL -> HTML table."""

from __future__ import annotations

import asyncio
import html
import sqlite3
from abc import ABC, abstractmethod
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from agent_gateway.agents.base import Agent
from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import QueryExecutionError
from agent_gateway.llm.oracle import Oracle
from agent_gateway.llm.parsing import strip_code_fences
from agent_gateway.llm.prompts import render_sql_prompt
from agent_gateway.streaming.channel import EventChannel

NO_SQL_MESSAGE = "No SQL statement could be generated for your query."
NO_DATA_HTML = "<div style='color:#d32f2f'>No data to display</div>"
TABLE_INTRO_HTML = "<div style='margin-bottom:16px;font-weight:500;'>根據系統搜索，以下是返回的信息:</div>"
TABLE_STYLE_HTML = (
    "<style>"
    "table{width:100%;border-collapse:collapse;margin:20px 0;font-size:14px;"
    "box-shadow:0 1px 3px rgba(0,0,0,0.1);border-radius:8px;overflow:hidden;border:1px solid #e0e0e0;}"
    "th{background-color:#2962ff;color:#fff;font-weight:600;padding:12px 15px;text-align:left;}"
    "td{padding:12px 15px;border-bottom:1px solid #e0e0e0;color:#333;}"
    "tbody tr:nth-child(even){background-color:#f8f9ff;}"
    "</style>"
)

# epoch millis between 1970 and 3000
MAX_EPOCH_MILLIS = 32503680000000


class QueryExecutor(ABC):
    """Runs one read-only SQL statement."""

    @abstractmethod
    def execute(self, sql: str) -> pd.DataFrame:
        """Return the result set; raise :class:`QueryExecutionError` on failure."""


class SqliteQueryExecutor(QueryExecutor):
    """Executes queries against a SQLite file opened read-only."""

    def __init__(self, db_path: Path | str | None = None, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.db_path = Path(db_path or settings.data_db_path)

    def execute(self, sql: str) -> pd.DataFrame:
        uri = f"file:{self.db_path.as_posix()}?mode=ro"
        try:
            with closing(sqlite3.connect(uri, uri=True)) as connection:
                return pd.read_sql_query(sql, connection)
        except (sqlite3.Error, pd.errors.DatabaseError) as exc:
            raise QueryExecutionError(f"SQL execution error: {exc}") from exc


def extract_sql(reply: str) -> str | None:
    """Return the SQL statement in ``reply`` or None when the model declined."""
    sql = strip_code_fences(reply)
    if not sql or "no sql" in sql.lower():
        return None
    return sql


def format_header(name: str) -> str:
    """snake_case / kebab-case -> Title Case."""
    words = str(name).replace("-", " ").replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def format_cell(column: str, value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and "date" in column.lower()
        and 0 <= value <= MAX_EPOCH_MILLIS
    ):
        moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return html.escape(moment.strftime("%Y-%m-%d %H:%M:%S UTC"))
    return html.escape(str(value))


def render_html_table(frame: pd.DataFrame) -> str:
    """Render a result set as a styled, escaped HTML table."""
    if frame.empty:
        return NO_DATA_HTML

    headers = [str(column) for column in frame.columns]
    parts = [TABLE_INTRO_HTML, TABLE_STYLE_HTML, "<table>", "<thead><tr>"]
    parts.extend(f"<th>{html.escape(format_header(header))}</th>" for header in headers)
    parts.append("</tr></thead><tbody>")
    for row in frame.astype(object).itertuples(index=False, name=None):
        parts.append("<tr>")
        parts.extend(f"<td>{format_cell(header, value)}</td>" for header, value in zip(headers, row))
        parts.append("</tr>")
    parts.append("</tbody></table>")
    return "".join(parts)


class DataAgent(Agent):
    """Answers data questions by generating and running SQL."""

    name = "agentData"
    description = "Turns a question into SQL and returns the result as a table"

    def __init__(
        self,
        executor: QueryExecutor | None = None,
        oracle: Oracle | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(oracle=oracle, settings=settings)
        self.executor = executor or SqliteQueryExecutor(settings=self.settings)

    async def execute(
        self,
        message: str,
        channel: EventChannel,
        options: dict[str, Any],
    ) -> None:
        prompt = render_sql_prompt(message, self.settings.data_schema)
        sql = extract_sql(await self.oracle.generate_text(prompt, channel.token))
        if sql is None:
            self.stream_text(channel, NO_SQL_MESSAGE)
            return

        logger.info("[{}] executing generated SQL: {}", self.name, sql[:200])
        try:
            frame = await asyncio.to_thread(self.executor.execute, sql)
        except QueryExecutionError as exc:
            logger.warning("[{}] {}", self.name, exc)
            self.stream_text(channel, NO_SQL_MESSAGE)
            return
        channel.token.raise_if_cancelled()

        self.stream_text(channel, render_html_table(frame))
