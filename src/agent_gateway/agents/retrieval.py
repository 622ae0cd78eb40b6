"""Retrieval agent: keyword extraction, knowledge-base search and highlighting."""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

import requests
from loguru import logger

from agent_gateway.agents.base import Agent
from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import RetrievalError
from agent_gateway.llm.oracle import Oracle
from agent_gateway.llm.prompts import KEYWORD_NOT_FOUND, render_keyword_prompt
from agent_gateway.streaming.channel import EventChannel
from agent_gateway.streaming.events import response, sources
from agent_gateway.utils.text_cache import TextConversionCache, simplified_to_traditional

EXTRACTING_MESSAGE = "正在提取關鍵詞...\n\n"
NOT_FOUND_MESSAGE = "抱歉，未能在資料庫中找到與您問題相關的資料。"
CHUNK_SEPARATOR = "\n\n---\n\n"

SCORE_HEADER_RE = re.compile(r"檢索結果\s*\d+\s*\(相似度:\s*[\d.]+%\)")
SOURCE_LINE_RE = re.compile(r"文件來源:[^\n]*")
HIGHLIGHT_RE = re.compile(r"<em>(.*?)</em>")


@dataclass(slots=True)
class RetrievedChunk:
    """One knowledge-base passage returned by the retriever."""

    content: str
    highlight: str = ""
    document: str = ""
    similarity: float | None = None


@dataclass(slots=True)
class RetrievalResult:
    total: int = 0
    chunks: list[RetrievedChunk] = field(default_factory=list)


class Retriever(ABC):
    """Searches the knowledge base for a keyword."""

    @abstractmethod
    def retrieve(self, keyword: str) -> RetrievalResult:
        """Return matching chunks; raise :class:`RetrievalError` on backend failure."""


class RagflowRetriever(Retriever):
    """Retriever for the RAGFlow ``/api/v1/retrieval`` endpoint."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.api_url = settings.retriever_api_url
        self.api_key = settings.retriever_api_key
        self.dataset_ids = list(settings.retriever_dataset_ids)
        self.document_ids = list(settings.retriever_document_ids)
        self.similarity_threshold = settings.retriever_similarity_threshold
        self.vector_similarity_weight = settings.retriever_vector_similarity_weight
        self.timeout = settings.oracle_timeout_seconds

    def retrieve(self, keyword: str) -> RetrievalResult:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {
            "question": keyword,
            "dataset_ids": self.dataset_ids,
            "document_ids": self.document_ids,
            "similarity_threshold": self.similarity_threshold,
            "vector_similarity_weight": self.vector_similarity_weight,
        }

        try:
            reply = requests.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
            reply.raise_for_status()
            body = reply.json()
        except requests.exceptions.RequestException as e:
            logger.error("RAGFlow API error: {}", e)
            raise RetrievalError(f"RAGFlow API error: {e}") from e
        except ValueError as e:
            raise RetrievalError(f"RAGFlow API returned invalid JSON: {e}") from e

        return self._parse(body)

    @staticmethod
    def _parse(body: Any) -> RetrievalResult:
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            return RetrievalResult()

        chunks = []
        for raw in data.get("chunks") or []:
            if not isinstance(raw, dict):
                continue
            chunks.append(
                RetrievedChunk(
                    content=str(raw.get("content") or ""),
                    highlight=str(raw.get("highlight") or ""),
                    document=str(raw.get("document_keyword") or raw.get("document_name") or ""),
                    similarity=raw.get("similarity"),
                )
            )
        total = data.get("total")
        return RetrievalResult(total=int(total) if total is not None else len(chunks), chunks=chunks)


def clean_chunk(content: str) -> str:
    """Strip the score header and source lines the knowledge base embeds in passages."""
    content = SCORE_HEADER_RE.sub("", content)
    content = SOURCE_LINE_RE.sub("", content)
    return content.strip()


def extract_highlights(highlight: str) -> list[str]:
    return [match.strip() for match in HIGHLIGHT_RE.findall(highlight or "") if match.strip()]


def highlight_keywords(content: str, highlight: str, convert: Callable[[str], str]) -> str:
    """Mark every highlighted keyword (converted to traditional script) in ``content``."""
    if not content or not highlight:
        return content
    for keyword in extract_highlights(highlight):
        traditional = convert(keyword)
        content = content.replace(traditional, f'<span style="color:red;">{traditional}</span>')
    return content


class RetrievalAgent(Agent):
    """Answers a question with raw knowledge-base passages."""

    name = "agentSFC"
    description = "Searches the knowledge base and returns highlighted passages"

    def __init__(
        self,
        retriever: Retriever | None = None,
        oracle: Oracle | None = None,
        settings: Settings | None = None,
        converter: Callable[[str], str] | None = None,
    ) -> None:
        super().__init__(oracle=oracle, settings=settings)
        self.retriever = retriever or RagflowRetriever(settings=self.settings)
        # scoped to this agent instance; never shared across agents
        self.text_cache = TextConversionCache(
            converter or simplified_to_traditional(),
            max_size=self.settings.text_cache_size,
            ttl_seconds=self.settings.text_cache_ttl_seconds,
        )

    async def extract_keyword(self, query: str, channel: EventChannel) -> str:
        """Return the search keyword; quoted queries are used verbatim."""
        query = query.strip()
        if len(query) >= 2 and query.startswith('"') and query.endswith('"'):
            return query[1:-1].strip()
        return await self.oracle.generate_text(render_keyword_prompt(query), channel.token)

    async def execute(
        self,
        message: str,
        channel: EventChannel,
        options: dict[str, Any],
    ) -> None:
        channel.emit(response(EXTRACTING_MESSAGE))
        keyword = await self.extract_keyword(message, channel)
        if not keyword or keyword == KEYWORD_NOT_FOUND:
            channel.emit(response(NOT_FOUND_MESSAGE))
            return

        logger.info("[{}] searching for '{}'", self.name, keyword)
        result = await asyncio.to_thread(self.retriever.retrieve, keyword)
        channel.token.raise_if_cancelled()

        passages = []
        for chunk in result.chunks:
            content = highlight_keywords(clean_chunk(chunk.content), chunk.highlight, self.text_cache.convert)
            if content:
                passages.append((chunk, content))
        if not passages:
            channel.emit(response(NOT_FOUND_MESSAGE))
            return

        channel.emit(
            sources(
                [
                    {"content": content, "document": chunk.document, "similarity": chunk.similarity}
                    for chunk, content in passages
                ]
            )
        )
        body = CHUNK_SEPARATOR.join(content for _, content in passages)
        channel.emit(response(f"找到 {result.total} 個相關結果 ({keyword})\n\n{body}"))
