"""Newline-delimited JSON framing for events crossing a process boundary."""

from __future__ import annotations

import codecs
import json
from typing import Any, AsyncIterator

from loguru import logger

from agent_gateway.streaming.events import Event


def encode_event(event: Event) -> bytes:
    """Serialize one event as a single NDJSON line."""
    return (event.to_json() + "\n").encode("utf-8")


async def iter_ndjson(events: AsyncIterator[Event]) -> AsyncIterator[bytes]:
    """Adapt an event stream into NDJSON byte chunks."""
    async for event in events:
        yield encode_event(event)


class JsonLinesDecoder:
    """Incremental NDJSON decoder.

    Chunks may split a line (or a multi-byte character) anywhere; complete
    lines are parsed as soon as they are available and the remainder is kept
    for the next :meth:`feed`. A line that is not valid JSON is logged and
    skipped; the lines around it are still returned.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self.skipped = 0

    @property
    def buffered(self) -> str:
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[dict[str, Any]]:
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return self._parse(lines)

    def flush(self) -> list[dict[str, Any]]:
        """Parse whatever is left once the stream has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        return self._parse([remainder])

    def _parse(self, lines: list[str]) -> list[dict[str, Any]]:
        payloads: list[dict[str, Any]] = []
        for line in lines:
            if not line.strip():
                continue
            try:
                payloads.append(json.loads(line))
            except json.JSONDecodeError as err:
                self.skipped += 1
                logger.warning("Skipping malformed NDJSON line ({}): {}", err, line[:200])
        return payloads


def decode_events(payloads: list[dict[str, Any]]) -> list[Event]:
    return [Event.from_dict(payload) for payload in payloads]
