"""Tests for NDJSON framing of events."""

from __future__ import annotations

import asyncio

from agent_gateway.streaming.events import Event, ProgressEvent, error, progress, response
from agent_gateway.streaming.framing import JsonLinesDecoder, decode_events, encode_event, iter_ndjson

EVENTS = [
    progress(ProgressEvent(status="processing", total=2, current=1, message="m", question="講者如何？")),
    response("## 問題\n\n- **好** (1)"),
    error("boom"),
    Event(type="end"),
]


def _wire() -> bytes:
    return b"".join(encode_event(event) for event in EVENTS)


def test_decoder_handles_every_split_point() -> None:
    wire = _wire()
    for cut in range(len(wire) + 1):
        decoder = JsonLinesDecoder()
        payloads = decoder.feed(wire[:cut]) + decoder.feed(wire[cut:]) + decoder.flush()

        assert decode_events(payloads) == EVENTS


def test_decoder_handles_byte_at_a_time_delivery() -> None:
    decoder = JsonLinesDecoder()
    payloads = []
    for byte in _wire():
        payloads.extend(decoder.feed(bytes([byte])))

    assert decode_events(payloads) == EVENTS
    assert decoder.buffered == ""


def test_decoder_keeps_incomplete_tail_until_flush() -> None:
    decoder = JsonLinesDecoder()

    assert decoder.feed('{"type": "end", "da') == []
    assert decoder.feed('ta": null}') == []
    assert decoder.flush() == [{"type": "end", "data": None}]


def test_iter_ndjson_emits_one_line_per_event() -> None:
    async def _events():
        for event in EVENTS:
            yield event

    async def _run() -> list[bytes]:
        return [chunk async for chunk in iter_ndjson(_events())]

    chunks = asyncio.run(_run())

    assert len(chunks) == len(EVENTS)
    assert all(chunk.endswith(b"\n") and chunk.count(b"\n") == 1 for chunk in chunks)
    assert "講者".encode("utf-8") in chunks[0]


def test_decoder_skips_malformed_line_without_losing_neighbours() -> None:
    decoder = JsonLinesDecoder()
    wire = '{"type": "response", "data": "a"}\n{not json\n{"type": "end", "data": null}\n'

    payloads = decoder.feed(wire)

    assert payloads == [{"type": "response", "data": "a"}, {"type": "end", "data": None}]
    assert decoder.skipped == 1
    assert decoder.buffered == ""
