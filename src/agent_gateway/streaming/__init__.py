"""Event channel, cancellation and progress reporting shared by every agent."""

from agent_gateway.streaming.cancellation import CancellationToken
from agent_gateway.streaming.channel import EventChannel
from agent_gateway.streaming.events import Event, ProgressEvent
from agent_gateway.streaming.framing import JsonLinesDecoder, encode_event, iter_ndjson
from agent_gateway.streaming.progress import ProgressReporter

__all__ = [
    "CancellationToken",
    "EventChannel",
    "Event",
    "ProgressEvent",
    "JsonLinesDecoder",
    "encode_event",
    "iter_ndjson",
    "ProgressReporter",
]
