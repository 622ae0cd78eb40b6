"""Typed events carried by the agent event channel."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

EventType = Literal["progress", "response", "sources", "error", "end"]
ProgressStatus = Literal["started", "processing", "reassigning", "completed", "finished"]

EVENT_TYPES: frozenset[str] = frozenset({"progress", "response", "sources", "error", "end"})


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    """Wire payload of a ``progress`` event."""

    status: ProgressStatus
    total: int
    current: int
    message: str
    question: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "total": self.total,
            "current": self.current,
            "message": self.message,
        }
        if self.question is not None:
            payload["question"] = self.question
        return payload


@dataclass(slots=True, frozen=True)
class Event:
    """Single tagged event emitted by an agent."""

    type: EventType
    data: Any = None

    def __post_init__(self) -> None:
        if self.type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {self.type}")

    @property
    def is_end(self) -> bool:
        return self.type == "end"

    def to_dict(self) -> dict[str, Any]:
        data = self.data.to_dict() if isinstance(self.data, ProgressEvent) else self.data
        return {"type": self.type, "data": data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Event":
        event_type = payload.get("type")
        data = payload.get("data")
        if event_type == "progress" and isinstance(data, dict):
            data = ProgressEvent(
                status=data["status"],
                total=int(data["total"]),
                current=int(data["current"]),
                message=str(data.get("message", "")),
                question=data.get("question"),
            )
        return cls(type=event_type, data=data)


def response(text: str) -> Event:
    return Event(type="response", data=text)


def error(message: str) -> Event:
    return Event(type="error", data=message)


def sources(items: list[dict[str, Any]]) -> Event:
    return Event(type="sources", data=items)


def progress(payload: ProgressEvent) -> Event:
    return Event(type="progress", data=payload)
