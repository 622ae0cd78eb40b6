"""Progress state machine that turns engine milestones into progress events."""

from __future__ import annotations

from typing import Callable

from agent_gateway.errors import ProgressStateError
from agent_gateway.streaming.events import Event, ProgressEvent, ProgressStatus, progress


class ProgressReporter:
    """Emits ordered progress events for a run over ``total`` questions.

    Allowed sequence::

        started -> (processing -> [reassigning] -> completed)* -> finished

    ``current`` is the 1-indexed question counter and never decreases.
    """

    def __init__(self, emit: Callable[[Event], object], total: int) -> None:
        if total < 0:
            raise ValueError("total must be >= 0")
        self._emit = emit
        self.total = total
        self.current = 0
        self.state: ProgressStatus | None = None
        self._active_question: str | None = None
        self.history: list[ProgressEvent] = []

    def started(self, message: str = "Starting analysis") -> ProgressEvent:
        if self.state is not None:
            raise ProgressStateError("started must be the first transition")
        return self._push("started", message, question=None)

    def processing(self, question: str, message: str | None = None) -> ProgressEvent:
        if self.state not in {"started", "completed"}:
            raise ProgressStateError(f"processing not allowed after {self.state}")
        if self.current >= self.total:
            raise ProgressStateError("all questions already processed")
        self.current += 1
        self._active_question = question
        return self._push(
            "processing",
            message or f"Processing question {self.current} of {self.total}",
            question=question,
        )

    def reassigning(self, question: str, message: str | None = None) -> ProgressEvent:
        if self.state != "processing" or question != self._active_question:
            raise ProgressStateError("reassigning requires processing of the same question")
        return self._push(
            "reassigning",
            message or f"Reassigning uncategorized answers for question {self.current}",
            question=question,
        )

    def completed(self, question: str, message: str | None = None) -> ProgressEvent:
        if self.state not in {"processing", "reassigning"} or question != self._active_question:
            raise ProgressStateError("completed requires processing of the same question")
        self._active_question = None
        return self._push(
            "completed",
            message or f"Completed question {self.current} of {self.total}",
            question=question,
        )

    def finished(self, message: str = "All questions processed") -> ProgressEvent:
        if self.state not in {"started", "completed"}:
            raise ProgressStateError(f"finished not allowed after {self.state}")
        # skipped questions still count towards the total
        self.current = self.total
        return self._push("finished", message, question=None)

    def _push(
        self,
        status: ProgressStatus,
        message: str,
        question: str | None,
    ) -> ProgressEvent:
        payload = ProgressEvent(
            status=status,
            total=self.total,
            current=self.current,
            message=message,
            question=question,
        )
        self.state = status
        self.history.append(payload)
        self._emit(progress(payload))
        return payload
