"""Single-producer, multi-listener event channel with a completion contract."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Coroutine

from loguru import logger

from agent_gateway.errors import OperationCancelled
from agent_gateway.streaming.cancellation import CancellationToken
from agent_gateway.streaming.events import Event


class EventChannel:
    """Async stream of :class:`Event` objects produced by one agent run.

    Guarantees:

    * exactly one ``end`` event is delivered and nothing follows it;
    * once the cancellation token fires, ``end`` is delivered right away and
      every later ``emit`` from the producer is dropped;
    * each listener sees the full ordered history, whenever it subscribes.
    """

    def __init__(
        self,
        token: CancellationToken | None = None,
        name: str = "agent",
    ) -> None:
        self.token = token or CancellationToken()
        self.name = name
        self._history: list[Event] = []
        self._listeners: list[asyncio.Queue[Event]] = []
        self._closed = False
        self._task: asyncio.Task[None] | None = None
        self._watcher: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def history(self) -> list[Event]:
        return list(self._history)

    def emit(self, event: Event) -> bool:
        """Publish ``event`` to every listener.

        Returns ``False`` when the event was dropped because the channel is
        already closed or the run was cancelled.
        """
        if event.is_end:
            self.close()
            return True
        if self._closed:
            logger.debug("Channel {} closed; dropping {} event", self.name, event.type)
            return False
        if self.token.cancelled:
            logger.debug("Channel {} cancelled; dropping {} event", self.name, event.type)
            return False
        self._publish(event)
        return True

    def close(self) -> None:
        """Emit the terminal ``end`` event once."""
        if self._closed:
            return
        self._closed = True
        self._publish(Event(type="end"))
        watcher = self._watcher
        if watcher is not None and not watcher.done() and watcher is not asyncio.current_task():
            watcher.cancel()

    def start(self, producer: Coroutine[Any, Any, None]) -> "EventChannel":
        """Schedule ``producer`` on the running loop and return ``self``."""
        if self._task is not None:
            raise RuntimeError(f"Channel {self.name} already started")
        self._task = asyncio.create_task(self._run(producer), name=f"{self.name}-producer")
        if not self._closed:
            self._watcher = asyncio.create_task(self._watch_cancel(), name=f"{self.name}-cancel")
        return self

    async def listen(self) -> AsyncIterator[Event]:
        """Yield every event of the run, ending after ``end``."""
        queue: asyncio.Queue[Event] = asyncio.Queue()
        for event in self._history:
            queue.put_nowait(event)
        self._listeners.append(queue)
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_end:
                    return
        finally:
            self._listeners.remove(queue)

    def __aiter__(self) -> AsyncIterator[Event]:
        return self.listen()

    async def collect(self) -> list[Event]:
        """Drain the channel into a list."""
        return [event async for event in self.listen()]

    async def join(self) -> None:
        """Wait for the producer task to settle (it may outlive ``end``)."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    def _publish(self, event: Event) -> None:
        self._history.append(event)
        for queue in self._listeners:
            queue.put_nowait(event)

    async def _run(self, producer: Coroutine[Any, Any, None]) -> None:
        try:
            await producer
        except OperationCancelled:
            logger.info("Channel {} producer stopped after cancellation", self.name)
        except Exception:
            logger.exception("Channel {} producer crashed", self.name)
        finally:
            self.close()

    async def _watch_cancel(self) -> None:
        await self.token.wait()
        if not self._closed:
            logger.info("Channel {} cancelled; ending stream", self.name)
            self.close()
