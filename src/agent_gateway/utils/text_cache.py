"""Bounded, expiring cache for text conversions owned by a single agent."""

from __future__ import annotations

import time
from collections import OrderedDict
from threading import RLock
from typing import Callable

from opencc import OpenCC


def simplified_to_traditional() -> Callable[[str], str]:
    """Return an OpenCC converter for Simplified → Traditional (Taiwan)."""
    converter = OpenCC("s2tw")
    return converter.convert


class TextConversionCache:
    """LRU cache with TTL in front of an expensive ``str -> str`` converter.

    Entries older than ``ttl_seconds`` are recomputed; when ``max_size`` is
    exceeded the least recently used entry is evicted.
    """

    def __init__(
        self,
        converter: Callable[[str], str],
        max_size: int = 512,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be > 0")
        self.converter = converter
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = RLock()
        self._entries: OrderedDict[str, tuple[float, str]] = OrderedDict()

    def convert(self, text: str) -> str:
        """Return the converted text, computing it at most once per TTL window."""
        now = self._clock()
        with self._lock:
            cached = self._entries.get(text)
            if cached is not None:
                stored_at, value = cached
                if now - stored_at < self.ttl_seconds:
                    self._entries.move_to_end(text)
                    return value
                del self._entries[text]

        value = self.converter(text)

        with self._lock:
            self._entries[text] = (now, value)
            self._entries.move_to_end(text)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
