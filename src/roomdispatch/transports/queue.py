"""Process-wide FIFO for focus-stealing sends.

Every keystroke operation, whatever room it targets, runs only after the
previous one has finished.  ``asyncio.Lock`` wakes waiters in arrival order,
which gives strict submission order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class SerializationQueue:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._pending = 0
        self._completed = 0

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` once every earlier submission has finished."""
        self._pending += 1
        try:
            async with self._lock:
                return await operation()
        finally:
            self._pending -= 1
            self._completed += 1

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def busy(self) -> bool:
        return self._lock.locked()
