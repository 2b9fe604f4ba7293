"""
Clock
Injectable delay strategy so waits can be skipped in tests
"""

import asyncio
from typing import List


class AsyncioClock:
    """Real clock backed by the running event loop"""

    async def sleep(self, seconds: float):
        """Yield to the event loop for ``seconds``"""
        await asyncio.sleep(seconds)


class ZeroDelayClock:
    """
    Clock that never waits

    Records every requested delay and advances a virtual time instead,
    so callers can assert on how long they would have waited.
    """

    def __init__(self):
        self.sleeps: List[float] = []
        self._now = 0.0

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self._now += seconds

    def time(self) -> float:
        return self._now

    @property
    def total_slept(self) -> float:
        return sum(self.sleeps)
