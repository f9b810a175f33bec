"""
Latest-request-wins coordination for browser requests.

When filters change while a previous query is still running, the older
response must not overwrite the newer one. LatestRequestGate cancels the
superseded task and refuses to hand back any result that is not from the
most recently issued request.
"""

import asyncio
from typing import Any, Awaitable, Optional

from config.settings import config


class StaleRequestError(Exception):
    """A newer request was issued before this one finished."""


class LatestRequestGate:
    """Runs coroutines so that only the most recent one delivers a result."""

    def __init__(self):
        self._ticket = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def latest_ticket(self) -> int:
        return self._ticket

    def is_current(self, ticket: int) -> bool:
        return ticket == self._ticket

    async def run(self, coro: Awaitable[Any]) -> Any:
        """
        Await ``coro`` as the newest request.

        Raises:
            StaleRequestError: if another run() started before this one finished
        """
        self._ticket += 1
        ticket = self._ticket

        if self._task is not None and not self._task.done():
            self._task.cancel()

        task = asyncio.ensure_future(coro)
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if self.is_current(ticket):
                raise
            raise StaleRequestError(f"request {ticket} superseded by {self._ticket}")

        if not self.is_current(ticket):
            raise StaleRequestError(f"request {ticket} superseded by {self._ticket}")
        return result


class Debouncer:
    """
    Collapses bursts of calls (keystrokes) into one.

    ``await trigger(value)`` waits ``delay`` seconds (default: the configured
    search debounce) and returns ``value`` if no newer trigger arrived
    meanwhile, otherwise None.
    """

    def __init__(self, delay: Optional[float] = None):
        self.delay = config.smart_search.debounce_seconds if delay is None else delay
        self._generation = 0

    async def trigger(self, value: Any) -> Optional[Any]:
        self._generation += 1
        generation = self._generation
        await asyncio.sleep(self.delay)
        if generation != self._generation:
            return None
        return value
