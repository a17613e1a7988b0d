"""
Keyed memoization of async creations with at most one creation in flight per key.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)


class SingleFlight(Generic[K, V]):
    """
    Cache of values created on first use.

    Concurrent callers asking for the same missing key share one creation task
    and receive its outcome, value or exception alike. A failed creation leaves
    nothing behind, so the next caller starts a fresh one. Callers wait through
    ``asyncio.shield``: one caller's timeout or cancellation never cancels the
    shared creation.
    """

    def __init__(self, label: str):
        self.label = label
        self._values: dict[K, V] = {}
        self._inflight: dict[K, asyncio.Task] = {}

    def get(self, key: K) -> Optional[V]:
        return self._values.get(key)

    def keys(self) -> list[K]:
        return list(self._values)

    def items(self) -> list[tuple[K, V]]:
        return list(self._values.items())

    def pop(self, key: K) -> Optional[V]:
        """Forget a published value. An in-flight creation is left to finish."""
        return self._values.pop(key, None)

    def clear(self) -> list[V]:
        values = list(self._values.values())
        self._values.clear()
        return values

    async def acquire(
        self,
        key: K,
        create: Callable[[], Awaitable[V]],
        timeout: Optional[float] = None,
    ) -> V:
        """
        Return the value for ``key``, creating it with ``create`` if missing.

        Raises:
            asyncio.TimeoutError: this caller waited longer than ``timeout``.
            Exception: whatever the shared creation raised.
        """
        value = self._values.get(key)
        if value is not None:
            logger.debug(f"Reusing cached {self.label} for {key!r}")
            return value

        task = self._inflight.get(key)
        if task is None:
            logger.debug(f"No cached {self.label} for {key!r}, creating one")
            task = asyncio.ensure_future(self._create(key, create))
            self._inflight[key] = task
            task.add_done_callback(_mark_retrieved)
        else:
            logger.debug(f"Joining in-flight {self.label} creation for {key!r}")

        if timeout is None:
            return await asyncio.shield(task)
        return await asyncio.wait_for(asyncio.shield(task), timeout)

    async def _create(self, key: K, create: Callable[[], Awaitable[V]]) -> V:
        try:
            value = await create()
            self._values[key] = value
            return value
        finally:
            self._inflight.pop(key, None)


def _mark_retrieved(task: asyncio.Task) -> None:
    # Every waiter may have timed out; read the outcome so asyncio does not
    # report an unretrieved exception. Waiters still see it through shield().
    if not task.cancelled():
        task.exception()
