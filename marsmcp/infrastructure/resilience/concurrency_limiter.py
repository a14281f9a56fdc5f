"""Implementation of a concurrency limiter.

Bounds the number of simultaneous outbound requests. Waiters are admitted
strictly in arrival order: a released slot is handed directly to the oldest
waiter, so a newcomer can never overtake the queue.
"""

import asyncio
import logging
from collections import deque
from typing import AsyncIterator, Deque
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 4


class SlotHandle:
    """Represents one acquired slot. Must be released exactly once."""

    def __init__(self, limiter: "ConcurrencyLimiter"):
        self._limiter = limiter
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            raise RuntimeError("Concurrency slot released more than once.")
        self._released = True
        self._limiter._release()


class ConcurrencyLimiter:
    """FIFO counting admission gate."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Initializes the limiter.

        Args:
            capacity: Maximum number of slots held at the same time.

        Raises:
            ValueError: If capacity is not a positive integer.
        """
        if capacity <= 0:
            raise ValueError("Concurrency limit must be greater than zero.")
        self._capacity = capacity
        self._in_use = 0
        self._waiters: Deque[asyncio.Future] = deque()
        logger.info(f"ConcurrencyLimiter initialized: capacity={capacity}")

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    def would_block(self) -> bool:
        """True if an acquire issued now would have to queue."""
        return self._in_use >= self._capacity or self.waiting > 0

    async def acquire(self) -> SlotHandle:
        """Waits for a free slot and returns its handle.

        There is no timeout; the caller waits until a slot is handed over.
        Check and update happen without an intervening await, so no two
        callers can pass the capacity check for the same slot.
        """
        if not self.would_block():
            self._in_use += 1
            return SlotHandle(self)

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug(f"Concurrency limit reached. Queued (position {len(self._waiters)}).")
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation: pass it on
                self._release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise
        # in_use was not decremented by the releasing side, the slot is ours
        return SlotHandle(self)

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        if self._in_use <= 0:
            raise RuntimeError("Release called with no slot in use.")
        self._in_use -= 1

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[SlotHandle]:
        """Async context manager holding one slot for the duration of the block."""
        handle = await self.acquire()
        try:
            yield handle
        finally:
            handle.release()
