"""Coalescing cache in front of the slow, rate limited state query."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .const import THROTTLE_WINDOW
from .exceptions import UpstreamQueryFailure
from .models import FanStatus

_LOGGER = logging.getLogger(__name__)


def _mark_retrieved(future: asyncio.Future) -> None:
    # A refresh requested without a waiter must not log an unretrieved error
    if not future.cancelled():
        future.exception()


class StatusCache:
    """Share one upstream fetch between every caller of a throttle window.

    Idle -> Pending (fetch scheduled or in flight, waiters share one future)
    -> Resolved (future settled, slot cleared, back to Idle).
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[FanStatus]],
        throttle_window: float = THROTTLE_WINDOW,
    ) -> None:
        self._fetch = fetch
        self._throttle_window = throttle_window
        self._pending: asyncio.Future[FanStatus] | None = None
        self._task: asyncio.Task | None = None
        self._previous: FanStatus | None = None
        self.last_status: FanStatus | None = None
        self.fetch_count = 0
        self.failure_count = 0
        self.last_error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def request_refresh(self) -> asyncio.Future[FanStatus]:
        """Ask for a fresh read; joins the pending fetch if there is one."""
        if self._pending is None:
            loop = asyncio.get_running_loop()
            future: asyncio.Future[FanStatus] = loop.create_future()
            future.add_done_callback(_mark_retrieved)
            self._pending = future
            self._task = loop.create_task(self._run(future))
        return self._pending

    async def current(self) -> FanStatus:
        # shield: one cancelled waiter must not cancel the fetch for the others
        return await asyncio.shield(self.request_refresh())

    async def poll(self) -> FanStatus | None:
        """Fetch and diff; returns None when nothing relevant changed."""
        status = await self.current()
        previous, self._previous = self._previous, status
        if previous is None or status.differs_from(previous):
            return status
        return None

    def reset_baseline(self) -> None:
        """Make the next :meth:`poll` report its snapshot even if unchanged."""
        self._previous = None

    async def _run(self, future: asyncio.Future[FanStatus]) -> None:
        try:
            await asyncio.sleep(self._throttle_window)
            self.fetch_count += 1
            try:
                status = await self._fetch()
            except UpstreamQueryFailure as err:
                self.failure_count += 1
                self.last_error = str(err)
                _LOGGER.warning("Fan state query failed, reporting disconnected: %s", err)
                status = FanStatus.disconnected()
            self.last_status = status
            future.set_result(status)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as err:  # readiness timeout, parse errors: waiters see them
            self.failure_count += 1
            self.last_error = str(err)
            future.set_exception(err)
        finally:
            if self._pending is future:
                self._pending = None
                self._task = None

    async def async_shutdown(self) -> None:
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
