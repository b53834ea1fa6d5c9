from __future__ import annotations

import asyncio
import logging

from .exceptions import InitializationTimeout

_LOGGER = logging.getLogger(__name__)


class ReadinessGate:
    """Signal that the cloud session finished its handshake.

    The handshake may report ``False`` any number of times while it retries;
    only the first ``True`` releases waiters, and the gate stays open after.
    """

    def __init__(self) -> None:
        self._ready = asyncio.Event()
        self.not_ready_reports = 0

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def report(self, ready: bool) -> None:
        if self._ready.is_set():
            return
        if ready:
            _LOGGER.debug("Cloud session ready after %s not-ready reports", self.not_ready_reports)
            self._ready.set()
        else:
            self.not_ready_reports += 1

    async def wait_ready(self, timeout: float) -> None:
        """Wait for the handshake, raising InitializationTimeout on expiry."""
        if self._ready.is_set():
            return
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        except asyncio.TimeoutError as err:
            raise InitializationTimeout(
                f"Cloud session not ready after {timeout} seconds"
            ) from err
