from __future__ import annotations
import logging
from datetime import datetime, timedelta
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util
from .accessory import OSCR37Accessory
from .const import CHAR_ACTIVE, DOMAIN
from .exceptions import OSCR37Error

_LOGGER = logging.getLogger(__name__)

# Availability flag in the coordinator data
DATA_AVAILABLE = "available"


class OSCR37Coordinator(DataUpdateCoordinator[dict[str, int]]):
    """Coordinator that holds the last known characteristic values.

    Each refresh runs one poll cycle on the accessory. Only values the poll
    reports are written; anything it does not know keeps its last value, so
    a failed or partial read never wipes state.

    The data handed to listeners is the characteristics plus
    ``DATA_AVAILABLE``; entities read :attr:`characteristics`.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        accessory: OSCR37Accessory,
        *,
        config_entry: ConfigEntry | None = None,
        poll_interval: int | None = None,
    ):
        super().__init__(
            hass,
            logger=_LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=poll_interval) if poll_interval else None,
            always_update=False,
        )
        self.accessory = accessory
        self._characteristics: dict[str, int] = {}
        self._last_success_at: datetime | None = None
        self._last_attempt_at: datetime | None = None
        self._consecutive_failures = 0
        self._last_error: str | None = None

    @property
    def characteristics(self) -> dict[str, int]:
        return self._characteristics

    @property
    def fan_available(self) -> bool:
        status = self.accessory.cache.last_status
        if status is not None and status.connected is False:
            return False
        return CHAR_ACTIVE in self._characteristics

    def _snapshot(self) -> dict[str, int]:
        return {**self._characteristics, DATA_AVAILABLE: int(self.fan_available)}

    @callback
    def _push_characteristics(self, values: dict[str, int]) -> None:
        self._characteristics = {**self._characteristics, **values}

    async def _async_update_data(self) -> dict[str, int]:
        self._last_attempt_at = dt_util.utcnow()
        try:
            await self.accessory.async_poll(self._push_characteristics)
        except OSCR37Error as e:
            self._consecutive_failures += 1
            self._last_error = str(e) or type(e).__name__
            _LOGGER.warning("Vornado OSCR37 poll failed: %s", self._last_error)
            return self._snapshot()
        self._consecutive_failures = 0
        self._last_error = None
        self._last_success_at = dt_util.utcnow()
        return self._snapshot()

    @callback
    def async_apply_local_state(self, **values: int | None) -> None:
        """Record values just written to the fan and notify listeners.

        The next poll reports the full cloud state again, unchanged or not.
        """
        self._push_characteristics({k: v for k, v in values.items() if v is not None})
        self.accessory.cache.reset_baseline()
        self.async_set_updated_data(self._snapshot())

    @callback
    def async_schedule_immediate_refresh(self) -> None:
        self.hass.async_create_task(self.async_refresh())

    def diagnostics_snapshot(self) -> dict:
        cache = self.accessory.cache
        return {
            "control_id": self.accessory.control_id,
            "query_id": self.accessory.query_id,
            "characteristics": dict(self._characteristics),
            "consecutive_failures": self._consecutive_failures,
            "last_error": self._last_error,
            "last_success_at": self._last_success_at.isoformat()
            if self._last_success_at
            else None,
            "last_attempt_at": self._last_attempt_at.isoformat()
            if self._last_attempt_at
            else None,
            "ready": self.accessory.client.gate.is_ready,
            "cache": {
                "fetch_count": cache.fetch_count,
                "failure_count": cache.failure_count,
                "last_error": cache.last_error,
                "last_status": cache.last_status.as_dict()
                if cache.last_status
                else None,
            },
        }

    async def async_shutdown(self) -> None:
        await super().async_shutdown()
        await self.accessory.cache.async_shutdown()
