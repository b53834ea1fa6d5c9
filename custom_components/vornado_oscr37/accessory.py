"""Characteristic get/set handlers for the fan.

Power, rotation speed and swing mode reads all go through the shared
:class:`StatusCache`, so a burst of reads costs one cloud query. Writes are
sent one by one and never merged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .cache import StatusCache
from .client import OSCR37Client
from .const import (
    ACTIVE,
    CHAR_ACTIVE,
    CHAR_ROTATION_SPEED,
    CHAR_SWING_MODE,
    FAN_INTENSITIES,
    INACTIVE,
    INTENSITY_PERCENTAGES,
    PERCENTAGE_STEP,
    SWING_DISABLED,
    SWING_ENABLED,
)
from .exceptions import OSCR37Error, ServiceCommunicationFailure
from .models import (
    FanCommand,
    FanStatus,
    IntensityChangeCommand,
    OscillationToggleCommand,
    PowerToggleCommand,
)

_LOGGER = logging.getLogger(__name__)

CharacteristicSink = Callable[[dict[str, int]], None]


def intensity_to_percentage(intensity: str) -> int:
    return INTENSITY_PERCENTAGES[intensity]


def percentage_to_intensity(percentage: int) -> str | None:
    """Quantize a rotation speed to an intensity level; 0 means off (None).

    Speeds outside 0..100 clamp to the nearest level.
    """
    percentage = int(percentage)
    if percentage == 0:
        return None
    level = max(0, min(len(FAN_INTENSITIES) - 1, (percentage - 1) // PERCENTAGE_STEP))
    return FAN_INTENSITIES[level]


def status_to_characteristics(status: FanStatus) -> dict[str, int]:
    """Characteristic values for every field the snapshot actually knows."""
    values: dict[str, int] = {}
    if status.is_on is not None:
        values[CHAR_ACTIVE] = ACTIVE if status.is_on else INACTIVE
    if status.fan_intensity is not None:
        values[CHAR_ROTATION_SPEED] = intensity_to_percentage(status.fan_intensity)
    if status.is_oscillating is not None:
        values[CHAR_SWING_MODE] = SWING_ENABLED if status.is_oscillating else SWING_DISABLED
    return values


class OSCR37Accessory:
    def __init__(
        self,
        client: OSCR37Client,
        control_id: str,
        query_id: str,
        cache: StatusCache | None = None,
    ) -> None:
        self.client = client
        self.control_id = control_id
        self.query_id = query_id
        self.cache = cache or StatusCache(self._fetch_status)

    async def _fetch_status(self) -> FanStatus:
        return await self.client.get_device_status(self.query_id)

    async def _current(self) -> FanStatus:
        try:
            return await self.cache.current()
        except OSCR37Error as err:
            raise ServiceCommunicationFailure(f"Could not read fan state: {err}") from err

    async def _send(self, command: FanCommand) -> None:
        try:
            await self.client.send_device_action(self.control_id, command)
        except OSCR37Error as err:
            raise ServiceCommunicationFailure(
                f"Could not send {type(command).__name__}: {err}"
            ) from err

    async def async_get_active(self) -> int:
        status = await self._current()
        _LOGGER.debug("Get characteristic active -> %s", status.is_on)
        if status.is_on is None:
            raise ServiceCommunicationFailure("Fan power state unknown")
        return ACTIVE if status.is_on else INACTIVE

    async def async_set_active(self, value: int) -> None:
        is_on = value == ACTIVE
        await self._send(PowerToggleCommand(is_on))
        _LOGGER.debug("Set characteristic active -> %s", is_on)

    async def async_get_rotation_speed(self) -> int:
        status = await self._current()
        _LOGGER.debug("Get characteristic rotation speed -> %s", status.fan_intensity)
        if status.fan_intensity is None:
            raise ServiceCommunicationFailure("Fan intensity unknown")
        return intensity_to_percentage(status.fan_intensity)

    async def async_set_rotation_speed(self, percentage: int) -> None:
        intensity = percentage_to_intensity(percentage)
        if intensity is None:
            await self.async_set_active(INACTIVE)
            return
        await self._send(IntensityChangeCommand(intensity))
        _LOGGER.debug("Set characteristic rotation speed -> %s", intensity)

    async def async_get_swing_mode(self) -> int:
        status = await self._current()
        _LOGGER.debug("Get characteristic swing mode -> %s", status.is_oscillating)
        if status.is_oscillating is None:
            raise ServiceCommunicationFailure("Fan oscillation state unknown")
        return SWING_ENABLED if status.is_oscillating else SWING_DISABLED

    async def async_set_swing_mode(self, value: int) -> None:
        is_oscillating = value == SWING_ENABLED
        await self._send(OscillationToggleCommand(is_oscillating))
        _LOGGER.debug("Set characteristic swing mode -> %s", is_oscillating)

    async def async_poll(self, sink: CharacteristicSink) -> dict[str, int]:
        """Run one poll cycle and push the known, changed values to ``sink``.

        Returns the pushed values (empty when nothing changed). Errors other
        than transport failures propagate as :class:`OSCR37Error`.
        """
        status = await self.cache.poll()
        if status is None:
            return {}
        values = status_to_characteristics(status)
        if values:
            sink(values)
        return values
