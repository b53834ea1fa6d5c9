from __future__ import annotations
import asyncio
import logging
from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.config_entries import ConfigEntry
from .const import (
    ACTIVE,
    CHAR_ACTIVE,
    CHAR_ROTATION_SPEED,
    CHAR_SWING_MODE,
    DOMAIN,
    FAN_INTENSITIES,
    INACTIVE,
    SWING_DISABLED,
    SWING_ENABLED,
)
from .accessory import intensity_to_percentage, percentage_to_intensity
from .entity import OSCR37BaseEntity
from .exceptions import ServiceCommunicationFailure

_LOGGER = logging.getLogger(__name__)

_TURN_ON_FEATURE = getattr(FanEntityFeature, "TURN_ON", 0)
_TURN_OFF_FEATURE = getattr(FanEntityFeature, "TURN_OFF", 0)


class OSCR37Fan(OSCR37BaseEntity, FanEntity):
    _attr_name = None
    _attr_speed_count = len(FAN_INTENSITIES)
    _attr_supported_features = (
        FanEntityFeature.SET_SPEED
        | FanEntityFeature.OSCILLATE
        | _TURN_ON_FEATURE
        | _TURN_OFF_FEATURE
    )

    def __init__(self, coordinator, entry):
        super().__init__(coordinator, entry, object_id_suffix="fan")

    @property
    def accessory(self):
        return self.coordinator.accessory

    @property
    def is_on(self):
        active = self.coordinator.characteristics.get(CHAR_ACTIVE)
        return None if active is None else active == ACTIVE

    @property
    def percentage(self):
        if self.is_on is False:
            return 0
        return self.coordinator.characteristics.get(CHAR_ROTATION_SPEED)

    @property
    def oscillating(self):
        swing = self.coordinator.characteristics.get(CHAR_SWING_MODE)
        return None if swing is None else swing == SWING_ENABLED

    async def async_set_percentage(self, percentage: int) -> None:
        await self.accessory.async_set_rotation_speed(percentage)
        if percentage == 0:
            self.coordinator.async_apply_local_state(active=INACTIVE)
        else:
            self.coordinator.async_apply_local_state(
                rotation_speed=self._quantized(percentage)
            )
        self.coordinator.async_schedule_immediate_refresh()

    async def async_turn_on(
        self, percentage: int | None = None, preset_mode: str | None = None, **kwargs
    ) -> None:
        await self.accessory.async_set_active(ACTIVE)
        self.coordinator.async_apply_local_state(active=ACTIVE)
        if percentage:
            await self.async_set_percentage(percentage)
        else:
            self.coordinator.async_schedule_immediate_refresh()

    async def async_turn_off(self, **kwargs) -> None:
        await self.accessory.async_set_active(INACTIVE)
        self.coordinator.async_apply_local_state(active=INACTIVE)
        self.coordinator.async_schedule_immediate_refresh()

    async def async_oscillate(self, oscillating: bool) -> None:
        value = SWING_ENABLED if oscillating else SWING_DISABLED
        await self.accessory.async_set_swing_mode(value)
        self.coordinator.async_apply_local_state(swing_mode=value)
        self.coordinator.async_schedule_immediate_refresh()

    async def async_update(self) -> None:
        # The three reads share one cloud query through the status cache
        results = await asyncio.gather(
            self.accessory.async_get_active(),
            self.accessory.async_get_rotation_speed(),
            self.accessory.async_get_swing_mode(),
            return_exceptions=True,
        )
        values = {}
        for key, result in zip((CHAR_ACTIVE, CHAR_ROTATION_SPEED, CHAR_SWING_MODE), results):
            if isinstance(result, ServiceCommunicationFailure):
                _LOGGER.debug("Vornado OSCR37 %s read failed: %s", key, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                values[key] = result
        if values:
            self.coordinator.async_apply_local_state(**values)

    @staticmethod
    def _quantized(percentage: int) -> int:
        return intensity_to_percentage(percentage_to_intensity(percentage))


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    coord = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([OSCR37Fan(coord, entry)])
