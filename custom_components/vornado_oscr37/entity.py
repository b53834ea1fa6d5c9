from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_NAME, DEFAULT_NAME, DOMAIN, MANUFACTURER, MODEL
from .coordinator import OSCR37Coordinator


class OSCR37BaseEntity(CoordinatorEntity[OSCR37Coordinator]):
    """Shared entity behavior for the fan platforms."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: OSCR37Coordinator, entry, *, object_id_suffix: str) -> None:
        super().__init__(coordinator)
        self.entry = entry
        self._attr_unique_id = f"{entry.entry_id}-{object_id_suffix}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, coordinator.accessory.control_id)},
            name=entry.data.get(CONF_NAME, DEFAULT_NAME),
            manufacturer=MANUFACTURER,
            model=MODEL,
            serial_number=coordinator.accessory.control_id,
        )

    @property
    def available(self) -> bool:
        return self.coordinator.fan_available
