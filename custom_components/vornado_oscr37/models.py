from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .const import FAN_INTENSITIES, INSTANCE_INTENSITY, INSTANCE_OSCILLATION

# {"action": ..., "instance"?: ..., "mode"?: ...}
WireAction = dict[str, str]


@dataclass(frozen=True)
class FanStatus:
    """Snapshot of the fan as last reported by the cloud.

    A field left at ``None`` is unknown, not false.
    """

    connected: bool | None = None
    is_on: bool | None = None
    fan_intensity: str | None = None
    is_oscillating: bool | None = None
    shutdown_timer: str | None = None

    @classmethod
    def disconnected(cls) -> "FanStatus":
        return cls(connected=False)

    def differs_from(self, other: "FanStatus") -> bool:
        """Return True when power, intensity or oscillation changed."""
        return (
            self.is_on != other.is_on
            or self.fan_intensity != other.fan_intensity
            or self.is_oscillating != other.is_oscillating
        )

    def as_dict(self) -> dict:
        return {
            "connected": self.connected,
            "is_on": self.is_on,
            "fan_intensity": self.fan_intensity,
            "is_oscillating": self.is_oscillating,
            "shutdown_timer": self.shutdown_timer,
        }


@dataclass(frozen=True)
class PowerToggleCommand:
    """Turns the fan on or off."""

    is_on: bool

    def to_wire(self) -> WireAction:
        return {"action": "turnOn" if self.is_on else "turnOff"}


@dataclass(frozen=True)
class IntensityChangeCommand:
    """Sets the fan intensity to one of the four hardware levels."""

    intensity: str

    def __post_init__(self):
        if self.intensity not in FAN_INTENSITIES:
            raise ValueError(f"Unsupported fan intensity: {self.intensity!r}")

    def to_wire(self) -> WireAction:
        return {
            "action": "setModeValue",
            "instance": INSTANCE_INTENSITY,
            "mode": self.intensity,
        }


@dataclass(frozen=True)
class OscillationToggleCommand:
    """Toggles whether the fan oscillates."""

    is_oscillating: bool

    def to_wire(self) -> WireAction:
        return {
            "action": "turnOnToggle" if self.is_oscillating else "turnOffToggle",
            "instance": INSTANCE_OSCILLATION,
        }


FanCommand = Union[PowerToggleCommand, IntensityChangeCommand, OscillationToggleCommand]
