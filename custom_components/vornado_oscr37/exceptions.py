from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class OSCR37Error(Exception):
    """Base class for errors raised while talking to the fan."""


class InitializationTimeout(OSCR37Error):
    """The cloud session did not become ready within the configured timeout."""


class UpstreamQueryFailure(OSCR37Error):
    """Transport-level failure while querying device state."""


class NoDeviceState(OSCR37Error):
    """The state query answered without any device entries."""


class UnsupportedIntensity(OSCR37Error):
    """The device reported an intensity outside the known levels."""


class UnsupportedShutdownTimerValue(OSCR37Error):
    """The device reported an unknown shutdown timer value."""


class UpstreamCommandFailure(OSCR37Error):
    """Transport-level failure while executing a device action."""


class ServiceCommunicationFailure(HomeAssistantError):
    """A characteristic read or write could not reach the fan."""
