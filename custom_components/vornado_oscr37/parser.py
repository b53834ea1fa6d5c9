"""Turn phoenix state query responses into :class:`FanStatus` snapshots."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from .const import (
    FAN_INTENSITIES,
    INSTANCE_INTENSITY,
    INSTANCE_OSCILLATION,
    INSTANCE_SHUTDOWN_TIMER,
    NS_ENDPOINT_HEALTH,
    NS_MODE,
    NS_POWER,
    NS_TOGGLE,
    SHUTDOWN_TIMER_VALUES,
)
from .exceptions import (
    NoDeviceState,
    UnsupportedIntensity,
    UnsupportedShutdownTimerValue,
    UpstreamQueryFailure,
)
from .models import FanStatus

_LOGGER = logging.getLogger(__name__)


def parse_device_response(result: Mapping[str, Any]) -> FanStatus:
    """Parse a state query result; only the first device entry is considered.

    Raises :class:`NoDeviceState` when the result lists no devices and
    :class:`UnsupportedIntensity` when the intensity is not a known level.
    A result whose shape cannot be read raises :class:`UpstreamQueryFailure`.
    """
    if not isinstance(result, Mapping):
        raise UpstreamQueryFailure(f"Unexpected state query result: {result!r}")
    errors = result.get("errors") or []
    if errors:
        _LOGGER.error("Got errors from device state request: %s", errors)

    device_states = result.get("deviceStates") or []
    if not isinstance(device_states, list):
        raise UpstreamQueryFailure(f"Unexpected deviceStates: {device_states!r}")
    if not device_states:
        raise NoDeviceState("No device state received")

    device_state = device_states[0]
    if not isinstance(device_state, Mapping):
        raise UpstreamQueryFailure(f"Unexpected device state entry: {device_state!r}")
    if device_state.get("error"):
        _LOGGER.error("Got reported error for device state: %s", device_state["error"])

    capability_states = device_state.get("capabilityStates") or []
    if not isinstance(capability_states, list):
        raise UpstreamQueryFailure(
            f"Unexpected capabilityStates: {capability_states!r}"
        )
    states = []
    for raw in capability_states:
        state = decode_capability_state(raw)
        if state is not None:
            states.append(state)
    return parse_capability_states(states)


def decode_capability_state(raw: Any) -> dict | None:
    """Decode one capability state; returns None when it is unusable."""
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        state = json.loads(raw)
    except (TypeError, ValueError) as err:
        _LOGGER.warning("Dropping undecodable capability state %r: %s", raw, err)
        return None
    if not isinstance(state, dict):
        _LOGGER.warning("Dropping capability state that is not an object: %r", raw)
        return None
    return state


def _text(value: Any) -> str | None:
    # Mode values normally arrive as strings, occasionally as bare integers
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def _parse_shutdown_timer(state: Mapping[str, Any]) -> str:
    value = _text(state.get("value"))
    if value not in SHUTDOWN_TIMER_VALUES:
        raise UnsupportedShutdownTimerValue(
            f"Unsupported value for shutdown timer: {state}"
        )
    return value


def parse_capability_states(states: list[Mapping[str, Any]]) -> FanStatus:
    fields: dict[str, Any] = {}
    for state in states:
        _LOGGER.debug("Capability state: %s", state)
        namespace = state.get("namespace")
        instance = state.get("instance")
        value = state.get("value")

        if namespace == NS_ENDPOINT_HEALTH:
            # Reported as {"value": "OK"}
            if isinstance(value, Mapping):
                value = value.get("value")
            fields["connected"] = value == "OK"
        elif namespace == NS_POWER:
            if value is not None:
                fields["is_on"] = value == "ON"
        elif namespace == NS_MODE:
            if instance == INSTANCE_INTENSITY and value is not None:
                intensity = _text(value)
                if intensity not in FAN_INTENSITIES:
                    raise UnsupportedIntensity(
                        f"Unsupported state for fan intensity: {state}"
                    )
                fields["fan_intensity"] = intensity
            elif instance == INSTANCE_SHUTDOWN_TIMER and value is not None:
                try:
                    fields["shutdown_timer"] = _parse_shutdown_timer(state)
                except UnsupportedShutdownTimerValue as err:
                    _LOGGER.warning("Ignoring %s", err)
            else:
                _LOGGER.warning("Ignoring mode: %s", state)
        elif namespace == NS_TOGGLE:
            if instance == INSTANCE_OSCILLATION and value is not None:
                fields["is_oscillating"] = value == "ON"
            else:
                _LOGGER.warning("Ignoring toggle: %s", state)
        else:
            _LOGGER.warning("Unexpected namespace on state: %s", state)
    return FanStatus(**fields)
