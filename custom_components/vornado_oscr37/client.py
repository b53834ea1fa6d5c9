from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from .const import DEFAULT_TIMEOUT
from .models import FanCommand, FanStatus, WireAction
from .parser import parse_device_response
from .readiness import ReadinessGate

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiConfig:
    """API related behavior; ``timeout`` is in seconds."""

    timeout: float = DEFAULT_TIMEOUT


class Transport(Protocol):
    async def query_device_states(self, device_id: str) -> dict[str, Any]: ...

    async def execute_action(
        self, device_ids: list[str], action: WireAction
    ) -> dict[str, Any]: ...


class OSCR37Client:
    """Gate every upstream call on the readiness signal, then parse results."""

    def __init__(
        self,
        transport: Transport,
        gate: ReadinessGate,
        api_config: ApiConfig | None = None,
    ) -> None:
        self.transport = transport
        self.gate = gate
        self.api_config = api_config or ApiConfig()

    async def get_device_status(self, query_id: str) -> FanStatus:
        await self.gate.wait_ready(self.api_config.timeout)
        result = await self.transport.query_device_states(query_id)
        return parse_device_response(result)

    async def send_device_action(
        self, control_id: str | list[str], command: FanCommand
    ) -> dict[str, Any]:
        """Execute ``command`` on one or more fans; never deduplicated."""
        control_ids = control_id if isinstance(control_id, list) else [control_id]
        await self.gate.wait_ready(self.api_config.timeout)
        action = command.to_wire()
        _LOGGER.debug("Sending %s to %s", action, control_ids)
        return await self.transport.execute_action(control_ids, action)
