"""HTTP transport for the Alexa smart home ("phoenix") endpoints."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from typing import Any

import httpx

from .const import ENTITY_TYPE_APPLIANCE, HANDSHAKE_RETRY_DELAY
from .exceptions import UpstreamCommandFailure, UpstreamQueryFailure
from .models import WireAction
from .readiness import ReadinessGate

_LOGGER = logging.getLogger(__name__)

_BOOTSTRAP_URL = "https://alexa.amazon.com/api/bootstrap"
_PHOENIX_STATE_PATH = "/api/phoenix/state"
_CSRF_RE = re.compile(r"csrf=([^;\s]+)")


class AlexaTransport:
    """Send phoenix state queries and control requests with a stored cookie.

    The cookie is an opaque blob produced by an external login flow; it is
    forwarded verbatim.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cookie: str,
        *,
        alexa_service_host: str,
        amazon_page: str,
    ) -> None:
        self._client = client
        self._cookie = cookie
        self._state_url = f"https://{alexa_service_host}{_PHOENIX_STATE_PATH}"
        self._origin = f"https://alexa.{amazon_page}"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Cookie": self._cookie,
            "Accept": "application/json; charset=utf-8",
            "Referer": f"{self._origin}/spa/index.html",
            "Origin": self._origin,
        }
        match = _CSRF_RE.search(self._cookie)
        if match:
            headers["csrf"] = match.group(1)
        return headers

    async def async_check_authenticated(self) -> bool:
        response = await self._client.get(
            _BOOTSTRAP_URL, params={"version": "0"}, headers=self._headers()
        )
        response.raise_for_status()
        payload = response.json()
        auth = payload.get("authentication") if isinstance(payload, Mapping) else None
        return isinstance(auth, Mapping) and bool(auth.get("authenticated"))

    async def async_handshake(
        self, gate: ReadinessGate, retry_delay: float = HANDSHAKE_RETRY_DELAY
    ) -> None:
        """Verify the cookie, retrying until it succeeds, then open ``gate``."""
        gate.report(False)
        while True:
            try:
                if await self.async_check_authenticated():
                    gate.report(True)
                    return
                _LOGGER.warning("Alexa session is not authenticated; check the cookie")
            except (httpx.HTTPError, ValueError) as err:
                _LOGGER.warning("Failed to initialize Alexa session: %s", err)
            gate.report(False)
            await asyncio.sleep(retry_delay)

    async def query_device_states(self, device_id: str) -> dict[str, Any]:
        body = {
            "stateRequests": [
                {"entityId": device_id, "entityType": ENTITY_TYPE_APPLIANCE}
            ]
        }
        try:
            response = await self._client.post(
                self._state_url, json=body, headers=self._headers()
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as err:
            raise UpstreamQueryFailure(
                f"State query for {device_id} failed: {err}"
            ) from err
        if not isinstance(payload, dict):
            raise UpstreamQueryFailure(f"Unexpected state query payload: {payload!r}")
        return payload

    async def execute_action(
        self, device_ids: list[str], action: WireAction
    ) -> dict[str, Any]:
        body = {
            "controlRequests": [
                {
                    "entityId": device_id,
                    "entityType": ENTITY_TYPE_APPLIANCE,
                    "parameters": dict(action),
                }
                for device_id in device_ids
            ]
        }
        try:
            response = await self._client.put(
                self._state_url, json=body, headers=self._headers()
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as err:
            raise UpstreamCommandFailure(
                f"Action {action.get('action')} for {device_ids} failed: {err}"
            ) from err
        if isinstance(payload, dict) and payload.get("errors"):
            raise UpstreamCommandFailure(
                f"Action {action.get('action')} rejected: {payload['errors']}"
            )
        return payload if isinstance(payload, dict) else {}
