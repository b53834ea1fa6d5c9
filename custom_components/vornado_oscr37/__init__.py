from __future__ import annotations
from homeassistant.core import HomeAssistant
from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.httpx_client import create_async_httpx_client
from .accessory import OSCR37Accessory
from .client import ApiConfig, OSCR37Client
from .const import (
    DOMAIN,
    CONF_ALEXA_SERVICE_HOST,
    CONF_AMAZON_PAGE,
    CONF_CONTROL_ID,
    CONF_COOKIE,
    CONF_POLL_INTERVAL,
    CONF_POLLING_ENABLED,
    CONF_QUERY_ID,
    CONF_TIMEOUT,
    DEFAULT_ALEXA_SERVICE_HOST,
    DEFAULT_AMAZON_PAGE,
    normalize_poll_interval,
    normalize_timeout,
)
from .coordinator import OSCR37Coordinator
from .readiness import ReadinessGate
from .transport import AlexaTransport

PLATFORMS: list[str] = ["fan"]

async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    opts = entry.options or {}
    gate = ReadinessGate()
    transport = AlexaTransport(
        create_async_httpx_client(hass),
        entry.data[CONF_COOKIE],
        alexa_service_host=entry.data.get(
            CONF_ALEXA_SERVICE_HOST, DEFAULT_ALEXA_SERVICE_HOST
        ),
        amazon_page=entry.data.get(CONF_AMAZON_PAGE, DEFAULT_AMAZON_PAGE),
    )
    client = OSCR37Client(
        transport, gate, ApiConfig(timeout=normalize_timeout(opts.get(CONF_TIMEOUT)))
    )
    accessory = OSCR37Accessory(
        client, entry.data[CONF_CONTROL_ID], entry.data[CONF_QUERY_ID]
    )
    poll = (
        normalize_poll_interval(opts.get(CONF_POLL_INTERVAL))
        if opts.get(CONF_POLLING_ENABLED)
        else None
    )
    coord = OSCR37Coordinator(hass, accessory, config_entry=entry, poll_interval=poll)
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coord

    # The handshake retries until the cookie is accepted; reads and writes
    # wait for it up to the configured timeout.
    entry.async_create_background_task(
        hass, transport.async_handshake(gate), f"{DOMAIN}_handshake_{entry.entry_id}"
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    coord.async_schedule_immediate_refresh()

    # Reload when options change (polling, timeout)
    entry.async_on_unload(entry.add_update_listener(async_options_updated))
    return True

async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    coord = hass.data[DOMAIN].pop(entry.entry_id, None)
    if coord is not None:
        await coord.async_shutdown()
    return unload_ok

async def async_options_updated(hass: HomeAssistant, entry: ConfigEntry):
    await hass.config_entries.async_reload(entry.entry_id)
