from __future__ import annotations

from types import SimpleNamespace

import pytest

pytest.importorskip("voluptuous")

from custom_components.vornado_oscr37.config_flow import (
    OSCR37ConfigFlow,
    OSCR37OptionsFlowHandler,
)
from custom_components.vornado_oscr37.const import (
    CONF_ALEXA_SERVICE_HOST,
    CONF_AMAZON_PAGE,
    CONF_CONTROL_ID,
    CONF_COOKIE,
    CONF_NAME,
    CONF_POLL_INTERVAL,
    CONF_POLLING_ENABLED,
    CONF_QUERY_ID,
    CONF_TIMEOUT,
    DEFAULT_ALEXA_SERVICE_HOST,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    MAX_POLL_INTERVAL,
)

AbortFlow = pytest.importorskip("homeassistant.data_entry_flow").AbortFlow


def _user_input(**overrides):
    data = {
        CONF_NAME: "Bedroom fan",
        CONF_CONTROL_ID: "control-1",
        CONF_QUERY_ID: "query-1",
        CONF_ALEXA_SERVICE_HOST: DEFAULT_ALEXA_SERVICE_HOST,
        CONF_AMAZON_PAGE: "amazon.com",
        CONF_COOKIE: "session-id=1; csrf=2",
        CONF_POLLING_ENABLED: True,
        CONF_POLL_INTERVAL: 1000,
        CONF_TIMEOUT: 20,
    }
    data.update(overrides)
    return data


def _flow_with_unique_id_tracking(existing=()):
    flow = OSCR37ConfigFlow()
    flow.context = {}
    seen = {}

    async def fake_set_unique_id(unique_id):
        seen["unique_id"] = unique_id

    def fake_abort_if_configured():
        if seen.get("unique_id") in existing:
            raise AbortFlow("already_configured")

    flow.async_set_unique_id = fake_set_unique_id
    flow._abort_if_unique_id_configured = fake_abort_if_configured
    return flow, seen


@pytest.mark.asyncio
async def test_config_flow_initial_form_has_defaults():
    flow = OSCR37ConfigFlow()
    flow.context = {}

    res = await flow.async_step_user(None)
    assert res["type"] == "form"
    assert res["errors"] == {}

    normalized = res["data_schema"](
        {CONF_CONTROL_ID: "control-1", CONF_QUERY_ID: "query-1", CONF_COOKIE: "c"}
    )
    assert normalized[CONF_ALEXA_SERVICE_HOST] == DEFAULT_ALEXA_SERVICE_HOST
    assert normalized[CONF_POLLING_ENABLED] is False
    assert normalized[CONF_POLL_INTERVAL] == DEFAULT_POLL_INTERVAL
    assert normalized[CONF_TIMEOUT] == DEFAULT_TIMEOUT


@pytest.mark.asyncio
async def test_config_flow_blank_fields_show_errors():
    flow = OSCR37ConfigFlow()
    flow.context = {}

    res = await flow.async_step_user(
        _user_input(**{CONF_CONTROL_ID: "  ", CONF_QUERY_ID: "", CONF_COOKIE: ""})
    )
    assert res["type"] == "form"
    assert res["errors"] == {
        CONF_CONTROL_ID: "control_id_required",
        CONF_QUERY_ID: "query_id_required",
        CONF_COOKIE: "cookie_required",
    }


@pytest.mark.asyncio
async def test_config_flow_creates_entry_with_cookie_verbatim_and_normalized_options():
    flow, seen = _flow_with_unique_id_tracking()

    res = await flow.async_step_user(_user_input(**{CONF_CONTROL_ID: " control-1 "}))

    assert res["type"] == "create_entry"
    assert res["title"] == "Bedroom fan"
    assert seen["unique_id"] == "control-1"
    assert res["data"][CONF_CONTROL_ID] == "control-1"
    assert res["data"][CONF_COOKIE] == "session-id=1; csrf=2"
    assert res["options"] == {
        CONF_POLLING_ENABLED: True,
        CONF_POLL_INTERVAL: MAX_POLL_INTERVAL,
        CONF_TIMEOUT: 20,
    }


@pytest.mark.asyncio
async def test_config_flow_aborts_when_fan_already_configured():
    flow, _ = _flow_with_unique_id_tracking(existing={"control-1"})

    with pytest.raises(AbortFlow):
        await flow.async_step_user(_user_input())


@pytest.mark.asyncio
async def test_options_flow_schema_defaults_reflect_entry_options():
    config_entry = SimpleNamespace(
        options={
            CONF_POLLING_ENABLED: True,
            CONF_POLL_INTERVAL: 42,
            CONF_TIMEOUT: 10,
        }
    )
    flow = OSCR37OptionsFlowHandler(config_entry)
    flow.context = {}

    res = await flow.async_step_init(None)
    assert res["type"] == "form"

    normalized = res["data_schema"]({})
    assert normalized[CONF_POLLING_ENABLED] is True
    assert normalized[CONF_POLL_INTERVAL] == 42
    assert normalized[CONF_TIMEOUT] == 10


@pytest.mark.asyncio
async def test_options_flow_submit_normalizes_values():
    flow = OSCR37OptionsFlowHandler(SimpleNamespace(options={}))
    flow.context = {}

    res = await flow.async_step_init(
        {CONF_POLLING_ENABLED: False, CONF_POLL_INTERVAL: 1, CONF_TIMEOUT: 0}
    )
    assert res["type"] == "create_entry"
    assert res["data"] == {
        CONF_POLLING_ENABLED: False,
        CONF_POLL_INTERVAL: 5,
        CONF_TIMEOUT: 1,
    }
