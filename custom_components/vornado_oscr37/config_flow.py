from __future__ import annotations
import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from .const import (
    DOMAIN,
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
    DEFAULT_AMAZON_PAGE,
    DEFAULT_NAME,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLLING_ENABLED,
    DEFAULT_TIMEOUT,
    normalize_poll_interval,
    normalize_timeout,
)


def _options_schema(opts) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(
                CONF_POLLING_ENABLED,
                default=opts.get(CONF_POLLING_ENABLED, DEFAULT_POLLING_ENABLED),
            ): bool,
            vol.Required(
                CONF_POLL_INTERVAL,
                default=opts.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
            ): int,
            vol.Required(
                CONF_TIMEOUT, default=opts.get(CONF_TIMEOUT, DEFAULT_TIMEOUT)
            ): int,
        }
    )


def _normalize_options(user_input) -> dict:
    return {
        CONF_POLLING_ENABLED: bool(
            user_input.get(CONF_POLLING_ENABLED, DEFAULT_POLLING_ENABLED)
        ),
        CONF_POLL_INTERVAL: normalize_poll_interval(
            user_input.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)
        ),
        CONF_TIMEOUT: normalize_timeout(user_input.get(CONF_TIMEOUT, DEFAULT_TIMEOUT)),
    }


class OSCR37ConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Config flow to set up a Vornado OSCR37 fan controlled through Alexa."""

    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}
        if user_input is not None:
            control_id = (user_input.get(CONF_CONTROL_ID) or "").strip()
            query_id = (user_input.get(CONF_QUERY_ID) or "").strip()
            cookie = (user_input.get(CONF_COOKIE) or "").strip()
            if not control_id:
                errors[CONF_CONTROL_ID] = "control_id_required"
            if not query_id:
                errors[CONF_QUERY_ID] = "query_id_required"
            if not cookie:
                errors[CONF_COOKIE] = "cookie_required"
            if not errors:
                await self.async_set_unique_id(control_id)
                self._abort_if_unique_id_configured()
                name = (user_input.get(CONF_NAME) or "").strip() or DEFAULT_NAME
                return self.async_create_entry(
                    title=name,
                    data={
                        CONF_NAME: name,
                        CONF_CONTROL_ID: control_id,
                        CONF_QUERY_ID: query_id,
                        CONF_ALEXA_SERVICE_HOST: user_input.get(
                            CONF_ALEXA_SERVICE_HOST, DEFAULT_ALEXA_SERVICE_HOST
                        ),
                        CONF_AMAZON_PAGE: user_input.get(
                            CONF_AMAZON_PAGE, DEFAULT_AMAZON_PAGE
                        ),
                        # Opaque blob from the Alexa login flow; stored verbatim
                        CONF_COOKIE: cookie,
                    },
                    options=_normalize_options(user_input),
                )

        user_input = user_input or {}
        schema = vol.Schema(
            {
                vol.Required(
                    CONF_NAME, default=user_input.get(CONF_NAME, DEFAULT_NAME)
                ): str,
                vol.Required(
                    CONF_CONTROL_ID, default=user_input.get(CONF_CONTROL_ID, "")
                ): str,
                vol.Required(
                    CONF_QUERY_ID, default=user_input.get(CONF_QUERY_ID, "")
                ): str,
                vol.Required(
                    CONF_ALEXA_SERVICE_HOST,
                    default=user_input.get(
                        CONF_ALEXA_SERVICE_HOST, DEFAULT_ALEXA_SERVICE_HOST
                    ),
                ): str,
                vol.Required(
                    CONF_AMAZON_PAGE,
                    default=user_input.get(CONF_AMAZON_PAGE, DEFAULT_AMAZON_PAGE),
                ): str,
                vol.Required(CONF_COOKIE, default=""): str,
            }
        ).extend(_options_schema(user_input).schema)
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return OSCR37OptionsFlowHandler(config_entry)


class OSCR37OptionsFlowHandler(config_entries.OptionsFlow):
    """Options flow to adjust polling and the cloud readiness timeout."""

    def __init__(self, config_entry):
        # Avoid assigning to deprecated attribute; store locally
        self._config_entry = config_entry

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=_normalize_options(user_input))

        schema = _options_schema(self._config_entry.options)
        return self.async_show_form(step_id="init", data_schema=schema)
