"""Config flow for the HomeKeeper integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homekeeper_api import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    Home,
    HomeKeeperApiClient,
)

from .const import CONF_API_KEY, CONF_HOME_ID, CONF_URL, DOMAIN

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_URL): str,
        vol.Required(CONF_API_KEY): str,
    }
)


class HomeKeeperConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for HomeKeeper."""

    VERSION = 1

    def __init__(self) -> None:
        self._connection: dict[str, str] = {}
        self._homes: dict[str, Home] = {}

    async def _async_fetch_homes(
        self, url: str, api_key: str
    ) -> tuple[list[Home], dict[str, str]]:
        """Fetch homes with the given credentials, returning form errors."""
        errors: dict[str, str] = {}
        client = HomeKeeperApiClient(url, api_key, async_get_clientsession(self.hass))
        try:
            homes = await client.async_get_homes()
        except AuthenticationError:
            errors["base"] = "invalid_auth"
        except (ApiConnectionError, ApiResponseError):
            errors["base"] = "cannot_connect"
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Unexpected error while contacting HomeKeeper")
            errors["base"] = "unknown"
        else:
            if not homes:
                errors["base"] = "no_homes"
            return homes, errors
        return [], errors

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the connection step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            homes, errors = await self._async_fetch_homes(
                user_input[CONF_URL], user_input[CONF_API_KEY]
            )
            if not errors:
                self._connection = {
                    CONF_URL: user_input[CONF_URL],
                    CONF_API_KEY: user_input[CONF_API_KEY],
                }
                self._homes = {home.id: home for home in homes}
                return await self.async_step_home()

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def async_step_home(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Pick which home this entry tracks."""
        if user_input is not None:
            home = self._homes[user_input[CONF_HOME_ID]]
            await self.async_set_unique_id(home.id)
            self._abort_if_unique_id_configured()
            return self.async_create_entry(
                title=home.name or home.id,
                data={**self._connection, CONF_HOME_ID: home.id},
            )

        return self.async_show_form(
            step_id="home",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_HOME_ID): vol.In(
                        {home_id: home.name for home_id, home in self._homes.items()}
                    ),
                }
            ),
        )

    async def async_step_reauth(
        self, entry_data: dict[str, Any]
    ) -> ConfigFlowResult:
        """Handle a rejected API key."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a replacement API key."""
        errors: dict[str, str] = {}
        reauth_entry = self._get_reauth_entry()

        if user_input is not None:
            _, errors = await self._async_fetch_homes(
                reauth_entry.data[CONF_URL], user_input[CONF_API_KEY]
            )
            if not errors:
                return self.async_update_reload_and_abort(
                    reauth_entry,
                    data={**reauth_entry.data, CONF_API_KEY: user_input[CONF_API_KEY]},
                )

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=vol.Schema({vol.Required(CONF_API_KEY): str}),
            errors=errors,
        )
