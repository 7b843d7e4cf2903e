"""Config flow for Heat Pump Insight integration."""

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector

from .const import (
    CONF_COP_COLD,
    CONF_ELECTRICITY_PRICE,
    CONF_FIXED_JAZ,
    CONF_HEATING_ENERGY_ENTITY,
    CONF_HEATING_LIMIT,
    CONF_HOTWATER_ENERGY_ENTITY,
    CONF_LIVING_AREA,
    CONF_OUTDOOR_TEMP_ENTITY,
    CONF_PRICE_ENTITY,
    CONF_SCOP_ENTITY,
    CONF_TOTAL_ENERGY_ENTITY,
    DEFAULT_COP_COLD,
    DEFAULT_ELECTRICITY_PRICE,
    DEFAULT_HEATING_LIMIT,
    DEFAULT_LIVING_AREA,
    DEFAULT_NAME,
    DOMAIN,
    MAX_COP_COLD,
    MAX_ELECTRICITY_PRICE,
    MAX_HEATING_LIMIT,
    MAX_JAZ,
    MAX_LIVING_AREA,
    MIN_COP_COLD,
    MIN_HEATING_LIMIT,
    MIN_JAZ,
)
from .options import InsightOptionsFlow

_LOGGER = logging.getLogger(__name__)

ENERGY_SENSOR_KEYS = (
    CONF_HEATING_ENERGY_ENTITY,
    CONF_HOTWATER_ENERGY_ENTITY,
    CONF_TOTAL_ENERGY_ENTITY,
)


def _sensor_selector(device_class: str | None = None) -> selector.EntitySelector:
    if device_class:
        return selector.EntitySelector(
            selector.EntitySelectorConfig(domain="sensor", device_class=device_class)
        )
    return selector.EntitySelector(selector.EntitySelectorConfig(domain="sensor"))


def _optional(key: str, default: Any | None) -> vol.Optional:
    """Optional schema key that only carries a default when one exists."""
    if default:
        return vol.Optional(key, default=default)
    return vol.Optional(key)


class InsightConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Heat Pump Insight."""

    VERSION = 1

    def __init__(self):
        """Initialize config flow."""
        self._data: dict[str, Any] = {}

    def _validate_sensors(self, user_input: dict[str, Any]) -> dict[str, str]:
        """Check the selected sensors exist; returns form errors."""
        errors: dict[str, str] = {}

        if not self.hass.states.get(user_input[CONF_OUTDOOR_TEMP_ENTITY]):
            errors[CONF_OUTDOOR_TEMP_ENTITY] = "temp_sensor_not_found"

        if not (
            user_input.get(CONF_HEATING_ENERGY_ENTITY) or user_input.get(CONF_TOTAL_ENERGY_ENTITY)
        ):
            errors["base"] = "energy_sensor_required"

        for key in ENERGY_SENSOR_KEYS:
            entity_id = user_input.get(key)
            if entity_id and not self.hass.states.get(entity_id):
                errors[key] = "energy_sensor_not_found"

        return errors

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Handle the initial step - sensor selection."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = self._validate_sensors(user_input)
            if not errors:
                self._data[CONF_OUTDOOR_TEMP_ENTITY] = user_input[CONF_OUTDOOR_TEMP_ENTITY]
                for key in ENERGY_SENSOR_KEYS:
                    self._data[key] = user_input.get(key)

                await self.async_set_unique_id(
                    f"{user_input[CONF_OUTDOOR_TEMP_ENTITY]}_"
                    f"{user_input.get(CONF_HEATING_ENERGY_ENTITY) or user_input.get(CONF_TOTAL_ENERGY_ENTITY)}"
                )
                self._abort_if_unique_id_configured()

                return await self.async_step_building()

        temp_entities = self._discover_outdoor_temp_entities()
        energy = self._discover_energy_entities()

        schema_dict: dict[Any, Any] = {
            vol.Required(
                CONF_OUTDOOR_TEMP_ENTITY,
                default=temp_entities[0] if temp_entities else vol.UNDEFINED,
            ): _sensor_selector("temperature"),
            _optional(CONF_HEATING_ENERGY_ENTITY, energy["heating"]): _sensor_selector("energy"),
            _optional(CONF_HOTWATER_ENERGY_ENTITY, energy["hotwater"]): _sensor_selector("energy"),
            _optional(CONF_TOTAL_ENERGY_ENTITY, energy["total"]): _sensor_selector("energy"),
        }

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(schema_dict),
            errors=errors,
            description_placeholders={
                "info": (
                    "Select the outdoor temperature and either a heating energy meter "
                    "(optionally with a hot water meter) or a total heat pump energy meter."
                )
            },
        )

    async def async_step_building(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Configure building parameters for the energy certificate."""
        if user_input is not None:
            self._data[CONF_HEATING_LIMIT] = float(
                user_input.get(CONF_HEATING_LIMIT, DEFAULT_HEATING_LIMIT)
            )
            self._data[CONF_LIVING_AREA] = float(
                user_input.get(CONF_LIVING_AREA, DEFAULT_LIVING_AREA)
            )
            self._data[CONF_FIXED_JAZ] = user_input.get(CONF_FIXED_JAZ)
            self._data[CONF_SCOP_ENTITY] = user_input.get(CONF_SCOP_ENTITY)
            self._data[CONF_COP_COLD] = float(user_input.get(CONF_COP_COLD, DEFAULT_COP_COLD))
            self._data[CONF_ELECTRICITY_PRICE] = float(
                user_input.get(CONF_ELECTRICITY_PRICE, DEFAULT_ELECTRICITY_PRICE)
            )
            self._data[CONF_PRICE_ENTITY] = user_input.get(CONF_PRICE_ENTITY)

            return self.async_create_entry(title=DEFAULT_NAME, data=self._data)

        return self.async_show_form(
            step_id="building",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_HEATING_LIMIT, default=DEFAULT_HEATING_LIMIT
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=MIN_HEATING_LIMIT,
                            max=MAX_HEATING_LIMIT,
                            step=0.5,
                            mode=selector.NumberSelectorMode.SLIDER,
                            unit_of_measurement="°C",
                        )
                    ),
                    vol.Optional(
                        CONF_LIVING_AREA, default=DEFAULT_LIVING_AREA
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=0,
                            max=MAX_LIVING_AREA,
                            step=1,
                            mode=selector.NumberSelectorMode.BOX,
                            unit_of_measurement="m²",
                        )
                    ),
                    vol.Optional(CONF_FIXED_JAZ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=MIN_JAZ,
                            max=MAX_JAZ,
                            step=0.1,
                            mode=selector.NumberSelectorMode.BOX,
                        )
                    ),
                    vol.Optional(CONF_SCOP_ENTITY): _sensor_selector(),
                    vol.Optional(CONF_COP_COLD, default=DEFAULT_COP_COLD): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=MIN_COP_COLD,
                            max=MAX_COP_COLD,
                            step=0.1,
                            mode=selector.NumberSelectorMode.BOX,
                        )
                    ),
                    vol.Optional(
                        CONF_ELECTRICITY_PRICE, default=DEFAULT_ELECTRICITY_PRICE
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=0,
                            max=MAX_ELECTRICITY_PRICE,
                            step=0.01,
                            mode=selector.NumberSelectorMode.BOX,
                        )
                    ),
                    vol.Optional(CONF_PRICE_ENTITY): _sensor_selector(),
                }
            ),
        )

    async def async_step_reconfigure(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Handle reconfiguration of sensor selections.

        Allows users to change the sensors without recreating the integration.
        """
        entry = self._get_reconfigure_entry()
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = self._validate_sensors(user_input)
            if not errors:
                data_updates = {key: user_input.get(key) for key in ENERGY_SENSOR_KEYS}
                data_updates[CONF_OUTDOOR_TEMP_ENTITY] = user_input[CONF_OUTDOOR_TEMP_ENTITY]
                data_updates[CONF_SCOP_ENTITY] = user_input.get(CONF_SCOP_ENTITY)
                data_updates[CONF_PRICE_ENTITY] = user_input.get(CONF_PRICE_ENTITY)
                return self.async_update_reload_and_abort(entry, data_updates=data_updates)

        return self.async_show_form(
            step_id="reconfigure",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_OUTDOOR_TEMP_ENTITY,
                        default=entry.data.get(CONF_OUTDOOR_TEMP_ENTITY),
                    ): _sensor_selector("temperature"),
                    _optional(
                        CONF_HEATING_ENERGY_ENTITY, entry.data.get(CONF_HEATING_ENERGY_ENTITY)
                    ): _sensor_selector("energy"),
                    _optional(
                        CONF_HOTWATER_ENERGY_ENTITY, entry.data.get(CONF_HOTWATER_ENERGY_ENTITY)
                    ): _sensor_selector("energy"),
                    _optional(
                        CONF_TOTAL_ENERGY_ENTITY, entry.data.get(CONF_TOTAL_ENERGY_ENTITY)
                    ): _sensor_selector("energy"),
                    _optional(CONF_SCOP_ENTITY, entry.data.get(CONF_SCOP_ENTITY)): (
                        _sensor_selector()
                    ),
                    _optional(CONF_PRICE_ENTITY, entry.data.get(CONF_PRICE_ENTITY)): (
                        _sensor_selector()
                    ),
                }
            ),
            errors=errors,
            description_placeholders={
                "info": "Change sensor selections. Integration will reload automatically."
            },
        )

    def _discover_outdoor_temp_entities(self) -> list[str]:
        """Discover outdoor temperature sensors.

        Priority order:
        1. Sensors named outdoor/outside
        2. Other temperature sensors measured in °C
        """
        outdoor = []
        generic = []

        for state in self.hass.states.async_all("sensor"):
            if state.attributes.get("device_class") != "temperature":
                continue
            entity_lower = state.entity_id.lower()
            if any(term in entity_lower for term in ["outdoor", "outside", "aussen", "bt1"]):
                outdoor.append(state.entity_id)
            else:
                generic.append(state.entity_id)

        return outdoor + generic

    def _discover_energy_entities(self) -> dict[str, str | None]:
        """Discover heat pump energy meters by name.

        Only sensors with a kWh energy device class are considered.
        """
        found: dict[str, str | None] = {"heating": None, "hotwater": None, "total": None}

        for state in self.hass.states.async_all("sensor"):
            if state.attributes.get("device_class") != "energy":
                continue
            if state.attributes.get("unit_of_measurement", "").lower() != "kwh":
                continue

            entity_lower = state.entity_id.lower()
            if not any(term in entity_lower for term in ["heat_pump", "heatpump", "wp", "nibe"]):
                continue

            if any(term in entity_lower for term in ["hot_water", "hotwater", "dhw", "ww"]):
                found["hotwater"] = found["hotwater"] or state.entity_id
            elif any(term in entity_lower for term in ["heating", "heizung"]):
                found["heating"] = found["heating"] or state.entity_id
            else:
                found["total"] = found["total"] or state.entity_id

        _LOGGER.debug("Discovered energy meters: %s", found)
        return found

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Create the options flow."""
        return InsightOptionsFlow()
