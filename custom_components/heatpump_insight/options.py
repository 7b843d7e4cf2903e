"""Options flow for Heat Pump Insight integration."""

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.data_entry_flow import FlowResult, section
from homeassistant.helpers import selector

from .const import (
    CONF_ANALYSIS_PERIOD,
    CONF_COMPARISON_MODE,
    CONF_COP_COLD,
    CONF_ELECTRICITY_PRICE,
    CONF_FIXED_JAZ,
    CONF_HEATING_LIMIT,
    CONF_LIVING_AREA,
    DEFAULT_ANALYSIS_PERIOD,
    DEFAULT_COMPARISON_MODE,
    DEFAULT_COP_COLD,
    DEFAULT_ELECTRICITY_PRICE,
    DEFAULT_HEATING_LIMIT,
    DEFAULT_LIVING_AREA,
    MAX_COP_COLD,
    MAX_ELECTRICITY_PRICE,
    MAX_HEATING_LIMIT,
    MAX_JAZ,
    MAX_LIVING_AREA,
    MIN_COP_COLD,
    MIN_HEATING_LIMIT,
    MIN_JAZ,
    AnalysisPeriod,
    ComparisonMode,
)

_LOGGER = logging.getLogger(__name__)

SECTIONS = ("analysis_settings", "building_characteristics")

# (key, minimum, maximum) of numeric options
NUMERIC_OPTIONS = (
    (CONF_HEATING_LIMIT, MIN_HEATING_LIMIT, MAX_HEATING_LIMIT),
    (CONF_LIVING_AREA, 0.0, MAX_LIVING_AREA),
    (CONF_FIXED_JAZ, MIN_JAZ, MAX_JAZ),
    (CONF_COP_COLD, MIN_COP_COLD, MAX_COP_COLD),
    (CONF_ELECTRICITY_PRICE, 0.0, MAX_ELECTRICITY_PRICE),
)


class InsightOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for Heat Pump Insight."""

    def _validate_and_convert(self, user_input: dict) -> dict:
        """Flatten sections and validate numeric ranges.

        Sections create nested dicts, so we need to flatten them.
        """
        validated = {}

        for name in SECTIONS:
            if name in user_input:
                validated.update(user_input[name])

        for key, value in user_input.items():
            if key not in SECTIONS:
                validated[key] = value

        for key, minimum, maximum in NUMERIC_OPTIONS:
            if validated.get(key) is None:
                validated.pop(key, None)
                continue
            try:
                value = float(validated[key])
            except (TypeError, ValueError) as e:
                raise vol.Invalid(f"Invalid {key}: {e}")
            if value < minimum or value > maximum:
                raise vol.Invalid(f"{key} must be between {minimum}-{maximum}")
            validated[key] = value

        return validated

    def _current(self, key: str, default: Any) -> Any:
        """Current value: options first, then initial entry data."""
        if key in self.config_entry.options:
            return self.config_entry.options[key]
        return self.config_entry.data.get(key, default)

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Manage runtime options."""
        if user_input is not None:
            validated_input = self._validate_and_convert(user_input)

            # Preserve existing options not in the form
            for key, value in self.config_entry.options.items():
                if key not in validated_input:
                    _LOGGER.debug("Preserving option %s = %s", key, value)
                    validated_input[key] = value

            return self.async_create_entry(title="", data=validated_input)

        fixed_jaz = self._current(CONF_FIXED_JAZ, None)
        jaz_key = (
            vol.Optional(CONF_FIXED_JAZ, default=fixed_jaz)
            if fixed_jaz
            else vol.Optional(CONF_FIXED_JAZ)
        )

        schema_dict = {
            vol.Required("analysis_settings"): section(
                vol.Schema(
                    {
                        vol.Optional(
                            CONF_ANALYSIS_PERIOD,
                            default=self._current(CONF_ANALYSIS_PERIOD, DEFAULT_ANALYSIS_PERIOD),
                        ): selector.SelectSelector(
                            selector.SelectSelectorConfig(
                                options=[p.value for p in AnalysisPeriod],
                                mode=selector.SelectSelectorMode.DROPDOWN,
                                translation_key=CONF_ANALYSIS_PERIOD,
                            )
                        ),
                        vol.Optional(
                            CONF_COMPARISON_MODE,
                            default=self._current(CONF_COMPARISON_MODE, DEFAULT_COMPARISON_MODE),
                        ): selector.SelectSelector(
                            selector.SelectSelectorConfig(
                                options=[m.value for m in ComparisonMode],
                                mode=selector.SelectSelectorMode.DROPDOWN,
                                translation_key=CONF_COMPARISON_MODE,
                            )
                        ),
                        vol.Optional(
                            CONF_HEATING_LIMIT,
                            default=self._current(CONF_HEATING_LIMIT, DEFAULT_HEATING_LIMIT),
                        ): selector.NumberSelector(
                            selector.NumberSelectorConfig(
                                min=MIN_HEATING_LIMIT,
                                max=MAX_HEATING_LIMIT,
                                step=0.5,
                                mode=selector.NumberSelectorMode.SLIDER,
                                unit_of_measurement="°C",
                            )
                        ),
                    }
                ),
                {"collapsed": False},
            ),
            vol.Required("building_characteristics"): section(
                vol.Schema(
                    {
                        vol.Optional(
                            CONF_LIVING_AREA,
                            default=self._current(CONF_LIVING_AREA, DEFAULT_LIVING_AREA),
                        ): selector.NumberSelector(
                            selector.NumberSelectorConfig(
                                min=0,
                                max=MAX_LIVING_AREA,
                                step=1,
                                mode=selector.NumberSelectorMode.BOX,
                                unit_of_measurement="m²",
                            )
                        ),
                        jaz_key: selector.NumberSelector(
                            selector.NumberSelectorConfig(
                                min=MIN_JAZ,
                                max=MAX_JAZ,
                                step=0.1,
                                mode=selector.NumberSelectorMode.BOX,
                            )
                        ),
                        vol.Optional(
                            CONF_COP_COLD,
                            default=self._current(CONF_COP_COLD, DEFAULT_COP_COLD),
                        ): selector.NumberSelector(
                            selector.NumberSelectorConfig(
                                min=MIN_COP_COLD,
                                max=MAX_COP_COLD,
                                step=0.1,
                                mode=selector.NumberSelectorMode.BOX,
                            )
                        ),
                        vol.Optional(
                            CONF_ELECTRICITY_PRICE,
                            default=self._current(
                                CONF_ELECTRICITY_PRICE, DEFAULT_ELECTRICITY_PRICE
                            ),
                        ): selector.NumberSelector(
                            selector.NumberSelectorConfig(
                                min=0,
                                max=MAX_ELECTRICITY_PRICE,
                                step=0.01,
                                mode=selector.NumberSelectorMode.BOX,
                            )
                        ),
                    }
                ),
                {"collapsed": False},
            ),
        }

        return self.async_show_form(step_id="init", data_schema=vol.Schema(schema_dict))
