"""Building parameter adapter.

Resolves the inputs of the virtual energy certificate that do not come from
statistics: annual COP (JAZ), COP at the design temperature, living area and
electricity price. Sensors win over fixed values when they report a number.
"""

import logging
from dataclasses import dataclass
from typing import Any

from homeassistant.core import HomeAssistant

from ..const import (
    CONF_COP_COLD,
    CONF_ELECTRICITY_PRICE,
    CONF_FIXED_JAZ,
    CONF_LIVING_AREA,
    CONF_PRICE_ENTITY,
    CONF_SCOP_ENTITY,
    DEFAULT_COP_COLD,
    DEFAULT_ELECTRICITY_PRICE,
    DEFAULT_LIVING_AREA,
    JazSource,
)

_LOGGER = logging.getLogger(__name__)


@dataclass
class BuildingParameters:
    """Resolved dimensioning parameters."""

    jaz: float
    jaz_source: JazSource
    cop_cold: float
    area: float
    electricity_price: float


class BuildingAdapter:
    """Adapter for reading building parameters from config and entities."""

    def __init__(self, hass: HomeAssistant, config: dict[str, Any]):
        """Initialize building adapter.

        Args:
            hass: Home Assistant instance
            config: Merged entry data and options
        """
        self.hass = hass
        self._config = config

    def update_config(self, new_options: dict[str, Any]) -> None:
        """Merge updated options into the configuration."""
        self._config = {**self._config, **new_options}

    def _read_entity_float(self, entity_id: str | None) -> float | None:
        """Read float value from entity, None if unavailable."""
        if not entity_id:
            return None

        state = self.hass.states.get(entity_id)
        if not state or state.state in ["unknown", "unavailable"]:
            return None

        try:
            return float(state.state)
        except (ValueError, TypeError):
            _LOGGER.warning("Cannot parse float from %s: %s", entity_id, state.state)
            return None

    def _config_float(self, key: str, default: float | None) -> float | None:
        value = self._config.get(key)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except (ValueError, TypeError):
            _LOGGER.warning("Invalid %s in configuration: %s", key, value)
            return default

    def resolve_jaz(self) -> tuple[float, JazSource]:
        """Annual COP: SCOP sensor, then fixed value, else missing (0)."""
        sensor_value = self._read_entity_float(self._config.get(CONF_SCOP_ENTITY))
        if sensor_value is not None and sensor_value > 0:
            return sensor_value, JazSource.SENSOR

        fixed = self._config_float(CONF_FIXED_JAZ, None)
        if fixed is not None and fixed > 0:
            return fixed, JazSource.FIXED

        return 0.0, JazSource.MISSING

    def resolve_electricity_price(self) -> float:
        """Electricity price: price sensor, then fixed value."""
        sensor_value = self._read_entity_float(self._config.get(CONF_PRICE_ENTITY))
        if sensor_value is not None:
            return sensor_value
        return self._config_float(CONF_ELECTRICITY_PRICE, DEFAULT_ELECTRICITY_PRICE)

    def get_parameters(self) -> BuildingParameters:
        """Resolve all dimensioning parameters."""
        jaz, jaz_source = self.resolve_jaz()
        return BuildingParameters(
            jaz=jaz,
            jaz_source=jaz_source,
            cop_cold=self._config_float(CONF_COP_COLD, DEFAULT_COP_COLD),
            area=self._config_float(CONF_LIVING_AREA, DEFAULT_LIVING_AREA),
            electricity_price=self.resolve_electricity_price(),
        )
