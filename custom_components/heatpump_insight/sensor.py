"""Sensor entities for Heat Pump Insight.

Model sensors (heat loss slope, base load, fit quality), derived consumption
figures and the virtual energy certificate of the building.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory, UnitOfEnergy, UnitOfPower
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import UNDEFINED, UndefinedType
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DEFAULT_NAME, DOMAIN, MAX_ATTRIBUTE_POINTS
from .coordinator import InsightCoordinator
from .insight import DimensioningData, SeriesResult
from .insight.periods import sorted_days

_LOGGER = logging.getLogger(__name__)

UNIT_SLOPE = "kWh/Kd"
UNIT_ENERGY_PER_DAY = "kWh/d"
UNIT_ENERGY_INDEX = "kWh/m²a"
UNIT_SPECIFIC_LOAD = "W/m²"
UNIT_ANNUAL_ENERGY = "kWh/a"

# Sensors whose unit is the Home Assistant currency
CURRENCY_SENSORS = {"cost_index", "annual_cost"}


def _series(coordinator: InsightCoordinator) -> SeriesResult | None:
    data = coordinator.data
    return data.series if data else None


def _dimensioning(coordinator: InsightCoordinator) -> DimensioningData | None:
    data = coordinator.data
    return data.dimensioning if data else None


def _series_value(attr: str) -> Callable[[InsightCoordinator], Any]:
    def value(coordinator: InsightCoordinator) -> Any:
        series = _series(coordinator)
        return getattr(series, attr) if series else None

    return value


def _dimensioning_value(attr: str) -> Callable[[InsightCoordinator], Any]:
    def value(coordinator: InsightCoordinator) -> Any:
        dimensioning = _dimensioning(coordinator)
        return getattr(dimensioning, attr) if dimensioning else None

    return value


def _yesterday_deviation(coordinator: InsightCoordinator) -> float | None:
    data = coordinator.data
    if not data or not data.yesterday:
        return None
    return data.yesterday.deviation


def _selected_day_deviation(coordinator: InsightCoordinator) -> float | None:
    data = coordinator.data
    if not data or not data.selected_day:
        return None
    return data.selected_day.deviation


def _jaz(coordinator: InsightCoordinator) -> float | None:
    dimensioning = _dimensioning(coordinator)
    if dimensioning is None or dimensioning.jaz <= 0:
        return None
    return dimensioning.jaz


@dataclass(frozen=True, kw_only=True)
class InsightSensorEntityDescription(SensorEntityDescription):
    """Describes Heat Pump Insight sensor entity."""

    # Redeclare parent fields for Pylance compatibility (HA uses special metaclass)
    key: str
    device_class: SensorDeviceClass | None = None
    entity_category: EntityCategory | None = None
    entity_registry_enabled_default: bool = True
    icon: str | None = None
    name: str | UndefinedType | None = UNDEFINED
    translation_key: str | None = None
    translation_placeholders: Mapping[str, str] | None = None
    native_unit_of_measurement: str | None = None
    state_class: SensorStateClass | str | None = None
    suggested_display_precision: int | None = None
    # Heat Pump Insight specific
    value_fn: Callable[[InsightCoordinator], Any] | None = None


SENSORS: tuple[InsightSensorEntityDescription, ...] = (
    InsightSensorEntityDescription(
        key="heat_loss_slope",
        name="Heat Loss Slope",
        icon="mdi:chart-line",
        native_unit_of_measurement=UNIT_SLOPE,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        value_fn=_series_value("m"),
    ),
    InsightSensorEntityDescription(
        key="base_load",
        name="Base Load",
        icon="mdi:water-boiler",
        native_unit_of_measurement=UNIT_ENERGY_PER_DAY,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        value_fn=lambda coordinator: (
            coordinator.data.base_load
            if coordinator.data and coordinator.data.series
            else None
        ),
    ),
    InsightSensorEntityDescription(
        key="model_fit",
        name="Model Fit",
        icon="mdi:check-decagram",
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=3,
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_series_value("r2"),
    ),
    InsightSensorEntityDescription(
        key="annual_heating_projection",
        name="Annual Heating Projection",
        icon="mdi:calendar-range",
        native_unit_of_measurement=UNIT_ANNUAL_ENERGY,
        suggested_display_precision=0,
        value_fn=_series_value("annual_heating_elec_kwh"),
    ),
    InsightSensorEntityDescription(
        key="average_efficiency",
        name="Average Efficiency",
        icon="mdi:gauge",
        native_unit_of_measurement=UNIT_SLOPE,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        value_fn=_series_value("avg_efficiency"),
    ),
    InsightSensorEntityDescription(
        key="average_heating_power",
        name="Average Heating Power",
        device_class=SensorDeviceClass.POWER,
        native_unit_of_measurement=UnitOfPower.KILO_WATT,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        value_fn=_series_value("avg_power_for_heating"),
    ),
    InsightSensorEntityDescription(
        key="yesterday_deviation",
        name="Yesterday Deviation",
        icon="mdi:plus-minus-variant",
        native_unit_of_measurement=UnitOfEnergy.KILO_WATT_HOUR,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=1,
        value_fn=_yesterday_deviation,
    ),
    InsightSensorEntityDescription(
        key="selected_day_deviation",
        name="Selected Day Deviation",
        icon="mdi:calendar-search",
        native_unit_of_measurement=UnitOfEnergy.KILO_WATT_HOUR,
        suggested_display_precision=1,
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_selected_day_deviation,
    ),
    InsightSensorEntityDescription(
        key="period_energy",
        name="Period Energy",
        device_class=SensorDeviceClass.ENERGY,
        native_unit_of_measurement=UnitOfEnergy.KILO_WATT_HOUR,
        suggested_display_precision=0,
        value_fn=_series_value("total_elec_period"),
    ),
    InsightSensorEntityDescription(
        key="annual_electrical_energy",
        name="Annual Electrical Energy",
        icon="mdi:lightning-bolt",
        native_unit_of_measurement=UNIT_ANNUAL_ENERGY,
        suggested_display_precision=0,
        value_fn=_dimensioning_value("annual_electrical_energy"),
    ),
    InsightSensorEntityDescription(
        key="annual_cost",
        name="Annual Cost",
        icon="mdi:cash",
        suggested_display_precision=0,
        value_fn=_dimensioning_value("annual_cost"),
    ),
    InsightSensorEntityDescription(
        key="energy_index",
        name="Energy Index",
        icon="mdi:home-analytics",
        native_unit_of_measurement=UNIT_ENERGY_INDEX,
        suggested_display_precision=0,
        value_fn=_dimensioning_value("energy_index"),
    ),
    InsightSensorEntityDescription(
        key="specific_heat_load",
        name="Specific Heat Load",
        icon="mdi:home-thermometer",
        native_unit_of_measurement=UNIT_SPECIFIC_LOAD,
        suggested_display_precision=0,
        value_fn=_dimensioning_value("specific_heat_load"),
    ),
    InsightSensorEntityDescription(
        key="cost_index",
        name="Cost Index",
        icon="mdi:currency-eur",
        suggested_display_precision=2,
        value_fn=_dimensioning_value("cost_index"),
    ),
    InsightSensorEntityDescription(
        key="peak_thermal_load",
        name="Peak Thermal Load",
        device_class=SensorDeviceClass.POWER,
        native_unit_of_measurement=UnitOfPower.KILO_WATT,
        suggested_display_precision=2,
        value_fn=_dimensioning_value("peak_thermal_load"),
    ),
    InsightSensorEntityDescription(
        key="average_thermal_load",
        name="Average Thermal Load",
        device_class=SensorDeviceClass.POWER,
        native_unit_of_measurement=UnitOfPower.KILO_WATT,
        suggested_display_precision=2,
        value_fn=_dimensioning_value("avg_thermal_load"),
    ),
    InsightSensorEntityDescription(
        key="peak_electrical_power",
        name="Peak Electrical Power",
        device_class=SensorDeviceClass.POWER,
        native_unit_of_measurement=UnitOfPower.KILO_WATT,
        suggested_display_precision=2,
        value_fn=_dimensioning_value("peak_electrical_power"),
    ),
    InsightSensorEntityDescription(
        key="jaz",
        name="Seasonal COP",
        icon="mdi:heat-pump",
        suggested_display_precision=2,
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_jaz,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Heat Pump Insight sensor entities from a config entry."""
    coordinator: InsightCoordinator = hass.data[DOMAIN][entry.entry_id]

    async_add_entities(InsightSensor(coordinator, entry, description) for description in SENSORS)


def _chart_points(series: SeriesResult) -> list[dict[str, Any]]:
    """Most recent scatter points, chronologically, capped for the state machine."""
    days = sorted_days(series.dated_points)[-MAX_ATTRIBUTE_POINTS:]
    return [{"date": p.date_str, "hdd": round(p.x, 2), "energy": round(p.y, 3)} for p in days]


class InsightSensor(CoordinatorEntity[InsightCoordinator], SensorEntity):
    """Heat Pump Insight analysis sensor."""

    entity_description: InsightSensorEntityDescription
    coordinator: InsightCoordinator
    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: InsightCoordinator,
        entry: ConfigEntry,
        description: InsightSensorEntityDescription,
    ):
        """Initialize sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=DEFAULT_NAME,
            manufacturer="Heat Pump Insight",
            model="Degree-Day Analysis",
        )

    @property
    def native_value(self) -> float | str | datetime | None:
        """Return the state of the sensor."""
        if not self.entity_description.value_fn:
            return None
        try:
            return self.entity_description.value_fn(self.coordinator)
        except (AttributeError, KeyError, TypeError) as err:
            _LOGGER.warning(
                "Error getting value for %s: %s (type: %s)",
                self.entity_description.key,
                err,
                type(err).__name__,
            )
            return None

    @property
    def native_unit_of_measurement(self) -> str | None:
        """Return the unit, using the configured currency for cost sensors."""
        if self.entity_description.key in CURRENCY_SENSORS:
            currency = self.coordinator.hass.config.currency
            if self.entity_description.key == "cost_index":
                return f"{currency}/m²a"
            return f"{currency}/a"
        return self.entity_description.native_unit_of_measurement

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return additional state attributes based on sensor type."""
        attrs: dict[str, Any] = {}
        data = self.coordinator.data
        if not data:
            return attrs

        key = self.entity_description.key
        series = data.series

        if key == "heat_loss_slope":
            attrs["period"] = data.period
            attrs["energy_mode"] = str(data.energy_mode)
            attrs["window_start"] = data.window.start.isoformat()
            attrs["window_end"] = data.window.end.isoformat()
            if series:
                # Chart data: scatter, clipped model line and filtered days
                attrs["regression_mode"] = str(series.mode)
                attrs["intercept"] = round(series.b, 3)
                attrs["r2"] = round(series.r2, 4)
                attrs["points"] = _chart_points(series)
                attrs["line_points"] = [
                    {"hdd": round(p.x, 2), "energy": round(p.y, 3)} for p in series.line_points
                ]
                attrs["removed_dates"] = list(series.removed_dates)
            attrs["comparison_mode"] = data.comparison_mode
            if data.comparison:
                attrs["comparison_slope"] = round(data.comparison.m, 3)
                attrs["comparison_intercept"] = round(data.comparison.b, 3)
                attrs["comparison_r2"] = round(data.comparison.r2, 4)
                attrs["comparison_line_points"] = [
                    {"hdd": round(p.x, 2), "energy": round(p.y, 3)}
                    for p in data.comparison.line_points
                ]

        elif key == "base_load":
            attrs["source"] = str(data.base_load_source)
            if series:
                attrs["model_intercept"] = round(series.b, 3)
                attrs["hot_water_base_load"] = round(series.ww_base_load, 3)

        elif key == "yesterday_deviation":
            if data.yesterday:
                day = data.yesterday
                attrs["date"] = day.date
                attrs["energy"] = round(day.energy, 3)
                attrs["hdd"] = round(day.hdd, 2)
                attrs["expected"] = round(day.expected, 3)
                attrs["efficiency"] = round(day.energy / day.hdd, 3) if day.hdd > 0 else 0.0

        elif key == "selected_day_deviation":
            if data.selected_day:
                day = data.selected_day
                attrs["date"] = day.date
                attrs["hdd"] = round(day.hdd, 2)
                attrs["energy"] = round(day.energy, 3)
                attrs["expected"] = round(day.expected, 3)

        elif key == "period_energy":
            if series:
                attrs["days"] = series.total_days_period

        elif key == "jaz":
            if data.dimensioning:
                attrs["source"] = str(data.dimensioning.jaz_source)

        return attrs
