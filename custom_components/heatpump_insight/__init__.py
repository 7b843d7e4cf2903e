"""The Heat Pump Insight integration.

Heat Pump Insight analyses recorder statistics of a heat pump's electrical
energy against outdoor temperature. A robust degree-day regression yields the
building's heat loss slope, the hot water base load and a virtual energy
certificate (annual consumption, peak load, energy and cost indices).
"""

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers.update_coordinator import UpdateFailed

from .const import (
    CONF_ANALYSIS_PERIOD,
    CONF_COMPARISON_MODE,
    CONF_COP_COLD,
    CONF_ELECTRICITY_PRICE,
    CONF_FIXED_JAZ,
    CONF_HEATING_LIMIT,
    CONF_LIVING_AREA,
    DOMAIN,
    SERVICE_REFRESH_ANALYSIS,
    SERVICE_SELECT_DAY,
)
from .coordinator import InsightCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.SELECT,
]

# Options applied by the coordinator without reloading the entry
RUNTIME_OPTIONS = {
    CONF_ANALYSIS_PERIOD,
    CONF_COMPARISON_MODE,
    CONF_HEATING_LIMIT,
    CONF_LIVING_AREA,
    CONF_FIXED_JAZ,
    CONF_COP_COLD,
    CONF_ELECTRICITY_PRICE,
}


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Heat Pump Insight from a config entry."""
    _LOGGER.info("Setting up Heat Pump Insight integration")

    hass.data.setdefault(DOMAIN, {})

    coordinator = _create_coordinator(hass, entry)
    hass.data[DOMAIN][entry.entry_id] = coordinator

    # Recorder not ready or statistics unreadable: HA retries setup later
    try:
        await coordinator.async_config_entry_first_refresh()
    except (UpdateFailed, TimeoutError, OSError) as err:
        hass.data[DOMAIN].pop(entry.entry_id, None)
        raise ConfigEntryNotReady(
            f"Cannot read recorder statistics for Heat Pump Insight: {err}"
        ) from err

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    await _async_register_services(hass)

    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    _LOGGER.info("Heat Pump Insight setup complete")
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    _LOGGER.info("Unloading Heat Pump Insight integration")

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        hass.data[DOMAIN].pop(entry.entry_id, None)

        if not hass.data[DOMAIN]:
            _async_unregister_services(hass)

    return unload_ok


def _async_unregister_services(hass: HomeAssistant) -> None:
    """Unregister integration services when last config entry is removed."""
    for service in (SERVICE_REFRESH_ANALYSIS, SERVICE_SELECT_DAY):
        if hass.services.has_service(DOMAIN, service):
            hass.services.async_remove(DOMAIN, service)
            _LOGGER.debug("Unregistered service: %s", service)


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload config entry when options change - only if needed.

    Analysis and building settings are applied by the coordinator directly.
    Changed entity selections require a full reload.
    """
    coordinator: InsightCoordinator = hass.data[DOMAIN].get(entry.entry_id)
    if not coordinator:
        _LOGGER.warning("No coordinator found for reload")
        return

    options_keys = set(entry.options.keys())
    if options_keys and options_keys.issubset(RUNTIME_OPTIONS):
        _LOGGER.info("Runtime options changed, updating coordinator without reload")
        await coordinator.async_update_config(dict(entry.options))
        return

    _LOGGER.info("Sensor selection changed, reloading integration")
    await hass.config_entries.async_reload(entry.entry_id)


def _create_coordinator(hass: HomeAssistant, entry: ConfigEntry) -> InsightCoordinator:
    """Create coordinator with its adapters."""
    from .adapters import BuildingAdapter, StatisticsAdapter

    config = {**entry.data, **entry.options}

    return InsightCoordinator(
        hass=hass,
        statistics_adapter=StatisticsAdapter(hass, config),
        building_adapter=BuildingAdapter(hass, config),
        entry=entry,
    )


async def _async_register_services(hass: HomeAssistant) -> None:
    """Register integration services.

    - refresh_analysis: re-read statistics and rerun the analysis
    - select_day: show a specific analysed day against the model
    """
    import voluptuous as vol
    from homeassistant.helpers import config_validation as cv

    from .const import ATTR_DATE

    def get_coordinators(hass: HomeAssistant) -> list[InsightCoordinator]:
        domain_data = hass.data.get(DOMAIN, {})
        return [c for c in domain_data.values() if isinstance(c, InsightCoordinator)]

    async def refresh_analysis_handler(call) -> None:
        """Handle refresh_analysis service call."""
        coordinators = get_coordinators(hass)
        _LOGGER.info("Refreshing %d insight analyses on request", len(coordinators))
        for coordinator in coordinators:
            await coordinator.async_request_refresh()

    async def select_day_handler(call) -> None:
        """Handle select_day service call."""
        date_str = call.data.get(ATTR_DATE)
        for coordinator in get_coordinators(hass):
            coordinator.async_select_day(date_str.isoformat() if date_str else None)

    select_day_schema = vol.Schema({vol.Optional(ATTR_DATE): cv.date})

    if not hass.services.has_service(DOMAIN, SERVICE_REFRESH_ANALYSIS):
        hass.services.async_register(
            DOMAIN,
            SERVICE_REFRESH_ANALYSIS,
            refresh_analysis_handler,
            schema=vol.Schema({}),
        )
        _LOGGER.debug("Registered service: %s", SERVICE_REFRESH_ANALYSIS)

    if not hass.services.has_service(DOMAIN, SERVICE_SELECT_DAY):
        hass.services.async_register(
            DOMAIN,
            SERVICE_SELECT_DAY,
            select_day_handler,
            schema=select_day_schema,
        )
        _LOGGER.debug("Registered service: %s", SERVICE_SELECT_DAY)
