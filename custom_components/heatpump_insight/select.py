"""Select entities for Heat Pump Insight.

Analysis period and comparison mode. Changing either reruns the analysis
immediately; the last choice is restored after a restart.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.restore_state import RestoreEntity
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DEFAULT_NAME, DOMAIN, AnalysisPeriod, ComparisonMode
from .coordinator import InsightCoordinator

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightSelectEntityDescription:
    """Custom select entity description for Heat Pump Insight.

    Uses composition instead of inheritance from SelectEntityDescription
    to avoid type-checking issues with Home Assistant's FrozenOrThawed metaclass.
    """

    key: str
    options: tuple[str, ...]
    current_fn: Callable[[InsightCoordinator], str]
    select_fn: Callable[[InsightCoordinator, str], Awaitable[None]]

    name: str | None = None
    icon: str | None = None
    entity_category: EntityCategory | None = None
    translation_key: str | None = None
    has_entity_name: bool = False
    entity_registry_enabled_default: bool = True
    entity_registry_visible_default: bool = True
    force_update: bool = False
    device_class: str | None = None
    unit_of_measurement: str | None = None


SELECTS: tuple[InsightSelectEntityDescription, ...] = (
    InsightSelectEntityDescription(
        key="analysis_period",
        name="Analysis Period",
        translation_key="analysis_period",
        icon="mdi:calendar-range",
        entity_category=EntityCategory.CONFIG,
        options=tuple(p.value for p in AnalysisPeriod),
        current_fn=lambda coordinator: coordinator.period,
        select_fn=lambda coordinator, option: coordinator.async_set_period(option),
    ),
    InsightSelectEntityDescription(
        key="comparison_mode",
        name="Comparison Mode",
        translation_key="comparison_mode",
        icon="mdi:compare-horizontal",
        entity_category=EntityCategory.CONFIG,
        options=tuple(m.value for m in ComparisonMode),
        current_fn=lambda coordinator: coordinator.comparison_mode,
        select_fn=lambda coordinator, option: coordinator.async_set_comparison(option),
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Heat Pump Insight select entities from a config entry."""
    coordinator: InsightCoordinator = hass.data[DOMAIN][entry.entry_id]

    async_add_entities(InsightSelect(coordinator, entry, description) for description in SELECTS)


class InsightSelect(CoordinatorEntity[InsightCoordinator], SelectEntity, RestoreEntity):
    """Analysis window selector."""

    entity_description: InsightSelectEntityDescription
    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: InsightCoordinator,
        entry: ConfigEntry,
        description: InsightSelectEntityDescription,
    ):
        """Initialize select entity."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_options = list(description.options)
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=DEFAULT_NAME,
            manufacturer="Heat Pump Insight",
            model="Degree-Day Analysis",
        )

    async def async_added_to_hass(self) -> None:
        """Restore the last selected option."""
        await super().async_added_to_hass()

        last_state = await self.async_get_last_state()
        if not last_state or last_state.state not in self.entity_description.options:
            return
        if last_state.state == self.current_option:
            return

        _LOGGER.debug("Restoring %s: %s", self.entity_description.key, last_state.state)
        await self.entity_description.select_fn(self.coordinator, last_state.state)

    @property
    def current_option(self) -> str | None:
        """Return the selected option."""
        return self.entity_description.current_fn(self.coordinator)

    async def async_select_option(self, option: str) -> None:
        """Change the selected option and rerun the analysis."""
        if option not in self.entity_description.options:
            _LOGGER.warning("Invalid %s option: %s", self.entity_description.key, option)
            return

        _LOGGER.info("Setting %s to %s", self.entity_description.key, option)
        await self.entity_description.select_fn(self.coordinator, option)
        self.async_write_ha_state()
