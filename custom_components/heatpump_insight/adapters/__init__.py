"""Adapters for external integration interfaces."""

from .building_adapter import BuildingAdapter, BuildingParameters
from .statistics_adapter import EnergySources, StatisticsAdapter, resolve_energy_sources

__all__ = [
    "BuildingAdapter",
    "BuildingParameters",
    "EnergySources",
    "StatisticsAdapter",
    "resolve_energy_sources",
]
