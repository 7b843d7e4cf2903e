"""Pytest configuration for Heat Pump Insight tests."""

import sys
import warnings
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

# Add tests directory to path for helper imports
sys.path.insert(0, str(Path(__file__).parent))

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

# Filter warnings
warnings.filterwarnings("ignore", category=DeprecationWarning, module="josepy")
warnings.filterwarnings("ignore", category=DeprecationWarning, module="acme")
warnings.filterwarnings("ignore", category=DeprecationWarning, module="homeassistant")

HEATING_ID = "sensor.heat_pump_heating_energy"
HOTWATER_ID = "sensor.heat_pump_hot_water_energy"
TOTAL_ID = "sensor.heat_pump_total_energy"
TEMP_ID = "sensor.outdoor_temperature"

# Reference clock for deterministic day keys (Home Assistant default zone is UTC)
NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def setup_frame_helper(monkeypatch):
    """Set up the frame helper for all tests."""
    from homeassistant.helpers import frame

    # Mock the report_usage function to avoid frame helper errors
    monkeypatch.setattr(frame, "report_usage", Mock())

    yield


def day(offset: int, first: date = date(2024, 1, 1)) -> str:
    """Day key `offset` days after the first test day."""
    return (first + timedelta(days=offset)).isoformat()


def energy_rows(values: list[float], first_offset: int = 0) -> list[dict]:
    """Daily energy statistic rows (change column) starting at a day offset."""
    return [
        {"start": f"{day(first_offset + i)}T00:00:00+00:00", "change": value, "mean": None}
        for i, value in enumerate(values)
    ]


def temperature_rows(values: list[float], first_offset: int = 0) -> list[dict]:
    """Daily temperature statistic rows (mean column) starting at a day offset."""
    return [
        {"start": f"{day(first_offset + i)}T00:00:00+00:00", "change": None, "mean": value}
        for i, value in enumerate(values)
    ]


def create_mock_hass():
    """Create a mock Home Assistant instance for coordinator and entity tests."""
    hass = MagicMock()
    hass.data = {}
    hass.config = MagicMock()
    hass.config.currency = "EUR"
    hass.loop = MagicMock()
    hass.loop.call_soon_threadsafe = MagicMock()
    hass.async_add_executor_job = AsyncMock(side_effect=lambda func, *args: func(*args))
    hass.async_create_task = MagicMock()
    hass.states = MagicMock()
    hass.states.get = MagicMock(return_value=None)
    return hass


def create_mock_entry(data: dict | None = None, options: dict | None = None):
    """Create a mock config entry with plain dict data and options."""
    entry = MagicMock()
    entry.entry_id = "test_entry"
    entry.data = {
        "outdoor_temp_entity": TEMP_ID,
        "heating_energy_entity": HEATING_ID,
        "hotwater_energy_entity": HOTWATER_ID,
        **(data or {}),
    }
    entry.options = dict(options or {})
    return entry


def create_mock_state(value: str, attributes: dict | None = None):
    """Create a mock entity state."""
    state = MagicMock()
    state.state = value
    state.attributes = attributes or {}
    return state
