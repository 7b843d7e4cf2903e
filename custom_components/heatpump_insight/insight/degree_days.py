"""Heating-degree-day scatter points.

Joins the daily energy map with the daily temperature map and converts each
day's mean outdoor temperature into heating degree days:

    HDD = max(0, heating_limit - mean_temp)
"""

from datetime import datetime

from homeassistant.util import dt as dt_util

from ..utils.time_utils import start_of_day, today_key, yesterday_key
from .types import DailyMap, Point, RawPoint, YesterdayMeta


def heating_degree_days(mean_temp: float, heating_limit: float) -> float:
    """Heating degree days of a day with the given mean temperature."""
    return max(0.0, heating_limit - mean_temp)


def build_raw_points(
    energy_map: DailyMap,
    temperature_map: DailyMap,
    heating_limit: float,
    filter_start: datetime | None,
    mark_yesterday: bool,
    exclude_zero_hdd: bool = False,
    now: datetime | None = None,
) -> list[RawPoint]:
    """Build (HDD, energy) points for every day with energy and temperature.

    Today's incomplete day is never included. Yesterday is exempt from the
    filter_start bound when mark_yesterday is set.

    Args:
        energy_map: Daily energy (kWh) by day key
        temperature_map: Daily mean outdoor temperature by day key
        heating_limit: Mean temperature above which no heating is needed (°C)
        filter_start: Earliest day to include (local midnight >= filter_start)
        mark_yesterday: Flag yesterday's point as protected
        exclude_zero_hdd: Drop days without heating demand
        now: Reference time for today/yesterday (defaults to now)

    Returns:
        Points in energy map order
    """
    if now is None:
        now = dt_util.now()
    today = today_key(now)
    yesterday = yesterday_key(now)

    points: list[RawPoint] = []
    for date_str, energy in energy_map.items():
        if date_str == today:
            continue
        temp = temperature_map.get(date_str)
        if temp is None:
            continue

        hdd = heating_degree_days(temp, heating_limit)
        if exclude_zero_hdd and hdd <= 0:
            continue

        is_yesterday = mark_yesterday and date_str == yesterday
        if is_yesterday or filter_start is None or start_of_day(date_str) >= filter_start:
            points.append(RawPoint(x=hdd, y=energy, date_str=date_str, is_yesterday=is_yesterday))

    return points


def extract_yesterday(
    clean_points: list[RawPoint],
) -> tuple[list[Point], Point | None, YesterdayMeta | None]:
    """Separate yesterday's point from the other clean points."""
    points: list[Point] = []
    yesterday_point: Point | None = None
    yesterday_meta: YesterdayMeta | None = None

    for point in clean_points:
        if point.is_yesterday:
            yesterday_point = point.as_point()
            yesterday_meta = YesterdayMeta(
                date=point.date_str,
                energy=point.y,
                hdd=point.x,
                efficiency=point.y / point.x if point.x > 0 else 0.0,
            )
        else:
            points.append(point.as_point())

    return points, yesterday_point, yesterday_meta
