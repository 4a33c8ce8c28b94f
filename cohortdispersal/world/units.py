"""Units — time-unit conversion and cell geometry helpers.

The model runs on a 360-day calendar (twelve 30-day months), so every
conversion between calendar units is an exact ratio.
"""

from __future__ import annotations

import math

_SECONDS_PER: dict[str, float] = {
    "second": 1.0,
    "hour": 3600.0,
    "day": 86400.0,
    "week": 7 * 86400.0,
    "month": 30 * 86400.0,
    "year": 360 * 86400.0,
}


def _seconds(unit: str) -> float:
    try:
        return _SECONDS_PER[unit.lower()]
    except KeyError:
        msg = f"unknown time unit {unit!r}; expected one of {sorted(_SECONDS_PER)}"
        raise ValueError(msg) from None


def convert_time_units(from_unit: str, to_unit: str) -> float:
    """Return how many ``to_unit`` fit into one ``from_unit``.

    Args:
        from_unit: The unit being converted (e.g. the model time step).
        to_unit: The unit to express it in.

    Returns:
        The conversion factor, e.g. ``convert_time_units("month", "day")``
        is ``30.0``.

    Raises:
        ValueError: If either unit is not recognised.
    """
    return _seconds(from_unit) / _seconds(to_unit)


def length_of_degree_latitude(latitude: float) -> float:
    """Return the length in km of one degree of latitude at ``latitude``."""
    phi = math.radians(latitude)
    metres = (
        111132.92
        - 559.82 * math.cos(2 * phi)
        + 1.175 * math.cos(4 * phi)
        - 0.0023 * math.cos(6 * phi)
    )
    return metres / 1000.0


def length_of_degree_longitude(latitude: float) -> float:
    """Return the length in km of one degree of longitude at ``latitude``."""
    phi = math.radians(latitude)
    metres = (
        111412.84 * math.cos(phi)
        - 93.5 * math.cos(3 * phi)
        + 0.118 * math.cos(5 * phi)
    )
    return metres / 1000.0
