"""GridCell — a single lat/lon cell of the model grid.

Each cell holds its realm, fixed geometry, the environmental fields that
dispersal reads, and the per-functional-group cohort collections that the
cross-cell applier mutates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from cohortdispersal.cohorts.cohort import Cohort

MONTHS_PER_YEAR = 12


class Realm(IntEnum):
    """Ecological realm of a cell; dispersal never crosses realms."""

    TERRESTRIAL = 1
    MARINE = 2


def _monthly_zeros() -> NDArray[np.float64]:
    return np.zeros(MONTHS_PER_YEAR, dtype=np.float64)


@dataclass
class CellEnvironment:
    """Environmental fields consumed by dispersal.

    Attributes:
        u_velocity: Eastward current velocity per month (m/s).
        v_velocity: Northward current velocity per month (m/s).
    """

    u_velocity: NDArray[np.float64] = field(default_factory=_monthly_zeros)
    v_velocity: NDArray[np.float64] = field(default_factory=_monthly_zeros)

    def velocity(self, month: int) -> tuple[float, float]:
        """Return the ``(u, v)`` current for a month index (0-11)."""
        m = month % MONTHS_PER_YEAR
        return float(self.u_velocity[m]), float(self.v_velocity[m])


@dataclass
class GridCell:
    """A single active cell in the model grid.

    Attributes:
        lat_index: Row index (0 = southern-most row).
        lon_index: Column index (0 = western-most column).
        latitude: Latitude of the lower-left corner in degrees.
        longitude: Longitude of the lower-left corner in degrees.
        realm: Terrestrial or marine.
        height_km: North-south extent of the cell.
        width_km: East-west extent of the cell.
        area_km2: Cell area.
        environment: Environmental fields read by dispersal.
        cohorts: Ordered cohort collections keyed by functional group.
    """

    lat_index: int
    lon_index: int
    latitude: float
    longitude: float
    realm: Realm
    height_km: float
    width_km: float
    area_km2: float
    environment: CellEnvironment = field(default_factory=CellEnvironment)
    cohorts: dict[int, list[Cohort]] = field(default_factory=dict, repr=False)

    @property
    def index(self) -> tuple[int, int]:
        """Return the ``(lat_index, lon_index)`` pair identifying this cell."""
        return (self.lat_index, self.lon_index)

    @property
    def cohort_count(self) -> int:
        """Return the number of cohorts across all functional groups."""
        return sum(len(group) for group in self.cohorts.values())

    def cohorts_in(self, functional_group: int) -> list[Cohort]:
        """Return the cohort list for a functional group, creating it if absent."""
        return self.cohorts.setdefault(functional_group, [])
