"""ModelGrid — the spatial container for the dispersal simulation.

The grid owns every active ``GridCell`` and the geometry of each latitude
band.  Cells are addressed by ``(lat_index, lon_index)`` with row 0 at the
southern edge, so "north" means increasing latitude index.  Cells whose
realm code is not a known ``Realm`` are inactive: they have no ``GridCell``
and are never a dispersal destination.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from cohortdispersal.world.cell import MONTHS_PER_YEAR, GridCell, Realm
from cohortdispersal.world.units import (
    length_of_degree_latitude,
    length_of_degree_longitude,
)

logger = logging.getLogger(__name__)

_GLOBE_SPAN_DEG = 359.9
_REALM_CODES = {int(r) for r in Realm}


@dataclass
class ModelGrid:
    """A regular lat/lon grid of cells.

    Attributes:
        min_lat: Southern edge in degrees.
        min_lon: Western edge in degrees.
        max_lat: Northern edge in degrees.
        max_lon: Eastern edge in degrees.
        lat_cell_size: Cell height in degrees.
        lon_cell_size: Cell width in degrees.
        realm: ``(n_lat, n_lon)`` integer realm codes; anything other than a
            ``Realm`` value marks an inactive cell.
        cells: Active cells keyed by ``(lat_index, lon_index)``.
        cell_heights_km: Cell height per latitude band.
        cell_widths_km: Cell width per latitude band.
        cell_areas_km2: Cell area per latitude band.
    """

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float
    lat_cell_size: float
    lon_cell_size: float
    realm: NDArray[np.int_]
    cells: dict[tuple[int, int], GridCell] = field(init=False, repr=False)
    cell_heights_km: NDArray[np.float64] = field(init=False, repr=False)
    cell_widths_km: NDArray[np.float64] = field(init=False, repr=False)
    cell_areas_km2: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate the extent and build cells and per-band geometry."""
        n_lat = (self.max_lat - self.min_lat) / self.lat_cell_size
        n_lon = (self.max_lon - self.min_lon) / self.lon_cell_size
        if not (_is_whole(n_lat) and _is_whole(n_lon)) or n_lat < 1 or n_lon < 1:
            msg = (
                f"extent {self.min_lat}..{self.max_lat} x "
                f"{self.min_lon}..{self.max_lon} is not a whole number of "
                f"{self.lat_cell_size} x {self.lon_cell_size} cells"
            )
            raise ValueError(msg)

        shape = (round(n_lat), round(n_lon))
        self.realm = np.asarray(self.realm, dtype=np.int_)
        if self.realm.shape != shape:
            msg = f"realm map has shape {self.realm.shape}, grid needs {shape}"
            raise ValueError(msg)

        self._build_geometry()
        self._build_cells()

        unknown = int((~np.isin(self.realm, list(_REALM_CODES))).sum())
        if unknown:
            logger.info("%d cells classified as neither land nor sea", unknown)

    @property
    def n_lat(self) -> int:
        """Number of latitude rows."""
        return int(self.realm.shape[0])

    @property
    def n_lon(self) -> int:
        """Number of longitude columns."""
        return int(self.realm.shape[1])

    @property
    def spans_globe(self) -> bool:
        """Return True if the longitude axis wraps around the globe."""
        return (self.max_lon - self.min_lon) > _GLOBE_SPAN_DEG

    def latitudes(self) -> NDArray[np.float64]:
        """Return the lower-left latitude of each row."""
        return self.min_lat + np.arange(self.n_lat) * self.lat_cell_size

    def longitudes(self) -> NDArray[np.float64]:
        """Return the lower-left longitude of each column."""
        return self.min_lon + np.arange(self.n_lon) * self.lon_cell_size

    def in_bounds(self, lat: int, lon: int) -> bool:
        """Return True if the indices fall inside the grid."""
        return 0 <= lat < self.n_lat and 0 <= lon < self.n_lon

    def is_active(self, lat: int, lon: int) -> bool:
        """Return True if ``(lat, lon)`` is an active cell."""
        return (lat, lon) in self.cells

    def cell_at(self, lat: int, lon: int) -> GridCell:
        """Return the cell at ``(lat, lon)``.

        Raises:
            IndexError: If the indices are out of bounds.
            KeyError: If the cell is inactive.
        """
        if not self.in_bounds(lat, lon):
            msg = f"({lat}, {lon}) out of bounds for {self.n_lat}x{self.n_lon}"
            raise IndexError(msg)
        try:
            return self.cells[(lat, lon)]
        except KeyError:
            msg = f"cell ({lat}, {lon}) is inactive"
            raise KeyError(msg) from None

    def realm_at(self, lat: int, lon: int) -> int:
        """Return the raw realm code at ``(lat, lon)``."""
        return int(self.realm[lat, lon])

    def active_cells(self) -> Iterator[GridCell]:
        """Yield active cells in row-major order."""
        for key in sorted(self.cells):
            yield self.cells[key]

    def linear_index(self, lat: int, lon: int) -> int:
        """Return a stable row-major index for seeding per-cell streams."""
        return lat * self.n_lon + lon

    def total_cohorts(self) -> int:
        """Return the number of cohorts held across the whole grid."""
        return sum(cell.cohort_count for cell in self.cells.values())

    def cohort_counts_by_group(self) -> Counter[int]:
        """Return the number of cohorts per functional group."""
        counts: Counter[int] = Counter()
        for cell in self.cells.values():
            for group, cohorts in cell.cohorts.items():
                counts[group] += len(cohorts)
        return counts

    def set_velocity_field(
        self,
        u: NDArray[np.float64],
        v: NDArray[np.float64],
    ) -> None:
        """Refresh the monthly current field for every active cell.

        Args:
            u: ``(12, n_lat, n_lon)`` eastward velocity in m/s.
            v: ``(12, n_lat, n_lon)`` northward velocity in m/s.
        """
        expected = (MONTHS_PER_YEAR, self.n_lat, self.n_lon)
        if u.shape != expected or v.shape != expected:
            msg = f"velocity fields must have shape {expected}"
            raise ValueError(msg)
        for (lat, lon), cell in self.cells.items():
            cell.environment.u_velocity = np.nan_to_num(u[:, lat, lon]).copy()
            cell.environment.v_velocity = np.nan_to_num(v[:, lat, lon]).copy()

    def _build_geometry(self) -> None:
        """Compute cell dimensions from the mid-latitude of each band."""
        mids = self.latitudes() + self.lat_cell_size / 2
        self.cell_heights_km = np.array(
            [length_of_degree_latitude(m) * self.lat_cell_size for m in mids],
        )
        self.cell_widths_km = np.array(
            [length_of_degree_longitude(m) * self.lon_cell_size for m in mids],
        )
        self.cell_areas_km2 = self.cell_heights_km * self.cell_widths_km

    def _build_cells(self) -> None:
        lats = self.latitudes()
        lons = self.longitudes()
        self.cells = {}
        for lat in range(self.n_lat):
            for lon in range(self.n_lon):
                code = int(self.realm[lat, lon])
                if code not in _REALM_CODES:
                    continue
                self.cells[(lat, lon)] = GridCell(
                    lat_index=lat,
                    lon_index=lon,
                    latitude=float(lats[lat]),
                    longitude=float(lons[lon]),
                    realm=Realm(code),
                    height_km=float(self.cell_heights_km[lat]),
                    width_km=float(self.cell_widths_km[lat]),
                    area_km2=float(self.cell_areas_km2[lat]),
                )


def _is_whole(value: float) -> bool:
    return abs(value - round(value)) < 1e-9
