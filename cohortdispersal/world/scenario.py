"""Synthetic scenario — realm map, currents and cohorts for demo runs.

Real runs receive these from environmental-data and ecology collaborators.
The generators here are deterministic for a given generator so that demo
runs and tests are reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from cohortdispersal.cohorts.cohort import Cohort
from cohortdispersal.world.cell import MONTHS_PER_YEAR, Realm

if TYPE_CHECKING:
    from numpy.random import Generator

    from cohortdispersal.world.grid import ModelGrid


def synthetic_realm(
    n_lat: int,
    n_lon: int,
    rng: Generator,
    *,
    land_fraction: float = 0.3,
    num_blobs: int = 4,
) -> NDArray[np.int_]:
    """Return a realm map of blob-shaped continents on an ocean background.

    A smooth random field is built from Gaussian bumps and thresholded at the
    quantile that yields ``land_fraction`` land cells.

    Args:
        n_lat: Number of rows.
        n_lon: Number of columns.
        rng: Seeded random generator.
        land_fraction: Target fraction of terrestrial cells (0-1).
        num_blobs: Number of land-mass centres.
    """
    realm = np.full((n_lat, n_lon), int(Realm.MARINE), dtype=np.int_)
    if land_fraction <= 0.0:
        return realm
    if land_fraction >= 1.0:
        realm[:] = int(Realm.TERRESTRIAL)
        return realm

    rows, cols = np.mgrid[0:n_lat, 0:n_lon]
    height = np.zeros((n_lat, n_lon), dtype=np.float64)
    for _ in range(num_blobs):
        cy = rng.uniform(0, n_lat)
        cx = rng.uniform(0, n_lon)
        radius = rng.uniform(0.1, 0.25) * max(n_lat, n_lon)
        # Longitude distance wraps so blobs can straddle the date line
        dx = np.minimum(np.abs(cols - cx), n_lon - np.abs(cols - cx))
        dy = rows - cy
        height += np.exp(-(dx**2 + dy**2) / (2 * radius**2))

    cutoff = np.quantile(height, 1.0 - land_fraction)
    realm[height > cutoff] = int(Realm.TERRESTRIAL)
    return realm


def synthetic_currents(
    grid: ModelGrid,
    rng: Generator,
    *,
    speed: float = 0.3,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Return monthly ``(u, v)`` current fields in m/s.

    The flow is an equatorial westward jet plus a basin-scale gyre derived
    from a stream function, with a seasonal modulation of the gyre.  Land
    cells get zero velocity.

    Args:
        grid: Grid supplying extent and realm map.
        rng: Seeded random generator (sets the seasonal phase).
        speed: Peak current speed in m/s.

    Returns:
        Two ``(12, n_lat, n_lon)`` arrays.
    """
    lats = grid.latitudes() + grid.lat_cell_size / 2
    lons = grid.longitudes() + grid.lon_cell_size / 2
    lon2d, lat2d = np.meshgrid(np.radians(lons), np.radians(lats))

    jet = -speed * np.exp(-((np.degrees(lat2d) / 10.0) ** 2))
    # Gyre: psi = sin(lat) * cos(lon); u = -dpsi/dlat, v = dpsi/dlon
    gyre_u = -np.cos(lat2d) * np.cos(lon2d)
    gyre_v = -np.sin(lat2d) * np.sin(lon2d)

    phase = rng.uniform(0.0, 2.0 * np.pi)
    months = np.arange(MONTHS_PER_YEAR)
    season = 0.5 + 0.5 * np.sin(2.0 * np.pi * months / MONTHS_PER_YEAR + phase)

    u = jet[None, :, :] + 0.5 * speed * season[:, None, None] * gyre_u[None, :, :]
    v = 0.5 * speed * season[:, None, None] * gyre_v[None, :, :]

    land = grid.realm == int(Realm.TERRESTRIAL)
    u[:, land] = 0.0
    v[:, land] = 0.0
    return u, v


def seed_cohorts(
    grid: ModelGrid,
    rng: Generator,
    groups: Iterable[Mapping[str, Any]],
    *,
    cohorts_per_cell: int = 2,
) -> int:
    """Populate every active cell with cohorts of the matching realm.

    Adult masses are drawn log-uniformly from each group's ``mass_range``;
    current body mass is between 70% and 100% of adult mass so that some
    cohorts start in starvation range.

    Args:
        grid: Grid to populate.
        rng: Seeded random generator.
        groups: Group definitions with ``id``, ``realm`` and ``mass_range``.
        cohorts_per_cell: Cohorts per group per matching cell.

    Returns:
        The number of cohorts created.
    """
    next_id = 0
    parsed = [
        (int(g["id"]), Realm[str(g["realm"]).upper()], g.get("mass_range", (1.0, 1e3)))
        for g in groups
    ]
    for cell in grid.active_cells():
        for group_id, realm, (lo, hi) in parsed:
            if realm is not cell.realm:
                continue
            cohorts = cell.cohorts_in(group_id)
            for _ in range(cohorts_per_cell):
                adult = float(np.exp(rng.uniform(np.log(lo), np.log(hi))))
                cohorts.append(
                    Cohort(
                        functional_group=group_id,
                        individual_body_mass=adult * float(rng.uniform(0.7, 1.0)),
                        adult_mass=adult,
                        abundance=float(rng.uniform(1.0, 1e6)),
                        cohort_id=next_id,
                    ),
                )
                next_id += 1
    return next_id
