"""Shared fixtures for the cohortdispersal test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import numpy as np
import pytest
from numpy.random import Generator

from cohortdispersal.dispersal.base import DispersalContext
from cohortdispersal.simulation.config import SimulationConfig
from cohortdispersal.world.cell import Realm
from cohortdispersal.world.grid import ModelGrid
from cohortdispersal.world.topology import CellIndex, GridTopology

TERRESTRIAL = int(Realm.TERRESTRIAL)
MARINE = int(Realm.MARINE)


class ScriptedGenerator:
    """Replays fixed uniform and normal draws in place of a numpy Generator.

    Used where a test must land a draw in an exact probability bucket.
    """

    def __init__(
        self,
        uniforms: Iterable[float] = (),
        normals: Iterable[float] = (),
    ) -> None:
        self.uniforms = list(uniforms)
        self.normals = list(normals)

    def random(self) -> float:
        return self.uniforms.pop(0)

    def normal(self) -> float:
        return self.normals.pop(0)

    def integers(self, high: int) -> int:
        return int(self.uniforms.pop(0) * high)


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def scripted() -> type[ScriptedGenerator]:
    """Factory for generators that return pre-set draws."""
    return ScriptedGenerator


@pytest.fixture
def land_grid() -> ModelGrid:
    """A 5x5 all-terrestrial grid of 1-degree cells that does not wrap."""
    return ModelGrid(
        min_lat=0.0,
        min_lon=0.0,
        max_lat=5.0,
        max_lon=5.0,
        lat_cell_size=1.0,
        lon_cell_size=1.0,
        realm=np.full((5, 5), TERRESTRIAL),
    )


@pytest.fixture
def global_grid() -> ModelGrid:
    """A 3x36 all-marine grid of 10-degree cells spanning the globe."""
    return ModelGrid(
        min_lat=-15.0,
        min_lon=-180.0,
        max_lat=15.0,
        max_lon=180.0,
        lat_cell_size=10.0,
        lon_cell_size=10.0,
        realm=np.full((3, 36), MARINE),
    )


@pytest.fixture
def island_grid() -> ModelGrid:
    """A 5x5 marine grid with a one-cell island at (2, 2) and a hole at (0, 0)."""
    realm = np.full((5, 5), MARINE)
    realm[2, 2] = TERRESTRIAL
    realm[0, 0] = 0
    return ModelGrid(
        min_lat=0.0,
        min_lon=0.0,
        max_lat=5.0,
        max_lon=5.0,
        lat_cell_size=1.0,
        lon_cell_size=1.0,
        realm=realm,
    )


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def small_config() -> SimulationConfig:
    """A 4x36 world with one cohort per group per cell, for fast engine runs."""
    return SimulationConfig(
        seed=7,
        min_lat=-20.0,
        max_lat=20.0,
        min_lon=-180.0,
        max_lon=180.0,
        cell_size_deg=10.0,
        cohorts_per_cell=1,
    )


@pytest.fixture
def make_context() -> Callable[..., DispersalContext]:
    """Build a DispersalContext for one cell of a grid."""

    def _make(
        grid: ModelGrid,
        cell: CellIndex,
        rng: object,
        month: int = 0,
    ) -> DispersalContext:
        return DispersalContext(
            grid=grid,
            topology=GridTopology.build(grid),
            cell=grid.cells[cell],
            month=month,
            rng=rng,  # type: ignore[arg-type]
        )

    return _make

