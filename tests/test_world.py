"""Tests for cohortdispersal.world — units, cells, grid and scenario helpers."""

import numpy as np
import pytest
from numpy.random import Generator

from cohortdispersal.cohorts.cohort import Cohort
from cohortdispersal.world.cell import CellEnvironment, Realm
from cohortdispersal.world.grid import ModelGrid
from cohortdispersal.world.scenario import (
    seed_cohorts,
    synthetic_currents,
    synthetic_realm,
)
from cohortdispersal.world.units import (
    convert_time_units,
    length_of_degree_latitude,
    length_of_degree_longitude,
)


class TestUnits:
    """Tests for calendar conversion and degree lengths."""

    def test_month_in_days(self) -> None:
        assert convert_time_units("month", "day") == 30.0

    def test_year_in_months(self) -> None:
        assert convert_time_units("year", "month") == 12.0

    def test_month_in_hours(self) -> None:
        assert convert_time_units("month", "hour") == 720.0

    def test_case_insensitive(self) -> None:
        assert convert_time_units("Month", "DAY") == 30.0

    def test_unknown_unit_raises(self) -> None:
        with pytest.raises(ValueError, match="fortnight"):
            convert_time_units("fortnight", "day")

    def test_degree_lengths_at_equator(self) -> None:
        assert length_of_degree_latitude(0.0) == pytest.approx(110.574, abs=1e-3)
        assert length_of_degree_longitude(0.0) == pytest.approx(111.319, abs=1e-3)

    def test_longitude_shrinks_towards_pole(self) -> None:
        assert length_of_degree_longitude(60.0) < length_of_degree_longitude(0.0) / 1.9
        assert length_of_degree_longitude(90.0) == pytest.approx(0.0, abs=1e-6)


class TestCell:
    """Tests for GridCell and CellEnvironment."""

    def test_environment_defaults_to_still_water(self) -> None:
        env = CellEnvironment()
        assert env.velocity(0) == (0.0, 0.0)
        assert env.velocity(11) == (0.0, 0.0)

    def test_velocity_month_wraps(self) -> None:
        env = CellEnvironment(
            u_velocity=np.arange(12, dtype=np.float64),
            v_velocity=-np.arange(12, dtype=np.float64),
        )
        assert env.velocity(3) == (3.0, -3.0)
        assert env.velocity(13) == (1.0, -1.0)

    def test_cohorts_in_creates_group(self, land_grid: ModelGrid) -> None:
        cell = land_grid.cell_at(1, 1)
        assert cell.cohort_count == 0
        cell.cohorts_in(4).append(Cohort(4, 1.0, 2.0, 10.0))
        assert 4 in cell.cohorts
        assert cell.cohort_count == 1

    def test_index(self, land_grid: ModelGrid) -> None:
        assert land_grid.cell_at(3, 1).index == (3, 1)


class TestModelGrid:
    """Tests for grid construction and lookup."""

    def test_dimensions(self, land_grid: ModelGrid) -> None:
        assert land_grid.n_lat == 5
        assert land_grid.n_lon == 5
        assert len(land_grid.cells) == 25

    def test_non_whole_extent_raises(self) -> None:
        with pytest.raises(ValueError, match="whole number"):
            ModelGrid(0.0, 0.0, 5.0, 5.0, 0.7, 1.0, np.ones((7, 5), dtype=int))

    def test_shape_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="shape"):
            ModelGrid(0.0, 0.0, 5.0, 5.0, 1.0, 1.0, np.ones((4, 5), dtype=int))

    def test_spans_globe(self, land_grid: ModelGrid, global_grid: ModelGrid) -> None:
        assert global_grid.spans_globe
        assert not land_grid.spans_globe

    def test_row_zero_is_south(self, global_grid: ModelGrid) -> None:
        assert global_grid.cell_at(0, 0).latitude == -15.0
        assert global_grid.cell_at(2, 0).latitude == 5.0
        assert global_grid.cell_at(0, 35).longitude == 170.0

    def test_inactive_cells(self, island_grid: ModelGrid) -> None:
        assert not island_grid.is_active(0, 0)
        assert island_grid.is_active(2, 2)
        assert island_grid.realm_at(0, 0) == 0
        with pytest.raises(KeyError):
            island_grid.cell_at(0, 0)

    def test_cell_at_out_of_bounds(self, land_grid: ModelGrid) -> None:
        with pytest.raises(IndexError):
            land_grid.cell_at(5, 0)

    def test_realm_assignment(self, island_grid: ModelGrid) -> None:
        assert island_grid.cell_at(2, 2).realm is Realm.TERRESTRIAL
        assert island_grid.cell_at(1, 1).realm is Realm.MARINE

    def test_area_is_height_times_width(self, global_grid: ModelGrid) -> None:
        for cell in global_grid.cells.values():
            assert cell.area_km2 == pytest.approx(cell.height_km * cell.width_km)

    def test_equatorial_band_is_widest(self, global_grid: ModelGrid) -> None:
        assert global_grid.cell_at(1, 0).width_km > global_grid.cell_at(0, 0).width_km
        assert global_grid.cell_at(0, 0).width_km == pytest.approx(
            global_grid.cell_at(2, 0).width_km,
        )

    def test_active_cells_row_major(self, island_grid: ModelGrid) -> None:
        order = [cell.index for cell in island_grid.active_cells()]
        assert order == sorted(order)
        assert len(order) == 24
        assert order[0] == (0, 1)

    def test_linear_index_unique(self, global_grid: ModelGrid) -> None:
        indices = {global_grid.linear_index(*idx) for idx in global_grid.cells}
        assert len(indices) == len(global_grid.cells)

    def test_set_velocity_field(self, land_grid: ModelGrid) -> None:
        u = np.ones((12, 5, 5))
        v = np.full((12, 5, 5), -2.0)
        u[6, 2, 3] = np.nan
        land_grid.set_velocity_field(u, v)
        assert land_grid.cell_at(2, 3).environment.velocity(0) == (1.0, -2.0)
        assert land_grid.cell_at(2, 3).environment.velocity(6) == (0.0, -2.0)

    def test_set_velocity_field_wrong_shape(self, land_grid: ModelGrid) -> None:
        with pytest.raises(ValueError, match="shape"):
            land_grid.set_velocity_field(np.zeros((12, 5, 4)), np.zeros((12, 5, 4)))

    def test_cohort_counts(self, land_grid: ModelGrid) -> None:
        land_grid.cell_at(0, 0).cohorts_in(1).append(Cohort(1, 1.0, 1.0, 1.0))
        land_grid.cell_at(4, 4).cohorts_in(1).append(Cohort(1, 1.0, 1.0, 1.0))
        land_grid.cell_at(4, 4).cohorts_in(3).append(Cohort(3, 1.0, 1.0, 1.0))
        assert land_grid.total_cohorts() == 3
        assert land_grid.cohort_counts_by_group() == {1: 2, 3: 1}


class TestScenario:
    """Tests for the synthetic demo world."""

    def test_realm_land_fraction(self, rng: Generator) -> None:
        realm = synthetic_realm(20, 40, rng, land_fraction=0.3)
        land = (realm == int(Realm.TERRESTRIAL)).mean()
        assert 0.25 <= land <= 0.35

    def test_realm_all_ocean(self, rng: Generator) -> None:
        realm = synthetic_realm(4, 4, rng, land_fraction=0.0)
        assert np.all(realm == int(Realm.MARINE))

    def test_realm_is_deterministic(self) -> None:
        a = synthetic_realm(10, 10, np.random.default_rng(3))
        b = synthetic_realm(10, 10, np.random.default_rng(3))
        assert np.array_equal(a, b)

    def test_currents_zero_on_land(
        self,
        island_grid: ModelGrid,
        rng: Generator,
    ) -> None:
        u, v = synthetic_currents(island_grid, rng, speed=0.5)
        assert u.shape == (12, 5, 5)
        assert np.all(u[:, 2, 2] == 0.0)
        assert np.all(v[:, 2, 2] == 0.0)
        assert np.abs(u).max() <= 0.5 * 1.5 + 1e-9

    def test_seed_cohorts_respects_realm(
        self,
        island_grid: ModelGrid,
        rng: Generator,
    ) -> None:
        groups = [
            {"id": 0, "realm": "marine", "mass_range": [0.001, 0.01]},
            {"id": 2, "realm": "terrestrial", "mass_range": [10.0, 100.0]},
        ]
        created = seed_cohorts(island_grid, rng, groups, cohorts_per_cell=2)
        assert created == 23 * 2 + 2
        assert island_grid.cell_at(2, 2).cohorts.keys() == {2}
        assert island_grid.cell_at(1, 1).cohorts.keys() == {0}
        for cohort in island_grid.cell_at(2, 2).cohorts[2]:
            assert 10.0 <= cohort.adult_mass <= 100.0
            assert 0.7 <= cohort.proportional_mass <= 1.0
