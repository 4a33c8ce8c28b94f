"""SimulationEngine — the main dispersal step loop.

Owns the grid, the adjacency table and the move buffer, and advances them
in the canonical order for every outer model step:

1. Decision phase: for every active cell (optionally in parallel), every
   cohort is handed to its dispersal strategy and any move is appended to
   that cell's buffer list.  Cells read shared state only and write only to
   their own list, using their own generator.
2. Barrier: all decisions finish before anything is mutated.
3. Apply phase: the cross-cell applier relocates the buffered cohorts.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import InitVar, dataclass, field, fields, replace

import numpy as np
from numpy.random import Generator

from cohortdispersal.dispersal.base import DispersalContext
from cohortdispersal.dispersal.outcome import Moved
from cohortdispersal.dispersal.selector import DispersalSelector
from cohortdispersal.movement.applier import CrossCellApplier, DispersalTally
from cohortdispersal.movement.buffer import MoveBuffer, MoveRecord
from cohortdispersal.simulation.config import SimulationConfig
from cohortdispersal.world.cell import MONTHS_PER_YEAR, GridCell
from cohortdispersal.world.grid import ModelGrid
from cohortdispersal.world.scenario import (
    seed_cohorts,
    synthetic_currents,
    synthetic_realm,
)
from cohortdispersal.world.topology import CellIndex, GridTopology
from cohortdispersal.world.units import convert_time_units

logger = logging.getLogger(__name__)


@dataclass
class SimulationEngine:
    """Drives dispersal forward one outer time step at a time.

    Attributes:
        config: Loaded simulation configuration.
        initial_grid: Grid to run on instead of building one from config.
        grid: The model grid.
        topology: Adjacency table for ``grid``.
        selector: Chooses a dispersal strategy per cohort.
        buffer: Moves decided in the current step.
        applier: Applies buffered moves after the decision phase.
        tally: Per-direction move counts for the last step, if tracking.
        cell_rngs: One generator per active cell.
        time_step: Number of completed steps.
        dispersal_count: Total cohorts moved since the start.
        last_moves: Cohorts moved in the most recent step.
    """

    config: SimulationConfig
    initial_grid: InitVar[ModelGrid | None] = None
    grid: ModelGrid = field(init=False)
    topology: GridTopology = field(init=False)
    selector: DispersalSelector = field(init=False)
    buffer: MoveBuffer = field(init=False)
    applier: CrossCellApplier = field(init=False, default_factory=CrossCellApplier)
    tally: DispersalTally | None = field(init=False, default=None)
    cell_rngs: dict[CellIndex, Generator] = field(init=False, repr=False)
    time_step: int = 0
    dispersal_count: int = 0
    last_moves: int = 0

    def __post_init__(self, initial_grid: ModelGrid | None) -> None:
        """Build grid, topology, strategies, buffer and per-cell generators."""
        self.grid = initial_grid if initial_grid is not None else self._build_grid()

        self.topology = GridTopology.build(self.grid)
        self.selector = DispersalSelector(
            mode=self.config.dispersal_mode,
            time_step_unit=self.config.time_step_unit,
            plankton_threshold_g=self.config.plankton_threshold_g,
        )
        self._apply_dispersal_config()
        self.buffer = MoveBuffer.for_cells(self.grid.cells)
        if self.config.track_dispersal:
            self.tally = DispersalTally(self.grid.n_lat, self.grid.n_lon)

        self.cell_rngs = {
            (lat, lon): np.random.default_rng(
                [self.config.seed, self.grid.linear_index(lat, lon)],
            )
            for (lat, lon) in self.grid.cells
        }

        logger.info(
            "grid %dx%d with %d active cells, %d cohorts",
            self.grid.n_lat,
            self.grid.n_lon,
            len(self.grid.cells),
            self.grid.total_cohorts(),
        )
        for strategy in self.selector.strategies():
            logger.info(
                "%s dispersal parameters: %s",
                strategy.name,
                strategy.parameters(),
            )

    @property
    def current_month(self) -> int:
        """Month index (0-11) of the step about to run."""
        months = convert_time_units(self.config.time_step_unit, "month")
        return int(self.time_step * months + 1e-9) % MONTHS_PER_YEAR

    def step(self) -> int:
        """Advance the simulation by one outer time step.

        Returns:
            The number of cohorts moved this step.
        """
        month = self.current_month
        cells = list(self.grid.active_cells())

        # 1. Decision phase
        if self.config.workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                futures = [executor.submit(self._decide_cell, c, month) for c in cells]
                # 2. Barrier; result() re-raises any failure from a worker
                for future in futures:
                    future.result()
        else:
            for cell in cells:
                self._decide_cell(cell, month)

        # 3. Apply phase
        if self.tally is not None:
            self.tally.reset()
        moved = self.applier.apply(self.grid, self.buffer, self.tally)

        self.time_step += 1
        self.last_moves = moved
        self.dispersal_count += moved
        logger.debug(
            "step %d (month %d): %d cohorts dispersed",
            self.time_step,
            month,
            moved,
        )
        return moved

    def run(self, steps: int) -> None:
        """Run the simulation for a fixed number of steps.

        Args:
            steps: Number of steps to advance.
        """
        for _ in range(steps):
            self.step()

    def _decide_cell(self, cell: GridCell, month: int) -> None:
        """Decide dispersal for every cohort in one cell."""
        context = DispersalContext(
            grid=self.grid,
            topology=self.topology,
            cell=cell,
            month=month,
            rng=self.cell_rngs[cell.index],
        )
        for group in sorted(cell.cohorts):
            for position, cohort in enumerate(cell.cohorts[group]):
                strategy = self.selector.strategy_for(cell, cohort)
                outcome = strategy.decide(context, cohort)
                if isinstance(outcome, Moved):
                    self.buffer.append(
                        MoveRecord(
                            source=cell.index,
                            functional_group=group,
                            position=position,
                            destination=outcome.destination,
                            direction=outcome.direction,
                        ),
                    )

    def _build_grid(self) -> ModelGrid:
        """Create a synthetic grid, current field and population from config."""
        cfg = self.config
        rng = np.random.default_rng(cfg.seed)
        n_lat = round((cfg.max_lat - cfg.min_lat) / cfg.cell_size_deg)
        n_lon = round((cfg.max_lon - cfg.min_lon) / cfg.cell_size_deg)
        realm = synthetic_realm(n_lat, n_lon, rng, land_fraction=cfg.land_fraction)
        grid = ModelGrid(
            min_lat=cfg.min_lat,
            min_lon=cfg.min_lon,
            max_lat=cfg.max_lat,
            max_lon=cfg.max_lon,
            lat_cell_size=cfg.cell_size_deg,
            lon_cell_size=cfg.cell_size_deg,
            realm=realm,
        )
        u, v = synthetic_currents(grid, rng, speed=cfg.current_speed)
        grid.set_velocity_field(u, v)
        seed_cohorts(
            grid,
            rng,
            cfg.functional_groups,
            cohorts_per_cell=cfg.cohorts_per_cell,
        )
        return grid

    def _apply_dispersal_config(self) -> None:
        """Apply per-model constant overrides from config.

        Each overridden strategy is rebuilt so its own validation runs on
        the new values; an invalid combination raises ``ValueError``.
        """
        for name, overrides in self.config.dispersal_defaults.items():
            strategy = self.selector.by_name(name)
            if strategy is None:
                logger.debug("ignoring overrides for unknown dispersal model %r", name)
                continue
            settable = {f.name for f in fields(strategy) if f.init}
            known: dict[str, object] = {}
            for key, value in overrides.items():
                if key not in settable:
                    logger.debug("ignoring unknown %s parameter %r", name, key)
                    continue
                known[key] = value
            setattr(self.selector, name, replace(strategy, **known))
