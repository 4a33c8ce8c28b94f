"""Advective dispersal — passive drift with ocean currents.

Each outer model step is divided into 18-hour advection sub-steps.  In every
sub-step the cohort's working cell is displaced by the local current plus a
Gaussian diffusive kick, and the shared kernel decides whether the working
cell changes.  Only the net displacement over the outer step is reported,
so a cohort that drifts away and back again does not move at all.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cohortdispersal.dispersal.kernel import DispersalKernel, DispersalProbability
from cohortdispersal.dispersal.outcome import Moved, Stayed
from cohortdispersal.world.units import convert_time_units

if TYPE_CHECKING:
    from numpy.random import Generator

    from cohortdispersal.cohorts.cohort import Cohort
    from cohortdispersal.dispersal.base import DispersalContext
    from cohortdispersal.dispersal.outcome import DispersalOutcome
    from cohortdispersal.world.cell import GridCell

_SUBSTEP_HOURS = 18.0
_HORIZONTAL_DIFFUSIVITY = 100.0  # m²/s


@dataclass
class AdvectiveDispersal:
    """Current-driven dispersal with sub-stepping.

    Attributes:
        time_step_unit: Unit of one outer model time step.
        substep_hours: Length of one advection sub-step in hours.
        diffusivity_m2_per_s: Horizontal diffusivity; 0 disables the random
            diffusive component.
        kernel: Shared probability kernel.
    """

    time_step_unit: str = "month"
    substep_hours: float = _SUBSTEP_HOURS
    diffusivity_m2_per_s: float = _HORIZONTAL_DIFFUSIVITY
    kernel: DispersalKernel = field(default_factory=DispersalKernel)
    name: str = field(default="advective", init=False)

    @property
    def substeps_per_step(self) -> float:
        """Number of advection sub-steps in one outer model step."""
        return convert_time_units(self.time_step_unit, "hour") / self.substep_hours

    @property
    def substep_count(self) -> int:
        """Whole number of sub-steps actually iterated per outer step."""
        return math.ceil(self.substeps_per_step - 1e-9)

    @property
    def diffusivity_km2_per_substep(self) -> float:
        """Horizontal diffusivity in km² per sub-step."""
        return self.diffusivity_m2_per_s / 1e6 * 3600.0 * self.substep_hours

    def velocity_to_km_per_substep(self, speed: float) -> float:
        """Convert a current speed in m/s to km travelled in one sub-step."""
        return speed * 3600.0 * self.substep_hours / 1000.0

    def diffusion(self, rng: Generator) -> tuple[float, float]:
        """Draw the random ``(u, v)`` diffusive displacement in km."""
        if self.diffusivity_m2_per_s <= 0.0:
            return 0.0, 0.0
        scale = math.sqrt(2.0 * self.diffusivity_km2_per_substep)
        return float(rng.normal()) * scale, float(rng.normal()) * scale

    def substep_probability(
        self,
        cell: GridCell,
        month: int,
        rng: Generator,
    ) -> DispersalProbability:
        """Return the kernel output for one sub-step spent in ``cell``."""
        u_speed, v_speed = cell.environment.velocity(month)
        u_diff, v_diff = self.diffusion(rng)
        u = self.velocity_to_km_per_substep(u_speed) + u_diff
        v = self.velocity_to_km_per_substep(v_speed) + v_diff
        return self.kernel.probability(
            u,
            v,
            cell.height_km,
            cell.width_km,
            cell.area_km2,
        )

    def decide(self, context: DispersalContext, cohort: Cohort) -> DispersalOutcome:
        """Drift the cohort through every sub-step and report the net move."""
        origin = context.cell.index
        working = context.cell
        for _ in range(self.substep_count):
            probabilities = self.substep_probability(
                working,
                context.month,
                context.rng,
            )
            outcome = self.kernel.attempt(
                context.topology,
                working.index,
                probabilities,
                context.rng,
            )
            if isinstance(outcome, Moved):
                working = context.grid.cells[outcome.destination]

        if working.index == origin:
            return Stayed()
        return Moved(
            working.index,
            context.topology.direction_between(origin, working.index),
        )

    def parameters(self) -> dict[str, float | str]:
        """Return the model's parameter values for logging."""
        return {
            "time_step_unit": self.time_step_unit,
            "horizontal_diffusivity_m2_per_s": self.diffusivity_m2_per_s,
            "substeps_per_step": self.substeps_per_step,
            "velocity_km_per_substep_per_m_s": self.velocity_to_km_per_substep(1.0),
        }
