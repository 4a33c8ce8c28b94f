"""Diffusive dispersal — allometric random-walk movement.

A cohort moves a distance that scales with individual body mass
(``speed_scalar * mass ** speed_exponent`` km per month) in a direction
drawn uniformly from [0, 2π).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cohortdispersal.dispersal.kernel import DispersalKernel, DispersalProbability
from cohortdispersal.world.units import convert_time_units

if TYPE_CHECKING:
    from numpy.random import Generator

    from cohortdispersal.cohorts.cohort import Cohort
    from cohortdispersal.dispersal.base import DispersalContext
    from cohortdispersal.dispersal.outcome import DispersalOutcome
    from cohortdispersal.world.cell import GridCell

_SPEED_BODY_MASS_SCALAR = 0.0278
_SPEED_BODY_MASS_EXPONENT = 0.48


def allometric_speed(body_mass: float, scalar: float, exponent: float) -> float:
    """Return the dispersal distance in km per month for a body mass in g."""
    return scalar * body_mass**exponent


def random_direction_probability(
    kernel: DispersalKernel,
    cell: GridCell,
    distance: float,
    rng: Generator,
) -> DispersalProbability:
    """Split ``distance`` along a uniformly random heading and run the kernel."""
    heading = float(rng.random()) * 2.0 * math.pi
    u = distance * math.cos(heading)
    v = distance * math.sin(heading)
    return kernel.probability(u, v, cell.height_km, cell.width_km, cell.area_km2)


@dataclass
class DiffusiveDispersal:
    """Random-direction dispersal with body-mass dependent distance.

    Attributes:
        time_step_unit: Unit of one outer model time step.
        speed_scalar: Allometric scalar (km per month per g^exponent).
        speed_exponent: Allometric exponent.
        kernel: Shared probability kernel.
    """

    time_step_unit: str = "month"
    speed_scalar: float = _SPEED_BODY_MASS_SCALAR
    speed_exponent: float = _SPEED_BODY_MASS_EXPONENT
    kernel: DispersalKernel = field(default_factory=DispersalKernel)
    name: str = field(default="diffusive", init=False)

    @property
    def months_per_step(self) -> float:
        """Number of months in one model time step."""
        return convert_time_units(self.time_step_unit, "month")

    def decide(self, context: DispersalContext, cohort: Cohort) -> DispersalOutcome:
        """Attempt one random-direction move for ``cohort``."""
        distance = (
            allometric_speed(
                cohort.individual_body_mass,
                self.speed_scalar,
                self.speed_exponent,
            )
            * self.months_per_step
        )
        probabilities = random_direction_probability(
            self.kernel,
            context.cell,
            distance,
            context.rng,
        )
        return self.kernel.attempt(
            context.topology,
            context.cell.index,
            probabilities,
            context.rng,
        )

    def parameters(self) -> dict[str, float | str]:
        """Return the model's parameter values for logging."""
        return {
            "time_step_unit": self.time_step_unit,
            "speed_scalar": self.speed_scalar,
            "speed_exponent": self.speed_exponent,
        }
