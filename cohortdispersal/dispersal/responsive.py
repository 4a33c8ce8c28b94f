"""Responsive dispersal — movement triggered by starvation or low density.

Each step a cohort is checked against two triggers in turn:

1. **Starvation**: once body mass falls below ``starvation_onset_fraction``
   of adult mass the cohort attempts to disperse with a probability that
   rises linearly to certainty at ``starvation_critical_fraction``.
2. **Density**: if starvation did not trigger and the cohort's density
   (abundance per km²) is below ``density_threshold_scaling / adult_mass``,
   the cohort attempts to disperse.

Both attempts use the allometric distance of an adult and a random heading.
As soon as a trigger fires the cohort has used its attempt for the step,
whether or not the probability test then succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cohortdispersal.dispersal.diffusive import (
    allometric_speed,
    random_direction_probability,
)
from cohortdispersal.dispersal.kernel import DispersalKernel
from cohortdispersal.dispersal.outcome import NotAttempted
from cohortdispersal.world.units import convert_time_units

if TYPE_CHECKING:
    from cohortdispersal.cohorts.cohort import Cohort
    from cohortdispersal.dispersal.base import DispersalContext
    from cohortdispersal.dispersal.outcome import DispersalOutcome


@dataclass
class ResponsiveDispersal:
    """Condition-triggered dispersal.

    Attributes:
        time_step_unit: Unit of one outer model time step.
        density_threshold_scaling: Density threshold numerator; the threshold
            is this divided by adult mass (individuals per km²).
        starvation_onset_fraction: Proportional body mass below which
            starvation-driven attempts begin.
        starvation_critical_fraction: Proportional body mass below which a
            cohort always attempts to disperse.
        speed_scalar: Allometric scalar (km per month per g^exponent).
        speed_exponent: Allometric exponent.
        kernel: Shared probability kernel.
    """

    time_step_unit: str = "month"
    density_threshold_scaling: float = 50000.0
    starvation_onset_fraction: float = 1.0
    starvation_critical_fraction: float = 0.8
    speed_scalar: float = 0.0278
    speed_exponent: float = 0.48
    kernel: DispersalKernel = field(default_factory=DispersalKernel)
    name: str = field(default="responsive", init=False)

    def __post_init__(self) -> None:
        critical = self.starvation_critical_fraction
        if not 0.0 <= critical < self.starvation_onset_fraction:
            msg = (
                "starvation thresholds must satisfy 0 <= critical < onset, got "
                f"critical={self.starvation_critical_fraction}, "
                f"onset={self.starvation_onset_fraction}"
            )
            raise ValueError(msg)

    def decide(self, context: DispersalContext, cohort: Cohort) -> DispersalOutcome:
        """Check the starvation trigger, then the density trigger."""
        chance = self.starvation_probability(cohort)
        if chance >= 1.0 or (chance > 0.0 and chance > float(context.rng.random())):
            return self._attempt(context, cohort)
        if self.density_triggered(cohort, context.cell.area_km2):
            return self._attempt(context, cohort)
        return NotAttempted()

    def starvation_probability(self, cohort: Cohort) -> float:
        """Return the chance that starvation prompts an attempt this step."""
        proportion = cohort.proportional_mass
        if proportion >= self.starvation_onset_fraction:
            return 0.0
        if proportion < self.starvation_critical_fraction:
            return 1.0
        return (self.starvation_onset_fraction - proportion) / (
            self.starvation_onset_fraction - self.starvation_critical_fraction
        )

    def density_triggered(self, cohort: Cohort, cell_area: float) -> bool:
        """Return True if the cohort is sparser than its density threshold."""
        density = cohort.abundance / cell_area
        return density < self.density_threshold_scaling / cohort.adult_mass

    def _attempt(self, context: DispersalContext, cohort: Cohort) -> DispersalOutcome:
        distance = allometric_speed(
            cohort.adult_mass,
            self.speed_scalar,
            self.speed_exponent,
        ) * convert_time_units(self.time_step_unit, "month")
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
            "density_threshold_scaling": self.density_threshold_scaling,
            "starvation_onset_fraction": self.starvation_onset_fraction,
            "starvation_critical_fraction": self.starvation_critical_fraction,
        }
