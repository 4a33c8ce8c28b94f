"""DispersalSelector — chooses which dispersal model handles each cohort.

In ``"mixed"`` mode small marine organisms (at or below the plankton
threshold) drift with the currents while everything else disperses
responsively.  The single-model modes apply one strategy everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from cohortdispersal.dispersal.advective import AdvectiveDispersal
from cohortdispersal.dispersal.diffusive import DiffusiveDispersal
from cohortdispersal.dispersal.responsive import ResponsiveDispersal
from cohortdispersal.world.cell import Realm

if TYPE_CHECKING:
    from cohortdispersal.cohorts.cohort import Cohort
    from cohortdispersal.dispersal.base import DispersalStrategy
    from cohortdispersal.world.cell import GridCell


@dataclass
class DispersalSelector:
    """Maps (cell, cohort) pairs to a dispersal strategy.

    Attributes:
        mode: ``"mixed"``, ``"advective"``, ``"diffusive"`` or ``"responsive"``.
        time_step_unit: Unit of one outer model time step.
        plankton_threshold_g: Body mass at or below which marine cohorts
            drift advectively in mixed mode.
        advective: The advective strategy instance.
        diffusive: The diffusive strategy instance.
        responsive: The responsive strategy instance.
    """

    MODES: ClassVar[tuple[str, ...]] = ("mixed", "advective", "diffusive", "responsive")

    mode: str = "mixed"
    time_step_unit: str = "month"
    plankton_threshold_g: float = 0.01
    advective: AdvectiveDispersal = field(init=False)
    diffusive: DiffusiveDispersal = field(init=False)
    responsive: ResponsiveDispersal = field(init=False)

    def __post_init__(self) -> None:
        """Validate the mode and build one instance of each strategy."""
        if self.mode not in self.MODES:
            msg = f"unknown dispersal mode {self.mode!r}; expected one of {self.MODES}"
            raise ValueError(msg)
        self.advective = AdvectiveDispersal(time_step_unit=self.time_step_unit)
        self.diffusive = DiffusiveDispersal(time_step_unit=self.time_step_unit)
        self.responsive = ResponsiveDispersal(time_step_unit=self.time_step_unit)

    def strategy_for(self, cell: GridCell, cohort: Cohort) -> DispersalStrategy:
        """Return the strategy that decides for ``cohort`` in ``cell``."""
        match self.mode:
            case "advective":
                return self.advective
            case "diffusive":
                return self.diffusive
            case "responsive":
                return self.responsive
        if (
            cell.realm is Realm.MARINE
            and cohort.individual_body_mass <= self.plankton_threshold_g
        ):
            return self.advective
        return self.responsive

    def strategies(self) -> list[DispersalStrategy]:
        """Return the distinct strategies this mode can use."""
        match self.mode:
            case "advective":
                return [self.advective]
            case "diffusive":
                return [self.diffusive]
            case "responsive":
                return [self.responsive]
        return [self.advective, self.responsive]

    def by_name(self, name: str) -> DispersalStrategy | None:
        """Return the strategy instance called ``name``, if any."""
        return {
            s.name: s for s in (self.advective, self.diffusive, self.responsive)
        }.get(name)
