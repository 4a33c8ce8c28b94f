"""DispersalStrategy — the interface every dispersal model implements.

Strategies are stateless with respect to the simulation: everything a
decision needs for one source cell arrives in a ``DispersalContext``, and
the probability/direction logic lives in a shared ``DispersalKernel`` that
each strategy holds by composition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from numpy.random import Generator

    from cohortdispersal.cohorts.cohort import Cohort
    from cohortdispersal.dispersal.outcome import DispersalOutcome
    from cohortdispersal.world.cell import GridCell
    from cohortdispersal.world.grid import ModelGrid
    from cohortdispersal.world.topology import GridTopology


@dataclass(frozen=True)
class DispersalContext:
    """Read-only view of the world for decisions made in one source cell.

    Attributes:
        grid: The model grid (read only during the decision phase).
        topology: Precomputed adjacency table.
        cell: The source cell.
        month: Current month index (0-11) for monthly environment fields.
        rng: Generator owned by the source cell.
    """

    grid: ModelGrid
    topology: GridTopology
    cell: GridCell
    month: int
    rng: Generator


class DispersalStrategy(Protocol):
    """A model that decides whether and where a cohort disperses."""

    name: str

    def decide(self, context: DispersalContext, cohort: Cohort) -> DispersalOutcome:
        """Return the dispersal outcome for ``cohort`` this time step."""
        ...

    def parameters(self) -> dict[str, float | str]:
        """Return the model's parameter values for logging."""
        ...
