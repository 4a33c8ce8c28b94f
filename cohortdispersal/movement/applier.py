"""CrossCellApplier — applies a step's buffered moves to cohort storage.

The apply phase runs once per outer step, after every decision has been
made, in three passes:

1. Insert a reference to every moving cohort into its destination cell.
2. Remove the moved cohorts from their source cells, per functional group
   in descending position order so earlier removals never shift the
   positions of later ones.
3. Clear the buffer.

All insertions finish before any deletion, so a cell that is both a source
and a destination in the same step keeps valid positions throughout.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from cohortdispersal.world.topology import Direction

if TYPE_CHECKING:
    from cohortdispersal.cohorts.cohort import Cohort
    from cohortdispersal.movement.buffer import MoveBuffer, MoveRecord
    from cohortdispersal.world.grid import ModelGrid
    from cohortdispersal.world.topology import CellIndex

logger = logging.getLogger(__name__)


class MoveApplicationError(RuntimeError):
    """A buffered move cannot be applied without losing or duplicating a cohort."""


@dataclass
class DispersalTally:
    """Per-cell, per-direction move counts for diagnostics.

    Direction axis index ``d - 1`` holds compass direction ``d``.

    Attributes:
        n_lat: Number of grid rows.
        n_lon: Number of grid columns.
        outbound: Cohorts leaving each cell, by exit direction.
        inbound: Cohorts arriving in each cell, by entry side.
        outbound_weights: Body masses of the cohorts leaving each cell.
        long_range: Moves whose destination is not an immediate neighbour.
        long_range_inbound: Long-range arrivals in each cell.  These carry
            no direction, so they are kept apart from ``inbound``.
    """

    n_lat: int
    n_lon: int
    outbound: NDArray[np.uint32] = field(init=False, repr=False)
    inbound: NDArray[np.uint32] = field(init=False, repr=False)
    long_range_inbound: NDArray[np.uint32] = field(init=False, repr=False)
    outbound_weights: dict[CellIndex, list[float]] = field(
        default_factory=dict,
        repr=False,
    )
    long_range: int = 0

    def __post_init__(self) -> None:
        """Allocate zeroed counters."""
        shape = (self.n_lat, self.n_lon, len(Direction))
        self.outbound = np.zeros(shape, dtype=np.uint32)
        self.inbound = np.zeros(shape, dtype=np.uint32)
        self.long_range_inbound = np.zeros(shape[:2], dtype=np.uint32)

    def record(
        self,
        source: CellIndex,
        destination: CellIndex,
        direction: Direction | None,
        weight: float,
    ) -> None:
        """Count one move and keep the moving cohort's body mass.

        Args:
            source: Cell the cohort left.
            destination: Cell the cohort entered.
            direction: Exit direction, or None for a long-range move.
            weight: Individual body mass of the moving cohort.
        """
        self.outbound_weights.setdefault(source, []).append(weight)
        if direction is None:
            self.long_range += 1
            self.long_range_inbound[destination[0], destination[1]] += 1
            return
        self.outbound[source[0], source[1], direction - 1] += 1
        self.inbound[destination[0], destination[1], direction.opposite - 1] += 1

    def total_outbound(self) -> int:
        """Return the number of moves tallied, including long-range ones."""
        return int(self.outbound.sum()) + self.long_range

    def reset(self) -> None:
        """Zero every counter for the next step."""
        self.outbound[:] = 0
        self.inbound[:] = 0
        self.long_range_inbound[:] = 0
        self.outbound_weights.clear()
        self.long_range = 0


@dataclass
class CrossCellApplier:
    """Drains a MoveBuffer into the grid's cohort collections."""

    def apply(
        self,
        grid: ModelGrid,
        buffer: MoveBuffer,
        tally: DispersalTally | None = None,
    ) -> int:
        """Relocate every buffered cohort and clear the buffer.

        Args:
            grid: Grid whose cohort collections are mutated.
            buffer: Moves decided during this step.
            tally: Optional diagnostics counters to update.

        Returns:
            The number of cohorts moved.

        Raises:
            MoveApplicationError: If any record refers to a missing cohort,
                repeats a cohort, or targets an inactive cell.  Raised before
                any collection is modified.
        """
        sources = buffer.sources()
        for source in sources:
            self._validate(grid, source, buffer.records_for(source))

        moved = 0
        for source in sources:
            cell = grid.cells[source]
            for record in buffer.records_for(source):
                cohort: Cohort = cell.cohorts[record.functional_group][record.position]
                destination = grid.cells[record.destination]
                destination.cohorts_in(record.functional_group).append(cohort)
                if tally is not None:
                    tally.record(
                        source,
                        record.destination,
                        record.direction,
                        cohort.individual_body_mass,
                    )
                moved += 1

        for source in sources:
            self._delete(grid, source, buffer.records_for(source))

        buffer.clear()
        logger.debug("applied %d cohort moves from %d cells", moved, len(sources))
        return moved

    @staticmethod
    def _validate(
        grid: ModelGrid,
        source: CellIndex,
        records: list[MoveRecord],
    ) -> None:
        """Check that every record in one source cell can be applied."""
        cell = grid.cells.get(source)
        if cell is None:
            msg = f"moves queued for inactive source cell {source}"
            raise MoveApplicationError(msg)

        seen: set[tuple[int, int]] = set()
        for record in records:
            key = (record.functional_group, record.position)
            if key in seen:
                msg = f"cohort {key} in cell {source} is queued to move twice"
                raise MoveApplicationError(msg)
            seen.add(key)

            group = cell.cohorts.get(record.functional_group, [])
            if not 0 <= record.position < len(group):
                msg = (
                    f"cohort position {record.position} out of range for "
                    f"group {record.functional_group} in cell {source} "
                    f"({len(group)} cohorts)"
                )
                raise MoveApplicationError(msg)

            if record.destination not in grid.cells:
                msg = f"destination {record.destination} is not an active cell"
                raise MoveApplicationError(msg)

    @staticmethod
    def _delete(grid: ModelGrid, source: CellIndex, records: list[MoveRecord]) -> None:
        """Remove moved cohorts from ``source``, highest positions first."""
        positions: defaultdict[int, list[int]] = defaultdict(list)
        for record in records:
            positions[record.functional_group].append(record.position)

        cell = grid.cells[source]
        for group, indices in positions.items():
            cohorts = cell.cohorts[group]
            for position in sorted(indices, reverse=True):
                del cohorts[position]
