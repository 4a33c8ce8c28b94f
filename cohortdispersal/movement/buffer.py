"""MoveBuffer — per-cell log of dispersal decisions awaiting application.

During the decision phase each source cell appends only to its own list,
so cells can be processed concurrently.  Nothing reads the buffer until
every decision for the step has been made.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cohortdispersal.world.topology import CellIndex, Direction


@dataclass(frozen=True)
class MoveRecord:
    """One cohort's pending move.

    Attributes:
        source: Cell the cohort currently lives in.
        functional_group: Functional group of the cohort.
        position: Index of the cohort in the source cell's group list.
        destination: Cell the cohort moves to.
        direction: Compass direction of the move, if it is to a neighbour.
    """

    source: CellIndex
    functional_group: int
    position: int
    destination: CellIndex
    direction: Direction | None = None


@dataclass
class MoveBuffer:
    """Append-only lists of MoveRecords, one per source cell.

    Attributes:
        lists: Pending records keyed by source cell.
    """

    lists: dict[CellIndex, list[MoveRecord]] = field(default_factory=dict)

    @classmethod
    def for_cells(cls, cells: Iterable[CellIndex]) -> MoveBuffer:
        """Create a buffer with an empty list for every source cell."""
        return cls(lists={cell: [] for cell in cells})

    def __len__(self) -> int:
        return sum(len(records) for records in self.lists.values())

    def append(self, record: MoveRecord) -> None:
        """Queue ``record`` on its source cell's list.

        Raises:
            KeyError: If the source cell has no list in this buffer.
        """
        try:
            self.lists[record.source].append(record)
        except KeyError:
            msg = f"no move list for source cell {record.source}"
            raise KeyError(msg) from None

    def records_for(self, cell: CellIndex) -> list[MoveRecord]:
        """Return the pending records for ``cell`` (empty if none)."""
        return self.lists.get(cell, [])

    def sources(self) -> list[CellIndex]:
        """Return the source cells that have pending records, in order."""
        return sorted(cell for cell, records in self.lists.items() if records)

    def clear(self) -> None:
        """Empty every list, keeping one per source cell."""
        for records in self.lists.values():
            records.clear()
