"""GridTopology — precomputed dispersal adjacency for every active cell.

For each active cell the topology records which of the eight compass
neighbours a cohort may disperse into.  A direction is traversable when the
neighbouring row exists (latitude never wraps), the neighbouring column
exists or wraps around a globe-spanning grid, the neighbour is active, and
it lies in the same realm as the source.  The table is built once so that
direction lookups during the simulation are constant time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from numpy.random import Generator

    from cohortdispersal.world.grid import ModelGrid

CellIndex = tuple[int, int]


class Direction(IntEnum):
    """Compass directions, numbered clockwise from north."""

    N = 1
    NE = 2
    E = 3
    SE = 4
    S = 5
    SW = 6
    W = 7
    NW = 8

    @property
    def offset(self) -> tuple[int, int]:
        """Return the ``(d_lat, d_lon)`` step for this direction."""
        return _OFFSETS[self]

    @property
    def opposite(self) -> Direction:
        """Return the direction pointing back the way this one came."""
        return Direction((self.value + 3) % 8 + 1)


_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.N: (1, 0),
    Direction.NE: (1, 1),
    Direction.E: (0, 1),
    Direction.SE: (-1, 1),
    Direction.S: (-1, 0),
    Direction.SW: (-1, -1),
    Direction.W: (0, -1),
    Direction.NW: (1, -1),
}


@dataclass(frozen=True)
class DirectionalNeighbor:
    """A reachable neighbour of a source cell.

    Attributes:
        destination: Index of the neighbouring cell.
        direction: Compass direction from the source to the neighbour.
    """

    destination: CellIndex
    direction: Direction


@dataclass
class GridTopology:
    """Adjacency table mapping each active cell to its traversable neighbours.

    Attributes:
        table: For each source cell, its neighbours keyed by direction.
    """

    table: dict[CellIndex, dict[Direction, DirectionalNeighbor]] = field(
        default_factory=dict,
    )

    @classmethod
    def build(cls, grid: ModelGrid) -> GridTopology:
        """Precompute the adjacency table for every active cell of ``grid``.

        Args:
            grid: The model grid whose realm map defines traversability.

        Returns:
            A populated GridTopology.
        """
        table: dict[CellIndex, dict[Direction, DirectionalNeighbor]] = {}
        for (lat, lon), cell in grid.cells.items():
            entries: dict[Direction, DirectionalNeighbor] = {}
            for direction in Direction:
                target = _step(grid, lat, lon, direction)
                if target is None:
                    continue
                neighbour = grid.cells.get(target)
                if neighbour is None or neighbour.realm != cell.realm:
                    continue
                entries[direction] = DirectionalNeighbor(target, direction)
            table[(lat, lon)] = entries
        return cls(table=table)

    def __len__(self) -> int:
        return len(self.table)

    def neighbor(self, cell: CellIndex, direction: Direction) -> CellIndex | None:
        """Return the neighbour of ``cell`` in ``direction``, or None.

        Args:
            cell: Source cell index.
            direction: Compass direction to look in.

        Returns:
            The destination index if that direction is traversable, else None.
        """
        entry = self.table.get(cell, {}).get(direction)
        return entry.destination if entry is not None else None

    def neighbors(self, cell: CellIndex) -> list[DirectionalNeighbor]:
        """Return every traversable neighbour of ``cell`` in direction order."""
        return list(self.table.get(cell, {}).values())

    def has_neighbors(self, cell: CellIndex) -> bool:
        """Return True if at least one direction is traversable from ``cell``."""
        return bool(self.table.get(cell))

    def random_neighbor(self, cell: CellIndex, rng: Generator) -> CellIndex:
        """Pick one traversable neighbour of ``cell`` uniformly at random.

        Raises:
            ValueError: If the cell has no traversable neighbours.
        """
        entries = self.neighbors(cell)
        if not entries:
            msg = f"cell {cell} has no traversable neighbours"
            raise ValueError(msg)
        return entries[int(rng.integers(len(entries)))].destination

    def direction_between(
        self,
        source: CellIndex,
        destination: CellIndex,
    ) -> Direction | None:
        """Return the direction from ``source`` to an adjacent ``destination``.

        Returns None when ``destination`` is not a traversable neighbour.
        """
        for entry in self.table.get(source, {}).values():
            if entry.destination == destination:
                return entry.direction
        return None


def _step(
    grid: ModelGrid,
    lat: int,
    lon: int,
    direction: Direction,
) -> CellIndex | None:
    """Return the index one step from ``(lat, lon)``, wrapping longitude if allowed."""
    d_lat, d_lon = direction.offset
    new_lat, new_lon = lat + d_lat, lon + d_lon
    if not 0 <= new_lat < grid.n_lat:
        return None
    if not 0 <= new_lon < grid.n_lon:
        if not grid.spans_globe:
            return None
        new_lon %= grid.n_lon
    if (new_lat, new_lon) == (lat, lon):
        return None
    return (new_lat, new_lon)
