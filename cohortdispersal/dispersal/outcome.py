"""Tagged results of a single dispersal decision."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cohortdispersal.world.topology import CellIndex, Direction


@dataclass(frozen=True)
class Moved:
    """The cohort leaves for ``destination``.

    ``direction`` is None when the destination is further than one step away
    (possible after advective sub-stepping).
    """

    destination: CellIndex
    direction: Direction | None = None


@dataclass(frozen=True)
class Blocked:
    """The probability test passed but ``direction`` is not traversable."""

    direction: Direction


@dataclass(frozen=True)
class Stayed:
    """A dispersal attempt was made and the probability test failed."""


@dataclass(frozen=True)
class NotAttempted:
    """No dispersal attempt was triggered this step."""


DispersalOutcome = Moved | Blocked | Stayed | NotAttempted
