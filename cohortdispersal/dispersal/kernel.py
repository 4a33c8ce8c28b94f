"""Probability kernel shared by every dispersal strategy.

The source cell is treated as a rigid block translated by a displacement
``(u, v)`` in km.  The part of the translated block lying outside the
original footprint approximates the fraction of the cohort that crosses a
cell boundary, split into a purely longitudinal strip, a purely latitudinal
strip and a diagonal corner::

    area_diag = |u * v|
    area_u    = |u * cell_height| - area_diag
    area_v    = |v * cell_width|  - area_diag
    p         = (area_u + area_v + area_diag) / cell_area

A single uniform draw ``r`` then decides both whether the cohort leaves
(``0 < r <= p``) and, by comparing ``r`` with the cumulative components,
through which boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cohortdispersal.dispersal.outcome import (
    Blocked,
    DispersalOutcome,
    Moved,
    Stayed,
)
from cohortdispersal.world.topology import Direction

if TYPE_CHECKING:
    from numpy.random import Generator

    from cohortdispersal.world.topology import CellIndex, GridTopology

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-10


class DispersalInvariantError(RuntimeError):
    """A random draw fell outside the kernel's cumulative probabilities."""


@dataclass(frozen=True)
class DispersalProbability:
    """Six-value result of the kernel.

    Attributes:
        probability: Overall probability of leaving the cell.
        p_longitudinal: Probability of crossing an east/west boundary only.
        p_latitudinal: Probability of crossing a north/south boundary only.
        p_diagonal: Probability of crossing into a diagonal neighbour.
        u: Eastward displacement in km (sign gives E/W).
        v: Northward displacement in km (sign gives N/S).
    """

    probability: float
    p_longitudinal: float
    p_latitudinal: float
    p_diagonal: float
    u: float
    v: float

    @property
    def components(self) -> tuple[float, float, float]:
        """Return the three directional components in resolution order."""
        return (self.p_longitudinal, self.p_latitudinal, self.p_diagonal)


@dataclass(frozen=True)
class DispersalKernel:
    """Turns displacements into probabilities and probabilities into moves.

    Attributes:
        epsilon: Tolerance added to the last cumulative threshold to absorb
            floating-point rounding.
    """

    epsilon: float = DEFAULT_EPSILON

    def probability(
        self,
        u: float,
        v: float,
        cell_height: float,
        cell_width: float,
        cell_area: float,
    ) -> DispersalProbability:
        """Compute the dispersal probability for a displacement.

        Args:
            u: Eastward displacement in km.
            v: Northward displacement in km.
            cell_height: Cell height in km.
            cell_width: Cell width in km.
            cell_area: Cell area in km².

        Returns:
            The probability and its directional split.  The total always
            equals the sum of the components and never exceeds 1.

        Raises:
            ValueError: If ``cell_area`` is not positive.
        """
        if cell_area <= 0:
            msg = f"cell area must be positive, got {cell_area}"
            raise ValueError(msg)

        area_diag = abs(u * v)
        area_u = max(0.0, abs(u * cell_height) - area_diag)
        area_v = max(0.0, abs(v * cell_width) - area_diag)

        p_u = area_u / cell_area
        p_v = area_v / cell_area
        p_diag = area_diag / cell_area
        total = p_u + p_v + p_diag

        if total > 1.0:
            logger.warning(
                "dispersal probability %.3f exceeds 1 for displacement "
                "(%.2f, %.2f) km in a %.2f x %.2f km cell; clamping",
                total,
                u,
                v,
                cell_width,
                cell_height,
            )
            p_u /= total
            p_v /= total
            p_diag = max(0.0, 1.0 - p_u - p_v)
            total = 1.0

        return DispersalProbability(total, p_u, p_v, p_diag, u, v)

    def resolve_direction(
        self,
        probabilities: DispersalProbability,
        draw: float,
    ) -> Direction:
        """Choose the compass direction selected by ``draw``.

        Args:
            probabilities: Kernel output for the displacement.
            draw: Uniform value already known to lie within the total.

        Returns:
            The direction of the boundary crossed.

        Raises:
            DispersalInvariantError: If ``draw`` exceeds the summed components.
        """
        p_u, p_v, p_diag = probabilities.components
        east = probabilities.u > 0
        north = probabilities.v > 0

        if draw <= p_u:
            return Direction.E if east else Direction.W
        if draw <= p_u + p_v:
            return Direction.N if north else Direction.S
        if draw <= p_u + p_v + p_diag + self.epsilon:
            if east:
                return Direction.NE if north else Direction.SE
            return Direction.NW if north else Direction.SW

        msg = (
            f"draw {draw!r} exceeds cumulative dispersal probability "
            f"{p_u + p_v + p_diag!r}"
        )
        raise DispersalInvariantError(msg)

    def attempt(
        self,
        topology: GridTopology,
        cell: CellIndex,
        probabilities: DispersalProbability,
        rng: Generator,
    ) -> DispersalOutcome:
        """Run the probability test and resolve the destination.

        Args:
            topology: Adjacency table used to find the destination.
            cell: Source cell index.
            probabilities: Kernel output for this attempt.
            rng: Generator owned by the source cell.

        Returns:
            ``Moved`` to the neighbour, ``Blocked`` if that direction is not
            traversable, or ``Stayed`` if the test failed.
        """
        draw = float(rng.random())
        if draw <= 0.0 or draw > probabilities.probability:
            return Stayed()

        direction = self.resolve_direction(probabilities, draw)
        destination = topology.neighbor(cell, direction)
        if destination is None:
            return Blocked(direction)
        return Moved(destination, direction)
