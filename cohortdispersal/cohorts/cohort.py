"""Cohort — a group of identical individuals tracked as one record.

Cohorts are owned by ecological processes outside this package; dispersal
only reads their mass and abundance and moves the record between cells.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Cohort:
    """A cohort of individuals within one functional group.

    Attributes:
        functional_group: Functional group index the cohort belongs to.
        individual_body_mass: Current body mass of one individual (g).
        adult_mass: Body mass of one individual at maturity (g).
        abundance: Number of individuals in the cohort.
        cohort_id: Identifier unique across the whole grid.
    """

    functional_group: int
    individual_body_mass: float
    adult_mass: float
    abundance: float
    cohort_id: int = 0

    @property
    def proportional_mass(self) -> float:
        """Return current body mass as a fraction of adult mass."""
        return self.individual_body_mass / self.adult_mass
