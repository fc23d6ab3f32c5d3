"""
Site assignment module.

This module chooses, for every modification mass of a peptide, as many
distinct sites as the mass occurs, so that no site carries two modifications
and the summed site score is maximal.
"""

import logging
from typing import Dict, List, Mapping, Optional

import numpy as np
from scipy.optimize import linear_sum_assignment

from .constants import FORBIDDEN_COST, TIE_BREAK_EPSILON
from .exceptions import SiteAssignmentError

logger = logging.getLogger(__name__)


class SiteCandidates:
    """
    Candidate sites of one modification mass on a peptide.

    Attributes:
        count: Number of occurrences of the mass on the peptide
        scores: Mapping eligible site -> score
    """

    def __init__(self, count: int, scores: Optional[Mapping[int, float]] = None):
        if count < 0:
            raise ValueError(f"Occurrence count must be positive, got {count}")
        self.count = count
        self.scores: Dict[int, float] = dict(scores or {})

    @property
    def sites(self) -> List[int]:
        return sorted(self.scores)

    def __repr__(self):
        return f"SiteCandidates(count={self.count}, scores={self.scores})"


def assign_sites(
    candidates: Mapping[float, SiteCandidates], sequence: str = ""
) -> Dict[float, List[int]]:
    """
    Solve the site assignment of a peptide exactly.

    Every occurrence of a mass is a row of a cost matrix whose columns are the
    eligible sites of all masses; the rectangular linear assignment of that
    matrix maximizes the total score. Among equally scoring assignments the
    lowest sites win, and lighter masses take precedence over heavier ones.

    Args:
        candidates: Mapping mass -> SiteCandidates
        sequence: Peptide sequence, used in error reports

    Returns:
        Mapping mass -> ascending list of chosen sites

    Raises:
        SiteAssignmentError: If not every occurrence received a site
    """
    masses = sorted(candidates)
    expected = sum(candidates[mass].count for mass in masses)
    result: Dict[float, List[int]] = {mass: [] for mass in masses}

    if expected == 0:
        return result

    sites = sorted({site for mass in masses for site in candidates[mass].scores})
    site_index = {site: column for column, site in enumerate(sites)}

    row_masses = [mass for mass in masses for _ in range(candidates[mass].count)]
    cost = np.full((len(row_masses), len(sites)), FORBIDDEN_COST, dtype=float)

    for row, mass in enumerate(row_masses):
        priority = len(masses) - masses.index(mass)
        for site, score in candidates[mass].scores.items():
            column = site_index[site]
            cost[row, column] = -score + TIE_BREAK_EPSILON * priority * column

    if sites:
        rows, columns = linear_sum_assignment(cost)
    else:
        rows, columns = np.array([], dtype=int), np.array([], dtype=int)

    actual = 0
    for row, column in zip(rows, columns):
        if cost[row, column] >= FORBIDDEN_COST:
            continue
        result[row_masses[row]].append(sites[column])
        actual += 1

    if actual != expected:
        raise SiteAssignmentError(sequence, expected, actual)

    for mass in masses:
        result[mass].sort()

    logger.debug(f"Assigned sites for {sequence or 'peptide'}: {result}")
    return result
