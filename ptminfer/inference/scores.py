"""
Modification evidence module.

This module contains the ModificationScoring class, holding the site scores of
one modification on one spectrum match, and the ModificationEvidenceRecord
aggregating them per match.
"""

import logging
from typing import Dict, List, Optional, Set

from .constants import DELTA_SCORE, PROBABILISTIC_SCORE

logger = logging.getLogger(__name__)


class ModificationScoring:
    """
    Site scores of a modification on a spectrum match.
    """

    def __init__(self, name: str):
        """
        Initialize ModificationScoring.

        Args:
            name: Modification name
        """
        self.name = name
        self.probabilistic_scores: Dict[int, float] = {}
        self.delta_scores: Dict[int, float] = {}
        self.confident_sites: Set[int] = set()

    def set_probabilistic_score(self, site: int, score: float) -> None:
        self.probabilistic_scores[site] = score

    def set_delta_score(self, site: int, score: float) -> None:
        self.delta_scores[site] = score

    def scores(self, mode: str = PROBABILISTIC_SCORE) -> Dict[int, float]:
        """
        Get the site scores of the given scoring mode.

        Args:
            mode: "probabilistic" or "delta"

        Returns:
            Mapping site -> score
        """
        if mode == PROBABILISTIC_SCORE:
            return self.probabilistic_scores
        if mode == DELTA_SCORE:
            return self.delta_scores
        raise ValueError(f"Unsupported score mode: {mode}")

    def get_score(self, site: int, mode: str = PROBABILISTIC_SCORE) -> float:
        """Score of a site, 0 when the site was not scored."""
        return self.scores(mode).get(site, 0.0)

    def add_confident_site(self, site: int) -> None:
        self.confident_sites.add(site)

    def is_confident(self, site: int) -> bool:
        return site in self.confident_sites

    def __repr__(self):
        return (
            f"ModificationScoring(name={self.name!r}, "
            f"confident_sites={sorted(self.confident_sites)})"
        )


class ModificationEvidenceRecord:
    """
    Localization evidence of a spectrum match, keyed by modification name.
    """

    def __init__(self):
        self._scorings: Dict[str, ModificationScoring] = {}

    def add_scoring(self, name: str, scoring: ModificationScoring) -> None:
        self._scorings[name] = scoring

    def get_scoring(self, name: str) -> Optional[ModificationScoring]:
        return self._scorings.get(name)

    def get_or_create(self, name: str) -> ModificationScoring:
        """Get the scoring of a modification, creating an empty one if needed."""
        scoring = self._scorings.get(name)
        if scoring is None:
            scoring = ModificationScoring(name)
            self._scorings[name] = scoring
        return scoring

    def contains(self, name: str) -> bool:
        return name in self._scorings

    def scored_modifications(self) -> List[str]:
        return list(self._scorings)

    def add_confident_site(self, name: str, site: int) -> None:
        self.get_or_create(name).add_confident_site(site)

    def confident_sites(self, name: str) -> Set[int]:
        scoring = self._scorings.get(name)
        if scoring is None:
            return set()
        return set(scoring.confident_sites)

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def __len__(self):
        return len(self._scorings)
