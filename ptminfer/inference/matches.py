"""
Spectrum match module.

This module contains the ModificationPlacement, Peptide and SpectrumMatch
classes and the in-memory SpectrumMatchStore iterated by the inference run.
"""

import logging
from typing import Dict, Hashable, Iterator, List, Optional

from .scores import ModificationEvidenceRecord

logger = logging.getLogger(__name__)


class ModificationPlacement:
    """
    A modification placed at a site of a peptide.

    Sites: 0 is the N-terminus, residues are 1..n and n + 1 is the C-terminus.
    A placement is never confident and inferred at the same time.
    """

    def __init__(
        self,
        name: str,
        site: int,
        variable: bool = True,
        confident: bool = False,
        inferred: bool = False,
    ):
        if confident and inferred:
            raise ValueError("A placement cannot be both confident and inferred")
        self.name = name
        self.site = site
        self.variable = variable
        self.confident = confident
        self.inferred = inferred

    def mark_confident(self) -> None:
        self.confident = True
        self.inferred = False

    def mark_inferred(self) -> None:
        if self.confident:
            raise ValueError(
                f"Placement {self.name} at site {self.site} is already confident"
            )
        self.inferred = True

    def copy(self) -> "ModificationPlacement":
        return ModificationPlacement(
            self.name, self.site, self.variable, self.confident, self.inferred
        )

    def __eq__(self, other):
        if not isinstance(other, ModificationPlacement):
            return NotImplemented
        return (
            self.name == other.name
            and self.site == other.site
            and self.variable == other.variable
            and self.confident == other.confident
            and self.inferred == other.inferred
        )

    def __repr__(self):
        flags = []
        if self.confident:
            flags.append("confident")
        if self.inferred:
            flags.append("inferred")
        if not self.variable:
            flags.append("fixed")
        return f"ModificationPlacement({self.name!r}, site={self.site}, {'|'.join(flags) or '-'})"


class Peptide:
    """
    Peptide interpretation of a spectrum.
    """

    def __init__(
        self,
        sequence: str,
        placements: Optional[List[ModificationPlacement]] = None,
        protein_n_term: bool = False,
        protein_c_term: bool = False,
    ):
        """
        Initialize Peptide.

        Args:
            sequence: Unmodified amino acid sequence
            placements: Modification placements
            protein_n_term: Whether the peptide starts its protein
            protein_c_term: Whether the peptide ends its protein
        """
        self.sequence = sequence
        self.placements = list(placements or [])
        self.protein_n_term = protein_n_term
        self.protein_c_term = protein_c_term

        for placement in self.placements:
            if not 0 <= placement.site <= len(sequence) + 1:
                raise ValueError(
                    f"Site {placement.site} of {placement.name} is outside "
                    f"peptide {sequence}"
                )

    @property
    def variable_placements(self) -> List[ModificationPlacement]:
        return [p for p in self.placements if p.variable]

    def __len__(self):
        return len(self.sequence)

    def __repr__(self):
        return f"Peptide({self.sequence!r}, placements={self.placements})"


class SpectrumMatch:
    """
    Best peptide interpretation of a spectrum and its localization evidence.
    """

    def __init__(
        self,
        key: Hashable,
        best_peptide: Optional[Peptide] = None,
        spectrum_title: Optional[str] = None,
        evidence: Optional[ModificationEvidenceRecord] = None,
    ):
        self.key = key
        self.best_peptide = best_peptide
        self.spectrum_title = spectrum_title if spectrum_title is not None else str(key)
        self._evidence = evidence

    @property
    def has_evidence(self) -> bool:
        return self._evidence is not None

    @property
    def evidence(self) -> ModificationEvidenceRecord:
        """Localization evidence, created on first access."""
        if self._evidence is None:
            self._evidence = ModificationEvidenceRecord()
        return self._evidence

    @evidence.setter
    def evidence(self, record: Optional[ModificationEvidenceRecord]) -> None:
        self._evidence = record

    def __repr__(self):
        return f"SpectrumMatch(key={self.key!r}, best_peptide={self.best_peptide})"


class SpectrumMatchStore:
    """
    Ordered in-memory collection of spectrum matches.
    """

    def __init__(self, matches: Optional[List[SpectrumMatch]] = None):
        self._matches: Dict[Hashable, SpectrumMatch] = {}
        for match in matches or []:
            self.add(match)

    def add(self, match: SpectrumMatch) -> None:
        if match.key in self._matches:
            logger.warning(f"Replacing spectrum match {match.key}")
        self._matches[match.key] = match

    def get(self, key: Hashable) -> SpectrumMatch:
        """
        Get a spectrum match by key.

        Raises:
            KeyError: If no match has this key
        """
        return self._matches[key]

    def keys(self) -> List[Hashable]:
        return list(self._matches)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._matches

    def __iter__(self) -> Iterator[SpectrumMatch]:
        return iter(list(self._matches.values()))

    def __len__(self):
        return len(self._matches)
