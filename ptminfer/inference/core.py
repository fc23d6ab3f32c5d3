"""
Core processing module for peptide inference.

This module contains the two-phase inference run: phase 1 collects the
confidently localized modifications of all spectrum matches, phase 2 resolves
the ambiguous matches with evidence borrowed from matches of the same or of an
overlapping peptide sequence.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Tuple, Union

from .alignment import align_all
from .assignment import SiteCandidates, assign_sites
from .config import InferenceConfig
from .constants import (
    CONFIDENT_OTHER_OFFSET,
    CONFIDENT_OWN_OFFSET,
    CONFIDENT_RELATED_OFFSET,
    MASS_DECIMALS,
)
from .exceptions import ModificationNotFoundError, SiteAssignmentError
from .matches import ModificationPlacement, Peptide, SpectrumMatch, SpectrumMatchStore
from .modifications import Modification, ModificationProvider, ModificationType
from .sequence import get_possible_sites, relate_sequences, transpose_site

logger = logging.getLogger(__name__)

Placements = List[Tuple[ModificationPlacement, Modification]]


def mass_key(mass: float) -> float:
    """Rounded mass used to group modifications of identical mass."""
    return round(mass, MASS_DECIMALS)


class WaitingHandler:
    """
    Progress and cooperative cancellation of an inference run.

    cancel() may be called from another thread; the run checks is_canceled()
    after every spectrum match.
    """

    def __init__(self):
        self._canceled = threading.Event()
        self.progress = 0
        self.max_progress = 0

    def cancel(self) -> None:
        self._canceled.set()

    def is_canceled(self) -> bool:
        return self._canceled.is_set()

    def set_max_progress(self, value: int) -> None:
        self.max_progress = value
        self.progress = 0

    def increase_progress(self, amount: int = 1) -> None:
        self.progress += amount


class ConfidentEvidenceIndex:
    """
    Spectrum matches carrying a confidently placed modification, indexed by
    modification mass and exact peptide sequence.

    The index is filled during phase 1 and frozen before phase 2.
    """

    def __init__(self):
        # mass -> sequence -> ordered match keys
        self._index: Dict[float, Dict[str, Dict[Hashable, None]]] = {}
        self._frozen = False

    def add(self, mass: float, sequence: str, key: Hashable) -> None:
        if self._frozen:
            raise RuntimeError("Confident evidence index is frozen")
        sequences = self._index.setdefault(mass_key(mass), {})
        sequences.setdefault(sequence, {})[key] = None

    def get(self, mass: float) -> Dict[str, List[Hashable]]:
        """Sequences and match keys recorded for a mass."""
        sequences = self._index.get(mass_key(mass), {})
        return {sequence: list(keys) for sequence, keys in sequences.items()}

    def masses(self) -> List[float]:
        return list(self._index)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, mass: float) -> bool:
        return mass_key(mass) in self._index

    def __len__(self):
        return len(self._index)


@dataclass
class InferenceReport:
    """Summary of an inference run."""

    n_matches: int = 0
    n_confident: int = 0
    n_ambiguous: int = 0
    n_resolved: int = 0
    n_unresolved: int = 0
    canceled: bool = False
    failures: List[Tuple[Hashable, Exception]] = field(default_factory=list)


class PeptideInference:
    """Two-phase modification site inference over a spectrum match store."""

    def __init__(
        self,
        store: SpectrumMatchStore,
        modification_provider: ModificationProvider,
        config: Optional[Union[InferenceConfig, Dict[str, Any]]] = None,
        waiting_handler: Optional[WaitingHandler] = None,
    ):
        """
        Initialize the inference run.

        Args:
            store: Spectrum matches, mutated in place
            modification_provider: Resolves modification names
            config: Configuration object or dictionary
            waiting_handler: Progress and cancellation handler
        """
        if not isinstance(config, InferenceConfig):
            config = InferenceConfig(config)
        self.store = store
        self.modification_provider = modification_provider
        self.config = config
        self.waiting_handler = waiting_handler or WaitingHandler()
        self.score_mode = config.score_mode

        self.evidence_index = ConfidentEvidenceIndex()
        self.ambiguous_keys: Dict[Hashable, None] = {}
        self.report = InferenceReport()
        self._variable_modifications: Optional[List[Modification]] = None

    def run(self) -> InferenceReport:
        """
        Run both phases.

        Returns:
            Summary of the run

        Raises:
            ModificationNotFoundError: If a configured variable modification is unknown
        """
        logger.info(f"Starting peptide inference, total spectrum match count: {len(self.store)}")
        self.report = InferenceReport(n_matches=len(self.store))
        self.evidence_index = ConfidentEvidenceIndex()
        self.ambiguous_keys = {}
        self._variable_modifications = None
        self._get_variable_modifications()

        logger.info("=== Phase 1: Collect confidently localized modifications ===")
        if not self._scan():
            return self._cancel()
        self.evidence_index.freeze()
        logger.info(
            f"Phase 1 completed: {self.report.n_confident} confident, "
            f"{self.report.n_ambiguous} ambiguous spectrum matches"
        )

        logger.info("=== Phase 2: Resolve ambiguous modification sites ===")
        if not self._resolve():
            return self._cancel()
        logger.info(
            f"Phase 2 completed: {self.report.n_resolved} resolved, "
            f"{self.report.n_unresolved} unresolved, "
            f"{len(self.report.failures)} failed"
        )

        self.ambiguous_keys = {}
        return self.report

    def _cancel(self) -> InferenceReport:
        logger.info("Peptide inference canceled")
        self.report.canceled = True
        return self.report

    def _scan(self) -> bool:
        interval = self.config.get("progress_interval", 100)
        self.waiting_handler.set_max_progress(len(self.store))

        for i, match in enumerate(self.store):
            try:
                self._classify(match)
            except ModificationNotFoundError as e:
                logger.error(f"Phase 1 spectrum match {match.key} error: {e}")
                self.report.failures.append((match.key, e))

            self.waiting_handler.increase_progress()
            if (i + 1) % interval == 0:
                logger.info(f"Phase 1 processed {i + 1} spectrum matches")
            if self.waiting_handler.is_canceled():
                return False
        return True

    def _classify(self, match: SpectrumMatch) -> None:
        peptide = match.best_peptide
        if peptide is None:
            return

        localizable = self._localizable_placements(peptide)
        if not localizable:
            self.report.n_confident += 1
            return

        ambiguous = False
        for placement, modification in localizable:
            if placement.confident:
                self.evidence_index.add(modification.mass, peptide.sequence, match.key)
            else:
                ambiguous = True

        if ambiguous:
            logger.debug(f"Spectrum match {match.key} ({peptide.sequence}) is ambiguous")
            self.ambiguous_keys[match.key] = None
            self.report.n_ambiguous += 1
        else:
            self.report.n_confident += 1

    def _resolve(self) -> bool:
        interval = self.config.get("progress_interval", 100)
        self.waiting_handler.set_max_progress(len(self.ambiguous_keys))

        for i, key in enumerate(list(self.ambiguous_keys)):
            match = self.store.get(key)
            try:
                if self._resolve_match(match):
                    self.report.n_resolved += 1
                else:
                    self.report.n_unresolved += 1
            except (ModificationNotFoundError, SiteAssignmentError) as e:
                logger.error(f"Phase 2 spectrum match {key} error: {e}")
                self.report.failures.append((key, e))

            self.waiting_handler.increase_progress()
            if (i + 1) % interval == 0:
                logger.info(f"Phase 2 processed {i + 1} spectrum matches")
            if self.waiting_handler.is_canceled():
                return False
        return True

    def _resolve_match(self, match: SpectrumMatch) -> bool:
        """
        Resolve the ambiguous placements of one spectrum match.

        Returns:
            True if related evidence was found and the placements rewritten
        """
        peptide = match.best_peptide
        sequence = peptide.sequence
        localizable = self._localizable_placements(peptide)

        by_mass: Dict[float, Placements] = {}
        for placement, modification in localizable:
            by_mass.setdefault(mass_key(modification.mass), []).append(
                (placement, modification)
            )

        localizable_ids = {id(placement) for placement, _ in localizable}
        confident_ids = {id(p) for p, _ in localizable if p.confident}
        # Sites held by placements that never move
        held = {
            p.site
            for p in peptide.placements
            if id(p) not in localizable_ids or id(p) in confident_ids
        }

        possible = {
            mass: self._possible_sites(peptide, entries, held)
            for mass, entries in by_mass.items()
        }

        table: Dict[float, Dict[int, float]] = {}
        names: Dict[float, Dict[int, str]] = {}
        for mass, entries in by_mass.items():
            if not any(not p.confident for p, _ in entries):
                continue
            table[mass], names[mass] = self._related_evidence(
                match, sequence, mass, possible[mass]
            )

        if not any(table.values()):
            logger.debug(f"No related evidence for spectrum match {match.key} ({sequence})")
            return False

        # Masses without related evidence keep their sites
        resolved = [mass for mass, scores in table.items() if scores]
        blocked = set(held)
        for mass, scores in table.items():
            if not scores:
                blocked.update(p.site for p, _ in by_mass[mass] if not p.confident)

        candidates = {}
        for mass in resolved:
            entries = by_mass[mass]
            self._add_own_evidence(
                match, mass, entries, possible[mass], blocked, table[mass], names[mass]
            )
            count = sum(1 for p, _ in entries if not p.confident)
            candidates[mass] = SiteCandidates(count, table[mass])

        chosen = assign_sites(candidates, sequence)

        # Every mass is mapped before any placement changes
        moves = []
        for mass, sites in chosen.items():
            moves.extend(
                self._plan_moves(sequence, by_mass[mass], sites, table[mass], names[mass])
            )
        for placement, new_site, name, score in moves:
            self._move_placement(match, placement, new_site, name, score)

        logger.debug(f"Resolved spectrum match {match.key}: {peptide.placements}")
        return True

    def _related_evidence(
        self,
        match: SpectrumMatch,
        sequence: str,
        mass: float,
        possible: Dict[int, str],
    ) -> Tuple[Dict[int, float], Dict[int, str]]:
        scores: Dict[int, float] = {}
        names: Dict[int, str] = {}

        for other_sequence, keys in self.evidence_index.get(mass).items():
            relation, starts = relate_sequences(sequence, other_sequence)
            if relation is None:
                continue
            offset = (
                CONFIDENT_OTHER_OFFSET
                if relation == "identical"
                else CONFIDENT_RELATED_OFFSET
            )

            for other_key in keys:
                if other_key == match.key:
                    continue
                other = self.store.get(other_key)
                for site, score in self._confident_sites(other, mass).items():
                    for start in starts:
                        new_site = transpose_site(
                            site, relation, start, sequence, other_sequence
                        )
                        if new_site is None or new_site not in possible:
                            continue
                        value = score + offset
                        if value > scores.get(new_site, float("-inf")):
                            scores[new_site] = value
                            names[new_site] = possible[new_site]

        return scores, names

    def _confident_sites(self, match: SpectrumMatch, mass: float) -> Dict[int, float]:
        """Confident sites of a mass on a match with their own scores."""
        sites: Dict[int, float] = {}
        if match.best_peptide is None:
            return sites

        for placement, modification in self._localizable_placements(match.best_peptide):
            if placement.confident and mass_key(modification.mass) == mass:
                sites[placement.site] = self._own_score(match, placement.name, placement.site)

        if match.has_evidence:
            for name in match.evidence.scored_modifications():
                try:
                    modification = self.modification_provider.get_modification(name)
                except ModificationNotFoundError as e:
                    logger.warning(f"Spectrum match {match.key}: skipping scores of {e.name}")
                    continue
                if mass_key(modification.mass) != mass:
                    continue
                for site in match.evidence.confident_sites(name):
                    score = self._own_score(match, name, site)
                    sites[site] = max(sites.get(site, score), score)
        return sites

    def _add_own_evidence(
        self,
        match: SpectrumMatch,
        mass: float,
        entries: Placements,
        possible: Dict[int, str],
        held: set,
        scores: Dict[int, float],
        names: Dict[int, str],
    ) -> None:
        """Fold the scores of the match itself into the site table of a mass."""

        def fold(site: int, value: float, name: str) -> None:
            if value > scores.get(site, float("-inf")):
                scores[site] = value
                names[site] = possible.get(site, name)

        own_names = [p.name for p, _ in entries]
        if match.has_evidence:
            for name in match.evidence.scored_modifications():
                if name in own_names:
                    continue
                modification = self.modification_provider.get_modification(name)
                if mass_key(modification.mass) == mass:
                    own_names.append(name)

        for name in own_names:
            confident_sites = (
                match.evidence.confident_sites(name) if match.has_evidence else set()
            )
            scoring = match.evidence.get_scoring(name) if match.has_evidence else None
            if scoring is None:
                continue
            for site, score in scoring.scores(self.score_mode).items():
                if site not in possible:
                    continue
                boost = CONFIDENT_OWN_OFFSET if site in confident_sites else 0
                fold(site, score + boost, name)

        # Current sites stay candidates so every placement keeps somewhere to go
        for placement, _ in entries:
            if placement.confident or placement.site in held:
                continue
            fold(placement.site, self._own_score(match, placement.name, placement.site), placement.name)

        for site in held:
            scores.pop(site, None)
            names.pop(site, None)

    def _plan_moves(
        self,
        sequence: str,
        entries: Placements,
        sites: List[int],
        scores: Dict[int, float],
        names: Dict[int, str],
    ) -> List[Tuple[ModificationPlacement, int, str, float]]:
        """Map the ambiguous placements of a mass onto its chosen sites."""
        placements = [p for p, _ in entries if not p.confident]
        old_sites = [p.site for p in placements]
        if len(set(old_sites)) != len(old_sites):
            raise SiteAssignmentError(sequence, len(old_sites), len(set(old_sites)))

        mapping = align_all(old_sites, sites)
        moves = []
        for placement in placements:
            new_site = mapping[placement.site]
            if new_site is None:
                raise SiteAssignmentError(sequence, len(old_sites), len(sites))
            moves.append(
                (
                    placement,
                    new_site,
                    names.get(new_site, placement.name),
                    scores.get(new_site, 0.0),
                )
            )
        return moves

    def _move_placement(
        self,
        match: SpectrumMatch,
        placement: ModificationPlacement,
        new_site: int,
        name: str,
        score: float,
    ) -> None:
        moved = new_site != placement.site
        if moved:
            logger.debug(
                f"Spectrum match {match.key}: {placement.name} moved from "
                f"site {placement.site} to {new_site}"
            )
        placement.site = new_site
        placement.name = name

        if score > CONFIDENT_OWN_OFFSET:
            placement.mark_confident()
            match.evidence.add_confident_site(placement.name, new_site)
        elif score > CONFIDENT_RELATED_OFFSET:
            placement.mark_inferred()
        elif moved:
            placement.inferred = False

    def _own_score(self, match: SpectrumMatch, name: str, site: int) -> float:
        if not match.has_evidence:
            return 0.0
        scoring = match.evidence.get_scoring(name)
        if scoring is None:
            return 0.0
        return scoring.get_score(site, self.score_mode)

    def _possible_sites(
        self, peptide: Peptide, entries: Placements, held: set
    ) -> Dict[int, str]:
        """Free sites where a variable modification of this mass can sit."""
        modifications = [modification for _, modification in entries]
        mass = mass_key(modifications[0].mass)
        for modification in self._get_variable_modifications():
            if mass_key(modification.mass) == mass and modification not in modifications:
                modifications.append(modification)

        possible: Dict[int, str] = {}
        for modification in modifications:
            for site in get_possible_sites(
                peptide.sequence,
                modification,
                peptide.protein_n_term,
                peptide.protein_c_term,
            ):
                if site not in held:
                    possible.setdefault(site, modification.name)
        return possible

    def _localizable_placements(self, peptide: Peptide) -> Placements:
        """
        Variable placements whose site is open to question.

        A placement is localizable when its modification targets residues, or
        when another variable modification of the same mass has another type.
        """
        localizable = []
        for placement in peptide.variable_placements:
            modification = self.modification_provider.get_modification(placement.name)
            if modification.modification_type == ModificationType.RESIDUE or any(
                mass_key(other.mass) == mass_key(modification.mass)
                and other.modification_type != modification.modification_type
                for other in self._get_variable_modifications()
            ):
                localizable.append((placement, modification))
        return localizable

    def _get_variable_modifications(self) -> List[Modification]:
        if self._variable_modifications is None:
            self._variable_modifications = [
                self.modification_provider.get_modification(name)
                for name in self.config.variable_modifications
            ]
        return self._variable_modifications
