"""
idXML adapter.

This module reads peptide identifications with pyOpenMS into a
SpectrumMatchStore and writes the inferred placements back to the hits.
"""

import ast
import logging
from typing import Dict, List, Optional, Tuple

from pyopenms import AASequence, IdXMLFile, PeptideHit, PeptideIdentification

from .config import InferenceConfig
from .constants import (
    CONFIDENT_SITES_META_VALUE,
    INFERRED_SITES_META_VALUE,
    PROBABILISTIC_SCORE,
)
from .matches import ModificationPlacement, Peptide, SpectrumMatch, SpectrumMatchStore
from .scores import ModificationEvidenceRecord
from .sequence import cterm_site

logger = logging.getLogger(__name__)

PROTEIN_N_TERM_AA = "["
PROTEIN_C_TERM_AA = "]"


def load_identifications(idxml_file: str) -> Tuple[list, list]:
    """
    Load protein and peptide identifications from an idXML file.

    Args:
        idxml_file: Path to the idXML file

    Returns:
        Tuple (protein_ids, peptide_ids)
    """
    logger.info(f"Loading identifications from {idxml_file}")
    protein_ids = []
    peptide_ids = []
    IdXMLFile().load(idxml_file, protein_ids, peptide_ids)
    logger.info(f"Loaded {len(peptide_ids)} peptide identifications")
    return protein_ids, peptide_ids


def store_identifications(idxml_file: str, protein_ids: list, peptide_ids: list) -> None:
    """Write protein and peptide identifications to an idXML file."""
    IdXMLFile().store(idxml_file, protein_ids, peptide_ids)
    logger.info(f"Results successfully written to: {idxml_file}")


def _decode(value):
    if isinstance(value, bytes):
        return value.decode()
    return value


def parse_site_scores(value, zero_based: bool = True) -> Dict[int, float]:
    """
    Parse a site score meta value such as "{3: 98.0, 5: 2.0}".

    PhosphoRS writes the scores as percentages keyed by 0-based residue index.

    Args:
        value: Meta value, a dictionary or its string representation
        zero_based: Whether residue keys are 0-based

    Returns:
        Mapping of 1-based residue site -> score
    """
    value = _decode(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return {}
        try:
            value = ast.literal_eval(value)
        except (ValueError, SyntaxError):
            logger.warning(f"Could not parse site scores: {value}")
            return {}
    if not isinstance(value, dict):
        logger.warning(f"Site scores are not a mapping: {value!r}")
        return {}

    shift = 1 if zero_based else 0
    return {int(site) + shift: float(score) for site, score in value.items()}


def best_hit_index(pid: PeptideIdentification) -> Optional[int]:
    """Index of the best scoring hit of an identification."""
    hits = pid.getHits()
    if not hits:
        return None
    scores = [hit.getScore() for hit in hits]
    if pid.isHigherScoreBetter():
        return scores.index(max(scores))
    return scores.index(min(scores))


def peptide_from_hit(
    hit: PeptideHit, fixed_modifications: Optional[List[str]] = None
) -> Peptide:
    """
    Build a Peptide from the modified sequence of a peptide hit.

    Args:
        hit: pyOpenMS peptide hit
        fixed_modifications: Names of the fixed modifications

    Returns:
        Peptide with one placement per modified position
    """
    fixed = set(fixed_modifications or [])
    sequence = hit.getSequence()
    unmodified = sequence.toUnmodifiedString()
    placements = []

    if sequence.hasNTerminalModification():
        name = sequence.getNTerminalModification().getFullId()
        placements.append(ModificationPlacement(name, 0, variable=name not in fixed))

    for i in range(sequence.size()):
        modification = sequence.getResidue(i).getModification()
        if modification is not None:
            name = modification.getFullId()
            placements.append(
                ModificationPlacement(name, i + 1, variable=name not in fixed)
            )

    if sequence.hasCTerminalModification():
        name = sequence.getCTerminalModification().getFullId()
        placements.append(
            ModificationPlacement(name, cterm_site(unmodified), variable=name not in fixed)
        )

    evidences = hit.getPeptideEvidences()
    return Peptide(
        unmodified,
        placements,
        protein_n_term=any(
            _decode(e.getAABefore()) == PROTEIN_N_TERM_AA for e in evidences
        ),
        protein_c_term=any(
            _decode(e.getAAAfter()) == PROTEIN_C_TERM_AA for e in evidences
        ),
    )


def aasequence_from_peptide(peptide: Peptide) -> AASequence:
    """Build the modified pyOpenMS sequence of a peptide."""
    sequence = AASequence.fromString(peptide.sequence)
    for placement in peptide.placements:
        if placement.site == 0:
            sequence.setNTerminalModification(placement.name)
        elif placement.site == cterm_site(peptide.sequence):
            sequence.setCTerminalModification(placement.name)
        else:
            sequence.setModification(placement.site - 1, placement.name)
    return sequence


def evidence_from_hit(
    hit: PeptideHit, peptide: Peptide, config: InferenceConfig
) -> Optional[ModificationEvidenceRecord]:
    """
    Read the site scores of a hit and flag its confident placements.

    Site scores are attached to the configured variable modifications of the
    hit. A variable placement whose site score reaches the confident threshold is
    marked confident.
    """
    zero_based = config.get("zero_based_site_scores", True)
    probabilities = {}
    deltas = {}
    if hit.metaValueExists(config["site_scores_meta_value"]):
        probabilities = parse_site_scores(
            hit.getMetaValue(config["site_scores_meta_value"]), zero_based
        )
    if hit.metaValueExists(config["delta_scores_meta_value"]):
        deltas = parse_site_scores(
            hit.getMetaValue(config["delta_scores_meta_value"]), zero_based
        )
    if not probabilities and not deltas:
        return None

    record = ModificationEvidenceRecord()
    threshold = config["confident_threshold"]
    scores = probabilities if config.score_mode == PROBABILISTIC_SCORE else deltas

    scored_names = set(config.variable_modifications)
    for placement in peptide.variable_placements:
        if placement.name not in scored_names:
            continue
        scoring = record.get_or_create(placement.name)
        for site, score in probabilities.items():
            scoring.set_probabilistic_score(site, score)
        for site, score in deltas.items():
            scoring.set_delta_score(site, score)
        if scores.get(placement.site, float("-inf")) >= threshold:
            placement.mark_confident()
            scoring.add_confident_site(placement.site)
    return record


def build_match_store(
    peptide_ids: List[PeptideIdentification], config: Optional[InferenceConfig] = None
) -> SpectrumMatchStore:
    """
    Build a spectrum match store from the best hit of every identification.

    Matches are keyed by the index of their identification.
    """
    config = config or InferenceConfig()
    store = SpectrumMatchStore()

    for i, pid in enumerate(peptide_ids):
        index = best_hit_index(pid)
        if index is None:
            continue
        hit = pid.getHits()[index]
        title = (
            _decode(pid.getMetaValue("spectrum_reference"))
            if pid.metaValueExists("spectrum_reference")
            else str(i)
        )
        peptide = peptide_from_hit(hit, config["fixed_modifications"])
        evidence = evidence_from_hit(hit, peptide, config)
        store.add(SpectrumMatch(i, peptide, spectrum_title=title, evidence=evidence))

    logger.info(f"Built {len(store)} spectrum matches")
    return store


def update_identifications(
    peptide_ids: List[PeptideIdentification], store: SpectrumMatchStore
) -> None:
    """Write the placements of the store back to the best hits."""
    for i, pid in enumerate(peptide_ids):
        if i not in store:
            continue
        peptide = store.get(i).best_peptide
        index = best_hit_index(pid)
        hits = pid.getHits()
        hit = hits[index]

        hit.setSequence(aasequence_from_peptide(peptide))
        variable = peptide.variable_placements
        hit.setMetaValue(
            CONFIDENT_SITES_META_VALUE,
            str(sorted(p.site for p in variable if p.confident)),
        )
        hit.setMetaValue(
            INFERRED_SITES_META_VALUE,
            str(sorted(p.site for p in variable if p.inferred)),
        )
        hits[index] = hit
        pid.setHits(hits)
