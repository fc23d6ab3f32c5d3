"""
Test configuration and fixtures for ptminfer tests.
"""

import pytest

from ptminfer.inference.matches import (
    ModificationPlacement,
    Peptide,
    SpectrumMatch,
    SpectrumMatchStore,
)
from ptminfer.inference.modifications import (
    Modification,
    ModificationProvider,
    ModificationType,
)
from ptminfer.inference.scores import ModificationEvidenceRecord

PHOSPHO_MASS = 79.966331
ACETYL_MASS = 42.010565


@pytest.fixture
def phospho_modifications():
    """Phosphorylation of S, T and Y."""
    return [
        Modification("Phospho (S)", PHOSPHO_MASS, residues={"S"}),
        Modification("Phospho (T)", PHOSPHO_MASS, residues={"T"}),
        Modification("Phospho (Y)", PHOSPHO_MASS, residues={"Y"}),
    ]


@pytest.fixture
def provider(phospho_modifications):
    """In-memory modification provider."""
    return ModificationProvider(
        phospho_modifications
        + [
            Modification("Carbamidomethyl (C)", 57.021464, residues={"C"}),
            Modification(
                "Acetyl (N-term)",
                ACETYL_MASS,
                modification_type=ModificationType.PEPTIDE_N_TERM,
            ),
            Modification("Acetyl (K)", ACETYL_MASS, residues={"K"}),
        ]
    )


def make_match(key, sequence, placements, probabilities=None, confident_sites=None):
    """
    Build a spectrum match.

    Args:
        key: Match key
        sequence: Peptide sequence
        placements: List of (name, site, confident) tuples
        probabilities: Mapping name -> {site: score}
        confident_sites: Mapping name -> sites flagged confident in the evidence
    """
    peptide = Peptide(
        sequence,
        [
            ModificationPlacement(name, site, confident=confident)
            for name, site, confident in placements
        ],
    )
    evidence = None
    if probabilities or confident_sites:
        evidence = ModificationEvidenceRecord()
        for name, scores in (probabilities or {}).items():
            scoring = evidence.get_or_create(name)
            for site, score in scores.items():
                scoring.set_probabilistic_score(site, score)
        for name, sites in (confident_sites or {}).items():
            for site in sites:
                evidence.add_confident_site(name, site)
    return SpectrumMatch(key, peptide, evidence=evidence)


@pytest.fixture
def match_factory():
    """Factory building spectrum matches."""
    return make_match


@pytest.fixture
def two_spectra_store():
    """
    Two spectra of PEPSIDTK: X is confident at S4, Y is ambiguous between
    S4 and T7 and currently placed at T7.
    """
    x = make_match(
        "X",
        "PEPSIDTK",
        [("Phospho (S)", 4, True)],
        probabilities={"Phospho (S)": {4: 40.0, 7: 1.0}},
    )
    y = make_match(
        "Y",
        "PEPSIDTK",
        [("Phospho (T)", 7, False)],
        probabilities={"Phospho (T)": {4: 40.0, 7: 50.0}},
    )
    return SpectrumMatchStore([x, y])


# Markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "cli: marks tests that test CLI functionality")
    config.addinivalue_line("markers", "algorithm: marks tests that test algorithm functionality")
    config.addinivalue_line("markers", "pyopenms: marks tests that build pyOpenMS objects")
