"""
Test the modification evidence store.
"""

import pytest

from ptminfer.inference.matches import ModificationPlacement, Peptide, SpectrumMatch
from ptminfer.inference.scores import ModificationEvidenceRecord, ModificationScoring


def test_scoring_modes():
    """Test probabilistic and delta scores."""
    scoring = ModificationScoring("Phospho (S)")
    scoring.set_probabilistic_score(4, 0.8)
    scoring.set_delta_score(4, 12.5)

    assert scoring.get_score(4, "probabilistic") == 0.8
    assert scoring.get_score(4, "delta") == 12.5
    assert scoring.get_score(7) == 0.0
    assert scoring.scores("delta") == {4: 12.5}

    with pytest.raises(ValueError):
        scoring.scores("unknown")


def test_record_accessors():
    """Test adding and retrieving scorings."""
    record = ModificationEvidenceRecord()
    assert record.get_scoring("Phospho (S)") is None
    assert record.confident_sites("Phospho (S)") == set()

    record.add_scoring("Phospho (S)", ModificationScoring("Phospho (S)"))
    record.add_confident_site("Phospho (T)", 7)

    assert record.contains("Phospho (S)")
    assert "Phospho (T)" in record
    assert record.scored_modifications() == ["Phospho (S)", "Phospho (T)"]
    assert record.confident_sites("Phospho (T)") == {7}
    assert record.get_scoring("Phospho (T)").is_confident(7)
    assert record.get_or_create("Phospho (S)") is record.get_scoring("Phospho (S)")


def test_match_evidence_created_lazily():
    """Test that a match without evidence gets its own record on access."""
    first = SpectrumMatch("a", Peptide("PEPSIDE"))
    second = SpectrumMatch("b", Peptide("PEPSIDE"))

    assert not first.has_evidence
    first.evidence.add_confident_site("Phospho (S)", 4)

    assert first.has_evidence
    assert not second.has_evidence
    assert second.evidence is not first.evidence


def test_placement_flags_are_exclusive():
    """Test that confident and inferred are never both set."""
    placement = ModificationPlacement("Phospho (S)", 4)
    placement.mark_inferred()
    assert placement.inferred

    placement.mark_confident()
    assert placement.confident
    assert not placement.inferred

    with pytest.raises(ValueError):
        placement.mark_inferred()
    with pytest.raises(ValueError):
        ModificationPlacement("Phospho (S)", 4, confident=True, inferred=True)


def test_placement_site_range():
    """Test that sites outside the peptide are rejected."""
    Peptide("PEPS", [ModificationPlacement("Acetyl (C-term)", 5)])
    with pytest.raises(ValueError):
        Peptide("PEPS", [ModificationPlacement("Phospho (S)", 6)])
