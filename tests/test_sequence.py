"""
Test sequence helpers.
"""

import pytest

from ptminfer.inference.modifications import Modification, ModificationType
from ptminfer.inference.sequence import (
    cterm_site,
    find_occurrences,
    get_possible_sites,
    relate_sequences,
    transpose_site,
)


def test_find_occurrences_non_overlapping():
    """Test that occurrences never overlap and come in ascending order."""
    assert find_occurrences("AA", "AAAA") == [0, 2]
    assert find_occurrences("AA", "AAA") == [0]
    assert find_occurrences("PEP", "PEPTIDEPEPK") == [0, 7]
    assert find_occurrences("XYZ", "PEPTIDE") == []
    assert find_occurrences("", "PEPTIDE") == []


def test_relate_sequences():
    """Test identical, superstring and substring relations."""
    assert relate_sequences("PEPSIDTK", "PEPSIDTK") == ("identical", [0])
    assert relate_sequences("PEPSIDTK", "KPEPSIDTK") == ("superstring", [1])
    assert relate_sequences("KPEPSIDTK", "PEPSIDTK") == ("substring", [1])
    assert relate_sequences("PEPSIDTK", "LLSTK") == (None, [])


def test_transpose_site_superstring():
    """Test that sites of a longer peptide shift into the shorter one."""
    # PEPSIDTK sits at offset 1 of KPEPSIDTK
    assert transpose_site(8, "superstring", 1, "PEPSIDTK", "KPEPSIDTK") == 7
    assert transpose_site(1, "superstring", 1, "PEPSIDTK", "KPEPSIDTK") is None
    assert transpose_site(0, "superstring", 1, "PEPSIDTK", "KPEPSIDTK") is None
    assert transpose_site(10, "superstring", 1, "PEPSIDTK", "KPEPSIDTK") == 9


def test_transpose_site_substring():
    """Test that sites of a shorter peptide shift into the longer one."""
    assert transpose_site(7, "substring", 1, "KPEPSIDTK", "PEPSIDTK") == 8
    assert transpose_site(0, "substring", 1, "KPEPSIDTK", "PEPSIDTK") is None
    assert transpose_site(0, "substring", 0, "PEPSIDTKR", "PEPSIDTK") == 0
    assert transpose_site(9, "substring", 1, "KPEPSIDTK", "PEPSIDTK") == 10


def test_cterm_site():
    assert cterm_site("PEPTIDE") == 8


def test_possible_sites_residue():
    """Test residue-specific sites."""
    phospho = Modification("Phospho (S)", 79.966331, residues={"S", "T"})

    assert get_possible_sites("SPEPTSK", phospho) == [1, 5, 6]
    assert get_possible_sites("", phospho) == []


def test_possible_sites_termini():
    """Test peptide and protein terminal sites."""
    acetyl = Modification(
        "Acetyl (N-term)", 42.010565, modification_type=ModificationType.PEPTIDE_N_TERM
    )
    protein_acetyl = Modification(
        "Acetyl (Protein N-term)",
        42.010565,
        modification_type=ModificationType.PROTEIN_N_TERM,
    )
    amidated = Modification(
        "Amidated (C-term K)",
        -0.984016,
        modification_type=ModificationType.PEPTIDE_C_TERM_AT_RESIDUE,
        residues={"K"},
    )

    assert get_possible_sites("PEPTIDEK", acetyl) == [0]
    assert get_possible_sites("PEPTIDEK", protein_acetyl) == []
    assert get_possible_sites("PEPTIDEK", protein_acetyl, protein_n_term=True) == [0]
    assert get_possible_sites("PEPTIDEK", amidated) == [9]
    assert get_possible_sites("PEPTIDER", amidated) == []


def test_modification_type_properties():
    assert ModificationType.PROTEIN_C_TERM_AT_RESIDUE.is_c_term
    assert ModificationType.PROTEIN_C_TERM_AT_RESIDUE.is_protein_term
    assert ModificationType.PEPTIDE_N_TERM.is_n_term
    assert not ModificationType.PEPTIDE_N_TERM.needs_residue
    assert ModificationType.RESIDUE.needs_residue


def test_modification_short_name():
    assert Modification("Phospho (S)", 79.966331).short_name == "Phospho"
