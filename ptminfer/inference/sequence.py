"""
Sequence helpers for peptide inference.

Sites follow one convention throughout the package: the N-terminus is site 0,
residues are numbered 1..n and the C-terminus is site n + 1.
"""

from typing import List, Optional, Tuple

from .constants import NTERM_SITE
from .modifications import Modification, ModificationType


def cterm_site(sequence: str) -> int:
    """Site index of the C-terminus of the given sequence."""
    return len(sequence) + 1


def find_occurrences(short: str, long: str) -> List[int]:
    """
    Find all non-overlapping occurrences of a short sequence in a longer one.

    The search runs left to right; after a hit at ``start`` it resumes at
    ``start + len(short)``.

    Args:
        short: Sequence to look for
        long: Sequence to search in

    Returns:
        Ascending 0-based start offsets, empty if there is no occurrence
    """
    if not short or len(short) > len(long):
        return []

    starts = []
    start = long.find(short)
    while start >= 0:
        starts.append(start)
        start = long.find(short, start + len(short))
    return starts


def relate_sequences(sequence: str, other_sequence: str) -> Tuple[Optional[str], List[int]]:
    """
    Describe how another peptide sequence relates to the given one.

    Args:
        sequence: Sequence under resolution
        other_sequence: Sequence of another peptide

    Returns:
        Tuple (relation, starts). Relation is "identical", "superstring" (the
        other sequence contains this one), "substring" (this sequence contains
        the other one) or None. Starts are the occurrence offsets of the
        shorter sequence in the longer one.
    """
    if sequence == other_sequence:
        return "identical", [0]
    if sequence in other_sequence:
        return "superstring", find_occurrences(sequence, other_sequence)
    if other_sequence in sequence:
        return "substring", find_occurrences(other_sequence, sequence)
    return None, []


def transpose_site(
    site: int, relation: str, start: int, sequence: str, other_sequence: str
) -> Optional[int]:
    """
    Translate a site of another peptide into the frame of this peptide.

    Args:
        site: Site on the other peptide
        relation: Relation returned by relate_sequences
        start: Occurrence offset returned by relate_sequences
        sequence: Sequence under resolution
        other_sequence: Sequence of the other peptide

    Returns:
        Site on this peptide, or None if it falls outside of it
    """
    n = len(sequence)
    other_n = len(other_sequence)

    if relation == "identical":
        return site

    if relation == "superstring":
        # This sequence sits at other_sequence[start:start + n]
        if site == NTERM_SITE:
            return NTERM_SITE if start == 0 else None
        if site == other_n + 1:
            return n + 1 if start + n == other_n else None
        shifted = site - start
        return shifted if 1 <= shifted <= n else None

    if relation == "substring":
        # The other sequence sits at sequence[start:start + other_n]
        if site == NTERM_SITE:
            return NTERM_SITE if start == 0 else None
        if site == other_n + 1:
            return n + 1 if start + other_n == n else None
        return site + start

    return None


def get_possible_sites(
    sequence: str,
    modification: Modification,
    protein_n_term: bool = False,
    protein_c_term: bool = False,
) -> List[int]:
    """
    Get the sites of a peptide where a modification can be attached.

    Args:
        sequence: Unmodified peptide sequence
        modification: Modification of interest
        protein_n_term: Whether the peptide starts its protein
        protein_c_term: Whether the peptide ends its protein

    Returns:
        Ascending list of possible sites
    """
    if not sequence:
        return []

    modification_type = modification.modification_type
    first, last = sequence[0], sequence[-1]

    if modification_type == ModificationType.RESIDUE:
        return [
            i + 1 for i, aa in enumerate(sequence) if modification.targets(aa)
        ]
    if modification_type == ModificationType.PEPTIDE_N_TERM:
        return [NTERM_SITE]
    if modification_type == ModificationType.PEPTIDE_N_TERM_AT_RESIDUE:
        return [NTERM_SITE] if modification.targets(first) else []
    if modification_type == ModificationType.PROTEIN_N_TERM:
        return [NTERM_SITE] if protein_n_term else []
    if modification_type == ModificationType.PROTEIN_N_TERM_AT_RESIDUE:
        return [NTERM_SITE] if protein_n_term and modification.targets(first) else []
    if modification_type == ModificationType.PEPTIDE_C_TERM:
        return [cterm_site(sequence)]
    if modification_type == ModificationType.PEPTIDE_C_TERM_AT_RESIDUE:
        return [cterm_site(sequence)] if modification.targets(last) else []
    if modification_type == ModificationType.PROTEIN_C_TERM:
        return [cterm_site(sequence)] if protein_c_term else []
    if modification_type == ModificationType.PROTEIN_C_TERM_AT_RESIDUE:
        return (
            [cterm_site(sequence)]
            if protein_c_term and modification.targets(last)
            else []
        )

    raise ValueError(f"Unsupported modification type: {modification_type}")
