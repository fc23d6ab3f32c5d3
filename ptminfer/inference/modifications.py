"""
Modification module.

This module contains the Modification class, its topological type and the
providers resolving modification names to masses and types.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from pyopenms import ModificationsDB, ResidueModification

from .exceptions import ModificationNotFoundError

logger = logging.getLogger(__name__)

AMINO_ACIDS = frozenset("ACDEFGHIKLMNPQRSTVWY")


class ModificationType(Enum):
    """Where on a peptide a modification can be attached."""

    RESIDUE = "modaa"
    PROTEIN_N_TERM = "modn_protein"
    PROTEIN_N_TERM_AT_RESIDUE = "modnaa_protein"
    PROTEIN_C_TERM = "modc_protein"
    PROTEIN_C_TERM_AT_RESIDUE = "modcaa_protein"
    PEPTIDE_N_TERM = "modn_peptide"
    PEPTIDE_N_TERM_AT_RESIDUE = "modnaa_peptide"
    PEPTIDE_C_TERM = "modc_peptide"
    PEPTIDE_C_TERM_AT_RESIDUE = "modcaa_peptide"

    @property
    def is_n_term(self) -> bool:
        return self in (
            ModificationType.PROTEIN_N_TERM,
            ModificationType.PROTEIN_N_TERM_AT_RESIDUE,
            ModificationType.PEPTIDE_N_TERM,
            ModificationType.PEPTIDE_N_TERM_AT_RESIDUE,
        )

    @property
    def is_c_term(self) -> bool:
        return self in (
            ModificationType.PROTEIN_C_TERM,
            ModificationType.PROTEIN_C_TERM_AT_RESIDUE,
            ModificationType.PEPTIDE_C_TERM,
            ModificationType.PEPTIDE_C_TERM_AT_RESIDUE,
        )

    @property
    def is_protein_term(self) -> bool:
        return self in (
            ModificationType.PROTEIN_N_TERM,
            ModificationType.PROTEIN_N_TERM_AT_RESIDUE,
            ModificationType.PROTEIN_C_TERM,
            ModificationType.PROTEIN_C_TERM_AT_RESIDUE,
        )

    @property
    def needs_residue(self) -> bool:
        """Whether the attachment depends on the amino acid at the site."""
        return self in (
            ModificationType.RESIDUE,
            ModificationType.PROTEIN_N_TERM_AT_RESIDUE,
            ModificationType.PROTEIN_C_TERM_AT_RESIDUE,
            ModificationType.PEPTIDE_N_TERM_AT_RESIDUE,
            ModificationType.PEPTIDE_C_TERM_AT_RESIDUE,
        )


@dataclass(frozen=True)
class Modification:
    """
    A modification of known composition.

    Attributes:
        name: Unique name, e.g. "Phospho (S)"
        mass: Monoisotopic mass shift in Da
        modification_type: Topological type
        residues: Amino acids carrying the modification (empty for pure termini)
        short_name: Name understood by AASequence.setModification, e.g. "Phospho"
    """

    name: str
    mass: float
    modification_type: ModificationType = ModificationType.RESIDUE
    residues: FrozenSet[str] = field(default_factory=frozenset)
    short_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "residues", frozenset(self.residues))
        if self.short_name is None:
            object.__setattr__(self, "short_name", self.name.split(" (")[0])

    def targets(self, amino_acid: str) -> bool:
        """Whether the modification can sit on the given amino acid."""
        return not self.residues or amino_acid.upper() in self.residues


class ModificationProvider:
    """
    In-memory modification lookup: name -> Modification.
    """

    def __init__(self, modifications: Optional[Iterable[Modification]] = None):
        self._modifications: Dict[str, Modification] = {}
        for modification in modifications or []:
            self.add_modification(modification)

    def add_modification(self, modification: Modification) -> None:
        self._modifications[modification.name] = modification

    def get_modification(self, name: str) -> Modification:
        """
        Get a modification by name.

        Args:
            name: Modification name

        Returns:
            The modification

        Raises:
            ModificationNotFoundError: If the name is unknown
        """
        modification = self._modifications.get(name)
        if modification is None:
            raise ModificationNotFoundError(name)
        return modification

    def contains(self, name: str) -> bool:
        return name in self._modifications

    def names(self) -> List[str]:
        return list(self._modifications)

    def __contains__(self, name: str) -> bool:
        return self.contains(name)


class PyOpenMSModificationProvider(ModificationProvider):
    """
    Modification provider backed by the pyOpenMS ModificationsDB (UniMod).

    Names are resolved lazily on first access and cached.
    """

    def __init__(self, modifications: Optional[Iterable[Modification]] = None):
        super().__init__(modifications)
        self.mod_db = ModificationsDB()

    def get_modification(self, name: str) -> Modification:
        if name in self._modifications:
            return self._modifications[name]

        residue_modification = self._lookup(name)
        modification = modification_from_pyopenms(name, residue_modification)
        logger.debug(
            f"Resolved {name}: mass {modification.mass:.6f}, "
            f"type {modification.modification_type.name}"
        )
        self.add_modification(modification)
        return modification

    def contains(self, name: str) -> bool:
        try:
            self.get_modification(name)
        except ModificationNotFoundError:
            return False
        return True

    def _lookup(self, name: str) -> ResidueModification:
        try:
            mod = self.mod_db.getModification(name)
        except RuntimeError:
            mod = None
        if mod is None or mod.getName() == "unknown modification":
            raise ModificationNotFoundError(name)
        return mod


def modification_from_pyopenms(name: str, mod: ResidueModification) -> Modification:
    """
    Convert a pyOpenMS ResidueModification into a Modification.

    Args:
        name: Name to register the modification under
        mod: pyOpenMS residue modification

    Returns:
        Modification with mass, type and target residues
    """
    origin = mod.getOrigin()
    if isinstance(origin, bytes):
        origin = origin.decode()
    residue_specific = origin.isalpha() and origin.upper() != "X"
    residues = frozenset(origin.upper()) if residue_specific else frozenset()

    specificity = mod.getTermSpecificity()
    if specificity == ResidueModification.N_TERM:
        modification_type = (
            ModificationType.PEPTIDE_N_TERM_AT_RESIDUE
            if residue_specific
            else ModificationType.PEPTIDE_N_TERM
        )
    elif specificity == ResidueModification.C_TERM:
        modification_type = (
            ModificationType.PEPTIDE_C_TERM_AT_RESIDUE
            if residue_specific
            else ModificationType.PEPTIDE_C_TERM
        )
    elif specificity == ResidueModification.PROTEIN_N_TERM:
        modification_type = (
            ModificationType.PROTEIN_N_TERM_AT_RESIDUE
            if residue_specific
            else ModificationType.PROTEIN_N_TERM
        )
    elif specificity == ResidueModification.PROTEIN_C_TERM:
        modification_type = (
            ModificationType.PROTEIN_C_TERM_AT_RESIDUE
            if residue_specific
            else ModificationType.PROTEIN_C_TERM
        )
    else:
        modification_type = ModificationType.RESIDUE
        if not residue_specific:
            residues = AMINO_ACIDS

    return Modification(
        name=name,
        mass=mod.getDiffMonoMass(),
        modification_type=modification_type,
        residues=residues,
        short_name=mod.getId(),
    )
