"""
Errors raised while inferring modification sites.
"""


class InferenceError(Exception):
    """Base class for peptide inference errors."""


class ModificationNotFoundError(InferenceError, KeyError):
    """Raised when a modification name is unknown to the provider."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self):
        return f"Modification not found: {self.name}"


class SiteAssignmentError(InferenceError):
    """
    Raised when the site assignment does not account for every modification
    occurrence of a peptide.
    """

    def __init__(self, sequence: str, expected: int, actual: int):
        self.sequence = sequence
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Site assignment for peptide {sequence} returned {actual} "
            f"modification sites, expected {expected}"
        )
