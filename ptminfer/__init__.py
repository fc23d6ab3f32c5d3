"""
ptminfer: cross-spectrum modification site inference.

This package resolves ambiguous post-translational modification sites by
propagating confident localizations between spectra of the same or of
overlapping peptides.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from . import inference
from .inference.alignment import align, align_all, align_all_constrained
from .inference.assignment import SiteCandidates, assign_sites

__all__ = [
    "inference",
    "align",
    "align_all",
    "align_all_constrained",
    "SiteCandidates",
    "assign_sites",
]
