"""
inference - two-phase modification site inference over spectrum matches.

Modules are imported on first attribute access.
"""

__version__ = "0.1.0"


def __getattr__(name):
    if name in ["PeptideInference", "WaitingHandler", "InferenceReport"]:
        from . import core

        return getattr(core, name)
    elif name == "InferenceConfig":
        from .config import InferenceConfig

        return InferenceConfig
    elif name in ["ModificationPlacement", "Peptide", "SpectrumMatch", "SpectrumMatchStore"]:
        from . import matches

        return getattr(matches, name)
    elif name in ["ModificationScoring", "ModificationEvidenceRecord"]:
        from . import scores

        return getattr(scores, name)
    elif name in [
        "Modification",
        "ModificationType",
        "ModificationProvider",
        "PyOpenMSModificationProvider",
    ]:
        from . import modifications

        return getattr(modifications, name)
    raise AttributeError(f"module 'inference' has no attribute '{name}'")


__all__ = [
    "PeptideInference",
    "WaitingHandler",
    "InferenceReport",
    "InferenceConfig",
    "ModificationPlacement",
    "Peptide",
    "SpectrumMatch",
    "SpectrumMatchStore",
    "ModificationScoring",
    "ModificationEvidenceRecord",
    "Modification",
    "ModificationType",
    "ModificationProvider",
    "PyOpenMSModificationProvider",
]
