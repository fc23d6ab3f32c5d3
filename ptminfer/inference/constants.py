"""
Constants and default configurations for peptide inference
"""

# Score offsets by evidence source
CONFIDENT_OWN_OFFSET = 400  # Site already confident on the same match
CONFIDENT_OTHER_OFFSET = 200  # Confident site on a match with the same sequence
CONFIDENT_RELATED_OFFSET = 100  # Confident site on a sub- or super-sequence

# Site conventions (residues are 1-based, C-terminus is sequence length + 1)
NTERM_SITE = 0

# Scoring modes
PROBABILISTIC_SCORE = "probabilistic"
DELTA_SCORE = "delta"
SCORE_MODES = (PROBABILISTIC_SCORE, DELTA_SCORE)

# Tie-break weight added to the assignment costs, small against any score step
TIE_BREAK_EPSILON = 1e-9

# Cost given to forbidden (mass, site) cells of the assignment matrix
FORBIDDEN_COST = 1e12

# Default configuration
DEFAULT_CONFIG = {
    # Scoring settings
    "score_mode": PROBABILISTIC_SCORE,
    # Modification settings
    "variable_modifications": ["Phospho (S)", "Phospho (T)", "Phospho (Y)"],
    "fixed_modifications": ["Carbamidomethyl (C)"],
    # idXML settings
    "site_scores_meta_value": "PhosphoRS_site_probs",
    "delta_scores_meta_value": "ptminfer_site_delta_scores",
    "confident_threshold": 95.0,
    "zero_based_site_scores": True,
    # Progress settings
    "progress_interval": 100,
}

# Meta values written back to idXML hits
CONFIDENT_SITES_META_VALUE = "ptminfer_confident_sites"
INFERRED_SITES_META_VALUE = "ptminfer_inferred_sites"

# Modification masses are compared after rounding to this many decimals
MASS_DECIMALS = 4
