"""
Configuration module for peptide inference.

This module contains the InferenceConfig class, which manages configuration
settings for the peptide inference run.
"""

import logging
from typing import Dict, Any, Optional
from .constants import DEFAULT_CONFIG, SCORE_MODES

logger = logging.getLogger(__name__)


class InferenceConfig:
    """
    Configuration class for peptide inference.

    Holds the scoring mode, the searched modifications and the idXML
    meta value names. Unknown keys are reported and ignored.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize a new InferenceConfig instance.

        Args:
            config_dict: Optional dictionary containing configuration settings
        """
        self.config = {
            key: list(value) if isinstance(value, list) else value
            for key, value in DEFAULT_CONFIG.items()
        }

        if config_dict:
            self.update(config_dict)

    def update(self, config_dict: Dict[str, Any]) -> None:
        """
        Update configuration with new settings.

        Args:
            config_dict: Dictionary containing new configuration settings

        Raises:
            ValueError: If the score mode is not supported
        """
        for key, value in config_dict.items():
            if key in self.config:
                self.config[key] = value
            else:
                logger.warning(f"Unknown configuration key: {key}")

        if self.config["score_mode"] not in SCORE_MODES:
            raise ValueError(
                f"Unsupported score mode: {self.config['score_mode']} "
                f"(expected one of {', '.join(SCORE_MODES)})"
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        self.update({key: value})

    @property
    def score_mode(self) -> str:
        return self.config["score_mode"]

    @property
    def variable_modifications(self):
        return list(self.config["variable_modifications"])

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary containing all configuration settings
        """
        return self.config.copy()

    def __getitem__(self, key: str) -> Any:
        return self.config[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self.config
