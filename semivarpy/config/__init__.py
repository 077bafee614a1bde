"""Configuration for semivariogram analysis."""

from semivarpy.config.dataclasses import SemivariogramConfig
from semivarpy.config.presets import SemivariogramPresets

__all__ = ["SemivariogramConfig", "SemivariogramPresets"]
