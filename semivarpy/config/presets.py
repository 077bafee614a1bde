"""
Preset configurations for common semivariogram analyses.
"""

from semivarpy.config.dataclasses import SemivariogramConfig


class SemivariogramPresets:
    """
    Factory class for preset configurations.

    Example
    -------
    >>> config = SemivariogramPresets.default()
    >>> config = SemivariogramPresets.get_preset("residual_diagnostics")
    """

    @staticmethod
    def default() -> SemivariogramConfig:
        """Sturges' rule classes, no permutation test."""
        return SemivariogramConfig()

    @staticmethod
    def residual_diagnostics() -> SemivariogramConfig:
        """
        Residual check for a fitted model.

        15 distance classes, the resolution used for residual
        semivariograms of site-level models.
        """
        return SemivariogramConfig(n_classes=15)

    @staticmethod
    def significance() -> SemivariogramConfig:
        """Residual classes plus a 999-permutation Moran's I test."""
        return SemivariogramConfig(n_classes=15, n_permutations=999, random_seed=42)

    @staticmethod
    def incomplete_distances() -> SemivariogramConfig:
        """
        Distance matrices with gaps.

        Use for over-water or network distances where some site pairs
        have no defined path (NaN); those pairs are dropped.
        """
        return SemivariogramConfig(missing="drop")

    @classmethod
    def get_preset(cls, name: str) -> SemivariogramConfig:
        """
        Get a preset configuration by name.

        Parameters
        ----------
        name : str
            Preset name.

        Returns
        -------
        SemivariogramConfig
            The preset configuration.
        """
        presets = {
            "default": cls.default,
            "residual_diagnostics": cls.residual_diagnostics,
            "significance": cls.significance,
            "incomplete_distances": cls.incomplete_distances,
        }

        if name not in presets:
            available = ", ".join(sorted(presets.keys()))
            raise ValueError(f"Unknown preset: '{name}'. Available: {available}")

        return presets[name]()

    @classmethod
    def list_presets(cls) -> list:
        """List all available preset names."""
        return ["default", "residual_diagnostics", "significance", "incomplete_distances"]
