"""
Configuration dataclasses for semivariogram analysis.

A single dataclass gathers the options shared by the semivariogram,
the permutation test and the residual diagnostics, with JSON save/load.
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, Optional

import numpy as np

from semivarpy.core.validation import (
    validate_chunk_size,
    validate_missing,
    validate_n_classes,
)
from semivarpy.exceptions import InvalidParameterError


def _convert_to_native(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, dict):
        return {k: _convert_to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_to_native(v) for v in obj]
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    else:
        return obj


@dataclass
class SemivariogramConfig:
    """
    Semivariogram analysis configuration.

    Parameters
    ----------
    n_classes : int, optional
        Number of distance classes. None uses Sturges' rule on the
        number of site pairs.
    missing : str
        "raise" rejects NaN distances, "drop" excludes those pairs.
    chunk_size : int
        Rows of the lower triangle processed per block.
    use_gpu : bool
        Accumulate on GPU if CuPy is available.
    n_permutations : int
        Permutations for the Moran's I test (0 disables the test).
    random_seed : int, optional
        Seed for the permutation test.

    Example
    -------
    >>> config = SemivariogramConfig(n_classes=15)
    >>> config.save("semivariogram.json")
    >>> SemivariogramConfig.load("semivariogram.json").n_classes
    15
    """

    n_classes: Optional[int] = None
    missing: str = "raise"
    chunk_size: int = 1024
    use_gpu: bool = False
    n_permutations: int = 0
    random_seed: Optional[int] = None

    def validate(self) -> "SemivariogramConfig":
        """Check option values, returning self."""
        if self.n_classes is not None:
            validate_n_classes(self.n_classes)
        validate_missing(self.missing)
        validate_chunk_size(self.chunk_size)
        if self.n_permutations < 0:
            raise InvalidParameterError(
                f"n_permutations must be >= 0, got {self.n_permutations}"
            )
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return _convert_to_native(asdict(self))

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, d: dict) -> "SemivariogramConfig":
        config = cls()
        for k, v in d.items():
            if not hasattr(config, k):
                raise KeyError(f"Unknown configuration key: '{k}'")
            setattr(config, k, v)
        return config.validate()

    @classmethod
    def load(cls, path: str) -> "SemivariogramConfig":
        """Load configuration from JSON file."""
        with open(path) as f:
            d = json.load(f)
        return cls.from_dict(d)
