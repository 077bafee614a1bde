"""
semivarpy - distance-class semivariograms and spatial autocorrelation

Given a matrix of pairwise distances between sampled sites and a value
observed at each site (typically model residuals), semivarpy bins the site
pairs into equal-width distance classes and reports, per class, the
empirical semivariance, Moran's I and Geary's c.

Key Features:
- Semivariance, Moran's I and Geary's c per distance class
- Sturges' rule default for the number of classes
- Any distance metric (Euclidean, great-circle, over-water, ...)
- Permutation test of per-class Moran's I
- Optional GPU accumulation via CuPy

Example:
    >>> from semivarpy import compute_semivariogram, euclidean_distance_matrix
    >>> dist = euclidean_distance_matrix(coords)
    >>> table = compute_semivariogram(dist, residuals)
"""

__version__ = "0.1.0"

from semivarpy.analysis.residuals import align_residuals, residual_semivariogram
from semivarpy.config import SemivariogramConfig, SemivariogramPresets
from semivarpy.core.classes import (
    DistanceClasses,
    bin_distances,
    class_table,
    sturges_classes,
)
from semivarpy.core.distances import euclidean_distance_matrix, great_circle_distance_matrix
from semivarpy.core.semivariance import compute_semivariogram
from semivarpy.exceptions import (
    DegenerateInputError,
    InvalidDimensionError,
    InvalidParameterError,
    SemivarianceError,
)
from semivarpy.gpu.backend import GPU_AVAILABLE, get_array_module
from semivarpy.stats.permutation import permutation_test_moran

__all__ = [
    # Version
    "__version__",
    # Core - semivariogram
    "compute_semivariogram",
    "sturges_classes",
    "bin_distances",
    "class_table",
    "DistanceClasses",
    # Core - distances
    "euclidean_distance_matrix",
    "great_circle_distance_matrix",
    # Stats
    "permutation_test_moran",
    # Analysis
    "residual_semivariogram",
    "align_residuals",
    # Config
    "SemivariogramConfig",
    "SemivariogramPresets",
    # Errors
    "SemivarianceError",
    "InvalidDimensionError",
    "InvalidParameterError",
    "DegenerateInputError",
    # GPU
    "get_array_module",
    "GPU_AVAILABLE",
]
