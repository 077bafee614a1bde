"""Core semivariogram functions."""

from semivarpy.core.classes import (
    DistanceClasses,
    bin_distances,
    class_table,
    sturges_classes,
)
from semivarpy.core.distances import euclidean_distance_matrix, great_circle_distance_matrix
from semivarpy.core.semivariance import compute_semivariogram
from semivarpy.core.validation import validate_inputs

__all__ = [
    "DistanceClasses",
    "bin_distances",
    "class_table",
    "sturges_classes",
    "euclidean_distance_matrix",
    "great_circle_distance_matrix",
    "compute_semivariogram",
    "validate_inputs",
]
