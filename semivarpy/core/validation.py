"""
Input validation for semivariogram computations.

Structural problems are raised before any statistic is computed.
"""

import logging

import numpy as np

from semivarpy.exceptions import InvalidDimensionError, InvalidParameterError

logger = logging.getLogger(__name__)

MISSING_POLICIES = ("raise", "drop")


def validate_n_classes(n_classes) -> int:
    """
    Check a requested number of distance classes.

    Parameters
    ----------
    n_classes : int
        Requested number of classes.

    Returns
    -------
    int
        The class count as a native int.
    """
    if isinstance(n_classes, bool) or not isinstance(n_classes, (int, np.integer)):
        raise InvalidParameterError(
            f"n_classes must be a positive integer, got {n_classes!r}"
        )
    if n_classes < 1:
        raise InvalidParameterError(f"n_classes must be >= 1, got {n_classes}")
    return int(n_classes)


def validate_chunk_size(chunk_size) -> int:
    """Check the number of matrix rows processed per block."""
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, (int, np.integer)):
        raise InvalidParameterError(
            f"chunk_size must be a positive integer, got {chunk_size!r}"
        )
    if chunk_size < 1:
        raise InvalidParameterError(f"chunk_size must be >= 1, got {chunk_size}")
    return int(chunk_size)


def validate_missing(missing: str) -> str:
    if missing not in MISSING_POLICIES:
        raise InvalidParameterError(
            f"Unknown missing policy: '{missing}'. Use 'raise' or 'drop'."
        )
    return missing


def validate_inputs(dist, y, missing: str = "raise") -> tuple[np.ndarray, np.ndarray]:
    """
    Validate a distance matrix and its co-indexed response vector.

    Parameters
    ----------
    dist : array-like
        Pairwise distance matrix of shape (n, n).
    y : array-like
        Response values of length n, ordered like the matrix rows.
    missing : {"raise", "drop"}, default="raise"
        How NaN distances below the diagonal are treated. "raise" rejects
        them; "drop" leaves them to be excluded from every class.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Float64 views of (dist, y). The inputs are not modified.

    Raises
    ------
    InvalidDimensionError
        Matrix not square, fewer than 2 sites, response not 1-D or of a
        different length.
    InvalidParameterError
        Negative distances, NaN distances under ``missing="raise"``,
        non-finite responses or an unknown missing policy.
    """
    validate_missing(missing)

    dist = np.asarray(dist, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    if dist.ndim != 2 or dist.shape[0] != dist.shape[1]:
        raise InvalidDimensionError(
            f"Distance matrix must be square, got shape {dist.shape}"
        )
    if y.ndim != 1:
        raise InvalidDimensionError(
            f"Response must be a 1-D vector, got shape {y.shape}"
        )

    n = dist.shape[0]
    if y.shape[0] != n:
        raise InvalidDimensionError(
            f"Response length {y.shape[0]} does not match {n} x {n} distance matrix"
        )
    if n < 2:
        raise InvalidDimensionError(f"At least 2 sites are required, got {n}")

    if not np.all(np.isfinite(y)):
        raise InvalidParameterError("Response vector contains NaN or infinite values")

    with np.errstate(invalid="ignore"):
        if np.any(dist < 0):
            raise InvalidParameterError("Distance matrix contains negative distances")

    if np.any(np.isinf(dist)):
        raise InvalidParameterError("Distance matrix contains infinite distances")

    if missing == "raise" and np.any(np.tril(np.isnan(dist), k=-1)):
        raise InvalidParameterError(
            "Distance matrix contains NaN distances. Pass missing='drop' to exclude them."
        )

    if not np.allclose(dist, dist.T, equal_nan=True):
        logger.warning("Distance matrix is not symmetric; only the lower triangle is used")

    return dist, y
