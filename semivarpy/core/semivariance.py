"""
Empirical semivariogram with per-class Moran's I and Geary's c.

For each equal-width distance class c with W_c site pairs:

    semivariance(c) = sum (y_i - y_j)^2 / (2 W_c)
    moran(c)        = [sum (y_i - ybar)(y_j - ybar) / W_c] / [sum_k (y_k - ybar)^2 / n]
    geary(c)        = semivariance(c) / [sum_k (y_k - ybar)^2 / (n - 1)]

Sums run over unordered pairs (i > j) in the class. The denominators use
all n sites, so every class shares the same normalizer.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np
import pandas as pd

from semivarpy.core.classes import (
    DistanceClasses,
    classes_from_matrix,
    iter_pair_blocks,
    sturges_classes,
)
from semivarpy.core.validation import (
    validate_chunk_size,
    validate_inputs,
    validate_n_classes,
)
from semivarpy.gpu.backend import ensure_numpy, get_array_module

logger = logging.getLogger(__name__)

SEMIVARIOGRAM_COLUMNS = [
    "distance_class",
    "lower",
    "upper",
    "distance",
    "n_pairs",
    "semivariance",
    "morans_i",
    "gearys_c",
]


@dataclass
class ClassSums:
    """Per-class accumulators from one pass over the site pairs."""

    n_pairs: np.ndarray
    sq_diff: np.ndarray
    cross: np.ndarray
    n_missing: int = 0


def iter_class_pairs(
    dist: np.ndarray,
    classes: DistanceClasses,
    chunk_size: int = 1024,
) -> Iterator[tuple[np.ndarray, np.ndarray, np.ndarray, int]]:
    """
    Iterate over lower-triangle pairs with their class index.

    Yields (rows, cols, class_idx, n_missing) per block of rows. Pairs with
    a NaN distance are removed and counted in n_missing.
    """
    for rows, cols in iter_pair_blocks(dist.shape[0], chunk_size):
        d = dist[rows, cols]
        valid = ~np.isnan(d)
        n_missing = int(valid.size - np.count_nonzero(valid))
        if n_missing:
            rows, cols, d = rows[valid], cols[valid], d[valid]
        yield rows, cols, classes.assign(d), n_missing


def accumulate_class_sums(
    dist: np.ndarray,
    y: np.ndarray,
    classes: DistanceClasses,
    chunk_size: int = 1024,
    use_gpu: bool = False,
) -> ClassSums:
    """
    Accumulate pair counts, squared differences and centred cross products.

    Parameters
    ----------
    dist : np.ndarray
        Validated (n, n) distance matrix.
    y : np.ndarray
        Validated response vector of length n.
    classes : DistanceClasses
        Binning of the lower-triangle distances.
    chunk_size : int, default=1024
        Rows of the lower triangle processed per block.
    use_gpu : bool, default=False
        Accumulate on GPU if CuPy is available.

    Returns
    -------
    ClassSums
        Accumulators of length ``classes.n_classes``.
    """
    xp = get_array_module(use_gpu)
    k = classes.n_classes

    y_arr = xp.asarray(y, dtype=xp.float64)
    z = y_arr - xp.mean(y_arr)

    n_pairs = xp.zeros(k, dtype=xp.float64)
    sq_diff = xp.zeros(k, dtype=xp.float64)
    cross = xp.zeros(k, dtype=xp.float64)
    n_missing = 0

    for rows, cols, idx, block_missing in iter_class_pairs(dist, classes, chunk_size):
        n_missing += block_missing
        if idx.size == 0:
            continue

        rows = xp.asarray(rows)
        cols = xp.asarray(cols)
        idx = xp.asarray(idx)

        diff = y_arr[rows] - y_arr[cols]
        n_pairs += xp.bincount(idx, minlength=k)
        sq_diff += xp.bincount(idx, weights=diff * diff, minlength=k)
        cross += xp.bincount(idx, weights=z[rows] * z[cols], minlength=k)

    return ClassSums(
        n_pairs=ensure_numpy(n_pairs).astype(np.int64),
        sq_diff=ensure_numpy(sq_diff),
        cross=ensure_numpy(cross),
        n_missing=n_missing,
    )


def moran_from_sums(n_pairs: np.ndarray, cross: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Per-class Moran's I from pair counts and centred cross-product sums.

    Empty classes and a constant response give NaN.
    """
    n = y.shape[0]
    if np.ptp(y) == 0:
        return np.full(n_pairs.shape, np.nan)

    var_pop = np.sum((y - y.mean()) ** 2) / n
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(n_pairs > 0, cross / n_pairs / var_pop, np.nan)


def summarize_class_sums(
    classes: DistanceClasses,
    sums: ClassSums,
    y: np.ndarray,
) -> pd.DataFrame:
    """
    Turn per-class accumulators into the semivariogram table.

    Parameters
    ----------
    classes : DistanceClasses
        Binning used for the accumulation.
    sums : ClassSums
        Output of :func:`accumulate_class_sums`.
    y : np.ndarray
        Response vector.

    Returns
    -------
    pd.DataFrame
        One row per class with columns ``distance_class``, ``lower``,
        ``upper``, ``distance`` (midpoint), ``n_pairs``, ``semivariance``,
        ``morans_i`` and ``gearys_c``.
    """
    n = y.shape[0]
    n_pairs = sums.n_pairs

    with np.errstate(divide="ignore", invalid="ignore"):
        semivar = np.where(n_pairs > 0, sums.sq_diff / (2.0 * n_pairs), np.nan)

    morans_i = moran_from_sums(n_pairs, sums.cross, y)

    if np.ptp(y) == 0:
        gearys_c = np.full(classes.n_classes, np.nan)
    else:
        var_sample = np.sum((y - y.mean()) ** 2) / (n - 1)
        gearys_c = semivar / var_sample

    table = classes.to_frame()
    table["n_pairs"] = n_pairs
    table["semivariance"] = semivar
    table["morans_i"] = morans_i
    table["gearys_c"] = gearys_c

    return table[SEMIVARIOGRAM_COLUMNS]


def compute_semivariogram(
    dist,
    y,
    n_classes: Optional[int] = None,
    missing: str = "raise",
    chunk_size: int = 1024,
    use_gpu: bool = False,
) -> pd.DataFrame:
    """
    Compute the empirical semivariogram and per-class Moran's I.

    Site pairs are taken once each from the strict lower triangle of
    ``dist``, binned into ``n_classes`` equal-width distance classes, and
    summarised per class.

    Parameters
    ----------
    dist : array-like
        Symmetric (n, n) matrix of pairwise distances with zero diagonal.
        Any metric works (Euclidean, over-water, great-circle, ...).
    y : array-like
        Response at each site (length n), e.g. model residuals, in the
        same order as the matrix rows and columns.
    n_classes : int, optional
        Number of distance classes. Default: Sturges' rule on the number
        of site pairs (see :func:`sturges_classes`).
    missing : {"raise", "drop"}, default="raise"
        Treatment of NaN distances. "drop" excludes those pairs from
        every class.
    chunk_size : int, default=1024
        Rows of the lower triangle processed per block.
    use_gpu : bool, default=False
        Accumulate on GPU if CuPy is available.

    Returns
    -------
    pd.DataFrame
        One row per distance class, in ascending distance order. Columns:
        ``distance_class`` (1-based), ``lower``, ``upper``, ``distance``
        (class midpoint), ``n_pairs``, ``semivariance``, ``morans_i``,
        ``gearys_c``. Classes without pairs are kept with NaN statistics.

    Raises
    ------
    InvalidDimensionError
        Matrix not square or size does not match ``y``.
    InvalidParameterError
        ``n_classes < 1``, ``chunk_size < 1``, negative or (under
        ``missing="raise"``) NaN distances, non-finite responses.
    DegenerateInputError
        All pair distances are equal.

    Examples
    --------
    >>> dist = np.array([[0, 1, 1, 2 ** 0.5],
    ...                  [1, 0, 2 ** 0.5, 1],
    ...                  [1, 2 ** 0.5, 0, 1],
    ...                  [2 ** 0.5, 1, 1, 0]])
    >>> table = compute_semivariogram(dist, [1.0, 2.0, 3.0, 4.0], n_classes=2)
    >>> float(table["semivariance"].iloc[0])
    1.25

    Notes
    -----
    A constant response gives zero semivariance in every non-empty class
    and NaN for Moran's I and Geary's c (0/0).
    """
    chunk_size = validate_chunk_size(chunk_size)
    dist, y = validate_inputs(dist, y, missing=missing)
    n = y.shape[0]

    if n_classes is None:
        n_classes = sturges_classes(n)
        logger.debug(f"Using {n_classes} distance classes from Sturges' rule")
    else:
        n_classes = validate_n_classes(n_classes)

    classes = classes_from_matrix(dist, n_classes, chunk_size=chunk_size)
    sums = accumulate_class_sums(dist, y, classes, chunk_size=chunk_size, use_gpu=use_gpu)

    if sums.n_missing:
        logger.warning(f"Excluded {sums.n_missing} site pairs with missing distances")

    n_empty = int(np.sum(sums.n_pairs == 0))
    if n_empty:
        logger.warning(
            f"{n_empty} of {n_classes} distance classes received no site pairs; "
            "their statistics are NaN"
        )

    logger.info(
        f"Semivariogram: {n} sites, {int(sums.n_pairs.sum())} pairs, {n_classes} classes"
    )

    return summarize_class_sums(classes, sums, y)
