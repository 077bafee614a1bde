"""
Permutation testing for per-class Moran's I.

Responses are shuffled over sites while the distance classes stay fixed,
giving a null distribution of Moran's I for every class.
"""

import logging
from typing import Literal, Optional

import numpy as np
import pandas as pd

from semivarpy.core.classes import classes_from_matrix, sturges_classes
from semivarpy.core.semivariance import (
    accumulate_class_sums,
    iter_class_pairs,
    moran_from_sums,
    summarize_class_sums,
)
from semivarpy.core.validation import (
    validate_chunk_size,
    validate_inputs,
    validate_n_classes,
)
from semivarpy.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

ALTERNATIVES = ("two-sided", "greater", "less")


def permutation_test_moran(
    dist,
    y,
    n_classes: Optional[int] = None,
    n_permutations: int = 999,
    alternative: Literal["two-sided", "greater", "less"] = "two-sided",
    random_seed: Optional[int] = None,
    missing: str = "raise",
    chunk_size: int = 1024,
    use_gpu: bool = False,
) -> pd.DataFrame:
    """
    Permutation test of Moran's I in each distance class.

    Parameters
    ----------
    dist : array-like
        Symmetric (n, n) distance matrix.
    y : array-like
        Response at each site (length n).
    n_classes : int, optional
        Number of distance classes. Default: Sturges' rule.
    n_permutations : int, default=999
        Number of permutations.
    alternative : {"two-sided", "greater", "less"}, default="two-sided"
        Alternative hypothesis.
    random_seed : int, optional
        Random seed for reproducibility.
    missing : {"raise", "drop"}, default="raise"
        Treatment of NaN distances.
    chunk_size : int, default=1024
        Rows of the lower triangle processed per block.
    use_gpu : bool, default=False
        Accumulate the observed statistics on GPU if CuPy is available.
        The permutations themselves always run on NumPy.

    Returns
    -------
    pd.DataFrame
        The semivariogram table (see :func:`compute_semivariogram`) with
        extra columns:
        - 'null_mean': Mean of the null Moran's I
        - 'null_std': Std of the null Moran's I
        - 'z_score': Z-score of the observed Moran's I
        - 'pvalue': Permutation p-value, (count + 1) / (n_permutations + 1)

    Examples
    --------
    >>> result = permutation_test_moran(dist, residuals, n_permutations=199, random_seed=1)
    >>> result[["distance", "morans_i", "pvalue"]]

    Notes
    -----
    Classes whose observed Moran's I is NaN (no pairs, or a constant
    response) get NaN for every test column.
    """
    if alternative not in ALTERNATIVES:
        raise InvalidParameterError(
            f"Unknown alternative: '{alternative}'. Use 'two-sided', 'greater' or 'less'."
        )
    if n_permutations < 1:
        raise InvalidParameterError(f"n_permutations must be >= 1, got {n_permutations}")
    chunk_size = validate_chunk_size(chunk_size)

    dist, y = validate_inputs(dist, y, missing=missing)
    n = y.shape[0]
    n_classes = sturges_classes(n) if n_classes is None else validate_n_classes(n_classes)

    classes = classes_from_matrix(dist, n_classes, chunk_size=chunk_size)
    sums = accumulate_class_sums(
        dist, y, classes, chunk_size=chunk_size, use_gpu=use_gpu
    )
    table = summarize_class_sums(classes, sums, y)
    observed = table["morans_i"].to_numpy()

    # Pair index arrays are reused by every permutation
    blocks = list(iter_class_pairs(dist, classes, chunk_size))
    rows = np.concatenate([b[0] for b in blocks])
    cols = np.concatenate([b[1] for b in blocks])
    idx = np.concatenate([b[2] for b in blocks])

    rng = np.random.default_rng(random_seed)
    z = y - y.mean()
    null_distribution = np.zeros((n_permutations, n_classes))

    for i in range(n_permutations):
        z_perm = z[rng.permutation(n)]
        cross = np.bincount(idx, weights=z_perm[rows] * z_perm[cols], minlength=n_classes)
        null_distribution[i] = moran_from_sums(sums.n_pairs, cross, y)

    with np.errstate(invalid="ignore"):
        if alternative == "two-sided":
            exceed = np.abs(null_distribution) >= np.abs(observed)
        elif alternative == "greater":
            exceed = null_distribution >= observed
        else:  # less
            exceed = null_distribution <= observed

    undefined = np.isnan(observed)
    pvalue = (np.sum(exceed, axis=0) + 1) / (n_permutations + 1)

    if np.all(undefined):
        null_mean = np.full(n_classes, np.nan)
        null_std = np.full(n_classes, np.nan)
    else:
        null_mean = np.where(undefined, np.nan, null_distribution.mean(axis=0))
        null_std = np.where(undefined, np.nan, null_distribution.std(axis=0))

    with np.errstate(divide="ignore", invalid="ignore"):
        z_score = np.where(null_std > 1e-10, (observed - null_mean) / null_std, 0.0)

    table["null_mean"] = null_mean
    table["null_std"] = null_std
    table["z_score"] = np.where(undefined, np.nan, z_score)
    table["pvalue"] = np.where(undefined, np.nan, pvalue)

    logger.info(
        f"Permutation test: {n_permutations} permutations over {n_classes} classes, "
        f"{int(np.sum(table['pvalue'] < 0.05))} classes with p < 0.05"
    )

    return table
