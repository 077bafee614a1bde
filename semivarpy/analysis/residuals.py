"""
Spatial autocorrelation diagnostics for model residuals.

Takes the residuals of a fitted model and the distance matrix between the
sites it was fitted on, and returns the semivariogram table a caller plots
as semivariance (or Moran's I) against distance.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from semivarpy.config.dataclasses import SemivariogramConfig
from semivarpy.config.presets import SemivariogramPresets
from semivarpy.core.semivariance import compute_semivariogram
from semivarpy.exceptions import InvalidDimensionError
from semivarpy.stats.permutation import permutation_test_moran

logger = logging.getLogger(__name__)


def align_residuals(residuals, dist) -> tuple[np.ndarray, np.ndarray]:
    """
    Put residuals and distance matrix in the same site order.

    When ``dist`` is a DataFrame and ``residuals`` a Series, the matrix is
    reordered to the residual index. Otherwise both are used positionally.

    Parameters
    ----------
    residuals : array-like or pd.Series
        Residual per site.
    dist : array-like or pd.DataFrame
        Site-by-site distance matrix.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (residuals, dist) as arrays in matching order.
    """
    if isinstance(dist, pd.DataFrame) and isinstance(residuals, pd.Series):
        if not dist.index.equals(dist.columns):
            raise InvalidDimensionError("Distance matrix index and columns must hold the same sites")

        sites = residuals.index
        if not sites.is_unique:
            raise InvalidDimensionError("Residual index contains duplicate sites")

        unknown = sites.difference(dist.index)
        if len(unknown) > 0 or len(sites) != len(dist.index):
            raise InvalidDimensionError(
                f"Residual sites do not match distance matrix sites "
                f"({len(unknown)} residual sites missing from the matrix)"
            )

        if not dist.index.equals(sites):
            logger.debug("Reordering distance matrix to residual order")
            dist = dist.loc[sites, sites]

    return np.asarray(residuals, dtype=np.float64), np.asarray(dist, dtype=np.float64)


def residual_semivariogram(
    residuals,
    dist,
    n_classes: Optional[int] = None,
    config: Optional[SemivariogramConfig] = None,
) -> pd.DataFrame:
    """
    Semivariogram and per-class Moran's I of model residuals.

    Parameters
    ----------
    residuals : array-like or pd.Series
        Residuals of a fitted model, one per site.
    dist : array-like or pd.DataFrame
        Distance matrix between the sites, rows/columns in the same order
        as the data used to fit the model (or labelled, see
        :func:`align_residuals`).
    n_classes : int, optional
        Number of distance classes; overrides ``config.n_classes``.
    config : SemivariogramConfig, optional
        Analysis options. Default: ``SemivariogramPresets.residual_diagnostics()``
        (15 classes).

    Returns
    -------
    pd.DataFrame
        Semivariogram table. When ``config.n_permutations > 0`` it also
        holds permutation test columns for Moran's I.

    Examples
    --------
    >>> dist = euclidean_distance_matrix(coords)
    >>> table = residual_semivariogram(model_residuals, dist)
    >>> table.plot.scatter(x="distance", y="semivariance")
    """
    if config is None:
        config = SemivariogramPresets.residual_diagnostics()
    config.validate()

    if n_classes is None:
        n_classes = config.n_classes

    y, dist_arr = align_residuals(residuals, dist)

    if config.n_permutations > 0:
        return permutation_test_moran(
            dist_arr,
            y,
            n_classes=n_classes,
            n_permutations=config.n_permutations,
            random_seed=config.random_seed,
            missing=config.missing,
            chunk_size=config.chunk_size,
            use_gpu=config.use_gpu,
        )

    return compute_semivariogram(
        dist_arr,
        y,
        n_classes=n_classes,
        missing=config.missing,
        chunk_size=config.chunk_size,
        use_gpu=config.use_gpu,
    )
