"""
Distance classes for semivariogram analysis.

Site pairs are taken once each from the strict lower triangle of the
distance matrix and assigned to equal-width distance classes spanning
[min, max] of those distances. Intervals are left-closed, right-open,
except the last which also includes the maximum.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd

from semivarpy.exceptions import DegenerateInputError

logger = logging.getLogger(__name__)


def sturges_classes(n_sites: int) -> int:
    """
    Default number of distance classes from Sturges' rule.

    Applied to the number of distinct unordered site pairs, not n^2:
    ``round(1 + 3.3 * log10(n * (n - 1) / 2))``, at least 1.

    Parameters
    ----------
    n_sites : int
        Number of sites.

    Returns
    -------
    int
        Number of classes.

    Examples
    --------
    >>> sturges_classes(10)  # 45 pairs
    6
    """
    n_pairs = n_sites * (n_sites - 1) / 2
    if n_pairs < 1:
        return 1
    return max(1, int(np.round(1 + 3.3 * np.log10(n_pairs))))


@dataclass(frozen=True)
class DistanceClasses:
    """
    Equal-width partition of a distance range.

    Parameters
    ----------
    min_distance : float
        Smallest pair distance.
    max_distance : float
        Largest pair distance.
    n_classes : int
        Number of classes.
    """

    min_distance: float
    max_distance: float
    n_classes: int

    @property
    def width(self) -> float:
        return (self.max_distance - self.min_distance) / self.n_classes

    @property
    def breaks(self) -> np.ndarray:
        """The n_classes + 1 class boundaries, from min to max inclusive."""
        return np.linspace(self.min_distance, self.max_distance, self.n_classes + 1)

    @property
    def lower(self) -> np.ndarray:
        return self.breaks[:-1]

    @property
    def upper(self) -> np.ndarray:
        return self.breaks[1:]

    @property
    def midpoints(self) -> np.ndarray:
        breaks = self.breaks
        return (breaks[:-1] + breaks[1:]) / 2

    def assign(self, distances, xp=np):
        """
        Zero-based class index for each distance.

        A distance equal to a boundary goes to the class that starts there,
        so every distance lies within the reported [lower, upper) of its class.
        Distances outside [min, max] are clamped to the end classes.
        NaN distances must be removed by the caller.
        """
        d = xp.asarray(distances, dtype=xp.float64)
        breaks = xp.asarray(self.breaks)
        idx = xp.searchsorted(breaks, d, side="right").astype(xp.int64) - 1
        return xp.clip(idx, 0, self.n_classes - 1)

    def to_frame(self) -> pd.DataFrame:
        """Class bounds and midpoints, one row per class."""
        return pd.DataFrame(
            {
                "distance_class": np.arange(1, self.n_classes + 1),
                "lower": self.lower,
                "upper": self.upper,
                "distance": self.midpoints,
            }
        )


def bin_distances(distances, n_classes: int) -> DistanceClasses:
    """
    Build equal-width distance classes over the observed distances.

    Parameters
    ----------
    distances : array-like
        Pair distances (one per unordered pair). NaN values are ignored.
    n_classes : int
        Number of classes.

    Returns
    -------
    DistanceClasses
        The partition.

    Raises
    ------
    DegenerateInputError
        No finite distance, or all distances equal (zero-width range).

    Examples
    --------
    >>> classes = bin_distances([1.0, 2.0, 3.0], n_classes=2)
    >>> classes.midpoints
    array([1.5, 2.5])
    """
    d = np.asarray(distances, dtype=np.float64)
    d = d[~np.isnan(d)]
    if d.size == 0:
        raise DegenerateInputError("No site pairs with a finite distance")
    return _make_classes(float(d.min()), float(d.max()), n_classes)


def _make_classes(d_min: float, d_max: float, n_classes: int) -> DistanceClasses:
    if d_max <= d_min:
        raise DegenerateInputError(
            f"All pair distances equal {d_min}; cannot bin a zero-width range"
        )
    classes = DistanceClasses(d_min, d_max, n_classes)
    logger.debug(
        f"Binned distances [{d_min:.4g}, {d_max:.4g}] into {n_classes} classes "
        f"of width {classes.width:.4g}"
    )
    return classes


def class_table(classes: DistanceClasses) -> pd.DataFrame:
    """Bounds and midpoints of each class as a DataFrame."""
    return classes.to_frame()


def iter_pair_blocks(
    n_sites: int,
    chunk_size: int = 1024,
) -> Iterator[tuple[np.ndarray, np.ndarray]]:
    """
    Iterate over the strict lower triangle in blocks of rows.

    Yields (rows, cols) index arrays with rows > cols, so every unordered
    pair of distinct sites appears exactly once across all blocks.
    """
    for start in range(1, n_sites, chunk_size):
        end = min(start + chunk_size, n_sites)

        # Row r contributes columns 0..r-1
        counts = np.arange(start, end)
        offsets = np.cumsum(counts) - counts
        rows = np.repeat(counts, counts)
        cols = np.arange(counts.sum()) - np.repeat(offsets, counts)

        yield rows, cols


def classes_from_matrix(
    dist: np.ndarray,
    n_classes: int,
    chunk_size: int = 1024,
) -> DistanceClasses:
    """
    Build distance classes from the lower triangle of a distance matrix.

    Parameters
    ----------
    dist : np.ndarray
        Validated (n, n) distance matrix.
    n_classes : int
        Number of classes.
    chunk_size : int, default=1024
        Rows per block.

    Returns
    -------
    DistanceClasses
        The partition over [min, max] of the selected distances.
    """
    d_min = np.inf
    d_max = -np.inf

    for rows, cols in iter_pair_blocks(dist.shape[0], chunk_size):
        d = dist[rows, cols]
        d = d[~np.isnan(d)]
        if d.size:
            d_min = min(d_min, float(d.min()))
            d_max = max(d_max, float(d.max()))

    if not np.isfinite(d_min):
        raise DegenerateInputError("No site pairs with a finite distance")

    return _make_classes(d_min, d_max, n_classes)
