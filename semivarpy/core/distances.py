"""
Pairwise distance matrices between sites.

Helpers for callers that hold site coordinates rather than a precomputed
distance matrix. The semivariogram itself accepts any distance matrix.
"""

import numpy as np
from scipy.spatial.distance import cdist

from semivarpy.exceptions import InvalidDimensionError

EARTH_RADIUS_KM = 6371.0088


def _as_coords(coords) -> np.ndarray:
    coords = np.asarray(coords, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise InvalidDimensionError(
            f"Coordinates must have shape (n, 2), got {coords.shape}"
        )
    return coords


def euclidean_distance_matrix(coords) -> np.ndarray:
    """
    Euclidean distance matrix between sites.

    Parameters
    ----------
    coords : array-like
        Planar coordinates of shape (n, 2).

    Returns
    -------
    np.ndarray
        Symmetric (n, n) distance matrix with zero diagonal.

    Examples
    --------
    >>> euclidean_distance_matrix([[0, 0], [3, 4]])
    array([[0., 5.],
           [5., 0.]])
    """
    coords = _as_coords(coords)
    return cdist(coords, coords, metric="euclidean")


def great_circle_distance_matrix(lonlat, radius: float = EARTH_RADIUS_KM) -> np.ndarray:
    """
    Great-circle (haversine) distance matrix between sites.

    Parameters
    ----------
    lonlat : array-like
        Longitude/latitude in degrees, shape (n, 2).
    radius : float, default=6371.0088
        Sphere radius. The default is the mean Earth radius in km, so
        distances are returned in km.

    Returns
    -------
    np.ndarray
        Symmetric (n, n) distance matrix with zero diagonal.
    """
    lonlat = _as_coords(lonlat)
    lon = np.radians(lonlat[:, 0])
    lat = np.radians(lonlat[:, 1])

    dlon = lon[:, None] - lon[None, :]
    dlat = lat[:, None] - lat[None, :]

    a = np.sin(dlat / 2) ** 2 + np.cos(lat[:, None]) * np.cos(lat[None, :]) * np.sin(dlon / 2) ** 2
    dist = 2 * radius * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))

    np.fill_diagonal(dist, 0.0)
    return dist
