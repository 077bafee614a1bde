"""
Tests for the per-class Moran's I permutation test.
"""

import numpy as np
import pandas as pd
import pytest

from semivarpy.core.distances import euclidean_distance_matrix
from semivarpy.core.semivariance import compute_semivariogram
from semivarpy.exceptions import InvalidParameterError
from semivarpy.stats.permutation import permutation_test_moran


def _gradient_grid(size=8, noise=0.1, seed=42):
    """Sites on a square grid with a smooth east-west gradient."""
    rng = np.random.default_rng(seed)
    xx, yy = np.meshgrid(np.arange(size), np.arange(size))
    coords = np.column_stack([xx.ravel(), yy.ravel()]).astype(float)
    y = coords[:, 0] + rng.standard_normal(len(coords)) * noise
    return euclidean_distance_matrix(coords), y


class TestPermutationTest:
    """Tests for permutation_test_moran."""

    def test_columns(self):
        """Test test columns are added to the semivariogram table."""
        dist, y = _gradient_grid()
        result = permutation_test_moran(dist, y, n_classes=5, n_permutations=50, random_seed=1)

        for col in ["distance", "semivariance", "morans_i", "null_mean", "null_std", "z_score", "pvalue"]:
            assert col in result.columns
        assert len(result) == 5

    def test_observed_matches_semivariogram(self):
        """Test observed Moran's I equals the semivariogram value."""
        dist, y = _gradient_grid()
        result = permutation_test_moran(dist, y, n_classes=5, n_permutations=20, random_seed=1)
        table = compute_semivariogram(dist, y, n_classes=5)
        np.testing.assert_allclose(result["morans_i"], table["morans_i"])

    def test_positive_autocorrelation_detected(self):
        """Test a smooth gradient is significant in the nearest class."""
        dist, y = _gradient_grid()
        result = permutation_test_moran(
            dist, y, n_classes=6, n_permutations=199, alternative="greater", random_seed=42
        )

        assert result["morans_i"].iloc[0] > 0.3
        assert result["pvalue"].iloc[0] < 0.05
        assert result["z_score"].iloc[0] > 2

    def test_pvalue_bounds(self):
        """Test p-values lie in [1 / (n_permutations + 1), 1]."""
        rng = np.random.default_rng(3)
        dist = euclidean_distance_matrix(rng.uniform(0, 10, size=(30, 2)))
        y = rng.standard_normal(30)
        result = permutation_test_moran(dist, y, n_classes=4, n_permutations=99, random_seed=3)

        pvalues = result["pvalue"].dropna()
        assert np.all(pvalues >= 1 / 100)
        assert np.all(pvalues <= 1.0)

    def test_reproducibility(self):
        """Test that same seed produces same results."""
        dist, y = _gradient_grid(noise=1.0)
        r1 = permutation_test_moran(dist, y, n_classes=4, n_permutations=50, random_seed=123)
        r2 = permutation_test_moran(dist, y, n_classes=4, n_permutations=50, random_seed=123)
        np.testing.assert_array_equal(r1["pvalue"], r2["pvalue"])

    @pytest.mark.parametrize("alternative", ["two-sided", "greater", "less"])
    def test_alternatives(self, alternative):
        """Test every alternative returns valid p-values."""
        dist, y = _gradient_grid(noise=1.0)
        result = permutation_test_moran(
            dist, y, n_classes=4, n_permutations=30, alternative=alternative, random_seed=0
        )
        assert np.all((result["pvalue"] > 0) & (result["pvalue"] <= 1))


class TestEdgeCases:
    """Tests for edge cases in permutation testing."""

    def test_constant_response(self):
        """Test constant response gives NaN test columns."""
        dist, _ = _gradient_grid()
        y = np.ones(dist.shape[0])
        result = permutation_test_moran(dist, y, n_classes=3, n_permutations=10, random_seed=0)

        assert result["morans_i"].isna().all()
        assert result["pvalue"].isna().all()
        assert result["z_score"].isna().all()

    def test_empty_class(self):
        """Test a class without pairs gets NaN test columns."""
        dist = euclidean_distance_matrix([[0, 0], [1, 0], [10, 0], [11, 0]])
        y = np.array([1.0, 2.0, 0.5, 3.0])
        result = permutation_test_moran(dist, y, n_classes=3, n_permutations=10, random_seed=0)

        assert result["n_pairs"].iloc[1] == 0
        assert np.isnan(result["pvalue"].iloc[1])
        assert not np.isnan(result["pvalue"].iloc[0])

    def test_invalid_alternative(self):
        """Test invalid alternative raises error."""
        dist, y = _gradient_grid()
        with pytest.raises(InvalidParameterError, match="Unknown alternative"):
            permutation_test_moran(dist, y, alternative="both")

    def test_invalid_n_permutations(self):
        """Test zero permutations raises error."""
        dist, y = _gradient_grid()
        with pytest.raises(InvalidParameterError, match="n_permutations"):
            permutation_test_moran(dist, y, n_permutations=0)

    @pytest.mark.parametrize("chunk_size", [0, -1, 2.5])
    def test_invalid_chunk_size(self, chunk_size):
        """Test non-positive or fractional chunk sizes raise error."""
        dist, y = _gradient_grid()
        with pytest.raises(InvalidParameterError, match="chunk_size"):
            permutation_test_moran(dist, y, n_permutations=9, chunk_size=chunk_size)

    def test_use_gpu_matches_cpu(self):
        """Test use_gpu gives the same table as the NumPy path."""
        dist, y = _gradient_grid(size=5)
        cpu = permutation_test_moran(dist, y, n_classes=4, n_permutations=49, random_seed=3)
        gpu = permutation_test_moran(
            dist, y, n_classes=4, n_permutations=49, random_seed=3, use_gpu=True
        )
        pd.testing.assert_frame_equal(cpu, gpu, rtol=1e-8)
