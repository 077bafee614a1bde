"""Statistical testing modules."""

from semivarpy.stats.permutation import permutation_test_moran

__all__ = ["permutation_test_moran"]
