"""Analysis modules for residual diagnostics."""

from semivarpy.analysis.residuals import align_residuals, residual_semivariogram

__all__ = ["align_residuals", "residual_semivariogram"]
