"""Errors raised by semivariogram computations."""


class SemivarianceError(ValueError):
    """Base error for invalid semivariogram inputs."""

    pass


class InvalidDimensionError(SemivarianceError):
    """Raised when the distance matrix is not square or does not match the response."""

    pass


class InvalidParameterError(SemivarianceError):
    """Raised for a bad class count, negative/NaN distances or non-finite responses."""

    pass


class DegenerateInputError(SemivarianceError):
    """Raised when the distances cannot be binned (zero-width range or no pairs)."""

    pass
