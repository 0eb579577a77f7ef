"""Errors raised for unusable dashboard documents and settings."""


class InsufficientDataError(ValueError):
    """Raised when there's not enough data to calculate metrics."""
    pass


class InvalidDataError(ValueError):
    """Raised when input data is invalid (misaligned series, bad dates, etc.)."""
    pass
