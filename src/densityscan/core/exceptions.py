"""
Custom exceptions for the densityscan package.
"""


class DensityScanError(Exception):
    """Base exception for all densityscan errors."""
    pass


class InvalidArgumentError(DensityScanError, ValueError):
    """Raised when a clustering entry point receives an invalid argument."""
    pass


class ClusteringError(DensityScanError):
    """Raised when clustering operations fail or are misused."""
    pass


class DataLoadError(DensityScanError):
    """Raised when data loading fails."""
    pass
