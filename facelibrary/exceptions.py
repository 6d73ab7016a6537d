"""
Exceptions raised by the face library.
"""


class FaceLibraryError(Exception):
    """Base class for all face library errors."""


class PersistenceError(FaceLibraryError):
    """Snapshot could not be read from or written to disk."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class DimensionMismatchError(FaceLibraryError):
    """Two feature vectors with different dimensions were combined."""

    def __init__(self, first_shape, second_shape):
        super().__init__(
            f"Feature vector dimension mismatch: {first_shape} vs {second_shape}"
        )
        self.first_shape = first_shape
        self.second_shape = second_shape


class EmptyVectorError(FaceLibraryError):
    """An operation needed at least one non-empty feature vector."""


class DetectionError(FaceLibraryError):
    """Face detection failed or timed out."""


class ConfigurationError(FaceLibraryError):
    """Invalid configuration value."""
