"""
Feature Vector Module

Flattened grayscale intensity buffers with width/height metadata.
Pixel values live in the 16-bit intensity range.
"""

import numpy as np
from typing import Any, Dict, Iterable, Optional

from .exceptions import DimensionMismatchError

MAX_INTENSITY = 0xFFFF


class FeatureVector:
    """Fixed-size grayscale sample of a face."""

    def __init__(self, width: int = 0, height: int = 0,
                 pixels: Optional[Iterable[float]] = None):
        if pixels is None:
            pixels = np.zeros(width * height, dtype=np.float64)
        pixels = np.asarray(pixels, dtype=np.float64).ravel()
        if pixels.size != width * height:
            raise ValueError(
                f"Pixel buffer of size {pixels.size} does not match {width}x{height}"
            )
        self.width = int(width)
        self.height = int(height)
        self.pixels = pixels

    @classmethod
    def empty(cls) -> 'FeatureVector':
        return cls(0, 0, [])

    @classmethod
    def from_array(cls, image: np.ndarray) -> 'FeatureVector':
        """Build a vector from a 2D (height, width) intensity array."""
        if image.ndim != 2:
            raise ValueError(f"Expected a 2D grayscale array, got shape {image.shape}")
        height, width = image.shape
        return cls(width, height, image.astype(np.float64).ravel())

    @property
    def shape(self):
        return (self.width, self.height)

    def is_empty(self) -> bool:
        return self.pixels.size == 0

    def to_array(self) -> np.ndarray:
        """Return the pixels as a (height, width) array."""
        return self.pixels.reshape(self.height, self.width)

    def difference(self, other: 'FeatureVector') -> 'FeatureVector':
        """
        Element-wise difference ``self - other``.

        Raises:
            DimensionMismatchError: If the two vectors do not share dimensions
        """
        if self.shape != other.shape:
            raise DimensionMismatchError(self.shape, other.shape)
        return FeatureVector(self.width, self.height, self.pixels - other.pixels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'width': self.width,
            'height': self.height,
            'pixels': self.pixels.tolist()
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'FeatureVector':
        if not data:
            return cls.empty()
        return cls(data.get('width', 0), data.get('height', 0), data.get('pixels') or [])

    def __eq__(self, other):
        if not isinstance(other, FeatureVector):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.pixels, other.pixels)

    def __repr__(self):
        return f"FeatureVector(width={self.width}, height={self.height})"
