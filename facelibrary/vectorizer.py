"""
Vectorizer Module

Converts cropped face images to fixed-size grayscale feature vectors,
normalizes sets of vectors and renders vectors back to 16-bit PNG files.
"""

import numpy as np
import logging
from typing import Any, Dict, List, Sequence, Tuple
import cv2
from sklearn.preprocessing import minmax_scale

from .exceptions import DimensionMismatchError, EmptyVectorError
from .feature_vector import FeatureVector, MAX_INTENSITY

logger = logging.getLogger(__name__)


class Vectorizer:
    """Image file to feature vector conversion using OpenCV."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize vectorizer.

        Args:
            config: Configuration dictionary with vectorizer settings
        """
        self.config = config.get('vectorizer', {})
        width, height = self.config.get('face_size', (100, 100))
        self.face_size: Tuple[int, int] = (int(width), int(height))

        logger.info(f"Vectorizer initialized with face size: {self.face_size}")

    def to_vector(self, image_path: str) -> FeatureVector:
        """
        Load an image file as a grayscale 16-bit feature vector.

        Args:
            image_path: Path of a cropped face image

        Returns:
            Feature vector, or an empty vector if the image cannot be read
        """
        image = cv2.imread(image_path, cv2.IMREAD_UNCHANGED)
        if image is None or image.size == 0:
            logger.error(f"Failed to read image: {image_path}")
            return FeatureVector.empty()

        try:
            gray = self.to_grayscale16(image)
            resized = cv2.resize(gray, self.face_size, interpolation=cv2.INTER_AREA)
        except cv2.error as e:
            logger.error(f"Failed to vectorize {image_path}: {e}")
            return FeatureVector.empty()

        return FeatureVector.from_array(resized)

    @staticmethod
    def to_grayscale16(image: np.ndarray) -> np.ndarray:
        """Convert a BGR(A) or grayscale image of any depth to 16-bit grayscale."""
        if image.ndim == 3:
            if image.shape[2] == 4:
                image = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
            elif image.shape[2] == 3:
                image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
            else:
                image = image[:, :, 0]

        if image.dtype == np.uint8:
            # 0xFF * 257 == 0xFFFF
            return image.astype(np.uint16) * 257
        if image.dtype == np.uint16:
            return image
        if np.issubdtype(image.dtype, np.floating) and image.max() <= 1.0:
            image = image * MAX_INTENSITY
        return np.clip(image, 0, MAX_INTENSITY).astype(np.uint16)

    def normalize(self, vectors: Sequence[FeatureVector]) -> List[FeatureVector]:
        """
        Stretch each vector's intensities to the full 16-bit range.

        Empty vectors are passed through unchanged.
        """
        normalized = []
        for vector in vectors:
            if vector.is_empty():
                normalized.append(FeatureVector.empty())
                continue
            pixels = minmax_scale(vector.pixels, feature_range=(0, MAX_INTENSITY))
            normalized.append(FeatureVector(vector.width, vector.height, pixels))
        return normalized

    def average(self, vectors: Sequence[FeatureVector]) -> FeatureVector:
        """
        Element-wise mean of the non-empty vectors.

        Returns an empty vector when every input is empty.

        Raises:
            EmptyVectorError: If ``vectors`` is empty
            DimensionMismatchError: If the vectors differ in dimensions
        """
        if not vectors:
            raise EmptyVectorError("Cannot average an empty set of vectors")

        usable = [v for v in vectors if not v.is_empty()]
        if len(usable) < len(vectors):
            logger.warning(f"Ignoring {len(vectors) - len(usable)} empty vectors in average")
        if not usable:
            return FeatureVector.empty()

        reference = usable[0]
        for vector in usable[1:]:
            if vector.shape != reference.shape:
                raise DimensionMismatchError(reference.shape, vector.shape)

        pixels = np.mean(np.vstack([v.pixels for v in usable]), axis=0)
        return FeatureVector(reference.width, reference.height, pixels)

    @staticmethod
    def to_image(vector: FeatureVector) -> np.ndarray:
        """Render a vector as a 16-bit grayscale image array."""
        pixels = np.clip(np.rint(vector.pixels), 0, MAX_INTENSITY).astype(np.uint16)
        return pixels.reshape(vector.height, vector.width)

    def save_image(self, vector: FeatureVector, path: str) -> bool:
        """
        Write a vector to ``path`` as a 16-bit PNG.

        Returns:
            True if the file was written
        """
        if vector.is_empty():
            logger.warning(f"Refusing to render empty vector to {path}")
            return False

        try:
            written = cv2.imwrite(path, self.to_image(vector))
        except cv2.error as e:
            logger.error(f"Failed to write {path}: {e}")
            return False

        if not written:
            logger.error(f"Failed to write {path}")
        return bool(written)
