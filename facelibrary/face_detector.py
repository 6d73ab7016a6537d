"""
Face Detection Module

Detects faces with OpenCV Haar cascades and writes each cropped face to a
directory so it can be vectorized from disk.
"""

import cv2
import numpy as np
import logging
import os
import uuid
from typing import List, Optional, Dict, Any, Union
from PIL import Image

from .exceptions import DetectionError

logger = logging.getLogger(__name__)

ImageInput = Union[str, os.PathLike, np.ndarray, Image.Image]


class FaceDetector:
    """Face detection using Haar cascades."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize face detector.

        Args:
            config: Configuration dictionary with face detection settings
        """
        self.config = config.get('face_detection', {})
        self.method = self.config.get('method', 'haar')
        self.min_face_size = self.config.get('min_face_size', 30)
        self.scale_factor = self.config.get('scale_factor', 1.1)
        self.min_neighbors = self.config.get('min_neighbors', 5)
        self.padding = self.config.get('padding', 0.0)

        if self.method != 'haar':
            logger.warning(f"Unsupported detection method: {self.method}, falling back to haar")
            self.method = 'haar'

        self.detector = cv2.CascadeClassifier(
            cv2.data.haarcascades + 'haarcascade_frontalface_default.xml'
        )

        logger.info(f"Face detector initialized with method: {self.method}")

    @staticmethod
    def load_image(image: ImageInput) -> Optional[np.ndarray]:
        """
        Load a path, PIL image or array as a BGR (or grayscale) array.

        Raises:
            DetectionError: If a path cannot be read
        """
        if image is None:
            return None
        if isinstance(image, (str, os.PathLike)):
            loaded = cv2.imread(os.fspath(image), cv2.IMREAD_COLOR)
            if loaded is None:
                raise DetectionError(f"Failed to read image: {image}")
            return loaded
        if isinstance(image, Image.Image):
            rgb = np.asarray(image.convert('RGB'))
            return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
        return image

    def detect_faces(self, image: np.ndarray) -> List[Dict[str, Any]]:
        """
        Detect faces in an image.

        Args:
            image: Input image as numpy array (BGR or grayscale)

        Returns:
            List of face detection dictionaries containing bounding box and confidence
        """
        if image is None or image.size == 0:
            return []

        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image
        if gray.dtype != np.uint8:
            gray = cv2.convertScaleAbs(gray, alpha=255.0 / max(1.0, float(gray.max())))

        faces_rect = self.detector.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=(self.min_face_size, self.min_face_size)
        )

        faces = []
        for (x, y, w, h) in faces_rect:
            faces.append({
                'bbox': [int(x), int(y), int(w), int(h)],
                'confidence': 1.0,  # Haar doesn't provide confidence
                'method': 'haar'
            })

        return faces

    def crop_face(self, image: np.ndarray, bbox: List[int],
                  padding: Optional[float] = None) -> Optional[np.ndarray]:
        """
        Crop face from image with padding.

        Args:
            image: Input image
            bbox: Bounding box [x, y, width, height]
            padding: Padding factor (0.2 = 20% padding), defaults to config

        Returns:
            Cropped face image or None if invalid
        """
        if image is None or len(bbox) != 4:
            return None
        if padding is None:
            padding = self.padding

        x, y, w, h = bbox

        pad_w = int(w * padding)
        pad_h = int(h * padding)

        x1 = max(0, x - pad_w)
        y1 = max(0, y - pad_h)
        x2 = min(image.shape[1], x + w + pad_w)
        y2 = min(image.shape[0], y + h + pad_h)

        face_crop = image[y1:y2, x1:x2]

        return face_crop if face_crop.size > 0 else None

    def detect_to_directory(self, image: ImageInput, output_dir: str) -> List[str]:
        """
        Detect faces and write each crop to ``output_dir``.

        Args:
            image: Image path, PIL image or numpy array
            output_dir: Directory receiving the cropped faces

        Returns:
            Paths of the written crops, in detection order
        """
        frame = self.load_image(image)
        if frame is None:
            return []

        os.makedirs(output_dir, exist_ok=True)

        paths = []
        for face in self.detect_faces(frame):
            crop = self.crop_face(frame, face['bbox'])
            if crop is None:
                continue
            path = os.path.join(output_dir, f"face_{uuid.uuid4().hex[:12]}.png")
            if cv2.imwrite(path, crop):
                paths.append(path)
            else:
                logger.error(f"Failed to write face crop to {path}")

        logger.debug(f"Detected {len(paths)} faces into {output_dir}")
        return paths
