"""
Face Recognition Module

Registers identities from training photographs and matches probe images
against the identity store by nearest average vector.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .exceptions import DimensionMismatchError
from .face_detector import FaceDetector, ImageInput
from .feature_vector import FeatureVector
from .identity import IdentityRecord
from .identity_store import IdentityStore, get_store
from .metrics import mean_abs_difference_score
from .vectorizer import Vectorizer

logger = logging.getLogger(__name__)

ACCEPTANCE_THRESHOLD = 0.05


class RecognitionResult:
    """Best match of one recognition call together with its probe vectors."""

    def __init__(self, matched_identity: Optional[IdentityRecord] = None,
                 probe_vectors: Optional[List[FeatureVector]] = None,
                 score: float = 1.0,
                 candidates: Optional[List[Tuple[str, str, float]]] = None):
        self.matched_identity = matched_identity if matched_identity is not None else IdentityRecord()
        self.probe_vectors = probe_vectors or []
        self.score = score
        # (candidate path, identity key, score) for every scored pair
        self.candidates = candidates or []

    @property
    def matched(self) -> bool:
        return self.matched_identity.is_trained()

    @property
    def key(self) -> Optional[str]:
        return self.matched_identity.key if self.matched else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'score': self.score,
            'probe_faces': len(self.probe_vectors),
            'candidates': [
                {'face': path, 'key': key, 'score': score}
                for path, key, score in self.candidates
            ]
        }

    def __repr__(self):
        return f"RecognitionResult(key={self.key!r}, score={self.score:.10f})"


class FaceRecognizer:
    """Identity registration and recognition over an identity store."""

    def __init__(self, config: Dict[str, Any],
                 store: Optional[IdentityStore] = None,
                 face_detector=None,
                 vectorizer=None):
        """
        Initialize face recognizer.

        Args:
            config: Configuration dictionary
            store: Identity store, defaults to the process store of the
                configured data directory
            face_detector: Detector collaborator, defaults to ``FaceDetector``
            vectorizer: Vectorizer collaborator, defaults to ``Vectorizer``
        """
        self.config = config
        self.storage_config = config.get('storage', {})
        self.detection_timeout = config.get('face_detection', {}).get('timeout')
        self.scratch_dir = self.storage_config.get('scratch_dir', 'tmp')
        self._executor: Optional[ThreadPoolExecutor] = None

        if store is None:
            store = get_store(
                self.storage_config.get('data_dir', 'Data'),
                self.storage_config.get('snapshot_file', 'data_library.json')
            )
        self.store = store
        self.face_detector = face_detector if face_detector is not None else FaceDetector(config)
        self.vectorizer = vectorizer if vectorizer is not None else Vectorizer(config)

        self.reset_statistics()

        logger.info("Face recognizer initialized successfully")

    def _detect(self, image: ImageInput, output_dir: str) -> List[str]:
        """
        Run detection, optionally bounded by the configured timeout.

        Timed detection runs on one long-lived worker. A call that times out
        keeps running there and may still write crops into ``output_dir``;
        those crops are never vectorized. ``close()`` waits for the worker.
        """
        try:
            if not self.detection_timeout:
                return self.face_detector.detect_to_directory(image, output_dir)

            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1)
            future = self._executor.submit(self.face_detector.detect_to_directory, image, output_dir)
            return future.result(timeout=self.detection_timeout)
        except FutureTimeoutError:
            logger.error(f"Face detection timed out after {self.detection_timeout}s")
        except Exception as e:
            logger.error(f"Face detection failed: {e}")
        return []

    def close(self):
        """Wait for pending detection and release the detection worker."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def register_identity(self, first_name: str, last_name: str,
                          images: Iterable[ImageInput]) -> IdentityRecord:
        """
        Detect faces in training images, train a record and store it.

        Args:
            first_name: First name of the person
            last_name: Last name of the person
            images: Training photographs (paths, arrays or PIL images)

        Returns:
            The stored identity record
        """
        record = IdentityRecord.for_person(first_name, last_name)
        identity_dir = self.store.identity_dir(record.key)
        os.makedirs(identity_dir, exist_ok=True)

        for image in images:
            record.attach_training_images(self._detect(image, identity_dir))
        logger.info(f"Found {len(record.training_images)} faces for {record.key}")

        record.train(self.vectorizer, identity_dir)
        self.store.add_identity(record)
        return record

    @staticmethod
    def score_identity(vector: FeatureVector, record: IdentityRecord) -> float:
        """Score of ``vector`` against the record's average face."""
        return mean_abs_difference_score(record.average_vector, vector)

    def recognize(self, probe_image: ImageInput) -> RecognitionResult:
        """
        Find the identity whose average face is closest to a face in the probe.

        A detection/identity pair wins only if its score is strictly lower
        than both the best score so far and the acceptance threshold; on
        equal scores the first pair found is kept.

        Args:
            probe_image: Image path, PIL image or numpy array

        Returns:
            Recognition result; ``matched`` is False when nothing scored
            under the threshold
        """
        os.makedirs(self.scratch_dir, exist_ok=True)
        face_paths = self._detect(probe_image, self.scratch_dir)
        identities = self.store.identities()

        best_score = 1.0
        best_record = None
        probe_vectors = []
        candidates = []

        for face_path in face_paths:
            vector = self.vectorizer.to_vector(face_path)
            if vector.width == 0 or vector.height == 0:
                logger.debug(f"Skipping empty detection {face_path}")
                continue
            probe_vectors.append(vector)

            for key, record in identities.items():
                if not record.is_trained():
                    continue
                try:
                    score = self.score_identity(vector, record)
                except DimensionMismatchError as e:
                    logger.warning(f"Skipping {key} for {face_path}: {e}")
                    continue

                candidates.append((face_path, key, score))
                logger.debug(f"{key} : {score:.10f} with {face_path}")

                if score < best_score and score < ACCEPTANCE_THRESHOLD:
                    best_score = score
                    best_record = record

        self.stats['total_recognitions'] += 1
        self.stats['total_detections'] += len(probe_vectors)
        if best_record is not None:
            self.stats['successful_recognitions'] += 1
            logger.info(f"{best_record.key} seems to be the person you're looking for "
                        f"with value: {best_score:.10f}")
        else:
            logger.info("No identity matched the probe image")

        return RecognitionResult(best_record, probe_vectors, best_score, candidates)

    def compare_face(self, face_path: str) -> Optional[str]:
        """
        Render a single face as the store would average it.

        Returns:
            Path of the written ``face_temp.png``, or None on failure
        """
        vector = self.vectorizer.to_vector(face_path)
        if vector.is_empty():
            return None

        average = self.vectorizer.average([vector])
        os.makedirs(self.scratch_dir, exist_ok=True)
        output_path = os.path.join(self.scratch_dir, 'face_temp.png')
        if not self.vectorizer.save_image(average, output_path):
            return None
        return output_path

    def get_recognition_statistics(self) -> Dict[str, Any]:
        """Get recognition system statistics."""
        return {
            **self.stats,
            **self.store.get_statistics(),
            'recognition_rate': (
                self.stats['successful_recognitions'] /
                max(1, self.stats['total_recognitions'])
            )
        }

    def reset_statistics(self):
        """Reset recognition statistics."""
        self.stats = {
            'total_recognitions': 0,
            'total_detections': 0,
            'successful_recognitions': 0,
            'session_start': datetime.now().isoformat()
        }
