"""
Identity Module

People known to the library and the training step that reduces their
detected faces to normalized vectors and an average vector.
"""

import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from .feature_vector import FeatureVector
from .metrics import rms_distance

logger = logging.getLogger(__name__)


class Person:
    """First and last name of a known identity."""

    def __init__(self, first_name: str = '', last_name: str = ''):
        self.first_name = first_name
        self.last_name = last_name

    @property
    def key(self) -> str:
        """
        Composite lookup key ``first_name.last_name``.

        Not collision free: ("A", "B.C") and ("A.B", "C") share a key.
        """
        return composite_key(self.first_name, self.last_name)

    def to_dict(self) -> Dict[str, str]:
        return {'first_name': self.first_name, 'last_name': self.last_name}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Person':
        data = data or {}
        return cls(data.get('first_name', ''), data.get('last_name', ''))

    def __eq__(self, other):
        if not isinstance(other, Person):
            return NotImplemented
        return (self.first_name, self.last_name) == (other.first_name, other.last_name)

    def __repr__(self):
        return f"Person({self.first_name!r}, {self.last_name!r})"


def composite_key(first_name: str, last_name: str) -> str:
    return first_name + "." + last_name


class IdentityRecord:
    """Training images and derived vectors of one person."""

    def __init__(self, person: Optional[Person] = None):
        self.person = person if person is not None else Person()
        self.training_images: List[str] = []
        self.detected_vectors: List[FeatureVector] = []
        self.normalized_vectors: List[FeatureVector] = []
        self.average_vector = FeatureVector.empty()

    @classmethod
    def for_person(cls, first_name: str, last_name: str) -> 'IdentityRecord':
        return cls(Person(first_name, last_name))

    @property
    def key(self) -> str:
        return self.person.key

    def is_trained(self) -> bool:
        """Records with an empty average vector cannot be matched."""
        return not self.average_vector.is_empty()

    def attach_training_images(self, paths: Iterable[str]):
        self.training_images.extend(paths)

    def train(self, vectorizer, output_dir: Optional[str] = None) -> bool:
        """
        Vectorize the training images and compute normalized and average vectors.

        Args:
            vectorizer: Object providing ``to_vector``, ``normalize``,
                ``average`` and ``save_image``
            output_dir: Directory receiving ``average.png`` and
                ``<n>_normalized.png`` renders (skipped when None)

        Returns:
            True if the record was trained, False if it has no training images
        """
        if not self.training_images:
            logger.debug(f"No training images for {self.key}, skipping training")
            return False

        faces = [vectorizer.to_vector(path) for path in self.training_images]

        self.detected_vectors = faces
        self.normalized_vectors = vectorizer.normalize(faces)
        self.average_vector = vectorizer.average(faces)
        logger.info(f"Trained {self.key} on {len(faces)} faces")

        if output_dir is not None:
            self._render(vectorizer, output_dir)

        return True

    def _render(self, vectorizer, output_dir: str):
        """Write the average and normalized faces out for inspection."""
        try:
            os.makedirs(output_dir, exist_ok=True)
            vectorizer.save_image(self.average_vector, os.path.join(output_dir, 'average.png'))
            for index, face in enumerate(self.normalized_vectors):
                vectorizer.save_image(face, os.path.join(output_dir, f"{index}_normalized.png"))
        except Exception as e:
            logger.error(f"Failed to render training faces for {self.key}: {e}")

    def rms_distance(self, probe: FeatureVector) -> float:
        """RMS positional distance of ``probe`` against the normalized vectors."""
        return rms_distance(self.normalized_vectors, probe)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'person': self.person.to_dict(),
            'normalized_vectors': [v.to_dict() for v in self.normalized_vectors],
            'average_vector': self.average_vector.to_dict(),
            'training_images': list(self.training_images),
            'detected_vectors': [v.to_dict() for v in self.detected_vectors]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IdentityRecord':
        record = cls(Person.from_dict(data.get('person')))
        record.training_images = list(data.get('training_images') or [])
        record.detected_vectors = [
            FeatureVector.from_dict(v) for v in data.get('detected_vectors') or []
        ]
        record.normalized_vectors = [
            FeatureVector.from_dict(v) for v in data.get('normalized_vectors') or []
        ]
        record.average_vector = FeatureVector.from_dict(data.get('average_vector'))
        return record

    def __eq__(self, other):
        if not isinstance(other, IdentityRecord):
            return NotImplemented
        return (self.person == other.person
                and self.training_images == other.training_images
                and self.detected_vectors == other.detected_vectors
                and self.normalized_vectors == other.normalized_vectors
                and self.average_vector == other.average_vector)

    def __repr__(self):
        return (f"IdentityRecord(key={self.key!r}, "
                f"training_images={len(self.training_images)}, "
                f"trained={self.is_trained()})")
