"""
Face Library

Keeps a persisted library of known identities, each trained from a set of
face photographs, and recognizes new faces by nearest average face.
"""

__version__ = "1.0.0"
__author__ = "Face Recognition System Team"

from .feature_vector import FeatureVector
from .identity import IdentityRecord, Person
from .identity_store import IdentityStore, get_store
from .face_detector import FaceDetector
from .vectorizer import Vectorizer
from .recognizer import FaceRecognizer, RecognitionResult

__all__ = [
    "FeatureVector",
    "IdentityRecord",
    "Person",
    "IdentityStore",
    "get_store",
    "FaceDetector",
    "Vectorizer",
    "FaceRecognizer",
    "RecognitionResult"
]
