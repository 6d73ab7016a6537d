"""
Distance Metrics Module

Scalar distances between feature vectors. Only the mean-normalized
absolute difference is used for matching; the RMS distance and the pixel
edit distance are standalone scorers that recognition never calls.
"""

import numpy as np
from typing import Sequence

from .exceptions import DimensionMismatchError
from .feature_vector import FeatureVector, MAX_INTENSITY


def mean_abs_difference_score(first: FeatureVector, second: FeatureVector) -> float:
    """
    Absolute mean of the pixel difference, scaled to the 16-bit range.

    Args:
        first: Feature vector
        second: Feature vector with the same dimensions

    Returns:
        Score in [0, 1], lower is closer

    Raises:
        DimensionMismatchError: If the vectors differ in width or height
    """
    difference = first.difference(second)
    if difference.is_empty():
        return 0.0
    return float(abs(np.mean(difference.pixels)) / MAX_INTENSITY)


def rms_distance(vectors: Sequence[FeatureVector], probe: FeatureVector) -> float:
    """
    Root-mean-square positional distance of a probe against a set of vectors.

    For each pixel the differences to every vector in the set are summed,
    divided by the pixel count and squared; the square root of the total is
    divided by the number of vectors.

    Raises:
        ValueError: If ``vectors`` is empty
        DimensionMismatchError: If any vector size differs from the probe
    """
    if not vectors:
        raise ValueError("rms_distance needs at least one vector")

    for vector in vectors:
        if vector.pixels.size != probe.pixels.size:
            raise DimensionMismatchError(vector.shape, probe.shape)

    stacked = np.vstack([vector.pixels for vector in vectors])
    n_images, n_pixels = stacked.shape
    if n_pixels == 0:
        return 0.0

    summed = np.sum(stacked - probe.pixels, axis=0)
    distance = np.sum((summed / n_pixels) ** 2)
    return float(np.sqrt(distance) / n_images)


def pixel_edit_distance(first: FeatureVector, second: FeatureVector) -> int:
    """
    Levenshtein distance between two pixel sequences.

    Pixels are compared as discrete symbols by exact float equality, so two
    almost identical intensities still count as a substitution. Not suited
    to continuous intensity data; kept as an isolated utility.
    """
    source = first.pixels
    target = second.pixels
    if source.size == 0:
        return int(target.size)
    if target.size == 0:
        return int(source.size)

    previous = list(range(target.size + 1))
    for i, source_pixel in enumerate(source, start=1):
        current = [i] + [0] * target.size
        for j, target_pixel in enumerate(target, start=1):
            cost = 0 if source_pixel == target_pixel else 1
            current[j] = min(current[j - 1] + 1,
                             previous[j] + 1,
                             previous[j - 1] + cost)
        previous = current

    return previous[-1]
