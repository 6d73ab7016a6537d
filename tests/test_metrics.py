"""
Test cases for distance metrics and feature vectors
"""

import pytest
import math
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from facelibrary.exceptions import DimensionMismatchError
from facelibrary.feature_vector import FeatureVector
from facelibrary.metrics import mean_abs_difference_score, pixel_edit_distance, rms_distance


class TestFeatureVector:

    def test_pixel_count_must_match_dimensions(self):
        with pytest.raises(ValueError):
            FeatureVector(2, 2, [1.0, 2.0, 3.0])

    def test_difference_requires_equal_dimensions(self):
        with pytest.raises(DimensionMismatchError):
            FeatureVector(2, 2, [0.0] * 4).difference(FeatureVector(4, 1, [0.0] * 4))

    def test_dict_round_trip(self):
        vector = FeatureVector(2, 1, [1.5, 2.5])
        assert FeatureVector.from_dict(vector.to_dict()) == vector
        assert FeatureVector.from_dict(None).is_empty()


class TestMeanAbsDifferenceScore:

    def test_score_of_close_vectors(self):
        average = FeatureVector(2, 2, [10.0] * 4)
        probe = FeatureVector(2, 2, [12.0] * 4)
        assert mean_abs_difference_score(average, probe) == pytest.approx(2 / 65535)

    def test_score_is_symmetric(self):
        a = FeatureVector(2, 2, [10.0, 300.0, 5.0, 40000.0])
        b = FeatureVector(2, 2, [200.0, 7.0, 9000.0, 12.0])
        assert mean_abs_difference_score(a, b) == mean_abs_difference_score(b, a)

    def test_identical_vectors_score_zero(self):
        a = FeatureVector(2, 2, [1.0, 2.0, 3.0, 4.0])
        assert mean_abs_difference_score(a, a) == 0.0

    def test_mismatched_dimensions_raise(self):
        with pytest.raises(DimensionMismatchError):
            mean_abs_difference_score(FeatureVector(2, 2, [0.0] * 4),
                                      FeatureVector(3, 3, [0.0] * 9))


class TestRmsDistance:

    def test_matches_formula(self):
        vectors = [FeatureVector(2, 1, [1.0, 2.0]), FeatureVector(2, 1, [3.0, 6.0])]
        probe = FeatureVector(2, 1, [0.0, 0.0])
        # pixel sums 4 and 8, each divided by 2 pixels: sqrt(2^2 + 4^2) / 2
        assert rms_distance(vectors, probe) == pytest.approx(math.sqrt(20) / 2)

    def test_empty_set_raises(self):
        with pytest.raises(ValueError):
            rms_distance([], FeatureVector(1, 1, [0.0]))

    def test_size_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            rms_distance([FeatureVector(2, 1, [0.0, 0.0])], FeatureVector(1, 1, [0.0]))


class TestPixelEditDistance:

    def test_identical_sequences(self):
        a = FeatureVector(3, 1, [1.0, 2.0, 3.0])
        assert pixel_edit_distance(a, a) == 0

    def test_substitution_and_insertion(self):
        a = FeatureVector(3, 1, [1.0, 2.0, 3.0])
        b = FeatureVector(4, 1, [1.0, 5.0, 3.0, 4.0])
        assert pixel_edit_distance(a, b) == 2

    def test_nearly_equal_pixels_are_different_symbols(self):
        a = FeatureVector(1, 1, [100.0])
        b = FeatureVector(1, 1, [100.0001])
        assert pixel_edit_distance(a, b) == 1

    def test_empty_input(self):
        assert pixel_edit_distance(FeatureVector.empty(), FeatureVector(2, 1, [1.0, 2.0])) == 2
