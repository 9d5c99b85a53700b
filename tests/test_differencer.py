"""
Frame Differencer Tests
=======================

Scoring purity, match decisions and threshold hysteresis.
"""

import numpy as np
import pytest

from conftest import textured_image


class TestComputeDissimilarity:
    """Tests for the std-dev-of-absdiff score."""

    def test_identical_images_score_zero(self):
        """Identical frames have no difference at all."""
        from framefixer.compare import compute_dissimilarity

        image = textured_image(1)
        assert compute_dissimilarity(image, image.copy()) == 0.0

    def test_distinct_textures_score_high(self):
        """Unrelated textures differ strongly."""
        from framefixer.compare import compute_dissimilarity

        score = compute_dissimilarity(textured_image(1), textured_image(2))
        assert score > 10.0

    def test_uniform_shift_scores_zero(self):
        """A global brightness change has zero deviation."""
        from framefixer.compare import compute_dissimilarity

        base = np.full((8, 8), 40, dtype=np.uint8)
        shifted = np.full((8, 8), 90, dtype=np.uint8)
        assert compute_dissimilarity(base, shifted) == 0.0

    def test_scoring_is_pure(self):
        """Scoring the same pair twice is bit-identical."""
        from framefixer.compare import compute_dissimilarity

        a, b = textured_image(3), textured_image(4)
        first = compute_dissimilarity(a, b)
        second = compute_dissimilarity(a, b)
        assert first == second
        assert compute_dissimilarity(b, a) == first

    def test_localized_change_matches_numpy(self):
        """Score equals the population std of the absolute difference."""
        from framefixer.compare import compute_dissimilarity

        a = np.zeros((10, 10), dtype=np.uint8)
        b = a.copy()
        b[2:4, 2:4] = 200
        expected = np.abs(a.astype(float) - b.astype(float)).std()
        assert compute_dissimilarity(a, b) == pytest.approx(expected)

    def test_shape_mismatch_rejected(self):
        """Images of different sizes cannot be compared."""
        from framefixer.compare import ImageShapeError, compute_dissimilarity

        with pytest.raises(ImageShapeError):
            compute_dissimilarity(textured_image(1, (8, 8)), textured_image(1, (8, 9)))

    def test_color_images_rejected(self):
        """Comparison images must be single channel."""
        from framefixer.compare import ImageShapeError, compute_dissimilarity

        color = np.zeros((8, 8, 3), dtype=np.uint8)
        with pytest.raises(ImageShapeError):
            compute_dissimilarity(color, color)


class TestFrameDifferencer:
    """Tests for match decisions under the active cutoff."""

    def test_match_uses_active_threshold(self):
        """The same score can match under strict and not under relaxed."""
        from framefixer.compare import FrameDifferencer
        from framefixer.models import ThresholdState

        a = np.zeros((10, 10), dtype=np.uint8)
        b = a.copy()
        b[0, 0] = 4  # small, localized change

        threshold = ThresholdState(strict=1.0, relaxed=0.1)
        differencer = FrameDifferencer(threshold)

        matched, score = differencer.match(a, b)
        assert 0.1 < score < 1.0
        assert matched

        threshold.make_relaxed()
        matched, _ = differencer.match(a, b)
        assert not matched

    def test_score_returned_on_mismatch(self):
        """A non-match still reports its score for use as priority."""
        from framefixer.compare import FrameDifferencer
        from framefixer.models import ThresholdState

        differencer = FrameDifferencer(ThresholdState())
        matched, score = differencer.match(textured_image(5), textured_image(6))
        assert not matched
        assert score > 0.5


class TestThresholdState:
    """Tests for threshold mode switching."""

    def test_starts_strict(self):
        from framefixer.models import ThresholdMode, ThresholdState

        threshold = ThresholdState(strict=0.5, relaxed=0.25)
        assert threshold.mode == ThresholdMode.STRICT
        assert threshold.active == 0.5

    def test_relax_and_restore(self):
        from framefixer.models import ThresholdState

        threshold = ThresholdState(strict=0.5, relaxed=0.25)
        threshold.make_relaxed()
        assert threshold.active == 0.25
        threshold.make_strict()
        assert threshold.active == 0.5
