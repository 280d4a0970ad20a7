"""Tests for amplitude resampling."""

import numpy as np
import pytest

from voxedit.core.resample import bucket_edges, resample


class TestBucketEdges:
    def test_last_edge_is_length(self) -> None:
        """Float boundaries still end exactly at the input length."""
        edges = bucket_edges(10, 3)
        assert list(edges) == [0, 3, 6, 10]

    def test_even_split(self) -> None:
        edges = bucket_edges(8, 4)
        assert list(edges) == [0, 2, 4, 6, 8]

    def test_degenerate(self) -> None:
        assert list(bucket_edges(0, 5)) == [0]
        assert list(bucket_edges(5, 0)) == [0]


class TestResample:
    def test_empty_input(self) -> None:
        assert resample([], 10).size == 0

    def test_non_positive_target(self) -> None:
        assert resample([1.0, 2.0], 0).size == 0
        assert resample([1.0, 2.0], -3).size == 0

    def test_same_length_returns_input(self) -> None:
        """Matching length is a no-op."""
        values = np.array([0.1, -0.5, 0.3])
        assert resample(values, 3) is values

    def test_upsample_interpolates(self) -> None:
        """[0, 1] upsampled to 5 points is a straight line."""
        result = resample([0.0, 1.0], 5)
        assert result == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])

    def test_upsample_single_value(self) -> None:
        result = resample([0.7], 4)
        assert result == pytest.approx([0.7, 0.7, 0.7, 0.7])

    def test_downsample_keeps_peak_absolute(self) -> None:
        """Each bucket keeps its peak magnitude, sign dropped."""
        values = [0.1, -0.9, 0.2, 0.3, 0.0, -0.4]
        result = resample(values, 3)
        assert result == pytest.approx([0.9, 0.3, 0.4])

    def test_downsample_uneven_buckets(self) -> None:
        """Last bucket absorbs the remainder: 10 -> 3 uses [0:3] [3:6] [6:10]."""
        values = np.zeros(10)
        values[9] = 0.8
        values[4] = -0.5
        result = resample(values, 3)
        assert result == pytest.approx([0.0, 0.5, 0.8])

    def test_exact_length(self) -> None:
        rng = np.random.default_rng(0)
        values = rng.uniform(-1, 1, size=1234)
        for target in (1, 7, 100, 1233, 1235, 5000):
            assert len(resample(values, target)) == target

    def test_downsample_to_one_is_global_peak(self) -> None:
        assert resample([0.2, -0.6, 0.5], 1) == pytest.approx([0.6])

    def test_idempotent_after_downsampling(self) -> None:
        values = np.random.default_rng(1).uniform(-1, 1, size=1000)
        once = resample(values, 37)
        np.testing.assert_array_equal(resample(once, 37), once)

    def test_idempotent_after_upsampling(self) -> None:
        once = resample([0.0, 0.5, -0.25], 11)
        np.testing.assert_array_equal(resample(once, 11), once)
