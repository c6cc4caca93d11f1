"""Unit tests for deterministic 1-D k-means speaker clustering."""

from __future__ import annotations

import unittest

from speech_segmenter.exceptions import InvalidParameters
from speech_segmenter.segmentation.clustering import assign_labels, kmeans_1d, nearest_centroid


class TestSpeakerClustering(unittest.TestCase):
    """Tests for kmeans_1d / nearest_centroid."""

    def test_two_speakers(self) -> None:
        """[100, 102, 98, 200, 205, 198] splits into ~100 and ~201."""
        values = [100, 102, 98, 200, 205, 198]
        centroids = kmeans_1d(values, 2)
        self.assertEqual(len(centroids), 2)
        self.assertAlmostEqual(centroids[0], 100.0)
        self.assertAlmostEqual(centroids[1], 201.0)
        for v in (100, 102, 98):
            self.assertEqual(nearest_centroid(v, centroids), 0)
        for v in (200, 205, 198):
            self.assertEqual(nearest_centroid(v, centroids), 1)

    def test_deterministic_for_same_multiset(self) -> None:
        """Initialisation depends only on the sorted values."""
        a = kmeans_1d([210, 95, 130, 220, 101, 99, 205], 3)
        b = kmeans_1d([99, 101, 95, 205, 220, 210, 130], 3)
        self.assertEqual(a, b)
        self.assertEqual(a, kmeans_1d([210, 95, 130, 220, 101, 99, 205], 3))

    def test_every_value_assigned(self) -> None:
        """Assignment maps every value onto one of the returned centroids."""
        values = [120.5, 119.0, 240.0, 250.0, 180.0, 121.0, 245.0]
        centroids = kmeans_1d(values, 3)
        labels = assign_labels(values, centroids)
        self.assertEqual(len(labels), len(values))
        for label in labels:
            self.assertIn(label, range(len(centroids)))

    def test_fewer_values_than_k(self) -> None:
        """Shortcut: the values themselves come back, unsorted and not iterated."""
        self.assertEqual(kmeans_1d([180.0, 120.0], 3), [180.0, 120.0])
        self.assertEqual(kmeans_1d([], 2), [])

    def test_single_cluster(self) -> None:
        self.assertEqual(kmeans_1d([100, 110, 120], 1), [110.0])

    def test_empty_cluster_keeps_centroid(self) -> None:
        """A centroid that attracts nothing is left where it was."""
        centroids = kmeans_1d([150, 150, 150, 150], 2)
        self.assertEqual(centroids, [150.0, 150.0])

    def test_tie_goes_to_lower_index(self) -> None:
        self.assertEqual(nearest_centroid(150, [100, 200]), 0)
        self.assertEqual(nearest_centroid(150, [200, 100]), 0)
        self.assertEqual(nearest_centroid(201, [100, 200]), 1)

    def test_invalid_k(self) -> None:
        with self.assertRaises(InvalidParameters):
            kmeans_1d([1, 2, 3], 0)

    def test_nearest_centroid_requires_centroids(self) -> None:
        with self.assertRaises(ValueError):
            nearest_centroid(1.0, [])


if __name__ == "__main__":
    unittest.main()
