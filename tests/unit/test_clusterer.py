"""
Unit tests for DBSCANClusterer.
"""
import pytest
import numpy as np
from scipy.spatial.distance import cdist

from densityscan.clustering import DBSCANClusterer, ClusterStats
from densityscan.core.exceptions import ClusteringError, InvalidArgumentError


@pytest.fixture
def sample_points():
    """Two tight blobs of 20 points plus two far-away noise points."""
    np.random.seed(42)
    blob1 = np.random.randn(20, 2) * 0.1
    blob2 = np.random.randn(20, 2) * 0.1 + 5.0
    noise = np.array([[20.0, 20.0], [-20.0, 20.0]])
    return np.vstack([blob1, blob2, noise])


class TestDBSCANClusterer:
    """Tests for DBSCANClusterer class."""

    def test_initialization(self):
        """Test clusterer initializes correctly."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)

        assert clusterer.eps == 0.5
        assert clusterer.min_samples == 3
        assert clusterer.metric == "euclidean"
        assert not clusterer.indexed
        assert clusterer.labels is None

    def test_unsupported_metric(self):
        """Test unknown metrics are rejected."""
        with pytest.raises(InvalidArgumentError):
            DBSCANClusterer(eps=0.5, min_samples=3, metric="cosine")

    def test_precomputed_with_min_cluster_size(self):
        """Test the indexed variant refuses a distance matrix."""
        with pytest.raises(InvalidArgumentError):
            DBSCANClusterer(eps=0.5, min_samples=3, min_cluster_size=5, metric="precomputed")

    def test_fit_dense(self, sample_points):
        """Test dense clustering finds both blobs and the noise."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)

        labels = clusterer.fit(sample_points)

        assert len(labels) == len(sample_points)
        assert set(labels[:20]) == {1}
        assert set(labels[20:40]) == {2}
        assert labels[40:].tolist() == [0, 0]
        assert clusterer.result is not None

    def test_fit_precomputed(self, sample_points):
        """Test a precomputed matrix gives the same labels as coordinates."""
        expected = DBSCANClusterer(eps=0.5, min_samples=3).fit(sample_points)
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3, metric="precomputed")

        labels = clusterer.fit(cdist(sample_points, sample_points))

        np.testing.assert_array_equal(labels, expected)

    def test_fit_indexed(self, sample_points):
        """Test indexed clustering finds both blobs and the noise."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3, min_cluster_size=5)

        labels = clusterer.fit(sample_points)

        assert clusterer.indexed
        assert len(clusterer.clusters) == 2
        assert set(labels[:20]) == {1}
        assert set(labels[20:40]) == {2}
        assert labels[40:].tolist() == [0, 0]

    def test_fit_rejects_flat_input(self):
        """Test 1D input is rejected."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)
        with pytest.raises(InvalidArgumentError):
            clusterer.fit(np.zeros(10))

    @pytest.mark.parametrize("min_cluster_size", [None, 5])
    def test_get_stats(self, sample_points, min_cluster_size):
        """Test statistics retrieval."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3, min_cluster_size=min_cluster_size)
        clusterer.fit(sample_points)

        stats = clusterer.get_stats()

        assert isinstance(stats, ClusterStats)
        assert stats.num_clusters == 2
        assert stats.num_noise_points == 2
        assert stats.total_points == 42
        assert stats.cluster_sizes == {1: 20, 2: 20}
        assert stats.avg_cluster_size == 20.0
        assert stats.largest_cluster_size == 20
        assert stats.smallest_cluster_size == 20
        assert stats.noise_fraction == pytest.approx(2 / 42)

    def test_stats_variant_details(self, sample_points):
        """Test seeds are reported for dense runs and core counts for indexed runs."""
        dense = DBSCANClusterer(eps=0.5, min_samples=3)
        dense.fit(sample_points)
        assert len(dense.get_stats().seeds) == 2
        assert dense.get_stats().num_core_points is None

        indexed = DBSCANClusterer(eps=0.5, min_samples=3, min_cluster_size=5)
        indexed.fit(sample_points)
        assert indexed.get_stats().num_core_points > 0
        assert indexed.get_stats().seeds == []

    def test_get_cluster_members(self, sample_points):
        """Test retrieving members of a cluster."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)
        clusterer.fit(sample_points)

        members = clusterer.get_cluster_members(2)

        assert members.tolist() == list(range(20, 40))
        assert clusterer.get_cluster_members(0).tolist() == [40, 41]

    def test_get_cluster_center(self, sample_points):
        """Test retrieving cluster center."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)
        clusterer.fit(sample_points)

        center = clusterer.get_cluster_center(2)

        assert len(center) == 2
        np.testing.assert_allclose(center, sample_points[20:40].mean(axis=0))

    def test_get_cluster_center_noise_raises_error(self, sample_points):
        """Test that getting center of noise raises error."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)
        clusterer.fit(sample_points)

        with pytest.raises(ClusteringError):
            clusterer.get_cluster_center(0)

    def test_get_cluster_center_unknown_cluster(self, sample_points):
        """Test that an unknown cluster id raises error."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)
        clusterer.fit(sample_points)

        with pytest.raises(ClusteringError):
            clusterer.get_cluster_center(99)

    def test_get_cluster_center_precomputed_raises_error(self, sample_points):
        """Test that centers are unavailable for a precomputed matrix."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3, metric="precomputed")
        clusterer.fit(cdist(sample_points, sample_points))

        with pytest.raises(ClusteringError):
            clusterer.get_cluster_center(1)

    def test_error_before_fit(self):
        """Test errors when querying before fitting."""
        clusterer = DBSCANClusterer(eps=0.5, min_samples=3)

        with pytest.raises(ClusteringError):
            clusterer.get_stats()
        with pytest.raises(ClusteringError):
            clusterer.get_cluster_members(1)
