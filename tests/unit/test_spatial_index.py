"""
Unit tests for spatial indexes.
"""
import pytest
import numpy as np

from densityscan.clustering.spatial_index import (
    SpatialIndex,
    KDTreeIndex,
    BallTreeIndex,
    build_spatial_index,
)
from densityscan.core.exceptions import InvalidArgumentError
from densityscan.config import settings


@pytest.fixture
def line_points():
    """Five points on a line, one per row."""
    return np.array([[0.0], [1.0], [2.0], [3.0], [10.0]])


@pytest.mark.parametrize("index_type", [KDTreeIndex, BallTreeIndex])
class TestSpatialIndex:
    """Tests shared by all index types."""

    def test_query_includes_self(self, index_type, line_points):
        """Test the query point is returned."""
        index = index_type.build(line_points, 2)
        assert index.query_radius(line_points[4], 0.5) == [4]

    def test_radius_is_inclusive(self, index_type, line_points):
        """Test points exactly at the radius are returned."""
        index = index_type.build(line_points, 2)
        assert index.query_radius(line_points[1], 1.0) == [0, 1, 2]

    def test_sorted_indices(self, index_type):
        """Test indices come back in ascending order."""
        np.random.seed(0)
        points = np.random.rand(200, 3)
        index = index_type.build(points, 10)

        result = index.query_radius(points[17], 0.3)

        assert result == sorted(result)
        assert 17 in result
        expected = np.flatnonzero(np.linalg.norm(points - points[17], axis=1) <= 0.3)
        assert result == expected.tolist()

    def test_len(self, index_type, line_points):
        """Test the index reports its point count."""
        assert len(index_type.build(line_points, 2)) == 5


class TestBuildSpatialIndex:
    """Tests for build_spatial_index."""

    def test_default_method(self, line_points):
        """Test the default index comes from settings."""
        index = build_spatial_index(line_points)

        assert isinstance(index, SpatialIndex)
        assert index.leaf_size == settings.LEAF_SIZE

    @pytest.mark.parametrize("method, index_type", [
        ("kdtree", KDTreeIndex),
        ("balltree", BallTreeIndex),
    ])
    def test_method(self, line_points, method, index_type):
        """Test the method name selects the index type."""
        assert isinstance(build_spatial_index(line_points, 4, method), index_type)

    def test_unknown_method(self, line_points):
        """Test unknown methods are rejected."""
        with pytest.raises(InvalidArgumentError):
            build_spatial_index(line_points, method="rtree")

    def test_bad_leaf_size(self, line_points):
        """Test leaf sizes below 1 are rejected."""
        with pytest.raises(InvalidArgumentError):
            build_spatial_index(line_points, leaf_size=0)
