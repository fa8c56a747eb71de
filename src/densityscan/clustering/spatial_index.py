"""
Spatial indexes for sub-linear radius queries.

Indexed DBSCAN only needs two capabilities from an index: build it once over
all points, then ask for every point within a radius of a query point. Any
structure offering that can be plugged in through ``SpatialIndex``.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

import numpy as np
from scipy.spatial import KDTree
from sklearn.neighbors import BallTree

from densityscan.core.exceptions import InvalidArgumentError
from densityscan.utils.logger import logger
from densityscan.config import settings


class SpatialIndex(ABC):
    """Read-only radius-query index over an (n_points, n_dims) array."""

    def __init__(self, points: np.ndarray, leaf_size: int):
        self.points = points
        self.leaf_size = leaf_size

    @classmethod
    def build(cls, points: np.ndarray, leaf_size: int) -> "SpatialIndex":
        """
        Build the index once over all points.

        Args:
            points: Array of shape (n_points, n_dims)
            leaf_size: Number of points at which the tree stops splitting
        """
        return cls(np.asarray(points, dtype=np.float64), leaf_size)

    @abstractmethod
    def query_radius(self, point: np.ndarray, radius: float) -> List[int]:
        """Return ascending indices of every point within radius (inclusive)."""
        raise NotImplementedError

    def __len__(self) -> int:
        return self.points.shape[0]


class KDTreeIndex(SpatialIndex):
    """SciPy k-d tree."""

    def __init__(self, points: np.ndarray, leaf_size: int):
        super().__init__(points, leaf_size)
        self.tree = KDTree(points, leafsize=leaf_size)

    def query_radius(self, point: np.ndarray, radius: float) -> List[int]:
        return self.tree.query_ball_point(point, radius, return_sorted=True)


class BallTreeIndex(SpatialIndex):
    """scikit-learn ball tree, euclidean metric."""

    def __init__(self, points: np.ndarray, leaf_size: int):
        super().__init__(points, leaf_size)
        self.tree = BallTree(points, leaf_size=leaf_size)

    def query_radius(self, point: np.ndarray, radius: float) -> List[int]:
        ind = self.tree.query_radius(np.asarray(point).reshape(1, -1), r=radius)[0]
        return np.sort(ind).tolist()


INDEX_TYPES: Dict[str, Type[SpatialIndex]] = {
    "kdtree": KDTreeIndex,
    "balltree": BallTreeIndex,
}


def build_spatial_index(
    points: np.ndarray,
    leaf_size: Optional[int] = None,
    method: Optional[str] = None,
) -> SpatialIndex:
    """
    Build a spatial index to speed up neighbourhood queries.

    Args:
        points: Array of shape (n_points, n_dims)
        leaf_size: Tree leaf size (default: from settings)
        method: 'kdtree' or 'balltree' (default: from settings)

    Returns:
        Built SpatialIndex

    Raises:
        InvalidArgumentError: If the method is unknown or leaf_size < 1
    """
    method = method or settings.SPATIAL_INDEX
    leaf_size = leaf_size if leaf_size is not None else settings.LEAF_SIZE

    if method not in INDEX_TYPES:
        raise InvalidArgumentError(
            f"Unsupported spatial index '{method}', expected one of {sorted(INDEX_TYPES)}"
        )
    if leaf_size < 1:
        raise InvalidArgumentError(f"leaf_size {leaf_size} must be a positive integer.")

    index = INDEX_TYPES[method].build(points, leaf_size)
    logger.debug("Built spatial index", method=method, leaf_size=leaf_size, num_points=len(index))
    return index
