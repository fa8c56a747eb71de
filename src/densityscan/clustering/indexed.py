"""
DBSCAN for a large number of points, backed by a spatial index.

Unlike the dense-matrix variant, every neighbourhood query goes through a
SpatialIndex built once over all points, so no N x N matrix is ever held in
memory. Clusters smaller than ``min_cluster_size`` are discarded and each
accepted cluster reports its core and boundary members separately.
"""
from collections import deque
from typing import Deque, List, Optional, Sequence, Union

import numpy as np

from densityscan.clustering.spatial_index import SpatialIndex, build_spatial_index
from densityscan.clustering.validation import check_positive_int, check_positive_real
from densityscan.core.exceptions import InvalidArgumentError
from densityscan.core.models import Cluster
from densityscan.utils.logger import logger


class ClusterGrower:
    """
    Breadth-first cluster growth over a spatial index.

    Owns all mutable state of one indexed DBSCAN run. ``grow`` runs a single
    cluster attempt from a seed; ``accept`` turns the attempt into a Cluster.
    """

    def __init__(
        self,
        points: np.ndarray,
        index: SpatialIndex,
        radius: float,
        min_neighbors: int,
    ):
        """
        Args:
            points: Array of shape (n_dims, n_points)
            index: Spatial index built over points.T
            radius: Neighbourhood radius
            min_neighbors: A point is core only with more neighbours than this
        """
        self.points = points
        self.index = index
        self.radius = radius
        self.min_neighbors = min_neighbors

        num_points = points.shape[1]
        self.visited = np.zeros(num_points, dtype=bool)
        self.cluster_selection = np.zeros(num_points, dtype=bool)
        self.core_selection = np.zeros(num_points, dtype=bool)
        self.to_explore: Deque[int] = deque()

    def grow(self, seed: int) -> int:
        """
        Run one cluster attempt starting at seed.

        Returns:
            Number of members (core + boundary) of the attempt
        """
        self.core_selection[:] = False
        self.cluster_selection[:] = False
        self.cluster_selection[seed] = True
        self.to_explore.append(seed)

        while self.to_explore:
            current = self.to_explore.popleft()
            if self.visited[current]:
                continue
            self.visited[current] = True

            adj_list = np.asarray(
                self.index.query_radius(self.points[:, current], self.radius),
                dtype=np.intp,
            )
            # all the neighbours are part of the cluster
            self.cluster_selection[adj_list] = True

            # not a core point: its neighbours are not explored any further
            if len(adj_list) <= self.min_neighbors:
                continue
            self.core_selection[current] = True
            self._update_exploration_list(adj_list)

        return int(np.count_nonzero(self.cluster_selection))

    def _update_exploration_list(self, adj_list: Sequence[int]) -> None:
        # already-queued points may be queued again; visited ones are skipped on dequeue
        for j in adj_list:
            if not self.visited[j]:
                self.to_explore.append(int(j))

    def accept(self) -> Cluster:
        """Materialize the current attempt as a Cluster."""
        core_idx = np.flatnonzero(self.core_selection)
        boundary_idx = np.flatnonzero(self.cluster_selection & ~self.core_selection)
        return Cluster(
            size=int(np.count_nonzero(self.cluster_selection)),
            core_indices=core_idx.tolist(),
            boundary_indices=boundary_idx.tolist(),
        )


def dbscan_points(
    points: np.ndarray,
    radius: float,
    min_neighbors: int,
    min_cluster_size: int,
    leaf_size: Optional[int] = None,
    spatial_index: Union[str, SpatialIndex, None] = None,
) -> List[Cluster]:
    """
    DBSCAN clustering for a large number of points and a minimum cluster size.

    Args:
        points: Array of shape (n_dims, n_points), one column per point
        radius: Neighbourhood radius
        min_neighbors: Minimum number of neighbours to be a core point
            (a point is core when it has more than this many)
        min_cluster_size: Minimum number of points of a valid cluster
        leaf_size: Leaf size of the spatial index (default: from settings)
        spatial_index: Index method name ('kdtree', 'balltree') or an index
            already built over points.T (default: from settings)

    Returns:
        Accepted clusters in discovery order

    Raises:
        InvalidArgumentError: If any argument is invalid
    """
    try:
        points = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"points must be a numeric array: {e}")
    if points.ndim != 2:
        raise InvalidArgumentError(
            f"points must be a D x N matrix, got an array with {points.ndim} dimension(s)"
        )
    dim, num_points = points.shape
    if num_points <= dim:
        raise InvalidArgumentError(
            f"points has {dim} rows and {num_points} columns, "
            f"when it must be a D x N matrix with D < N"
        )
    radius = check_positive_real("radius", radius)
    min_neighbors = check_positive_int("min_neighbors", min_neighbors)
    min_cluster_size = check_positive_int("min_cluster_size", min_cluster_size)

    if isinstance(spatial_index, SpatialIndex):
        if len(spatial_index) != num_points:
            raise InvalidArgumentError(
                f"spatial_index holds {len(spatial_index)} points, expected {num_points}"
            )
        index = spatial_index
    else:
        index = build_spatial_index(points.T, leaf_size=leaf_size, method=spatial_index)

    return _dbscan_points(points, index, radius, min_neighbors, min_cluster_size)


def _dbscan_points(
    points: np.ndarray,
    index: SpatialIndex,
    radius: float,
    min_neighbors: int,
    min_cluster_size: int,
) -> List[Cluster]:
    num_points = points.shape[1]
    clusters: List[Cluster] = []
    grower = ClusterGrower(points, index, radius, min_neighbors)

    logger.info(
        "Starting indexed DBSCAN",
        num_points=num_points,
        radius=radius,
        min_neighbors=min_neighbors,
        min_cluster_size=min_cluster_size,
    )

    for i in range(num_points):
        if grower.visited[i]:
            continue
        cluster_size = grower.grow(i)
        if min_cluster_size <= cluster_size:
            clusters.append(grower.accept())
            logger.debug("Accepted cluster", seed=i, size=cluster_size)

    logger.info(
        "Indexed DBSCAN complete",
        num_clusters=len(clusters),
        num_clustered_points=sum(c.size for c in clusters),
    )
    return clusters


def labels_from_clusters(clusters: Sequence[Cluster], num_points: int) -> np.ndarray:
    """
    Flatten a cluster list into one label per point.

    Returns:
        Integer array of shape (num_points,): i + 1 for members of the i-th
        cluster, 0 for noise. A point shared by several clusters keeps the
        id of the last one.
    """
    labels = np.zeros(num_points, dtype=np.int64)
    for cluster_id, cluster in enumerate(clusters, start=1):
        labels[cluster.indices] = cluster_id
    return labels
