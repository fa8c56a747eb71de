"""
Estimator-style wrapper around both DBSCAN variants.
Fits on row-major data and exposes labels, statistics and cluster members.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
from scipy.spatial.distance import cdist

from densityscan.clustering.dense import dbscan_matrix
from densityscan.clustering.indexed import dbscan_points, labels_from_clusters
from densityscan.core.exceptions import ClusteringError, InvalidArgumentError
from densityscan.core.models import Cluster, DbscanResult
from densityscan.utils.logger import logger


@dataclass
class ClusterStats:
    """Statistics about clustering results."""

    num_clusters: int
    num_noise_points: int
    total_points: int
    cluster_sizes: Dict[int, int]
    avg_cluster_size: float
    largest_cluster_size: int
    smallest_cluster_size: int
    noise_fraction: float
    num_core_points: Optional[int] = None
    seeds: List[int] = field(default_factory=list)


class DBSCANClusterer:
    """
    Density-based clustering using DBSCAN.

    Two modes are available:
    1. Without min_cluster_size, the dense-matrix variant runs on a
       distance matrix (given directly with metric="precomputed", or
       computed from coordinates with scipy).
    2. With min_cluster_size, the indexed variant runs on coordinates and
       clusters smaller than min_cluster_size are dropped as noise.

    Labels follow the package convention: 0 is noise, clusters are 1..k.
    """

    def __init__(
        self,
        eps: float,
        min_samples: int,
        min_cluster_size: Optional[int] = None,
        metric: str = "euclidean",
        spatial_index: Optional[str] = None,
        leaf_size: Optional[int] = None,
    ):
        """
        Initialize DBSCAN clusterer.

        Args:
            eps: Neighbourhood radius.

            min_samples: minpts for the dense variant (seed test is
                neighbourhood size >= min_samples), min_neighbors for the
                indexed variant (core test is > min_samples).

            min_cluster_size: Switches to the indexed variant when set.

            metric: "euclidean" for coordinates, "precomputed" when fit()
                receives a distance matrix. The indexed variant only supports
                "euclidean".

            spatial_index: Index used by the indexed variant ("kdtree" or
                "balltree"); defaults to settings.SPATIAL_INDEX.

            leaf_size: Leaf size of the spatial index.
        """
        if metric not in ("euclidean", "precomputed"):
            raise InvalidArgumentError(f"Unsupported metric: {metric}")
        if metric == "precomputed" and min_cluster_size is not None:
            raise InvalidArgumentError(
                "min_cluster_size requires coordinates, not a precomputed matrix"
            )

        self.eps = eps
        self.min_samples = min_samples
        self.min_cluster_size = min_cluster_size
        self.metric = metric
        self.spatial_index = spatial_index
        self.leaf_size = leaf_size

        self.labels: Optional[np.ndarray] = None
        self.data: Optional[np.ndarray] = None
        self.result: Optional[DbscanResult] = None
        self.clusters: Optional[List[Cluster]] = None

        logger.info(
            "Initialized DBSCANClusterer",
            eps=eps,
            min_samples=min_samples,
            min_cluster_size=min_cluster_size,
            metric=metric,
        )

    @property
    def indexed(self) -> bool:
        return self.min_cluster_size is not None

    def fit(self, X: np.ndarray) -> np.ndarray:
        """
        Fit DBSCAN and return cluster labels.

        Args:
            X: Array of shape (n_samples, n_features), or (n_samples, n_samples)
                when metric="precomputed"

        Returns:
            Cluster labels (1D array, 0 for noise points)

        Raises:
            InvalidArgumentError: If X or the parameters are invalid
        """
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2:
            raise InvalidArgumentError(f"Expected a 2D array, got {X.ndim} dimension(s)")

        logger.info("Starting DBSCAN clustering", num_samples=X.shape[0], indexed=self.indexed)

        if self.indexed:
            self.clusters = dbscan_points(
                X.T,
                self.eps,
                self.min_samples,
                self.min_cluster_size,
                leaf_size=self.leaf_size,
                spatial_index=self.spatial_index,
            )
            self.result = None
            self.labels = labels_from_clusters(self.clusters, X.shape[0])
        else:
            D = X if self.metric == "precomputed" else cdist(X, X)
            self.result = dbscan_matrix(D, self.eps, self.min_samples)
            self.clusters = None
            self.labels = np.asarray(self.result.assignments, dtype=np.int64)

        self.data = X
        return self.labels

    def get_stats(self) -> ClusterStats:
        """
        Get clustering statistics.

        Raises:
            ClusteringError: If clustering hasn't been run yet
        """
        if self.labels is None:
            raise ClusteringError("Clustering hasn't been fit yet")

        cluster_sizes = {}
        for label in np.unique(self.labels):
            if label != 0:  # Skip noise
                cluster_sizes[int(label)] = int(np.sum(self.labels == label))

        num_noise = int(np.sum(self.labels == 0))
        total_points = len(self.labels)
        sizes = list(cluster_sizes.values())

        stats = ClusterStats(
            num_clusters=len(cluster_sizes),
            num_noise_points=num_noise,
            total_points=total_points,
            cluster_sizes=cluster_sizes,
            avg_cluster_size=float(np.mean(sizes)) if sizes else 0.0,
            largest_cluster_size=max(sizes) if sizes else 0,
            smallest_cluster_size=min(sizes) if sizes else 0,
            noise_fraction=num_noise / total_points if total_points > 0 else 0.0,
        )
        if self.clusters is not None:
            stats.num_core_points = sum(len(c.core_indices) for c in self.clusters)
        if self.result is not None:
            stats.seeds = list(self.result.seeds)
        return stats

    def get_cluster_members(self, cluster_id: int) -> np.ndarray:
        """
        Get indices of points in a cluster.

        Args:
            cluster_id: Cluster ID (0 for noise)
        """
        if self.labels is None:
            raise ClusteringError("Clustering hasn't been fit yet")

        return np.flatnonzero(self.labels == cluster_id)

    def get_cluster_center(self, cluster_id: int) -> np.ndarray:
        """
        Get the center (mean) of a cluster.

        Raises:
            ClusteringError: If the cluster doesn't exist, is noise, or the
                clusterer was fit on a precomputed matrix
        """
        if cluster_id == 0:
            raise ClusteringError("Cannot get center of noise (0)")
        if self.labels is None:
            raise ClusteringError("Clustering hasn't been fit yet")
        if self.metric == "precomputed":
            raise ClusteringError("Cluster centers need coordinates, not a distance matrix")

        members = self.get_cluster_members(cluster_id)
        if len(members) == 0:
            raise ClusteringError(f"Cluster {cluster_id} has no members")

        return self.data[members].mean(axis=0)
