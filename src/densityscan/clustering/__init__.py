"""
Clustering module: dense-matrix and spatially indexed DBSCAN.
"""
from typing import List, Optional, Union

import numpy as np

from densityscan.clustering.clusterer import DBSCANClusterer, ClusterStats
from densityscan.clustering.dense import dbscan_matrix
from densityscan.clustering.indexed import ClusterGrower, dbscan_points, labels_from_clusters
from densityscan.clustering.region_query import region_query
from densityscan.clustering.spatial_index import (
    SpatialIndex,
    KDTreeIndex,
    BallTreeIndex,
    build_spatial_index,
)
from densityscan.core.models import Cluster, DbscanResult


def dbscan(
    data: np.ndarray,
    eps: float,
    minpts: int,
    min_cluster_size: Optional[int] = None,
    **kwargs,
) -> Union[DbscanResult, List[Cluster]]:
    """
    Run DBSCAN.

    dbscan(distance_matrix, eps, minpts) clusters an N x N distance matrix and
    returns a DbscanResult.

    dbscan(points, radius, min_neighbors, min_cluster_size) clusters a D x N
    coordinate array through a spatial index and returns a list of Cluster.

    Extra keyword arguments go to dbscan_matrix or dbscan_points.
    """
    if min_cluster_size is None:
        return dbscan_matrix(data, eps, minpts, **kwargs)
    return dbscan_points(data, eps, minpts, min_cluster_size, **kwargs)


__all__ = [
    "dbscan",
    "dbscan_matrix",
    "dbscan_points",
    "labels_from_clusters",
    "region_query",
    "ClusterGrower",
    "SpatialIndex",
    "KDTreeIndex",
    "BallTreeIndex",
    "build_spatial_index",
    "DBSCANClusterer",
    "ClusterStats",
]
