"""
densityscan - Density-based spatial clustering (DBSCAN).

This package provides a dense distance-matrix DBSCAN and an indexed DBSCAN
that answers neighbourhood queries through a spatial index.
"""

__version__ = "0.1.0"

from densityscan.config import settings
from densityscan.clustering import (
    dbscan,
    dbscan_matrix,
    dbscan_points,
    DBSCANClusterer,
)
from densityscan.core.models import Cluster, DbscanResult
from densityscan.core.exceptions import InvalidArgumentError

__all__ = [
    "settings",
    "dbscan",
    "dbscan_matrix",
    "dbscan_points",
    "DBSCANClusterer",
    "Cluster",
    "DbscanResult",
    "InvalidArgumentError",
    "__version__",
]
