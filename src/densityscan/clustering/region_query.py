"""
Neighbourhood query over a precomputed distance matrix.
"""
from typing import List

import numpy as np


def region_query(distance_matrix: np.ndarray, point_idx: int, eps: float) -> List[int]:
    """
    Find every point strictly closer than eps to a given point.

    Args:
        distance_matrix: Square array of pairwise distances
        point_idx: Index of the query point
        eps: Neighbourhood radius (exclusive)

    Returns:
        Ascending list of neighbour indices. point_idx is included since
        its distance to itself is 0.
    """
    dists = distance_matrix[:, point_idx]
    return np.flatnonzero(dists < eps).tolist()
