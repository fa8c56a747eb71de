"""
DBSCAN over a precomputed distance matrix.

References:
    Martin Ester, Hans-Peter Kriegel, Joerg Sander and Xiaowei Xu.
    A density-based algorithm for discovering clusters in large spatial
    databases with noise. KDD 1996.
"""
from collections import deque
from numbers import Integral
from typing import List, Optional, Sequence

import numpy as np

from densityscan.clustering.region_query import region_query
from densityscan.clustering.validation import check_positive_int, check_positive_real
from densityscan.core.exceptions import InvalidArgumentError
from densityscan.core.models import DbscanResult
from densityscan.utils.logger import logger


def dbscan_matrix(
    distance_matrix: np.ndarray,
    eps: float,
    minpts: int,
    visit_order: Optional[Sequence[int]] = None,
) -> DbscanResult:
    """
    Cluster points given their pairwise distance matrix.

    Args:
        distance_matrix: Array of shape (n, n); entry (i, j) is the distance
            between points i and j. Never modified.
        eps: Neighbourhood radius; j is a neighbour of i when D[j, i] < eps
        minpts: Minimum neighbourhood size (self included) of a seed point
        visit_order: Order in which points are tried as seeds
            (default: index order)

    Returns:
        DbscanResult with seeds, assignments (0 = noise) and counts

    Raises:
        InvalidArgumentError: If any argument is invalid
    """
    D = np.asarray(distance_matrix)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise InvalidArgumentError("distance_matrix must be a square matrix.")
    n = D.shape[0]
    if n < 2:
        raise InvalidArgumentError("There must be at least two points.")
    eps = check_positive_real("eps", eps)
    minpts = check_positive_int("minpts", minpts)

    if visit_order is None:
        visit_order = range(n)
    else:
        visit_order = list(visit_order)
        if any(isinstance(p, bool) or not isinstance(p, Integral) for p in visit_order):
            raise InvalidArgumentError("visit_order must only contain integer indices.")
        visit_order = [int(p) for p in visit_order]
        if any(p < 0 or p >= n for p in visit_order):
            raise InvalidArgumentError(f"visit_order must only contain indices in [0, {n}).")

    return _dbscan(D, eps, minpts, visit_order)


def _dbscan(D: np.ndarray, eps: float, minpts: int, visit_order: Sequence[int]) -> DbscanResult:
    n = D.shape[0]

    seeds: List[int] = []
    counts: List[int] = []
    assignments = np.zeros(n, dtype=np.int64)
    visited = np.zeros(n, dtype=bool)
    k = 0

    logger.info("Starting dense DBSCAN", num_points=n, eps=eps, minpts=minpts)

    for p in visit_order:
        if assignments[p] == 0 and not visited[p]:
            visited[p] = True
            nbs = region_query(D, p, eps)
            if len(nbs) >= minpts:
                k += 1
                cnt = _expand_cluster(D, k, p, nbs, eps, minpts, assignments, visited)
                seeds.append(int(p))
                counts.append(cnt)
                logger.debug("Expanded cluster", cluster_id=k, seed=int(p), size=cnt)

    logger.info(
        "Dense DBSCAN complete",
        num_clusters=k,
        num_noise_points=int(np.sum(assignments == 0)),
    )
    return DbscanResult(seeds=seeds, assignments=assignments.tolist(), counts=counts)


def _expand_cluster(
    D: np.ndarray,
    k: int,
    p: int,
    nbs: List[int],
    eps: float,
    minpts: int,
    assignments: np.ndarray,
    visited: np.ndarray,
) -> int:
    """
    Grow cluster k outward from seed p.

    Args:
        D: Distance matrix
        k: Id of the cluster being grown
        p: Seed point, already visited
        nbs: eps-neighbourhood of p, with len(nbs) >= minpts
        eps: Neighbourhood radius
        minpts: A point expands the cluster further only when it has more
            than minpts neighbours
        assignments: Cluster id per point, updated in place
        visited: Visited flag per point, updated in place

    Returns:
        Number of points assigned to cluster k
    """
    assignments[p] = k
    cnt = 1
    queue = deque(nbs)
    while queue:
        q = queue.popleft()
        if not visited[q]:
            visited[q] = True
            qnbs = region_query(D, q, eps)
            if len(qnbs) > minpts:
                # duplicates are fine, they are settled by the checks on dequeue
                queue.extend(x for x in qnbs if assignments[x] == 0)
        if assignments[q] == 0:
            assignments[q] = k
            cnt += 1
    return cnt
