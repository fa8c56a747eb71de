"""
Pydantic models for clustering results.
Defines the contract for the two DBSCAN output shapes.
"""
from typing import List
from pydantic import BaseModel, Field, ConfigDict, model_validator


class DbscanResult(BaseModel):
    """
    Result of dense-matrix DBSCAN.

    Cluster ids are 1-based; an assignment of 0 marks a noise point.
    ``seeds`` and ``counts`` are parallel: ``seeds[j]`` started cluster
    ``j + 1`` and ``counts[j]`` is its size.
    """

    seeds: List[int] = Field(..., description="Starting point of each cluster, size (k,)")
    assignments: List[int] = Field(..., description="Cluster id of every point, size (n,)")
    counts: List[int] = Field(..., description="Number of points in each cluster, size (k,)")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_consistency(self) -> "DbscanResult":
        """Ensure seeds, counts and assignments describe the same clusters."""
        k = len(self.seeds)
        if len(self.counts) != k:
            raise ValueError(
                f"seeds ({k}) and counts ({len(self.counts)}) must have the same length"
            )
        if any(a < 0 or a > k for a in self.assignments):
            raise ValueError(f"assignments must lie in [0, {k}]")
        assigned = sum(1 for a in self.assignments if a != 0)
        if sum(self.counts) != assigned:
            raise ValueError(
                f"counts sum to {sum(self.counts)} but {assigned} points are assigned"
            )
        return self

    @property
    def num_clusters(self) -> int:
        return len(self.seeds)

    @property
    def num_noise_points(self) -> int:
        return sum(1 for a in self.assignments if a == 0)


class Cluster(BaseModel):
    """
    A cluster accepted by indexed DBSCAN.

    Core points had more than ``min_neighbors`` neighbours when expanded;
    boundary points are members that never qualified as core.
    """

    size: int = Field(..., ge=0, description="Total member count, core + boundary")
    core_indices: List[int] = Field(default_factory=list, description="Core point indices")
    boundary_indices: List[int] = Field(default_factory=list, description="Boundary point indices")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_membership(self) -> "Cluster":
        """Ensure core and boundary members are disjoint and add up to size."""
        if self.size != len(self.core_indices) + len(self.boundary_indices):
            raise ValueError(
                f"size {self.size} does not match {len(self.core_indices)} core + "
                f"{len(self.boundary_indices)} boundary points"
            )
        if set(self.core_indices) & set(self.boundary_indices):
            raise ValueError("core_indices and boundary_indices must be disjoint")
        return self

    @property
    def indices(self) -> List[int]:
        """All member indices in ascending order."""
        return sorted(self.core_indices + self.boundary_indices)
