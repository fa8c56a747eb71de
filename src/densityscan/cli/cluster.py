"""Cluster commands - Run DBSCAN on coordinates or a distance matrix."""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime

import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from densityscan.config import settings
from densityscan.clustering import dbscan_matrix, dbscan_points, labels_from_clusters
from densityscan.core.exceptions import DataLoadError, InvalidArgumentError
from densityscan.utils.logger import logger

console = Console()


def load_array(file_path: Path) -> np.ndarray:
    """
    Load a 2D array from .npy or delimited text (comma for .csv, else whitespace).

    Raises:
        DataLoadError: If the file is missing or cannot be parsed
    """
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")
    try:
        if file_path.suffix == ".npy":
            data = np.load(file_path)
        else:
            delimiter = "," if file_path.suffix == ".csv" else None
            data = np.loadtxt(file_path, delimiter=delimiter, ndmin=2)
    except (OSError, ValueError) as e:
        raise DataLoadError(f"Failed to load {file_path}: {e}")
    return np.asarray(data, dtype=np.float64)


def _default_output(input_file: Path, kind: str) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return settings.RESULTS_DIR / f"{input_file.stem}_{kind}_{timestamp}.json"


def _write_output(output: Path, output_data: Dict[str, Any]) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    console.print(f"\nSaving clusters to: {output}")
    with open(output, 'w') as f:
        json.dump(output_data, f, indent=2, default=str)


def _summary_table(rows: List[tuple]) -> Table:
    table = Table(title="Clustering Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for name, value in rows:
        table.add_row(name, str(value))
    return table


def _load_or_exit(file_path: Path) -> np.ndarray:
    try:
        return load_array(file_path)
    except DataLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def points(
    points_file: Path = typer.Argument(
        ...,
        help="Points file (.npy, .csv or whitespace separated), one point per row",
    ),
    radius: float = typer.Option(
        ...,
        "--radius", "-r",
        help="Neighbourhood radius",
    ),
    min_neighbors: int = typer.Option(
        ...,
        "--min-neighbors", "-m",
        help="A point is core when it has more neighbours than this",
    ),
    min_cluster_size: int = typer.Option(
        1,
        "--min-cluster-size",
        help="Clusters with fewer points are discarded as noise",
    ),
    index: Optional[str] = typer.Option(
        None,
        "--index",
        help="Spatial index: kdtree or balltree (default: from settings)",
    ),
    leaf_size: Optional[int] = typer.Option(
        None,
        "--leaf-size",
        help="Spatial index leaf size (default: from settings)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output JSON file (default: auto-generated)",
    ),
) -> Path:
    """Run indexed DBSCAN on point coordinates."""
    console.print("[bold blue]densityscan[/bold blue] - Indexed DBSCAN")
    console.print()

    data = _load_or_exit(points_file)
    console.print(f"[green]Loaded {data.shape[0]} points in {data.shape[1]} dimensions[/green]")

    logger.info(
        "Starting indexed clustering",
        points=str(points_file),
        radius=radius,
        min_neighbors=min_neighbors,
        min_cluster_size=min_cluster_size,
    )

    try:
        clusters = dbscan_points(
            data.T,
            radius,
            min_neighbors,
            min_cluster_size,
            leaf_size=leaf_size,
            spatial_index=index,
        )
    except InvalidArgumentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    labels = labels_from_clusters(clusters, data.shape[0])
    num_noise = int(np.sum(labels == 0))

    console.print()
    console.print(_summary_table([
        ("Total clusters", len(clusters)),
        ("Core points", sum(len(c.core_indices) for c in clusters)),
        ("Boundary points", sum(len(c.boundary_indices) for c in clusters)),
        ("Noise points", num_noise),
        ("Largest cluster", max((c.size for c in clusters), default=0)),
    ]))

    if output is None:
        output = _default_output(points_file, "clusters")

    _write_output(output, {
        'total_clusters': len(clusters),
        'total_points': int(data.shape[0]),
        'noise_points': num_noise,
        'clusters': [c.model_dump(mode='json') for c in clusters],
        'labels': labels.tolist(),
        'source_file': str(points_file),
        'created_at': datetime.now().isoformat(),
    })

    console.print("[green]Clustering complete![/green]")
    logger.info("Clustering complete", output=str(output), num_clusters=len(clusters))
    return output


def matrix(
    matrix_file: Path = typer.Argument(
        ...,
        help="Distance matrix file (.npy, .csv or whitespace separated)",
    ),
    eps: float = typer.Option(
        ...,
        "--eps", "-e",
        help="Neighbourhood radius (exclusive)",
    ),
    minpts: int = typer.Option(
        ...,
        "--minpts", "-m",
        help="Minimum neighbourhood size of a seed point",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output JSON file (default: auto-generated)",
    ),
) -> Path:
    """Run DBSCAN on a precomputed distance matrix."""
    console.print("[bold blue]densityscan[/bold blue] - Dense-matrix DBSCAN")
    console.print()

    D = _load_or_exit(matrix_file)
    console.print(f"[green]Loaded {D.shape[0]} x {D.shape[1]} distance matrix[/green]")

    logger.info("Starting dense clustering", matrix=str(matrix_file), eps=eps, minpts=minpts)

    try:
        result = dbscan_matrix(D, eps, minpts)
    except InvalidArgumentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print()
    console.print(_summary_table([
        ("Total clusters", result.num_clusters),
        ("Noise points", result.num_noise_points),
        ("Largest cluster", max(result.counts, default=0)),
    ]))

    if output is None:
        output = _default_output(matrix_file, "dbscan")

    _write_output(output, {
        'total_clusters': result.num_clusters,
        'total_points': len(result.assignments),
        'noise_points': result.num_noise_points,
        **result.model_dump(mode='json'),
        'source_file': str(matrix_file),
        'created_at': datetime.now().isoformat(),
    })

    console.print("[green]Clustering complete![/green]")
    logger.info("Clustering complete", output=str(output), num_clusters=result.num_clusters)
    return output
