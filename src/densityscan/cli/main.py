"""Main CLI application."""
import typer

from densityscan.cli.cluster import points, matrix

app = typer.Typer(
    name="densityscan",
    help="Density-based spatial clustering (DBSCAN).",
    add_completion=False,
)

app.command()(points)
app.command()(matrix)


if __name__ == "__main__":
    app()
