"""GCP (Ground Control Point) CLI commands."""

from dataclasses import replace
from pathlib import Path

import typer

from geosnap.cli.main import gcp_app
from geosnap.config import GeorefConfig, get_default_config
from geosnap.control_points import ControlPointSet
from geosnap.errors import DETECTION_FAILURE_MESSAGE, GeoreferenceError
from geosnap.gcp_file import load_control_point_file, save_control_point_file
from geosnap.raster import load_raster


@gcp_app.command("validate")
def validate_command(
    gcps_file: Path = typer.Option(..., help="Path to control points file (YAML or JSON)"),
    width: int | None = typer.Option(None, help="Raster width in pixels (overrides file)"),
    height: int | None = typer.Option(None, help="Raster height in pixels (overrides file)"),
) -> None:
    """
    Validate a control points file against its raster dimensions.

    Example:
        geosnap gcp validate --gcps-file gcps.yaml --width 2000 --height 1500
    """
    try:
        point_set = load_control_point_file(gcps_file, width, height)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except GeoreferenceError as e:
        typer.echo(f"Invalid: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(
        f"OK: {len(point_set)} control points valid for a "
        f"{point_set.width}x{point_set.height} raster"
    )
    if len(point_set) < 3:
        typer.echo("Warning: at least 3 non-collinear points are needed for a fit", err=True)


@gcp_app.command("detect")
def detect_command(
    raster: Path = typer.Option(..., help="Raster image to detect grid intersections on"),
    output: Path = typer.Option(..., help="Output control points file (.yaml or .json)"),
    endpoint: str | None = typer.Option(None, help="Detection oracle URL (overrides config)"),
    timeout: float | None = typer.Option(None, help="Request timeout in seconds"),
    config_file: Path | None = typer.Option(None, "--config", help="YAML configuration file"),
) -> None:
    """
    Detect control points on a raster with the detection oracle.

    The oracle is called once; rerun the command to retry.

    Example:
        geosnap gcp detect --raster map.jpg --output gcps.yaml --endpoint https://...
    """
    try:
        config = GeorefConfig.from_yaml(str(config_file)) if config_file else get_default_config()
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    oracle_config = config.oracle
    if endpoint is not None:
        oracle_config = replace(oracle_config, endpoint=endpoint)
    if timeout is not None:
        oracle_config = replace(oracle_config, timeout_s=timeout)

    try:
        oracle = oracle_config.create_oracle()
        image = load_raster(raster)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Detecting control points on {image.name} ({image.width}x{image.height})...")
    try:
        detection = oracle.detect(image.data, image.mime_type)
        point_set = ControlPointSet.create(detection.control_points, image.width, image.height)
    except GeoreferenceError as e:
        typer.echo(f"Error: {DETECTION_FAILURE_MESSAGE}", err=True)
        typer.echo(f"  {e}", err=True)
        raise typer.Exit(1)

    save_control_point_file(output, point_set)
    typer.echo(
        f"Saved {len(point_set)} control points ({detection.projection}, "
        f"{detection.crs_code}) to {output}"
    )
