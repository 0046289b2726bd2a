"""Fitting, extent and bundle CLI commands."""

import json
from pathlib import Path

import typer

from geosnap.bundle import write_bundle
from geosnap.cli.main import app
from geosnap.config import GeorefConfig, get_default_config
from geosnap.control_points import ControlPointSet
from geosnap.errors import GeoreferenceError, user_message
from geosnap.extent import compute_extent, reproject_extent
from geosnap.gcp_file import load_control_point_file
from geosnap.pipeline import georeference
from geosnap.raster import load_raster
from geosnap.transformation import GeoreferenceResult, TransformationType
from geosnap.world_file import format_world_file


def _load_config(config_file: Path | None) -> GeorefConfig:
    if config_file is None:
        return get_default_config()
    try:
        return GeorefConfig.from_yaml(str(config_file))
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _fail(e: Exception) -> None:
    typer.echo(f"Error: {user_message(e)}", err=True)
    typer.echo(f"  {e}", err=True)
    raise typer.Exit(1)


def _load_points(gcps_file: Path, width: int | None, height: int | None) -> ControlPointSet:
    try:
        return load_control_point_file(gcps_file, width, height)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except GeoreferenceError as e:
        _fail(e)


def _fit(
    point_set: ControlPointSet,
    config: GeorefConfig,
    transformation: str | None,
    crs: str | None,
) -> GeoreferenceResult:
    try:
        transformation_type = TransformationType.parse(transformation or config.transformation)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    try:
        return georeference(
            point_set,
            point_set.width,
            point_set.height,
            transformation_type=transformation_type,
            crs_code=crs or config.source_crs,
            projection_name=config.projection_name,
        )
    except ValueError as e:
        _fail(e)


@app.command("fit")
def fit_command(
    gcps_file: Path = typer.Option(..., help="Path to control points file (YAML or JSON)"),
    width: int | None = typer.Option(None, help="Raster width in pixels (overrides file)"),
    height: int | None = typer.Option(None, help="Raster height in pixels (overrides file)"),
    transformation: str | None = typer.Option(
        None, help="Transformation type: AFFINE or HELMERT (default from config)"
    ),
    crs: str | None = typer.Option(None, help="Reference-system code of the GCP coordinates"),
    world_file: Path | None = typer.Option(None, help="Write the world file to this path"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    config_file: Path | None = typer.Option(None, "--config", help="YAML configuration file"),
) -> None:
    """
    Fit a pixel to geographic transformation from control points.

    Example:
        geosnap fit --gcps-file gcps.yaml
        geosnap fit --gcps-file gcps.yaml --transformation HELMERT --world-file map.jgw
    """
    config = _load_config(config_file)
    point_set = _load_points(gcps_file, width, height)
    result = _fit(point_set, config, transformation, crs)

    if world_file is not None:
        world_file.write_text(format_world_file(result.params))
        typer.echo(f"World file written to {world_file}")

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    p = result.params
    typer.echo(f"{result.transformation_type.value} fit on {len(point_set)} GCPs ({result.crs_code})")
    typer.echo(f"  X = {p.A:.10g}*x + {p.B:.10g}*y + {p.C:.10g}")
    typer.echo(f"  Y = {p.D:.10g}*x + {p.E:.10g}*y + {p.F:.10g}")
    typer.echo(f"  RMS residual: lng={result.rms_lng:.3e}°, lat={result.rms_lat:.3e}°")


@app.command("extent")
def extent_command(
    gcps_file: Path = typer.Option(..., help="Path to control points file (YAML or JSON)"),
    width: int | None = typer.Option(None, help="Raster width in pixels (overrides file)"),
    height: int | None = typer.Option(None, help="Raster height in pixels (overrides file)"),
    transformation: str | None = typer.Option(None, help="Transformation type"),
    crs: str | None = typer.Option(None, help="Reference-system code of the GCP coordinates"),
    target_crs: str | None = typer.Option(
        None, help="Reference system to reproject into (default: display_crs from config)"
    ),
    config_file: Path | None = typer.Option(None, "--config", help="YAML configuration file"),
) -> None:
    """
    Print the raster extent in the source and display reference systems.

    Example:
        geosnap extent --gcps-file gcps.yaml --target-crs EPSG:3857
    """
    config = _load_config(config_file)
    point_set = _load_points(gcps_file, width, height)
    result = _fit(point_set, config, transformation, crs)

    source_extent = compute_extent(result.width, result.height, result.params)
    target = target_crs or config.display_crs
    try:
        display_extent = reproject_extent(source_extent, result.crs_code, target)
    except GeoreferenceError as e:
        _fail(e)

    typer.echo(f"{result.crs_code}: {' '.join(f'{v:.10g}' for v in source_extent.as_tuple())}")
    typer.echo(f"{target}: {' '.join(f'{v:.10g}' for v in display_extent.as_tuple())}")


@app.command("bundle")
def bundle_command(
    gcps_file: Path = typer.Option(..., help="Path to control points file (YAML or JSON)"),
    raster: Path = typer.Option(..., help="Raster image the control points refer to"),
    output: Path = typer.Option(Path("."), help="Output archive path or directory"),
    transformation: str | None = typer.Option(None, help="Transformation type"),
    crs: str | None = typer.Option(None, help="Reference-system code of the GCP coordinates"),
    config_file: Path | None = typer.Option(None, "--config", help="YAML configuration file"),
) -> None:
    """
    Fit a transformation and write the zipped GIS bundle.

    The bundle holds the raster, world file, .prj, control point list and
    boundary GeoJSON files.

    Example:
        geosnap bundle --gcps-file gcps.yaml --raster map.jpg --output out/
    """
    config = _load_config(config_file)
    try:
        image = load_raster(raster)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    point_set = _load_points(gcps_file, image.width, image.height)
    result = _fit(point_set, config, transformation, crs)

    try:
        path = write_bundle(output, result, image.data, raster_name=image.name)
    except (GeoreferenceError, ValueError) as e:
        _fail(e)

    typer.echo(f"GIS bundle written to {path}")
