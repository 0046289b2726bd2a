"""Main Typer CLI application for georeferencing tools."""

import logging

import typer

app = typer.Typer(
    help="Georeference scanned maps from ground control points and export GIS bundles",
    no_args_is_help=True,
)

gcp_app = typer.Typer(help="Ground Control Point commands")

app.add_typer(gcp_app, name="gcp")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def _register_commands() -> None:
    """
    Import command modules to register commands with their respective apps.

    Commands use decorators like @gcp_app.command() which register
    themselves when the module is imported.
    """
    from geosnap.cli import fit, gcp

    _ = fit
    _ = gcp


_register_commands()


if __name__ == "__main__":
    app()
