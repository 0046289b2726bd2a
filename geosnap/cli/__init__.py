"""CLI module for georeferencing tools.

Provides the `geosnap` command-line interface.
"""

from geosnap.cli.main import app

__all__ = ["app"]
