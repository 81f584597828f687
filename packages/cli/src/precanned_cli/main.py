"""Precanned CLI - Main entry point.

Provides the ``precanned`` command-line interface.

Usage:
    precanned catalog list
    precanned catalog resolve "Beach Read - Final.pdf"
    precanned catalog cover "Wool.pdf"
    precanned import run --book-id b1 --version-id v1 --file-name "Wool.pdf"
"""

import typer

from precanned_cli.commands.catalog import app as catalog_app
from precanned_cli.commands.imports import app as imports_app

app = typer.Typer(
    name="precanned",
    help="Match manuscripts to precanned companion packages and import their content.",
    add_completion=False,
)

app.add_typer(catalog_app, name="catalog")
app.add_typer(imports_app, name="import")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
