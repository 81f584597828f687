"""Catalog inspection commands.

Commands:
    list      List packages in the manifest
    resolve   Show which package a manuscript file name resolves to
    cover     Show which standalone cover image a file name resolves to
"""

import asyncio

import typer

from precanned_cli._shared import build_importer

app = typer.Typer(help="Inspect the precanned package catalog")


@app.command(name="list")
def list_packages():
    """List all packages in manifest order.

    Examples:

        precanned catalog list
    """

    async def _list():
        importer = build_importer()
        return await importer.catalog.entries()

    try:
        entries = asyncio.run(_list())

        if not entries:
            typer.echo("No packages in catalog.")
            return

        typer.echo(f"Found {len(entries)} packages:\n")
        for entry in entries:
            aliases = ", ".join(entry.alias_filenames[:3])
            typer.echo(f"  {entry.key:20} {entry.title[:40]:40} [{aliases}]")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def resolve(file_name: str = typer.Argument(..., help="Submitted manuscript file name")):
    """Resolve a file name to a package (first match in manifest order).

    Examples:

        precanned catalog resolve "Beach Read - Final.pdf"
    """

    async def _resolve():
        importer = build_importer()
        return await importer.resolve_package_by_filename(file_name)

    try:
        entry = asyncio.run(_resolve())

        if entry is None:
            typer.echo(f"No package matches '{file_name}'.")
            return

        typer.echo(f"{entry.key}: {entry.title}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def cover(file_name: str = typer.Argument(..., help="Submitted manuscript file name")):
    """Resolve a file name to a standalone cover image (best score wins).

    Examples:

        precanned catalog cover "Wool.pdf"
    """

    async def _cover():
        importer = build_importer()
        return await importer.resolve_standalone_cover(file_name)

    try:
        asset = asyncio.run(_cover())

        if asset is None:
            typer.echo(f"No cover image matches '{file_name}'.")
            return

        typer.echo(f"Cover: {asset.source_path.name}")
        typer.echo(f"  public: {asset.public_url}")
        typer.echo(f"  api:    {asset.api_url}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
