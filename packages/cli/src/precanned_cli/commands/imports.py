"""Import commands.

Commands:
    run   Import a package's content for a book
"""

import asyncio
from typing import Optional

import typer

from precanned_cli._shared import build_importer
from precanned_contracts import ImportFeatureFlags
from precanned_storage import DatabaseConfig, close_connection_pool, get_connection_pool

app = typer.Typer(help="Import precanned content into a book")


@app.command()
def run(
    book_id: str = typer.Option(..., "--book-id", "-b", help="Owning book ID"),
    version_id: Optional[str] = typer.Option(
        None, "--version-id", "-v", help="Book version the reports attach to"
    ),
    file_name: Optional[str] = typer.Option(
        None, "--file-name", "-f", help="Submitted manuscript file name"
    ),
    package_key: Optional[str] = typer.Option(
        None, "--package-key", "-k", help="Explicit catalog key"
    ),
    reports: bool = typer.Option(True, "--reports/--no-reports"),
    marketing: bool = typer.Option(True, "--marketing/--no-marketing"),
    covers: bool = typer.Option(True, "--covers/--no-covers"),
    landing_page: bool = typer.Option(True, "--landing-page/--no-landing-page"),
):
    """Import (or re-import) precanned content for a book.

    Re-running replaces rows from the same package instead of adding more.

    Examples:

        precanned import run --book-id b1 --version-id v1 --file-name "Wool.pdf"

        precanned import run -b b1 -k beach-read --no-landing-page
    """
    if not file_name and not package_key:
        typer.echo("Error: provide --file-name or --package-key", err=True)
        raise typer.Exit(1)

    features = ImportFeatureFlags(
        reports=reports,
        marketing=marketing,
        covers=covers,
        landing_page=landing_page,
    )

    async def _import():
        importer = build_importer()
        await get_connection_pool(DatabaseConfig())
        try:
            return await importer.import_for_book(
                book_id,
                book_version_id=version_id,
                file_name=file_name,
                package_key=package_key,
                features=features,
            )
        finally:
            await close_connection_pool()

    try:
        result = asyncio.run(_import())

        if result is None:
            typer.echo("No precanned package matched; nothing imported.")
            return

        typer.echo(f"Imported package: {result.package_key}")
        typer.echo(f"  reports:          {result.reports_linked}")
        typer.echo(f"  marketing assets: {result.marketing_assets_linked}")
        typer.echo(f"  covers:           {result.covers_linked}")
        typer.echo(f"  landing page:     {'yes' if result.landing_page_linked else 'no'}")
        if result.primary_cover_image_url:
            typer.echo(f"  primary cover:    {result.primary_cover_image_url}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
