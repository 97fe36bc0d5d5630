"""Command-line interface for Mealsync."""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from mealsync.grocery import (
    DOWNLOAD_FILENAME,
    GROCERY_CATEGORIES,
    categorize,
    format_categorized,
    format_download,
    format_plain,
    non_empty_buckets,
    parse_ingredients,
)

app = typer.Typer(help="Mealsync household meal-planning commands.")


class OutputFormat(str, Enum):
    plain = "plain"
    categorized = "categorized"
    download = "download"
    json = "json"


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


@app.command()
def parse(
    source: str = typer.Argument(..., help="Ingredient text file, or '-' for stdin."),
    output_format: OutputFormat = typer.Option(
        OutputFormat.plain,
        "--format",
        "-f",
        help="Output style.",
        case_sensitive=False,
    ),
    save: Optional[Path] = typer.Option(
        None,
        "--save",
        help=f"Write the download format into this directory as {DOWNLOAD_FILENAME}.",
    ),
) -> None:
    """
    Consolidate free-text ingredient lines into a deduplicated grocery list.
    """
    items = parse_ingredients(_read_source(source))

    if output_format is OutputFormat.json:
        payload = {
            "items": [item.model_dump(mode="json", exclude_none=True) for item in items],
            "categories": [
                {
                    "name": bucket.category.name,
                    "items": [item.id for item in bucket.items],
                }
                for bucket in non_empty_buckets(categorize(items))
            ],
        }
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    elif output_format is OutputFormat.categorized:
        typer.echo(format_categorized(categorize(items)))
    elif output_format is OutputFormat.download:
        typer.echo(format_download(items))
    else:
        typer.echo(format_plain(items))

    if save is not None:
        save.mkdir(parents=True, exist_ok=True)
        target = save / DOWNLOAD_FILENAME
        target.write_text(format_download(items), encoding="utf-8")
        typer.secho(f"Saved {len(items)} item(s) to {target}", fg=typer.colors.GREEN, err=True)


@app.command()
def categories() -> None:
    """List grocery categories in matching order."""

    for category in GROCERY_CATEGORIES:
        typer.echo(f"{category.icon} {category.name}: {', '.join(category.keywords)}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Run the HTTP API server."""

    from mealsync.server.run import serve as run_server

    run_server(host, port, reload=reload)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the `mealsync` console script."""
    app(prog_name="mealsync", args=argv)


if __name__ == "__main__":
    main()
