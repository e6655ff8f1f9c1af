"""Command-line interface for tinytemple.

Renders templates from a TOML configuration and Markdown sources into a
directory of HTML pages.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .build import (
    DEFAULT_CONFIG,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SOURCE_DIR,
    DEFAULT_STATIC_DIR,
    BuildError,
    build_site,
)


@click.command()
@click.version_option(version=__version__, prog_name="tinytemple")
@click.option(
    "--sourcedir",
    type=click.Path(path_type=Path),
    default=DEFAULT_SOURCE_DIR,
    show_default=True,
    help="Source directory for template files and content files.",
)
@click.option(
    "--staticdir",
    type=click.Path(path_type=Path),
    default=DEFAULT_STATIC_DIR,
    show_default=True,
    help="Directory of files copied verbatim into the output.",
)
@click.option(
    "--outdir",
    type=click.Path(path_type=Path),
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory for rendered HTML.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG,
    show_default=True,
    help="TOML configuration file.",
)
@click.option("--clean", is_flag=True, help="Empty the output directory first.")
@click.option("-v", "--verbose", is_flag=True, help="Log every file processed.")
def cli(
    sourcedir: Path,
    staticdir: Path,
    outdir: Path,
    config_path: Path,
    clean: bool,
    verbose: bool,
):
    """Render templates from TOML and Markdown source."""
    _configure_logging(verbose)
    try:
        result = build_site(
            source_dir=sourcedir,
            static_dir=staticdir,
            output_dir=outdir,
            config_path=config_path,
            clean=clean,
        )
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Stage: {exc.step}", fg="yellow"), err=True)
        if exc.source_path is not None:
            click.echo(
                click.style(f"  File: {exc.source_path}", fg="yellow"), err=True
            )
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(
        f"Built {len(result.outputs)} pages into {result.output_dir} "
        f"(copied {len(result.copied)}, skipped {len(result.skipped)}) "
        f"in {result.elapsed:.2f}s"
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Entry point for the CLI application."""
    cli()
