#!/usr/bin/env python3
"""Main CLI entry point for SitePulse using Typer.

This module provides the command-line interface for estimating the most
popular pages of a site and writing the report as text, JSON or YAML.
"""

import asyncio
import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from .. import __version__
from ..audit.config.loader import (
    ConfigLoadError,
    default_config_path,
    load_popularity_config,
    save_default_config
)
from ..audit.engine import analyze_site_popularity
from ..audit.models.config import PopularityConfig
from ..audit.utils.url_normalizer import canonicalize_domain, InvalidDomainError
from .summary import OUTPUT_FORMATS, ReportFormatter, write_report


logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """CLI exit codes for scripting and CI/CD integration."""
    SUCCESS = 0           # At least one page analyzed
    NO_PAGES = 1          # Analysis ran but no page could be analyzed
    CONFIG_ERROR = 3      # Configuration or domain error
    RUNTIME_ERROR = 4     # Runtime error during execution


# Create the main Typer app
app = typer.Typer(
    name="sitepulse",
    help="SitePulse - site structure discovery and page popularity estimation",
    add_completion=False
)


@app.callback()
def main():
    """
    SitePulse - site structure discovery and page popularity estimation.

    Discovers pages from the sitemap and homepage navigation, analyzes a
    bounded set of them and estimates each page's share of site traffic.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"SitePulse CLI v{__version__}")


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for a CLI invocation."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )
    logging.getLogger("sitepulse").setLevel(level)


def build_config(
    config_file: Optional[Path],
    environment: Optional[str],
    max_pages: Optional[int],
    concurrency: Optional[int],
    timeout: Optional[float]
) -> PopularityConfig:
    """Resolve the effective configuration from file, environment and CLI flags.

    Raises:
        ConfigLoadError: If the file cannot be loaded or the result is invalid
    """
    if config_file is None and default_config_path().exists():
        config_file = default_config_path()

    if config_file is not None:
        base = load_popularity_config(str(config_file), environment)
    else:
        base = PopularityConfig()

    top_pages = None
    if max_pages is not None and max_pages < base.top_pages:
        # Keep the top list within the analysis budget
        top_pages = max_pages

    try:
        return PopularityConfig.from_overrides(
            base,
            max_analyzed_pages=max_pages,
            top_pages=top_pages,
            max_concurrency=concurrency,
            page_timeout=timeout,
            sitemap_timeout=timeout
        )
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid configuration: {e}")


@app.command()
def analyze(
    domain: Annotated[
        str,
        typer.Argument(help="Domain or site URL to analyze (e.g. example.com)")
    ],

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to popularity configuration YAML")
    ] = None,

    env: Annotated[
        Optional[str],
        typer.Option("--env", "-e", help="Configuration environment (development, staging, production)")
    ] = None,

    max_pages: Annotated[
        Optional[int],
        typer.Option("--max-pages", help="Maximum pages to analyze")
    ] = None,

    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", help="Number of concurrent page fetches")
    ] = None,

    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Fetch timeout in seconds")
    ] = None,

    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (text, json, yaml)")
    ] = "text",

    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Write the report to this file")
    ] = None,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output")
    ] = False,

    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Quiet mode (minimal output)")
    ] = False,
):
    """
    Estimate the most popular pages of a site.

    Examples:

        # Text report for a domain
        sitepulse analyze example.com

        # JSON report with a larger page budget
        sitepulse analyze https://www.example.com --max-pages 40 --format json --out report.json
    """
    configure_logging(verbose=verbose, quiet=quiet)

    if output_format.lower() not in OUTPUT_FORMATS:
        typer.echo(
            f"❌ Invalid output format '{output_format}'. Valid formats: {', '.join(OUTPUT_FORMATS)}",
            err=True
        )
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    if config_file is not None and not config_file.exists():
        typer.echo(f"❌ Configuration file not found: {config_file}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    try:
        canonicalize_domain(domain)
    except InvalidDomainError as e:
        typer.echo(f"❌ Invalid domain: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    try:
        config = build_config(config_file, env, max_pages, concurrency, timeout)
    except ConfigLoadError as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    logger.debug(f"Effective configuration: {config.model_dump()}")

    try:
        result = asyncio.run(analyze_site_popularity(domain, config=config))
    except KeyboardInterrupt:
        typer.echo("❌ Operation interrupted by user", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)
    except Exception as e:
        typer.echo(f"❌ Runtime error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)

    report = ReportFormatter(output_format, verbose=verbose).format_result(result)

    if out:
        write_report(report, out)
        if not quiet:
            typer.echo(f"✅ Report written to {out}")
    else:
        typer.echo(report)

    if result.analyzed_pages == 0:
        raise typer.Exit(code=ExitCode.NO_PAGES.value)


@app.command(name="init-config")
def init_config(
    output_path: Annotated[
        Path,
        typer.Argument(help="Where to write the default configuration YAML")
    ],

    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file")
    ] = False,
):
    """Write a default popularity configuration file."""
    if output_path.exists() and not force:
        typer.echo(f"❌ File already exists: {output_path} (use --force to overwrite)", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        save_default_config(str(output_path))
    except ConfigLoadError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    typer.echo(f"✅ Default configuration written to {output_path}")


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
