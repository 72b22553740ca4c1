"""hnscrape CLI: scrape Hacker News through a local or remote browser.

Usage:
    hnscrape scrape                                  # Attach to http://localhost:9222
    hnscrape scrape --local --no-headless            # Launch a visible local browser
    hnscrape scrape --browser-url http://browser:9222 --limit 10
    hnscrape scrape --ws-endpoint ws://browser:9222/devtools/browser/<id>
    hnscrape endpoint http://browser:9222            # Print the rewritten CDP address
    hnscrape title https://example.com               # Print a page title
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from hnscrape.common.exceptions import (
    BrowserConnectionException,
    ExtractionException,
    SessionReleaseException,
)
from hnscrape.connection.negotiator import BrowserNegotiator
from hnscrape.data_types import (
    DEFAULT_MANAGEMENT_URL,
    ManagementEndpoint,
    ScrapeOptions,
)
from hnscrape.scraper import get_title, scrape

_LIBRARY_ERRORS = (
    BrowserConnectionException,
    ExtractionException,
    SessionReleaseException,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(package_name="hnscrape")
def cli() -> None:
    """hnscrape: Hacker News scraper over local or remote browsers."""


@cli.command("scrape")
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=30,
    show_default=True,
    help="Maximum number of articles.",
)
@click.option(
    "--headless/--no-headless",
    default=True,
    show_default=True,
    help="Run the browser without a window (local launch only).",
)
@click.option(
    "--slow-mo",
    "slow_mo",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Delay in milliseconds between browser actions.",
)
@click.option(
    "--ws-endpoint",
    envvar="HNSCRAPE_WS_ENDPOINT",
    default=None,
    help="CDP WebSocket address to attach to directly.",
)
@click.option(
    "--browser-url",
    envvar="HNSCRAPE_BROWSER_URL",
    default=DEFAULT_MANAGEMENT_URL,
    show_default=True,
    help="Browser management endpoint to discover the CDP address from.",
)
@click.option(
    "--local",
    is_flag=True,
    help="Launch a local browser instead of attaching to --browser-url.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, allow_dash=True),
    default="output/articles.json",
    show_default=True,
    help="Where to write the JSON result ('-' for stdout).",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def scrape_command(
    limit: int,
    headless: bool,
    slow_mo: int,
    ws_endpoint: str | None,
    browser_url: str,
    local: bool,
    output: str,
    verbose: bool,
) -> None:
    """Scrape the Hacker News front page and write the articles as JSON."""
    _configure_logging(verbose)

    try:
        options = ScrapeOptions(
            limit=limit,
            headless=headless,
            slow_motion_millis=slow_mo,
            control_channel_address=ws_endpoint,
            management_base_url=browser_url,
            launch_local=local,
        )
        options.connection_target()
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    click.echo("Scraping Hacker News...", err=True)
    try:
        result = asyncio.run(scrape(options))
    except _LIBRARY_ERRORS as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Fetched {result.article_count} articles", err=True)

    document = result.to_json()
    if output == "-":
        click.echo(document)
        return

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document, encoding="utf-8")
    click.echo(f"Results saved to {output_path}", err=True)

    if result.articles:
        click.echo("\nSample article:", err=True)
        click.echo(
            result.articles[0].model_dump_json(by_alias=True, indent=2),
            err=True,
        )


@cli.command()
@click.argument("browser_url")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def endpoint(browser_url: str, verbose: bool) -> None:
    """Print the CDP address discovered from BROWSER_URL.

    The address is rewritten to use BROWSER_URL's host and port.

    \b
    Examples:
        hnscrape endpoint http://browser:9222
    """
    _configure_logging(verbose)
    try:
        target = ManagementEndpoint(browser_url)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    try:
        address = asyncio.run(BrowserNegotiator().discover_endpoint(target))
    except BrowserConnectionException as e:
        raise click.ClickException(str(e)) from e
    click.echo(address)


@cli.command()
@click.argument("url")
@click.option(
    "--headless/--no-headless",
    default=True,
    show_default=True,
    help="Run the browser without a window.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def title(url: str, headless: bool, verbose: bool) -> None:
    """Print the title of the page at URL using a local browser."""
    _configure_logging(verbose)
    try:
        page_title = asyncio.run(get_title(url, headless=headless))
    except _LIBRARY_ERRORS as e:
        raise click.ClickException(str(e)) from e
    click.echo(page_title)


def main() -> None:
    """Entry point for the ``hnscrape`` console script."""
    cli()
