"""quotekit CLI: scrape, join and load quotations.

Usage:
    quotekit scrape-quotes --config conf/quotes.site > quotes.txt
    quotekit scrape-authors --config conf/authors.site --authors-file names.txt > authors.txt
    quotekit parse-people --people-file people.txt > events.txt
    quotekit filter --quotes-file quotes.txt --authors-file authors.txt \\
        --events-file events.txt --delim '###' --max-size 120 > authors.json
    quotekit filter --authors-file authors.txt --delim '###' --print-sigs ','
    quotekit load --db-file quotes.sqlite3 < authors.json
    quotekit make-update --db-dir build --dest-dir release

Records and JSON go to stdout; logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

import click

from quotekit.common.exceptions import QuotekitError, TransientException

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def configure_logging(debug: bool, verbose: bool) -> None:
    """Send log records to stderr at a level chosen by the CLI flags."""
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def logging_options(func: F) -> F:
    """Add the ``--debug`` and ``-v/--verbose`` flags to a command."""
    func = click.option(
        "-v", "--verbose", is_flag=True, help="Log progress (INFO)."
    )(func)
    func = click.option(
        "--debug", is_flag=True, help="Log diagnostics (DEBUG)."
    )(func)
    return func


def fetch_options(func: F) -> F:
    """Add the HTTP client options shared by the scrape commands."""
    func = click.option(
        "--timeout",
        type=float,
        default=30.0,
        show_default=True,
        help="Request timeout in seconds.",
    )(func)
    func = click.option(
        "--insecure",
        is_flag=True,
        help="Skip TLS certificate verification.",
    )(func)
    return func


def require_delimiter(
    ctx: click.Context, param: click.Parameter, value: str
) -> str:
    """Reject an empty field delimiter."""
    if value == "":
        raise click.BadParameter("must not be empty")
    return value


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn pipeline errors into clean CLI errors (exit code 1)."""
    try:
        yield
    except (QuotekitError, TransientException) as e:
        raise click.ClickException(str(e)) from e


def format_output(data: dict[str, Any], format_type: str = "table") -> None:
    """Print a flat mapping as ``key: value`` lines or as JSON.

    Args:
        data: Mapping to print.
        format_type: Output format ('table', 'json').
    """
    if format_type == "json":
        click.echo(json.dumps(data, indent=2))
    elif format_type == "table":
        for key, value in data.items():
            click.echo(f"{key}: {value}")
    else:
        raise ValueError(f"Unknown format: {format_type}")


@click.group()
@click.version_option(package_name="quotekit")
def cli() -> None:
    """quotekit: scrape, join and load quotations."""


# ------------------------------------------------------------------
# Scrapers
# ------------------------------------------------------------------


@cli.command("scrape-quotes")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Site configuration file (KEY=value).",
)
@fetch_options
@logging_options
def scrape_quotes(
    config_path: str,
    insecure: bool,
    timeout: float,
    debug: bool,
    verbose: bool,
) -> None:
    """Scrape quotation blocks and print one delimited record per quote.

    \b
    Example:
        quotekit scrape-quotes --config conf/quotes.goodreads -v > quotes.txt
    """
    from quotekit.config import QuoteSiteConfig
    from quotekit.scraper import PageFetcher, QuoteScraper

    configure_logging(debug, verbose)

    with reporting_errors():
        config = QuoteSiteConfig.from_file(config_path)
        logger.debug(json.dumps(config.as_dict(), indent=2))

        with PageFetcher(timeout=timeout, verify=not insecure) as fetcher:
            scraper = QuoteScraper(config, fetcher)
            for record in scraper.run():
                click.echo(record.to_line(config.delim))


@cli.command("scrape-authors")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Author site configuration file (KEY=value).",
)
@click.option(
    "--authors-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="File with one author name per line.",
)
@fetch_options
@logging_options
def scrape_authors(
    config_path: str,
    authors_file: str,
    insecure: bool,
    timeout: float,
    debug: bool,
    verbose: bool,
) -> None:
    """Scrape birth date, death date and title for each listed author.

    \b
    Example:
        quotekit scrape-authors --config conf/authors.wiki \\
            --authors-file names.txt > authors.txt
    """
    from quotekit.config import AuthorSiteConfig
    from quotekit.scraper import AuthorInfoScraper, PageFetcher

    configure_logging(debug, verbose)

    with reporting_errors():
        config = AuthorSiteConfig.from_file(config_path)
        logger.debug(json.dumps(config.as_dict(), indent=2))
        names = Path(authors_file).read_text(encoding="utf-8").splitlines()

        with PageFetcher(timeout=timeout, verify=not insecure) as fetcher:
            scraper = AuthorInfoScraper(config, fetcher)
            for record in scraper.run(names):
                click.echo(record.to_line(config.delim))


# ------------------------------------------------------------------
# Text stages
# ------------------------------------------------------------------


@cli.command("parse-people")
@click.option(
    "--people-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="People file with Name:/Tags:/<date>: <event> lines.",
)
@click.option(
    "--delim",
    default="###",
    show_default=True,
    callback=require_delimiter,
    help="Output field delimiter.",
)
@logging_options
def parse_people(
    people_file: str, delim: str, debug: bool, verbose: bool
) -> None:
    """Print the events of a people file sorted by month and day."""
    from quotekit.people import parse_people_file

    configure_logging(debug, verbose)

    with reporting_errors():
        for event in parse_people_file(people_file):
            click.echo(event.to_line(delim))


@cli.command("filter")
@click.option(
    "--authors-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Delimited authors file (name, birth, death, description, url).",
)
@click.option(
    "--quotes-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Delimited quotes file (quote, author, source, tags).",
)
@click.option(
    "--events-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Delimited events file (author, date, event, tags).",
)
@click.option(
    "--delim",
    required=True,
    callback=require_delimiter,
    help="Input field delimiter.",
)
@click.option(
    "--max-size",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of characters in a quote.",
)
@click.option(
    "--ascii-only",
    is_flag=True,
    help="Drop quotes with characters outside printable ASCII.",
)
@click.option(
    "--print-sigs",
    "sig_separator",
    default=None,
    help="Only print the author signatures joined by this separator.",
)
@click.option(
    "--indent", type=int, default=None, help="Indent the JSON output."
)
@logging_options
def filter_quotes(
    authors_file: str,
    quotes_file: str | None,
    events_file: str | None,
    delim: str,
    max_size: int | None,
    ascii_only: bool,
    sig_separator: str | None,
    indent: int | None,
    debug: bool,
    verbose: bool,
) -> None:
    """Join quotes and events onto authors and print them as JSON.

    \b
    Examples:
        quotekit filter --quotes-file quotes.txt --authors-file authors.txt \\
            --events-file events.txt --delim '###' --max-size 100 > authors.json
        quotekit filter --authors-file authors.txt --delim '###' --print-sigs ','
    """
    from quotekit.data_types import EventRecord, QuoteRecord
    from quotekit.filter import (
        attach_events,
        attach_quotes,
        author_sigs,
        load_authors,
        read_delimited,
        to_json,
    )

    configure_logging(debug, verbose)

    with reporting_errors():
        authors = load_authors(authors_file, delim)
        logger.info(f"Loaded {len(authors)} authors")

        if sig_separator is not None:
            click.echo(author_sigs(authors, sig_separator))
            return

        if quotes_file is None:
            raise click.UsageError(
                "Option '--quotes-file' must be set unless --print-sigs is used."
            )

        if events_file is not None:
            count = attach_events(
                authors, read_delimited(events_file, EventRecord, delim)
            )
            logger.info(f"Attached {count} events")

        count = attach_quotes(
            authors,
            read_delimited(quotes_file, QuoteRecord, delim),
            max_size=max_size,
            ascii_only=ascii_only,
        )
        logger.info(f"Attached {count} quotes")

        click.echo(to_json(authors, indent=indent))


# ------------------------------------------------------------------
# Database
# ------------------------------------------------------------------


@cli.command("load")
@click.option(
    "--db-file",
    required=True,
    type=click.Path(dir_okay=False),
    help="SQLite database file.",
)
@click.option(
    "--input",
    "input_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
    show_default=True,
    help="Filter JSON output (default: stdin).",
)
@click.option(
    "--create",
    is_flag=True,
    help="Create the database if it doesn't exist.",
)
@click.option(
    "--format",
    "format_type",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format for the load statistics.",
)
@logging_options
def load(
    db_file: str,
    input_file: Any,
    create: bool,
    format_type: str,
    debug: bool,
    verbose: bool,
) -> None:
    """Load filter output into the quotes database.

    \b
    Example:
        quotekit load --db-file myquotes.sqlite3 < authors.json
    """
    from quotekit.loader import load_file

    configure_logging(debug, verbose)

    db_path = Path(db_file)
    if not create and not db_path.is_file():
        raise click.ClickException(
            f"File '{db_path}' not found or is not readable "
            "(use --create to start a new database)."
        )

    with reporting_errors():
        stats = asyncio.run(load_file(db_path, input_file.read()))

    format_output(stats.as_dict(), format_type)


@cli.command("make-update")
@click.option(
    "--db-dir",
    required=True,
    type=click.Path(),
    help="Directory holding the database file.",
)
@click.option(
    "--dest-dir",
    type=click.Path(),
    default=None,
    help="Release directory (default: current directory).",
)
@click.option(
    "--version-file",
    default="version.txt",
    show_default=True,
    help="Version file name inside the release directory.",
)
@logging_options
def make_update(
    db_dir: str,
    dest_dir: str | None,
    version_file: str,
    debug: bool,
    verbose: bool,
) -> None:
    """Copy the database into a release directory and bump its version."""
    from quotekit.update import make_update as _make_update

    configure_logging(debug, verbose)

    with reporting_errors():
        result = _make_update(db_dir, dest_dir, version_file)

    format_output(
        {
            "file": str(result.db_file),
            "version": result.version.to_line(),
            "md5": result.md5,
        }
    )


def main() -> None:
    """Entry point for the ``quotekit`` console script."""
    cli()
