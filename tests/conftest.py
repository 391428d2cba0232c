"""Shared fixtures: the mock quote site and site configuration files."""

import asyncio
import logging
import socket
import threading
import time
from collections.abc import Generator
from contextlib import closing
from pathlib import Path

import pytest
from aiohttp import web
from click.testing import CliRunner

from tests.mock_server import create_app

QUOTE_SITE_CONFIG = """\
# Mock quote site
URL={server_url}/quotes/<PATTERN>?page=<PAGE>
URL_PATTERNS=humor, life
NUM_PAGES=2
DELIM=###
QUOTE_OPEN=<div class="quoteText">
QUOTE_CLOSE=<
AUTHOR_OPEN=<span class="authorOrTitle">
AUTHOR_CLOSE=<
SOURCE_OPEN=<span class="source">
SOURCE_CLOSE=<
TAGS_OPEN=<div class="tags">Tags:
TAGS_CLOSE=</div>
BLOCK_END=<div class="quoteFooter">
"""

AUTHOR_SITE_CONFIG = """\
URL={server_url}/authors/<NAME>
URL_SUBSTITUTE= :_
DELIM=###
BIRTH_DAY_OPEN=<span class="bday">Born: <time>
BIRTH_DAY_TEXT=[^<]+
DEATH_DAY_OPEN=<span class="dday">Died: <time>
DEATH_DAY_TEXT=[^<]+
TITLE_OPEN=<div class="title">
TITLE_TEXT=[^<]+
"""


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Run an aiohttp app in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server and wait until it accepts connections."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        self._started.wait(timeout=5.0)

    def _run_server(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(
                runner.cleanup(), self._loop
            )
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def quote_site() -> Generator[AioHttpTestServer, None, None]:
    """Start the mock quote site on a random port."""
    server = AioHttpTestServer(create_app(), find_free_port())
    server.start()
    # Give the socket a moment on slow CI machines
    time.sleep(0.05)
    yield server
    server.stop()


@pytest.fixture
def server_url(quote_site: AioHttpTestServer) -> str:
    """Base URL of the mock quote site, e.g. ``http://127.0.0.1:8080``."""
    return quote_site.url


@pytest.fixture
def quote_config_file(tmp_path: Path, server_url: str) -> Path:
    """A quote site config pointing at the mock site."""
    path = tmp_path / "scrape_quotes.mock"
    path.write_text(QUOTE_SITE_CONFIG.format(server_url=server_url))
    return path


@pytest.fixture
def author_config_file(tmp_path: Path, server_url: str) -> Path:
    """An author site config pointing at the mock site."""
    path = tmp_path / "scrape_authors.mock"
    path.write_text(AUTHOR_SITE_CONFIG.format(server_url=server_url))
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# =============================================================================
# Delimited input files
# =============================================================================

AUTHORS_TXT = """\
# name###birth###death###description###url
Albert Einstein###March 14, 1879###April 18, 1955###Physicist###http://example.com/einstein
Oscar Wilde###October 16, 1854###November 30, 1900###Playwright###http://example.com/wilde

Martin Luther King, Jr.###January 15, 1929###April 4, 1968###Minister###http://example.com/mlk
"""

QUOTES_TXT = """\
# quote###author###source###tags
Imagination is more important than knowledge.###Albert Einstein###Saturday Evening Post###imagination,knowledge
Two things are infinite.###Einstein######humor
Be yourself; everyone else is already taken.###Oscar Wilde######humor,life
I have a dream.###Martin Luther King Jr.###March on Washington###dream,Justice
So many books, so little time.###Frank Zappa######books
L’enfer, c’est les autres.###Jean-Paul Sartre###No Exit###
"""

EVENTS_TXT = """\
Albert Einstein###1879-03-14###Born in Ulm###physics
Albert Einstein###1921-11-09###Awarded the Nobel Prize###physics,nobel-prize
Frank Zappa###1940-12-21###Born in Baltimore###music
"""


@pytest.fixture
def authors_file(tmp_path: Path) -> Path:
    path = tmp_path / "authors.txt"
    path.write_text(AUTHORS_TXT, encoding="utf-8")
    return path


@pytest.fixture
def quotes_file(tmp_path: Path) -> Path:
    path = tmp_path / "quotes.txt"
    path.write_text(QUOTES_TXT, encoding="utf-8")
    return path


@pytest.fixture
def events_file(tmp_path: Path) -> Path:
    path = tmp_path / "events.txt"
    path.write_text(EVENTS_TXT, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """Drop handlers that CLI commands install on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
