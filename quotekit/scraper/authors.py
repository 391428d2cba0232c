"""Author information scraper.

Given a list of author names and an AuthorSiteConfig, fetch each author's
page and pick out the birth date, death date and a short title. The
resulting records use the authors file layout read by the filter stage.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

from quotekit.common.exceptions import ScrapeError
from quotekit.common.text import cleanup_tags_text
from quotekit.config import AuthorSiteConfig
from quotekit.data_types import AuthorRecord
from quotekit.scraper.request_manager import PageFetcher

logger = logging.getLogger(__name__)


class AuthorInfoScraper:
    """Scrape biographical details for a list of authors."""

    def __init__(self, config: AuthorSiteConfig, fetcher: PageFetcher) -> None:
        """Compile the ``OPEN(TEXT)`` patterns for each detail.

        Args:
            config: The author site configuration.
            fetcher: Page fetcher used for every author page.
        """
        self.config = config
        self.fetcher = fetcher
        self._birth = re.compile(
            f"{config.birth_day_open}({config.birth_day_text})"
        )
        self._death = re.compile(
            f"{config.death_day_open}({config.death_day_text})"
        )
        self._title = re.compile(f"{config.title_open}({config.title_text})")

    def parse(self, name: str, url: str, content: str) -> AuthorRecord:
        """Extract an author's details from page content.

        Every line is checked against every pattern; when a pattern
        matches more than once the last match wins.

        Args:
            name: Author name the page belongs to.
            url: Page URL, kept as the bio URL.
            content: Page text.

        Returns:
            AuthorRecord with whatever details were found.
        """
        found = {"birth_date": "", "death_date": "", "description": ""}
        patterns = {
            "birth_date": self._birth,
            "death_date": self._death,
            "description": self._title,
        }

        for line in content.splitlines():
            for field, pattern in patterns.items():
                match = pattern.search(line)
                if match:
                    found[field] = cleanup_tags_text(match.group(1))

        if not any(found.values()):
            logger.warning(f"No author details found for '{name}' at {url}")

        return AuthorRecord(name=name, bio_url=url, **found)

    def scrape(self, name: str) -> AuthorRecord:
        """Fetch and parse the page of one author.

        Raises:
            ScrapeError: If the page has no content.
        """
        url = self.config.author_url(name)
        content = self.fetcher.fetch(url)
        if not content:
            raise ScrapeError(url)
        return self.parse(name, url, content)

    def run(self, names: Iterable[str]) -> Iterator[AuthorRecord]:
        """Scrape each non-blank name in order."""
        for name in names:
            name = name.strip()
            if not name:
                continue
            logger.info(f"Scraping author info for {name}")
            yield self.scrape(name)
