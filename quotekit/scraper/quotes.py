"""Quote scraper: fetch every configured page and scan it for blocks."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from quotekit.common.exceptions import ScrapeError
from quotekit.config import QuoteSiteConfig
from quotekit.data_types import QuoteRecord
from quotekit.scraper.block_scanner import BlockMarkers, BlockScanner
from quotekit.scraper.request_manager import PageFetcher

logger = logging.getLogger(__name__)


class QuoteScraper:
    """Scrape quotation blocks from a site described by a QuoteSiteConfig.

    One BlockScanner is shared across all pages, so a quote repeated on
    several pages or tag listings is only emitted once.
    """

    def __init__(self, config: QuoteSiteConfig, fetcher: PageFetcher) -> None:
        self.config = config
        self.fetcher = fetcher
        self.scanner = BlockScanner(BlockMarkers.from_config(config))

    def scrape_page(self, url: str) -> Iterator[QuoteRecord]:
        """Fetch one page and yield its new records.

        Raises:
            ScrapeError: If the page has no content.
        """
        content = self.fetcher.fetch(url)
        if not content:
            raise ScrapeError(url)
        yield from self.scanner.scan(content)

    def run(self) -> Iterator[QuoteRecord]:
        """Yield records from every page URL the config expands to."""
        urls = self.config.page_urls()
        for index, url in enumerate(urls, start=1):
            logger.info(f"Processing page {index}/{len(urls)}: {url}")
            yield from self.scrape_page(url)
