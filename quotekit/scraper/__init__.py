"""Scrapers for quote and author pages."""

from quotekit.scraper.authors import AuthorInfoScraper
from quotekit.scraper.block_scanner import BlockMarkers, BlockScanner
from quotekit.scraper.quotes import QuoteScraper
from quotekit.scraper.request_manager import PageFetcher

__all__ = [
    "AuthorInfoScraper",
    "BlockMarkers",
    "BlockScanner",
    "PageFetcher",
    "QuoteScraper",
]
