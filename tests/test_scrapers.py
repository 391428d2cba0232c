"""Tests for the quote and author scrapers against the mock site."""

import pytest

from quotekit.common.exceptions import (
    HTTPResponseAssumptionException,
    ScrapeError,
)
from quotekit.config import AuthorSiteConfig, QuoteSiteConfig
from quotekit.scraper import AuthorInfoScraper, PageFetcher, QuoteScraper
from tests.mock_server import AUTHORS, QUOTES


@pytest.fixture
def fetcher():
    with PageFetcher(timeout=5.0) as fetcher:
        yield fetcher


class TestQuoteScraper:
    """Tests for QuoteScraper."""

    def test_run_scrapes_every_page(self, quote_config_file, fetcher):
        """run shall visit each tag and page and emit each quote once."""
        config = QuoteSiteConfig.from_file(quote_config_file)

        records = list(QuoteScraper(config, fetcher).run())

        # humor p1: Zappa, Wilde; humor p2: Einstein; life p1: Einstein, Wilde (dup)
        assert [r.quote for r in records] == [
            QUOTES[0].text,
            QUOTES[3].text,
            QUOTES[5].text,
            QUOTES[2].text,
        ]
        assert records[0].to_line(config.delim) == (
            "So many books, so little time.###Frank Zappa######books,humor"
        )
        assert records[2].author == "Einstein"

    def test_run_logs_progress(self, quote_config_file, fetcher, caplog):
        """Each page shall be logged at INFO with its position."""
        config = QuoteSiteConfig.from_file(quote_config_file)

        with caplog.at_level("INFO", logger="quotekit"):
            list(QuoteScraper(config, fetcher).run())

        assert "Processing page 1/4" in caplog.text
        assert "Processing page 4/4" in caplog.text

    def _single_page_config(self, quote_config_file, url):
        entries = QuoteSiteConfig.from_file(quote_config_file).as_dict()
        entries.update({"URL": url, "URL_PATTERNS": "", "NUM_PAGES": 0})
        return QuoteSiteConfig.from_mapping(entries)

    def test_empty_page_raises(self, quote_config_file, server_url, fetcher):
        """A page with no content shall raise ScrapeError."""
        config = self._single_page_config(
            quote_config_file, f"{server_url}/empty"
        )

        with pytest.raises(ScrapeError, match="Unable to retrieve content"):
            list(QuoteScraper(config, fetcher).run())

    def test_server_error_propagates(
        self, quote_config_file, server_url, fetcher
    ):
        """A 5xx page shall abort the scrape with a transient exception."""
        config = self._single_page_config(
            quote_config_file, f"{server_url}/broken"
        )

        with pytest.raises(HTTPResponseAssumptionException):
            list(QuoteScraper(config, fetcher).run())


class TestAuthorInfoScraper:
    """Tests for AuthorInfoScraper."""

    def test_scrape_author(self, author_config_file, server_url, fetcher):
        """scrape shall fill birth, death and title from the author page."""
        config = AuthorSiteConfig.from_file(author_config_file)

        record = AuthorInfoScraper(config, fetcher).scrape("Albert Einstein")

        expected = AUTHORS["Albert_Einstein"]
        assert record.name == "Albert Einstein"
        assert record.birth_date == expected.birth
        assert record.death_date == expected.death
        assert record.description == expected.title
        assert record.bio_url == f"{server_url}/authors/Albert_Einstein"

    def test_entities_removed_from_title(self, author_config_file, fetcher):
        config = AuthorSiteConfig.from_file(author_config_file)
        record = AuthorInfoScraper(config, fetcher).scrape("Oscar Wilde")
        assert record.description == "Irish poet playwright"

    def test_unknown_author_warns(self, author_config_file, fetcher, caplog):
        """A page without any details shall log a warning and keep the name."""
        config = AuthorSiteConfig.from_file(author_config_file)

        with caplog.at_level("WARNING"):
            record = AuthorInfoScraper(config, fetcher).scrape("Nobody Known")

        assert record.name == "Nobody Known"
        assert record.birth_date == ""
        assert "No author details found for 'Nobody Known'" in caplog.text

    def test_run_skips_blank_names(self, author_config_file, fetcher):
        """run shall scrape names in order and skip blank lines."""
        config = AuthorSiteConfig.from_file(author_config_file)

        records = list(
            AuthorInfoScraper(config, fetcher).run(
                ["Frank Zappa\n", "\n", "  Oscar Wilde  "]
            )
        )

        assert [r.name for r in records] == ["Frank Zappa", "Oscar Wilde"]

    def test_parse_last_match_wins(self, author_config_file, fetcher):
        """When a pattern matches several lines the last match shall win."""
        config = AuthorSiteConfig.from_file(author_config_file)
        content = "\n".join(
            [
                '<div class="title">Draft title</div>',
                '<div class="title">Final title,</div>',
            ]
        )

        record = AuthorInfoScraper(config, fetcher).parse(
            "Someone", "http://example.com/someone", content
        )

        assert record.description == "Final title"
        assert record.to_line("###") == (
            "Someone#########Final title###http://example.com/someone"
        )
