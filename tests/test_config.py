"""Tests for site configuration parsing and validation."""

import pytest

from quotekit.common.exceptions import ConfigurationError
from quotekit.config import AuthorSiteConfig, QuoteSiteConfig, parse_config

MINIMAL_QUOTE_CONFIG = {
    "URL": "https://example.com/quotes",
    "BLOCK_END": '<div class="quoteFooter">',
    "DELIM": "###",
    "QUOTE_OPEN": '<div class="quoteText">',
    "QUOTE_CLOSE": "<",
    "AUTHOR_OPEN": '<span class="authorOrTitle">',
    "AUTHOR_CLOSE": "<",
}


class TestParseConfig:
    """Tests for the KEY=value file parser."""

    def test_parse_config(self, tmp_path):
        """Comments, blank lines and empty keys or values shall be skipped."""
        path = tmp_path / "site.conf"
        path.write_text(
            "# Goodreads\n"
            "\n"
            "URL=https://example.com/quotes?tag=<PATTERN>&page=<PAGE>\n"
            "NUM_PAGES=3   # three pages per tag\n"
            "URL_SUBSTITUTE= :_\n"
            "EMPTY=\n"
            "=orphan value\n"
            "no separator here\n"
            " DELIM =###\n"
        )

        assert parse_config(path) == {
            "URL": "https://example.com/quotes?tag=<PATTERN>&page=<PAGE>",
            "NUM_PAGES": "3",
            "URL_SUBSTITUTE": " :_",
            "DELIM": "###",
        }

    def test_value_split_on_first_equals(self, tmp_path):
        """Only the first '=' shall separate key and value."""
        path = tmp_path / "site.conf"
        path.write_text("TITLE_OPEN=<div class=\"title\">\n")
        assert parse_config(path) == {"TITLE_OPEN": '<div class="title">'}

    def test_missing_file(self, tmp_path):
        """An unreadable file shall raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Unable to open file"):
            parse_config(tmp_path / "missing.conf")


class TestQuoteSiteConfig:
    """Tests for QuoteSiteConfig."""

    def test_from_mapping(self):
        config = QuoteSiteConfig.from_mapping(MINIMAL_QUOTE_CONFIG)
        assert config.delim == "###"
        assert config.quote_open == '<div class="quoteText">'
        assert config.num_pages == 0
        assert config.tags_open == ""

    @pytest.mark.parametrize("key", sorted(MINIMAL_QUOTE_CONFIG))
    def test_required_keys(self, key):
        """Each required key shall be reported by name when missing."""
        entries = dict(MINIMAL_QUOTE_CONFIG)
        del entries[key]
        with pytest.raises(ConfigurationError, match=f"'{key}' key is missing"):
            QuoteSiteConfig.from_mapping(entries)

    def test_invalid_num_pages(self):
        """A non-numeric NUM_PAGES shall raise ConfigurationError."""
        entries = {**MINIMAL_QUOTE_CONFIG, "NUM_PAGES": "three"}
        with pytest.raises(ConfigurationError, match="Invalid value"):
            QuoteSiteConfig.from_mapping(entries)

    def test_page_urls_expand_patterns_then_pages(self):
        """Patterns shall be the outer loop and pages the inner loop."""
        config = QuoteSiteConfig.from_mapping(
            {
                **MINIMAL_QUOTE_CONFIG,
                "URL": "https://example.com/quotes/<PATTERN>?page=<PAGE>",
                "URL_PATTERNS": "love, life ,",
                "NUM_PAGES": "2",
            }
        )

        assert config.url_patterns == ["love", "life"]
        assert config.page_urls() == [
            "https://example.com/quotes/love?page=1",
            "https://example.com/quotes/love?page=2",
            "https://example.com/quotes/life?page=1",
            "https://example.com/quotes/life?page=2",
        ]

    def test_page_urls_without_patterns(self):
        """Without patterns or pages the URL shall be used as-is."""
        config = QuoteSiteConfig.from_mapping(MINIMAL_QUOTE_CONFIG)
        assert config.page_urls() == ["https://example.com/quotes"]

    def test_page_urls_pages_only(self):
        config = QuoteSiteConfig.from_mapping(
            {
                **MINIMAL_QUOTE_CONFIG,
                "URL": "https://example.com/top?p=<PAGE>",
                "NUM_PAGES": "3",
            }
        )
        assert config.page_urls() == [
            "https://example.com/top?p=1",
            "https://example.com/top?p=2",
            "https://example.com/top?p=3",
        ]

    def test_as_dict_uses_config_keys(self):
        data = QuoteSiteConfig.from_mapping(MINIMAL_QUOTE_CONFIG).as_dict()
        assert data["QUOTE_OPEN"] == '<div class="quoteText">'
        assert data["NUM_PAGES"] == 0

    def test_from_file(self, quote_config_file, server_url):
        """The mock site config file shall load with all markers."""
        config = QuoteSiteConfig.from_file(quote_config_file)
        assert config.url == f"{server_url}/quotes/<PATTERN>?page=<PAGE>"
        assert config.tags_open == '<div class="tags">Tags:'
        assert config.num_pages == 2


class TestAuthorSiteConfig:
    """Tests for AuthorSiteConfig."""

    @pytest.fixture
    def entries(self):
        return {
            "URL": "https://en.example.org/wiki/<NAME>",
            "DELIM": "###",
            "BIRTH_DAY_OPEN": '<span class="bday">',
            "BIRTH_DAY_TEXT": "[^<]+",
            "DEATH_DAY_OPEN": '<span class="dday">',
            "DEATH_DAY_TEXT": "[^<]+",
            "TITLE_OPEN": '<div class="title">',
            "TITLE_TEXT": "[^<]+",
        }

    def test_author_url_with_substitution(self, entries):
        """URL_SUBSTITUTE shall be applied to the whole URL."""
        config = AuthorSiteConfig.from_mapping(
            {**entries, "URL_SUBSTITUTE": " :_"}
        )
        assert (
            config.author_url("Albert Einstein")
            == "https://en.example.org/wiki/Albert_Einstein"
        )

    def test_author_url_without_substitution(self, entries):
        config = AuthorSiteConfig.from_mapping(entries)
        assert (
            config.author_url("Oscar Wilde")
            == "https://en.example.org/wiki/Oscar Wilde"
        )

    def test_incomplete_substitution_ignored(self, entries):
        """A substitution without a replacement part shall be ignored."""
        config = AuthorSiteConfig.from_mapping(
            {**entries, "URL_SUBSTITUTE": " :"}
        )
        assert config.author_url("A B").endswith("/A B")

    def test_missing_text_pattern(self, entries):
        del entries["TITLE_TEXT"]
        with pytest.raises(ConfigurationError, match="'TITLE_TEXT'"):
            AuthorSiteConfig.from_mapping(entries)
