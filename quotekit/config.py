"""Site configuration files.

Each scraped site is described by a plain ``KEY=value`` file::

    # quotes site
    URL=https://example.com/quotes/<PATTERN>?page=<PAGE>
    URL_PATTERNS=love, life
    NUM_PAGES=3
    DELIM=###
    QUOTE_OPEN=<div class="quoteText">
    QUOTE_CLOSE=<
    AUTHOR_OPEN=<span class="authorOrTitle">
    AUTHOR_CLOSE=<
    BLOCK_END=<div class="quoteFooter">

Values are used verbatim, most of them as regular expression fragments,
so only the key is stripped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from quotekit.common.exceptions import ConfigurationError
from quotekit.common.text import trim_all

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="SiteConfig")

_TRAILING_COMMENT_RE = re.compile(r"\s+#.*")


def parse_config(path: str | Path) -> dict[str, str]:
    """Parse a ``KEY=value`` configuration file into a flat mapping.

    Lines starting with ``#`` and blank lines are skipped, and a trailing
    comment (whitespace followed by ``#``) is removed. The key is
    everything before the first ``=``. Entries with an empty key or an
    empty value are dropped.

    Args:
        path: Path to the configuration file.

    Returns:
        Mapping of keys to raw values.

    Raises:
        ConfigurationError: If the file can't be read.
    """
    config_path = Path(path)
    try:
        lines = config_path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ConfigurationError(
            f"Unable to open file '{config_path}' for reading: {e}"
        ) from e

    entries: dict[str, str] = {}
    for line in lines:
        if line.startswith("#") or not line.strip():
            continue

        line = _TRAILING_COMMENT_RE.sub("", line, count=1)
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key and value:
            entries[key] = value

    logger.debug(f"Parsed {len(entries)} entries from {config_path}")
    return entries


class SiteConfig(BaseModel):
    """Base class for site configurations built from ``parse_config`` output.

    Fields are aliased to the upper-case config keys. Subclasses list the
    keys that must be present in ``REQUIRED_KEYS``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    REQUIRED_KEYS: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_mapping(cls: type[C], entries: Mapping[str, str]) -> C:
        """Validate a parsed mapping into a config model.

        Args:
            entries: Output of ``parse_config``.

        Returns:
            The config model.

        Raises:
            ConfigurationError: If a required key is missing or a value
                has the wrong type.
        """
        for key in cls.REQUIRED_KEYS:
            if not entries.get(key):
                raise ConfigurationError(
                    f"The '{key}' key is missing (or not defined) in the "
                    "config file."
                )
        try:
            return cls.model_validate(dict(entries))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid value in config file: {e}",
                {"model": cls.__name__},
            ) from e

    @classmethod
    def from_file(cls: type[C], path: str | Path) -> C:
        """Parse and validate a configuration file."""
        return cls.from_mapping(parse_config(path))

    def as_dict(self) -> dict[str, Any]:
        """Return the configuration keyed by the original config keys."""
        return self.model_dump(by_alias=True)


class QuoteSiteConfig(SiteConfig):
    """Markers and URLs for scraping quotation blocks off a site.

    ``URL`` may contain ``<PATTERN>`` (replaced by each of
    ``URL_PATTERNS``) and ``<PAGE>`` (replaced by ``1..NUM_PAGES``).
    """

    REQUIRED_KEYS: ClassVar[tuple[str, ...]] = (
        "URL",
        "BLOCK_END",
        "DELIM",
        "QUOTE_OPEN",
        "QUOTE_CLOSE",
        "AUTHOR_OPEN",
        "AUTHOR_CLOSE",
    )

    url: str = Field(alias="URL")
    block_end: str = Field(alias="BLOCK_END")
    delim: str = Field(alias="DELIM")
    quote_open: str = Field(alias="QUOTE_OPEN")
    quote_close: str = Field(alias="QUOTE_CLOSE")
    author_open: str = Field(alias="AUTHOR_OPEN")
    author_close: str = Field(alias="AUTHOR_CLOSE")

    url_patterns_raw: str = Field(default="", alias="URL_PATTERNS")
    num_pages: int = Field(default=0, alias="NUM_PAGES")
    source_open: str = Field(default="", alias="SOURCE_OPEN")
    source_close: str = Field(default="", alias="SOURCE_CLOSE")
    tags_open: str = Field(default="", alias="TAGS_OPEN")
    tags_close: str = Field(default="", alias="TAGS_CLOSE")

    @property
    def url_patterns(self) -> list[str]:
        """URL patterns with all whitespace removed."""
        if not self.url_patterns_raw:
            return []
        return [p for p in trim_all(self.url_patterns_raw).split(",") if p]

    def page_urls(self) -> list[str]:
        """Expand the configured URL into every page URL to fetch.

        Returns:
            One URL per pattern and page, patterns in the outer loop.
        """
        base_urls = [
            self.url.replace("<PATTERN>", pattern, 1)
            for pattern in self.url_patterns
        ] or [self.url]

        if self.num_pages < 1:
            return base_urls

        return [
            base.replace("<PAGE>", str(page), 1)
            for base in base_urls
            for page in range(1, self.num_pages + 1)
        ]


class AuthorSiteConfig(SiteConfig):
    """Markers and URL for scraping author information pages.

    Each ``*_OPEN`` marker is followed by a ``*_TEXT`` pattern capturing
    the value, e.g. ``BIRTH_DAY_OPEN=<time itemprop="birthDate">`` and
    ``BIRTH_DAY_TEXT=[^<]+``. ``URL`` contains ``<NAME>``; the optional
    ``URL_SUBSTITUTE`` (``pattern:replacement``) is then applied to the
    whole URL, e.g. ``URL_SUBSTITUTE= :_`` for wiki-style names.
    """

    REQUIRED_KEYS: ClassVar[tuple[str, ...]] = (
        "URL",
        "DELIM",
        "BIRTH_DAY_OPEN",
        "BIRTH_DAY_TEXT",
        "DEATH_DAY_OPEN",
        "DEATH_DAY_TEXT",
        "TITLE_OPEN",
        "TITLE_TEXT",
    )

    url: str = Field(alias="URL")
    delim: str = Field(alias="DELIM")
    birth_day_open: str = Field(alias="BIRTH_DAY_OPEN")
    birth_day_text: str = Field(alias="BIRTH_DAY_TEXT")
    death_day_open: str = Field(alias="DEATH_DAY_OPEN")
    death_day_text: str = Field(alias="DEATH_DAY_TEXT")
    title_open: str = Field(alias="TITLE_OPEN")
    title_text: str = Field(alias="TITLE_TEXT")
    url_substitute: str = Field(default="", alias="URL_SUBSTITUTE")

    def author_url(self, name: str) -> str:
        """Build the information page URL for an author.

        Args:
            name: Author name as listed in the authors file.

        Returns:
            The URL with ``<NAME>`` filled in and the substitution applied.
        """
        url = self.url.replace("<NAME>", name, 1)

        pattern, sep, replacement = self.url_substitute.partition(":")
        if sep and pattern and replacement:
            url = re.sub(pattern, replacement, url)
        return url
