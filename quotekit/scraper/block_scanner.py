"""Line scanner for marker-delimited quotation blocks.

Quote sites render each quotation as a block of HTML in which the quote
text, the author and optionally a source and a tag list are introduced by
recognizable markup. The scanner is configured with regex fragments that
open and close each field, plus a marker that ends the block::

    <div class="quoteText">          <- QUOTE_OPEN
      &ldquo;So many books, so little time.&rdquo;
    </div>                           <- QUOTE_CLOSE ("<")
    <span class="authorOrTitle">Frank Zappa</span>
    <div class="quoteFooter">        <- BLOCK_END

Lines are scanned in a single pass. At most one field is open at a time;
an open field swallows lines until its close marker shows up. When the
block end is reached with both a quote and an author captured, a record
is emitted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from quotekit.common.text import cleanup_tags_text, url_cleanup
from quotekit.config import QuoteSiteConfig
from quotekit.data_types import QuoteRecord

logger = logging.getLogger(__name__)

QUOTE = "quote"
AUTHOR = "author"
SOURCE = "source"
TAGS = "tags"

# Open markers are tried in this order on lines where no field is open
FIELD_ORDER = (QUOTE, AUTHOR, SOURCE, TAGS)


@dataclass(frozen=True)
class BlockMarkers:
    """Open/close regex fragments for each field and the block end.

    Source and tags markers are optional; an empty fragment disables the
    field.
    """

    quote_open: str
    quote_close: str
    author_open: str
    author_close: str
    block_end: str
    source_open: str = ""
    source_close: str = ""
    tags_open: str = ""
    tags_close: str = ""

    @classmethod
    def from_config(cls, config: QuoteSiteConfig) -> BlockMarkers:
        return cls(
            quote_open=config.quote_open,
            quote_close=config.quote_close,
            author_open=config.author_open,
            author_close=config.author_close,
            block_end=config.block_end,
            source_open=config.source_open,
            source_close=config.source_close,
            tags_open=config.tags_open,
            tags_close=config.tags_close,
        )


@dataclass
class _FieldPattern:
    open: re.Pattern[str]
    close: re.Pattern[str]


def _compile_field(open_marker: str, close_marker: str) -> _FieldPattern | None:
    if not open_marker or not close_marker:
        return None
    return _FieldPattern(re.compile(open_marker), re.compile(close_marker))


class BlockScanner:
    """Scan page text for quotation blocks.

    A scanner remembers every quote it has emitted, so scanning several
    pages with one instance never yields the same quote text twice.

    Example::

        scanner = BlockScanner(BlockMarkers.from_config(config))
        for record in scanner.scan(page_text):
            print(record.to_line(config.delim))
    """

    def __init__(self, markers: BlockMarkers) -> None:
        """Compile the markers.

        Args:
            markers: The field and block end markers.

        Raises:
            re.error: If a marker isn't a valid regular expression.
        """
        self.markers = markers
        self.seen: set[str] = set()

        fields = {
            QUOTE: _compile_field(markers.quote_open, markers.quote_close),
            AUTHOR: _compile_field(markers.author_open, markers.author_close),
            SOURCE: _compile_field(markers.source_open, markers.source_close),
            TAGS: _compile_field(markers.tags_open, markers.tags_close),
        }
        self._fields: dict[str, _FieldPattern] = {
            name: pattern for name, pattern in fields.items() if pattern
        }
        self._block_end = re.compile(markers.block_end)

    def scan(self, text: str) -> Iterator[QuoteRecord]:
        """Yield the new quotation records found in a page.

        Args:
            text: Page content.

        Yields:
            QuoteRecord for each complete block whose quote is unseen.
        """
        values = dict.fromkeys(FIELD_ORDER, "")
        open_field: str | None = None
        emitted = False

        for line in text.splitlines():
            if open_field is not None:
                closed = self._continue_field(open_field, line, values)
                if closed:
                    open_field = None
                continue

            opened = self._open_field(line, values)
            if opened is not None:
                open_field, is_closed = opened
                if is_closed:
                    open_field = None
                emitted = False
                continue

            if not self._block_end.search(line):
                continue
            if emitted or not values[QUOTE] or not values[AUTHOR]:
                continue

            record = QuoteRecord(
                quote=values[QUOTE],
                author=values[AUTHOR],
                source=values[SOURCE],
                tags=values[TAGS],
            )
            values = dict.fromkeys(FIELD_ORDER, "")
            emitted = True

            if record.quote in self.seen:
                logger.debug(f"Skipping duplicate quote: {record.quote[:60]}")
                continue

            self.seen.add(record.quote)
            yield record

    def _open_field(
        self, line: str, values: dict[str, str]
    ) -> tuple[str, bool] | None:
        """Try each open marker against a line.

        Returns:
            Tuple of (field name, closed on the same line), or None if no
            open marker matched.
        """
        for name in FIELD_ORDER:
            pattern = self._fields.get(name)
            if pattern is None:
                continue
            match = pattern.open.search(line)
            if match is None:
                continue

            rest = line[match.end() :]
            close = pattern.close.search(rest)
            if close is None:
                values[name] = rest
                return name, False

            values[name] = _finish(name, rest[: close.start()])
            return name, True
        return None

    def _continue_field(
        self, name: str, line: str, values: dict[str, str]
    ) -> bool:
        """Append a line to the open field.

        Returns:
            True if the close marker was found and the field is now closed.
        """
        close = self._fields[name].close.search(line)
        if close is None:
            values[name] += "\n" + line
            return False

        values[name] = _finish(name, values[name] + "\n" + line[: close.start()])
        return True


def _finish(name: str, raw: str) -> str:
    """Clean the raw text captured for a field once it closes."""
    if name == TAGS:
        return url_cleanup(raw)
    return cleanup_tags_text(raw)
