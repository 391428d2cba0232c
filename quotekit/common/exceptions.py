"""Exception types for pipeline errors.

Every error raised deliberately by quotekit derives from QuotekitError so
the CLI can report it cleanly. HTTP failures that may resolve on retry
derive from TransientException instead.
"""

from typing import Any


class QuotekitError(Exception):
    """Base class for pipeline errors.

    Carries a human-readable message and an optional dict of context that
    is appended to the formatted message.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            context: Optional dict of additional context (file, line, key).
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class ConfigurationError(QuotekitError):
    """Raised when a site configuration file is missing or incomplete."""


class InputFileError(QuotekitError):
    """Raised when an input file or directory cannot be found or read."""


class DataFormatError(QuotekitError):
    """Raised when a delimited record doesn't match its field layout.

    Attributes:
        line: The offending input line.
        expected_fields: Number of fields the layout requires.
        actual_fields: Number of fields found on the line.
    """

    def __init__(
        self,
        line: str,
        expected_fields: int | None = None,
        actual_fields: int | None = None,
        source: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            line: The offending input line.
            expected_fields: Number of fields the layout requires.
            actual_fields: Number of fields found on the line.
            source: Name of the file the line came from.
        """
        self.line = line
        self.expected_fields = expected_fields
        self.actual_fields = actual_fields

        context: dict[str, Any] = {}
        if source:
            context["source"] = source
        if expected_fields is not None:
            context["expected_fields"] = expected_fields
            context["actual_fields"] = actual_fields

        super().__init__(f"Data error found in line: {line}", context)


class ScrapeError(QuotekitError):
    """Raised when a page yields no content to scan.

    Attributes:
        url: The URL that produced no content.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Unable to retrieve content from '{url}'")


# =============================================================================
# Transient Exceptions
# =============================================================================


class TransientException(Exception):
    """Base class for fetch failures that may go away on a later run.

    Quote sites are scraped in long batches; a flaky server or a slow page
    should abort the batch with a message that says rerunning is worthwhile,
    not that the site configuration is wrong.
    """


class HTTPResponseAssumptionException(TransientException):
    """Raised when a page is served with a server error status.

    Attributes:
        status_code: The status code received.
        expected_codes: Status codes that would have been accepted.
        url: The page URL.
        message: Human-readable error message.
    """

    def __init__(
        self,
        status_code: int,
        expected_codes: list[int],
        url: str,
    ) -> None:
        self.status_code = status_code
        self.expected_codes = expected_codes
        self.url = url

        accepted = ", ".join(str(code) for code in expected_codes)
        self.message = (
            f"HTTP {status_code} from {url} (expected one of: {accepted})"
        )
        super().__init__(self.message)


class RequestTimeoutException(TransientException):
    """Raised when fetching a page exceeds the ``--timeout`` setting.

    Attributes:
        url: The page URL.
        timeout_seconds: The configured timeout, None if unbounded.
        message: Human-readable error message.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.message = f"Request to {url} timed out after {timeout_seconds}s"
        super().__init__(self.message)


class RequestFailedException(TransientException):
    """Raised when a page can't be fetched at all (DNS, refused connection).

    Attributes:
        url: The page URL.
        reason: The transport error text.
        message: Human-readable error message.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        self.message = f"Request to {url} failed: {reason}"
        super().__init__(self.message)
