"""Exception types for scraper errors.

Three families of errors exist:

- Scraper assumption violations (the page did not look like we expected).
  These are never retried and abort the run.
- Transient errors (non-2xx responses, timeouts). The pipeline retries these
  a bounded number of times per company.
- Run setup errors (output file conflicts, corrupt output, bad options).
  These are raised before any network activity.
"""

from pathlib import Path
from typing import Any


class ScraperAssumptionException(Exception):
    """Base class for scraper assumption violations.

    The scraper assumes a fixed layout for the index and detail pages. When
    that layout changes, it raises one of the subclasses of this exception
    with enough context to find the selector or field that broke.
    """

    def __init__(
        self,
        message: str,
        request_url: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the assumption violation.
            request_url: The URL of the page that triggered this error.
            context: Optional dict of additional context (selector, counts, etc).
        """
        self.message = message
        self.request_url = request_url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        parts.append(f"URL: {self.request_url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class HTMLStructuralAssumptionException(ScraperAssumptionException):
    """Raised when HTML structure doesn't match expectations.

    Raised when a CSS selector returns a different number of elements than
    expected, which usually means the site's markup has changed.

    Attributes:
        selector: The CSS selector that was used.
        description: What the selector was supposed to find.
        expected_min: Minimum number of elements expected.
        expected_max: Maximum number of elements expected (None = unlimited).
        actual_count: Number of elements found.
    """

    def __init__(
        self,
        selector: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        request_url: str,
    ) -> None:
        self.selector = selector
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count

        if expected_max is None:
            expected_str = f"at least {expected_min}"
        elif expected_min == expected_max:
            expected_str = f"exactly {expected_min}"
        else:
            expected_str = f"between {expected_min} and {expected_max}"

        message = (
            f"HTML structure mismatch: Expected {expected_str} "
            f"elements for '{description}', but found {actual_count}"
        )

        context = {
            "selector": selector,
            "expected_min": expected_min,
            "expected_max": expected_max
            if expected_max is not None
            else "unlimited",
            "actual_count": actual_count,
        }

        super().__init__(message, request_url, context)


class DataFormatAssumptionException(ScraperAssumptionException):
    """Raised when extracted values don't fit the record schema.

    Raised from pydantic validation of an extracted record, e.g. when a
    numeric cell holds text.
    """

    def __init__(
        self,
        errors: list[dict[str, Any]],
        failed_doc: dict[str, Any],
        model_name: str,
        request_url: str,
    ) -> None:
        """Initialize the exception.

        Args:
            errors: List of pydantic validation errors.
            failed_doc: The document that failed validation.
            model_name: Name of the model that was being validated against.
            request_url: The URL of the page that produced this data.
        """
        self.errors = errors
        self.failed_doc = failed_doc
        self.model_name = model_name

        error_summary = ", ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in errors
        )

        message = (
            f"Data validation failed for model '{model_name}': {error_summary}"
        )

        context = {
            "model": model_name,
            "error_count": len(errors),
        }

        super().__init__(message, request_url, context)


# =============================================================================
# Transient exceptions
# =============================================================================


class TransientException(Exception):
    """Base class for transient errors that might resolve on retry.

    Unlike assumption exceptions, which mean the scraper code needs
    updating, transient exceptions suggest that asking again later may
    succeed. The retry pipeline owns the retry strategy.
    """

    pass


class HTMLResponseAssumptionException(TransientException):
    """Raised when an HTTP response has a non-2xx status code.

    Attributes:
        status_code: The actual HTTP status code received.
        expected_codes: List of status codes that were expected.
        url: The URL that returned the unexpected status.
        reason: The reason phrase sent by the server, if any.
        message: Human-readable error message.
    """

    def __init__(
        self,
        status_code: int,
        expected_codes: list[int],
        url: str,
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.expected_codes = expected_codes
        self.url = url
        self.reason = reason

        expected_str = ", ".join(str(code) for code in expected_codes)
        status_str = f"{status_code} {reason}".rstrip()
        self.message = (
            f"HTTP {status_str} from {url} (expected one of: {expected_str})"
        )
        super().__init__(self.message)


class RequestTimeoutException(TransientException):
    """Raised when a request times out.

    Attributes:
        url: The URL that timed out.
        timeout_seconds: The timeout duration in seconds.
        message: Human-readable error message.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.message = f"Request to {url} timed out after {timeout_seconds}s"
        super().__init__(self.message)


# =============================================================================
# Run setup exceptions
# =============================================================================


class StoreException(Exception):
    """Base class for problems with the output file."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(message)


class StoreConflictException(StoreException):
    """Raised when the output file exists and neither overwrite nor resume was requested."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(
            path,
            f"Cannot write file '{path}'. Already exists "
            "(use --force to overwrite or --continue to resume)",
        )


class CorruptStoreException(StoreException):
    """Raised when a resumed output file cannot be read back as records.

    Attributes:
        reason: What was wrong with the file contents.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.reason = reason
        super().__init__(
            path,
            f"Cannot read file '{path}': {reason}. Only forcing is available",
        )


class RunOptionsException(ValueError):
    """Raised when run options are invalid or contradict each other."""

    pass
