"""Checked HTML element wrapper for safe CSS querying.

This module provides CheckedHtmlElement, a wrapper around lxml.html.HtmlElement
that validates selector results against expected counts. A page whose layout
changed fails loudly at the first selector that no longer matches instead of
producing half-empty records.
"""

from __future__ import annotations

from lxml import etree, html
from lxml.html import HtmlElement

from devby.common.exceptions import (
    HTMLStructuralAssumptionException,
)


class CheckedHtmlElement:
    """Wrapper around HtmlElement with validated selectors.

    checked_css() validates the number of results against expected min/max
    counts and raises HTMLStructuralAssumptionException with the selector,
    description and page URL when they don't match.
    """

    def __init__(self, element: HtmlElement, request_url: str = "") -> None:
        """Initialize the checked element wrapper.

        Args:
            element: The lxml HtmlElement to wrap.
            request_url: Optional URL for error context.
        """
        self._element = element
        self._request_url = request_url

    @classmethod
    def from_text(cls, text: str, request_url: str = "") -> CheckedHtmlElement:
        """Parse an HTML document and wrap its root element.

        Raises:
            HTMLStructuralAssumptionException: If the document is empty.
        """
        try:
            root = html.fromstring(text)
        except etree.ParserError as e:
            raise HTMLStructuralAssumptionException(
                selector=":root",
                description="document root",
                expected_min=1,
                expected_max=1,
                actual_count=0,
                request_url=request_url,
            ) from e
        return cls(root, request_url)

    def checked_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]:
        """Execute CSS selector query with count validation.

        Args:
            selector: CSS selector expression.
            description: Human-readable description of what's being selected.
            min_count: Minimum number of elements expected (default: 1).
            max_count: Maximum number of elements expected (None = unlimited).

        Returns:
            List of matching CheckedHtmlElements. Each element is wrapped to support
            nested checked queries.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.

        Example::

            tree = CheckedHtmlElement.from_text(page_text, url)
            header = tree.checked_css("h1", "company name", max_count=1)[0]
            rows = tree.checked_css("table.companies tr", "rows", min_count=0)
        """
        try:
            results = self._element.cssselect(selector)
        except Exception as e:
            raise HTMLStructuralAssumptionException(
                selector=selector,
                description=description,
                expected_min=min_count,
                expected_max=max_count,
                actual_count=0,
                request_url=self._request_url,
            ) from e

        actual_count = len(results)
        if actual_count < min_count or (
            max_count is not None and actual_count > max_count
        ):
            raise HTMLStructuralAssumptionException(
                selector=selector,
                description=description,
                expected_min=min_count,
                expected_max=max_count,
                actual_count=actual_count,
                request_url=self._request_url,
            )

        return [
            CheckedHtmlElement(result, self._request_url) for result in results
        ]

    def checked_one(self, selector: str, description: str) -> CheckedHtmlElement:
        """Return the single element matching selector."""
        return self.checked_css(selector, description, 1, 1)[0]

    def optional_one(
        self, selector: str, description: str
    ) -> CheckedHtmlElement | None:
        """Return the element matching selector, or None when it is absent."""
        found = self.checked_css(selector, description, 0, 1)
        return found[0] if found else None

    def checked_attr(self, name: str, description: str) -> str:
        """Return attribute value, raising if the attribute is missing."""
        value = self._element.get(name)
        if value is None:
            raise HTMLStructuralAssumptionException(
                selector=f"@{name}",
                description=description,
                expected_min=1,
                expected_max=1,
                actual_count=0,
                request_url=self._request_url,
            )
        return value

    def text(self) -> str:
        """Full text content of the element, unstripped."""
        return self._element.text_content()

    def previous(self) -> CheckedHtmlElement | None:
        """Previous sibling element, or None."""
        sibling = self._element.getprevious()
        if sibling is None:
            return None
        return CheckedHtmlElement(sibling, self._request_url)

    def parent(self) -> CheckedHtmlElement | None:
        """Parent element, or None at the root."""
        parent = self._element.getparent()
        if parent is None:
            return None
        return CheckedHtmlElement(parent, self._request_url)

    def __getattr__(self, name: str):
        """Delegate all other attributes to the wrapped element."""
        return getattr(self._element, name)
