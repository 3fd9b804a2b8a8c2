"""Scraper for companies.devby.io.

The scraper only parses; it never performs I/O. The driver fetches pages
and hands the Response objects to:

- ``parse_companies`` for the index table (one CompanyShort per row)
- ``parse_company_details`` for a company page (one CompanyDetails)

Selectors that stop matching raise HTMLStructuralAssumptionException and
values that don't fit the models raise DataFormatAssumptionException.
"""

from __future__ import annotations

from urllib.parse import urljoin

from devby.common.checked_html import CheckedHtmlElement
from devby.common.request_manager import Response
from devby.models import (
    CompanyDetails,
    CompanyShort,
)

DEV_BY_COMPANIES_URL = "https://companies.devby.io"

HEADER_SELECTOR = ".widget-companies-header > .clearfix > .left"
SIDEBAR_SELECTOR = ".sidebar-for-companies"

# Labels of the employee counters in the company header
EMPLOYEE_LABELS = {
    "Сотрудники": "total",
    "Технические специалисты в Беларуси": "in_belarus",
    "Сотрудники в Беларуси": "in_belarus_non_it",
}
FOUNDATION_YEAR_MARKER = "год основания"


def _clean(text: str) -> str:
    return text.replace("\n", "").strip()


class DevByScraper:
    """Parses the companies.devby.io index and company pages."""

    BASE_URL = DEV_BY_COMPANIES_URL

    @property
    def index_url(self) -> str:
        return self.BASE_URL

    def parse_companies(self, response: Response) -> list[CompanyShort]:
        """Parse the index table into CompanyShort rows."""
        tree = CheckedHtmlElement.from_text(response.text, response.url)
        table = tree.checked_one("table.companies", "companies table")

        companies = []
        for row in table.checked_css("tr", "company rows", min_count=0):
            if not row.cssselect("td"):
                continue  # header
            cells = row.checked_css("td", "company row cells", min_count=5)
            link = cells[0].checked_one("a", "company link")
            rating = (cells[1].get("data") or "").strip()
            companies.append(
                CompanyShort.raw(
                    request_url=response.url,
                    name=link.text(),
                    url=urljoin(
                        response.url, link.checked_attr("href", "company href")
                    ),
                    rating=rating or None,
                    employees=(cells[2].get("data") or "0").strip() or "0",
                    reviews=_clean(cells[4].text()) or "0",
                ).confirm()
            )
        return companies

    def parse_company_details(self, response: Response) -> CompanyDetails:
        """Parse a company detail page."""
        tree = CheckedHtmlElement.from_text(response.text, response.url)
        header = tree.checked_one(HEADER_SELECTOR, "company header")
        sidebar = tree.checked_one(SIDEBAR_SELECTOR, "company sidebar")

        return CompanyDetails.raw(
            request_url=response.url,
            name=header.checked_one("h1", "company name").text(),
            legal_name=_clean(
                sidebar.checked_one(".fn.org.hidden", "legal name").text()
            ),
            tags=self._parse_tags(header),
            foundation_year=self._parse_foundation_year(header),
            employees_details=self._parse_employees(header),
            description=self._parse_description(tree),
            rating=self._parse_rating(tree),
            contacts=self._parse_contacts(sidebar, response.url),
            address=self._parse_address(sidebar),
            views=self._parse_views(sidebar),
            agents=self._parse_agents(tree, response.url),
            workers=self._parse_workers(tree, response.url),
        ).confirm()

    def _parse_tags(self, header: CheckedHtmlElement) -> list[str]:
        tags = _clean(header.checked_one(".full-name > .gray", "tags").text())
        return tags.split(", ")

    def _parse_employees(
        self, header: CheckedHtmlElement
    ) -> dict[str, str] | None:
        for block in header.checked_css(".data-info", "header blocks", 0):
            counters = block.checked_css(
                "span.employee-count", "employee counters", min_count=0
            )
            if not counters:
                continue
            counts: dict[str, str] = {}
            for counter in counters:
                label_element = counter.previous()
                label = label_element.text().strip() if label_element else ""
                field = EMPLOYEE_LABELS.get(label)
                if field is not None:
                    counts[field] = (
                        counter.text().replace("≈", "").replace("=", "").strip()
                    )
            return counts
        return None

    def _parse_foundation_year(self, header: CheckedHtmlElement) -> str | None:
        for block in header.checked_css(".data-info", "header blocks", 0):
            text = block.text()
            if FOUNDATION_YEAR_MARKER in text:
                return text.replace("\n", " ").strip().split(" ")[0]
        return None

    def _parse_description(self, tree: CheckedHtmlElement) -> str:
        text = tree.checked_one(
            ".widget-companies-description .description > .text",
            "description",
        ).text()
        lines = [line for line in text.strip().split("\n") if line]
        return "\n".join(lines)

    def _parse_rating(self, tree: CheckedHtmlElement) -> str | None:
        rating = tree.optional_one(".avg-rating", "average rating")
        if rating is None:
            return None
        return _clean(rating.text())

    def _parse_contacts(
        self, sidebar: CheckedHtmlElement, base_url: str
    ) -> dict[str, str]:
        items = sidebar.checked_css(
            ".sidebar-views-contacts li", "contacts", min_count=3
        )
        website = items[2].checked_css("a", "website link", min_count=1)[0]
        return {
            "email": items[0].checked_css("span", "email", min_count=1)[0].text(),
            "phone": items[1].checked_css("span", "phone", min_count=1)[0].text(),
            "website": urljoin(
                base_url, website.checked_attr("href", "website href")
            ),
        }

    def _parse_address(self, sidebar: CheckedHtmlElement) -> str | None:
        address = sidebar.optional_one(".street-address", "address")
        if address is None:
            return None
        return address.text().replace("\n", "")

    def _parse_views(self, sidebar: CheckedHtmlElement) -> str:
        icon = sidebar.checked_one(
            ".info-company-panel .icon-dev-show", "views icon"
        )
        panel = icon.parent()
        text = _clean(panel.text()) if panel is not None else ""
        return text.split(" ")[-1]

    def _parse_agents(
        self, tree: CheckedHtmlElement, base_url: str
    ) -> list[dict[str, str]]:
        block = tree.checked_one(".widget-companies-agents", "agents block")
        if block.optional_one(".no-agent", "no agents marker") is not None:
            return []
        agents = []
        for item in block.checked_css("li", "agents", min_count=0):
            link = item.checked_css("a", "agent link", min_count=1)[0]
            agents.append(
                {
                    "name": link.text(),
                    "link": urljoin(
                        base_url, link.checked_attr("href", "agent href")
                    ),
                    "position": _clean(
                        item.checked_css("span", "agent position", 1)[0].text()
                    ),
                }
            )
        return agents

    def _parse_workers(
        self, tree: CheckedHtmlElement, base_url: str
    ) -> dict[str, list[dict[str, str]]]:
        workers: dict[str, list[dict[str, str]]] = {}
        for kind in ("actual", "former"):
            items = tree.checked_css(
                f'.widget-companies-worker > ul[data-type="{kind}"] > li',
                f"{kind} workers",
                min_count=0,
            )
            workers[kind] = []
            for item in items:
                link = item.checked_css("a", "worker link", min_count=1)[0]
                workers[kind].append(
                    {
                        "name": link.text(),
                        "link": urljoin(
                            base_url, link.checked_attr("href", "worker href")
                        ),
                    }
                )
        return workers
