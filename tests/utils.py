"""Test utilities: scripted fetchers and sleep recorders."""

from collections import Counter
from collections.abc import Callable

from devby.common.exceptions import HTMLResponseAssumptionException
from devby.common.request_manager import Response
from tests.mock_server import MockCompany, generate_company_html


def make_response(url: str, text: str, status_code: int = 200) -> Response:
    return Response(
        status_code=status_code,
        headers={"content-type": "text/html"},
        content=text.encode(),
        text=text,
        url=url,
    )


def company_url(company: MockCompany, base: str = "http://devby.test") -> str:
    return f"{base}/company/{company.slug}"


class ScriptedFetcher:
    """Fetcher whose answers per URL are scripted ahead of time.

    Each URL maps to a list of steps consumed in order. A step is either an
    int status code (raised as HTMLResponseAssumptionException) or an HTML
    string returned with status 200. The last step repeats forever.

    Example:
        fetcher = ScriptedFetcher({url: [500, 500, html]})
    """

    def __init__(self, script: dict[str, list[int | str]]) -> None:
        self.script = {url: list(steps) for url, steps in script.items()}
        self.calls: Counter[str] = Counter()

    def get(self, url: str) -> Response:
        self.calls[url] += 1
        steps = self.script[url]
        step = steps.pop(0) if len(steps) > 1 else steps[0]
        if isinstance(step, int):
            raise HTMLResponseAssumptionException(
                status_code=step,
                expected_codes=[200],
                url=url,
                reason="Internal Server Error",
            )
        return make_response(url, step)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


def scripted_company(company: MockCompany, *steps: int | str) -> dict[str, list[int | str]]:
    """Script for one company; the HTML page is appended as the final step."""
    return {company_url(company): [*steps, generate_company_html(company)]}


def record_sleeps() -> tuple[Callable[[float], None], list[float]]:
    """Create a sleep replacement that records the requested durations."""
    sleeps: list[float] = []

    def sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return sleep, sleeps
