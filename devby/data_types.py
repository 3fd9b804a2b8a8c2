"""Core data types shared by the driver and the retry pipeline.

- RunOptions: the immutable configuration of one run
- Ok / Transient / Fatal: result of a single fetch-and-extract attempt
- Skipped / Fetched / Exhausted: terminal outcome for one company
- ProgressEvent / RunSummary: what the driver reports
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from devby.common.exceptions import (
    RunOptionsException,
    ScraperAssumptionException,
    TransientException,
)
from devby.common.sorting import SortSpec
from devby.models import CompanyDetails

DEFAULT_RETRIES_PER_COMPANY = 10
DEFAULT_DELAY_BETWEEN_RETRIES = 2.0
DEFAULT_DELAY_BETWEEN_COMPANIES = 4.0
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class RunOptions:
    """Configuration snapshot for one invocation.

    Delays and the timeout are in seconds.

    Attributes:
        output_path: JSON file records are written to.
        force: Truncate an existing output file before fetching.
        resume: Keep records of an existing output file and skip them.
        retries_per_company: Retries after the first failed attempt.
        delay_between_retries: Pause after a failed attempt.
        delay_between_companies: Pause after each company's outcome.
        sort: Order of the index and of resumed records, or None.
        full: Report the full record for each fetched company.
        throttle_skipped: Also pause after companies that were skipped.
        index_url: Overrides the scraper's index URL when set.
        timeout: HTTP timeout, None for no timeout.
    """

    output_path: Path
    force: bool = False
    resume: bool = False
    retries_per_company: int = DEFAULT_RETRIES_PER_COMPANY
    delay_between_retries: float = DEFAULT_DELAY_BETWEEN_RETRIES
    delay_between_companies: float = DEFAULT_DELAY_BETWEEN_COMPANIES
    sort: SortSpec | None = None
    full: bool = False
    throttle_skipped: bool = True
    index_url: str | None = None
    timeout: float | None = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.force and self.resume:
            raise RunOptionsException(
                "--force and --continue are mutually exclusive"
            )
        if self.retries_per_company < 0:
            raise RunOptionsException(
                "Only non-negative number of retries is accepted "
                "(--retries-per-company >= 0)"
            )
        if self.delay_between_retries < 0 or self.delay_between_companies < 0:
            raise RunOptionsException(
                "Only non-negative time is accepted "
                "(--delay-between-companies >= 0, --delay-between-retries >= 0)"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise RunOptionsException("--timeout must be positive")
        object.__setattr__(self, "output_path", Path(self.output_path))

    @property
    def max_attempts(self) -> int:
        return self.retries_per_company + 1


# =============================================================================
# Attempt results
# =============================================================================


@dataclass(frozen=True)
class Ok:
    details: CompanyDetails


@dataclass(frozen=True)
class Transient:
    error: TransientException


@dataclass(frozen=True)
class Fatal:
    error: ScraperAssumptionException


AttemptResult = Union[Ok, Transient, Fatal]


# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True)
class Skipped:
    """The company was already in the store; nothing was fetched."""

    url: str


@dataclass(frozen=True)
class Fetched:
    """The company was fetched and its record persisted."""

    record: dict[str, Any]
    attempts: int

    @property
    def url(self) -> str:
        return self.record["url"]


@dataclass(frozen=True)
class Exhausted:
    """Every attempt failed transiently. The company stays eligible for a
    later resumed run."""

    url: str
    attempts: int
    last_error: TransientException


Outcome = Union[Skipped, Fetched, Exhausted]


@dataclass(frozen=True)
class ProgressEvent:
    index: int
    total: int
    url: str
    outcome: Outcome


@dataclass
class RunSummary:
    total: int = 0
    fetched: int = 0
    skipped: int = 0
    exhausted: list[str] = field(default_factory=list)

    def record(self, outcome: Outcome) -> None:
        match outcome:
            case Fetched():
                self.fetched += 1
            case Skipped():
                self.skipped += 1
            case Exhausted():
                self.exhausted.append(outcome.url)
