"""Fetch-retry-persist pipeline for a single company.

For each company the pipeline:

1. skips it when the store already holds its url,
2. fetches and parses the detail page, at most ``retries_per_company + 1``
   times, sleeping ``delay_between_retries`` between failed attempts,
3. merges the index row with the parsed details, appends the record and
   flushes the store,
4. sleeps ``delay_between_companies`` before handing control back.

Each attempt is classified into Ok, Transient or Fatal. Only Transient is
retried. Fatal carries a ScraperAssumptionException which is re-raised and
aborts the run; records flushed before it remain on disk.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from typing_extensions import assert_never

from devby.common.exceptions import (
    ScraperAssumptionException,
    TransientException,
)
from devby.common.request_manager import Fetcher
from devby.data_types import (
    AttemptResult,
    Exhausted,
    Fatal,
    Fetched,
    Ok,
    Outcome,
    RunOptions,
    Skipped,
    Transient,
)
from devby.models import Company, CompanyShort
from devby.scraper import DevByScraper
from devby.store import JsonStore

logger = logging.getLogger(__name__)


class RetryPipeline:
    """Processes one company at a time against a store.

    Example::

        pipeline = RetryPipeline(request_manager, DevByScraper())
        outcome = pipeline.process_target(company, store, options)
    """

    def __init__(
        self,
        request_manager: Fetcher,
        scraper: DevByScraper,
        sleep: Callable[[float], None] = time.sleep,
        on_transient_exception: Callable[[TransientException, int, int], None]
        | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            request_manager: Fetcher used for detail pages.
            scraper: Parses detail pages into CompanyDetails.
            sleep: Called with a number of seconds for every delay.
            on_transient_exception: Optional callback invoked after each
                transiently failed attempt with the error, the attempt number
                and the maximum number of attempts.
        """
        self.request_manager = request_manager
        self.scraper = scraper
        self.sleep = sleep
        self.on_transient_exception = on_transient_exception

    def attempt(self, target: CompanyShort) -> AttemptResult:
        """Fetch and parse one detail page, classifying the result."""
        try:
            response = self.request_manager.get(target.url)
            return Ok(self.scraper.parse_company_details(response))
        except TransientException as e:
            return Transient(e)
        except ScraperAssumptionException as e:
            return Fatal(e)

    def process_target(
        self,
        target: CompanyShort,
        store: JsonStore,
        options: RunOptions,
    ) -> Outcome:
        outcome = self._resolve(target, store, options)
        if not isinstance(outcome, Skipped) or options.throttle_skipped:
            self.sleep(options.delay_between_companies)
        return outcome

    def _resolve(
        self,
        target: CompanyShort,
        store: JsonStore,
        options: RunOptions,
    ) -> Outcome:
        if store.contains(target.url):
            logger.debug(f"{target.url} already saved")
            return Skipped(target.url)

        max_attempts = options.max_attempts
        last_error: TransientException | None = None
        for attempt in range(1, max_attempts + 1):
            result = self.attempt(target)
            match result:
                case Ok(details=details):
                    record = Company.merge(target, details).to_json_dict()
                    store.append(record)
                    store.flush()
                    if attempt > 1:
                        logger.info(
                            f"[{attempt}/{max_attempts}] Fetched {target.url}"
                        )
                    return Fetched(record, attempt)
                case Transient(error=error):
                    last_error = error
                    logger.warning(
                        f"[{attempt}/{max_attempts}] Cannot fetch {target.url}: {error}",
                        extra={
                            "url": target.url,
                            "attempt": attempt,
                            "max_attempts": max_attempts,
                        },
                    )
                    if self.on_transient_exception:
                        self.on_transient_exception(error, attempt, max_attempts)
                    if attempt < max_attempts:
                        self.sleep(options.delay_between_retries)
                case Fatal(error=error):
                    logger.error(
                        f"Cannot parse {target.url}: {error.message}",
                        extra={"url": target.url, "context": error.context},
                    )
                    raise error
                case _:
                    assert_never(result)

        assert last_error is not None
        return Exhausted(target.url, max_attempts, last_error)
