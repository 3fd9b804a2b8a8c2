"""Synchronous driver implementation.

The driver owns everything around the per-company pipeline:

- resolving the run mode and opening the store (fresh, overwrite, resume or
  refuse) before any network activity,
- fetching the index once (not retried, any failure ends the run),
- optional sorting of the index and of resumed records with one key,
- feeding companies to the RetryPipeline in order and reporting progress.

Companies are processed strictly one after another.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from devby.common.exceptions import (
    StoreConflictException,
    TransientException,
)
from devby.common.request_manager import Fetcher, SyncRequestManager
from devby.common.sorting import sort_items
from devby.data_types import (
    Fetched,
    ProgressEvent,
    RunOptions,
    RunSummary,
)
from devby.driver.pipeline import RetryPipeline
from devby.models import CompanyShort
from devby.scraper import DevByScraper
from devby.store import JsonStore

logger = logging.getLogger(__name__)


def open_store(options: RunOptions) -> JsonStore:
    """Open the output store according to the run mode.

    Raises:
        StoreConflictException: The file exists and neither force nor resume
            was requested.
        CorruptStoreException: Resuming from a file that can't be read back.
    """
    path = options.output_path
    if not JsonStore.exists(path):
        return JsonStore.empty(path)
    if options.force:
        return JsonStore.reset(path)
    if options.resume:
        return JsonStore.load(path)
    raise StoreConflictException(path)


class SyncDriver:
    """Synchronous driver for scraping the companies directory.

    Example usage::

        from devby.driver.callbacks import collect_progress

        callback, events = collect_progress()
        driver = SyncDriver(DevByScraper(), options, on_progress=callback)
        summary = driver.run()
    """

    def __init__(
        self,
        scraper: DevByScraper,
        options: RunOptions,
        request_manager: Fetcher | None = None,
        on_target_start: Callable[[int, int, str], None] | None = None,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        on_data: Callable[[dict[str, Any]], None] | None = None,
        on_transient_exception: Callable[[TransientException, int, int], None]
        | None = None,
        on_run_start: Callable[[str], None] | None = None,
        on_run_complete: Callable[[str, str, Exception | None], None]
        | None = None,
        stop_event: threading.Event | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the driver.

        Args:
            scraper: Scraper that parses the index and detail pages.
            options: Configuration of this run.
            request_manager: Fetcher for all HTTP requests. If None, the
                driver creates a SyncRequestManager and closes it after the run.
            on_target_start: Optional callback invoked with the 1-based index,
                the total and the url before a company is processed.
            on_progress: Optional callback receiving a ProgressEvent after each
                company's outcome.
            on_data: Optional callback receiving each newly persisted record.
            on_transient_exception: Optional callback invoked after every
                transiently failed attempt (error, attempt, max attempts).
            on_run_start: Optional callback invoked with the scraper name when
                the run starts.
            on_run_complete: Optional callback invoked with the scraper name,
                status ("completed" | "error") and the error, if any.
            stop_event: Optional threading.Event. When set, the driver stops
                before the next company.
            sleep: Called with a number of seconds for every delay.
        """
        self.scraper = scraper
        self.options = options
        self.index_url = options.index_url or scraper.index_url

        if request_manager is not None:
            self.request_manager = request_manager
            self._owns_request_manager = False
        else:
            self.request_manager = SyncRequestManager(timeout=options.timeout)
            self._owns_request_manager = True

        self.on_target_start = on_target_start
        self.on_progress = on_progress
        self.on_data = on_data
        self.on_run_start = on_run_start
        self.on_run_complete = on_run_complete
        self.stop_event = stop_event
        self.pipeline = RetryPipeline(
            self.request_manager,
            scraper,
            sleep=sleep,
            on_transient_exception=on_transient_exception,
        )
        self.store: JsonStore | None = None

    def get_companies(self) -> list[CompanyShort]:
        """Fetch and parse the index. Failures propagate."""
        response = self.request_manager.get(self.index_url)
        companies = self.scraper.parse_companies(response)
        logger.info(f"Found {len(companies)} companies")
        return companies

    def run(self) -> RunSummary:
        """Run the scrape and return a summary of the outcomes."""
        scraper_name = self.scraper.__class__.__name__
        if self.on_run_start:
            self.on_run_start(scraper_name)

        status = "completed"
        error: Exception | None = None
        summary = RunSummary()

        try:
            self.store = store = open_store(self.options)
            companies = self.get_companies()

            if self.options.sort is not None:
                companies = sort_items(companies, self.options.sort)
                store.sort_in_place(self.options.sort)
                if len(store):
                    store.flush()
                logger.info(
                    f"Sorted by {self.options.sort.key.value} "
                    f"({self.options.sort.order.value})"
                )

            summary.total = len(companies)
            for index, company in enumerate(companies, start=1):
                if self.stop_event and self.stop_event.is_set():
                    logger.info("Stop requested, finishing early")
                    break

                if self.on_target_start:
                    self.on_target_start(index, summary.total, company.url)
                outcome = self.pipeline.process_target(
                    company, store, self.options
                )
                summary.record(outcome)

                if isinstance(outcome, Fetched) and self.on_data:
                    self.on_data(outcome.record)
                if self.on_progress:
                    self.on_progress(
                        ProgressEvent(
                            index=index,
                            total=summary.total,
                            url=company.url,
                            outcome=outcome,
                        )
                    )

            logger.info(
                f"Fetched {summary.fetched}, skipped {summary.skipped}, "
                f"failed {len(summary.exhausted)} of {summary.total} companies"
            )
            return summary

        except Exception as e:
            status = "error"
            error = e
            raise
        finally:
            if self._owns_request_manager:
                self.request_manager.close()  # type: ignore[attr-defined]

            if self.on_run_complete:
                self.on_run_complete(scraper_name, status, error)
