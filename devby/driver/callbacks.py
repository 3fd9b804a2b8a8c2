"""Callback factories for the SyncDriver hooks.

Example::

    from devby.driver.callbacks import echo_progress, echo_target_start
    from devby.driver.sync_driver import SyncDriver

    driver = SyncDriver(
        scraper,
        options,
        on_target_start=echo_target_start(),
        on_progress=echo_progress(full=True),
    )
    driver.run()
"""

import json
from collections.abc import Callable
from typing import Any

import click

from devby.data_types import (
    Exhausted,
    Fetched,
    ProgressEvent,
    Skipped,
)


def format_record(record: dict[str, Any]) -> str:
    """Indent a record's JSON by one tab for the console."""
    text = json.dumps(record, ensure_ascii=False, indent=4)
    return "\n".join(f"\t{line}" for line in text.splitlines())


def echo_target_start() -> Callable[[int, int, str], None]:
    """Create a callback that announces each company before it is fetched."""

    def callback(index: int, total: int, url: str) -> None:
        click.echo(f"Company [{index}/{total}] {url}")

    return callback


def echo_progress(full: bool = False) -> Callable[[ProgressEvent], None]:
    """Create a callback that prints the outcome of each company.

    Pair it with echo_target_start(), which prints the company line itself.

    Args:
        full: Also print the whole record of each fetched company.
    """

    def callback(event: ProgressEvent) -> None:
        match event.outcome:
            case Skipped():
                click.echo("\t- " + click.style("already saved", fg="yellow"))
            case Fetched(record=record, attempts=attempts):
                status = click.style("fetched", fg="green")
                if attempts > 1:
                    status += f" after {attempts} attempts"
                click.echo(f"\t- {status}")
                if full:
                    click.echo(f"\n{format_record(record)}\n")
            case Exhausted(attempts=attempts, last_error=error):
                click.echo(
                    f"\t- {event.url} "
                    + click.style(f"failed after {attempts} attempts", fg="red")
                    + f"\n\t\t{error}",
                    err=True,
                )

    return callback


def collect_progress() -> tuple[Callable[[ProgressEvent], None], list[ProgressEvent]]:
    """Create a callback that collects progress events in a list.

    Returns:
        A tuple of (callback_function, events_list).
    """
    events: list[ProgressEvent] = []

    def callback(event: ProgressEvent) -> None:
        events.append(event)

    return callback, events


def count_data(counter: list[int] | None = None) -> Callable[[dict], None]:
    """Create a callback that counts fetched records.

    The count is stored in a mutable list so it can be read after the
    driver finishes.
    """
    if counter is None:
        counter = [0]

    def callback(data: dict) -> None:
        counter[0] += 1

    return callback
