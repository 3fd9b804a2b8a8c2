"""devby CLI — scrape companies.devby.io into a JSON file.

Usage:
    devby companies.json                    # Fresh run, fails if the file exists
    devby companies.json --force            # Overwrite an existing file
    devby companies.json --continue         # Resume, skipping saved companies
    devby companies.json --by-rating --desc # Fetch best rated companies first
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from devby.common.exceptions import RunOptionsException
from devby.common.sorting import SortKey, SortOrder, SortSpec
from devby.data_types import (
    DEFAULT_RETRIES_PER_COMPANY,
    DEFAULT_TIMEOUT,
    RunOptions,
)
from devby.scraper import DEV_BY_COMPANIES_URL


def build_sort_spec(
    sort: bool,
    asc: bool,
    desc: bool,
    by_name: bool,
    by_rating: bool,
    by_employees: bool,
    by_reviews: bool,
) -> SortSpec | None:
    """Resolve the sort flags into a SortSpec.

    Any order or key flag implies ``--sort``.

    Raises:
        RunOptionsException: If conflicting flags were given.
    """
    if asc and desc:
        raise RunOptionsException("--asc and --desc are mutually exclusive")

    keys = [
        key
        for key, flag in (
            (SortKey.NAME, by_name),
            (SortKey.RATING, by_rating),
            (SortKey.EMPLOYEES, by_employees),
            (SortKey.REVIEWS, by_reviews),
        )
        if flag
    ]
    if len(keys) > 1:
        raise RunOptionsException(
            "--by-name, --by-rating, --by-employees and --by-reviews "
            "are mutually exclusive"
        )

    if not (sort or asc or desc or keys):
        return None
    return SortSpec(
        key=keys[0] if keys else SortKey.NAME,
        order=SortOrder.DESC if desc else SortOrder.ASC,
    )


@click.command()
@click.version_option(package_name="devby")
@click.argument("filename", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="If the file exists, overwrite it and remove old data.",
)
@click.option(
    "-c",
    "--continue",
    "resume",
    is_flag=True,
    help="If the file exists, keep saved companies and fetch only the missing ones.",
)
@click.option(
    "--full",
    is_flag=True,
    help="Print each company record after a successful fetch.",
)
@click.option(
    "-n",
    "--retries-per-company",
    type=int,
    default=DEFAULT_RETRIES_PER_COMPANY,
    show_default=True,
    help="Retries for a company after a failed attempt.",
)
@click.option(
    "-d",
    "--delay-between-retries",
    type=float,
    default=2000,
    show_default=True,
    help="Delay (milliseconds) between fetch retries.",
)
@click.option(
    "-D",
    "--delay-between-companies",
    type=float,
    default=4000,
    show_default=True,
    help="Delay (milliseconds) after each company.",
)
@click.option(
    "--sort",
    is_flag=True,
    help="Fetch companies in sorted order (with --continue, saved records are sorted too).",
)
@click.option("--asc", is_flag=True, help="Ascending order (default).")
@click.option("--desc", is_flag=True, help="Descending order.")
@click.option("--by-name", is_flag=True, help="Sort by name (default).")
@click.option("--by-rating", is_flag=True, help="Sort by rating.")
@click.option("--by-employees", is_flag=True, help="Sort by employee count.")
@click.option("--by-reviews", is_flag=True, help="Sort by number of reviews.")
@click.option(
    "--index-url",
    default=DEV_BY_COMPANIES_URL,
    show_default=True,
    help="URL of the companies index page.",
)
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="HTTP timeout in seconds.",
)
@click.option(
    "--no-throttle-skipped",
    is_flag=True,
    help="Don't wait after companies that are already saved.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def cli(
    filename: Path,
    force: bool,
    resume: bool,
    full: bool,
    retries_per_company: int,
    delay_between_retries: float,
    delay_between_companies: float,
    sort: bool,
    asc: bool,
    desc: bool,
    by_name: bool,
    by_rating: bool,
    by_employees: bool,
    by_reviews: bool,
    index_url: str,
    timeout: float,
    no_throttle_skipped: bool,
    verbose: bool,
) -> None:
    """Fetch and parse companies.devby.io into FILENAME.

    \b
    Examples:
        devby companies.json
        devby companies.json --continue --by-reviews --desc
        devby companies.json --force -n 3 -d 500 -D 1000
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from devby.driver.callbacks import echo_progress, echo_target_start
    from devby.driver.sync_driver import SyncDriver
    from devby.scraper import DevByScraper

    try:
        options = RunOptions(
            output_path=filename,
            force=force,
            resume=resume,
            retries_per_company=retries_per_company,
            delay_between_retries=delay_between_retries / 1000,
            delay_between_companies=delay_between_companies / 1000,
            sort=build_sort_spec(
                sort, asc, desc, by_name, by_rating, by_employees, by_reviews
            ),
            full=full,
            throttle_skipped=not no_throttle_skipped,
            index_url=index_url,
            timeout=timeout,
        )
        driver = SyncDriver(
            DevByScraper(),
            options,
            on_target_start=echo_target_start(),
            on_progress=echo_progress(full=options.full),
        )
        summary = driver.run()
    except Exception as e:
        raise click.ClickException(f"{type(e).__name__}: {e}") from e

    click.echo(
        f"Done. {summary.fetched} fetched, {summary.skipped} already saved, "
        f"{len(summary.exhausted)} failed."
    )


def main() -> None:
    """Entry point for the ``devby`` console script."""
    cli()
