"""
Job application agent.

Runs: (optional) scrape listings → load candidate + ledger → apply to each
listing in turn → write run report.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

from autoapply.candidate import load_candidate
from autoapply.config import (
    APPLIED_PATH,
    LISTINGS_PATH,
    RESUMES_DIR,
    Settings,
    ensure_dirs,
    find_candidate_file,
    load_settings,
)
from autoapply.errors import CandidateError
from autoapply.fields import FormVocabulary, load_vocabulary
from autoapply.ledger import JsonFileBackend, Ledger
from autoapply.log import get_logger
from autoapply.models import Listing, ListingOutcome, OutcomeStatus
from autoapply.report import build_run_report, write_run_report
from autoapply.sources import FeedSource, PortalSource, save_listings

log = get_logger(__name__)

_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


def scrape(settings: Settings | None = None, *, limit: int | None = None) -> list[Listing]:
    """Collect listings from the portal and store them as the listing feed."""
    from playwright.sync_api import sync_playwright

    settings = settings or load_settings()
    vocabulary = load_vocabulary()
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=settings.headless)
        context = browser.new_context(user_agent=_USER_AGENT)
        try:
            listings = PortalSource(context, settings=settings, vocabulary=vocabulary).fetch(limit)
        finally:
            browser.close()
    if listings:
        save_listings(listings, LISTINGS_PATH)
    return listings


def apply(
    listings: list[Listing],
    *,
    settings: Settings | None = None,
    candidate_path: Path | None = None,
    vocabulary: FormVocabulary | None = None,
    ledger: Ledger | None = None,
) -> list[ListingOutcome]:
    from playwright.sync_api import sync_playwright

    from autoapply.flow import ApplicationFlow

    settings = settings or load_settings()
    vocabulary = vocabulary or load_vocabulary()

    candidate_path = candidate_path or find_candidate_file(RESUMES_DIR)
    if candidate_path is None:
        raise CandidateError(f"No candidate record (.json/.yaml) found in {RESUMES_DIR}")
    candidate = load_candidate(candidate_path)

    ledger = ledger or Ledger(JsonFileBackend(APPLIED_PATH)).load()

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=settings.headless)
        context = browser.new_context(
            viewport={"width": 1280, "height": 900},
            user_agent=_USER_AGENT,
        )
        context.set_default_timeout(20_000)
        try:
            flow = ApplicationFlow(
                context,
                candidate,
                ledger,
                settings=settings,
                vocabulary=vocabulary,
                resumes_dir=candidate_path.parent,
            )
            outcomes = flow.apply_all(listings)
        finally:
            browser.close()
    return outcomes


def run(
    *,
    scrape_first: bool = False,
    limit: int | None = None,
    write_report: bool = True,
    candidate_path: Path | None = None,
) -> dict[str, Any]:
    ensure_dirs()
    settings = load_settings()

    if scrape_first:
        listings = scrape(settings, limit=limit)
    else:
        listings = FeedSource(LISTINGS_PATH).fetch(limit)
    if not listings:
        log.error("No listings to apply to")
        return {"listings": 0, "applied": 0, "failed": 0, "skipped": 0, "report_path": None}

    outcomes = apply(listings, settings=settings, candidate_path=candidate_path)

    report_path = None
    if write_report:
        report_path = write_run_report(build_run_report(outcomes))

    summary = {
        "listings": len(outcomes),
        "applied": sum(1 for o in outcomes if o.status is OutcomeStatus.APPLIED),
        "failed": sum(1 for o in outcomes if o.status is OutcomeStatus.FAILED),
        "skipped": sum(1 for o in outcomes if o.status is OutcomeStatus.SKIPPED),
        "report_path": str(report_path) if report_path else None,
    }
    log.info(
        "Run complete: listings=%d, applied=%d, failed=%d, skipped=%d",
        summary["listings"], summary["applied"], summary["failed"], summary["skipped"],
    )
    return summary
