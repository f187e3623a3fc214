#!/usr/bin/env python3
"""Entry point: scrape vacancies and/or apply to them.

    python run_agent.py              # apply to listings in data/scraped_jobs.json
    python run_agent.py --scrape     # scrape the portal first, then apply
    python run_agent.py --scrape-only
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from autoapply.log import get_logger, set_console_level
from autoapply.config import RESUMES_DIR, find_candidate_file

log = get_logger(__name__)


def _check_setup(candidate: Path | None) -> bool:
    """Return True if first-run setup is needed."""
    if candidate is None and find_candidate_file(RESUMES_DIR) is None:
        print()
        print("  No candidate record found. Add one first:")
        print(f"    {RESUMES_DIR}/candidate.json  (firstName, lastName, email, phone, cvFile, ...)")
        print()
        return True
    return False


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply to scraped vacancies automatically.")
    parser.add_argument("--scrape", action="store_true", help="scrape the portal before applying")
    parser.add_argument("--scrape-only", action="store_true", help="scrape and save listings, do not apply")
    parser.add_argument("--limit", type=int, default=None, help="process at most N listings")
    parser.add_argument("--candidate", type=Path, default=None, help="candidate record (JSON/YAML)")
    parser.add_argument("--no-report", action="store_true", help="skip writing the run report")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on the console")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = _parse_args()
    if args.verbose:
        set_console_level("DEBUG")

    from autoapply.agent import run, scrape

    if args.scrape_only:
        found = scrape(limit=args.limit)
        log.info("Scraped %d listing(s)", len(found))
        sys.exit(0 if found else 1)

    if _check_setup(args.candidate):
        sys.exit(1)

    result = run(
        scrape_first=args.scrape,
        limit=args.limit,
        write_report=not args.no_report,
        candidate_path=args.candidate,
    )
    log.info("Run complete.")
    log.info("  Listings: %d", result["listings"])
    log.info("  Applied: %d", result["applied"])
    log.info("  Failed: %d", result["failed"])
    log.info("  Skipped (already applied): %d", result["skipped"])
    if result["report_path"]:
        log.info("  Report: %s", result["report_path"])
