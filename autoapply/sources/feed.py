"""Listings stored as a JSON array (the output of a previous scrape)."""
from __future__ import annotations

import json
from pathlib import Path

from autoapply.config import LISTINGS_PATH
from autoapply.log import get_logger
from autoapply.models import Listing
from autoapply.sources.base import ListingSource

log = get_logger(__name__)


def dedupe_listings(listings: list[Listing]) -> list[Listing]:
    """Drop link-less entries and repeated links, keeping first occurrence."""
    seen: set[str] = set()
    out: list[Listing] = []
    for listing in listings:
        if not listing.link or listing.link in seen:
            continue
        seen.add(listing.link)
        out.append(listing)
    return out


def save_listings(listings: list[Listing], path: Path = LISTINGS_PATH) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [
        {"title": l.title, "location": l.location, "salary": l.salary, "link": l.link}
        for l in listings
    ]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    log.info("Listings saved → %s (%d)", path.name, len(listings))
    return path


class FeedSource(ListingSource):
    def __init__(self, path: Path = LISTINGS_PATH) -> None:
        self.path = path

    def fetch(self, limit: int | None = None) -> list[Listing]:
        if not self.path.exists():
            log.error("Listing feed not found: %s", self.path)
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.error("Cannot read listing feed %s: %s", self.path.name, exc)
            return []
        if not isinstance(data, list):
            log.error("Listing feed %s is not a JSON array", self.path.name)
            return []

        listings = dedupe_listings([Listing.from_dict(d) for d in data if isinstance(d, dict)])
        log.info("Loaded %d listing(s) from %s", len(listings), self.path.name)
        return listings[:limit] if limit else listings
