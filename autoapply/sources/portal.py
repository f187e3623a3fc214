"""
Scrape vacancy links from the portal's infinite-scroll overview page.

Scrolls until the page stops growing for a few rounds in a row, then reads
every anchor pointing at a ``/vacature/`` detail page.
"""
from __future__ import annotations

import re

from playwright.sync_api import BrowserContext
from playwright.sync_api import Error as PlaywrightError

from autoapply.config import Settings
from autoapply.cookies import accept_cookies_if_present
from autoapply.fields import FormVocabulary
from autoapply.log import get_logger
from autoapply.models import Listing
from autoapply.sources.base import ListingSource
from autoapply.sources.feed import dedupe_listings

log = get_logger(__name__)

LISTING_LINKS = "a[href*='/vacature/']"
KNOWN_CITIES = re.compile(r"(Amsterdam|Rotterdam|Utrecht|Den Haag|Eindhoven|Tilburg|Breda)")

_EXTRACT_JS = """links => links.map(link => ({
    title: (link.querySelector('h2, h3') || {}).innerText || '',
    text: link.innerText || '',
    link: link.href,
}))"""


def city_from_text(text: str) -> str:
    match = KNOWN_CITIES.search(text or "")
    return match.group(0) if match else ""


class PortalSource(ListingSource):
    def __init__(
        self,
        context: BrowserContext,
        *,
        settings: Settings | None = None,
        vocabulary: FormVocabulary | None = None,
        max_idle_rounds: int = 5,
        scroll_pause_ms: int = 2_500,
    ) -> None:
        self.context = context
        self.settings = settings or Settings()
        self.vocabulary = vocabulary or FormVocabulary()
        self.max_idle_rounds = max_idle_rounds
        self.scroll_pause_ms = scroll_pause_ms

    def fetch(self, limit: int | None = None) -> list[Listing]:
        url = self.settings.portal_url
        log.info("Opening vacancies page: %s", url)
        page = self.context.new_page()
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=self.settings.nav_timeout_ms)
            accept_cookies_if_present(
                page, self.vocabulary.cookie_labels, timeout_ms=self.settings.cookie_timeout_ms
            )
            self._scroll_to_end(page)
            raw = page.eval_on_selector_all(LISTING_LINKS, _EXTRACT_JS)
        except PlaywrightError as exc:
            log.error("Scrape failed: %s", str(exc)[:150].split("\n")[0])
            return []
        finally:
            try:
                page.close()
            except PlaywrightError:
                pass

        listings = dedupe_listings([
            Listing(
                title=(item.get("title") or "").strip(),
                location=city_from_text(item.get("text", "")),
                link=item.get("link", ""),
            )
            for item in raw
        ])
        log.info("Found %d listing(s)", len(listings))
        return listings[:limit] if limit else listings

    def _scroll_to_end(self, page) -> None:
        previous = 0
        idle = 0
        while idle < self.max_idle_rounds:
            height = page.evaluate("() => document.body.scrollHeight")
            page.mouse.wheel(0, height)
            page.wait_for_timeout(self.scroll_pause_ms)
            new_height = page.evaluate("() => document.body.scrollHeight")
            if new_height == previous:
                idle += 1
            else:
                idle = 0
                previous = new_height
        log.info("Finished scrolling (page height %d)", previous)
