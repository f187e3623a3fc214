"""
Pytest fixtures for the apply engine tests.

Browser tests drive a real headless chromium against small hand-written
forms. They are skipped when Playwright's chromium is not installed
(``playwright install chromium``).
"""

import sys
from pathlib import Path
from urllib.parse import parse_qs

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from autoapply.config import Settings
from autoapply.ledger import Ledger, MemoryBackend
from autoapply.models import CandidateProfile

SITE = "https://site.test"


# === Browser ===

@pytest.fixture(scope="session")
def browser():
    try:
        from playwright.sync_api import sync_playwright
    except ImportError:
        pytest.skip("playwright not installed")

    pw = sync_playwright().start()
    try:
        chromium = pw.chromium.launch(headless=True)
    except Exception as exc:
        pw.stop()
        pytest.skip(f"chromium not available: {str(exc).splitlines()[0]}")
    yield chromium
    chromium.close()
    pw.stop()


@pytest.fixture
def context(browser):
    ctx = browser.new_context()
    ctx.set_default_timeout(5_000)
    yield ctx
    ctx.close()


@pytest.fixture
def page(context):
    return context.new_page()


class FakeSite:
    """Serves HTML for https://site.test/* and records form posts."""

    def __init__(self, context):
        self.pages: dict[str, str] = {}
        self.posts: list[dict[str, str]] = []
        context.route(f"{SITE}/**", self._handle)

    def add(self, path: str, html: str) -> str:
        self.pages[path] = html
        return SITE + path

    def _handle(self, route):
        request = route.request
        path = request.url[len(SITE):]
        if request.method == "POST":
            fields = parse_qs(request.post_data or "", keep_blank_values=True)
            self.posts.append({k: v[0] for k, v in fields.items()})
            route.fulfill(status=200, content_type="text/html", body="<p>Bedankt!</p>")
            return
        html = self.pages.get(path)
        if html is None:
            route.fulfill(status=404, content_type="text/html", body="<p>Not found</p>")
            return
        route.fulfill(status=200, content_type="text/html", body=html)


@pytest.fixture
def site(context):
    return FakeSite(context)


# === Data ===

@pytest.fixture
def fast_settings():
    return Settings(
        headless=True,
        nav_timeout_ms=10_000,
        form_timeout_ms=3_000,
        new_tab_timeout_ms=1_000,
        cookie_timeout_ms=200,
        click_timeout_ms=3_000,
        key_delay_ms=0,
        settle_ms=500,
    )


@pytest.fixture
def anna():
    return CandidateProfile(
        first_name="Anna",
        last_name="de Vries",
        email="a@x.nl",
        phone="0611112222",
        city="Utrecht",
        postal_code="3511 AB",
    )


@pytest.fixture
def memory_ledger():
    return Ledger(MemoryBackend()).load()
