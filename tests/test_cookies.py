"""Tests for cookie banner dismissal."""

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from autoapply.cookies import accept_cookies_if_present


@pytest.mark.browser
def test_clicks_labelled_accept_button(page):
    page.set_content("""
        <div id="banner"><button onclick="document.getElementById('banner').remove()">Alles accepteren</button></div>
    """)
    assert accept_cookies_if_present(page, ["Alles accepteren"], timeout_ms=500) is True
    assert page.locator("#banner").count() == 0


@pytest.mark.browser
def test_clicks_onetrust_button(page):
    page.set_content("""
        <button id="onetrust-accept-btn-handler" onclick="this.remove()">OK</button>
    """)
    assert accept_cookies_if_present(page, [], timeout_ms=500) is True
    assert page.locator("#onetrust-accept-btn-handler").count() == 0


@pytest.mark.browser
def test_no_banner(page):
    page.set_content("<p>Geen cookies hier</p>")
    assert accept_cookies_if_present(page, ["Akkoord"], timeout_ms=200) is False


def test_lookup_error_never_raises():
    page = MagicMock()
    page.locator.return_value.or_.return_value.first.wait_for.side_effect = PlaywrightError("Target closed")
    assert accept_cookies_if_present(page, ["Akkoord"]) is False
