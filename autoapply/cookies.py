"""Dismiss cookie-consent banners."""
from __future__ import annotations

import json
from typing import Iterable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from autoapply.log import get_logger

log = get_logger(__name__)

ONETRUST_ACCEPT = "button#onetrust-accept-btn-handler"


def accept_cookies_if_present(page: Page, labels: Iterable[str], *, timeout_ms: int = 3_000) -> bool:
    """Click the first visible accept button. Never raises."""
    banner = page.locator(ONETRUST_ACCEPT)
    for label in labels:
        banner = banner.or_(page.locator(f"button:has-text({json.dumps(label)})"))
    button = banner.first

    try:
        button.wait_for(state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        log.debug("No cookie banner")
        return False
    except PlaywrightError as exc:
        log.debug("Cookie banner lookup failed: %s", str(exc).split("\n")[0])
        return False

    try:
        button.scroll_into_view_if_needed(timeout=2_000)
    except PlaywrightError:
        pass
    try:
        button.click(timeout=2_000)
    except PlaywrightError:
        try:
            button.evaluate("el => el.click()")
        except PlaywrightError as exc:
            log.debug("Cookie button not clickable: %s", str(exc).split("\n")[0])
            return False
    log.info("Cookies accepted")
    return True
