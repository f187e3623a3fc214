"""Tick the consent controls a form needs before it will submit.

The localized "yes" radio is selected first. Then the privacy-declaration
checkbox is checked; when it cannot be found or checked, every unchecked
enabled checkbox in the form is checked instead.
"""
from __future__ import annotations

import re
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from autoapply.log import get_logger

log = get_logger(__name__)

CHECK_TIMEOUT_MS = 2_000


def _first_line(exc: Exception) -> str:
    return str(exc).split("\n")[0]


def choose_yes(scope: Any, yes_label: str, *, timeout_ms: int = CHECK_TIMEOUT_MS) -> bool:
    radio = scope.get_by_role("radio", name=re.compile(rf"^{re.escape(yes_label)}$", re.I))
    if not radio.count():
        return False
    radio.first.check(timeout=timeout_ms)
    log.debug("Selected radio '%s'", yes_label)
    return True


def check_privacy(scope: Any, privacy_label: str, *, timeout_ms: int = CHECK_TIMEOUT_MS) -> bool:
    box = scope.get_by_label(re.compile(re.escape(privacy_label), re.I))
    if not box.count():
        return False
    box.first.check(timeout=timeout_ms)
    log.debug("Checked privacy declaration")
    return True


def check_all_open(scope: Any, *, timeout_ms: int = CHECK_TIMEOUT_MS) -> int:
    """Check every unchecked, enabled checkbox; returns how many were ticked."""
    boxes = scope.locator("input[type='checkbox']")
    ticked = 0
    for i in range(boxes.count()):
        box = boxes.nth(i)
        try:
            if box.is_checked() or box.is_disabled():
                continue
            box.check(timeout=timeout_ms)
            ticked += 1
        except PlaywrightError as exc:
            log.debug("Checkbox %d not checkable: %s", i, _first_line(exc))
    return ticked


def satisfy_consent(
    scope: Any,
    *,
    yes_label: str = "Ja",
    privacy_label: str = "privacyverklaring",
    timeout_ms: int = CHECK_TIMEOUT_MS,
) -> None:
    """Best effort; never raises on page interaction errors."""
    try:
        choose_yes(scope, yes_label, timeout_ms=timeout_ms)
    except PlaywrightError as exc:
        log.debug("Yes radio not selectable: %s", _first_line(exc))

    try:
        if check_privacy(scope, privacy_label, timeout_ms=timeout_ms):
            return
    except PlaywrightError as exc:
        log.debug("Privacy checkbox not checkable: %s", _first_line(exc))

    try:
        ticked = check_all_open(scope, timeout_ms=timeout_ms)
    except PlaywrightError as exc:
        log.debug("Checkbox sweep failed: %s", _first_line(exc))
        return
    if ticked:
        log.info("No privacy checkbox found; checked %d open checkbox(es)", ticked)
