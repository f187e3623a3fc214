"""Find and press the form's submit action."""
from __future__ import annotations

import functools
import json
import re
from typing import Any, Callable, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from autoapply.errors import SubmitNotFound
from autoapply.log import get_logger
from autoapply.resolver import first_success

log = get_logger(__name__)

ButtonFinder = Callable[[Any, str], Optional[Locator]]


def _first(locator: Locator) -> Locator | None:
    return locator.first if locator.count() else None


def by_accessible_name(scope: Any, label: str) -> Locator | None:
    return _first(scope.get_by_role("button", name=re.compile(re.escape(label), re.I)))


def by_button_text(scope: Any, label: str) -> Locator | None:
    quoted = json.dumps(label)
    for selector in (f"button:has-text({quoted})", f"[type='submit']:has-text({quoted})"):
        found = _first(scope.locator(selector))
        if found is not None:
            return found
    return None


def any_submit_button(scope: Any, label: str) -> Locator | None:
    return _first(scope.locator("button[type='submit']"))


FINDERS: tuple[ButtonFinder, ...] = (by_accessible_name, by_button_text, any_submit_button)


class SubmissionController:
    def __init__(
        self,
        label: str = "Solliciteer",
        *,
        click_timeout_ms: int = 10_000,
        finders: tuple[ButtonFinder, ...] = FINDERS,
    ) -> None:
        self.label = label
        self.click_timeout_ms = click_timeout_ms
        self.finders = finders

    def find(self, scope: Any) -> Locator | None:
        return first_success(functools.partial(f, scope, self.label) for f in self.finders)

    def submit(self, scope: Any) -> bool:
        """Click the submit button.

        A click attempt counts as submitted even when the click itself times
        out; no success page is checked. Raises :class:`SubmitNotFound` when
        no button can be found at all.
        """
        button = self.find(scope)
        if button is None:
            raise SubmitNotFound(self.label)
        try:
            button.scroll_into_view_if_needed(timeout=self.click_timeout_ms)
        except PlaywrightError:
            pass
        try:
            button.click(timeout=self.click_timeout_ms)
        except PlaywrightError as exc:
            log.warning("Submit click did not complete: %s", str(exc).split("\n")[0])
        return True
