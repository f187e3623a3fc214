"""Write values into script-controlled inputs.

Masked and reactive inputs (phone masks, intl-tel-input, React controlled
fields) keep their own state and may ignore a plain ``fill``. They are
written with simulated typing first; when the read-back value does not pass
verification, the value is set directly and ``input``/``change``/``blur``
are dispatched so the widget recomputes its state.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from autoapply.log import get_logger

log = get_logger(__name__)

Verifier = Callable[[str], bool]

_NON_DIGIT = re.compile(r"\D")

_SYNTHETIC_WRITE_JS = """(el, value) => {
    el.focus();
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
    el.dispatchEvent(new Event('blur', { bubbles: true }));
}"""


class WriteMode(str, Enum):
    DIRECT = "direct"
    TYPED = "typed"
    SYNTHETIC = "synthetic"


def digit_count(value: str | None) -> int:
    return len(_NON_DIGIT.sub("", value or ""))


def has_min_digits(minimum: int = 8) -> Verifier:
    """Verifier accepting values with at least *minimum* digits."""

    def verify(value: str) -> bool:
        return digit_count(value) >= minimum

    return verify


@dataclass
class WidgetWriteProtocol:
    key_delay_ms: int = 60

    def write_direct(self, target: Locator, value: str) -> WriteMode:
        target.fill(value)
        return WriteMode.DIRECT

    def write_typed(self, target: Locator, value: str) -> WriteMode:
        target.click()
        for select_all in ("Control+A", "Meta+A"):
            try:
                target.press(select_all)
            except PlaywrightError:
                pass
        target.press("Backspace")
        target.press_sequentially(value, delay=self.key_delay_ms)
        return WriteMode.TYPED

    def write_synthetic(self, target: Locator, value: str) -> WriteMode:
        target.evaluate(_SYNTHETIC_WRITE_JS, value)
        return WriteMode.SYNTHETIC

    def verify(self, target: Locator, verifier: Verifier) -> bool:
        try:
            return verifier(target.input_value())
        except PlaywrightError:
            return False

    def write_verified(self, target: Locator, value: str, verifier: Verifier) -> WriteMode:
        """Type *value*; fall back to one synthetic-event write if unverified.

        Raises :class:`playwright.sync_api.Error` only when the synthetic
        write itself fails, i.e. the element is gone.
        """
        try:
            self.write_typed(target, value)
            if self.verify(target, verifier):
                return WriteMode.TYPED
            log.debug("Typed value did not verify; dispatching synthetic events")
        except PlaywrightError as exc:
            log.debug("Typed write failed (%s); dispatching synthetic events", str(exc).split("\n")[0])
        return self.write_synthetic(target, value)
