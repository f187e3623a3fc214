"""Fill resolved form fields from the candidate profile."""
from __future__ import annotations

import functools
from pathlib import Path
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from autoapply.log import get_logger
from autoapply.models import DEFAULT_PHONE, FieldDescriptor, FieldKind, ResolutionResult
from autoapply.resolver import NATIVE_ONLY, first_success, iter_candidates
from autoapply.widgets import Verifier, WidgetWriteProtocol, has_min_digits

log = get_logger(__name__)

INTL_PHONE_INPUT = ".iti input[type='tel']"
MIN_PHONE_DIGITS = 8


class FieldFiller:
    """Writes values into one form scope (a Page, Frame or Locator)."""

    def __init__(
        self,
        scope: Any,
        *,
        widgets: WidgetWriteProtocol | None = None,
        min_phone_digits: int = MIN_PHONE_DIGITS,
    ) -> None:
        self.scope = scope
        self.widgets = widgets or WidgetWriteProtocol()
        self.min_phone_digits = min_phone_digits

    def fill(self, descriptor: FieldDescriptor, value: str | None) -> bool:
        """Fill *descriptor* once; ``False`` means the field is not on this form."""
        if value is None:
            return False
        if descriptor.kind is FieldKind.PHONE:
            ok = self.fill_phone(descriptor, value)
        elif descriptor.kind is FieldKind.FILE:
            ok = self.upload_file(descriptor, Path(value))
        else:
            ok = self.fill_text(descriptor, value)
        if not ok:
            log.info("Field not found on form: %s", descriptor.name)
        return ok

    # ── Text ─────────────────────────────────────────────────────────────

    def fill_text(self, descriptor: FieldDescriptor, value: str) -> bool:
        candidates = iter_candidates(
            self.scope, descriptor.synonyms, fallback_selector=descriptor.fallback_selector
        )
        filled = first_success(
            functools.partial(self._write_text, descriptor, c, value) for c in candidates
        )
        return filled is not None

    def _write_text(self, descriptor: FieldDescriptor, candidate: ResolutionResult, value: str) -> ResolutionResult:
        self.widgets.write_direct(candidate.locator, value)
        log.debug("Filled %s via %s", descriptor.name, candidate.strategy.value)
        return candidate

    # ── Phone ────────────────────────────────────────────────────────────

    def _intl_phone_input(self) -> Locator | None:
        try:
            widget = self.scope.locator(INTL_PHONE_INPUT)
            return widget.first if widget.count() else None
        except PlaywrightError:
            return None

    def _write_phone(self, target: Locator, value: str, verifier: Verifier, source: str) -> bool:
        try:
            mode = self.widgets.write_verified(target, value, verifier)
        except PlaywrightError as exc:
            log.debug("Phone write failed via %s: %s", source, str(exc).split("\n")[0])
            return False
        log.info("Phone filled via %s (%s)", source, mode.value)
        return True

    def fill_phone(self, descriptor: FieldDescriptor, value: str) -> bool:
        """Write the phone number, preferring an intl-tel-input widget.

        The widget is tried once. If it is absent or rejects the write, each
        resolved element is tried in turn with its own locator.
        """
        value = value or DEFAULT_PHONE
        verifier = has_min_digits(self.min_phone_digits)

        widget = self._intl_phone_input()
        if widget is not None and self._write_phone(widget, value, verifier, "intl-tel-input"):
            return True

        for candidate in iter_candidates(
            self.scope, descriptor.synonyms, fallback_selector=descriptor.fallback_selector
        ):
            if self._write_phone(candidate.locator, value, verifier, candidate.strategy.value):
                return True
        return False

    # ── File upload ──────────────────────────────────────────────────────

    def upload_file(self, descriptor: FieldDescriptor, path: Path) -> bool:
        if not path.is_file():
            log.warning("CV file not found: %s", path)
            return False

        labelled = iter_candidates(self.scope, descriptor.synonyms, strategies=NATIVE_ONLY)
        if first_success(functools.partial(self._set_file, c.locator, path) for c in labelled):
            log.info("CV uploaded: %s", path.name)
            return True

        if not descriptor.fallback_selector:
            return False
        inputs = self.scope.locator(descriptor.fallback_selector)
        nth = (functools.partial(self._set_file, inputs.nth(i), path) for i in range(inputs.count()))
        if first_success(nth):
            log.info("CV uploaded: %s", path.name)
            return True
        return False

    @staticmethod
    def _set_file(target: Locator, path: Path) -> bool:
        target.set_input_files(str(path))
        return True
