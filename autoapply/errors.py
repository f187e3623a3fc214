"""Exception types raised by the apply engine."""
from __future__ import annotations


class ApplyError(Exception):
    """Base class for errors raised while applying to listings."""


class CandidateError(ApplyError):
    """The candidate record is missing or cannot be read."""


class ListingFatal(ApplyError):
    """Aborts the current listing; the run continues with the next one."""


class ApplyButtonNotFound(ListingFatal):
    def __init__(self, label: str) -> None:
        super().__init__(f"'{label}' button not found")
        self.label = label


class FormNotRevealed(ListingFatal):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Application form did not appear within {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class SubmitNotFound(ListingFatal):
    def __init__(self, label: str) -> None:
        super().__init__(f"Submit button not found ('{label}')")
        self.label = label
