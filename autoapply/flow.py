"""
Apply to listings one at a time.

Per listing: open the link in a fresh tab → dismiss cookies → click the apply
button (following a new tab if one opens) → upload CV → fill fields → tick
consent → submit → record in the ledger. A failure at any step ends that
listing only; every tab it opened is closed before the next one starts.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from playwright.sync_api import BrowserContext, Locator, Page
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from autoapply.config import RESUMES_DIR, Settings
from autoapply.consent import satisfy_consent
from autoapply.cookies import accept_cookies_if_present
from autoapply.errors import ApplyButtonNotFound, ApplyError, FormNotRevealed
from autoapply.fields import FormVocabulary
from autoapply.filler import FieldFiller
from autoapply.ledger import Ledger
from autoapply.log import get_logger
from autoapply.models import ApplicationRecord, CandidateProfile, Listing, ListingOutcome, OutcomeStatus
from autoapply.submit import SubmissionController
from autoapply.widgets import WidgetWriteProtocol

log = get_logger(__name__)


def _short(exc: BaseException) -> str:
    return str(exc)[:150].split("\n")[0]


class ApplicationFlow:
    def __init__(
        self,
        context: BrowserContext,
        candidate: CandidateProfile,
        ledger: Ledger,
        *,
        settings: Settings | None = None,
        vocabulary: FormVocabulary | None = None,
        resumes_dir: Path = RESUMES_DIR,
    ) -> None:
        self.context = context
        self.candidate = candidate
        self.ledger = ledger
        self.settings = settings or Settings()
        self.vocabulary = vocabulary or FormVocabulary()
        self.resumes_dir = resumes_dir
        self.widgets = WidgetWriteProtocol(key_delay_ms=self.settings.key_delay_ms)
        self.submitter = SubmissionController(
            self.vocabulary.submit_label, click_timeout_ms=self.settings.click_timeout_ms
        )

    # ── Loop ─────────────────────────────────────────────────────────────

    def apply_all(self, listings: Iterable[Listing]) -> list[ListingOutcome]:
        outcomes: list[ListingOutcome] = []
        for listing in listings:
            if self.settings.skip_applied and self.ledger.contains(listing.link):
                log.info("Skipping %s: already applied", listing.title)
                outcomes.append(ListingOutcome(listing, OutcomeStatus.SKIPPED, "Already in ledger"))
                continue
            outcomes.append(self.apply_to_listing(listing))

        applied = sum(1 for o in outcomes if o.ok)
        log.info("Processed %d listing(s), %d applied", len(outcomes), applied)
        return outcomes

    # ── One listing ──────────────────────────────────────────────────────

    def apply_to_listing(self, listing: Listing) -> ListingOutcome:
        log.info("Applying to: %s (%s)", listing.title, listing.location)
        if not listing.link:
            return ListingOutcome(listing, OutcomeStatus.FAILED, "No link for this listing")

        pages_before = list(self.context.pages)
        try:
            page = self.context.new_page()
            page.goto(listing.link, wait_until="domcontentloaded", timeout=self.settings.nav_timeout_ms)

            form_page = self.reveal_form(page)
            self.fill_form(form_page)
            satisfy_consent(
                form_page,
                yes_label=self.vocabulary.consent_yes_label,
                privacy_label=self.vocabulary.privacy_label,
            )
            self.submitter.submit(form_page)
            log.info("Application submitted for: %s", listing.title)

            self.ledger.append(ApplicationRecord.for_listing(listing))
            self._settle(form_page)
            return ListingOutcome(listing, OutcomeStatus.APPLIED)
        except (ApplyError, PlaywrightError) as exc:
            log.error("Error applying to %s: %s", listing.title, _short(exc))
            return ListingOutcome(listing, OutcomeStatus.FAILED, _short(exc))
        except Exception as exc:
            log.exception("Unexpected error applying to %s", listing.title)
            return ListingOutcome(listing, OutcomeStatus.FAILED, _short(exc))
        finally:
            self._close_new_pages(pages_before)

    def _settle(self, page: Page) -> None:
        """Let the portal process the submission; the page may already be gone."""
        try:
            page.wait_for_timeout(self.settings.settle_ms)
        except PlaywrightError as exc:
            log.debug("Form page closed after submit: %s", _short(exc))

    def _close_new_pages(self, pages_before: list[Page]) -> None:
        for p in list(self.context.pages):
            if p in pages_before:
                continue
            try:
                p.close()
            except PlaywrightError:
                pass

    # ── Steps ────────────────────────────────────────────────────────────

    def reveal_form(self, page: Page) -> Page:
        """Click the apply button and return the page holding the form."""
        accept_cookies_if_present(
            page, self.vocabulary.cookie_labels, timeout_ms=self.settings.cookie_timeout_ms
        )
        form_page = self._click_apply(page)
        form_page.wait_for_load_state("domcontentloaded")
        self._wait_for_form(form_page)
        return form_page

    def _apply_selectors(self) -> list[str]:
        label = json.dumps(self.vocabulary.apply_label)
        return [
            f"a:has-text({label})",
            f"button:has-text({label})",
            f"[role='button']:has-text({label})",
        ]

    def _click_apply(self, page: Page) -> Page:
        for selector in self._apply_selectors():
            button = page.locator(selector)
            if not button.count():
                continue
            try:
                with self.context.expect_page(timeout=self.settings.new_tab_timeout_ms) as new_page_info:
                    button.first.click()
                new_page = new_page_info.value
            except PlaywrightTimeoutError:
                log.debug("No new tab opened; form expected on the listing page")
                return page
            log.info("Application form opened in a new tab")
            return new_page
        raise ApplyButtonNotFound(self.vocabulary.apply_label)

    def _form_signal(self, page: Page) -> Locator:
        """Anything whose appearance means the form is on screen.

        A name field (wired label or bare text), the apply button, or any
        submit button.
        """
        signal = page.locator(self._apply_selectors()[1]).or_(page.locator("[type='submit']"))
        for synonym in self.vocabulary.form_signals():
            signal = signal.or_(page.get_by_label(synonym)).or_(page.get_by_text(synonym))
        return signal

    def _wait_for_form(self, page: Page) -> None:
        visible = self._form_signal(page).filter(visible=True)
        try:
            visible.first.wait_for(state="visible", timeout=self.settings.form_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise FormNotRevealed(self.settings.form_timeout_ms) from exc

    def fill_form(self, form_page: Page) -> dict[str, bool]:
        """Upload the CV then fill every field in declared order."""
        filler = FieldFiller(form_page, widgets=self.widgets)
        filled: dict[str, bool] = {}

        cv = self.vocabulary.cv_upload
        if self.candidate.cv_file:
            filled[cv.name] = filler.fill(cv, str(self.resumes_dir / self.candidate.cv_file))
        else:
            log.warning("No CV file in candidate record; skipping upload")
            filled[cv.name] = False

        for descriptor in self.vocabulary.fields:
            filled[descriptor.name] = filler.fill(descriptor, self.candidate.value_for(descriptor.name))

        log.debug("Fields filled: %s", ", ".join(n for n, ok in filled.items() if ok) or "none")
        return filled
