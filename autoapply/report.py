"""Markdown summary of one apply run."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from autoapply.config import REPORTS_DIR
from autoapply.log import get_logger
from autoapply.models import ListingOutcome, OutcomeStatus

log = get_logger(__name__)

_FAIL_REASONS: dict[str, str] = {
    "executable doesn't exist": "Browser not installed, run `playwright install chromium`",
    "button not found": "No apply button on the listing page",
    "did not appear": "Application form never appeared",
    "submit button not found": "No submit button on the form",
    "net::err": "Listing page could not be loaded",
    "timeout": "Page timed out",
    "no link": "Listing has no link",
}

_BADGES: dict[OutcomeStatus, str] = {
    OutcomeStatus.APPLIED: "✅",
    OutcomeStatus.FAILED: "❌",
    OutcomeStatus.SKIPPED: "⏭️",
}


def short_reason(reason: str) -> str:
    low = reason.lower()
    # Longest key first so the more specific phrase wins.
    for key in sorted(_FAIL_REASONS, key=len, reverse=True):
        if key in low:
            return _FAIL_REASONS[key]
    return reason[:80] + ("…" if len(reason) > 80 else "")


def _cell(text: str) -> str:
    """Make *text* safe inside one markdown table cell."""
    return " ".join(text.split()).replace("|", "\\|")


def build_run_report(outcomes: list[ListingOutcome], *, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    counts = {status: 0 for status in OutcomeStatus}
    for o in outcomes:
        counts[o.status] += 1

    lines: list[str] = [f"# Apply Run {now.strftime('%Y-%m-%d %H:%M')} UTC", ""]
    lines.append(
        f"**{len(outcomes)}** listings | **{counts[OutcomeStatus.APPLIED]}** applied"
        f" | **{counts[OutcomeStatus.FAILED]}** failed | **{counts[OutcomeStatus.SKIPPED]}** skipped"
    )
    lines.append("")

    if outcomes:
        lines.append("| # | Vacancy | Location | Status | Note |")
        lines.append("|--:|---------|----------|--------|------|")
        for i, o in enumerate(outcomes, 1):
            title = o.listing.title[:40] + ("…" if len(o.listing.title) > 40 else "")
            title = _cell(title)
            title = f"[{title or 'Untitled'}]({o.listing.link})" if o.listing.link else title
            note = short_reason(o.reason) if o.status is OutcomeStatus.FAILED else o.reason
            lines.append(
                f"| {i} | {title} | {_cell(o.listing.location) or '-'} "
                f"| {_BADGES[o.status]} {o.status.value} | {_cell(note)} |"
            )
        lines.append("")

    log.info(
        "Built run report: %d applied, %d failed, %d skipped",
        counts[OutcomeStatus.APPLIED], counts[OutcomeStatus.FAILED], counts[OutcomeStatus.SKIPPED],
    )
    return "\n".join(lines)


def write_run_report(content: str, reports_dir: Path = REPORTS_DIR) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = reports_dir / f"run_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
