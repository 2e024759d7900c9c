"""Markdown report for one run: counts, per-job outcomes, locator health."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from easyapply.config import REPORTS_DIR
from easyapply.locators import LocatorTelemetry
from easyapply.log import get_logger
from easyapply.models import FailureReason, OutcomeStatus, RunSummary

log = get_logger(__name__)

_FAILURE_HINTS: dict[FailureReason, str] = {
    FailureReason.NO_APPLY_BUTTON: "No apply control found; the posting may have moved off-site",
    FailureReason.NO_SUBMIT_BUTTON: "Reached the end of the form without a Submit control",
    FailureReason.FORM_STUCK: "Form never reached Submit; a required answer is probably missing",
    FailureReason.MANUAL_INPUT_DECLINED: "Needed answers nobody provided",
    FailureReason.INTERACTION_ERROR: "Browser interaction failed",
    FailureReason.SESSION_LOST: "Browser session ended; the run stopped here",
}

_BADGES: dict[OutcomeStatus, str] = {
    OutcomeStatus.APPLIED: "✅",
    OutcomeStatus.SKIPPED: "↷",
    OutcomeStatus.FAILED: "❌",
}


def _clip(text: str, width: int) -> str:
    text = text.replace("|", "/")
    return text[:width] + ("…" if len(text) > width else "")


def build_run_report(
    summary: RunSummary,
    *,
    provider: str,
    job_title: str,
    location: str,
    telemetry: LocatorTelemetry | None = None,
    now: datetime | None = None,
) -> str:
    now = now or datetime.now(timezone.utc)
    lines: list[str] = [
        f"# Easy Apply Run — {now.strftime('%Y-%m-%d %H:%M')} UTC",
        "",
        f"**{provider}** · _{job_title}_ in _{location}_",
        "",
        f"**{summary.found}** found | **{summary.applied}** applied | "
        f"**{summary.skipped}** skipped | **{summary.failed}** failed | "
        f"success rate **{summary.success_rate:.0%}**",
        "",
    ]
    if summary.stopped_early:
        lines += [f"> Run stopped early: {summary.stopped_early}", ""]

    if summary.outcomes:
        lines += [
            "## Jobs",
            "",
            "| # | | Role | Company | Result | Link |",
            "|--:|-|------|---------|--------|------|",
        ]
        for i, o in enumerate(summary.outcomes, 1):
            listing = o.listing
            link = f"[open]({listing.url})" if listing.url else "—"
            lines.append(
                f"| {i} | {_BADGES[o.status]} | {_clip(listing.title, 40)} | "
                f"{_clip(listing.company, 22)} | {_clip(o.describe(), 60)} | {link} |"
            )
        lines.append("")

    reasons = sorted({o.failure_reason for o in summary.outcomes if o.failure_reason}, key=lambda r: r.value)
    if reasons:
        lines += ["## Failures", ""]
        for reason in reasons:
            n = sum(1 for o in summary.outcomes if o.failure_reason is reason)
            lines.append(f"- **{reason.value}** ×{n}: {_FAILURE_HINTS[reason]}")
        lines.append("")

    if telemetry is not None and (telemetry.hits or telemetry.misses):
        lines += ["## Locator health", "", "| Concept | Locator | Hits |", "|---------|---------|-----:|"]
        for concept, selector, n in telemetry.rows():
            lines.append(f"| {concept} | `{_clip(selector, 70)}` | {n} |")
        for concept, n in sorted(telemetry.misses.items()):
            lines.append(f"| {concept} | _not found_ | {n} |")
        lines.append("")

    return "\n".join(lines)


def write_run_report(content: str, *, reports_dir: Path = REPORTS_DIR, now: datetime | None = None) -> Path:
    now = now or datetime.now(timezone.utc)
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / f"run_{now.strftime('%Y-%m-%d_%H%M%S')}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
