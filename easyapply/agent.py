"""
Easy-apply run loop.

Runs: pre-flight → open browser → discover → apply one job at a time → record → report.
"""
from __future__ import annotations

import threading
from contextlib import AbstractContextManager, ExitStack
from functools import partial
from typing import Any, Callable

from playwright.sync_api import Error as PlaywrightError

from easyapply.applicator import ApplicationStateMachine
from easyapply.config import load_settings
from easyapply.discovery import JobDiscovery
from easyapply.intervention import ConsoleGate, InterventionGate
from easyapply.locators import LocatorTelemetry, Resolver
from easyapply.log import get_logger
from easyapply.models import (
    ApplicationOutcome, FailureReason, OutcomeStatus, RunCursor, RunSummary, Timeouts,
)
from easyapply.providers import get_provider
from easyapply.report import build_run_report, write_run_report
from easyapply.session import SessionLostError, SessionMonitor, open_session
from easyapply.tracker import TrackingClient

log = get_logger(__name__)

SessionFactory = Callable[[], AbstractContextManager]


class PreflightError(RuntimeError):
    """The run cannot start: nothing has been attempted."""


def _log_outcome(outcome: ApplicationOutcome) -> None:
    listing = outcome.listing
    if outcome.status is OutcomeStatus.APPLIED:
        log.info("  ✓ Applied: %s", listing)
    elif outcome.status is OutcomeStatus.SKIPPED:
        log.info("  ↷ Skipped: %s (%s)", listing, outcome.describe())
    else:
        log.warning("  ✗ Failed: %s (%s)", listing, outcome.describe())


def run(
    settings: dict[str, Any] | None = None,
    *,
    job_title: str | None = None,
    location: str | None = None,
    tracker: TrackingClient | None = None,
    gate: InterventionGate | None = None,
    stop_event: threading.Event | None = None,
    session_factory: SessionFactory | None = None,
    resolver_factory: Callable[..., Resolver] | None = None,
) -> RunSummary:
    settings = settings or load_settings()
    strategy = get_provider(settings["provider"])
    job_title = job_title or settings["search"]["job_title"]
    location = location or settings["search"]["location"]
    limits = settings["limits"]
    timeouts = Timeouts.from_settings(settings)
    tracker = tracker or TrackingClient(
        settings["tracker"]["base_url"], timeout=float(settings["tracker"]["timeout"])
    )
    gate = gate or ConsoleGate()
    stop_event = stop_event or threading.Event()
    browser = settings["browser"]
    session_factory = session_factory or partial(
        open_session,
        headless=bool(browser["headless"]),
        user_data_dir=browser["user_data_dir"],
        slow_mo=float(browser.get("slow_mo", 0)),
    )
    resolver_factory = resolver_factory or Resolver

    # 1. Pre-flight: never do work that cannot be recorded
    status = tracker.test_connection()
    if not status.ok:
        raise PreflightError(f"tracking service check failed: {status.message or 'unreachable'}")
    log.info("Tracking service OK (%d application(s) on record)", status.count)

    summary = RunSummary()
    telemetry = LocatorTelemetry()
    max_applications = int(limits["max_applications"])

    with ExitStack() as stack:
        # 2. Browser session, owned by this run
        try:
            page = stack.enter_context(session_factory())
        except PlaywrightError as exc:
            raise PreflightError(f"could not open browser session: {exc}") from exc
        resolver = resolver_factory(page, telemetry=telemetry, poll_interval=timeouts.poll_interval)
        monitor = SessionMonitor(page)

        # 3. Discover
        discovery = JobDiscovery(
            page, strategy, resolver, tracker,
            monitor=monitor, timeouts=timeouts, max_pages=int(limits["max_pages"]),
        )
        try:
            listings = discovery.discover(job_title, location)
        except SessionLostError as exc:
            log.error("Discovery aborted: %s", exc)
            summary.stopped_early = "browser session lost during discovery"
            listings = []
        summary.found = len(listings)

        # 4. Apply, strictly one job at a time
        machine = ApplicationStateMachine(
            page, strategy, resolver, gate,
            monitor=monitor, timeouts=timeouts, max_form_steps=int(limits["max_form_steps"]),
        )
        cursor = RunCursor()
        for listing in listings:
            if stop_event.is_set():
                summary.stopped_early = "stop requested"
                log.info("Stop requested; %d listing(s) left unprocessed", summary.found - len(summary.outcomes))
                break
            if cursor.attempted >= max_applications:
                summary.stopped_early = f"application cap reached ({max_applications})"
                log.info("Reached the cap of %d application(s)", max_applications)
                break

            lost = False
            try:
                outcome = machine.apply(listing)
            except SessionLostError as exc:
                outcome = ApplicationOutcome.failed(listing, FailureReason.SESSION_LOST, str(exc))
                lost = True

            summary.add(outcome)
            _log_outcome(outcome)
            if outcome.status is not OutcomeStatus.SKIPPED:
                cursor.attempted += 1
                tracker.record_outcome(outcome)
            if lost:
                summary.stopped_early = "browser session lost"
                log.error("Browser session lost; stopping after %d job(s)", len(summary.outcomes))
                break

    # 5. Report
    if settings.get("report", {}).get("enabled", True):
        content = build_run_report(
            summary, provider=strategy.name, job_title=job_title, location=location,
            telemetry=telemetry,
        )
        try:
            summary.report_path = str(write_run_report(content))
        except OSError as exc:
            log.error("Could not write report: %s", exc)

    log.info(
        "Run complete — found=%d, applied=%d, skipped=%d, failed=%d",
        summary.found, summary.applied, summary.skipped, summary.failed,
    )
    return summary
