"""
Per-job application state machine.

Start → Skipped (previously applied), or
Start → OpenDetails → ClickApply → FormStep* → ReviewOrSubmit → Submitted → Closed,
with Failed reachable from every active state. A failing job is cleaned up
and recorded; only a lost browser session escapes ``apply``.
"""
from __future__ import annotations

import hashlib
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from easyapply.fields import FieldSnapshot, question_fields, unanswered
from easyapply.intervention import InterventionDeclined, InterventionGate, InterventionRequest
from easyapply.locators import Match, Resolver
from easyapply.log import get_logger
from easyapply.models import ApplicationOutcome, FailureReason, JobListing, Timeouts
from easyapply.providers import ProviderStrategy
from easyapply.session import SessionLostError, SessionMonitor

log = get_logger(__name__)


def _short(exc: BaseException) -> str:
    text = str(exc).strip().split("\n")[0]
    return (text or exc.__class__.__name__)[:150]


class ApplicationStateMachine:
    def __init__(
        self,
        page: Any,
        strategy: ProviderStrategy,
        resolver: Resolver,
        gate: InterventionGate,
        *,
        monitor: SessionMonitor | None = None,
        timeouts: Timeouts | None = None,
        max_form_steps: int = 12,
    ) -> None:
        self.page = page
        self.strategy = strategy
        self.resolver = resolver
        self.gate = gate
        self.monitor = monitor or SessionMonitor(page)
        self.timeouts = timeouts or Timeouts()
        self.max_form_steps = max_form_steps
        self.interventions = 0

    def apply(self, listing: JobListing) -> ApplicationOutcome:
        if listing.previously_applied:
            return ApplicationOutcome.skipped(listing, "previously applied")

        log.info("Applying: %s [%s]", listing, listing.job_id)
        try:
            return self._run(listing)
        except SessionLostError:
            raise
        except InterventionDeclined as exc:
            self._cleanup()
            return ApplicationOutcome.failed(listing, FailureReason.MANUAL_INPUT_DECLINED, str(exc))
        except Exception as exc:
            log.error("  ✗ %s: %s", listing, _short(exc))
            log.debug("Traceback for %s", listing, exc_info=True)
            if not self.monitor.is_valid():
                raise SessionLostError(f"browser session lost while applying to {listing}") from exc
            self._cleanup()
            return ApplicationOutcome.failed(listing, FailureReason.INTERACTION_ERROR, _short(exc))

    def _run(self, listing: JobListing) -> ApplicationOutcome:
        s, t = self.strategy, self.timeouts

        # OpenDetails
        self.monitor.require(f"opening {listing}")
        url = s.detail_url(listing)
        if not url:
            raise ValueError("listing has no detail URL")
        self.page.goto(url, wait_until="domcontentloaded")
        status_text = self.resolver.text_of(s.detail_status_locators) or self.resolver.page_text()
        marker = s.already_applied_marker(status_text, ignore=(listing.title, listing.company))
        if marker:
            return ApplicationOutcome.skipped(listing, f"already applied ({marker})")

        # ClickApply
        self.monitor.require("clicking apply")
        apply_control = self.resolver.resolve(s.apply_control_locators, timeout=t.apply)
        if apply_control is None:
            return ApplicationOutcome.failed(listing, FailureReason.NO_APPLY_BUTTON)
        apply_control.click()

        # FormStep*
        step = 0
        match = self._next_control()
        while match is not None and not self._is_submit(match):
            step += 1
            if step > self.max_form_steps:
                self._cleanup()
                return ApplicationOutcome.failed(
                    listing, FailureReason.FORM_STUCK,
                    f"no submit after {self.max_form_steps} steps",
                )
            if self._escalate_if_unanswered(listing, step):
                # The operator may already have advanced the form.
                match = self._next_control()
                if match is None or self._is_submit(match):
                    break
            log.debug("  Step %d: %s", step, match.concept)
            signature = self._signature()
            match.element.click()
            self.resolver.wait_until(lambda: self._signature() != signature, t.transition)
            match = self._next_control()

        # ReviewOrSubmit
        self.monitor.require("submitting")
        if match is not None and self._is_submit(match):
            submit = match.element
        else:
            submit = self.resolver.resolve(s.submit_locators, timeout=t.submit)
        if submit is None:
            self._cleanup()
            return ApplicationOutcome.failed(listing, FailureReason.NO_SUBMIT_BUTTON)
        signature = self._signature()
        submit.click()
        self.resolver.wait_until(lambda: self._signature() != signature, t.submit)

        # Submitted
        done = self.resolver.resolve(s.done_locators, timeout=t.done)
        if done is not None:
            done.click()
        else:
            log.info("  No confirmation dialog for %s; assuming it closed itself", listing)
        return ApplicationOutcome.applied(listing, f"submitted after {step} step(s)")

    # -- helpers -----------------------------------------------------------

    def _next_control(self) -> Match | None:
        """Review, else Next, else Submit: the control that moves the form on."""
        self.monitor.require("reading form step")
        return self.resolver.resolve_match(
            *self.strategy.next_or_review_locators, self.strategy.submit_locators,
            timeout=self.timeouts.control,
        )

    def _is_submit(self, match: Match) -> bool:
        return match.concept == self.strategy.submit_locators.name

    def _signature(self) -> tuple[str, str]:
        try:
            url = self.page.url
        except PlaywrightError:
            url = ""
        text = self.resolver.page_text()
        return url, hashlib.sha1(text.encode("utf-8", "replace")).hexdigest()

    def _questions(self) -> list[FieldSnapshot]:
        containers = self.resolver.find_all(self.strategy.additional_questions_locators)
        fields: list[FieldSnapshot] = []
        seen: set[str] = set()
        for container in containers:
            for f in question_fields(self.resolver, container):
                if f.group_key not in seen:
                    seen.add(f.group_key)
                    fields.append(f)
        return fields

    def _escalate_if_unanswered(self, listing: JobListing, step: int) -> bool:
        fields = self._questions()
        if not fields:
            return False
        missing = unanswered(fields)
        if not missing:
            log.info("  Additional questions already answered (%d field(s)); continuing", len(fields))
            return False

        names = tuple(f.display_name for f in missing)
        log.warning(
            "  ⚠ %s: %d required question(s) unanswered, waiting for operator",
            listing, len(missing),
        )
        self.interventions += 1
        self.gate.await_human_ack(InterventionRequest(
            listing=listing,
            reason=f"{len(missing)} required question(s) need an answer",
            fields=names,
            step=step,
        ))
        log.info("  Resuming %s after operator acknowledgement", listing)
        return True

    def _cleanup(self) -> None:
        """Best effort: leave no modal open for the next job."""
        s = self.strategy
        try:
            close = self.resolver.find(s.close_locators)
            if close is None:
                self.page.keyboard.press("Escape")
                log.info("  Sent Escape to dismiss the apply dialog")
                return
            close.element.click()
            log.info("  Closed apply dialog via %r", close.locator.selector)
            discard = self.resolver.resolve(s.discard_locators, timeout=self.timeouts.poll_interval)
            if discard is not None:
                discard.click()
        except Exception as exc:
            log.warning("  Modal cleanup failed: %s", _short(exc))
