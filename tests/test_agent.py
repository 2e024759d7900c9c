"""Run loop: pre-flight, caps, stop signal, session loss, recording."""
import threading
from contextlib import nullcontext

import pytest

from easyapply import agent
from easyapply.agent import PreflightError, run
from easyapply.config import DEFAULTS, _merge
from easyapply.intervention import AutoApproveGate
from easyapply.models import FailureReason, OutcomeStatus
from tests.fakes import ApplyFlow, FakeClock, FakePage, StubTracker, job_card, make_resolver, make_strategy


@pytest.fixture(autouse=True)
def fake_provider(monkeypatch):
    monkeypatch.setattr(agent, "get_provider", lambda name: make_strategy())


def settings(**limits):
    return _merge(DEFAULTS, {"limits": limits, "report": {"enabled": False}})


def site(n_jobs=3, **flow_kwargs):
    page = FakePage({"div.card": [job_card(str(i)) for i in range(1, n_jobs + 1)]})
    flow = ApplyFlow(page, **flow_kwargs)
    return page, flow


def run_on(page, *, tracker=None, gate=None, stop_event=None, **limits):
    clock = FakeClock()
    return run(
        settings(**limits),
        tracker=tracker or StubTracker(),
        gate=gate or AutoApproveGate(),
        stop_event=stop_event,
        session_factory=lambda: nullcontext(page),
        resolver_factory=lambda p, **kw: make_resolver(p, clock, **kw),
    )


class TestPreflight:
    def test_unreachable_tracker_aborts_before_browser(self):
        opened = []

        with pytest.raises(PreflightError):
            run(
                settings(),
                tracker=StubTracker(reachable=False),
                session_factory=lambda: opened.append(1) or nullcontext(FakePage()),
            )
        assert opened == []


class TestRunLoop:
    def test_applies_to_every_listing_and_records(self):
        page, flow = site(3)
        tracker = StubTracker()

        summary = run_on(page, tracker=tracker)

        assert summary.found == 3
        assert summary.applied == 3
        assert flow.submitted == 3
        assert [o.listing.job_id for o in tracker.recorded] == ["1", "2", "3"]
        assert all(o.success for o in tracker.recorded)
        assert summary.stopped_early is None

    def test_previously_applied_is_skipped_and_not_recorded(self):
        page, flow = site(2)
        tracker = StubTracker(applied=("1",))

        summary = run_on(page, tracker=tracker)

        assert [o.status for o in summary.outcomes] == [OutcomeStatus.SKIPPED, OutcomeStatus.APPLIED]
        assert [o.listing.job_id for o in tracker.recorded] == ["2"]
        assert flow.submitted == 1

    def test_failure_does_not_stop_the_batch(self):
        page, flow = site(2, explode_at_step=1)
        tracker = StubTracker()

        summary = run_on(page, tracker=tracker)

        assert [o.status for o in summary.outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.APPLIED]
        assert page.gotos[-1] == "https://jobs.example/jobs/2"
        assert [o.success for o in tracker.recorded] == [False, True]
        assert summary.success_rate == 0.5

    def test_application_cap(self):
        page, flow = site(5)

        summary = run_on(page, max_applications=2)

        assert summary.applied == 2
        assert summary.found == 5
        assert "cap" in summary.stopped_early

    def test_stop_signal_is_honoured_between_jobs(self):
        page, flow = site(3)
        stop = threading.Event()
        flow.submit_button.on_click = lambda: (stop.set(), flow._submit())

        summary = run_on(page, stop_event=stop)

        assert len(summary.outcomes) == 1
        assert summary.outcomes[0].success
        assert summary.stopped_early == "stop requested"

    def test_lost_session_ends_run_but_keeps_outcomes(self):
        page, flow = site(3)
        tracker = StubTracker()
        attempts = []

        def open_dialog():
            attempts.append(1)
            if len(attempts) == 2:
                page.closed = True
            else:
                flow._open()

        flow.apply_button.on_click = open_dialog

        summary = run_on(page, tracker=tracker)

        assert [o.status for o in summary.outcomes] == [OutcomeStatus.APPLIED, OutcomeStatus.FAILED]
        assert summary.outcomes[1].failure_reason is FailureReason.SESSION_LOST
        assert len(tracker.recorded) == 2
        assert summary.stopped_early == "browser session lost"

    def test_no_cards_is_a_clean_empty_run(self):
        summary = run_on(FakePage())

        assert summary.found == 0
        assert summary.outcomes == []
