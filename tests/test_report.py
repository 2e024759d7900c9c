from datetime import datetime, timezone

from easyapply.locators import Locator, LocatorTelemetry, Match
from easyapply.models import ApplicationOutcome, FailureReason, JobListing, Provider, RunSummary
from easyapply.report import build_run_report, write_run_report

NOW = datetime(2025, 3, 1, 9, 15, 0, tzinfo=timezone.utc)


def listing(job_id, title="Backend Engineer"):
    return JobListing(title=title, company="Acme", job_id=job_id,
                      url=f"https://jobs.example/jobs/{job_id}", provider=Provider.DICE)


def summary():
    s = RunSummary(found=4)
    s.add(ApplicationOutcome.applied(listing("1"), "submitted after 2 step(s)"))
    s.add(ApplicationOutcome.skipped(listing("2"), "already applied (Applied)"))
    s.add(ApplicationOutcome.failed(listing("3", "Lead | Platform"), FailureReason.FORM_STUCK))
    s.stopped_early = "stop requested"
    return s


class TestBuildRunReport:
    def test_sections(self):
        telemetry = LocatorTelemetry()
        telemetry.record_hit(Match("apply control", Locator("button.apply"), None, 0))
        telemetry.record_hit(Match("apply control", Locator("button.apply"), None, 0))
        telemetry.record_miss("submit")

        md = build_run_report(summary(), provider="Dice", job_title="Python", location="Remote",
                              telemetry=telemetry, now=NOW)

        assert md.startswith("# Easy Apply Run — 2025-03-01 09:15 UTC")
        assert "**4** found | **1** applied | **1** skipped | **1** failed" in md
        assert "success rate **50%**" in md
        assert "> Run stopped early: stop requested" in md
        assert "Lead / Platform" in md
        assert "- **form-stuck** ×1" in md
        assert "| apply control | `button.apply` | 2 |" in md
        assert "| submit | _not found_ | 1 |" in md

    def test_empty_run_has_no_tables(self):
        md = build_run_report(RunSummary(), provider="Dice", job_title="x", location="y", now=NOW)
        assert "## Jobs" not in md
        assert "## Failures" not in md
        assert "## Locator health" not in md


def test_write_run_report(tmp_path):
    path = write_run_report("# hi", reports_dir=tmp_path / "reports", now=NOW)

    assert path.name == "run_2025-03-01_091500.md"
    assert path.read_text(encoding="utf-8") == "# hi"
