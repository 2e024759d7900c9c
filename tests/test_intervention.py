import pytest

from easyapply.intervention import (
    AutoApproveGate, ConsoleGate, DeclineGate, InterventionDeclined, InterventionRequest,
)
from easyapply.models import JobListing, Provider

LISTING = JobListing(title="Data Engineer", company="Initech", job_id="7",
                     url="https://jobs.example/jobs/7", provider=Provider.DICE)
REQUEST = InterventionRequest(LISTING, "2 required question(s) unanswered",
                              fields=("Years of Python", "Visa status"), step=2)


class TestConsoleGate:
    def test_enter_acknowledges(self, capsys):
        prompts = []
        ConsoleGate(prompt=lambda text: prompts.append(text) or "").await_human_ack(REQUEST)

        out = capsys.readouterr().out
        assert "MANUAL INTERVENTION REQUIRED" in out
        assert "Data Engineer @ Initech (Dice)" in out
        assert "Years of Python" in out and "Visa status" in out
        assert len(prompts) == 1

    @pytest.mark.parametrize("answer", ["s", "skip", " S "])
    def test_skip_declines(self, answer):
        with pytest.raises(InterventionDeclined, match="skipped"):
            ConsoleGate(prompt=lambda text: answer).await_human_ack(REQUEST)

    def test_closed_stdin_declines(self):
        def eof(text):
            raise EOFError

        with pytest.raises(InterventionDeclined, match="no operator"):
            ConsoleGate(prompt=eof).await_human_ack(REQUEST)


class TestOtherGates:
    def test_decline_gate_names_fields(self):
        with pytest.raises(InterventionDeclined, match="Years of Python, Visa status"):
            DeclineGate().await_human_ack(REQUEST)

    def test_auto_approve_records_and_calls_back(self):
        seen = []
        gate = AutoApproveGate(on_request=seen.append)

        gate.await_human_ack(REQUEST)

        assert gate.requests == [REQUEST]
        assert seen == [REQUEST]
