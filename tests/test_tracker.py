"""Tracking service client: fail-open check, outcome POST, pre-flight."""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from easyapply import retry as retry_module
from easyapply.models import ApplicationOutcome, FailureReason, JobListing, OutcomeStatus, Provider
from easyapply.tracker import TrackingClient, outcome_payload


def response(status=200, json_data=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data
    if not resp.ok:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    return s


@pytest.fixture
def client(session):
    return TrackingClient("http://tracker.local:5070/", timeout=2, session=session)


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(retry_module.time, "sleep", lambda s: None)


LISTING = JobListing(
    title="Backend Engineer", company="Acme", job_id="abc/1",
    url="https://jobs.example/jobs/1", provider=Provider.INDEED,
)


class TestPreviouslyApplied:
    def test_true_and_false(self, client, session):
        session.get.return_value = response(json_data=True)
        assert client.is_previously_applied("abc/1") is True
        session.get.assert_called_with("http://tracker.local:5070/api/jobs/check/abc%2F1", timeout=2)

        session.get.return_value = response(json_data=False)
        assert client.is_previously_applied("abc/1") is False

    @pytest.mark.parametrize("failure", [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
    ])
    def test_network_failure_fails_open(self, client, session, failure):
        session.get.side_effect = failure
        assert client.is_previously_applied("1") is False
        assert session.get.call_count == 1

    def test_http_error_fails_open(self, client, session):
        session.get.return_value = response(status=500, json_data=True)
        assert client.is_previously_applied("1") is False

    def test_garbage_body_fails_open(self, client, session):
        session.get.return_value = response(json_data=ValueError("not json"))
        assert client.is_previously_applied("1") is False


class TestRecordOutcome:
    def test_payload_shape(self):
        done = datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)
        outcome = ApplicationOutcome(LISTING, OutcomeStatus.APPLIED,
                                     completed_at=done)

        assert outcome_payload(outcome) == {
            "JobTitle": "Backend Engineer",
            "Company": "Acme",
            "JobId": "abc/1",
            "Url": "https://jobs.example/jobs/1",
            "Provider": "Indeed",
            "AppliedDate": "2025-03-01T12:30:00Z",
            "Success": True,
        }

    def test_posts_failed_outcome(self, client, session):
        session.post.return_value = response(status=201)
        outcome = ApplicationOutcome.failed(LISTING, FailureReason.NO_SUBMIT_BUTTON)

        assert client.record_outcome(outcome) is True
        url = session.post.call_args.args[0]
        body = session.post.call_args.kwargs["json"]
        assert url == "http://tracker.local:5070/api/jobs"
        assert body["Success"] is False

    def test_rejection_is_logged_not_retried(self, client, session):
        session.post.return_value = response(status=400, text="bad")
        assert client.record_outcome(ApplicationOutcome.applied(LISTING)) is False
        assert session.post.call_count == 1

    def test_network_error_is_not_raised(self, client, session):
        session.post.side_effect = requests.ConnectionError("refused")
        assert client.record_outcome(ApplicationOutcome.applied(LISTING)) is False


class TestConnection:
    def test_ok(self, client, session):
        session.get.return_value = response(json_data={"Success": True, "Message": "up", "Count": 12})

        status = client.test_connection()

        assert status.ok and status.count == 12 and status.message == "up"
        session.get.assert_called_with("http://tracker.local:5070/api/jobs/test-connection", timeout=2)

    def test_camel_case_keys(self, client, session):
        session.get.return_value = response(json_data={"success": True, "message": "up", "count": 0})
        assert client.test_connection().ok

    def test_service_reports_failure(self, client, session):
        session.get.return_value = response(json_data={"Success": False, "Message": "db down"})

        status = client.test_connection()

        assert not status.ok and status.message == "db down"

    def test_unreachable_after_retries(self, client, session):
        session.get.side_effect = requests.ConnectionError("refused")

        status = client.test_connection()

        assert not status.ok
        assert session.get.call_count == 3

    def test_http_error_is_not_retried(self, client, session):
        session.get.return_value = response(status=503)

        assert not client.test_connection().ok
        assert session.get.call_count == 1
