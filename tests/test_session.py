import pytest

from easyapply.models import SessionState
from easyapply.session import SessionLostError, SessionMonitor
from tests.fakes import FakePage


class TestSessionMonitor:
    def test_live_page_is_valid(self):
        monitor = SessionMonitor(FakePage())
        assert monitor.state() is SessionState.VALID
        monitor.require("clicking apply")

    def test_closed_page_is_invalid(self):
        page = FakePage()
        page.closed = True
        monitor = SessionMonitor(page)

        assert not monitor.is_valid()
        with pytest.raises(SessionLostError, match="clicking apply"):
            monitor.require("clicking apply")

    def test_probe_error_is_invalid(self, monkeypatch):
        from playwright.sync_api import Error as PlaywrightError

        page = FakePage()

        def boom():
            raise PlaywrightError("Target crashed")

        monkeypatch.setattr(page, "title", boom)
        assert SessionMonitor(page).state() is SessionState.INVALID
