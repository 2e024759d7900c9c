import pytest

from easyapply import retry as retry_module
from easyapply.retry import retry


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(retry_module.time, "sleep", calls.append)
    return calls


class TestRetry:
    def test_recovers_after_transient_errors(self, sleeps):
        attempts = []

        @retry(max_attempts=3, base_delay=1.0, jitter=False)
        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ConnectionError("reset")
            return "ok"

        assert flaky() == "ok"
        assert sleeps == [1.0, 2.0]

    def test_reraises_last_error(self, sleeps):
        @retry(max_attempts=2, jitter=False)
        def always():
            raise TimeoutError("slow")

        with pytest.raises(TimeoutError):
            always()
        assert len(sleeps) == 1

    def test_other_errors_propagate_immediately(self, sleeps):
        @retry(max_attempts=5)
        def wrong():
            raise KeyError("x")

        with pytest.raises(KeyError):
            wrong()
        assert sleeps == []

    def test_delay_is_capped(self, sleeps):
        @retry(max_attempts=4, base_delay=5.0, max_delay=8.0, jitter=False)
        def always():
            raise OSError

        with pytest.raises(OSError):
            always()
        assert sleeps == [5.0, 8.0, 8.0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            retry(max_attempts=0)
