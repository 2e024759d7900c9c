"""
Browser session ownership and liveness.

The run owns exactly one Playwright page; components borrow it. Login is not
automated: the persistent profile in ``browser.user_data_dir`` is expected to
hold an already signed-in session.
"""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from easyapply.config import ROOT_DIR
from easyapply.log import get_logger
from easyapply.models import SessionState

log = get_logger(__name__)

_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class SessionLostError(RuntimeError):
    """The browser session is gone; nothing else in this run can proceed."""


class SessionMonitor:
    def __init__(self, page: Any) -> None:
        self.page = page

    def state(self) -> SessionState:
        try:
            if self.page.is_closed():
                return SessionState.INVALID
            _ = self.page.url
            self.page.title()
        except PlaywrightError as exc:
            log.debug("Session probe failed: %s", exc)
            return SessionState.INVALID
        return SessionState.VALID

    def is_valid(self) -> bool:
        return self.state() is SessionState.VALID

    def require(self, doing: str) -> None:
        """Raise SessionLostError unless the page is alive."""
        if not self.is_valid():
            log.error("Browser session lost before %s", doing)
            raise SessionLostError(f"browser session lost before {doing}")


@contextmanager
def open_session(
    *,
    headless: bool = False,
    user_data_dir: str | Path = "browser_data",
    slow_mo: float = 0,
    default_timeout_ms: int = 20_000,
) -> Iterator[Any]:
    """Launch Chromium with a persistent profile and yield its page."""
    profile_dir = Path(user_data_dir)
    if not profile_dir.is_absolute():
        profile_dir = ROOT_DIR / profile_dir
    profile_dir.mkdir(parents=True, exist_ok=True)

    with sync_playwright() as p:
        context = p.chromium.launch_persistent_context(
            user_data_dir=str(profile_dir),
            headless=headless,
            slow_mo=slow_mo,
            args=["--disable-blink-features=AutomationControlled"],
            viewport={"width": 1280, "height": 900},
            user_agent=_USER_AGENT,
            locale="en-US",
        )
        page = context.pages[0] if context.pages else context.new_page()
        page.set_default_timeout(default_timeout_ms)
        log.info("Browser session opened (headless=%s, profile=%s)", headless, profile_dir.name)
        try:
            yield page
        finally:
            try:
                context.close()
            except PlaywrightError as exc:
                log.debug("Context already closed: %s", exc)
            log.info("Browser session closed")
