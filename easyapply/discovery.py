"""
Job discovery: search results → easy-apply JobListings.

LoadPage → ExtractCards → CheckPagination, looping until the page cap, a
missing/disabled Next control, or a pagination click that produces no new
cards. Zero cards after the whole fallback chain is an empty result, never an
error: an empty search and a broken selector look the same from here.
"""
from __future__ import annotations

import hashlib
import re
import uuid
from collections import Counter
from typing import Any, Protocol
from urllib.parse import parse_qs, urljoin, urlparse

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from easyapply.locators import LocatorSet, Resolver
from easyapply.log import get_logger
from easyapply.models import JobListing, RunCursor, Timeouts
from easyapply.providers import ProviderStrategy
from easyapply.retry import retry
from easyapply.session import SessionMonitor

log = get_logger(__name__)

_ID_QUERY_KEYS = ("jk", "currentJobId", "jobId", "id")
_ID_PATH_RE = re.compile(r"/(?:view|job-detail|viewjob)/([\w-]+)")


class AppliedCheck(Protocol):
    def is_previously_applied(self, job_id: str) -> bool: ...


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _id_from_url(url: str) -> str:
    if not url:
        return ""
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    for key in _ID_QUERY_KEYS:
        if query.get(key):
            return query[key][0]
    m = _ID_PATH_RE.search(parsed.path)
    return m.group(1) if m else ""


class JobDiscovery:
    def __init__(
        self,
        page: Any,
        strategy: ProviderStrategy,
        resolver: Resolver,
        tracker: AppliedCheck,
        *,
        monitor: SessionMonitor | None = None,
        timeouts: Timeouts | None = None,
        max_pages: int = 20,
    ) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self.page = page
        self.strategy = strategy
        self.resolver = resolver
        self.tracker = tracker
        self.monitor = monitor or SessionMonitor(page)
        self.timeouts = timeouts or Timeouts()
        self.max_pages = max_pages
        self.cursor = RunCursor()
        self.discarded: Counter[str] = Counter()
        self._seen: set[tuple[Any, str]] = set()
        self._processed: set[str] = set()
        self._scroll_offset = 0

    def discover(self, keywords: str, location: str) -> list[JobListing]:
        name = self.strategy.name
        self.cursor = RunCursor()
        self.discarded.clear()
        self._seen.clear()
        self._processed.clear()
        self._scroll_offset = 0

        url = self.strategy.search_url(keywords, location)
        log.info("[%s] Searching %r in %r", name, keywords, location)
        self.monitor.require("loading search results")
        try:
            self._goto(url)
        except PlaywrightError as exc:
            self.monitor.require("loading search results")
            log.error("[%s] Could not load search results: %s", name, exc)
            return []

        match = self.resolver.resolve_match(
            self.strategy.listing_card_locators, timeout=self.timeouts.cards
        )
        if match is None:
            log.warning(
                "[%s] No job cards found after %d locator(s); nothing to apply to",
                name, len(self.strategy.listing_card_locators),
            )
            return []
        card_set = self.strategy.listing_card_locators.pinned(match.locator)
        self._dismiss_banners()

        listings: list[JobListing] = []
        while self.cursor.iteration < self.max_pages:
            self.cursor.iteration += 1
            self.monitor.require("reading job cards")
            found = self.resolver.find_all(card_set)
            fresh = found[self._scroll_offset:] if self.strategy.infinite_scroll else found
            if self.strategy.infinite_scroll:
                self._scroll_offset = len(found)

            before = len(listings)
            done_before = set(self._processed)
            for card in fresh:
                try:
                    # "Load more" pagination keeps earlier cards on the page.
                    card_key = self._card_key(card)
                    if card_key in done_before:
                        continue
                    self._processed.add(card_key)
                    self.cursor.processed_cards += 1
                    listing = self._extract(card)
                except PlaywrightError as exc:
                    self.discarded["unreadable"] += 1
                    log.warning("[%s] Could not read card #%d: %s", name, self.cursor.processed_cards, exc)
                    continue
                if listing is not None:
                    listings.append(listing)
            log.info(
                "[%s] Page %d: %d card(s), %d new listing(s)",
                name, self.cursor.iteration, len(fresh), len(listings) - before,
            )

            if self.cursor.iteration >= self.max_pages:
                log.info("[%s] Reached page cap (%d)", name, self.max_pages)
                break
            if not self._advance(card_set, found):
                break

        log.info(
            "[%s] Discovery done: %d listing(s) from %d card(s) over %d page(s)%s",
            name, len(listings), self.cursor.processed_cards, self.cursor.iteration,
            f"; discarded {dict(self.discarded)}" if self.discarded else "",
        )
        return listings

    # -- LoadPage ----------------------------------------------------------

    @retry(max_attempts=2, base_delay=2.0, retryable=(PlaywrightTimeoutError,))
    def _goto(self, url: str) -> None:
        self.page.goto(url, wait_until="domcontentloaded")

    def _dismiss_banners(self) -> None:
        if not len(self.strategy.dismiss_locators):
            return
        banner = self.resolver.find(self.strategy.dismiss_locators)
        if banner is None:
            return
        try:
            banner.element.click()
            log.debug("Dismissed banner via %r", banner.locator.selector)
        except PlaywrightError as exc:
            log.debug("Banner dismiss failed: %s", exc)

    # -- ExtractCards ------------------------------------------------------

    def _extract(self, card: Any) -> JobListing | None:
        s = self.strategy
        title = _first_line(self.resolver.text_of(s.title_locators, scope=card))
        company = _first_line(self.resolver.text_of(s.company_locators, scope=card))
        if not title or not company:
            self.discarded["malformed"] += 1
            log.debug("Skipping card without %s", "title" if not title else "company")
            return None

        text = card.inner_text() or ""
        marker = s.already_applied_marker(text, ignore=(title, company))
        if marker:
            self.discarded["already applied"] += 1
            log.info("  ↷ %s @ %s: already applied (%s)", title, company, marker)
            return None

        if not (self.resolver.any_matches(s.easy_apply_indicator_locators, scope=card)
                or s.has_easy_apply_text(text)):
            self.discarded["not easy apply"] += 1
            log.debug("Skipping %s @ %s: no easy-apply indicator", title, company)
            return None

        href = self.resolver.attribute_of(s.link_locators, "href", scope=card)
        url = urljoin(self.page.url, href) if href else ""
        job_id, synthetic = self._card_id(card, url)

        key = (s.provider, job_id)
        if key in self._seen:
            self.discarded["duplicate"] += 1
            return None
        self._seen.add(key)

        previously = self.tracker.is_previously_applied(job_id)
        listing = JobListing(
            title=title, company=company, job_id=job_id, url=url,
            provider=s.provider, previously_applied=previously, synthetic_id=synthetic,
        )
        log.debug("Found %s [%s]%s", listing, job_id, " (previously applied)" if previously else "")
        return listing

    def _card_id(self, card: Any, url: str) -> tuple[str, bool]:
        for attr in self.strategy.card_id_attributes:
            value = (card.get_attribute(attr) or "").strip()
            if value:
                return value.removeprefix("job_"), False
        link = self.resolver.find(self.strategy.link_locators, scope=card)
        if link is not None:
            for attr in ("data-jk", "data-job-id", "id"):
                value = (link.element.get_attribute(attr) or "").strip()
                if value:
                    return value.removeprefix("job_"), False
        from_url = _id_from_url(url)
        if from_url:
            return from_url, False
        if url:
            return hashlib.sha256(url.encode()).hexdigest()[:12], True
        return uuid.uuid4().hex[:12], True

    # -- CheckPagination ---------------------------------------------------

    def _card_key(self, card: Any) -> str:
        for attr in self.strategy.card_id_attributes:
            value = card.get_attribute(attr)
            if value:
                return value
        return card.inner_text() or ""

    def _card_keys(self, cards: list[Any]) -> set[str]:
        return {self._card_key(card) for card in cards}

    def _advance(self, card_set: LocatorSet, cards: list[Any]) -> bool:
        name = self.strategy.name
        try:
            before_count = len(cards)
            before_keys = self._card_keys(cards)

            if self.strategy.infinite_scroll:
                if not cards:
                    return False
                cards[-1].scroll_into_view_if_needed()
            else:
                nxt = self.resolver.resolve(self.strategy.next_page_locators, timeout=self.timeouts.control)
                if nxt is None:
                    log.info("[%s] No further result pages", name)
                    return False
                nxt.scroll_into_view_if_needed()
                nxt.click()
        except PlaywrightError as exc:
            self.monitor.require("paginating search results")
            log.warning("[%s] Pagination failed (%s); keeping what was found", name, exc)
            return False

        def progressed() -> bool:
            now = self.resolver.find_all(card_set)
            return len(now) > before_count or bool(self._card_keys(now) - before_keys)

        if not self.resolver.wait_until(progressed, self.timeouts.transition):
            log.info("[%s] Pagination made no progress; stopping", name)
            return False
        return True
