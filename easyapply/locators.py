"""
Selector resolution: ordered locator fallback chains resolved against the
live page (or a card/modal subtree).

Resolution is first-match-wins in priority order. Not finding anything is a
normal ``None`` return; Playwright errors raised while probing a candidate
are downgraded to "no match" so callers branch on presence only.
"""
from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from playwright.sync_api import Error as PlaywrightError

from easyapply.log import get_logger

log = get_logger(__name__)

MAX_POLL_INTERVAL = 0.25

Predicate = Callable[[Any], bool]


def present(el: Any) -> bool:
    return True


def visible(el: Any) -> bool:
    return el.is_visible()


def visible_and_enabled(el: Any) -> bool:
    return el.is_visible() and el.is_enabled()


def actionable(el: Any) -> bool:
    """Visible, enabled and not marked aria-disabled (pagination controls)."""
    if not visible_and_enabled(el):
        return False
    return (el.get_attribute("aria-disabled") or "").strip().lower() != "true"


@dataclass(frozen=True)
class Locator:
    selector: str

    def __str__(self) -> str:
        return self.selector


@dataclass(frozen=True)
class LocatorSet:
    """Named fallback chain; earlier locators are the more trusted ones."""
    name: str
    locators: tuple[Locator, ...]
    predicate: Predicate = visible_and_enabled

    @classmethod
    def of(cls, name: str, *selectors: str, predicate: Predicate = visible_and_enabled) -> LocatorSet:
        return cls(name, tuple(Locator(s) for s in selectors), predicate)

    def pinned(self, locator: Locator) -> LocatorSet:
        return LocatorSet(self.name, (locator,), self.predicate)

    def __iter__(self) -> Iterator[Locator]:
        return iter(self.locators)

    def __len__(self) -> int:
        return len(self.locators)


@dataclass(frozen=True)
class Match:
    concept: str
    locator: Locator
    element: Any
    position: int


class LocatorTelemetry:
    """Counts which fallback won for each concept, and which concepts missed."""

    def __init__(self) -> None:
        self.hits: Counter[tuple[str, str]] = Counter()
        self.misses: Counter[str] = Counter()

    def record_hit(self, match: Match) -> None:
        self.hits[(match.concept, match.locator.selector)] += 1
        if match.position > 0:
            log.debug(
                "%s resolved by fallback #%d %r", match.concept, match.position + 1,
                match.locator.selector,
            )
        else:
            log.debug("%s resolved by %r", match.concept, match.locator.selector)

    def record_miss(self, concept: str) -> None:
        self.misses[concept] += 1
        log.debug("%s not found", concept)

    def rows(self) -> list[tuple[str, str, int]]:
        return sorted(
            ((concept, selector, n) for (concept, selector), n in self.hits.items()),
            key=lambda r: (r[0], -r[2]),
        )


class Resolver:
    def __init__(
        self,
        page: Any,
        *,
        telemetry: LocatorTelemetry | None = None,
        poll_interval: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.page = page
        self.telemetry = telemetry or LocatorTelemetry()
        self.poll_interval = min(max(poll_interval, 0.01), MAX_POLL_INTERVAL)
        self._clock = clock
        self._sleep = sleep

    # -- single pass -------------------------------------------------------

    def _elements(self, locator: Locator, scope: Any) -> Iterator[Any]:
        root = self.page if scope is None else scope
        found = root.locator(locator.selector)
        for i in range(found.count()):
            yield found.nth(i)

    def _matches(self, locator_set: LocatorSet, locator: Locator, scope: Any) -> Iterator[Any]:
        try:
            for el in self._elements(locator, scope):
                try:
                    if locator_set.predicate(el):
                        yield el
                except PlaywrightError as exc:
                    log.debug("Skipping stale %s candidate: %s", locator_set.name, exc)
        except PlaywrightError as exc:
            log.debug("%s locator %r failed: %s", locator_set.name, locator.selector, exc)

    def _first(self, locator_set: LocatorSet, scope: Any) -> Match | None:
        for position, locator in enumerate(locator_set.locators):
            for el in self._matches(locator_set, locator, scope):
                return Match(locator_set.name, locator, el, position)
        return None

    def find(self, locator_set: LocatorSet, *, scope: Any = None) -> Match | None:
        """One pass over the chain, no waiting, no telemetry."""
        return self._first(locator_set, scope)

    def find_all(self, locator_set: LocatorSet, *, scope: Any = None) -> list[Any]:
        """Every element matched by the first locator that matches anything."""
        for locator in locator_set.locators:
            found = list(self._matches(locator_set, locator, scope))
            if found:
                return found
        return []

    def any_matches(self, locator_set: LocatorSet, *, scope: Any = None) -> bool:
        return self._first(locator_set, scope) is not None

    def text_of(self, locator_set: LocatorSet, *, scope: Any = None) -> str:
        match = self._first(locator_set, scope)
        if match is None:
            return ""
        try:
            return (match.element.inner_text() or "").strip()
        except PlaywrightError:
            return ""

    def attribute_of(self, locator_set: LocatorSet, name: str, *, scope: Any = None) -> str:
        match = self._first(locator_set, scope)
        if match is None:
            return ""
        try:
            return (match.element.get_attribute(name) or "").strip()
        except PlaywrightError:
            return ""

    def page_text(self) -> str:
        try:
            return self.page.locator("body").inner_text() or ""
        except PlaywrightError:
            return ""

    # -- bounded polling ---------------------------------------------------

    def resolve_match(
        self, *locator_sets: LocatorSet, timeout: float = 0.0, scope: Any = None
    ) -> Match | None:
        deadline = self._clock() + max(timeout, 0.0)
        while True:
            for locator_set in locator_sets:
                match = self._first(locator_set, scope)
                if match is not None:
                    self.telemetry.record_hit(match)
                    return match
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(self.poll_interval, remaining))
        self.telemetry.record_miss("|".join(s.name for s in locator_sets))
        return None

    def resolve(self, locator_set: LocatorSet, timeout: float = 0.0, *, scope: Any = None) -> Any:
        match = self.resolve_match(locator_set, timeout=timeout, scope=scope)
        return match.element if match else None

    def resolve_any(self, *locator_sets: LocatorSet, timeout: float = 0.0, scope: Any = None) -> Any:
        """Try each set in order on every poll, e.g. Review before Next."""
        match = self.resolve_match(*locator_sets, timeout=timeout, scope=scope)
        return match.element if match else None

    def wait_until(self, condition: Callable[[], bool], timeout: float) -> bool:
        deadline = self._clock() + max(timeout, 0.0)
        while True:
            try:
                if condition():
                    return True
            except PlaywrightError as exc:
                log.debug("Wait condition raised: %s", exc)
            remaining = deadline - self._clock()
            if remaining <= 0:
                return False
            self._sleep(min(self.poll_interval, remaining))
