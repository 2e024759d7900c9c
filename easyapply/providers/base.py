"""Per-site strategy: URL templates, locator fallback chains, text markers."""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote, quote_plus

from easyapply.locators import LocatorSet, present, visible
from easyapply.models import JobListing, Provider

EASY_APPLY_TEXT_MARKERS: tuple[str, ...] = ("easy apply", "quick apply", "instant apply", "1-click")

DEFAULT_CLOSE = LocatorSet.of(
    "modal close",
    "button[aria-label*='Dismiss']",
    "button[data-test-modal-close-btn]",
    "button[aria-label*='Close']",
    "button[class*='modal-close']",
    ".artdeco-modal-overlay button[aria-label*='Dismiss']",
    "button[aria-label*='close']",
    "button[data-test-id='modal-close']",
    "button[data-testid='modal-close']",
)

DEFAULT_DISCARD = LocatorSet.of(
    "discard confirm",
    "button[data-control-name='discard_application_confirm_btn']",
    "button[data-test-dialog-primary-btn]",
    "button:has-text('Discard')",
)

NO_LOCATORS = LocatorSet("none", ())


@lru_cache(maxsize=None)
def _marker(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE | re.MULTILINE)


@dataclass(frozen=True)
class ProviderStrategy:
    provider: Provider
    search_url_template: str
    listing_card_locators: LocatorSet
    title_locators: LocatorSet
    company_locators: LocatorSet
    link_locators: LocatorSet
    apply_control_locators: LocatorSet
    additional_questions_locators: LocatorSet
    next_or_review_locators: tuple[LocatorSet, ...]
    submit_locators: LocatorSet
    done_locators: LocatorSet
    easy_apply_indicator_locators: LocatorSet
    # Regular expressions, matched case-insensitively line by line.
    already_applied_text_markers: tuple[str, ...] = ()
    easy_apply_text_markers: tuple[str, ...] = EASY_APPLY_TEXT_MARKERS
    card_id_attributes: tuple[str, ...] = ()
    next_page_locators: LocatorSet = NO_LOCATORS
    infinite_scroll: bool = False
    close_locators: LocatorSet = DEFAULT_CLOSE
    discard_locators: LocatorSet = DEFAULT_DISCARD
    dismiss_locators: LocatorSet = NO_LOCATORS
    # Where the detail page shows the application status; the whole body otherwise.
    detail_status_locators: LocatorSet = NO_LOCATORS
    detail_url_template: str | None = None

    @property
    def name(self) -> str:
        return self.provider.value

    def search_url(self, keywords: str, location: str) -> str:
        return self.search_url_template.format(
            keywords=quote_plus(keywords), location=quote_plus(location)
        )

    def detail_url(self, listing: JobListing) -> str:
        if self.detail_url_template and not listing.synthetic_id:
            return self.detail_url_template.format(job_id=quote(listing.job_id, safe=""))
        return listing.url

    def already_applied_marker(self, text: str, *, ignore: tuple[str, ...] = ()) -> str | None:
        """First marker found in ``text`` once the ``ignore`` strings (title, company) are removed."""
        for part in ignore:
            if part:
                text = text.replace(part, " ")
        for pattern in self.already_applied_text_markers:
            m = _marker(pattern).search(text)
            if m:
                return m.group(0).strip()
        return None

    def has_easy_apply_text(self, text: str) -> bool:
        low = text.lower()
        return any(marker in low for marker in self.easy_apply_text_markers)


def subfield(name: str, *selectors: str) -> LocatorSet:
    """Card sub-field chains match regardless of visibility."""
    return LocatorSet.of(name, *selectors, predicate=present)


def cards(name: str, *selectors: str) -> LocatorSet:
    return LocatorSet.of(name, *selectors, predicate=visible)
