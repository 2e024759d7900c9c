"""Dice remote easy-apply search."""
from __future__ import annotations

from easyapply.locators import LocatorSet, actionable, visible
from easyapply.models import Provider
from easyapply.providers.base import ProviderStrategy, cards, subfield

STRATEGY = ProviderStrategy(
    provider=Provider.DICE,
    search_url_template=(
        "https://www.dice.com/jobs?filters.workplaceTypes=Remote"
        "&applyType=easy_apply&filters.easyApply=true&q={keywords}&location={location}"
    ),
    listing_card_locators=cards(
        "job card",
        "div[data-cy='card-job']",
        "div[data-testid='card-job']",
        "div[class*='job-card']",
        "div[class*='job-result']",
    ),
    title_locators=subfield(
        "card title",
        "[data-testid='job-search-job-detail-link']",
        "a[data-testid*='job-title']",
        "a[data-cy='card-title-link']",
        "h5 a",
    ),
    company_locators=subfield(
        "card company",
        "[data-testid*='company']",
        "[data-cy*='company']",
        "a[href*='company-profile']",
        ".company",
    ),
    link_locators=subfield(
        "card link",
        "[data-testid='job-search-job-detail-link']",
        "a[href*='/job-detail/']",
        "a[data-cy='card-title-link']",
    ),
    card_id_attributes=("data-id", "data-job-id", "id"),
    easy_apply_indicator_locators=LocatorSet.of(
        "easy apply badge",
        "[data-testid*='easy-apply']",
        "[class*='easy-apply']",
        "span:has-text('Easy Apply')",
        predicate=visible,
    ),
    already_applied_text_markers=(
        r"^\s*applied\s*$",
        r"\bapplication submitted\b",
    ),
    next_page_locators=LocatorSet.of(
        "next page",
        "nav[role='navigation'][aria-label='Pagination'] span[aria-label='Next'][data-react-aria-pressable='true']",
        "nav[aria-label='Pagination'] [aria-label='Next']",
        "li.pagination-next a",
        predicate=actionable,
    ),
    dismiss_locators=LocatorSet.of(
        "banner dismiss",
        "[data-testid='recommended-jobs-banner-close-btn']",
    ),
    apply_control_locators=LocatorSet.of(
        "apply control",
        "apply-button-wc button",
        "button[data-testid='apply-button']",
        "a[data-testid='apply-button']",
        "button:has-text('Easy apply')",
        "button[class*='btn-primary']",
    ),
    additional_questions_locators=LocatorSet.of(
        "additional questions",
        "div[class*='screener']",
        "div[class*='questions']",
        "form:has(fieldset)",
        predicate=visible,
    ),
    next_or_review_locators=(
        LocatorSet.of(
            "review",
            "button[data-testid='review-button']",
            "button:has-text('Review')",
        ),
        LocatorSet.of(
            "next",
            "button.btn-next:not(:has-text('Submit'))",
            "button[data-testid='next-button']",
            "button:has-text('Next')",
        ),
    ),
    submit_locators=LocatorSet.of(
        "submit",
        "button.btn-next:has-text('Submit')",
        "button[data-testid='submit-button']",
        "button:has-text('Submit')",
        "button[type='submit']",
    ),
    done_locators=LocatorSet.of(
        "done",
        "button:has-text('Done')",
        "a:has-text('Back to Job Search')",
    ),
)
