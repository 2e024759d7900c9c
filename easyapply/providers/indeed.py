"""Indeed "Easily apply": paginated results, multi-page apply flow."""
from __future__ import annotations

from easyapply.locators import LocatorSet, actionable, visible
from easyapply.models import Provider
from easyapply.providers.base import ProviderStrategy, cards, subfield

STRATEGY = ProviderStrategy(
    provider=Provider.INDEED,
    search_url_template=(
        "https://www.indeed.com/jobs?q={keywords}&l={location}"
        "&sc=0kf%3Aattr%28DSQF7%29%3B&fromage=14"
    ),
    listing_card_locators=cards(
        "job card",
        ".cardOutline.tapItem",
        "div.cardOutline.tapItem",
        "li[class*='css-1ac2h1w'][class*='eu4oa1w0']",
        "div.result.job_[data-jk]",
        "div[class*='result'][class*='job']",
        ".job-card",
        ".job-result",
        "div[data-jk]",
        "a[data-jk]",
        "div[class*='job_seen_beacon']",
        "td[id*='jobTitle']",
    ),
    title_locators=subfield(
        "card title",
        "span[id*='jobTitle']",
        "a[data-jk] span[title]",
        ".jcs-JobTitle span[title]",
        "h2 .jcs-JobTitle",
        ".jobtitle",
        ".jobTitle",
    ),
    company_locators=subfield(
        "card company",
        "[data-testid='company-name']",
        "[data-testid*='company']",
        ".companyName",
        "span[class*='company']",
    ),
    link_locators=subfield("card link", "a[data-jk]", ".jcs-JobTitle"),
    card_id_attributes=("data-jk",),
    easy_apply_indicator_locators=LocatorSet.of(
        "easy apply badge",
        "[data-testid='indeedApply']",
        "span[data-cy='easy-apply-badge']",
        "[class*='easy-apply']",
        "[class*='quick-apply']",
        "[class*='ialbl']",
        "div[class*='instant-apply']",
        predicate=visible,
    ),
    already_applied_text_markers=(
        r"^\s*applied\s*$",
        r"\bapplication submitted\b",
        r"\byou applied\b",
    ),
    next_page_locators=LocatorSet.of(
        "next page",
        "a[aria-label='Next']",
        "a[data-testid='pagination-page-next']",
        "a[aria-label='Next Page']",
        predicate=actionable,
    ),
    dismiss_locators=LocatorSet.of(
        "banner dismiss",
        "button[aria-label='close']",
        "#mosaic-desktopserpjapopup button[aria-label*='close' i]",
    ),
    apply_control_locators=LocatorSet.of(
        "apply control",
        "button[data-testid='apply-button']",
        "#indeedApplyButton",
        "button[data-cy='apply-button']",
        "button[class*='apply']",
        "button[class*='btn-apply']",
        "a[data-testid='apply-link']",
        "a[href*='apply']",
        "button[title*='Apply']",
        "button[class*='apply-now']",
    ),
    additional_questions_locators=LocatorSet.of(
        "additional questions",
        "div[data-cy='additional-questions']",
        "div[class*='questions']",
        "div[class*='form-section']",
        "form[class*='application-form']",
        predicate=visible,
    ),
    next_or_review_locators=(
        LocatorSet.of(
            "review",
            "button[data-cy='review-button']",
            "button[data-testid='review-button']",
            "button[class*='review']",
            "button[aria-label*='Review']",
            "button:has-text('Review your application')",
        ),
        LocatorSet.of(
            "next",
            "button[data-cy='next-button']",
            "button[data-testid='next-button']",
            "button[class*='next']",
            "button[aria-label*='Next']",
            "button[class*='continue']",
            "button:has-text('Continue')",
        ),
    ),
    submit_locators=LocatorSet.of(
        "submit",
        "button[data-testid='submit']",
        "button[data-cy='submit']",
        "button:has-text('Submit your application')",
        "button[type='submit']",
        "button[class*='submit']",
        "input[type='submit']",
        "button[aria-label*='Submit']",
    ),
    done_locators=LocatorSet.of(
        "done",
        "button:has-text('Done')",
        "button[aria-label*='Done']",
        "a:has-text('Return to job search')",
    ),
)
