"""LinkedIn Easy Apply: infinite-scroll results, modal apply flow."""
from __future__ import annotations

from easyapply.locators import LocatorSet, visible
from easyapply.models import Provider
from easyapply.providers.base import ProviderStrategy, cards, subfield

STRATEGY = ProviderStrategy(
    provider=Provider.LINKEDIN,
    search_url_template=(
        "https://www.linkedin.com/jobs/search/?f_AL=true&keywords={keywords}&location={location}"
    ),
    detail_url_template="https://www.linkedin.com/jobs/view/{job_id}",
    listing_card_locators=cards(
        "job card",
        "div[data-job-id]",
        "li[data-occludable-job-id]",
        "div.job-card-container",
    ),
    title_locators=subfield(
        "card title",
        "strong",
        "a.job-card-list__title",
        ".job-card-list__title--link",
        "a[class*='job-card-container__link']",
    ),
    company_locators=subfield(
        "card company",
        ".artdeco-entity-lockup__subtitle.ember-view",
        ".artdeco-entity-lockup__subtitle",
        ".job-card-container__primary-description",
        ".job-card-container__company-name",
    ),
    link_locators=subfield("card link", "a[href*='/jobs/view/']", "a"),
    card_id_attributes=("data-job-id", "data-occludable-job-id"),
    easy_apply_indicator_locators=LocatorSet.of(
        "easy apply badge",
        ".job-card-container__apply-method",
        "[class*='easy-apply']",
        "svg[data-test-icon='linkedin-bug-color-small']",
        predicate=visible,
    ),
    already_applied_text_markers=(
        r"^\s*applied\b",
        r"\bapplication submitted\b",
        r"\bsee application\b",
    ),
    infinite_scroll=True,
    detail_status_locators=LocatorSet.of(
        "application status",
        ".job-details-jobs-unified-top-card__container--two-pane",
        ".jobs-unified-top-card",
        ".jobs-s-apply",
        predicate=visible,
    ),
    apply_control_locators=LocatorSet.of(
        "apply control",
        "button.jobs-apply-button",
        "button[aria-label*='Easy Apply']",
        "button:has-text('Easy Apply')",
    ),
    additional_questions_locators=LocatorSet.of(
        "additional questions",
        "div[class*='additional-questions']",
        "div[class*='custom-questions']",
        "div[class*='screening-questions']",
        "div.jobs-easy-apply-form-section__grouping:has(div[data-test-form-element])",
        "div:has(> h3:has-text('Additional Questions'))",
        "div[data-test-form-element='input']",
        "div[data-test-form-element='textarea']",
        "div[data-test-form-element='select']",
        predicate=visible,
    ),
    next_or_review_locators=(
        LocatorSet.of(
            "review",
            "button[data-live-test-easy-apply-review-button]",
            "button[aria-label='Review your application']",
        ),
        LocatorSet.of(
            "next",
            "button[data-easy-apply-next-button]",
            "button[aria-label='Continue to next step']",
        ),
    ),
    submit_locators=LocatorSet.of(
        "submit",
        "button[data-live-test-easy-apply-submit-button]",
        "button[aria-label='Submit application']",
        "button:has-text('Submit application')",
    ),
    done_locators=LocatorSet.of(
        "done",
        "button:has-text('Done')",
        "button[data-test-modal-close-btn]",
        "button[aria-label*='Done']",
        "button[class*='artdeco-button--primary']:has-text('Done')",
        "button[class*='done']",
    ),
)
