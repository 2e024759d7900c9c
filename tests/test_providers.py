import pytest

from easyapply.models import JobListing, Provider
from easyapply.providers import DICE, INDEED, LINKEDIN, available_providers, get_provider


class TestRegistry:
    def test_lookup_is_case_insensitive(self):
        assert get_provider(" LinkedIn ") is LINKEDIN
        assert get_provider("indeed") is INDEED
        assert get_provider("dice") is DICE

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="dice, indeed, linkedin"):
            get_provider("monster")

    def test_available(self):
        assert available_providers() == ["dice", "indeed", "linkedin"]


class TestStrategies:
    @pytest.mark.parametrize("strategy", [LINKEDIN, INDEED, DICE])
    def test_search_url_is_encoded(self, strategy):
        url = strategy.search_url("C# developer", "New York, NY")
        assert "C%23+developer" in url
        assert "New+York%2C+NY" in url
        assert "{" not in url

    @pytest.mark.parametrize("strategy", [LINKEDIN, INDEED, DICE])
    def test_every_apply_concept_has_locators(self, strategy):
        for chain in (
            strategy.listing_card_locators, strategy.title_locators, strategy.company_locators,
            strategy.link_locators, strategy.apply_control_locators, strategy.submit_locators,
            *strategy.next_or_review_locators,
        ):
            assert len(chain) > 0, chain.name

    def test_linkedin_detail_url(self):
        listing = JobListing(title="SRE", company="Acme", job_id="3901234567",
                             url="https://www.linkedin.com/jobs/search/?currentJobId=3901234567",
                             provider=Provider.LINKEDIN)
        assert LINKEDIN.detail_url(listing) == "https://www.linkedin.com/jobs/view/3901234567"

    def test_indeed_detail_url_is_listing_url(self):
        listing = JobListing(title="SRE", company="Acme", job_id="abc",
                             url="https://www.indeed.com/viewjob?jk=abc", provider=Provider.INDEED)
        assert INDEED.detail_url(listing) == listing.url

    @pytest.mark.parametrize("text", [
        "Platform Engineer\nAcme\nApplied 2 days ago",
        "Platform Engineer\nApplication submitted",
    ])
    def test_linkedin_already_applied_markers(self, text):
        assert LINKEDIN.already_applied_marker(text)

    def test_easy_apply_label_is_not_an_applied_marker(self):
        text = "Platform Engineer\nAcme\nEasy Apply\nPromoted"
        assert LINKEDIN.already_applied_marker(text) is None
        assert LINKEDIN.has_easy_apply_text(text)

    def test_applied_inside_title_is_not_a_marker(self):
        assert INDEED.already_applied_marker("Applied Scientist\nContoso") is None

    def test_listing_text_is_ignored_when_looking_for_markers(self):
        body = "Applied Scientist\nAmazon\nAbout the job"
        assert LINKEDIN.already_applied_marker(body) == "Applied"
        assert LINKEDIN.already_applied_marker(body, ignore=("Applied Scientist", "Amazon")) is None

    def test_synthetic_id_never_builds_a_detail_url(self):
        listing = JobListing(title="SRE", company="Acme", job_id="9b2e41c07a1d",
                             url="https://www.linkedin.com/jobs/collections/recommended/",
                             provider=Provider.LINKEDIN, synthetic_id=True)
        assert LINKEDIN.detail_url(listing) == listing.url
