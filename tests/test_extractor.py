"""Extractor: cascading selectors, field parsers, the admission gate."""

from datetime import datetime

import pytest

from skillscout.errors import ExtractionError
from skillscout.extractor import (
    NO_DESCRIPTION,
    Extractor,
    fallback_identity,
    parse_location,
    parse_salary,
)
from skillscout.models import UNKNOWN_COMPANY, UNSPECIFIED_CITY
from skillscout.sources.indeed import indeed_layout

SCRAPED_AT = datetime(2024, 1, 15, 12, 0, 0)

# Same posting rendered in two markup generations.
JOB_TILE_PAGE = """
<html><body>
  <div data-testid="job-tile">
    <h2><a data-testid="job-title" title="React Developer" href="/viewjob?jk=abc123">React Developer</a></h2>
    <span data-testid="company-name">TechCorp</span>
    <div data-testid="text-location">Remote in Mumbai</div>
    <div data-testid="attribute_snippet_testid">₹3,00,000 - ₹5,00,000 a year</div>
    <div class="job-snippet">React, Node and AWS experience required.</div>
  </div>
</body></html>
"""

SERP_CARD_PAGE = """
<html><body>
  <div class="jobsearch-SerpJobCard">
    <h2 class="jobTitle"><a data-jk="abc123">React Developer</a></h2>
    <span class="companyName">TechCorp</span>
    <div class="companyLocation">Remote in Mumbai</div>
    <span class="salaryText">₹3,00,000 - ₹5,00,000 a year</span>
    <div class="summary">React, Node and AWS experience required.</div>
  </div>
</body></html>
"""


@pytest.fixture
def extractor(lexicon):
    return Extractor(indeed_layout(), lexicon, now=lambda: SCRAPED_AT)


def _fields(posting):
    return (
        posting.title,
        posting.company,
        posting.location,
        posting.salary,
        posting.description,
        posting.skills,
        posting.source.url,
    )


class TestSelectorFallback:
    def test_markup_generations_yield_the_same_posting(self, extractor):
        new = extractor.parse(JOB_TILE_PAGE)
        old = extractor.parse(SERP_CARD_PAGE)

        assert len(new) == len(old) == 1
        assert _fields(new[0]) == _fields(old[0])

    def test_fields(self, extractor):
        (posting,) = extractor.parse(JOB_TILE_PAGE)

        assert posting.title == "React Developer"
        assert posting.company == "TechCorp"
        assert posting.location.city == "Mumbai"
        assert posting.location.remote is True
        assert posting.salary.min == 300000
        assert posting.salary.max == 500000
        assert posting.source.url == "https://in.indeed.com/viewjob?jk=abc123"
        assert posting.source.name == "Indeed"
        assert posting.source.scraped_at == SCRAPED_AT
        assert posting.skills == {"react", "node", "aws"}

    def test_first_card_strategy_with_hits_decides_the_page(self, extractor):
        page = JOB_TILE_PAGE.replace("</body>", SERP_CARD_PAGE.split("<body>")[1].split("</body>")[0] + "</body>")
        postings = extractor.parse(page)
        assert len(postings) == 1

    def test_page_without_cards_is_empty_not_an_error(self, extractor):
        assert extractor.parse("<html><body><p>No results</p></body></html>", {"keywords": "cobol"}) == []


class TestAdmissionGate:
    def test_card_without_title_is_dropped(self, extractor):
        page = """
        <div class="job_seen_beacon"><span data-testid="company-name">Acme</span></div>
        <div class="job_seen_beacon">
          <h2 class="jobTitle"><a href="/viewjob?jk=k2">Backend Engineer</a></h2>
          <span data-testid="company-name">Acme</span>
        </div>
        """
        postings = extractor.parse(page)
        assert [p.title for p in postings] == ["Backend Engineer"]

    def test_missing_company_defaults(self, extractor):
        page = '<div class="job_seen_beacon"><h2 class="jobTitle"><a href="/viewjob?jk=k3">QA Engineer</a></h2></div>'
        (posting,) = extractor.parse(page)
        assert posting.company == UNKNOWN_COMPANY

    def test_missing_description_and_location(self, extractor):
        page = '<div class="job_seen_beacon"><h2 class="jobTitle"><a href="/viewjob?jk=k4">QA Engineer</a></h2></div>'
        (posting,) = extractor.parse(page)
        assert posting.description == NO_DESCRIPTION
        assert posting.skills == set()
        assert posting.location.city == UNSPECIFIED_CITY
        assert posting.salary is None

    def test_cards_without_links_get_distinct_stable_identities(self, extractor):
        page = """
        <div class="job_seen_beacon"><h2 class="jobTitle"><a>Data Analyst</a></h2>
          <span data-testid="company-name">Acme</span></div>
        <div class="job_seen_beacon"><h2 class="jobTitle"><a>Data Engineer</a></h2>
          <span data-testid="company-name">Acme</span></div>
        """
        first = extractor.parse(page)
        second = extractor.parse(page)

        urls = [p.source.url for p in first]
        assert len(set(urls)) == 2
        assert all(u.startswith("https://in.indeed.com/#job-") for u in urls)
        assert urls == [p.source.url for p in second]


class TestWholeDocumentFailures:
    @pytest.mark.parametrize("document", ["", "   ", None, 42, "plain text, no markup"])
    def test_unparseable_documents_raise(self, extractor, document):
        with pytest.raises(ExtractionError):
            extractor.parse(document)


class TestParseSalary:
    def test_lakh_style_range(self):
        salary = parse_salary("₹3,00,000 - ₹5,00,000 a year")
        assert (salary.min, salary.max, salary.currency) == (300000, 500000, "INR")

    def test_single_figure(self):
        salary = parse_salary("₹45,000 a month")
        assert (salary.min, salary.max) == (45000, 45000)

    def test_rupee_abbreviation(self):
        salary = parse_salary("Rs. 20,000 - 30,000 per month")
        assert (salary.min, salary.max) == (20000, 30000)

    @pytest.mark.parametrize("text, expected", [
        ("Rs30,000 - Rs50,000 a month", (30000, 50000)),
        ("INR30000 a month", (30000, 30000)),
        ("Rs 8,000 per week", (8000, 8000)),
    ])
    def test_marker_glued_to_figure(self, text, expected):
        salary = parse_salary(text)
        assert (salary.min, salary.max) == expected

    def test_lakh_figures_are_scaled(self):
        salary = parse_salary("₹12.5 - 18 lakh a year")
        assert (salary.min, salary.max) == (1250000, 1800000)

    def test_thousand_figures_are_scaled(self):
        salary = parse_salary("25 - 40 thousand a month")
        assert (salary.min, salary.max) == (25000, 40000)

    def test_inverted_range_is_absent(self):
        assert parse_salary("₹50,000 - ₹30,000 a month") is None

    @pytest.mark.parametrize("text", [None, "", "3-5 years experience", "Full-time", "Mrs Sharma, HR"])
    def test_no_salary(self, text):
        assert parse_salary(text) is None


class TestParseLocation:
    def test_remote_in_city(self):
        loc = parse_location("Remote in Mumbai")
        assert (loc.city, loc.remote, loc.country) == ("Mumbai", True, "India")

    def test_city_and_state(self):
        loc = parse_location("Pune, Maharashtra")
        assert (loc.city, loc.state, loc.remote) == ("Pune", "Maharashtra", False)

    def test_hybrid_remote(self):
        loc = parse_location("Hybrid remote in Bengaluru, Karnataka")
        assert (loc.city, loc.state, loc.remote) == ("Bengaluru", "Karnataka", True)

    def test_remote_only(self):
        loc = parse_location("Work from home")
        assert (loc.city, loc.remote) == (UNSPECIFIED_CITY, True)

    def test_empty(self):
        loc = parse_location(None)
        assert (loc.city, loc.remote, loc.country) == (UNSPECIFIED_CITY, False, "India")


def test_fallback_identity_is_case_insensitive():
    a = fallback_identity("https://in.indeed.com/", "Data Analyst", "Acme", "Pune")
    b = fallback_identity("https://in.indeed.com", "data analyst", "ACME", "pune")
    assert a == b
