"""Indeed India search-results scraping.

Indeed reshuffles its card markup frequently; the layout below lists every
variant seen so far, newest first.
"""
from __future__ import annotations

from urllib.parse import urlencode

from skillscout.extractor import Extractor, SourceLayout, cards, href_of, job_key_url, text_of
from skillscout.fetcher import Fetcher
from skillscout.log import get_logger
from skillscout.models import Posting

log = get_logger(__name__)

BASE_URL = "https://in.indeed.com"
DEFAULT_KEYWORDS = "developer"
DEFAULT_LOCATION = "Mumbai"


def indeed_layout(base_url: str = BASE_URL) -> SourceLayout:
    return SourceLayout(
        name="Indeed",
        base_url=base_url,
        card_matchers=[
            cards('[data-testid="job-tile"]'),
            cards(".jobsearch-SerpJobCard"),
            cards(".slider_container .slider_item"),
            cards(".job_seen_beacon"),
        ],
        title=[
            text_of('h2 a[data-testid="job-title"]', attr="title"),
            text_of("h2 a span[title]", attr="title"),
            text_of(".jobTitle a span"),
            text_of("h2.jobTitle a"),
            text_of(".jobTitle-color-purple"),
            text_of("h2 span[title]", attr="title"),
        ],
        company=[
            text_of('[data-testid="company-name"]'),
            text_of("span.companyName"),
            text_of(".company"),
            text_of("[data-company-name]"),
        ],
        location=[
            text_of('[data-testid="text-location"]'),
            text_of(".companyLocation"),
            text_of('[data-testid="job-location"]'),
            text_of(".location"),
        ],
        salary=[
            text_of('[data-testid="attribute_snippet_testid"]'),
            text_of(".salary-snippet"),
            text_of(".salaryText"),
            text_of('[data-testid="salary-snippet"]'),
        ],
        description=[
            text_of(".job-snippet"),
            text_of('[data-testid="job-snippet"]'),
            text_of(".summary"),
            text_of(".job-snippet-text"),
        ],
        url=[
            href_of('h2 a[href*="/rc/clk"]'),
            href_of('h2 a[href*="/viewjob"]'),
            job_key_url("a[data-jk]", "data-jk", base_url.rstrip("/") + "/viewjob?jk={key}"),
            href_of("h2 a[href]"),
        ],
    )


class IndeedSource:
    """Indeed capability object: builds the search URL, fetches, parses."""

    name = "Indeed"

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: Extractor,
        *,
        base_url: str = BASE_URL,
        default_location: str = DEFAULT_LOCATION,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.base_url = base_url.rstrip("/")
        self.default_location = default_location

    def build_search_url(self, query: dict) -> str:
        params = {
            "q": query.get("keywords") or DEFAULT_KEYWORDS,
            "l": query.get("location") or self.default_location,
            "start": int(query.get("start", 0)),
        }
        return f"{self.base_url}/jobs?{urlencode(params)}"

    def fetch(self, query: dict) -> str:
        return self.fetcher.fetch(self.build_search_url(query))

    def parse(self, document: str, query: dict) -> list[Posting]:
        return self.extractor.parse(document, query)
