"""Job sources: URL building, the generic scrape pipeline, the mock source."""

from unittest.mock import Mock
from urllib.parse import parse_qs, urlparse

import pytest

from skillscout.config import Settings
from skillscout.errors import NetworkError
from skillscout.extractor import Extractor
from skillscout.sources import IndeedSource, MockSource, build_source, indeed_layout, scrape


@pytest.fixture
def extractor(lexicon):
    return Extractor(indeed_layout(), lexicon)


class TestIndeedSource:
    def test_search_url(self, extractor):
        source = IndeedSource(Mock(), extractor, base_url="https://in.indeed.com/", default_location="India")

        url = source.build_search_url({"keywords": "node.js"})
        parsed = urlparse(url)

        assert parsed.netloc == "in.indeed.com"
        assert parsed.path == "/jobs"
        assert parse_qs(parsed.query) == {"q": ["node.js"], "l": ["India"], "start": ["0"]}

    def test_scrape_fetches_then_parses(self, extractor):
        fetcher = Mock()
        fetcher.fetch.return_value = (
            '<div class="job_seen_beacon"><h2 class="jobTitle"><a href="/viewjob?jk=1">Go Developer</a></h2>'
            '<span data-testid="company-name">Acme</span></div>'
        )
        source = IndeedSource(fetcher, extractor)

        postings = scrape(source, {"keywords": "go", "location": "Pune"})

        assert [p.title for p in postings] == ["Go Developer"]
        assert "q=go" in fetcher.fetch.call_args[0][0]

    def test_fetch_errors_propagate(self, extractor):
        fetcher = Mock()
        fetcher.fetch.side_effect = NetworkError("https://in.indeed.com/jobs", None, 2)
        with pytest.raises(NetworkError):
            scrape(IndeedSource(fetcher, extractor), {"keywords": "go"})


class TestMockSource:
    def test_markup_runs_through_the_real_extractor(self, extractor):
        postings = scrape(MockSource(extractor), {"keywords": "python"})

        assert len(postings) == 3
        assert postings[0].title == "Senior Python Developer"
        assert postings[0].salary.min == 1800000
        assert postings[1].location.remote is True
        assert all("python" in p.skills for p in postings)

    def test_urls_are_stable_per_keyword(self, extractor):
        source = MockSource(extractor)
        first = [p.source.url for p in scrape(source, {"keywords": "python"})]
        again = [p.source.url for p in scrape(source, {"keywords": "python"})]
        other = [p.source.url for p in scrape(source, {"keywords": "java"})]

        assert first == again
        assert not set(first) & set(other)


class TestBuildSource:
    def test_mock(self, lexicon):
        assert isinstance(build_source(Settings(source="mock"), lexicon), MockSource)

    def test_indeed(self, lexicon):
        source = build_source(Settings(rate_limit_ms=1234), lexicon)
        assert isinstance(source, IndeedSource)
        assert source.fetcher.rate_limit_ms == 1234

    def test_unknown(self, lexicon):
        with pytest.raises(ValueError):
            build_source(Settings(source="monster"), lexicon)
