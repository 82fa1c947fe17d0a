"""Offline source that renders canned Indeed-style markup for development runs."""
from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from html import escape

from skillscout.extractor import Extractor
from skillscout.log import get_logger
from skillscout.models import Posting

log = get_logger(__name__)

_SAMPLES: list[dict[str, str]] = [
    {
        "title": "Senior {kw} Developer",
        "company": "TechCorp India",
        "location": "Bengaluru, Karnataka",
        "salary": "₹18,00,000 - ₹25,00,000 a year",
        "snippet": "Build services with {kw}, Docker and AWS. Agile team, REST APIs.",
    },
    {
        "title": "{kw} Engineer",
        "company": "CloudScale SaaS",
        "location": "Remote in Hyderabad",
        "salary": "",
        "snippet": "Own microservices written in {kw}; Kubernetes, CI/CD and testing.",
    },
    {
        "title": "Junior {kw} Developer",
        "company": "StartupXYZ",
        "location": "Mumbai, Maharashtra",
        "salary": "₹30,000 - ₹50,000 a month",
        "snippet": "Entry level role working with {kw}, HTML, CSS and Git.",
    },
]


def _mock_key(keyword: str, n: int) -> str:
    """Date-based key so mock postings look fresh each day."""
    day = datetime.now(timezone.utc).strftime("%Y%m%d")
    digest = hashlib.sha256(keyword.lower().encode()).hexdigest()[:8]
    return f"mock{day}{digest}{n}"


class MockSource:
    name = "Mock"

    def __init__(self, extractor: Extractor) -> None:
        self.extractor = extractor

    def fetch(self, query: dict) -> str:
        keyword = (query.get("keywords") or "Software").strip()
        log.info("MockSource generating sample markup for %r", keyword)
        rows = []
        for n, sample in enumerate(_SAMPLES, start=1):
            kw = escape(keyword.title())
            salary = (
                f'<div class="salary-snippet">{escape(sample["salary"])}</div>' if sample["salary"] else ""
            )
            rows.append(
                '<div class="job_seen_beacon">'
                f'<h2 class="jobTitle"><a data-jk="{_mock_key(keyword, n)}" href="/viewjob?jk={_mock_key(keyword, n)}">'
                f'<span title="{sample["title"].format(kw=kw)}">{sample["title"].format(kw=kw)}</span></a></h2>'
                f'<span data-testid="company-name">{escape(sample["company"])}</span>'
                f'<div data-testid="text-location">{escape(sample["location"])}</div>'
                f"{salary}"
                f'<div class="job-snippet">{sample["snippet"].format(kw=kw)}</div>'
                "</div>"
            )
        return "<html><body>" + "".join(rows) + "</body></html>"

    def parse(self, document: str, query: dict) -> list[Posting]:
        return self.extractor.parse(document, query)
