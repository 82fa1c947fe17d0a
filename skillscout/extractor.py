"""Turn a fetched search-results page into Posting records.

Job boards reshuffle their markup often, so every lookup here is an ordered
list of matcher functions tried in sequence until one succeeds:

* card matchers locate one element per posting; the first matcher that finds
  at least one card decides the whole page,
* field matchers pull one value out of a card; a miss falls through to the
  next matcher and finally to the field default.

Layouts are plain data (:class:`SourceLayout`), so supporting a new markup
variant means appending a matcher, not writing a new parser.
"""
from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from skillscout.errors import ExtractionError
from skillscout.lexicon import SkillLexicon
from skillscout.log import get_logger
from skillscout.models import (
    UNKNOWN_COMPANY,
    UNSPECIFIED_CITY,
    Location,
    Posting,
    Salary,
    Source,
)

log = get_logger(__name__)

CardMatcher = Callable[[Tag], list[Tag]]
FieldMatcher = Callable[[Tag], Optional[str]]

NO_DESCRIPTION = "No description available"

_REMOTE_RE = re.compile(r"remote|work from home|wfh", re.IGNORECASE)
_REMOTE_PREFIX_RE = re.compile(r"^\s*(?:hybrid\s+)?remote\s+in\s+", re.IGNORECASE)
_REMOTE_ONLY_RE = re.compile(r"^(?:remote|work from home|wfh)$", re.IGNORECASE)
_SALARY_MARKER_RE = re.compile(r"₹|\b(?:rs|inr)(?=[\s.\d]|$)|lakh|\blacs?\b|thousand", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
_SCALES = [
    (re.compile(r"lakh|\blacs?\b", re.IGNORECASE), 100_000),
    (re.compile(r"thousand", re.IGNORECASE), 1_000),
]


# ── Matcher builders ─────────────────────────────────────────────────────


def cards(selector: str) -> CardMatcher:
    """Card matcher: every element matching a CSS *selector*."""
    def match(root: Tag) -> list[Tag]:
        return root.select(selector)
    match.__name__ = f"cards({selector})"
    return match


def text_of(selector: str, attr: str | None = None) -> FieldMatcher:
    """Field matcher: *attr* (if set and present) or stripped text of the first match."""
    def match(card: Tag) -> Optional[str]:
        el = card.select_one(selector)
        if el is None:
            return None
        value = el.get(attr) if attr else None
        if not value:
            value = el.get_text(" ", strip=True)
        value = " ".join(str(value).split())
        return value or None
    match.__name__ = f"text_of({selector})"
    return match


def href_of(selector: str) -> FieldMatcher:
    def match(card: Tag) -> Optional[str]:
        el = card.select_one(selector)
        href = el.get("href") if el is not None else None
        return str(href).strip() if href else None
    match.__name__ = f"href_of({selector})"
    return match


def job_key_url(selector: str, attr: str, template: str) -> FieldMatcher:
    """Field matcher building a detail URL from a job-key attribute."""
    def match(card: Tag) -> Optional[str]:
        el = card if card.get(attr) else card.select_one(selector)
        key = el.get(attr) if el is not None else None
        return template.format(key=key) if key else None
    match.__name__ = f"job_key_url({attr})"
    return match


def first_match(matchers: Sequence[FieldMatcher], card: Tag) -> Optional[str]:
    for matcher in matchers:
        value = matcher(card)
        if value:
            return value
    return None


@dataclass
class SourceLayout:
    """Ordered matcher lists describing one site's search-results markup."""
    name: str
    base_url: str
    card_matchers: list[CardMatcher]
    title: list[FieldMatcher]
    company: list[FieldMatcher]
    location: list[FieldMatcher] = field(default_factory=list)
    salary: list[FieldMatcher] = field(default_factory=list)
    description: list[FieldMatcher] = field(default_factory=list)
    url: list[FieldMatcher] = field(default_factory=list)


# ── Field parsers ────────────────────────────────────────────────────────


def parse_location(text: str | None, country: str = "India") -> Location:
    """Parse free-form location text like ``"Remote in Mumbai"`` or ``"Pune, Maharashtra"``."""
    if not text or not text.strip():
        return Location(city=UNSPECIFIED_CITY, country=country, remote=False)

    remote = bool(_REMOTE_RE.search(text))
    cleaned = _REMOTE_PREFIX_RE.sub("", text).strip()
    if _REMOTE_ONLY_RE.match(cleaned):
        cleaned = ""

    parts = [p.strip() for p in cleaned.split(",", 1)]
    city = parts[0] if parts and parts[0] else UNSPECIFIED_CITY
    state = parts[1] if len(parts) > 1 and parts[1] else None
    return Location(city=city, state=state, country=country, remote=remote)


def parse_salary(text: str | None) -> Optional[Salary]:
    """Parse ``"₹3,00,000 - ₹5,00,000 a year"`` into a Salary.

    Text without a currency or scale marker is treated as no salary at all.
    Figures are multiplied out by "lakh" or "thousand", so ``"₹12.5 - 18 lakh"``
    reads as 1,250,000 to 1,800,000. A range whose low end exceeds its high
    end is not trusted and gives None.
    """
    if not text or not _SALARY_MARKER_RE.search(text):
        return None
    scale = next((factor for pattern, factor in _SCALES if pattern.search(text)), 1)
    numbers = [round(float(n.replace(",", "")) * scale) for n in _NUMBER_RE.findall(text)]
    if not numbers:
        return None
    low = numbers[0]
    high = numbers[1] if len(numbers) > 1 else low
    if high < low:
        log.debug("Ignoring inverted salary range in %r", text)
        return None
    return Salary(min=low, max=high, currency="INR")


def fallback_identity(base_url: str, title: str, company: str, location_text: str) -> str:
    """Stable pseudo-URL for cards that expose no detail link."""
    raw = f"{title.lower()}|{company.lower()}|{location_text.lower()}"
    return f"{base_url.rstrip('/')}/#job-{hashlib.sha256(raw.encode()).hexdigest()[:16]}"


# ── Extractor ────────────────────────────────────────────────────────────


class Extractor:
    def __init__(
        self,
        layout: SourceLayout,
        lexicon: SkillLexicon,
        *,
        country: str = "India",
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.layout = layout
        self.lexicon = lexicon
        self.country = country
        self._now = now

    def parse(self, document: Any, query: dict | None = None) -> list[Posting]:
        """Parse *document* into postings; cards without title or company are dropped."""
        soup = self._load(document)
        name = self.layout.name

        for matcher in self.layout.card_matchers:
            found = matcher(soup)
            if not found:
                continue
            log.info("[%s] Found %d cards using %s", name, len(found), matcher.__name__)
            postings = []
            for card in found:
                posting = self._parse_card(card)
                if posting is not None:
                    postings.append(posting)
            dropped = len(found) - len(postings)
            if dropped:
                log.debug("[%s] Dropped %d card(s) without title/company", name, dropped)
            return postings

        log.info(
            "[%s] No jobs found with any selector for query=%r; preview: %s",
            name, (query or {}).get("keywords"), str(document)[:500].replace("\n", " "),
        )
        return []

    def _load(self, document: Any) -> BeautifulSoup:
        if not isinstance(document, str):
            raise ExtractionError(f"Expected an HTML string, got {type(document).__name__}")
        if not document.strip():
            raise ExtractionError("Empty document")
        try:
            soup = BeautifulSoup(document, "html.parser")
        except Exception as exc:
            raise ExtractionError(f"Could not parse document: {exc}") from exc
        if soup.find(True) is None:
            raise ExtractionError("Document contains no markup")
        return soup

    def _parse_card(self, card: Tag) -> Optional[Posting]:
        layout = self.layout
        title = first_match(layout.title, card)
        company = first_match(layout.company, card) or UNKNOWN_COMPANY
        if not title or not company:
            return None

        location_text = first_match(layout.location, card)
        location = parse_location(location_text, self.country)

        salary = None
        for matcher in layout.salary:
            salary = parse_salary(matcher(card))
            if salary is not None:
                break

        description = first_match(layout.description, card)

        href = first_match(layout.url, card)
        if href:
            url = href if href.startswith("http") else urljoin(layout.base_url, href)
        else:
            url = fallback_identity(layout.base_url, title, company, location_text or "")

        return Posting(
            title=title,
            company=company,
            location=location,
            description=description or NO_DESCRIPTION,
            skills=self.lexicon.tag_posting(description),
            salary=salary,
            source=Source(name=layout.name, url=url, scraped_at=self._now()),
        )
