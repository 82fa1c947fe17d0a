"""Score how well a posting fits a user profile.

Four sub-scores in [0, 1] are combined with fixed weights:

    skills      50
    location    20
    salary      15
    experience  15

Every sub-score falls back to 0.5 when either side lacks the data it needs,
so scoring never fails on partial records. All functions here are pure.
"""
from __future__ import annotations

import math
import re
from typing import Iterable, Optional

from skillscout.log import get_logger
from skillscout.models import (
    UNSPECIFIED_CITY,
    Location,
    MatchResult,
    Posting,
    Salary,
    SalaryRange,
    UserProfile,
)

log = get_logger(__name__)

NEUTRAL = 0.5

# Seniority ladder: (years required, title pattern). The highest rung
# mentioned in a title wins, so "Senior Software Architect" reads as 7.
SENIORITY_LADDER: list[tuple[int, re.Pattern[str]]] = [
    (0, re.compile(r"\b(?:intern|internship|trainee)\b", re.IGNORECASE)),
    (1, re.compile(r"\b(?:junior|jr|entry)\b", re.IGNORECASE)),
    (3, re.compile(r"\b(?:mid|intermediate)\b", re.IGNORECASE)),
    (5, re.compile(r"\b(?:senior|sr)\b", re.IGNORECASE)),
    (7, re.compile(r"\b(?:lead|principal|architect)\b", re.IGNORECASE)),
    (10, re.compile(r"\b(?:staff|distinguished)\b", re.IGNORECASE)),
]
DEFAULT_REQUIRED_YEARS = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def skill_score(user_skills: Iterable[str], posting_skills: Iterable[str]) -> float:
    user = {s.strip().lower() for s in user_skills if s and s.strip()}
    if not user:
        return 0.0
    posting = {s.strip().lower() for s in posting_skills if s and s.strip()}
    if not posting:
        return NEUTRAL

    common = user & posting
    match_pct = len(common) / len(posting)
    coverage_bonus = len(common) / len(user)
    return 0.7 * match_pct + 0.3 * coverage_bonus


def _unknown(location: Optional[Location]) -> bool:
    if location is None:
        return True
    city = (location.city or "").strip()
    return not location.remote and (not city or city == UNSPECIFIED_CITY)


def location_score(user_location: Optional[Location], posting_location: Optional[Location]) -> float:
    if _unknown(user_location) or _unknown(posting_location):
        return NEUTRAL

    if posting_location.remote and user_location.remote:
        return 1.0

    if user_location.city and posting_location.city:
        if user_location.city.strip().lower() == posting_location.city.strip().lower():
            return 1.0
        if user_location.state and posting_location.state:
            if user_location.state.strip().lower() == posting_location.state.strip().lower():
                return 0.6

    if posting_location.remote:
        return 0.7

    return 0.2


def salary_score(salary_range: Optional[SalaryRange], salary: Optional[Salary]) -> float:
    if salary_range is None or (salary_range.min is None and salary_range.max is None):
        return NEUTRAL
    if salary is None or (not salary.min and not salary.max):
        return NEUTRAL

    user_min = salary_range.min or 0
    user_max = salary_range.max if salary_range.max is not None else math.inf
    job_min = salary.min or 0
    job_max = salary.max or salary.min or math.inf

    if job_min >= user_min and job_max <= user_max:
        return 1.0
    if job_max >= user_min and job_min <= user_max:
        return 0.7
    if job_min > user_max:
        return 0.8
    if job_max < user_min:
        return 0.3
    return NEUTRAL


def required_years(title: str) -> int:
    """Experience implied by seniority words in *title*; 3 when none appear."""
    matched = [years for years, pattern in SENIORITY_LADDER if pattern.search(title)]
    return max(matched) if matched else DEFAULT_REQUIRED_YEARS


def experience_score(user_years: Optional[float], title: Optional[str]) -> float:
    if user_years is None or not title or not title.strip():
        return NEUTRAL

    diff = abs(user_years - required_years(title))
    if diff == 0:
        return 1.0
    if diff <= 1:
        return 0.9
    if diff <= 2:
        return 0.7
    if diff <= 3:
        return 0.5
    return 0.3


class MatchScorer:
    """Stateless scorer; one instance can serve any number of threads."""

    WEIGHTS: dict[str, int] = {
        "skills": 50,
        "location": 20,
        "salary": 15,
        "experience": 15,
    }

    def sub_scores(self, user: UserProfile, posting: Posting) -> dict[str, float]:
        return {
            "skills": skill_score(user.skill_names, posting.skills),
            "location": location_score(user.profile.location, posting.location),
            "salary": salary_score(user.preferences.salary_range, posting.salary),
            "experience": experience_score(user.profile.experience, posting.title),
        }

    def _overall(self, subs: dict[str, float]) -> int:
        total_weight = sum(self.WEIGHTS[k] for k in subs)
        if not total_weight:
            return 0
        weighted = sum(subs[k] * self.WEIGHTS[k] for k in subs)
        return max(0, min(100, _round_half_up(weighted / total_weight * 100)))

    def score(self, user: UserProfile, posting: Posting) -> int:
        """Overall compatibility, 0-100."""
        return self._overall(self.sub_scores(user, posting))

    def breakdown(self, user: UserProfile, posting: Posting) -> MatchResult:
        subs = self.sub_scores(user, posting)
        return MatchResult(
            overall=self._overall(subs),
            skills=_round_half_up(subs["skills"] * 100),
            location=_round_half_up(subs["location"] * 100),
            salary=_round_half_up(subs["salary"] * 100),
            experience=_round_half_up(subs["experience"] * 100),
        )

    def rank(self, user: UserProfile, postings: Iterable[Posting]) -> list[tuple[Posting, MatchResult]]:
        """Best match first.

        Ties on the overall score go to the higher skill sub-score, then the
        more recently posted posting, then the source URL.
        """
        scored = [(p, self.breakdown(user, p)) for p in postings]

        def key(item: tuple[Posting, MatchResult]) -> tuple:
            posting, result = item
            posted = posting.posted_date.timestamp() if posting.posted_date else -math.inf
            return (-result.overall, -result.skills, -posted, posting.source.url)

        scored.sort(key=key)
        return scored
