"""Read-side operations: search, lookup, and per-user recommendations."""
from __future__ import annotations

from typing import Any, Iterator

from skillscout.log import get_logger
from skillscout.matcher import MatchScorer
from skillscout.models import MatchResult, Page, Posting, UserProfile
from skillscout.profiles import UserProfileProvider
from skillscout.store import PostingFilters, PostingStore

log = get_logger(__name__)

_SCAN_PAGE_SIZE = 100


class JobService:
    def __init__(self, store: PostingStore, profiles: UserProfileProvider, scorer: MatchScorer) -> None:
        self.store = store
        self.profiles = profiles
        self.scorer = scorer

    def search(self, filters: PostingFilters | dict[str, Any] | None = None) -> Page:
        return self.store.query(filters)

    def get(self, posting_id: str) -> Posting:
        return self.store.find_by_id(posting_id)

    def match(self, user_id: str, posting_id: str) -> MatchResult:
        user = self.profiles.get(user_id)
        return self.scorer.breakdown(user, self.store.find_by_id(posting_id))

    def recommend(self, user_id: str, page: int = 1, limit: int = 20) -> Page:
        """Ranked postings for *user_id*; items are ``(Posting, MatchResult)`` pairs.

        Users without skills get the most recent postings instead. Otherwise
        candidates share at least one skill with the user, sit in the user's
        city or are remote, respect the salary preference where the posting
        states a salary, and are not already in the user's job history.
        """
        user = self.profiles.get(user_id)
        page = max(1, page)
        limit = max(1, limit)

        if not user.skill_names:
            recent = self.store.query(PostingFilters(page=page, limit=limit))
            items = [(p, self.scorer.breakdown(user, p)) for p in recent.items]
            return Page(items=items, page=page, limit=limit, total=recent.total)

        candidates = [
            p for p in self._scan(PostingFilters(skills=list(user.skill_names)))
            if _fits_preferences(user, p)
        ]
        ranked = self.scorer.rank(user, candidates)
        log.info("Recommendations for %s: %d candidate(s)", user_id, len(ranked))

        start = (page - 1) * limit
        return Page(items=ranked[start:start + limit], page=page, limit=limit, total=len(ranked))

    def _scan(self, filters: PostingFilters) -> Iterator[Posting]:
        filters.limit = _SCAN_PAGE_SIZE
        filters.page = 1
        while True:
            batch = self.store.query(filters)
            yield from batch.items
            if filters.page >= batch.pages:
                return
            filters.page += 1


def _fits_preferences(user: UserProfile, posting: Posting) -> bool:
    if posting.id in user.job_history or posting.source.url in user.job_history:
        return False

    location = user.profile.location
    if location and location.city and not posting.location.remote:
        if location.city.strip().lower() not in (posting.location.city or "").lower():
            return False

    salary_range = user.preferences.salary_range
    if salary_range and posting.salary:
        if salary_range.min and (posting.salary.min or 0) < salary_range.min:
            return False
        if salary_range.max and posting.salary.max and posting.salary.max > salary_range.max:
            return False

    return True
