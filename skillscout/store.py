"""Posting store: dedup by source URL, retention window, filtered queries."""
from __future__ import annotations

import copy
import fcntl
import json
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol

from skillscout.errors import NotFoundError, ValidationError
from skillscout.log import get_logger
from skillscout.models import BatchResult, Page, Posting

log = get_logger(__name__)

CREATED = "created"
DUPLICATE = "duplicate"

DEFAULT_RETENTION_DAYS = 30
DEFAULT_SORT = "-posted_date"


@dataclass
class PostingFilters:
    keywords: Optional[str] = None
    location: Optional[str] = None
    skills: list[str] = field(default_factory=list)
    remote: Optional[bool] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    page: int = 1
    limit: int = 20
    sort_by: str = DEFAULT_SORT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PostingFilters":
        remote = data.get("remote")
        if isinstance(remote, str):
            remote = remote.lower() in ("1", "true", "yes")
        return cls(
            keywords=data.get("keywords") or None,
            location=data.get("location") or None,
            skills=[s.lower() for s in data.get("skills") or []],
            remote=True if remote else None,
            min_salary=int(data["min_salary"]) if data.get("min_salary") else None,
            max_salary=int(data["max_salary"]) if data.get("max_salary") else None,
            page=max(1, int(data.get("page") or 1)),
            limit=max(1, int(data.get("limit") or 20)),
            sort_by=data.get("sort_by") or DEFAULT_SORT,
        )


class PostingStore(Protocol):
    def upsert(self, posting: Posting) -> str: ...
    def save_many(self, postings: Iterable[Posting]) -> BatchResult: ...
    def query(self, filters: PostingFilters | dict[str, Any]) -> Page: ...
    def find_by_id(self, posting_id: str) -> Posting: ...
    def purge_expired(self) -> int: ...


def validate(posting: Posting) -> None:
    missing = []
    if not (posting.title or "").strip():
        missing.append("title")
    if not (posting.company or "").strip():
        missing.append("company")
    if not (posting.source and (posting.source.url or "").strip()):
        missing.append("source.url")
    if missing:
        raise ValidationError(missing)


def _sort_key(name: str) -> Callable[[Posting], Any]:
    keys: dict[str, Callable[[Posting], Any]] = {
        "posted_date": lambda p: p.posted_date or datetime.min,
        "scraped_at": lambda p: p.source.scraped_at or datetime.min,
        "title": lambda p: p.title.lower(),
        "salary": lambda p: (p.salary.min or 0) if p.salary else 0,
    }
    if name not in keys:
        raise ValueError(f"Unsupported sort field: {name!r}")
    return keys[name]


class InMemoryStore:
    """Thread-safe in-process store.

    Check-and-insert on ``source.url`` happens under one lock, so two passes
    ingesting the same URL concurrently still produce a single record.
    """

    def __init__(
        self,
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.retention = timedelta(days=retention_days)
        self._now = now
        self._lock = threading.RLock()
        self._by_id: dict[str, Posting] = {}
        self._id_by_url: dict[str, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    def _is_live(self, posting: Posting, now: datetime) -> bool:
        return posting.is_active and (posting.expires_at is None or posting.expires_at > now)

    def upsert(self, posting: Posting) -> str:
        """Insert *posting*, or refresh ``source.scraped_at`` if its URL is already live."""
        validate(posting)
        url = posting.source.url.strip()
        with self._lock:
            now = self._now()
            existing_id = self._id_by_url.get(url)
            if existing_id is not None:
                existing = self._by_id[existing_id]
                if self._is_live(existing, now):
                    existing.source.scraped_at = now
                    return DUPLICATE
                # Stale record for the same URL; the new sighting replaces it.
                del self._by_id[existing_id]

            record = copy.deepcopy(posting)
            record.id = uuid.uuid4().hex
            record.source.url = url
            record.source.scraped_at = record.source.scraped_at or now
            record.skills = {s.lower() for s in record.skills}
            record.is_active = True
            record.posted_date = now
            record.expires_at = now + self.retention
            self._by_id[record.id] = record
            self._id_by_url[url] = record.id
            return CREATED

    def save_many(self, postings: Iterable[Posting]) -> BatchResult:
        result = BatchResult()
        for posting in postings or []:
            try:
                outcome = self.upsert(posting)
            except ValidationError as exc:
                log.warning("Rejected posting %r: %s", getattr(posting, "title", None), exc)
                result.errors += 1
                continue
            except Exception as exc:
                log.error("Error saving posting %r: %s", getattr(posting, "title", None), exc)
                result.errors += 1
                continue
            if outcome == CREATED:
                result.saved += 1
            else:
                result.duplicates += 1
        return result

    def find_by_id(self, posting_id: str) -> Posting:
        with self._lock:
            posting = self._by_id.get(posting_id)
            if posting is None:
                raise NotFoundError("Posting", posting_id)
            return copy.deepcopy(posting)

    def deactivate(self, posting_id: str) -> None:
        with self._lock:
            posting = self._by_id.get(posting_id)
            if posting is None:
                raise NotFoundError("Posting", posting_id)
            posting.is_active = False

    def purge_expired(self) -> int:
        """Delete postings past ``expires_at``. Safe to call repeatedly."""
        with self._lock:
            now = self._now()
            expired = [
                pid for pid, p in self._by_id.items()
                if p.expires_at is not None and p.expires_at <= now
            ]
            for pid in expired:
                posting = self._by_id.pop(pid)
                if self._id_by_url.get(posting.source.url) == pid:
                    del self._id_by_url[posting.source.url]
        if expired:
            log.info("Purged %d expired posting(s)", len(expired))
        return len(expired)

    def query(self, filters: PostingFilters | dict[str, Any] | None = None) -> Page:
        if filters is None:
            filters = PostingFilters()
        elif isinstance(filters, dict):
            filters = PostingFilters.from_dict(filters)

        descending = filters.sort_by.startswith("-")
        key = _sort_key(filters.sort_by.lstrip("-+"))

        with self._lock:
            now = self._now()
            matched = [
                p for p in self._by_id.values()
                if self._is_live(p, now) and _matches(p, filters)
            ]
            matched.sort(key=key, reverse=descending)
            start = (filters.page - 1) * filters.limit
            items = [copy.deepcopy(p) for p in matched[start:start + filters.limit]]

        return Page(items=items, page=filters.page, limit=filters.limit, total=len(matched))

    # ── Snapshot persistence ─────────────────────────────────────────────

    def dump(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            rows = [p.to_dict() for p in self._by_id.values()]
        # Truncate only once the exclusive lock is held, so readers never see a partial file.
        with open(path, "a+", encoding="utf-8") as f:
            _flock(f)
            f.seek(0)
            f.truncate()
            json.dump({"postings": rows}, f, indent=2, ensure_ascii=False)
            f.flush()
            _funlock(f)
        log.debug("Saved %d posting(s) → %s", len(rows), path.name)

    def load(self, path: Path) -> int:
        if not path.exists():
            return 0
        with open(path, "r", encoding="utf-8") as f:
            _flock(f, exclusive=False)
            data = json.load(f)
            _funlock(f)
        with self._lock:
            for row in data.get("postings", []):
                posting = Posting.from_dict(row)
                posting.id = posting.id or uuid.uuid4().hex
                self._by_id[posting.id] = posting
                self._id_by_url[posting.source.url] = posting.id
        log.info("Loaded %d posting(s) from %s", len(data.get("postings", [])), path.name)
        return len(data.get("postings", []))


def _matches(posting: Posting, f: PostingFilters) -> bool:
    if f.keywords:
        haystack = f"{posting.title} {posting.description}".lower()
        terms = f.keywords.lower().split()
        if not any(t in haystack or t in posting.skills for t in terms):
            return False

    if f.location:
        needle = f.location.lower()
        city = (posting.location.city or "").lower()
        state = (posting.location.state or "").lower()
        if needle not in city and needle not in state:
            return False

    if f.skills and not posting.skills.intersection(s.lower() for s in f.skills):
        return False

    if f.remote and not posting.location.remote:
        return False

    if f.min_salary is not None:
        if not posting.salary or posting.salary.min is None or posting.salary.min < f.min_salary:
            return False

    if f.max_salary is not None:
        if not posting.salary or posting.salary.max is None or posting.salary.max > f.max_salary:
            return False

    return True


def _flock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _funlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass
