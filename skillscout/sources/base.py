"""Capability interface every job source provides, and the generic pipeline."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from skillscout.log import get_logger
from skillscout.models import Posting

log = get_logger(__name__)


@runtime_checkable
class JobSource(Protocol):
    name: str

    def fetch(self, query: dict) -> str:
        """Return the raw search-results document for *query*."""
        ...

    def parse(self, document: str, query: dict) -> list[Posting]:
        """Turn a document returned by :meth:`fetch` into postings."""
        ...


def scrape(source: JobSource, query: dict) -> list[Posting]:
    """Fetch then parse one query against *source*.

    Rate limiting is the source's fetcher's job; errors propagate to the caller.
    """
    log.info("[%s] Starting scrape for %r", source.name, query.get("keywords"))
    document = source.fetch(query)
    postings = source.parse(document, query)
    log.info("[%s] Scrape completed. Found %d jobs", source.name, len(postings))
    return postings
