from __future__ import annotations

import threading

from .base import JobSource, scrape
from .indeed import IndeedSource, indeed_layout
from .mock import MockSource

from skillscout.config import Settings
from skillscout.extractor import Extractor
from skillscout.fetcher import Fetcher
from skillscout.lexicon import SkillLexicon
from skillscout.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSource", "IndeedSource", "MockSource", "indeed_layout",
    "scrape", "build_source",
]


def build_source(
    settings: Settings,
    lexicon: SkillLexicon,
    *,
    cancel_event: threading.Event | None = None,
) -> JobSource:
    """Construct the configured source with its fetcher and extractor."""
    layout = indeed_layout(settings.base_url)
    extractor = Extractor(layout, lexicon, country=settings.country)

    if settings.source == "mock":
        log.info("Registered source: Mock (offline sample markup)")
        return MockSource(extractor)

    if settings.source != "indeed":
        raise ValueError(f"Unknown source: {settings.source!r}")

    fetcher = Fetcher(
        name=layout.name,
        rate_limit_ms=settings.rate_limit_ms,
        max_retries=settings.max_retries,
        retry_base_ms=settings.retry_base_ms,
        timeout_s=settings.timeout_s,
        cancel_event=cancel_event,
    )
    log.info("Registered source: Indeed (%s)", settings.base_url)
    return IndeedSource(
        fetcher,
        extractor,
        base_url=settings.base_url,
        default_location=settings.default_location,
    )
