"""Exception types raised across the ingestion and matching core."""
from __future__ import annotations


class SkillScoutError(Exception):
    """Base class for all errors raised by this package."""


class NetworkError(SkillScoutError):
    """A fetch failed after every retry attempt was used up."""

    def __init__(self, url: str, last_error: BaseException | None, attempts: int) -> None:
        self.url = url
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"GET {url} failed after {attempts} attempt(s): {last_error}")


class FetchCancelled(SkillScoutError):
    """A rate-limit or backoff wait was interrupted by shutdown."""


class ExtractionError(SkillScoutError):
    """The document as a whole could not be parsed."""


class ValidationError(SkillScoutError):
    """A posting is missing fields the store requires."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Posting missing required field(s): {', '.join(missing)}")


class NotFoundError(SkillScoutError):
    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")
