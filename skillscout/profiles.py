"""Read-only access to user profiles and aggregate skill demand."""
from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Iterable, Protocol

import yaml

from skillscout.errors import NotFoundError
from skillscout.log import get_logger
from skillscout.models import UserProfile

log = get_logger(__name__)

MAX_AGGREGATED_SKILLS = 20


class UserProfileProvider(Protocol):
    def get(self, user_id: str) -> UserProfile: ...
    def all(self) -> list[UserProfile]: ...
    def skill_frequency(self, limit: int = MAX_AGGREGATED_SKILLS) -> list[tuple[str, int]]: ...


def aggregate_skills(profiles: Iterable[UserProfile], limit: int = MAX_AGGREGATED_SKILLS) -> list[tuple[str, int]]:
    """Most common skill names across *profiles*, most frequent first.

    A skill counts once per profile. Ties are ordered by name.
    """
    counts: Counter[str] = Counter()
    for profile in profiles:
        counts.update({s.name for s in profile.skills if s.name})
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[: max(0, min(limit, MAX_AGGREGATED_SKILLS))]


class InMemoryProfileProvider:
    def __init__(self, profiles: Iterable[UserProfile] = ()) -> None:
        self._profiles: dict[str, UserProfile] = {p.id: p for p in profiles}

    def get(self, user_id: str) -> UserProfile:
        try:
            return self._profiles[user_id]
        except KeyError:
            raise NotFoundError("User", user_id) from None

    def all(self) -> list[UserProfile]:
        return list(self._profiles.values())

    def skill_frequency(self, limit: int = MAX_AGGREGATED_SKILLS) -> list[tuple[str, int]]:
        return aggregate_skills(self._profiles.values(), limit)


class YamlProfileProvider(InMemoryProfileProvider):
    """Profiles loaded once from a YAML file with a top-level ``users`` list."""

    def __init__(self, path: Path) -> None:
        users: list[dict] = []
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            users = data.get("users") or []
        else:
            log.warning("Profiles file %s not found — no user demand to scrape for", path)
        super().__init__(UserProfile.from_dict(u) for u in users)
        log.info("Loaded %d user profile(s) from %s", len(self.all()), path.name)
