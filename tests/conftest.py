"""Shared fixtures. Nothing here touches the network or the real config files."""

import os
from datetime import datetime, timedelta

import pytest

# Keep test runs from writing dated log files into the repo.
os.environ.setdefault("LOG_FILE", "false")

from skillscout.lexicon import SkillLexicon  # noqa: E402
from skillscout.models import (  # noqa: E402
    Location,
    Posting,
    Preferences,
    ProfileDetails,
    SkillTag,
    Source,
    UserProfile,
)
from skillscout.store import InMemoryStore  # noqa: E402


class FakeClock:
    """Settable wall clock for store and extractor tests."""

    def __init__(self, start=datetime(2024, 1, 15, 12, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lexicon():
    return SkillLexicon()


@pytest.fixture
def store(clock):
    return InMemoryStore(now=clock)


@pytest.fixture
def make_posting():
    def _make(url="https://in.indeed.com/viewjob?jk=abc", **overrides):
        data = dict(
            title="React Developer",
            company="TechCorp",
            location=Location(city="Mumbai", state="Maharashtra", country="India"),
            description="React and JavaScript role",
            skills={"react", "javascript"},
            salary=None,
            source=Source(name="Indeed", url=url),
        )
        data.update(overrides)
        return Posting(**data)

    return _make


@pytest.fixture
def make_user():
    def _make(user_id="u1", skills=("javascript", "react"), city="Mumbai", state="Maharashtra",
              remote=False, experience=3, salary_range=None, job_history=()):
        location = Location(city=city, state=state, country="India", remote=remote) if city or remote else None
        return UserProfile(
            id=user_id,
            skills=[SkillTag(name=s) for s in skills],
            profile=ProfileDetails(location=location, experience=experience),
            preferences=Preferences(salary_range=salary_range),
            job_history=list(job_history),
        )

    return _make

