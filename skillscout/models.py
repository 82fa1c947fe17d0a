"""Data models for postings, skills, user profiles and scrape outcomes."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

SKILL_CATEGORIES: tuple[str, ...] = ("technical", "tool", "cloud", "non-technical", "industry")

UNKNOWN_COMPANY = "Unknown Company"
UNSPECIFIED_CITY = "Not specified"


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def _parse_dt(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass
class Location:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    remote: bool = False

    def to_dict(self) -> dict:
        return {"city": self.city, "state": self.state, "country": self.country, "remote": self.remote}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Location"]:
        if not data:
            return None
        return cls(
            city=data.get("city"),
            state=data.get("state"),
            country=data.get("country"),
            remote=bool(data.get("remote", False)),
        )


@dataclass
class Salary:
    min: Optional[int] = None
    max: Optional[int] = None
    currency: str = "INR"

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max, "currency": self.currency}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Salary"]:
        if not data:
            return None
        return cls(min=data.get("min"), max=data.get("max"), currency=data.get("currency") or "INR")


@dataclass
class Source:
    name: str = ""
    url: str = ""
    scraped_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url, "scraped_at": _iso(self.scraped_at)}


@dataclass
class Posting:
    """A job posting as extracted from a source and kept by the store."""
    title: str = ""
    company: str = ""
    location: Location = field(default_factory=Location)
    description: str = ""
    skills: set[str] = field(default_factory=set)
    salary: Optional[Salary] = None
    source: Source = field(default_factory=Source)
    is_active: bool = True
    posted_date: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location.to_dict(),
            "description": self.description,
            "skills": sorted(self.skills),
            "salary": self.salary.to_dict() if self.salary else None,
            "source": self.source.to_dict(),
            "is_active": self.is_active,
            "posted_date": _iso(self.posted_date),
            "expires_at": _iso(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Posting":
        src = data.get("source") or {}
        return cls(
            id=data.get("id"),
            title=data.get("title", ""),
            company=data.get("company", ""),
            location=Location.from_dict(data.get("location")) or Location(),
            description=data.get("description", ""),
            skills={s.lower() for s in data.get("skills", [])},
            salary=Salary.from_dict(data.get("salary")),
            source=Source(
                name=src.get("name", ""),
                url=src.get("url", ""),
                scraped_at=_parse_dt(src.get("scraped_at")),
            ),
            is_active=bool(data.get("is_active", True)),
            posted_date=_parse_dt(data.get("posted_date")),
            expires_at=_parse_dt(data.get("expires_at")),
        )


@dataclass
class SkillTag:
    name: str
    category: str = "technical"
    confidence: Optional[float] = None  # resume extraction only
    proficiency: Optional[int] = None  # user profiles only, 1-5

    def __post_init__(self) -> None:
        self.name = self.name.strip().lower()
        if self.category not in SKILL_CATEGORIES:
            raise ValueError(f"Unknown skill category: {self.category!r}")
        if self.proficiency is not None and not 1 <= self.proficiency <= 5:
            raise ValueError(f"Proficiency must be 1-5, got {self.proficiency}")

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"name": self.name, "category": self.category}
        if self.confidence is not None:
            data["confidence"] = self.confidence
        if self.proficiency is not None:
            data["proficiency"] = self.proficiency
        return data


@dataclass
class SalaryRange:
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass
class ProfileDetails:
    location: Optional[Location] = None
    experience: Optional[float] = None  # years


@dataclass
class Preferences:
    salary_range: Optional[SalaryRange] = None
    job_types: list[str] = field(default_factory=lambda: ["full-time"])


@dataclass
class UserProfile:
    id: str
    skills: list[SkillTag] = field(default_factory=list)
    profile: ProfileDetails = field(default_factory=ProfileDetails)
    preferences: Preferences = field(default_factory=Preferences)
    job_history: list[str] = field(default_factory=list)

    @property
    def skill_names(self) -> list[str]:
        return [s.name for s in self.skills]

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        prof = data.get("profile") or {}
        prefs = data.get("preferences") or {}
        sr = prefs.get("salary_range")
        skills = []
        for raw in data.get("skills", []):
            if isinstance(raw, str):
                skills.append(SkillTag(name=raw))
            else:
                skills.append(
                    SkillTag(
                        name=raw["name"],
                        category=raw.get("category", "technical"),
                        confidence=raw.get("confidence"),
                        proficiency=raw.get("proficiency"),
                    )
                )
        return cls(
            id=str(data["id"]),
            skills=skills,
            profile=ProfileDetails(
                location=Location.from_dict(prof.get("location")),
                experience=prof.get("experience"),
            ),
            preferences=Preferences(
                salary_range=SalaryRange(min=sr.get("min"), max=sr.get("max")) if sr else None,
                job_types=list(prefs.get("job_types") or ["full-time"]),
            ),
            job_history=[str(j) for j in data.get("job_history", [])],
        )


@dataclass(frozen=True)
class MatchResult:
    overall: int
    skills: int
    location: int
    salary: int
    experience: int

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "breakdown": {
                "skills": self.skills,
                "location": self.location,
                "salary": self.salary,
                "experience": self.experience,
            },
        }


@dataclass
class BatchResult:
    saved: int = 0
    duplicates: int = 0
    errors: int = 0


@dataclass
class Page:
    items: list
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass
class ScrapeRun:
    keyword: str
    jobs_found: int = 0
    saved: int = 0
    duplicates: int = 0
    errors: int = 0
    timestamp: datetime = field(default_factory=datetime.now)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "jobs_found": self.jobs_found,
            "saved": self.saved,
            "duplicates": self.duplicates,
            "errors": self.errors,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error,
        }
