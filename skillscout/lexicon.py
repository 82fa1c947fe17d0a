"""Alias dictionary mapping surface text to canonical skills.

Two matching modes share this module:

* :meth:`SkillLexicon.extract` walks the categorised alias dictionary and
  reports a confidence value. It is used for resumes.
* :meth:`SkillLexicon.tag_posting` scans a flat keyword list for presence only.
  It is used for posting descriptions and never reports confidence.

The two are deliberately kept apart; posting skills are stored and compared
against user skills, and changing either side shifts every match score.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from skillscout.log import get_logger
from skillscout.models import SKILL_CATEGORIES

log = get_logger(__name__)

# category -> canonical skill -> aliases (checked in order)
SKILL_DATABASE: dict[str, dict[str, list[str]]] = {
    "technical": {
        # Languages
        "javascript": ["javascript", "js", "ecmascript", "es6", "es2015"],
        "python": ["python", "py", "python3"],
        "java": ["java", "jdk", "jvm"],
        "typescript": ["typescript", "ts"],
        "c++": ["c++", "cpp", "cplusplus"],
        "c#": ["c#", "csharp", "c-sharp"],
        "php": ["php"],
        "ruby": ["ruby", "rb"],
        "go": ["golang", "go"],
        "rust": ["rust"],
        "swift": ["swift"],
        "kotlin": ["kotlin"],
        "scala": ["scala"],
        "r": ["r programming", "r language"],
        "matlab": ["matlab"],
        # Frontend
        "react": ["react", "reactjs", "react.js"],
        "angular": ["angular", "angularjs"],
        "vue.js": ["vue", "vuejs", "vue.js"],
        "html": ["html", "html5"],
        "css": ["css", "css3"],
        "bootstrap": ["bootstrap"],
        "tailwind": ["tailwind", "tailwindcss"],
        "jquery": ["jquery"],
        "sass": ["sass", "scss"],
        "less": ["less"],
        # Backend
        "node.js": ["node", "nodejs", "node.js"],
        "express": ["express", "expressjs"],
        "django": ["django"],
        "flask": ["flask"],
        "spring": ["spring boot", "spring framework"],
        "laravel": ["laravel"],
        "ruby on rails": ["rails", "ruby on rails"],
        "asp.net": ["asp.net", "aspnet"],
        "fastapi": ["fastapi"],
        # Databases
        "mongodb": ["mongodb", "mongo"],
        "mysql": ["mysql"],
        "postgresql": ["postgresql", "postgres"],
        "sqlite": ["sqlite"],
        "redis": ["redis"],
        "cassandra": ["cassandra"],
        "oracle": ["oracle database"],
        "sql server": ["sql server", "mssql"],
        "sql": ["sql", "structured query language"],
    },
    "tool": {
        "git": ["git", "version control"],
        "github": ["github"],
        "gitlab": ["gitlab"],
        "docker": ["docker", "containerization"],
        "kubernetes": ["kubernetes", "k8s"],
        "jenkins": ["jenkins", "ci/cd"],
        "webpack": ["webpack"],
        "vs code": ["vscode", "visual studio code"],
        "intellij": ["intellij", "intellij idea"],
        "postman": ["postman"],
        "figma": ["figma"],
        "jira": ["jira"],
        "slack": ["slack"],
    },
    "cloud": {
        "aws": ["aws", "amazon web services"],
        "azure": ["azure", "microsoft azure"],
        "google cloud": ["gcp", "google cloud platform", "google cloud"],
        "firebase": ["firebase"],
        "heroku": ["heroku"],
        "netlify": ["netlify"],
        "vercel": ["vercel"],
    },
    "non-technical": {
        "leadership": ["leadership", "team lead", "managing teams"],
        "communication": ["communication", "presentation skills"],
        "project management": ["project management", "agile", "scrum"],
        "problem solving": ["problem solving", "analytical thinking"],
        "teamwork": ["teamwork", "collaboration", "team player"],
        "time management": ["time management", "multitasking"],
        "critical thinking": ["critical thinking", "decision making"],
    },
}

# Flat keyword list for posting descriptions. Keywords are stored as-is.
POSTING_KEYWORDS: list[str] = [
    "javascript", "js", "typescript", "python", "java", "react", "angular", "vue",
    "node", "nodejs", "express", "django", "flask", "spring", "mongodb", "sql",
    "mysql", "postgresql", "redis", "aws", "azure", "gcp", "docker", "kubernetes",
    "git", "ci/cd", "agile", "scrum", "rest", "api", "html", "css", "sass",
    "webpack", "babel", "jest", "testing", "tdd", "microservices",
]


def word_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive whole-word pattern for *term*.

    Lookarounds stand in for ``\\b`` so terms that start or end with a
    non-word character (``c++``, ``c#``, ``.net``) still match as words.
    """
    return re.compile(rf"(?<!\w){re.escape(term.lower())}(?!\w)", re.IGNORECASE)


@dataclass
class SkillExtraction:
    skills: set[str] = field(default_factory=set)
    categorized: dict[str, list[str]] = field(default_factory=dict)
    confidence: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "skills": sorted(self.skills),
            "categorized": {k: list(v) for k, v in self.categorized.items()},
            "confidence": self.confidence,
        }


class SkillLexicon:
    """Immutable after construction; safe to share between threads."""

    def __init__(
        self,
        database: dict[str, dict[str, list[str]]] | None = None,
        posting_keywords: Iterable[str] | None = None,
    ) -> None:
        database = SKILL_DATABASE if database is None else database
        self._entries: list[tuple[str, str, list[re.Pattern[str]]]] = []
        self._category_of: dict[str, str] = {}
        self.total_aliases = 0

        for category, skills in database.items():
            if category not in SKILL_CATEGORIES:
                raise ValueError(f"Unknown skill category: {category!r}")
            for canonical, aliases in skills.items():
                name = canonical.strip().lower()
                if name in self._category_of:
                    raise ValueError(f"Skill {name!r} listed under more than one category")
                self._category_of[name] = category
                self._entries.append((category, name, [word_pattern(a) for a in aliases]))
                self.total_aliases += len(aliases)

        keywords = POSTING_KEYWORDS if posting_keywords is None else list(posting_keywords)
        self._posting_patterns = [(kw.lower(), word_pattern(kw)) for kw in keywords]

    @classmethod
    def from_yaml(cls, path: Path) -> "SkillLexicon":
        """Load a lexicon from YAML with ``skills`` and optional ``posting_keywords`` keys."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        database = data.get("skills")
        if not isinstance(database, dict) or not database:
            raise ValueError(f"{path.name}: expected a non-empty 'skills' mapping")
        lexicon = cls(database, data.get("posting_keywords"))
        log.info(
            "Loaded lexicon from %s — %d skills, %d aliases",
            path.name, len(lexicon._entries), lexicon.total_aliases,
        )
        return lexicon

    def category_of(self, skill: str) -> str | None:
        return self._category_of.get(skill.strip().lower())

    def extract(self, text: Any) -> SkillExtraction:
        """Match the alias dictionary against *text*.

        ``confidence`` is the number of canonical skills found divided by the
        total alias count of the whole dictionary, rounded to two decimals.
        """
        if not isinstance(text, str) or not text.strip():
            return SkillExtraction()

        lowered = text.lower()
        found: set[str] = set()
        categorized: dict[str, list[str]] = {}

        for category, name, patterns in self._entries:
            for pattern in patterns:
                if pattern.search(lowered):
                    found.add(name)
                    bucket = categorized.setdefault(category, [])
                    if name not in bucket:
                        bucket.append(name)
                    break

        confidence = len(found) / self.total_aliases if self.total_aliases else 0.0
        return SkillExtraction(
            skills=found,
            categorized=categorized,
            confidence=round(confidence, 2),
        )

    def tag_posting(self, text: Any) -> set[str]:
        """Presence-only keyword tagging for posting descriptions."""
        if not isinstance(text, str) or not text:
            return set()
        lowered = text.lower()
        return {kw for kw, pattern in self._posting_patterns if pattern.search(lowered)}
