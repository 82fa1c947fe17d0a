"""Turn plain resume text into profile skill tags.

Document decoding happens upstream; everything here takes already-extracted
text. Resume extraction reports a confidence per run, unlike posting tagging,
which only records presence.
"""
from __future__ import annotations

import re
from typing import Iterable

from skillscout.lexicon import SkillLexicon
from skillscout.log import get_logger
from skillscout.models import SkillTag

log = get_logger(__name__)

_YEARS_RE = re.compile(r"(\d{1,2})\+?\s*(?:years?|yrs?)", re.IGNORECASE)


def proficiency_for(confidence: float) -> int:
    if confidence > 0.8:
        return 4
    if confidence > 0.4:
        return 3
    return 2


def extract_resume_skills(text: str, lexicon: SkillLexicon) -> list[SkillTag]:
    """Skill tags found in *text*, sorted by name.

    Every tag carries the run's confidence and a proficiency derived from it.
    """
    result = lexicon.extract(text)
    proficiency = proficiency_for(result.confidence)
    tags = [
        SkillTag(
            name=skill,
            category=lexicon.category_of(skill) or "technical",
            confidence=result.confidence,
            proficiency=proficiency,
        )
        for skill in sorted(result.skills)
    ]
    log.info("Resume: %d skill(s) found, confidence %.2f", len(tags), result.confidence)
    return tags


def estimate_experience_years(text: str) -> int:
    """Largest "N years" / "N yrs" mention in *text*, or 0."""
    years = 0
    for m in _YEARS_RE.finditer(text or ""):
        y = int(m.group(1))
        if y > years:
            years = y
    return years


def merge_skills(existing: Iterable[SkillTag], new: Iterable[SkillTag]) -> tuple[list[SkillTag], list[SkillTag]]:
    """Append tags from *new* whose name is not already present.

    Returns ``(merged, added)``. Existing tags keep their position and values.
    """
    merged = list(existing)
    seen = {t.name for t in merged}
    added: list[SkillTag] = []
    for tag in new:
        if tag.name in seen:
            continue
        seen.add(tag.name)
        merged.append(tag)
        added.append(tag)
    return merged, added
