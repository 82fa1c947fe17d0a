"""Resume skill extraction and profile merging."""

import pytest

from skillscout.lexicon import SkillLexicon
from skillscout.models import SkillTag
from skillscout.resume import (
    estimate_experience_years,
    extract_resume_skills,
    merge_skills,
    proficiency_for,
)

RESUME = """
Priya Sharma
Full Stack Developer, Bengaluru

5+ years building web apps with React, Node.js and MongoDB.
Deployed on AWS with Docker. Led a team of 4; strong communication.
Previously 2 yrs as a support engineer.
"""


class TestExtractResumeSkills:
    def test_tags_carry_category_and_confidence(self, lexicon):
        tags = {t.name: t for t in extract_resume_skills(RESUME, lexicon)}

        assert {"react", "node.js", "mongodb", "aws", "docker", "communication"} <= set(tags)
        assert tags["docker"].category == "tool"
        assert tags["aws"].category == "cloud"
        assert tags["communication"].category == "non-technical"
        confidences = {t.confidence for t in tags.values()}
        assert len(confidences) == 1
        assert 0.0 <= confidences.pop() <= 1.0

    def test_sorted_by_name(self, lexicon):
        names = [t.name for t in extract_resume_skills(RESUME, lexicon)]
        assert names == sorted(names)

    def test_high_coverage_gives_high_proficiency(self):
        lexicon = SkillLexicon({"technical": {"python": ["python"], "go": ["golang"]}})
        tags = extract_resume_skills("python and golang", lexicon)
        assert [(t.name, t.confidence, t.proficiency) for t in tags] == [
            ("go", 1.0, 4),
            ("python", 1.0, 4),
        ]

    def test_nothing_found(self, lexicon):
        assert extract_resume_skills("", lexicon) == []


@pytest.mark.parametrize("confidence, level", [(0.95, 4), (0.81, 4), (0.8, 3), (0.5, 3), (0.4, 2), (0.0, 2)])
def test_proficiency_thresholds(confidence, level):
    assert proficiency_for(confidence) == level


class TestExperienceYears:
    def test_largest_mention_wins(self):
        assert estimate_experience_years(RESUME) == 5

    def test_none(self):
        assert estimate_experience_years("Fresh graduate") == 0
        assert estimate_experience_years("") == 0


class TestMergeSkills:
    def test_only_new_names_are_added(self):
        existing = [SkillTag(name="react", proficiency=5)]
        new = [SkillTag(name="React", proficiency=2), SkillTag(name="docker", category="tool")]

        merged, added = merge_skills(existing, new)

        assert [t.name for t in merged] == ["react", "docker"]
        assert merged[0].proficiency == 5
        assert [t.name for t in added] == ["docker"]

    def test_duplicates_within_new(self):
        merged, added = merge_skills([], [SkillTag(name="aws"), SkillTag(name="AWS")])
        assert [t.name for t in merged] == ["aws"]
        assert len(added) == 1
