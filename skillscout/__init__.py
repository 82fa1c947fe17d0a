"""SkillScout: scrape job postings, tag their skills, rank them against user profiles."""

__version__ = "0.1.0"
