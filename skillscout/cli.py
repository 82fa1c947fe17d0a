"""
SkillScout CLI.

Usage:
    skillscout [command] [options]

Commands:
    run         Start the scheduler and scrape every interval until interrupted
    once        Run a single scrape pass over the current top user skills
    scrape      Scrape one keyword now
    skills      Extract skills from a plain-text resume
    recommend   Rank stored postings for a user

Examples:
    skillscout once
    skillscout scrape "react" --location Bengaluru
    skillscout skills resume.txt
    skillscout recommend u1 --limit 5
"""
from __future__ import annotations

import argparse
import json
import sys
import threading
from pathlib import Path
from typing import Any, Optional

from skillscout.config import DATA_DIR, Settings, ensure_dirs, load_settings
from skillscout.errors import SkillScoutError
from skillscout.lexicon import SkillLexicon
from skillscout.log import get_logger
from skillscout.matcher import MatchScorer
from skillscout.profiles import YamlProfileProvider
from skillscout.resume import estimate_experience_years, extract_resume_skills
from skillscout.scheduler import ScrapeScheduler
from skillscout.service import JobService
from skillscout.sources import build_source
from skillscout.store import InMemoryStore

log = get_logger(__name__)

_POLL_S = 30.0


class App:
    """Everything a command needs, wired from one Settings instance."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.stop_event = threading.Event()
        self.lexicon = (
            SkillLexicon.from_yaml(Path(settings.lexicon_path)) if settings.lexicon_path else SkillLexicon()
        )
        self.store = InMemoryStore(retention_days=settings.retention_days)
        self.store_path = Path(settings.store_path) if settings.store_path else DATA_DIR / "postings.json"
        self.profiles = YamlProfileProvider(Path(settings.profiles_path))
        self._scheduler: Optional[ScrapeScheduler] = None

    @property
    def scheduler(self) -> ScrapeScheduler:
        if self._scheduler is None:
            source = build_source(self.settings, self.lexicon, cancel_event=self.stop_event)
            self._scheduler = ScrapeScheduler(
                source,
                self.store,
                self.profiles,
                top_skills=self.settings.top_skills,
                target_delay_s=self.settings.target_delay_s,
                default_location=self.settings.default_location,
                stop_event=self.stop_event,
            )
        return self._scheduler

    def load_store(self) -> None:
        self.store.load(self.store_path)

    def save_store(self) -> None:
        ensure_dirs()
        self.store.dump(self.store_path)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_run(args, app: App) -> int:
    app.load_store()
    scheduler = app.scheduler
    interval = args.interval or app.settings.interval_hours
    scheduler.start(interval)
    saved_at = None
    try:
        while not scheduler.wait(_POLL_S):
            if scheduler.last_pass_at != saved_at:
                saved_at = scheduler.last_pass_at
                app.save_store()
                _print_json([r.to_dict() for r in scheduler.last_runs])
    except KeyboardInterrupt:
        log.info("Interrupted — stopping scheduler")
    finally:
        scheduler.stop()
        app.save_store()
    return 0


def cmd_once(args, app: App) -> int:
    app.load_store()
    runs = app.scheduler.run_pass()
    app.save_store()
    _print_json([r.to_dict() for r in runs])
    return 0 if all(r.error is None for r in runs) else 2


def cmd_scrape(args, app: App) -> int:
    app.load_store()
    run = app.scheduler.trigger(args.keyword, args.location)
    app.save_store()
    _print_json(run.to_dict())
    return 0 if run.error is None else 2


def cmd_skills(args, app: App) -> int:
    text = Path(args.file).read_text(encoding="utf-8", errors="ignore")
    tags = extract_resume_skills(text, app.lexicon)
    _print_json({
        "skills": [t.to_dict() for t in tags],
        "experience_years": estimate_experience_years(text),
    })
    return 0


def cmd_recommend(args, app: App) -> int:
    app.load_store()
    service = JobService(app.store, app.profiles, MatchScorer())
    page = service.recommend(args.user_id, page=args.page, limit=args.limit)
    _print_json({
        "page": page.page,
        "pages": page.pages,
        "total": page.total,
        "items": [{**posting.to_dict(), "match": match.to_dict()} for posting, match in page.items],
    })
    return 0


COMMANDS = {
    "run": cmd_run,
    "once": cmd_once,
    "scrape": cmd_scrape,
    "skills": cmd_skills,
    "recommend": cmd_recommend,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillscout",
        description="SkillScout - demand-driven job posting ingestion and matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--settings", help="Path to settings YAML (default: config/settings.yaml)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the scheduler until interrupted")
    run_parser.add_argument("--interval", type=float, help="Hours between passes")

    subparsers.add_parser("once", help="Run one scrape pass")

    scrape_parser = subparsers.add_parser("scrape", help="Scrape one keyword now")
    scrape_parser.add_argument("keyword", help="Search keyword, e.g. a skill name")
    scrape_parser.add_argument("--location", "-l", help="Location to search in")

    skills_parser = subparsers.add_parser("skills", help="Extract skills from a plain-text resume")
    skills_parser.add_argument("file", help="Path to a .txt resume")

    rec_parser = subparsers.add_parser("recommend", help="Recommend postings for a user")
    rec_parser.add_argument("user_id", help="User id from the profiles file")
    rec_parser.add_argument("--page", type=int, default=1)
    rec_parser.add_argument("--limit", "-n", type=int, default=20)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    settings = load_settings(Path(args.settings) if args.settings else None)
    try:
        return COMMANDS[args.command](args, App(settings))
    except KeyboardInterrupt:
        log.info("Operation cancelled.")
        return 130
    except (SkillScoutError, OSError, ValueError) as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
