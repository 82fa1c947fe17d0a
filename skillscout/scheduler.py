"""Demand-driven scraping: re-scrape the skills users actually have.

A pass aggregates skills across all profiles, scrapes the most common ones
one after another, saves what it finds and purges expired postings. Passes
never overlap; a pass requested while another is running is skipped.
"""
from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional

from skillscout.errors import FetchCancelled
from skillscout.log import get_logger
from skillscout.models import ScrapeRun
from skillscout.profiles import MAX_AGGREGATED_SKILLS, UserProfileProvider
from skillscout.sources import JobSource, scrape
from skillscout.store import PostingStore

log = get_logger(__name__)

DEFAULT_TOP_SKILLS = 10
DEFAULT_TARGET_DELAY_S = 5.0
DEFAULT_LOCATION = "India"


class ScrapeScheduler:
    def __init__(
        self,
        source: JobSource,
        store: PostingStore,
        profiles: UserProfileProvider,
        *,
        top_skills: int = DEFAULT_TOP_SKILLS,
        target_delay_s: float = DEFAULT_TARGET_DELAY_S,
        default_location: str = DEFAULT_LOCATION,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.source = source
        self.store = store
        self.profiles = profiles
        self.top_skills = top_skills
        self.target_delay_s = target_delay_s
        self.default_location = default_location
        # Shared with the source's fetcher so stop() also wakes rate-limit waits.
        self._stop = stop_event or threading.Event()
        self._pass_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.last_pass_at: Optional[datetime] = None
        self.last_runs: list[ScrapeRun] = []

    @property
    def running(self) -> bool:
        """True while a pass is in flight."""
        return self._pass_lock.locked()

    @property
    def started(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, interval_hours: float) -> bool:
        """Run a pass now, then every *interval_hours*, on a background thread."""
        if self.started:
            log.warning("Scheduler already started — ignoring start()")
            return False
        self._stop.clear()
        interval_s = max(0.0, interval_hours * 3600)
        self._thread = threading.Thread(
            target=self._loop, args=(interval_s,), name="scrape-scheduler", daemon=True,
        )
        self._thread.start()
        log.info("Scheduler started: every %.1f hour(s), top %d skill(s)", interval_hours, self.top_skills)
        return True

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        log.info("Scheduler stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until stop() is called; returns True once stopped."""
        return self._stop.wait(timeout)

    def _loop(self, interval_s: float) -> None:
        while not self._stop.is_set():
            try:
                self.run_pass()
            except Exception:
                log.exception("Scrape pass failed; next attempt in %.0f s", interval_s)
            if self._stop.wait(interval_s):
                break

    def targets(self) -> list[str]:
        ranked = self.profiles.skill_frequency(MAX_AGGREGATED_SKILLS)
        return [name for name, _ in ranked[: self.top_skills]]

    def run_pass(self) -> list[ScrapeRun]:
        """One ingestion pass over the current top skills.

        Returns an empty list when no profile has skills or when another pass
        is already running.
        """
        if not self._pass_lock.acquire(blocking=False):
            log.info("Scrape pass already in progress — skipping")
            return []
        try:
            try:
                keywords = self.targets()
            except Exception as exc:
                log.error("Could not read user skills: %s", exc)
                keywords = []
            if not keywords:
                log.info("No user skills found — skipping scrape pass")
                return []

            log.info("Starting scrape pass for %d skill(s): %s", len(keywords), ", ".join(keywords))
            runs: list[ScrapeRun] = []
            for i, keyword in enumerate(keywords):
                if self._stop.is_set():
                    log.info("Stop requested — ending pass after %d target(s)", len(runs))
                    break
                runs.append(self._scrape_one(keyword, self.default_location))
                if i < len(keywords) - 1 and self._stop.wait(self.target_delay_s):
                    log.info("Stop requested — ending pass after %d target(s)", len(runs))
                    break

            self._purge()
            self.last_runs = runs
            self.last_pass_at = datetime.now()
            log.info(
                "Scrape pass done: %d target(s), %d saved, %d duplicate(s), %d failed",
                len(runs),
                sum(r.saved for r in runs),
                sum(r.duplicates for r in runs),
                sum(1 for r in runs if r.error),
            )
            return runs
        finally:
            self._pass_lock.release()

    def trigger(self, keyword: str, location: Optional[str] = None) -> ScrapeRun:
        """Scrape one caller-supplied keyword, save the results and purge."""
        if not self._pass_lock.acquire(blocking=False):
            log.info("Scrape pass already in progress — manual trigger for %r skipped", keyword)
            return ScrapeRun(keyword=keyword, error="scrape pass already in progress")
        try:
            run = self._scrape_one(keyword, location or self.default_location)
            self._purge()
            return run
        finally:
            self._pass_lock.release()

    def _scrape_one(self, keyword: str, location: str) -> ScrapeRun:
        run = ScrapeRun(keyword=keyword)
        try:
            postings = scrape(self.source, {"keywords": keyword, "location": location})
            result = self.store.save_many(postings)
        except FetchCancelled as exc:
            log.info("Scrape for %r cancelled", keyword)
            run.error = str(exc) or "cancelled"
            return run
        except Exception as exc:
            log.error("Error scraping for skill %r: %s", keyword, exc)
            run.error = str(exc) or type(exc).__name__
            return run

        run.jobs_found = len(postings)
        run.saved = result.saved
        run.duplicates = result.duplicates
        run.errors = result.errors
        log.info(
            "Skill %r: %d found, %d saved, %d duplicate(s), %d error(s)",
            keyword, run.jobs_found, run.saved, run.duplicates, run.errors,
        )
        return run

    def _purge(self) -> None:
        try:
            self.store.purge_expired()
        except Exception as exc:
            log.error("Error cleaning up expired postings: %s", exc)
