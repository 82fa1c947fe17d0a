#!/usr/bin/env python3
"""Entry point to run the scrape scheduler until interrupted.

    python run_scheduler.py            # every SCRAPE_INTERVAL_HOURS (default 6)
    python run_scheduler.py --once     # one pass, then exit
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from skillscout.cli import main
from skillscout.config import load_settings
from skillscout.log import get_logger

log = get_logger(__name__)


def _check_setup() -> bool:
    """Return True if there are no user profiles to scrape for."""
    profiles = Path(load_settings().profiles_path)
    if not profiles.exists():
        print()
        print(f"  No profiles found at {profiles}.")
        print("  Copy config/profiles.yaml from the sample and add at least one user.")
        print()
        return True
    return False


if __name__ == "__main__":
    if _check_setup():
        sys.exit(1)
    sys.exit(main(["once"] if "--once" in sys.argv else ["run"]))
