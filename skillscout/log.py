"""SkillScout logging.

Every module calls ``get_logger(__name__)``. The first call attaches two
handlers to the root logger: stdout at ``LOG_LEVEL`` and a per-day file,
``skillscout_YYYY-MM-DD.log``, at DEBUG. The file goes to ``LOG_DIR``
(default ``logs/`` at the repo root) and is skipped when ``LOG_FILE`` is
false, which the test suite relies on.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

_DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMATTER = logging.Formatter(
    "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s", datefmt="%Y-%m-%d %H:%M:%S",
)
_TRUTHY = ("1", "true", "yes")
_configured = False


def get_logger(name: str) -> logging.Logger:
    global _configured
    if not _configured:
        _setup_root()
        _configured = True
    return logging.getLogger(name)


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(_FORMATTER)
    root.addHandler(handler)


def _setup_root() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    # Respect handlers installed by an embedding application or pytest.
    if root.handlers:
        return

    _attach(root, logging.StreamHandler(sys.stdout), level)

    if os.environ.get("LOG_FILE", "true").lower() not in _TRUTHY:
        return
    log_dir = Path(os.environ.get("LOG_DIR") or _DEFAULT_LOG_DIR)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / f"skillscout_{date.today():%Y-%m-%d}.log", encoding="utf-8")
    except OSError:
        root.warning("Could not open log directory %s; logging to stdout only", log_dir)
        return
    _attach(root, handler, logging.DEBUG)
