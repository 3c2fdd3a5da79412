from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

LOGGER_NAME = "arena_settings"
LATEST_LOG = "latest.log"
ARCHIVES_KEPT = 5


@dataclass(slots=True)
class AppLoggerBundle:
    app: logging.Logger
    latest_log_path: Path


def _archive_path(logs_dir: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    candidate = logs_dir / f"latest_{stamp}.log"
    suffix = 1
    while candidate.exists():
        candidate = logs_dir / f"latest_{stamp}_{suffix:02d}.log"
        suffix += 1
    return candidate


def _archive_previous_run(logs_dir: Path, keep: int = ARCHIVES_KEPT) -> Path:
    """Move the last run's log aside and prune archives beyond ``keep``."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    latest = logs_dir / LATEST_LOG
    if latest.is_file() and latest.stat().st_size > 0:
        latest.replace(_archive_path(logs_dir))

    # Stamped names sort chronologically.
    archives = sorted(logs_dir.glob("latest_*.log"), reverse=True)
    for stale in archives[keep:]:
        stale.unlink(missing_ok=True)
    return latest


def configure_logging(logs_dir: Path, level: int = logging.INFO) -> AppLoggerBundle:
    app_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()

    latest = _archive_previous_run(logs_dir)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    app_logger.setLevel(level)
    app_logger.propagate = False

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(latest, mode="w", encoding="utf-8")
    file_handler.setFormatter(formatter)

    app_logger.addHandler(stream_handler)
    app_logger.addHandler(file_handler)
    return AppLoggerBundle(app=app_logger, latest_log_path=latest)
