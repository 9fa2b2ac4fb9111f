"""Runtime configuration and logging setup.

Settings are read from environment variables. A ``.env`` file in the
working directory is loaded first when present, without overriding
variables already set in the environment.

    ACAT_LOG_LEVEL                    logging level (default WARNING)
    ACAT_LOG_FILE                     also log to this file when set
    ACAT_DEFAULT_FIRST_EXPENSE_MONTH  month the CLI may fall back to on request
    ACAT_MAX_REPORT_ROWS              rows printed before the table is cut
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_REPORT_ROWS = 200

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[Path] = None
    default_first_expense_month: Optional[str] = None
    max_report_rows: int = DEFAULT_MAX_REPORT_ROWS


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ`` plus ``.env``)."""
    if env is None:
        load_dotenv()
        env = os.environ
    log_file = env.get("ACAT_LOG_FILE")
    return Settings(
        log_level=(env.get("ACAT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        log_file=Path(log_file) if log_file else None,
        default_first_expense_month=env.get("ACAT_DEFAULT_FIRST_EXPENSE_MONTH") or None,
        max_report_rows=_int_setting(env, "ACAT_MAX_REPORT_ROWS", DEFAULT_MAX_REPORT_ROWS),
    )


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure the ``acat_calc`` logger from ``settings`` and return it.

    Raises
    ------
    ValueError
        If ``settings.log_level`` is not a standard level name.
    """
    if settings.log_level not in LOG_LEVELS:
        raise ValueError(
            f"ACAT_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {settings.log_level!r}"
        )
    logger = logging.getLogger("acat_calc")
    logger.setLevel(getattr(logging, settings.log_level))
    logger.handlers.clear()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger
