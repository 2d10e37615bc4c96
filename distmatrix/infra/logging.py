# distmatrix/infra/logging.py
# -*- coding: utf-8 -*-

"""
Central logging configuration for distmatrix.

Library modules only fetch a logger; entry points (scripts, notebooks)
configure the root logger once.

Usage
-----
    from distmatrix.infra.logging import init_logging, get_logger

    init_logging(level="INFO", write_output=True)
    log = get_logger(__name__)
    log.info("Hello from my module")

Environment
-----------
- DISTMATRIX_LOG_LEVEL, if set, overrides the `level` parameter.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

# ────────────────────────────────────────────────────────────────────────────────
# Globals
# ────────────────────────────────────────────────────────────────────────────────

_DEFAULT_LOGS_DIR = Path("logs")

_current_log_file: Optional[Path] = None


# ────────────────────────────────────────────────────────────────────────────────
# Public helpers
# ────────────────────────────────────────────────────────────────────────────────

def get_current_log_path() -> Optional[Path]:
    """
    Return the path to the *current* log file, if any.

    Falls back to inspecting the root handlers when logging was configured
    elsewhere. Returns None when only the stream handler is active.
    """
    global _current_log_file

    if _current_log_file is not None:
        return _current_log_file

    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            _current_log_file = Path(handler.baseFilename)
            return _current_log_file
    return None


def init_logging(
      level: str = "INFO"
    , *
    , force: bool = True
    , write_output: bool = False
    , log_file: Optional[Path] = None
    , logs_dir: Optional[Path] = None
    , quiet: Iterable[str] = ("urllib3",)
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str, default "INFO"
        Logging level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
        DISTMATRIX_LOG_LEVEL overrides it when set.
    force : bool, default True
        Remove existing root handlers before installing ours.
    write_output : bool, default False
        If True and `log_file` is not given, a per-run file is created under
        `logs/` (or `logs_dir`).
    log_file : Optional[Path]
        Explicit log file, written in addition to stdout.
    logs_dir : Optional[Path]
        Base directory for per-run files.
    quiet : Iterable[str]
        Logger names raised to WARNING (noisy third-party libraries).
    """
    global _current_log_file

    env_level = os.getenv("DISTMATRIX_LOG_LEVEL")
    if env_level:
        level = env_level

    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    root = logging.getLogger()
    if force:
        for handler in list(root.handlers):
            root.removeHandler(handler)

    root.setLevel(numeric_level)

    # [YYYY-MM-DD HH:MM:SS][LEVEL][logger.name] message
    formatter = logging.Formatter(
          fmt="[{asctime}][{levelname}][{name}] {message}"
        , datefmt="%Y-%m-%d %H:%M:%S"
        , style="{"
    )

    stream_handler = logging.StreamHandler(stream=sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    _current_log_file = None

    if write_output or log_file is not None:
        if log_file is None:
            base_dir = Path(logs_dir) if logs_dir is not None else _DEFAULT_LOGS_DIR
            base_dir.mkdir(parents=True, exist_ok=True)

            # e.g. matrix_from_csv__20251117-174709.log
            script_name = Path(sys.argv[0] or "app").stem or "app"
            if script_name in {"-m", ""}:
                script_name = "app"
            ts = datetime.now().strftime("%Y%m%d-%H%M%S")
            log_file = base_dir / f"{script_name}__{ts}.log"
        else:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

        _current_log_file = log_file.resolve()

    for name in quiet:
        noisy = logging.getLogger(name)
        if noisy.level < logging.WARNING:
            noisy.setLevel(logging.WARNING)

    get_logger(__name__).info("Logging configured")


def log_banner(
      log: logging.Logger
    , msg: str
    , *
    , char: str = "="
    , width: int = 60
) -> None:
    """Print `msg` between two bars, handy to separate CLI runs in a log file."""
    bar = char * width
    log.info(bar)
    log.info(msg)
    log.info(bar)


def get_logger(
    name: Optional[str] = None
) -> logging.Logger:
    """
    Thin wrapper around logging.getLogger.

    Modules use this instead of logging.getLogger() so the backend can be
    swapped in one place.
    """
    return logging.getLogger(name if name is not None else __name__)
