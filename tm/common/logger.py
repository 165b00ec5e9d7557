import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from tm.common.setup import PATHS
from datetime import datetime

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Environment knobs, read next to TIMEMASTER_HOME. Anything unrecognised falls back to the default.
LEVEL_ENV = "TIMEMASTER_LOG_LEVEL"
CONSOLE_ENV = "TIMEMASTER_LOG_CONSOLE"
DEBUG_RUNS_ENV = "TIMEMASTER_DEBUG_RUNS"

# Accepts a level name ("info", "WARNING") or a number ("10").
def level_from_env(default=logging.DEBUG, env=None):
    raw = (env if env is not None else os.environ).get(LEVEL_ENV, "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default

def flag_from_env(name, default=False, env=None):
    raw = (env if env is not None else os.environ).get(name, "").strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    return default

def int_from_env(name, default, env=None):
    raw = (env if env is not None else os.environ).get(name, "").strip()
    try:
        return max(0, int(raw))
    except ValueError:
        return default


# Names every handler this module attaches, so repeated get_logger() calls never stack duplicates.
def _has_handler(logger, handler_name):
    return any(h.get_name() == handler_name for h in logger.handlers)

def get_logger(
        name = "timemaster",
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 5 * 1024 * 1024,
        backup_count = 5,
        persistent = True,
        console = False,
        historical_debugs: int = 10
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True,exist_ok=True)
    log_file_path = log_dir / f"{name}.log"

    fmt = logging.Formatter(LOG_FORMAT,LOG_DATE_FORMAT)

    # Setup persistent handler
    persistent_handler_name = f"{name}:persistent"
    if persistent and not _has_handler(logger, persistent_handler_name):
        persistent_handler = RotatingFileHandler(
            filename=log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
            delay=False,
        )
        persistent_handler.setLevel(logging.INFO)
        persistent_handler.setFormatter(fmt)
        persistent_handler.set_name(persistent_handler_name)
        logger.addHandler(persistent_handler)

    # Setup latest-only handler (always overwritten each run)
    latest_handler_name = f"{name}:latest"
    if not _has_handler(logger, latest_handler_name):
        latest_handler = logging.FileHandler(
            filename=log_dir / "latest.log",
            mode="w",
            encoding="utf-8",
            delay=False
        )
        latest_handler.setLevel(logging.INFO)
        latest_handler.setFormatter(fmt)
        latest_handler.set_name(latest_handler_name)
        logger.addHandler(latest_handler)

    # Setup historical debug handler, one file per run, only the newest `historical_debugs` runs are kept
    historical_debug_handler_name = f"{name}:historical_debug"
    if historical_debugs > 0 and not _has_handler(logger, historical_debug_handler_name):
        historical_debug_path = log_dir / "debug"
        historical_debug_path.mkdir(parents=True,exist_ok=True)
        this_run_path = historical_debug_path / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"

        historical_debug_handler = logging.FileHandler(
            filename=this_run_path,
            encoding="utf-8",
            delay=True
        )
        historical_debug_handler.setLevel(logging.DEBUG)
        historical_debug_handler.setFormatter(fmt)
        historical_debug_handler.set_name(historical_debug_handler_name)
        logger.addHandler(historical_debug_handler)

        # Prune oldest runs
        runs = sorted(historical_debug_path.glob(f"{name}_*.log"),key=lambda p: p.stat().st_mtime,reverse=True)
        for run in runs[historical_debugs:]:
            try: run.unlink()
            except OSError: pass

    # Setup console handler
    console_handler_name = f"{name}:console"
    if console and not _has_handler(logger, console_handler_name):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(fmt)
        console_handler.set_name(console_handler_name)
        logger.addHandler(console_handler)

    return logger

log = get_logger(
    level=level_from_env(),
    console=flag_from_env(CONSOLE_ENV),
    historical_debugs=int_from_env(DEBUG_RUNS_ENV, 10),
)
log.info("=== INITIALIZED NEW SESSION ===")
