"""Sync job logging: Loguru to stdout and a rotating file, errors to Slack."""

import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
from loguru import logger

from listing_sync.core.config import Settings, settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[name]}:{function}:{line} | {message}"
LOG_FILE_NAME = "sync.log"

LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
KNOWN_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

# stdlib loggers owned by uvicorn keep their own handlers unless replaced
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# per-request chatter from the HTTP stack
QUIET_LOGGERS = ("httpx", "httpcore")

_logging_configured = False


class InterceptHandler(logging.Handler):
    """Redirect stdlib logs to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_name == "emit":
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def resolve_level(raw: Optional[str], production: bool = False) -> str:
    """Loguru level name for a configured LOG_LEVEL; unknown names fall back to INFO."""
    level = (raw or "INFO").strip().upper()
    level = LEVEL_ALIASES.get(level, level)
    if level not in KNOWN_LEVELS:
        return "INFO"
    if production and level in {"TRACE", "DEBUG"}:
        return "INFO"
    return level


def slack_text(record: Dict[str, Any]) -> str:
    source = record["extra"].get("name") or "listing_sync"
    return f":rotating_light: *{record['level'].name}* `{source}:{record['function']}:{record['line']}`\n{record['message']}"


def slack_sink(webhook_url: str) -> Callable[[Any], None]:
    """Loguru sink posting each message to a Slack incoming webhook."""

    def sink(message: Any) -> None:
        try:
            httpx.post(webhook_url, json={"text": slack_text(message.record)}, timeout=5.0)
        except httpx.HTTPError:
            # logging from inside a sink would recurse
            pass

    return sink


def configure_logging(cfg: Settings = settings) -> None:
    global _logging_configured

    if _logging_configured:
        return
    _logging_configured = True

    level = resolve_level(cfg.LOG_LEVEL, production=cfg.is_production)
    log_dir = Path(cfg.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"name": "listing_sync"})
    logger.add(sys.stdout, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)
    logger.add(
        log_dir / LOG_FILE_NAME,
        level=level,
        format=LOG_FORMAT,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    if cfg.SLACK_WEBHOOK_URL:
        logger.add(slack_sink(cfg.SLACK_WEBHOOK_URL), level="ERROR", enqueue=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name in UVICORN_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False


def get_logger(name: str) -> logger.__class__:
    return logger.bind(name=name)


configure_logging()
