"""
Structured logging with structlog.

Configures structlog to output JSON lines, optionally with rotation.
Backward-compatible with stdlib logging: SDK modules keep calling
logging.getLogger(__name__) and get enriched with structlog processors
once the host calls setup_logging().
"""
from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar

import structlog

from feddy.config import SDK_VERSION

# ── Context vars for correlation ──────────────────────────────────────
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

SERVICE_NAME = "feddy-sdk"
SDK_LOGGER_NAME = "feddy"


def _inject_context(logger_name: str, method_name: str, event_dict: dict) -> dict:
    """Structlog processor: inject SDK identity and the per-call request id."""
    event_dict["service"] = SERVICE_NAME
    event_dict["version"] = SDK_VERSION

    rid = request_id_var.get(None)
    if rid:
        event_dict["request_id"] = rid

    return event_dict


def _lowercase_level(logger_name: str, method_name: str, event_dict: dict) -> dict:
    level = event_dict.get("level")
    if level:
        event_dict["level"] = level.lower()
    return event_dict


def setup_logging(
    log_level: int = logging.INFO,
    log_dir: str | None = None,
    log_file: str = "feddy.jsonl",
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
) -> None:
    """Initialize structlog + stdlib logging with JSON output.

    Called once by the host application. Without log_dir, output goes to
    stderr only; with it, a rotating JSON-lines file is added.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        _lowercase_level,
        structlog.stdlib.add_logger_name,
        _inject_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )

    file_handler = None
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, log_file),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
        except OSError:
            # Unwritable log dir: stderr only
            file_handler = None

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
    sdk_logger.handlers.clear()
    sdk_logger.setLevel(log_level)
    sdk_logger.addHandler(console_handler)
    if file_handler:
        sdk_logger.addHandler(file_handler)
    sdk_logger.propagate = False

    for noisy in ("httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def set_debug_logging(enabled: bool) -> None:
    """Toggle DEBUG output for the SDK's loggers (configure(enable_debug_logging=...))."""
    sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
    if enabled:
        sdk_logger.setLevel(logging.DEBUG)
    elif sdk_logger.level == logging.DEBUG:
        sdk_logger.setLevel(logging.INFO)
