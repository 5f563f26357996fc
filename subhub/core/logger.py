# subhub/core/logger.py
from __future__ import annotations

"""
SubHub SL — Logging (Loguru)
----------------------------
- Pretty console logs by default; JSON lines via `LOG_JSON=1`
- Every record carries `request_id` (bound by RequestIDMiddleware)
- stdlib / uvicorn / fastapi / starlette / httpx logs routed into Loguru
- Optional rotating file sink

Env
---
LOG_LEVEL=INFO|DEBUG|WARNING|ERROR (default: INFO)
LOG_JSON=1
LOG_TO_FILE=1 (default: 0)
LOG_DIR=logs
LOG_FILE=subhub.log
LOG_ROTATION=10 MB
APP_DEBUG=1 (backtrace/diagnose on the console sink)
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_JSON = _env_flag("LOG_JSON")
APP_DEBUG = _env_flag("APP_DEBUG")
LOG_TO_FILE = _env_flag("LOG_TO_FILE")
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE = os.getenv("LOG_FILE", "subhub.log")
LOG_ROTATION = os.getenv("LOG_ROTATION", "10 MB")

_INTERCEPTED = ("uvicorn", "uvicorn.error", "fastapi", "starlette", "httpx", "subhub")


# ─────────────────────────────────────────────────────────────
# 🧾 Formatters
# ─────────────────────────────────────────────────────────────
def _fmt_pretty(record) -> str:
    record["extra"].setdefault("request_id", "N/A")
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level> | request_id={extra[request_id]}\n{exception}"
    )


def _serialize(record) -> str:
    """One JSON object per line, safe for log shippers."""
    payload: Dict[str, Any] = {
        "time": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f%z"),
        "level": record["level"].name,
        "logger": record["name"],
        "func": record["function"],
        "line": record["line"],
        "message": record["message"],
        "request_id": record["extra"].get("request_id", "N/A"),
    }
    for k, v in record["extra"].items():
        payload.setdefault(k, v if isinstance(v, (str, int, float, bool, type(None))) else str(v))
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)
    return json.dumps(payload, ensure_ascii=False)


def _fmt_json(record) -> str:
    record["extra"]["_json"] = _serialize(record)
    return "{extra[_json]}\n"


# ─────────────────────────────────────────────────────────────
# 🔁 Intercept stdlib logging → Loguru
# ─────────────────────────────────────────────────────────────
class InterceptHandler(logging.Handler):
    """Route standard logging records into Loguru, keeping the caller frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


# ─────────────────────────────────────────────────────────────
# 📤 Sinks
# ─────────────────────────────────────────────────────────────
def configure_logging() -> None:
    """(Re)install sinks and intercept handlers. Idempotent."""
    logger.remove()
    logger.configure(extra={"request_id": "N/A"})
    fmt = _fmt_json if LOG_JSON else _fmt_pretty

    logger.add(
        sys.stdout,
        level=LOG_LEVEL,
        format=fmt,
        enqueue=True,
        backtrace=APP_DEBUG,
        diagnose=APP_DEBUG,
    )

    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(LOG_DIR / LOG_FILE),
            rotation=LOG_ROTATION,
            level=LOG_LEVEL,
            format=fmt,
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )

    for name in _INTERCEPTED:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(LOG_LEVEL)
        std_logger.propagate = False


__all__ = ["configure_logging", "InterceptHandler", "logger"]
