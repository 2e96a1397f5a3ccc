"""Structured logging configuration for the WOPI bridge."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<level>{message}</level>"
)


def _serialize(record: dict[str, Any]) -> str:
    payload = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["module"],
        "function": record["function"],
        "line": record["line"],
    }
    exception = record["exception"]
    if exception is not None:
        payload["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }
    payload.update({k: v for k, v in record["extra"].items() if k != "serialized"})
    return json.dumps(payload, ensure_ascii=False, default=str)


def _json_patcher(record: dict[str, Any]) -> None:
    record["extra"]["serialized"] = _serialize(record)


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure loguru sinks for the service.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Emit one JSON document per line instead of coloured text.
        log_file: Optional path to a rotating log file in addition to stderr.
    """
    logger.remove()
    logger.configure(extra={"correlation_id": "-"}, patcher=_json_patcher if json_format else None)

    fmt = "{extra[serialized]}" if json_format else TEXT_FORMAT

    logger.add(sys.stderr, format=fmt, level=level, colorize=not json_format)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=fmt,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


__all__ = ["setup_logging"]
