from __future__ import annotations

import logging
import os
import sys
from typing import Any, Mapping, MutableMapping, Optional

import structlog


def _add_msg_from_event(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> Mapping[str, Any]:
    """Mirror structlog's `event` into `msg` for JSON Lines consumers."""

    if "msg" not in event_dict and isinstance(event_dict.get("event"), str):
        event_dict["msg"] = event_dict["event"]
    return event_dict


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structlog on top of stdlib logging, one JSON object per line.

    - Keys: ts, level, msg, event plus whatever context the call site binds
    - Level: argument, else LIFEGATE_LOG_LEVEL, else INFO
    - Calling again reconfigures (tests swap stdout under capsys)
    """

    raw_level = level if level is not None else os.getenv("LIFEGATE_LOG_LEVEL", "INFO")
    log_level = getattr(logging, raw_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            _add_msg_from_event,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
