# structlog wiring: one JSON object per line on stderr; stdout stays for command output.
from __future__ import annotations

import logging
import sys
from typing import Dict, MutableMapping

import structlog

_LEVELS: Dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# Event keys whose values must never reach a log line.
SECRET_FIELDS = frozenset({"password", "secret", "secret_bytes", "vrf_key", "ct"})
REDACTED = "[redacted]"

EventDict = MutableMapping[str, object]


def configure_logging(level: str | None = None) -> None:
    """Route structlog through stdlib logging at ``level`` (default ``info``).

    Each record carries ``ts``, ``level``, ``component`` and ``msg``.
    """
    numeric_level = _LEVELS.get((level or "info").lower(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        handlers=[logging.StreamHandler(sys.stderr)],
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.stdlib.add_log_level,
            add_component,
            redact_secrets,
            event_as_msg,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )


def add_component(logger: object, _method: str, event_dict: EventDict) -> EventDict:
    """Name the emitting module relative to the package, e.g. ``storage.keystore``."""
    if "component" not in event_dict:
        name = getattr(logger, "name", None) or "vrf_guardian"
        event_dict["component"] = name.removeprefix("vrf_guardian.")
    return event_dict


def redact_secrets(_logger: object, _method: str, event_dict: EventDict) -> EventDict:
    for field in SECRET_FIELDS.intersection(event_dict):
        event_dict[field] = REDACTED
    return event_dict


def event_as_msg(_logger: object, _method: str, event_dict: EventDict) -> EventDict:
    if "msg" not in event_dict:
        event_dict["msg"] = event_dict.pop("event", "")
    return event_dict


__all__ = ["REDACTED", "SECRET_FIELDS", "add_component", "configure_logging", "event_as_msg", "redact_secrets"]
