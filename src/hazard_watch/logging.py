# Copyright 2025 msq
"""
Unified logging module.

Global structlog configuration:
- one processor chain (logger name, level, timestamp, stack info, trace-id)
- JSON or console renderer
- Prometheus log counter registered in one place
- trace-id carried through a ContextVar
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from prometheus_client import Counter

# Drops health-check noise when SUPPRESS_PERIODIC_LOGS is set
_SUPPRESS_PERIODIC_LOGS_FLAG: bool = (
    os.getenv("SUPPRESS_PERIODIC_LOGS", "false").lower() in {"1", "true", "yes", "y", "on"}
)

# ========== ContextVar: trace-id across async boundaries ==========
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)


# ========== Prometheus metrics ==========
log_count_metric = Counter(
    "hazard_watch_log_total",
    "Log events by level and module",
    ["level", "module"],
)


def add_trace_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Inject the trace-id of the current context into the event.

    Usage:
        from hazard_watch.logging import set_trace_id
        set_trace_id("req-12345")
        logger.info("processing_request")  # carries trace_id
    """
    trace_id = trace_id_var.get()
    if trace_id:
        event_dict["trace_id"] = trace_id
    return event_dict


def add_prometheus_metrics(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Count every log event so bursts of warnings and errors show up on dashboards."""
    level = event_dict.get("level", "info")
    module = event_dict.get("logger", "unknown")
    log_count_metric.labels(level=level, module=module).inc()
    return event_dict


def drop_periodic_logs(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Drop health-probe events while SUPPRESS_PERIODIC_LOGS is on.

    Only filters by event name; error and business events always pass.
    """
    if not _SUPPRESS_PERIODIC_LOGS_FLAG:
        return event_dict

    event = str(event_dict.get("event", ""))
    if event.startswith("health_check_") or event in {"healthz_probe"}:
        raise structlog.DropEvent
    return event_dict


def configure_logging(
    *,
    json_logs: bool = False,
    log_level: str = "INFO",
) -> None:
    """
    Configure structlog globally.

    Args:
        json_logs: render JSON (recommended in production)
        log_level: DEBUG/INFO/WARNING/ERROR

    Call once at startup; every module then does
        logger = structlog.get_logger(__name__)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    processors: list[Any] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        drop_periodic_logs,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_trace_id,
        add_prometheus_metrics,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def set_trace_id(trace_id: str) -> None:
    """Set the trace-id of the current task."""
    trace_id_var.set(trace_id)


def clear_trace_id() -> None:
    """Clear the trace-id (avoids leaking it into the next request)."""
    trace_id_var.set(None)


# Console rendering by default; production calls configure_logging(json_logs=True) at startup.
configure_logging(json_logs=False, log_level="INFO")
