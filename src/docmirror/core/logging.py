# src/docmirror/core/logging.py
"""Structured logging for docmirror.

Engine modules log through structlog.get_logger(__name__). The
configuration below sends those events, and plain stdlib records from
httpx or SQLAlchemy, through one ProcessorFormatter on stdout, so a
scheduled process produces a single consistent stream (console or JSON).

Every event emitted inside run_context() carries the run id and the
document id, which is how the lines of one reconcile are told apart
when the scheduler runs many of them in one log.
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# Per-request chatter from the HTTP and database layers. Kept at WARNING
# even under --verbose.
_NOISY_LOGGERS: tuple[str, ...] = (
    "httpx",
    "httpcore",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "dynaconf",
)


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop the _record/_from_structlog keys ProcessorFormatter always adds."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_processors(json_output: bool) -> list[Any]:
    if json_output:
        return [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        _remove_internal_fields,
        structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog and stdlib logging for docmirror.

    Replaces any handlers already on the root logger, so calling it again
    (the CLI does, once per invocation) switches format and level cleanly.

    Args:
        json_output: If True, output JSON. If False, human-readable.
        level: Log level (DEBUG, INFO, WARNING, ERROR).
    """
    log_level = getattr(logging, level.upper())
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Disabled so tests can reconfigure logging
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=_render_processors(json_output), foreign_pre_chain=shared))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    # Never make noisy loggers less restrictive than the root level.
    noisy_level = max(log_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def run_context(document_id: str, run_id: str | None = None) -> Iterator[str]:
    """Bind run_id and document_id to every log event inside the block.

    Yields:
        The run id in effect
    """
    run_id = run_id if run_id is not None else new_run_id()
    with structlog.contextvars.bound_contextvars(run_id=run_id, document_id=document_id):
        yield run_id
