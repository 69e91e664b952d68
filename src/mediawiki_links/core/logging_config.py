"""Structured logging configuration using structlog.

Call ``configure_logging()`` once at startup (the CLI does it before the
wiki registry is built).  Modules can then log through either API:

Stdlib usage::

    import logging
    logger = logging.getLogger(__name__)
    logger.error("error init wiki: %s", endpoint)

Structlog usage (richer context binding)::

    import structlog
    logger = structlog.get_logger(__name__)
    logger.error("error resolving titles", endpoint=site.endpoint, titles=titles)

A ``resolution_id`` context variable is set by
:meth:`~mediawiki_links.wiki.service.LinkService.handle_message` and merged
into every log record emitted while that message is being resolved.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, WrappedLogger

# ---------------------------------------------------------------------------
# Context variable set per handled message, read by the log processor
# ---------------------------------------------------------------------------

resolution_id_var: ContextVar[str | None] = ContextVar("resolution_id", default=None)
"""ID of the message resolution currently in progress.

Concurrent ``handle_message`` calls run in separate asyncio tasks, each with
its own copy of the context, so IDs never leak between messages.
"""


def _inject_resolution_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add the current resolution ID to the event dict if one is set.

    Args:
        logger: The wrapped logger instance (unused).
        method_name: The log method name (unused).
        event_dict: Mutable event dictionary being assembled.

    Returns:
        The event dict, possibly with ``resolution_id`` added.
    """
    rid = resolution_id_var.get()
    if rid is not None and "resolution_id" not in event_dict:
        event_dict["resolution_id"] = rid
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog and stdlib logging.

    At ``DEBUG`` the console renderer is used; at any other level records are
    emitted as newline-delimited JSON.  Every record carries ``timestamp``,
    ``level``, ``logger``, ``event`` and, inside a message resolution,
    ``resolution_id``.

    Safe to call more than once; existing root handlers are replaced.

    Args:
        log_level: One of ``"DEBUG"``, ``"INFO"``, ``"WARNING"``,
            ``"ERROR"``, ``"CRITICAL"``.  Case-insensitive.
    """
    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    is_development = level_upper == "DEBUG"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _inject_resolution_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_development:
        final_renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(
            colors=True,
        )
    else:
        final_renderer = structlog.processors.JSONRenderer(ensure_ascii=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_renderer,
        ],
    )

    # Log to stderr so that CLI output on stdout stays clean.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    if not is_development:
        for noisy_logger in ("httpx", "httpcore"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
