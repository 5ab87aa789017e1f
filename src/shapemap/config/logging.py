"""Route shapemap's structlog events to stderr.

The library logs a handful of events under the ``shapemap`` logger tree:
``cache.compiled`` and ``plan.unmatched_reference`` at debug level,
``plan.property_error`` as a warning, and ``span.complete`` when
telemetry is on.  Nothing is configured on import; the CLI calls
:func:`configure_logging` and embedding applications may do the same or
keep their own stdlib logging setup.
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "shapemap"

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        verbose: Let the cache and planner debug events through.
        log_json: One JSON object per event instead of console lines.

    Other libraries stay at WARNING either way.  Calling this again
    replaces the handler rather than adding a second one.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
