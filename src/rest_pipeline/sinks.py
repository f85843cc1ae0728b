"""Trace and error sinks — injected logging strategies.

The pipeline reports "authentication failed", "Hit GET handler ..." and
similar events to a *trace* sink, and unhandled action errors to an
*error* sink. Both are plain callables held by ``PipelineConfig``::

    sink("Hit %s handler for %s on %s", "GET", "/", "users")
    sink("unhandled error in %s %s", "GET", "/", exc=error)

``LogSink`` forwards to a stdlib logger (the default). No handler is
attached here: trace events are INFO records, which reach the console
only once the application configures logging, for example with
``logging.basicConfig(level=logging.INFO)``. ``NullSink`` discards
everything; passing ``None`` for a sink in the config selects it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol


class Sink(Protocol):
    """Anything that accepts a %-style message, its args and an optional error."""

    def __call__(self, message: str, *args: Any, exc: BaseException | None = None) -> None: ...


@dataclass(frozen=True, slots=True)
class LogSink:
    """Forward events to a stdlib logger at a fixed level."""

    logger: logging.Logger
    level: int = logging.INFO

    def __call__(self, message: str, *args: Any, exc: BaseException | None = None) -> None:
        if exc is not None:
            self.logger.log(self.level, message, *args, exc_info=exc)
        else:
            self.logger.log(self.level, message, *args)


@dataclass(frozen=True, slots=True)
class NullSink:
    """Discard every event."""

    def __call__(self, message: str, *args: Any, exc: BaseException | None = None) -> None:
        return None


def default_trace_sink() -> LogSink:
    return LogSink(logging.getLogger("rest_pipeline.trace"), logging.INFO)


def default_error_sink() -> LogSink:
    return LogSink(logging.getLogger("rest_pipeline.error"), logging.ERROR)
