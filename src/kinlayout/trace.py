"""Injectable diagnostic hooks for tracing intermediate layout steps."""

import logging
from collections.abc import Callable

TraceHook = Callable[[str, dict], None]


def emit(trace: TraceHook | None, event: str, **data) -> None:
    if trace is not None:
        trace(event, data)


def logging_trace(logger: logging.Logger) -> TraceHook:
    """Route trace events to `logger` at DEBUG level."""

    def hook(event: str, data: dict) -> None:
        logger.debug("%s %s", event, data)

    return hook


def collecting_trace() -> tuple[TraceHook, list[tuple[str, dict]]]:
    """Return a hook and the list of (event, data) pairs it appends to."""
    events: list[tuple[str, dict]] = []

    def hook(event: str, data: dict) -> None:
        events.append((event, data))

    return hook, events
