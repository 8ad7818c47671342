"""Observability helpers."""

from taskboard.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_dispatch,
    record_remote_write,
    record_tree_load,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_dispatch",
    "record_remote_write",
    "record_tree_load",
]
