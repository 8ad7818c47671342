"""In-memory tree state store."""

from taskboard.store.reducer import reduce
from taskboard.store.store import Effect, TreeStore

__all__ = [
    "Effect",
    "TreeStore",
    "reduce",
]
