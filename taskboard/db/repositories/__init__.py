"""Repository package for record store access."""

from .projects import SqliteProjectRepository
from .tasks import SqliteTaskRepository

__all__ = [
    "SqliteProjectRepository",
    "SqliteTaskRepository",
]
