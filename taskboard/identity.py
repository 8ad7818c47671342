"""Client-side identifier allocation for new tree nodes."""
from __future__ import annotations

import uuid
from typing import Callable

IdAllocator = Callable[[], str]


def new_id() -> str:
    """Mint a random 128-bit identifier in canonical string form."""
    return str(uuid.uuid4())
