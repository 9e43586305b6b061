"""Rule ID providers.

The pattern engine takes any zero-argument callable returning a string.
Production runs use random UUID-based IDs; tests inject a sequential
provider to get deterministic output.
"""

import itertools
import uuid
from typing import Callable

IdProvider = Callable[[], str]


def uuid_ids(prefix: str = "rule") -> IdProvider:
    """Return a provider of random, collision-resistant rule IDs."""

    def _next() -> str:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"

    return _next


class SequentialIds:
    """Deterministic ``prefix-1, prefix-2, ...`` provider."""

    def __init__(self, prefix: str = "rule", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
