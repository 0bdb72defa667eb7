"""Identifier generators for resume list entries."""

import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def uuid_ids() -> str:
    return str(uuid.uuid4())


class SequentialIds:
    """Deterministic ids (``prefix-1``, ``prefix-2``, ...) for reproducible output."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"
