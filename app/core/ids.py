import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def uuid_id() -> str:
    return uuid.uuid4().hex


def sequential_ids(prefix: str = "id") -> IdGenerator:
    """Predictable ids, handy for fixtures and fixed-output exports."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
