"""id_generator.py
Generates block and item ids that never collide, no matter how many are
created within the same instant.
"""
import itertools
import threading
import uuid
from typing import Callable, Iterable, Optional


class IdGenerator:
    """
    Produces ids of the form ``<prefix>-<session>-<n>``.

    ``session`` is a short random token drawn once per generator and ``n`` comes
    from a monotonic counter, so two ids from the same generator always differ.
    An optional ``is_taken`` callback lets the owner reject ids that already exist
    (e.g. ids loaded from seed data); the counter just advances past them.

    Example:
        >>> ids = IdGenerator(session_token="a1b2")
        >>> ids.new_id("skills")
        'skills-a1b2-1'
    """

    def __init__(
        self,
        session_token: Optional[str] = None,
        is_taken: Optional[Callable[[str], bool]] = None,
    ):
        self.session_token = session_token or uuid.uuid4().hex[:8]
        self.is_taken = is_taken
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def new_id(self, prefix: str) -> str:
        with self._lock:
            while True:
                candidate = f"{prefix}-{self.session_token}-{next(self._counter)}"
                if self.is_taken is None or not self.is_taken(candidate):
                    return candidate

    __call__ = new_id


def all_ids_unique(ids: Iterable[str]) -> bool:
    """Return True if no id appears twice."""
    seen = set()
    for value in ids:
        if value in seen:
            return False
        seen.add(value)
    return True
