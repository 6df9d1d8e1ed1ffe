"""
Optimistic update helpers shared by the client stores.
"""
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar
import threading

S = TypeVar("S")
T = TypeVar("T")


def attempt(apply: Callable[[], S], commit: Callable[[], T], rollback: Callable[[S], None]) -> T:
    """
    Apply a local change, then run the remote (or storage) commit.

    apply() mutates local state and returns a snapshot of what it replaced.
    If commit() raises, rollback(snapshot) restores the exact prior state
    and the error propagates to the caller.
    """
    snapshot = apply()
    try:
        return commit()
    except Exception:
        rollback(snapshot)
        raise


class BusyFlag:
    """At most one in-flight call per operation kind"""

    def __init__(self):
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def claim(self) -> Iterator[bool]:
        """Yields False, without waiting, when another call holds the flag"""
        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()
