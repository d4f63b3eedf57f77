"""Named in-process locks that serialize writes touching the same user or book.

Locks are acquired in sorted key order so that two operations sharing keys can
never wait on each other in opposite orders.
"""

import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

import structlog

from bookshop import settings
from bookshop.errors import LockTimeout

logger = structlog.get_logger(__name__)


class _Entry:
    __slots__ = ("lock", "refs")

    def __init__(self):
        self.lock = threading.RLock()
        self.refs = 0


_registry: dict[str, _Entry] = {}
_registry_guard = threading.Lock()


def user_key(user_id) -> str:
    return f"user:{user_id}"


def book_key(book_id) -> str:
    return f"book:{book_id}"


def _checkout(key: str) -> _Entry:
    with _registry_guard:
        entry = _registry.get(key)
        if entry is None:
            entry = _registry[key] = _Entry()
        entry.refs += 1
        return entry


def _checkin(key: str, entry: _Entry) -> None:
    # The last holder or waiter to leave evicts the key
    with _registry_guard:
        entry.refs -= 1
        if entry.refs == 0 and _registry.get(key) is entry:
            del _registry[key]


@contextmanager
def locked(*keys: str, timeout: float | None = None) -> Iterator[None]:
    """Hold every named lock for the duration of the block."""
    timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    ordered = sorted(set(keys))

    with ExitStack() as stack:
        for key in ordered:
            entry = _checkout(key)
            stack.callback(_checkin, key, entry)
            if not entry.lock.acquire(timeout=timeout):
                logger.error("Lock wait timed out", key=key, keys=ordered, timeout=timeout)
                raise LockTimeout(ordered, timeout)
            stack.callback(entry.lock.release)
        yield
