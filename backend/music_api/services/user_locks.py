"""Per-user mutual exclusion for player commands"""
from contextlib import contextmanager
from typing import Iterator
import logging
import threading
import weakref

from music_api.exceptions import PlayerBusyError

logger = logging.getLogger(__name__)


class UserLockRegistry:
    """
    Hand out one lock per user id.

    FastAPI runs sync endpoints in a thread pool, so two requests of the same
    user can reach the controller at once. Commands of different users never
    share a lock. Locks are held weakly and disappear once no command uses
    them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str, timeout: float) -> Iterator[None]:
        """
        Run the enclosed block as the only command of ``user_id``

        Args:
            user_id: Opaque user identifier
            timeout: Seconds to wait for a running command to finish

        Raises:
            PlayerBusyError: If the lock was not acquired in time
        """
        # The strong reference keeps the lock alive while this block runs
        lock = self._lock_for(user_id)
        if not lock.acquire(timeout=timeout):
            logger.warning(f"Timed out after {timeout}s waiting for player lock of user {user_id}")
            raise PlayerBusyError(f"Another player command for user '{user_id}' is still running")
        try:
            yield
        finally:
            lock.release()


# Shared by every request handled by this process
user_locks = UserLockRegistry()
