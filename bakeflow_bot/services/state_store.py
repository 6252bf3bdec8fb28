"""
User State Store for BakeFlow
=============================

This module keeps each chat user's conversation state in memory and gives
callers exclusive access to one user's state at a time.

Architecture Overview:
----------------------
- One UserState per user id, created lazily on first contact and removed on
  cancel, reset or order completion.
- One threading.Lock per user id. Every read-modify-write of a user's state
  runs inside `store.locked(user_id)`, so two webhook events for the same
  user serialize while different users never block each other.
- A registry lock guards the two dictionaries themselves; it is only held
  for dictionary operations, never while a caller works on a state.

Eviction:
---------
States not touched within STATE_TTL_SECONDS are dropped. The sweep runs
probabilistically (~1% of accesses) to avoid a dedicated maintenance thread.
A state whose lock is held is never evicted. After eviction a caller still
holding a reference to the old lock notices the registry changed and
retries with the new lock.

Usage:
------
    store = UserStateStore()

    with store.locked(user_id) as state:
        state.cart.append(...)

    store.discard(user_id)   # inside the same locked block is fine

Production Considerations:
--------------------------
State lives in one process. Multi-worker deployments need a shared store
(e.g. Redis with per-key locks) or sticky routing by user id.
"""

import logging
import random
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from ..config import STATE_TTL_SECONDS
from ..tasks.models import UserState


logger = logging.getLogger(__name__)


class UserStateStore:
    """In-memory, per-user locked conversation state."""

    def __init__(
        self,
        ttl_seconds: int = STATE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        cleanup_probability: int = 100,
    ):
        """
        Args:
            ttl_seconds: Idle time after which a state is evicted.
            clock: Time source in seconds (tests inject a fake clock).
            cleanup_probability: Sweep roughly once every N accesses; 0 disables.
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cleanup_probability = cleanup_probability

        self._states: Dict[str, UserState] = {}
        self._last_access: Dict[str, float] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    # =========================================================================
    # Locking
    # =========================================================================

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    def _acquire(self, user_id: str) -> threading.Lock:
        """Acquire the user's current lock, retrying if it was evicted meanwhile."""
        while True:
            lock = self._lock_for(user_id)
            lock.acquire()
            with self._registry_lock:
                if self._locks.get(user_id) is lock:
                    return lock
            lock.release()

    @contextmanager
    def locked(self, user_id: str) -> Iterator[UserState]:
        """
        Exclusive access to a user's state, creating it on first contact.

        The state is marked as accessed on exit unless it was discarded inside
        the block.
        """
        if self._cleanup_probability and random.randint(1, self._cleanup_probability) == 1:
            self.cleanup_expired()

        lock = self._acquire(user_id)
        try:
            with self._registry_lock:
                state = self._states.get(user_id)
                if state is None:
                    state = UserState()
                    self._states[user_id] = state
                    logger.debug("Created conversation state for %s", user_id)
                self._last_access[user_id] = self._clock()

            yield state

            with self._registry_lock:
                if self._states.get(user_id) is state:
                    state.touch()
                    self._last_access[user_id] = self._clock()
        finally:
            lock.release()

    # =========================================================================
    # Plain access
    # =========================================================================

    def get(self, user_id: str) -> Optional[UserState]:
        """Return the user's state without creating one. Read-only snapshot use."""
        with self._registry_lock:
            return self._states.get(user_id)

    def discard(self, user_id: str) -> None:
        """Drop a user's state; the next event starts from language selection."""
        with self._registry_lock:
            removed = self._states.pop(user_id, None)
            self._last_access.pop(user_id, None)
        if removed is not None:
            logger.debug("Discarded conversation state for %s", user_id)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._states)

    def __contains__(self, user_id: str) -> bool:
        with self._registry_lock:
            return user_id in self._states

    # =========================================================================
    # Maintenance
    # =========================================================================

    def cleanup_expired(self) -> int:
        """
        Remove states idle longer than the TTL.

        Returns:
            int: Number of states evicted.
        """
        now = self._clock()
        evicted = 0
        with self._registry_lock:
            # Locks of discarded users have no access time and go too
            expired = [
                uid for uid in self._locks
                if now - self._last_access.get(uid, 0) > self.ttl_seconds
            ]
            for uid in expired:
                lock = self._locks.get(uid)
                if lock is not None and not lock.acquire(blocking=False):
                    continue  # in use
                try:
                    if self._states.pop(uid, None) is not None:
                        evicted += 1
                    self._last_access.pop(uid, None)
                    self._locks.pop(uid, None)
                finally:
                    if lock is not None:
                        lock.release()

        if evicted:
            logger.debug("Evicted %d idle conversation states", evicted)
        return evicted
