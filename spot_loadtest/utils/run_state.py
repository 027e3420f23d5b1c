import threading
import random
import logging
from typing import List, Dict, Any, Optional, Callable

from spot_loadtest.exceptions import SetupError

logger = logging.getLogger("run_state")


class RunState:
    """Run-wide data filled once by the first users: access tokens and approved stores."""

    def __init__(self):
        self._lock = threading.RLock()
        self._tokens = {}
        self._stores = []
        self._completed = set()
        self._errors = {}
        self._setup_locks = {}

    def ensure_setup(self, key: str, setup_func: Callable[["RunState"], None]) -> None:
        """
        Run ``setup_func`` once per ``key`` (e.g. per role) for the whole run.

        A failed setup is remembered, so every later caller raises the same
        SetupError instead of hammering the login endpoint again.
        """
        with self._lock:
            key_lock = self._setup_locks.setdefault(key, threading.RLock())

        # Only callers of the same key wait for a running setup
        with key_lock:
            if key in self._errors:
                raise self._errors[key]
            if key in self._completed:
                return
            try:
                setup_func(self)
            except SetupError as e:
                self._errors[key] = e
                raise
            self._completed.add(key)

    def reset(self) -> None:
        with self._lock:
            self._tokens.clear()
            self._stores = []
            self._completed.clear()
            self._errors.clear()

    def set_token(self, role: str, token: str) -> None:
        with self._lock:
            self._tokens[role] = token

    def get_token(self, role: str) -> Optional[str]:
        with self._lock:
            return self._tokens.get(role)

    def update_stores(self, stores: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._stores = list(stores)
            logger.debug(f"Updated approved stores: {len(self._stores)}")

    def get_stores(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._stores.copy()

    def get_random_store(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            if not self._stores:
                return None
            return random.choice(self._stores)
