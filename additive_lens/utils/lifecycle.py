"""
One-time, thread-safe initialization of read-only reference data.

A GuardedLoader runs its loader exactly once. Concurrent callers of
``ensure_loaded()`` block on the same lock and all observe the completed
state (READY or FAILED); a failed load is not retried implicitly.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from additive_lens.errors import LoadError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoadState(Enum):
    """Lifecycle of a guarded resource."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class GuardedLoader(Generic[T]):
    """
    Holds a lazily loaded value behind a single initialization lock.

    Thread-safe: the loader callable runs at most once per ``reset()``.
    """

    def __init__(self, loader: Callable[[], T], name: str = "resource"):
        """
        Args:
            loader: Zero-argument callable producing the value; raises
                LoadError on failure; any other exception is wrapped in a
                LoadError
            name: Label used in log messages
        """
        self._loader = loader
        self._name = name
        self._lock = threading.Lock()
        self._state = LoadState.UNINITIALIZED
        self._value: Optional[T] = None
        self._error: Optional[LoadError] = None

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def error(self) -> Optional[LoadError]:
        """The load failure, when state is FAILED."""
        return self._error

    @property
    def value(self) -> Optional[T]:
        """The loaded value, when state is READY."""
        return self._value

    def ensure_loaded(self) -> LoadState:
        """
        Load the value if no load has happened yet.

        Returns:
            The final state (READY or FAILED)
        """
        if self._state in (LoadState.READY, LoadState.FAILED):
            return self._state

        with self._lock:
            if self._state in (LoadState.READY, LoadState.FAILED):
                return self._state

            self._state = LoadState.LOADING
            logger.info(f"Loading {self._name}...")
            try:
                value = self._loader()
            except LoadError as e:
                logger.error(f"Failed to load {self._name}: {e}")
                self._error = e
                self._state = LoadState.FAILED
                return self._state
            except Exception as e:
                logger.error(f"Failed to load {self._name}: {type(e).__name__}: {e}")
                self._error = LoadError(str(e))
                self._state = LoadState.FAILED
                return self._state

            self._value = value
            self._state = LoadState.READY
            logger.info(f"{self._name} ready")
            return self._state

    def reset(self) -> None:
        """Forget the loaded value so the next ``ensure_loaded()`` reloads."""
        with self._lock:
            self._state = LoadState.UNINITIALIZED
            self._value = None
            self._error = None
