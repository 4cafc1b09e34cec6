"""
Catalog lifecycle service.

Wraps catalog loading in an explicit state machine so feature availability
is gated by a single readiness check instead of scattered flags.
"""

from pathlib import Path
from typing import Callable, Optional, Union

from additive_lens.catalog.loader import load_catalog_file
from additive_lens.catalog.models import CatalogStore
from additive_lens.errors import LoadError
from additive_lens.utils.lifecycle import GuardedLoader, LoadState


class CatalogService:
    """
    Owns the process-wide CatalogStore.

    The catalog is loaded once, on the first ``ensure_loaded()`` call, and is
    read-only afterwards, so lookups running on several threads need no
    further locking.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        loader: Optional[Callable[[], CatalogStore]] = None,
    ):
        """
        Args:
            path: Catalog JSON file (used when ``loader`` is None)
            loader: Custom zero-argument loader returning a CatalogStore
        """
        if loader is None:
            if path is None:
                raise ValueError("Either path or loader is required")
            loader = lambda: load_catalog_file(path)  # noqa: E731
        self._guard: GuardedLoader[CatalogStore] = GuardedLoader(loader, name="additive catalog")

    @property
    def state(self) -> LoadState:
        return self._guard.state

    @property
    def error(self) -> Optional[LoadError]:
        return self._guard.error

    @property
    def is_ready(self) -> bool:
        """True once loaded successfully with at least one record."""
        store = self._guard.value
        return self._guard.state == LoadState.READY and store is not None and store.is_ready()

    def ensure_loaded(self) -> LoadState:
        return self._guard.ensure_loaded()

    @property
    def catalog(self) -> CatalogStore:
        """
        The loaded catalog, or an empty one when not loaded.

        Never raises; an empty catalog makes every non-alias lookup a miss.
        """
        store = self._guard.value
        return store if store is not None else CatalogStore.empty()
