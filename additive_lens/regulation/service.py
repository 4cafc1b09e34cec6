"""
Regulation index lifecycle service.

Mirrors CatalogService: the table is read once behind a GuardedLoader and a
resolver over it is handed out afterwards.
"""

from pathlib import Path
from typing import Callable, Optional, Union

from additive_lens.errors import LoadError
from additive_lens.regulation.code_resolver import RegulationCodeResolver
from additive_lens.regulation.regulation_index import RegulationIndex, load_regulation_file
from additive_lens.utils.lifecycle import GuardedLoader, LoadState


class RegulationService:
    """
    Owns the process-wide RegulationIndex.

    Until the index is loaded, ``resolver`` works over an empty index:
    category phrases still resolve, everything else returns no codes.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        loader: Optional[Callable[[], RegulationIndex]] = None,
        fuzzy_length_ratio: float = 0.6,
        fuzzy_min_length: int = 4,
    ):
        """
        Args:
            path: Regulation table file (used when ``loader`` is None)
            loader: Custom zero-argument loader returning a RegulationIndex
            fuzzy_length_ratio: Passed to RegulationCodeResolver
            fuzzy_min_length: Passed to RegulationCodeResolver
        """
        if loader is None:
            if path is None:
                raise ValueError("Either path or loader is required")
            loader = lambda: load_regulation_file(path)  # noqa: E731
        self._guard: GuardedLoader[RegulationIndex] = GuardedLoader(loader, name="regulation index")
        self.fuzzy_length_ratio = fuzzy_length_ratio
        self.fuzzy_min_length = fuzzy_min_length

    @property
    def state(self) -> LoadState:
        return self._guard.state

    @property
    def error(self) -> Optional[LoadError]:
        return self._guard.error

    @property
    def is_ready(self) -> bool:
        return self._guard.state == LoadState.READY

    def ensure_loaded(self) -> LoadState:
        return self._guard.ensure_loaded()

    @property
    def index(self) -> RegulationIndex:
        index = self._guard.value
        return index if index is not None else RegulationIndex.empty()

    @property
    def resolver(self) -> RegulationCodeResolver:
        return RegulationCodeResolver(
            self.index,
            fuzzy_length_ratio=self.fuzzy_length_ratio,
            fuzzy_min_length=self.fuzzy_min_length,
        )
