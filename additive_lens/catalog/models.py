"""
Data structures for the substance catalog.

The catalog is an ordered, read-only collection of substance records with
precomputed feature vectors. Record order is part of the matching contract:
every "first match wins" scan walks the records in the order they were loaded.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class SubstanceRecord:
    """
    A single catalog substance.

    Attributes:
        substance: Canonical display name (e.g. "SODIUM BENZOATE")
        other_names: Raw pipe-delimited alternate names
        technical_effect: Free-text function description (may be pipe-delimited)
        searchable_text: Concatenated provenance text, never re-embedded
        embedding: Precomputed feature vector of the catalog dimension
    """
    substance: str
    other_names: str
    technical_effect: str
    searchable_text: str
    embedding: Tuple[float, ...]

    def alias_list(self) -> List[str]:
        """Split ``other_names`` into trimmed, non-empty names in source order."""
        return [name.strip() for name in self.other_names.split("|") if name.strip()]


class CatalogStore:
    """
    Immutable, ordered catalog of substance records.

    Holds the embedding matrix (float32, one row per record) and the row
    norms so cosine similarity against the whole catalog is a single
    matrix-vector product. Also keeps first-occurrence indexes of lowercased
    substance names and aliases for exact lookups.
    """

    def __init__(self, records: Sequence[SubstanceRecord], dimension: int):
        """
        Build a catalog store.

        Args:
            records: Validated records, in catalog priority order
            dimension: Embedding dimension shared by every record

        Raises:
            ValueError: If a record's embedding length differs from ``dimension``
        """
        if dimension < 0:
            raise ValueError(f"Catalog dimension must be non-negative, got {dimension}")

        for record in records:
            if len(record.embedding) != dimension:
                raise ValueError(
                    f"Embedding for '{record.substance}' has length {len(record.embedding)}, "
                    f"expected {dimension}"
                )

        self._records: Tuple[SubstanceRecord, ...] = tuple(records)
        self._dimension = dimension

        matrix = np.array(
            [record.embedding for record in self._records], dtype=np.float32
        ).reshape(len(self._records), dimension)
        norms = np.sqrt(np.sum(matrix * matrix, axis=1, dtype=np.float32))
        matrix.flags.writeable = False
        norms.flags.writeable = False
        self._matrix = matrix
        self._norms = norms

        # First occurrence wins, preserving catalog priority
        self._substance_index: Dict[str, int] = {}
        self._alias_index: Dict[str, int] = {}
        for position, record in enumerate(self._records):
            self._substance_index.setdefault(record.substance.lower(), position)
            for alias in record.other_names.lower().split("|"):
                self._alias_index.setdefault(alias.strip(), position)

    @property
    def records(self) -> Tuple[SubstanceRecord, ...]:
        return self._records

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def matrix(self) -> np.ndarray:
        """Read-only (n_records, dimension) float32 embedding matrix."""
        return self._matrix

    @property
    def norms(self) -> np.ndarray:
        """Read-only L2 norm of each embedding row."""
        return self._norms

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def is_ready(self) -> bool:
        """True when the catalog holds at least one record."""
        return len(self._records) > 0

    def find_exact(self, search_term: str, alias_term: Optional[str] = None) -> Optional[SubstanceRecord]:
        """
        Find the first record matching by substance name or alias.

        A record matches when its lowercased ``substance`` equals the
        lowercased ``search_term``, or one of its trimmed lowercased aliases
        equals ``alias_term`` (defaults to ``search_term``). When several
        records match, the earliest in catalog order is returned.

        Args:
            search_term: Name compared against ``substance``
            alias_term: Name compared against the ``other_names`` tokens

        Returns:
            The matching record, or None
        """
        substance_key = search_term.lower()
        alias_key = (alias_term if alias_term is not None else search_term).lower()

        positions = [
            position
            for position in (
                self._substance_index.get(substance_key),
                self._alias_index.get(alias_key) if alias_key else None,
            )
            if position is not None
        ]
        if not positions:
            return None
        return self._records[min(positions)]

    @classmethod
    def empty(cls, dimension: int = 0) -> "CatalogStore":
        """Create a catalog with no records."""
        return cls([], dimension)
