"""
Test doubles for the matching engine.

StubEncoder stands in for the lexical encoder so scores can be set exactly.
"""

from typing import Dict, Optional, Sequence

import numpy as np

from additive_lens.catalog.models import CatalogStore, SubstanceRecord
from additive_lens.matching.resolution_engine import ResolutionEngine
from additive_lens.matching.similarity_scorer import SimilarityScorer
from additive_lens.matching.types import MatcherConfig


class StubEncoder:
    """
    Encoder returning preset vectors, keyed by lowercased text.

    Unknown text encodes to the zero vector, which scores 0.0 against every
    record.
    """

    def __init__(self, dimension: int, vectors: Optional[Dict[str, Sequence[float]]] = None):
        self.dimension = dimension
        self.vectors = {key.lower(): np.asarray(value, dtype=np.float32)
                        for key, value in (vectors or {}).items()}
        self.calls = []

    def encode(self, text: str) -> np.ndarray:
        self.calls.append(text)
        vector = self.vectors.get(text.lower())
        if vector is None:
            return np.zeros(self.dimension, dtype=np.float32)
        return vector.copy()


def make_record(substance: str, embedding: Sequence[float], other_names: str = '',
                technical_effect: str = 'TEST EFFECT') -> SubstanceRecord:
    return SubstanceRecord(
        substance=substance,
        other_names=other_names,
        technical_effect=technical_effect,
        searchable_text=substance,
        embedding=tuple(float(v) for v in embedding),
    )


def stub_engine(catalog: CatalogStore, vectors: Dict[str, Sequence[float]],
                config: Optional[MatcherConfig] = None) -> ResolutionEngine:
    """Engine over ``catalog`` whose queries encode through a StubEncoder."""
    config = config or MatcherConfig()
    scorer = SimilarityScorer(config=config, encoder=StubEncoder(catalog.dimension, vectors))
    return ResolutionEngine(catalog, scorer=scorer, config=config)
