"""
Similarity scoring of a query against the whole catalog.

Blends cosine similarity of lexical feature vectors with fixed bonuses for
string-level agreement:

    final = cosine + 0.5   if the query equals the substance name
    final = cosine + 0.3   if the query partially matches the record
    final = cosine         otherwise

The best candidate is found by a linear scan in catalog order.
"""

import logging
from typing import Dict, List, Optional

import numpy as np

from additive_lens.catalog.models import CatalogStore, SubstanceRecord
from additive_lens.matching.feature_encoder import LexicalFeatureEncoder
from additive_lens.matching.match_result import ScoredCandidate
from additive_lens.matching.types import MatcherConfig
from additive_lens.normalization.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)


def cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when the lengths differ, the vectors are empty, or either
    vector has zero magnitude.
    """
    a = np.asarray(vec1, dtype=np.float32)
    b = np.asarray(vec2, dtype=np.float32)
    if a.shape != b.shape or a.size == 0:
        return 0.0

    magnitude1 = np.sqrt(np.dot(a, a))
    magnitude2 = np.sqrt(np.dot(b, b))
    if magnitude1 <= 0 or magnitude2 <= 0:
        return 0.0

    return float(np.dot(a, b) / (magnitude1 * magnitude2))


def catalog_similarities(query_vector: np.ndarray, catalog: CatalogStore) -> np.ndarray:
    """
    Cosine similarity of one query vector against every catalog record.

    Args:
        query_vector: Vector of the catalog dimension
        catalog: Catalog whose precomputed matrix and norms are used

    Returns:
        float32 array with one similarity per record, in catalog order
    """
    similarities = np.zeros(len(catalog), dtype=np.float32)
    query = np.asarray(query_vector, dtype=np.float32)
    if len(catalog) == 0 or query.shape != (catalog.dimension,) or catalog.dimension == 0:
        return similarities

    query_norm = np.sqrt(np.dot(query, query))
    if query_norm <= 0:
        return similarities

    dots = catalog.matrix @ query
    valid = catalog.norms > 0
    similarities[valid] = dots[valid] / (catalog.norms[valid] * query_norm)
    return similarities


class SimilarityScorer:
    """
    Scores catalog records against a query.

    The encoder is created per catalog dimension unless one is supplied.
    """

    def __init__(self, normalizer: Optional[TextNormalizer] = None,
                 config: Optional[MatcherConfig] = None,
                 encoder: Optional[LexicalFeatureEncoder] = None):
        """
        Args:
            normalizer: TextNormalizer instance (creates new if None)
            config: Bonuses and overlap thresholds (defaults if None)
            encoder: Fixed query encoder; its dimension must match the catalog
        """
        self.normalizer = normalizer or TextNormalizer()
        self.config = config or MatcherConfig()
        self._encoder = encoder
        self._encoders: Dict[int, LexicalFeatureEncoder] = {}

    def encoder_for(self, catalog: CatalogStore) -> LexicalFeatureEncoder:
        """Encoder producing vectors of the catalog dimension."""
        if self._encoder is not None:
            return self._encoder
        encoder = self._encoders.get(catalog.dimension)
        if encoder is None:
            encoder = LexicalFeatureEncoder(catalog.dimension)
            self._encoders[catalog.dimension] = encoder
        return encoder

    def score(self, query: str, catalog: CatalogStore) -> List[ScoredCandidate]:
        """
        Score every record in the catalog.

        Args:
            query: Search term (alias rewrites already applied)
            catalog: Catalog to score

        Returns:
            One ScoredCandidate per record, in catalog order
        """
        if len(catalog) == 0:
            return []

        query_vector = self.encoder_for(catalog).encode(query)
        similarities = catalog_similarities(query_vector, catalog)

        candidates = []
        for record, similarity in zip(catalog.records, similarities):
            exact = self.is_exact_match(query, record)
            partial = not exact and self.is_partial_match(query, record)

            final_score = similarity
            if exact:
                final_score = similarity + np.float32(self.config.exact_bonus)
            elif partial:
                final_score = similarity + np.float32(self.config.partial_bonus)

            candidates.append(ScoredCandidate(
                record=record,
                similarity=float(similarity),
                exact=exact,
                partial=partial,
                score=float(final_score),
            ))
        return candidates

    def best(self, query: str, catalog: CatalogStore) -> Optional[ScoredCandidate]:
        """
        Highest-scoring record.

        The scan starts from a best score of 0.0 and only replaces the best on
        a strictly greater score, so the earliest record wins ties and records
        scoring 0.0 or less are never returned.

        Returns:
            The best candidate, or None for an empty catalog or when no score
            is positive
        """
        best_candidate = None
        best_score = 0.0
        for candidate in self.score(query, catalog):
            if candidate.score > best_score:
                best_score = candidate.score
                best_candidate = candidate
        return best_candidate

    def is_exact_match(self, query: str, record: SubstanceRecord) -> bool:
        """Case-insensitive, trimmed equality of query and substance name."""
        return self.normalizer.comparison_key(query) == self.normalizer.comparison_key(record.substance)

    def is_partial_match(self, query: str, record: SubstanceRecord) -> bool:
        """
        Loose match between query and record.

        True if any of:
        1. Names are equal after locant stripping
        2. One name contains the other
        3. Word sets overlap by at least ``word_overlap_ratio`` with at least
           ``min_overlap_words`` shared words
        4. An alternate name contains, is contained in, or normalizes equal
           to the query

        Args:
            query: Search term
            record: Catalog record

        Returns:
            True on a partial match
        """
        normalizer = self.normalizer
        query_clean = normalizer.comparison_key(query)
        substance_clean = normalizer.comparison_key(record.substance)

        query_normalized = normalizer.normalize_chemical_name(query_clean)
        if query_normalized == normalizer.normalize_chemical_name(substance_clean):
            logger.debug(f"Normalized match: '{query_clean}' ~ '{substance_clean}'")
            return True

        if substance_clean in query_clean or query_clean in substance_clean:
            logger.debug(f"Contains match: '{query_clean}' <-> '{substance_clean}'")
            return True

        query_words = normalizer.word_set(query_clean)
        substance_words = normalizer.word_set(substance_clean)
        largest = max(len(query_words), len(substance_words))
        if largest:
            shared = len(query_words & substance_words)
            overlap = shared / largest
            if overlap >= self.config.word_overlap_ratio and shared >= self.config.min_overlap_words:
                logger.debug(
                    f"Word overlap match: '{query_clean}' <-> '{substance_clean}' ({overlap:.2f})"
                )
                return True

        for other_name in record.alias_list():
            other_clean = other_name.lower()
            if query_clean in other_clean or other_clean in query_clean:
                logger.debug(f"Other name match: '{query_clean}' <-> '{other_clean}'")
                return True
            if query_normalized == normalizer.normalize_chemical_name(other_clean):
                logger.debug(f"Normalized other name match: '{query_clean}' ~ '{other_clean}'")
                return True

        return False
