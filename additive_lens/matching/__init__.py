"""
Additive name matching engine package.

Provides cascade matching logic for additive name resolution using:
- Flavor alias table (generic flavor phrases)
- Color alias table (certified-color shorthand)
- Exact matching (case-insensitive name and alternate-name lookup)
- Similarity scoring (lexical feature vectors + string-agreement bonuses)

The resolution engine coordinates these methods with a fixed acceptance
threshold and informational confidence bands.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from additive_lens.catalog.models import CatalogStore
from additive_lens.catalog.service import CatalogService
from additive_lens.matching.alias_tables import AliasTables, DEFAULT_ALIAS_TABLES, FlavorKnowledge
from additive_lens.matching.exact_matcher import ExactMatcher
from additive_lens.matching.feature_encoder import LexicalFeatureEncoder
from additive_lens.matching.match_result import MatchResult, ScoredCandidate
from additive_lens.matching.resolution_engine import ResolutionEngine
from additive_lens.matching.similarity_scorer import SimilarityScorer, cosine_similarity
from additive_lens.matching.types import ConfidenceLevel, MatchMethod, MatcherConfig

_logger = logging.getLogger(__name__)


def build_engine(
    catalog: Union[CatalogStore, CatalogService],
    normalizer=None,
    config_path: Optional[Path] = None,
    **engine_kwargs,
) -> ResolutionEngine:
    """
    Build a ResolutionEngine over a catalog.

    Accepts a CatalogService and loads it on demand. A catalog that failed
    to load is replaced by an empty one, so only flavor-alias lookups can
    succeed.

    Args:
        catalog: CatalogStore, or CatalogService to load from.
        normalizer: TextNormalizer (created internally if None).
        config_path: YAML config path (default: config/matching_config.yaml).
        **engine_kwargs: Extra kwargs forwarded to ResolutionEngine.

    Returns:
        Fully-wired ResolutionEngine instance.
    """
    if isinstance(catalog, CatalogService):
        catalog.ensure_loaded()
        if not catalog.is_ready:
            _logger.warning(
                "Catalog not available (%s): %s",
                catalog.state.value,
                catalog.error or "no records",
            )
        store = catalog.catalog
    else:
        store = catalog

    _logger.info("Building engine over %d catalog records", len(store))
    return ResolutionEngine(
        catalog=store,
        normalizer=normalizer,
        config_path=config_path,
        **engine_kwargs,
    )


__all__ = [
    "AliasTables",
    "ConfidenceLevel",
    "DEFAULT_ALIAS_TABLES",
    "ExactMatcher",
    "FlavorKnowledge",
    "LexicalFeatureEncoder",
    "MatchMethod",
    "MatchResult",
    "MatcherConfig",
    "ResolutionEngine",
    "ScoredCandidate",
    "SimilarityScorer",
    "build_engine",
    "cosine_similarity",
]
