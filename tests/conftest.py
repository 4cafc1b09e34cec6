"""
Pytest configuration and shared fixtures for additive matcher tests.

Provides:
- A small catalog whose embeddings come from the real lexical encoder
- A tiny hand-built catalog with a stub encoder for exact score control
- Regulation table text, index and resolver
- Engines and performance tracking utilities
"""

import pytest

from additive_lens.catalog.loader import load_catalog
from additive_lens.catalog.models import CatalogStore
from additive_lens.matching.feature_encoder import LexicalFeatureEncoder
from additive_lens.matching.resolution_engine import ResolutionEngine
from additive_lens.matching.types import MatcherConfig
from additive_lens.normalization.text_normalizer import TextNormalizer
from additive_lens.regulation.code_resolver import RegulationCodeResolver
from additive_lens.regulation.regulation_index import RegulationIndex, load_regulation_index
from tests.fixtures.test_data import (
    CATALOG_RECORDS,
    EMBEDDING_DIMENSION,
    REGULATION_TEXT,
    catalog_document,
)
from tests.fixtures.stubs import make_record


# ============================================================================
# NORMALIZATION / ENCODING FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def text_normalizer() -> TextNormalizer:
    return TextNormalizer()


@pytest.fixture(scope="session")
def encoder() -> LexicalFeatureEncoder:
    return LexicalFeatureEncoder(EMBEDDING_DIMENSION)


@pytest.fixture(scope="function")
def default_config() -> MatcherConfig:
    """Built-in defaults, independent of config/matching_config.yaml."""
    return MatcherConfig()


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture(scope="session")
def catalog_raw(encoder) -> dict:
    """Catalog document whose embeddings are the encoded substance names."""
    embeddings = [encoder.encode(record['substance']).tolist() for record in CATALOG_RECORDS]
    return catalog_document(embeddings)


@pytest.fixture(scope="session")
def catalog(catalog_raw) -> CatalogStore:
    return load_catalog(catalog_raw)


@pytest.fixture(scope="function")
def empty_catalog() -> CatalogStore:
    return CatalogStore.empty(EMBEDDING_DIMENSION)


@pytest.fixture(scope="function")
def unit_catalog() -> CatalogStore:
    """
    Four-dimensional catalog with axis-aligned embeddings.

    Order: ALPHA COMPOUND (x), BETA COMPOUND (y), OMEGA RESIN (x),
    ZERO THING (zero vector).
    """
    return CatalogStore([
        make_record('ALPHA COMPOUND', [1, 0, 0, 0]),
        make_record('BETA COMPOUND', [0, 1, 0, 0], other_names='BETA|SECOND COMPOUND'),
        make_record('OMEGA RESIN', [1, 0, 0, 0]),
        make_record('ZERO THING', [0, 0, 0, 0]),
    ], dimension=4)


# ============================================================================
# ENGINE FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def resolution_engine(catalog, text_normalizer, default_config) -> ResolutionEngine:
    return ResolutionEngine(catalog, normalizer=text_normalizer, config=default_config)


@pytest.fixture(scope="function")
def empty_engine(empty_catalog, default_config) -> ResolutionEngine:
    return ResolutionEngine(empty_catalog, config=default_config)


# ============================================================================
# REGULATION FIXTURES
# ============================================================================

@pytest.fixture(scope="session")
def regulation_text() -> str:
    return REGULATION_TEXT


@pytest.fixture(scope="session")
def regulation_index(regulation_text) -> RegulationIndex:
    return load_regulation_index(regulation_text)


@pytest.fixture(scope="function")
def regulation_resolver(regulation_index) -> RegulationCodeResolver:
    return RegulationCodeResolver(regulation_index)


# ============================================================================
# PERFORMANCE
# ============================================================================

@pytest.fixture
def performance_tracker():
    """Simple performance tracking for benchmarks."""
    import time

    class PerformanceTracker:
        def __init__(self):
            self.measurements = []

        def measure(self, func, *args, **kwargs):
            """Measure execution time of a function."""
            start = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.measurements.append(elapsed_ms)
            return result, elapsed_ms

        def avg_time(self):
            """Calculate average execution time."""
            return sum(self.measurements) / len(self.measurements) if self.measurements else 0

        def max_time(self):
            """Get maximum execution time."""
            return max(self.measurements) if self.measurements else 0

    return PerformanceTracker()
