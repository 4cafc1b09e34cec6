"""
Substance catalog package.

Provides the immutable catalog of food-additive substances with their
precomputed feature vectors, the JSON loader, and the lifecycle service
that guards one-time loading.
"""

from additive_lens.catalog.loader import load_catalog, load_catalog_file
from additive_lens.catalog.models import CatalogStore, SubstanceRecord
from additive_lens.catalog.service import CatalogService

__all__ = [
    "CatalogStore",
    "SubstanceRecord",
    "CatalogService",
    "load_catalog",
    "load_catalog_file",
]
