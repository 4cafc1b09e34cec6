"""
Exact matching module for additive names.

Resolves queries through the flavor and color alias tables and through
case-insensitive equality against catalog names, without any scoring.
Exact and alias hits are unambiguous, so they are never exposed to the
noise of the synthetic embedding.
"""

from typing import Optional

from additive_lens.catalog.models import CatalogStore, SubstanceRecord
from additive_lens.matching.alias_tables import DEFAULT_ALIAS_TABLES, AliasTables
from additive_lens.matching.match_result import MatchResult
from additive_lens.matching.types import MatchMethod
from additive_lens.normalization.text_normalizer import TextNormalizer


class ExactMatcher:
    """
    Exact matching engine for additive names.

    Lookup order, first hit wins:
    1. Flavor alias table (never touches the catalog)
    2. Color alias table (rewrites the search term)
    3. Catalog substance name, then catalog alternate names, in catalog order
    """

    def __init__(self, normalizer: Optional[TextNormalizer] = None,
                 alias_tables: Optional[AliasTables] = None):
        """
        Initialize the exact matcher.

        Args:
            normalizer: TextNormalizer instance (creates new if None)
            alias_tables: Flavor/color tables (defaults to the built-in tables)
        """
        self.normalizer = normalizer or TextNormalizer()
        self.alias_tables = alias_tables or DEFAULT_ALIAS_TABLES

    def resolve_direct(self, text: str, catalog: CatalogStore) -> Optional[MatchResult]:
        """
        Attempt an alias or exact catalog match on input text.

        Args:
            text: Raw query, e.g. "CALCIUM PROPIONATE (PRESERVATIVE)"
            catalog: Catalog to search

        Returns:
            MatchResult whose ``original_query`` is the cleaned query, or
            None if nothing matches exactly
        """
        cleaned = self.normalizer.clean_query(text)
        if not cleaned:
            return None

        flavor_result = self.match_flavor(cleaned)
        if flavor_result:
            return flavor_result

        lowercased = cleaned.lower()
        search_term = self.alias_tables.color(lowercased) or cleaned

        # Alternate names are compared with the query as written, not the color rewrite
        record = catalog.find_exact(search_term, alias_term=lowercased)
        if record is None:
            return None

        return self._build_result(cleaned, record)

    def match_flavor(self, cleaned: str) -> Optional[MatchResult]:
        """
        Look up a cleaned query in the flavor table.

        Args:
            cleaned: Query already passed through ``clean_query``

        Returns:
            MatchResult built from the flavor table, or None
        """
        knowledge = self.alias_tables.flavor(cleaned.lower())
        if knowledge is None:
            return None

        return MatchResult(
            original_query=cleaned,
            substance=knowledge.substance,
            other_names=knowledge.other_names,
            technical_effect=knowledge.technical_effect,
            method=MatchMethod.FLAVOR_ALIAS,
        )

    def _build_result(self, cleaned: str, record: SubstanceRecord) -> MatchResult:
        return MatchResult(
            original_query=cleaned,
            substance=record.substance,
            other_names=record.other_names,
            technical_effect=record.technical_effect,
            method=MatchMethod.EXACT,
        )
