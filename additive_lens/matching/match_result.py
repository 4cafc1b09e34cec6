"""
Data structures for matching results.

Defines the output of a single resolution and the scored candidate
produced by the similarity scorer.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict

from additive_lens.catalog.models import SubstanceRecord
from additive_lens.matching.types import ConfidenceLevel, MatchMethod


@dataclass(frozen=True)
class MatchResult:
    """
    Knowledge found for one query.

    Attributes:
        original_query: The query as cleaned (or as supplied, for batch lookups)
        substance: Canonical substance name
        other_names: Raw pipe-delimited alternate names
        technical_effect: Function description
        method: How the match was made
        score: Final blended score (1.0 for alias and exact hits)
        confidence_level: Informational band of ``score``
    """
    original_query: str
    substance: str
    other_names: str
    technical_effect: str
    method: MatchMethod = MatchMethod.EXACT
    score: float = 1.0
    confidence_level: ConfidenceLevel = ConfidenceLevel.HIGH

    def with_query(self, original_query: str) -> "MatchResult":
        """Copy with a different ``original_query``."""
        return replace(self, original_query=original_query)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original_query": self.original_query,
            "substance": self.substance,
            "other_names": self.other_names,
            "technical_effect": self.technical_effect,
            "method": self.method.value,
            "score": self.score,
            "confidence_level": self.confidence_level.value,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """
    A catalog record with its blended score for one query.

    Attributes:
        record: The catalog record
        similarity: Cosine similarity of query and record vectors
        exact: Query equals the substance name
        partial: Query loosely matches the substance or an alias
        score: similarity plus the exact/partial bonus
    """
    record: SubstanceRecord
    similarity: float
    exact: bool
    partial: bool
    score: float

    @property
    def substance(self) -> str:
        return self.record.substance
