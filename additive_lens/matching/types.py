"""
Type definitions for the additive matching engine.

Defines enums and configuration structures shared by the matching modules.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class MatchMethod(Enum):
    """How a query was resolved."""
    FLAVOR_ALIAS = "flavor_alias"
    EXACT = "exact"
    SCORED = "scored"


class ConfidenceLevel(Enum):
    """Confidence level categories (informational, never gating)."""
    HIGH = "high"  # >= 0.7
    MEDIUM = "medium"  # >= 0.5
    LOW = "low"  # < 0.5


@dataclass(frozen=True)
class MatcherConfig:
    """Thresholds and bonuses for scoring and match decisions."""
    # Decision
    match_threshold: float = 0.244
    high_confidence: float = 0.7
    medium_confidence: float = 0.5

    # Score blending
    exact_bonus: float = 0.5
    partial_bonus: float = 0.3

    # Partial matching: word-set overlap
    word_overlap_ratio: float = 0.7
    min_overlap_words: int = 2

    # Scored path: substitute color names on substring overlap with the color table
    partial_color_matching: bool = True

    # Batch resolution
    max_workers: int = 1

    def confidence_level(self, score: float) -> ConfidenceLevel:
        """Band a final score."""
        if score >= self.high_confidence:
            return ConfidenceLevel.HIGH
        elif score >= self.medium_confidence:
            return ConfidenceLevel.MEDIUM
        else:
            return ConfidenceLevel.LOW

    @classmethod
    def from_sections(cls, thresholds: Mapping[str, Any], scoring: Mapping[str, Any],
                      matching: Mapping[str, Any]) -> "MatcherConfig":
        """
        Build a config from the ``thresholds``, ``scoring`` and ``matching``
        sections of the YAML configuration; missing keys keep their defaults.
        """
        defaults = cls()
        return cls(
            match_threshold=float(thresholds.get('match_threshold', defaults.match_threshold)),
            high_confidence=float(thresholds.get('high_confidence', defaults.high_confidence)),
            medium_confidence=float(thresholds.get('medium_confidence', defaults.medium_confidence)),
            exact_bonus=float(scoring.get('exact_bonus', defaults.exact_bonus)),
            partial_bonus=float(scoring.get('partial_bonus', defaults.partial_bonus)),
            word_overlap_ratio=float(scoring.get('word_overlap_ratio', defaults.word_overlap_ratio)),
            min_overlap_words=int(scoring.get('min_overlap_words', defaults.min_overlap_words)),
            partial_color_matching=bool(
                matching.get('partial_color_matching', defaults.partial_color_matching)
            ),
            max_workers=int(matching.get('max_workers', defaults.max_workers)),
        )
