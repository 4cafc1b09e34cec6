"""
Text normalization module for additive names.

Provides the query cleaning applied before every lookup and the loose
chemical-name normalization used by partial matching. Downstream score
thresholds were tuned against exactly these rules.
"""

import re
from typing import Set

# Case-insensitive literal "(preservative)" label added by ingredient lists
PRESERVATIVE_LABEL = re.compile(re.escape("(preservative)"), re.IGNORECASE)


class TextNormalizer:
    """
    Normalizes additive names for lookup and comparison.

    Handles:
    - Query cleaning (trim, "(preservative)" label removal, parenthesis removal)
    - Comparison keys (trim + lowercase)
    - Chemical locant stripping ("2-", "-12", "-3-") for loose equality
    - Word tokenization
    """

    # Locant patterns, applied in this order
    INTERIOR_LOCANT = re.compile(r'-\d+-')
    LEADING_LOCANT = re.compile(r'^\d+-')
    TRAILING_LOCANT = re.compile(r'-\d+$')
    WHITESPACE = re.compile(r'\s+')

    def clean_query(self, text: str) -> str:
        """
        Clean a raw query string, preserving its case.

        Pipeline order:
        1. Trim whitespace
        2. Remove "(preservative)" (any case)
        3. Remove "(" and ")"
        4. Trim whitespace again

        Args:
            text: Raw query

        Returns:
            Cleaned query

        Examples:
            >>> TextNormalizer().clean_query("  SODIUM BENZOATE (PRESERVATIVE) ")
            'SODIUM BENZOATE'
            >>> TextNormalizer().clean_query("Yellow 5 (Tartrazine)")
            'Yellow 5 Tartrazine'
        """
        if not text or not isinstance(text, str):
            return ''

        text = text.strip()
        text = PRESERVATIVE_LABEL.sub('', text)
        text = text.replace('(', '').replace(')', '')
        return text.strip()

    def comparison_key(self, text: str) -> str:
        """Lowercased, trimmed form used for case-insensitive equality."""
        return text.lower().strip()

    def normalize_chemical_name(self, name: str) -> str:
        """
        Strip numeric locants and collapse whitespace.

        Applied to already-lowercased names so that "2-methylpropionic acid"
        and "methylpropionic acid" compare equal.

        Args:
            name: Chemical name

        Returns:
            Name without locants

        Examples:
            >>> TextNormalizer().normalize_chemical_name("2-hydroxy-1-propanoic acid")
            'hydroxy-propanoic acid'
            >>> TextNormalizer().normalize_chemical_name("vitamin b-12")
            'vitamin b'
        """
        normalized = self.INTERIOR_LOCANT.sub('-', name)
        normalized = self.LEADING_LOCANT.sub('', normalized)
        normalized = self.TRAILING_LOCANT.sub('', normalized)
        normalized = self.WHITESPACE.sub(' ', normalized)
        return normalized.strip()

    def word_set(self, text: str) -> Set[str]:
        return set(text.split())


# Module-level singleton for convenience functions
_normalizer_instance = None


def _get_normalizer() -> TextNormalizer:
    """Get or create the module-level TextNormalizer singleton."""
    global _normalizer_instance
    if _normalizer_instance is None:
        _normalizer_instance = TextNormalizer()
    return _normalizer_instance


def clean_query(text: str) -> str:
    """Convenience wrapper for ``TextNormalizer.clean_query``."""
    return _get_normalizer().clean_query(text)


def normalize_chemical_name(name: str) -> str:
    """Convenience wrapper for ``TextNormalizer.normalize_chemical_name``."""
    return _get_normalizer().normalize_chemical_name(name)
