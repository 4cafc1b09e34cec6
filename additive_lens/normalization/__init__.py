"""
Text normalization package for additive name processing.

This package provides query cleaning, loose chemical-name normalization,
ingredient-list parsing and display formatting.
"""

from .text_normalizer import TextNormalizer, clean_query, normalize_chemical_name
from .ingredient_parser import (
    BASIC_INGREDIENTS,
    clean_ocr_text,
    is_basic_ingredient,
    parse_additive_with_parentheses,
    parse_ingredients_by_delimiters,
)
from .formatting import format_chemical_name, format_other_names, format_technical_effect

__all__ = [
    'TextNormalizer',
    'clean_query',
    'normalize_chemical_name',
    'BASIC_INGREDIENTS',
    'clean_ocr_text',
    'is_basic_ingredient',
    'parse_additive_with_parentheses',
    'parse_ingredients_by_delimiters',
    'format_chemical_name',
    'format_other_names',
    'format_technical_effect',
]
