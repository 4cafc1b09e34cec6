"""
Ingredient list parsing.

Turns raw ingredient-panel text (typed or OCR'd) into candidate additive
strings for resolution. Handles:
- Parentheses used as sub-lists: "SALT (IODIZED)" -> "SALT", "IODIZED"
- Leading conjunctions: "AND CITRIC ACID" -> "CITRIC ACID"
- Composite additive names: "COLORS (RED 40, YELLOW 5)"
- Basic (non-additive) ingredients that never need a lookup
"""

import re
from typing import List

from loguru import logger

# Plain food ingredients that are never additives and never carry regulation codes
BASIC_INGREDIENTS = frozenset({
    "sugar", "cane sugar", "brown sugar", "white sugar", "granulated sugar",
    "flour", "wheat flour", "water", "salt", "oil", "milk", "eggs", "butter",
    "honey", "molasses", "corn syrup", "rice", "oats", "barley",
})

# Phrases marking the text before "(" as a descriptor rather than an additive
DESCRIPTOR_PHRASES = ("contains", "including", "such as")

LEADING_AND = re.compile(r'^\s*AND\s+')
WHITESPACE = re.compile(r'\s+')
PANEL_MARKERS = (
    re.compile(re.escape("INGREDIENTS:"), re.IGNORECASE),
    re.compile(re.escape("CONTAINS:"), re.IGNORECASE),
)


def is_basic_ingredient(ingredient: str) -> bool:
    """
    Check whether an ingredient is a basic food (sugar, flour, water, ...).

    Args:
        ingredient: Ingredient name, any case

    Returns:
        True if the trimmed, lowercased name is in BASIC_INGREDIENTS
    """
    return ingredient.strip().lower() in BASIC_INGREDIENTS


def parse_ingredients_by_delimiters(text: str) -> List[str]:
    """
    Split an ingredient list on commas and parentheses.

    Args:
        text: Ingredient list text

    Returns:
        Trimmed ingredient strings, in order, without a leading "AND" and
        without empty or single-character fragments

    Examples:
        >>> parse_ingredients_by_delimiters("SUGAR, SALT (IODIZED), AND CITRIC ACID")
        ['SUGAR', 'SALT', 'IODIZED', 'CITRIC ACID']
    """
    with_commas = text.replace('(', ',').replace(')', ',')

    ingredients = []
    for part in with_commas.split(','):
        ingredient = LEADING_AND.sub('', part.strip())
        if len(ingredient) > 1:
            ingredients.append(ingredient)
    return ingredients


def parse_additive_with_parentheses(text: str) -> List[str]:
    """
    Split a composite additive name into its parts.

    The text before the first "(" is kept unless it is a descriptor such as
    "contains"; the text between the first "(" and the last ")" is split on
    commas.

    Args:
        text: Additive name, e.g. "COLORS (RED 40, AND YELLOW 5)"

    Returns:
        List of parts; the input itself when there are no parentheses

    Examples:
        >>> parse_additive_with_parentheses("COLORS (RED 40, AND YELLOW 5)")
        ['COLORS', 'RED 40', 'YELLOW 5']
    """
    open_paren = text.find('(')
    close_paren = text.rfind(')')
    if open_paren == -1 or close_paren == -1:
        return [text]

    results = []
    main_part = text[:open_paren].strip()
    main_lower = main_part.lower()
    if main_part and not any(phrase in main_lower for phrase in DESCRIPTOR_PHRASES):
        results.append(main_part)

    if open_paren + 1 < close_paren:
        inside = text[open_paren + 1:close_paren]
        for part in inside.split(','):
            cleaned = LEADING_AND.sub('', part.strip())
            if cleaned:
                results.append(cleaned)

    logger.debug(f"Parsed composite additive '{text}' into {results}")
    return results


def clean_ocr_text(text: str) -> str:
    """
    Tidy OCR output of an ingredient panel.

    Collapses whitespace, drops everything up to an "INGREDIENTS:" (or,
    failing that, "CONTAINS:") marker and uppercases the result.

    Args:
        text: Raw recognized text

    Returns:
        Uppercased ingredient list text
    """
    cleaned = WHITESPACE.sub(' ', text).strip()

    for marker in PANEL_MARKERS:
        match = marker.search(cleaned)
        if match:
            cleaned = cleaned[match.end():].strip()
            break

    return cleaned.upper()
