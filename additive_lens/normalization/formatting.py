"""
Display formatting for catalog text.

Catalog fields are mostly stored in capitals and pipe-delimited; these
helpers turn them into readable text.
"""

import re

_WORD = re.compile(r'\S+')


def capitalize_words(text: str) -> str:
    """Uppercase the first character of each whitespace-separated word, lowercase the rest."""
    return _WORD.sub(lambda m: m.group(0).capitalize(), text)


def format_chemical_name(name: str) -> str:
    """
    Trim a substance name and title-case it when it is all capitals.

    Examples:
        >>> format_chemical_name(" SODIUM BENZOATE ")
        'Sodium Benzoate'
        >>> format_chemical_name("Natural Flavors")
        'Natural Flavors'
    """
    trimmed = name.strip()
    if trimmed == trimmed.upper():
        return capitalize_words(trimmed)
    return trimmed


def _format_item(item: str) -> str:
    return capitalize_words(item) if item == item.upper() else item


def format_technical_effect(effect: str) -> str:
    """
    Render a pipe-delimited effect list as an English list.

    Examples:
        >>> format_technical_effect("ANTIMICROBIAL AGENT|PRESERVATIVE")
        'Antimicrobial Agent and Preservative'
        >>> format_technical_effect("A|B|C")
        'A, B, and C'
    """
    effects = [_format_item(e.strip()) for e in effect.split('|') if e.strip()]

    if len(effects) <= 1:
        return effects[0] if effects else ''
    if len(effects) == 2:
        return ' and '.join(effects)
    return f"{', '.join(effects[:-1])}, and {effects[-1]}"


def format_other_names(other_names: str, original_name: str) -> str:
    """
    Render alternate names as a comma-separated list.

    Names equal (case-insensitively) to ``original_name`` are dropped.
    """
    names = [
        _format_item(n.strip())
        for n in other_names.split('|')
        if n.strip() and n.strip().lower() != original_name.lower()
    ]
    return ', '.join(names)
