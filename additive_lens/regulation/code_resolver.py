"""
Regulatory code resolution.

Maps an additive name to its CFR Title 21 section codes and turns codes into
eCFR links.

Lookup order, first hit wins:
  1. Category phrases ("artificial flavor", "preservative", ...) -> 170.3
  2. Basic ingredients (sugar, flour, water, ...) -> no codes
  3. Exact uppercase name in the regulation index
  4. Containment match against index keys with a length-ratio guard
"""

import logging
import re
from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Optional, Sequence, Tuple
from urllib.parse import quote

from additive_lens.normalization.ingredient_parser import is_basic_ingredient
from additive_lens.regulation.regulation_index import RegulationIndex

logger = logging.getLogger(__name__)

GENERAL_CODE = "170.3"

ECFR_BASE_URL = "https://www.ecfr.gov/current/title-21/chapter-I/subchapter-B"
GENERAL_SECTION_URL = f"{ECFR_BASE_URL}/part-170"
SECTION_URL_TEMPLATE = ECFR_BASE_URL + "/part-{part}/subpart-C/section-{code}"

# Spreadsheet-formula decorations around codes, removed in this order
CODE_DECORATIONS = ("=T(", ")", "=", "T(")

# ASCII digits only, with an optional sign
PART_NUMBER = re.compile(r'[+-]?[0-9]+')

SPECIAL_CASES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    # Flavors
    "artificial flavor": (GENERAL_CODE,),
    "artificial flavors": (GENERAL_CODE,),
    "natural flavor": (GENERAL_CODE,),
    "natural flavors": (GENERAL_CODE,),
    "natural and artificial flavor": (GENERAL_CODE,),
    "natural and artificial flavors": (GENERAL_CODE,),

    # Colors
    "artificial colors": (GENERAL_CODE,),
    "artificial color": (GENERAL_CODE,),
    "natural colors": (GENERAL_CODE,),
    "natural color": (GENERAL_CODE,),

    # Preservatives
    "preservatives": (GENERAL_CODE,),
    "preservative": (GENERAL_CODE,),
})


class RegulationLink(NamedTuple):
    """A display code and its eCFR URL."""
    code: str
    url: str


def clean_code(raw_code: str) -> str:
    """
    Strip formula decorations from a raw code.

    Examples:
        >>> clean_code('=T(184.1733)')
        '184.1733'
    """
    cleaned = raw_code.strip()
    for decoration in CODE_DECORATIONS:
        cleaned = cleaned.replace(decoration, '')
    return cleaned


def regulation_link(raw_code: str) -> Optional[RegulationLink]:
    """
    Build the eCFR link for one code.

    Args:
        raw_code: Code as stored in the index, e.g. "172.515" or "=T(184.1733)"

    Returns:
        RegulationLink, or None when the code has no integer part number
        before a ".". Characters not allowed in a URL path (spaces, for
        example) are percent-encoded in the section part of the URL.
    """
    cleaned = clean_code(raw_code)

    if cleaned == GENERAL_CODE:
        return RegulationLink("170", GENERAL_SECTION_URL)

    part, dot, _ = cleaned.partition('.')
    if not dot or not PART_NUMBER.fullmatch(part):
        logger.warning(f"Skipping invalid code format: '{raw_code}' -> '{cleaned}'")
        return None

    return RegulationLink(cleaned, SECTION_URL_TEMPLATE.format(part=part, code=quote(cleaned, safe='+')))


def regulation_urls(codes: Sequence[str]) -> List[RegulationLink]:
    """
    Build eCFR links for a list of codes.

    Invalid codes are dropped; the rest keep their input order.

    Args:
        codes: Raw codes

    Returns:
        List of RegulationLink
    """
    links = []
    for code in codes:
        link = regulation_link(code)
        if link is not None:
            links.append(link)
    return links


class RegulationCodeResolver:
    """
    Resolves additive names to regulation codes.

    Category phrases and basic ingredients are answered without the index,
    so they behave the same whether or not a table was loaded.
    """

    def __init__(self, index: Optional[RegulationIndex] = None,
                 fuzzy_length_ratio: float = 0.6,
                 fuzzy_min_length: int = 4,
                 special_cases: Optional[Mapping[str, Sequence[str]]] = None):
        """
        Initialize the resolver.

        Args:
            index: Regulation index (empty if None)
            fuzzy_length_ratio: Minimum shorter/longer length ratio for a containment match
            fuzzy_min_length: Minimum length of the shorter string for a containment match
            special_cases: Category phrase table (built-in table if None)
        """
        self.index = index if index is not None else RegulationIndex.empty()
        self.fuzzy_length_ratio = fuzzy_length_ratio
        self.fuzzy_min_length = fuzzy_min_length
        self.special_cases = special_cases if special_cases is not None else SPECIAL_CASES

    def codes_for(self, substance: str) -> List[str]:
        """
        Regulation codes for an additive name.

        Args:
            substance: Additive name, any case

        Returns:
            Codes in table order; empty when nothing applies
        """
        if not substance or not substance.strip():
            return []

        special = self._special_case(substance.lower())
        if special is not None:
            logger.debug(f"Special case for '{substance}' -> {special}")
            return special

        if is_basic_ingredient(substance):
            logger.debug(f"Skipping basic ingredient: '{substance}'")
            return []

        uppercased = substance.upper()
        codes = self.index.codes(uppercased)
        if codes is not None:
            return list(codes)

        for key, key_codes in self.index.items():
            if (key in uppercased or uppercased in key) and self.is_relevant_match(uppercased, key):
                logger.debug(f"Containment match for '{substance}' -> '{key}'")
                return list(key_codes)

        return []

    def is_relevant_match(self, search_term: str, found_key: str) -> bool:
        """
        Length-ratio guard for containment matches.

        Both strings must be at least ``fuzzy_min_length`` long and the
        shorter must be at least ``fuzzy_length_ratio`` of the longer.
        """
        shorter = min(len(search_term), len(found_key))
        longer = max(len(search_term), len(found_key))
        if shorter < self.fuzzy_min_length:
            return False
        return shorter / longer >= self.fuzzy_length_ratio

    def regulation_urls(self, codes: Sequence[str]) -> List[RegulationLink]:
        return regulation_urls(codes)

    def links_for(self, substance: str) -> List[RegulationLink]:
        """Codes for a name, already turned into links."""
        return regulation_urls(self.codes_for(substance))

    def _special_case(self, lowercased: str) -> Optional[List[str]]:
        codes = self.special_cases.get(lowercased)
        if codes is not None:
            return list(codes)

        for phrase, phrase_codes in self.special_cases.items():
            if phrase in lowercased or lowercased in phrase:
                return list(phrase_codes)
        return None


def regulation_codes(substance: str, index: RegulationIndex) -> List[str]:
    """
    Regulation codes for an additive name, with the default guards.

    Args:
        substance: Additive name
        index: Loaded regulation index

    Returns:
        Codes, possibly empty
    """
    return RegulationCodeResolver(index).codes_for(substance)
