"""
Regulatory code package.

Loads the substance regulation table and resolves additive names to
CFR Title 21 section codes and eCFR links.
"""

from additive_lens.regulation.code_resolver import (
    GENERAL_CODE,
    SPECIAL_CASES,
    RegulationCodeResolver,
    RegulationLink,
    clean_code,
    regulation_codes,
    regulation_link,
    regulation_urls,
)
from additive_lens.regulation.csv_parser import parse_csv_line
from additive_lens.regulation.regulation_index import (
    RegulationIndex,
    load_regulation_file,
    load_regulation_index,
)
from additive_lens.regulation.service import RegulationService

__all__ = [
    "GENERAL_CODE",
    "SPECIAL_CASES",
    "RegulationCodeResolver",
    "RegulationIndex",
    "RegulationLink",
    "RegulationService",
    "clean_code",
    "load_regulation_file",
    "load_regulation_index",
    "parse_csv_line",
    "regulation_codes",
    "regulation_link",
    "regulation_urls",
]
