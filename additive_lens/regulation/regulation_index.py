"""
Regulation index: substance name -> CFR Title 21 section codes.

Built from the FDA "Substances Added to Food" table export. The export
starts with a fixed preamble; the header row is always the ninth line.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from additive_lens.errors import RegulationLoadError
from additive_lens.regulation.csv_parser import parse_csv_line

logger = logging.getLogger(__name__)

HEADER_ROW_INDEX = 8
SUBSTANCE_COLUMN = "Substance"
CODE_COLUMN_PREFIXES = ("Reg add", "Regadd")
EMPTY_CODE_VALUES = frozenset({"", "0", "n/a"})

# Encodings tried in order when reading the table from disk
FILE_ENCODINGS = ("utf-8", "cp1252")


class RegulationIndex:
    """
    Immutable mapping of uppercased substance names to regulation codes.

    Keys keep the row order of the source table; that order is the scan
    order for fuzzy lookups.
    """

    def __init__(self, entries: Optional[Mapping[str, Sequence[str]]] = None):
        codes: Dict[str, Tuple[str, ...]] = {}
        for name, values in (entries or {}).items():
            codes[name.upper()] = tuple(values)
        self._codes = MappingProxyType(codes)

    @classmethod
    def empty(cls) -> "RegulationIndex":
        return cls()

    def codes(self, key: str) -> Optional[Tuple[str, ...]]:
        """Codes for an exact uppercase key, or None."""
        return self._codes.get(key)

    def items(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        """(key, codes) pairs in source order."""
        return iter(self._codes.items())

    def __contains__(self, key: object) -> bool:
        return key in self._codes

    def __len__(self) -> int:
        return len(self._codes)

    def __repr__(self) -> str:
        return f"RegulationIndex({len(self)} substances)"


def _code_columns(headers: List[str]) -> List[int]:
    return [
        i for i, header in enumerate(headers)
        if header.strip().startswith(CODE_COLUMN_PREFIXES)
    ]


def load_regulation_index(text: str) -> RegulationIndex:
    """
    Build a RegulationIndex from the table text.

    Rows without a substance name or without any code are skipped. A later
    row for the same (uppercased) substance replaces the earlier one.

    Args:
        text: Full text of the table export

    Returns:
        RegulationIndex

    Raises:
        RegulationLoadError: If the header row or the Substance column is missing
    """
    lines = text.splitlines()
    if len(lines) <= HEADER_ROW_INDEX:
        raise RegulationLoadError(
            f"Regulation table has {len(lines)} lines; header expected on line {HEADER_ROW_INDEX + 1}"
        )

    headers = parse_csv_line(lines[HEADER_ROW_INDEX])
    if SUBSTANCE_COLUMN not in headers:
        raise RegulationLoadError(f"'{SUBSTANCE_COLUMN}' column not found in regulation table header")

    substance_index = headers.index(SUBSTANCE_COLUMN)
    code_indices = _code_columns(headers)
    if not code_indices:
        logger.warning("No regulation code columns found in header")

    entries: Dict[str, List[str]] = {}
    for raw_line in lines[HEADER_ROW_INDEX + 1:]:
        line = raw_line.strip()
        if not line:
            continue

        columns = parse_csv_line(line)
        if len(columns) <= substance_index:
            continue

        substance = columns[substance_index].strip()
        if not substance:
            continue

        codes = []
        for column_index in code_indices:
            if column_index >= len(columns):
                continue
            code = columns[column_index].strip()
            if code.lower() not in EMPTY_CODE_VALUES:
                codes.append(code)

        if codes:
            entries[substance.upper()] = codes

    logger.info(f"Loaded regulation codes for {len(entries)} substances")
    return RegulationIndex(entries)


def load_regulation_file(path: Union[str, Path]) -> RegulationIndex:
    """
    Read and index the regulation table from disk.

    The file is decoded as UTF-8, falling back to Windows-1252.

    Raises:
        RegulationLoadError: If the file cannot be read or is malformed
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise RegulationLoadError(f"Cannot read regulation table {path}: {e}") from e

    for encoding in FILE_ENCODINGS:
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"Regulation table {path} is not valid {encoding}")
            continue
        logger.debug(f"Decoded regulation table {path} as {encoding}")
        return load_regulation_index(text)

    raise RegulationLoadError(f"Cannot decode regulation table {path}")
