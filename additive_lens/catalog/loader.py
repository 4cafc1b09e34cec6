"""
Catalog loading.

Parses the persisted embedding dataset (a JSON document with
``embedding_dimension``, ``total_records`` and a ``data`` array of substance
records) into a CatalogStore. Malformed individual records are skipped;
structural problems with the document itself raise CatalogLoadError.
"""

import json
import logging
import math
from numbers import Real
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import numpy as np

from additive_lens.catalog.models import CatalogStore, SubstanceRecord
from additive_lens.errors import CatalogLoadError

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("substance", "other_names", "technical_effect", "searchable_text")

# Largest magnitude that survives conversion to the float32 matrix
FLOAT32_MAX = float(np.finfo(np.float32).max)


def load_catalog(raw: Mapping[str, Any]) -> CatalogStore:
    """
    Build a CatalogStore from a parsed catalog document.

    Args:
        raw: Parsed JSON document

    Returns:
        CatalogStore holding every valid record, in document order

    Raises:
        CatalogLoadError: If the document is not a mapping, has no ``data``
            array, or declares a missing/invalid ``embedding_dimension``
    """
    if not isinstance(raw, Mapping):
        raise CatalogLoadError(f"Catalog document must be an object, got {type(raw).__name__}")

    dimension = raw.get("embedding_dimension")
    if isinstance(dimension, bool) or not isinstance(dimension, int) or dimension <= 0:
        raise CatalogLoadError(f"Invalid embedding_dimension: {dimension!r}")

    data = raw.get("data")
    if not isinstance(data, list):
        raise CatalogLoadError("Catalog document has no 'data' array")

    total_records = raw.get("total_records")
    logger.info(f"Loading {total_records} records with {dimension}-dimensional embeddings")

    records = []
    skipped = 0
    for position, item in enumerate(data):
        record = _parse_record(item, dimension)
        if record is None:
            skipped += 1
            logger.debug(f"Skipped malformed catalog record at position {position}")
            continue
        records.append(record)

    if isinstance(total_records, int) and total_records != len(data):
        logger.warning(
            f"Catalog declares {total_records} records but contains {len(data)}"
        )
    if skipped:
        logger.warning(f"Skipped {skipped} malformed catalog records")

    logger.info(f"Loaded {len(records)} additive records")
    return CatalogStore(records, dimension)


def load_catalog_file(path: Union[str, Path]) -> CatalogStore:
    """
    Load the catalog from a JSON file.

    Args:
        path: Path to the embeddings JSON file

    Returns:
        Loaded CatalogStore

    Raises:
        CatalogLoadError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"Catalog file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise CatalogLoadError(f"Failed to read catalog file {path}: {e}") from e

    return load_catalog(raw)


def _parse_record(item: Any, dimension: int) -> Optional[SubstanceRecord]:
    """Validate one raw record; returns None when it must be skipped."""
    if not isinstance(item, dict):
        return None

    for field_name in REQUIRED_TEXT_FIELDS:
        if not isinstance(item.get(field_name), str):
            return None

    embedding = item.get("embedding")
    if not isinstance(embedding, list) or len(embedding) != dimension:
        return None
    if any(isinstance(value, bool) or not isinstance(value, Real) for value in embedding):
        return None

    try:
        vector = tuple(float(value) for value in embedding)
    except (OverflowError, ValueError):
        return None
    if not all(math.isfinite(value) and abs(value) <= FLOAT32_MAX for value in vector):
        return None

    return SubstanceRecord(
        substance=item["substance"],
        other_names=item["other_names"],
        technical_effect=item["technical_effect"],
        searchable_text=item["searchable_text"],
        embedding=vector,
    )
