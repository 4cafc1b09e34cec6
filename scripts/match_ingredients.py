"""
Batch additive lookup CLI.

Resolves additive names (or whole ingredient lists) against the substance
catalog and writes a results CSV with knowledge and regulation links.

Usage:
    python scripts/match_ingredients.py --catalog data/additives_catalog.json --text "SUGAR, SODIUM BENZOATE (PRESERVATIVE), RED 40"
    python scripts/match_ingredients.py --catalog data/additives_catalog.json --regulation data/FoodSubstancesCFR.csv \
        --input labels.xlsx --column Ingredients --output reports/additives.csv
    python scripts/match_ingredients.py --catalog data/additives_catalog.json --input names.csv --column additive --mode names
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from loguru import logger
from tqdm import tqdm

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from additive_lens.analysis import AdditiveAnalyzer
from additive_lens.catalog import CatalogService
from additive_lens.matching import ResolutionEngine, build_engine
from additive_lens.matching.resolution_engine import DEFAULT_CONFIG_PATH
from additive_lens.normalization import clean_ocr_text
from additive_lens.regulation import RegulationCodeResolver, RegulationService
from additive_lens.utils.config_manager import ConfigManager

# Names per resolve_many call in --mode names
BATCH_SIZE = 500


def setup_logging(verbose: bool = False):
    """Configure loguru for the CLI and stdlib logging for the library."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="DEBUG" if verbose else "INFO",
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def load_input_column(file_path: Path, column: str) -> List[str]:
    """
    Load one text column from an Excel or CSV file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the format is unsupported or the column is missing
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    if file_path.suffix.lower() in ['.xlsx', '.xls']:
        df = pd.read_excel(file_path, dtype=str)
    elif file_path.suffix.lower() == '.csv':
        df = pd.read_csv(file_path, dtype=str)
    else:
        raise ValueError(f"Unsupported file format: {file_path.suffix}")

    if column not in df.columns:
        raise ValueError(
            f"Column '{column}' not found in file.\n"
            f"Available columns: {', '.join(df.columns)}"
        )

    values = df[column].fillna('').astype(str).tolist()
    logger.info(f"Loaded {len(values)} rows from {file_path}")
    return values


def analyze_lists(analyzer: AdditiveAnalyzer, ingredient_lists: List[str], ocr: bool = False) -> List[Dict]:
    """
    Analyze each ingredient list; one output row per finding.

    With ``ocr`` set, each text is first cut to the ingredient panel by ``clean_ocr_text``.
    """
    rows = []
    for row_number, text in enumerate(tqdm(ingredient_lists, desc="Analyzing ingredient lists"), start=1):
        if not text.strip():
            continue
        report = analyzer.analyze(clean_ocr_text(text) if ocr else text)
        for record in report.to_records():
            rows.append({'row': row_number, **record})
        for name in report.unresolved:
            rows.append({'row': row_number, 'query': name, 'method': 'unknown'})
    return rows


def resolve_names(engine: ResolutionEngine, regulation: Optional[RegulationCodeResolver],
                  names: List[str]) -> List[Dict]:
    """Resolve additive names in chunks; unresolved names are reported as unknown."""
    queries = [name for name in names if name.strip()]
    analyzer = AdditiveAnalyzer(engine, regulation)

    rows = []
    with tqdm(total=len(queries), desc="Resolving additives") as progress:
        for start in range(0, len(queries), BATCH_SIZE):
            chunk = queries[start:start + BATCH_SIZE]
            findings = {finding.query: finding for finding in analyzer.lookup_many(chunk)}
            for name in chunk:
                finding = findings.get(name)
                rows.append(finding.to_dict() if finding else {'query': name, 'method': 'unknown'})
            progress.update(len(chunk))
    return rows


def print_summary(rows: List[Dict]):
    total = len(rows)
    if total == 0:
        logger.warning("No additives found")
        return

    by_method: Dict[str, int] = {}
    for row in rows:
        method = row.get('method', 'unknown')
        by_method[method] = by_method.get(method, 0) + 1

    logger.info(f"Total rows: {total:,}")
    for method, count in sorted(by_method.items()):
        logger.info(f"  {method:<14} {count:6,} ({count / total * 100:5.1f}%)")


def main():
    """Main entry point for batch additive lookup."""
    parser = argparse.ArgumentParser(
        description="Batch food additive lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--catalog', required=True, help='Substance catalog JSON file')
    parser.add_argument('--regulation', help='Regulation table (CSV export) for CFR codes')
    parser.add_argument('--config', help='Matching config YAML (default: config/matching_config.yaml)')

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--text', '-t', help='A single ingredient list to analyze')
    source.add_argument('--input', '-i', help='Input file (Excel or CSV)')

    parser.add_argument('--column', '-c', default='ingredients', help='Input column (default: ingredients)')
    parser.add_argument('--mode', choices=['ingredients', 'names'], default='ingredients',
                        help='Treat input rows as ingredient lists or as additive names')
    parser.add_argument('--output', '-o', help='Output CSV (default: reports/additives_<timestamp>.csv)')
    parser.add_argument('--ocr', action='store_true',
                        help='Input text is raw OCR output of a label; keep only the ingredient panel')
    parser.add_argument('--threshold', type=float, help='Override the match threshold')
    parser.add_argument('--workers', type=int, help='Thread pool size for batch resolution')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    args = parser.parse_args()
    setup_logging(args.verbose)

    config_manager = ConfigManager(Path(args.config) if args.config else DEFAULT_CONFIG_PATH)
    errors = config_manager.validate_config()
    if errors:
        for error in errors:
            logger.error(f"Config: {error}")
        sys.exit(1)

    catalog_service = CatalogService(path=args.catalog)
    catalog_service.ensure_loaded()
    if not catalog_service.is_ready:
        logger.error(f"Catalog unavailable: {catalog_service.error}")
        sys.exit(1)
    logger.info(f"Catalog ready: {len(catalog_service.catalog):,} substances")

    engine = build_engine(
        catalog_service,
        config=config_manager.matcher_config(),
        match_threshold=args.threshold,
        max_workers=args.workers,
    )

    regulation = None
    if args.regulation:
        regulation_service = RegulationService(
            path=args.regulation,
            fuzzy_length_ratio=float(config_manager.get_regulation_param('fuzzy_length_ratio')),
            fuzzy_min_length=int(config_manager.get_regulation_param('fuzzy_min_length')),
        )
        regulation_service.ensure_loaded()
        if regulation_service.is_ready:
            regulation = regulation_service.resolver
            logger.info(f"Regulation index ready: {len(regulation_service.index):,} substances")
        else:
            logger.warning(f"Regulation codes disabled: {regulation_service.error}")

    try:
        if args.text is not None:
            rows = analyze_lists(AdditiveAnalyzer(engine, regulation), [args.text], ocr=args.ocr)
        else:
            values = load_input_column(Path(args.input), args.column)
            if args.mode == 'names':
                rows = resolve_names(engine, regulation, values)
            else:
                rows = analyze_lists(AdditiveAnalyzer(engine, regulation), values, ocr=args.ocr)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    output_path = Path(args.output) if args.output else (
        Path("reports") / f"additives_{datetime.now():%Y%m%d_%H%M%S}.csv"
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(output_path, index=False)
    logger.success(f"Results written to: {output_path}")

    print_summary(rows)


if __name__ == '__main__':
    main()
