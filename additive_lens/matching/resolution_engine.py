"""
Resolution engine for additive name matching.

Coordinates alias/exact matching and similarity scoring, then applies the
acceptance threshold.

Cascade order:
  Step 1: Query cleaning ("(preservative)" label and parentheses removed)
  Step 2: Flavor alias table (built-in knowledge, catalog untouched)
  Step 3: Color alias table + exact catalog name/alternate-name match
  Step 4: Similarity scoring over the whole catalog (cosine + string bonuses)
  Step 5: Decision gate (score >= match threshold) and confidence banding
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

import yaml

from additive_lens.catalog.models import CatalogStore, SubstanceRecord
from additive_lens.matching.alias_tables import DEFAULT_ALIAS_TABLES, AliasTables
from additive_lens.matching.exact_matcher import ExactMatcher
from additive_lens.matching.match_result import MatchResult
from additive_lens.matching.similarity_scorer import SimilarityScorer
from additive_lens.matching.types import ConfidenceLevel, MatchMethod, MatcherConfig
from additive_lens.normalization.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)

# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / 'config' / 'matching_config.yaml'


def _load_thresholds(config_path: Optional[Path] = None) -> MatcherConfig:
    """Load matcher thresholds from YAML, with hardcoded fallbacks."""
    path = config_path or DEFAULT_CONFIG_PATH
    try:
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                cfg = yaml.safe_load(f) or {}
            return MatcherConfig.from_sections(
                cfg.get('thresholds') or {},
                cfg.get('scoring') or {},
                cfg.get('matching') or {},
            )
    except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Failed to load config from {path}: {e}. Using defaults.")
    return MatcherConfig()


class ResolutionEngine:
    """
    Cascade matching engine for additive name resolution.

    Exact and alias hits short-circuit scoring. Otherwise every catalog
    record is scored and the best one is accepted when its final score
    reaches the match threshold (0.244 by default).

    The engine only reads the catalog, so ``resolve`` may be called from
    several threads at once.

    Thresholds: constructor override > YAML config > hardcoded default.
    """

    def __init__(self,
                 catalog: CatalogStore,
                 normalizer: Optional[TextNormalizer] = None,
                 alias_tables: Optional[AliasTables] = None,
                 exact_matcher: Optional[ExactMatcher] = None,
                 scorer: Optional[SimilarityScorer] = None,
                 config: Optional[MatcherConfig] = None,
                 config_path: Optional[Path] = None,
                 match_threshold: Optional[float] = None,
                 max_workers: Optional[int] = None):
        """
        Initialize the resolution engine.

        Args:
            catalog: Loaded catalog (may be empty)
            normalizer: TextNormalizer instance (creates new if None)
            alias_tables: Flavor/color tables (built-in tables if None)
            exact_matcher: ExactMatcher instance (creates new if None)
            scorer: SimilarityScorer instance (creates new if None)
            config: Full matcher config (skips YAML loading)
            config_path: Path to YAML config (default: config/matching_config.yaml)
            match_threshold: Override acceptance threshold
            max_workers: Override batch worker count
        """
        cfg = config or _load_thresholds(config_path)
        if match_threshold is not None:
            cfg = replace(cfg, match_threshold=match_threshold)
        if max_workers is not None:
            cfg = replace(cfg, max_workers=max_workers)
        self.config = cfg

        self.catalog = catalog
        self.normalizer = normalizer or TextNormalizer()
        self.alias_tables = alias_tables or DEFAULT_ALIAS_TABLES
        self.exact_matcher = exact_matcher or ExactMatcher(self.normalizer, self.alias_tables)
        self.scorer = scorer or SimilarityScorer(self.normalizer, self.config)

    @property
    def match_threshold(self) -> float:
        return self.config.match_threshold

    def resolve(self, input_text: str) -> Optional[MatchResult]:
        """
        Resolve an additive name.

        Args:
            input_text: Free-text additive name

        Returns:
            MatchResult, or None when nothing clears the threshold
        """
        direct = self.resolve_direct(input_text)
        if direct is not None:
            logger.debug(f"Direct match for '{input_text}' -> '{direct.substance}'")
            return direct
        return self.search(input_text)

    def resolve_direct(self, input_text: str) -> Optional[MatchResult]:
        """Alias and exact catalog lookup only; never scores."""
        return self.exact_matcher.resolve_direct(input_text, self.catalog)

    def search(self, input_text: str) -> Optional[MatchResult]:
        """
        Resolve through alias tables and similarity scoring only.

        Exact names still win here through the exact-match bonus, but no
        dictionary shortcut into the catalog is taken.

        Args:
            input_text: Free-text additive name

        Returns:
            MatchResult, or None
        """
        cleaned = self.normalizer.clean_query(input_text)
        if not cleaned:
            return None

        flavor = self.exact_matcher.match_flavor(cleaned)
        if flavor is not None:
            logger.debug(f"Flavor mapping for '{cleaned}' -> '{flavor.substance}'")
            return flavor

        search_term = self._apply_color_mapping(cleaned)

        best = self.scorer.best(search_term, self.catalog)
        if best is None:
            logger.info(f"No matches found for '{input_text}'")
            return None

        return self.decide(cleaned, best.record, best.score)

    def decide(self, query: str, candidate: Optional[SubstanceRecord], score: float,
               threshold: Optional[float] = None) -> Optional[MatchResult]:
        """
        Accept or reject the best candidate.

        Args:
            query: Cleaned query, stored as ``original_query``
            candidate: Best-scoring record (None if there was none)
            score: Its final blended score
            threshold: Acceptance threshold (engine threshold if None)

        Returns:
            MatchResult if ``score >= threshold``, else None
        """
        threshold = self.config.match_threshold if threshold is None else threshold
        if candidate is None:
            return None

        if score < threshold:
            logger.info(
                f"Rejected low-quality match for '{query}': '{candidate.substance}' "
                f"(score: {score:.4f} < threshold: {threshold})"
            )
            return None

        confidence = self.confidence_level(score)
        logger.info(
            f"Found match: '{candidate.substance}' (score: {score:.4f}, confidence: {confidence.value})"
        )
        return MatchResult(
            original_query=query,
            substance=candidate.substance,
            other_names=candidate.other_names,
            technical_effect=candidate.technical_effect,
            method=MatchMethod.SCORED,
            score=score,
            confidence_level=confidence,
        )

    def confidence_level(self, score: float) -> ConfidenceLevel:
        return self.config.confidence_level(score)

    def resolve_many(self, input_texts: Sequence[str]) -> List[MatchResult]:
        """
        Resolve multiple additive names.

        Queries are independent; misses are omitted, so the output can be
        shorter than the input. Each result's ``original_query`` is the input
        string exactly as supplied, which lets callers zip results back to
        their inputs. Output order follows input order even when the batch
        runs on a thread pool (``max_workers`` > 1).

        Args:
            input_texts: Additive names

        Returns:
            MatchResult for each resolved name, in input order
        """
        logger.info(f"Looking up knowledge for {len(input_texts)} additives")

        if self.config.max_workers > 1 and len(input_texts) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                outcomes = list(executor.map(self.resolve, input_texts))
        else:
            outcomes = [self.resolve(text) for text in input_texts]

        results = []
        for text, outcome in zip(input_texts, outcomes):
            if outcome is None:
                logger.info(f"No knowledge found for '{text}'")
                continue
            results.append(outcome.with_query(text))

        logger.info(f"Retrieved knowledge for {len(results)}/{len(input_texts)} additives")
        return results

    def _apply_color_mapping(self, cleaned: str) -> str:
        """Rewrite certified-color shorthand to the canonical catalog name."""
        lowercased = cleaned.lower()
        mapped = self.alias_tables.color(lowercased)
        if mapped is not None:
            logger.debug(f"Mapped color '{cleaned}' -> '{mapped}'")
            return mapped

        if self.config.partial_color_matching:
            mapped = self.alias_tables.color_partial(lowercased)
            if mapped is not None:
                logger.debug(f"Partial color match '{cleaned}' -> '{mapped}'")
                return mapped

        return cleaned
