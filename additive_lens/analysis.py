"""
Ingredient-list analysis.

Runs the full knowledge lookup for one ingredient list:

  1. Split the list into ingredients and direct-resolve each one
     (basic ingredients such as sugar or water are skipped)
  2. Add externally proposed additive names, splitting composites like
     "COLORS (RED 40, YELLOW 5)" into their parts
  3. Merge both sets as unique uppercase names, sorted
  4. Resolve each name (direct lookup, then similarity scoring)
  5. Format the knowledge for display and attach regulation codes and links
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from additive_lens.matching.match_result import MatchResult
from additive_lens.matching.resolution_engine import ResolutionEngine
from additive_lens.normalization.formatting import (
    format_chemical_name,
    format_other_names,
    format_technical_effect,
)
from additive_lens.normalization.ingredient_parser import (
    is_basic_ingredient,
    parse_additive_with_parentheses,
    parse_ingredients_by_delimiters,
)
from additive_lens.regulation.code_resolver import RegulationCodeResolver, RegulationLink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdditiveFinding:
    """
    Display-ready knowledge for one additive.

    Attributes:
        query: Uppercase additive name that was looked up
        match: Raw resolution result
        display_name: Formatted substance name
        technical_effect: Formatted effect list
        other_names: Formatted alternate names (substance itself removed)
        regulation_codes: CFR codes for the substance
        regulation_links: eCFR links for the valid codes
    """
    query: str
    match: MatchResult
    display_name: str
    technical_effect: str
    other_names: str
    regulation_codes: Tuple[str, ...] = ()
    regulation_links: Tuple[RegulationLink, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "substance": self.display_name,
            "technical_effect": self.technical_effect,
            "other_names": self.other_names,
            "method": self.match.method.value,
            "score": self.match.score,
            "confidence_level": self.match.confidence_level.value,
            "regulation_codes": "|".join(self.regulation_codes),
            "regulation_urls": "|".join(link.url for link in self.regulation_links),
        }


@dataclass
class AnalysisReport:
    """Outcome of analyzing one ingredient list."""
    ingredient_text: str
    catalog_ready: bool
    parsed_ingredients: List[str] = field(default_factory=list)
    skipped_basic: List[str] = field(default_factory=list)
    direct_hits: List[str] = field(default_factory=list)
    additives: List[str] = field(default_factory=list)
    findings: List[AdditiveFinding] = field(default_factory=list)

    @property
    def unresolved(self) -> List[str]:
        """Additive names without knowledge, in lookup order."""
        found = {finding.query for finding in self.findings}
        return [name for name in self.additives if name not in found]

    def to_records(self) -> List[Dict[str, Any]]:
        return [finding.to_dict() for finding in self.findings]


class AdditiveAnalyzer:
    """
    Identifies additives in an ingredient list and looks up their knowledge.
    """

    def __init__(self, engine: ResolutionEngine,
                 regulation: Optional[RegulationCodeResolver] = None):
        """
        Args:
            engine: Resolution engine over the loaded catalog
            regulation: Regulation code resolver (codes are omitted if None)
        """
        self.engine = engine
        self.regulation = regulation

    @property
    def is_ready(self) -> bool:
        return self.engine.catalog.is_ready()

    def analyze(self, ingredient_text: str,
                candidates: Optional[Iterable[str]] = None) -> AnalysisReport:
        """
        Analyze an ingredient list.

        Args:
            ingredient_text: Ingredient list as printed on the label
            candidates: Additive names proposed by another identifier, if any

        Returns:
            AnalysisReport; empty when the catalog is not ready
        """
        report = AnalysisReport(ingredient_text=ingredient_text, catalog_ready=self.is_ready)
        if not report.catalog_ready:
            logger.warning("Catalog not ready; skipping additive analysis")
            return report

        report.parsed_ingredients = parse_ingredients_by_delimiters(ingredient_text)
        logger.info(f"Parsed {len(report.parsed_ingredients)} ingredients")

        for ingredient in report.parsed_ingredients:
            if is_basic_ingredient(ingredient):
                report.skipped_basic.append(ingredient)
                continue
            direct = self.engine.resolve_direct(ingredient)
            if direct is not None:
                report.direct_hits.append(direct.original_query)
                logger.debug(f"Direct match found: '{ingredient}' -> '{direct.substance}'")

        proposed = self.expand_candidates(candidates or [])

        report.additives = sorted({name.upper() for name in report.direct_hits + proposed})
        logger.info(
            f"{len(report.direct_hits)} from direct lookup + {len(proposed)} proposed = "
            f"{len(report.additives)} unique additives"
        )

        for name in report.additives:
            finding = self.lookup(name)
            if finding is not None:
                report.findings.append(finding)

        logger.info(f"Found knowledge for {len(report.findings)}/{len(report.additives)} additives")
        return report

    def expand_candidates(self, candidates: Iterable[str]) -> List[str]:
        """
        Split composite candidates and drop basic ingredients.

        Args:
            candidates: Proposed additive names

        Returns:
            Flat list of additive names, in order
        """
        expanded = []
        for candidate in candidates:
            if is_basic_ingredient(candidate):
                logger.debug(f"Skipping basic ingredient: '{candidate}'")
                continue
            if '(' in candidate and ')' in candidate:
                parts = parse_additive_with_parentheses(candidate)
                expanded.extend(part for part in parts if not is_basic_ingredient(part))
            else:
                expanded.append(candidate)
        return expanded

    def lookup(self, name: str) -> Optional[AdditiveFinding]:
        """
        Resolve one additive name and format its knowledge.

        Args:
            name: Additive name

        Returns:
            AdditiveFinding, or None when nothing matched
        """
        match = self.engine.resolve(name)
        if match is None:
            logger.info(f"No knowledge found for '{name}'")
            return None
        return self.build_finding(name, match)

    def lookup_many(self, names: Sequence[str]) -> List[AdditiveFinding]:
        """
        Resolve a batch of additive names with ``ResolutionEngine.resolve_many``.

        Unresolved names are omitted; each finding's ``query`` is the name as
        supplied.
        """
        return [self.build_finding(match.original_query, match)
                for match in self.engine.resolve_many(names)]

    def build_finding(self, name: str, match: MatchResult) -> AdditiveFinding:
        """Format a resolution result and attach regulation codes."""
        display_name = format_chemical_name(match.substance)
        codes: List[str] = []
        links: List[RegulationLink] = []
        if self.regulation is not None:
            codes = self.regulation.codes_for(display_name)
            links = self.regulation.regulation_urls(codes)

        return AdditiveFinding(
            query=name,
            match=match.with_query(name),
            display_name=display_name,
            technical_effect=format_technical_effect(match.technical_effect),
            other_names=format_other_names(match.other_names, match.substance),
            regulation_codes=tuple(codes),
            regulation_links=tuple(links),
        )
