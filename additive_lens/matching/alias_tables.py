"""
Static alias tables checked before any scoring.

- Flavor map: generic flavor phrases are not in the embedded catalog, so
  they resolve to built-in knowledge directly.
- Color map: shorthand certified-color names ("red 40") are rewritten to
  their canonical catalog substance name ("FD&C RED NO. 40") before the
  catalog lookup.

Keys are lowercase exact phrases. Table order is the scan order for partial
color matching.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional


class FlavorKnowledge(NamedTuple):
    """Built-in knowledge for a flavor phrase."""
    substance: str
    other_names: str
    technical_effect: str


_NATURAL_EFFECT = (
    "Natural flavors are derived from plants, animals, or microorganisms and are used "
    "to enhance or add taste to food products. They must come from natural sources but "
    "can be processed or concentrated."
)
_ARTIFICIAL_EFFECT = (
    "Artificial flavors are chemically synthesized compounds that mimic natural flavors. "
    "They are used to enhance or add taste to food products and are often more consistent "
    "and cost-effective than natural alternatives."
)
_MIXED_EFFECT = (
    "A combination of natural flavors (derived from natural sources) and artificial "
    "flavors (chemically synthesized). This blend allows manufacturers to achieve desired "
    "taste profiles while balancing cost and consistency."
)

FLAVOR_MAPPINGS: Mapping[str, FlavorKnowledge] = MappingProxyType({
    "natural flavors": FlavorKnowledge(
        "Natural Flavors", "Natural Flavor, Flavoring", _NATURAL_EFFECT),
    "natural flavor": FlavorKnowledge(
        "Natural Flavor", "Natural Flavors, Flavoring", _NATURAL_EFFECT),
    "artificial flavors": FlavorKnowledge(
        "Artificial Flavors", "Artificial Flavor, Artificial Flavoring", _ARTIFICIAL_EFFECT),
    "artificial flavor": FlavorKnowledge(
        "Artificial Flavor", "Artificial Flavors, Artificial Flavoring", _ARTIFICIAL_EFFECT),
    "natural and artificial flavors": FlavorKnowledge(
        "Natural and Artificial Flavors",
        "Mixed Flavors, Natural & Artificial Flavoring", _MIXED_EFFECT),
    "natural and artificial flavor": FlavorKnowledge(
        "Natural and Artificial Flavor",
        "Mixed Flavor, Natural & Artificial Flavoring", _MIXED_EFFECT),
})

COLOR_MAPPINGS: Mapping[str, str] = MappingProxyType({
    # Blue
    "blue 1": "FD&C BLUE NO. 1",
    "blue 1 lake": "FD&C BLUE NO. 1, ALUMINUM LAKE",
    "blue 1 aluminum lake": "FD&C BLUE NO. 1, ALUMINUM LAKE",
    "blue 1 calcium lake": "FD&C BLUE NO. 1, CALCIUM LAKE",
    "blue 2": "FD&C BLUE NO. 2",
    "blue 2 lake": "FD&C BLUE NO. 2, CALCIUM LAKE",
    "blue 2 calcium lake": "FD&C BLUE NO. 2, CALCIUM LAKE",

    # Yellow
    "yellow 5": "FD&C YELLOW NO. 5",
    "yellow 5 lake": "FD&C YELLOW NO. 5, ALUMINUM LAKE",
    "yellow 5 aluminum lake": "FD&C YELLOW NO. 5, ALUMINUM LAKE",
    "yellow 5 calcium lake": "FD&C YELLOW NO. 5, CALCIUM LAKE",
    "yellow 6": "FD&C YELLOW NO. 6",
    "yellow 6 lake": "FD&C YELLOW NO. 6, ALUMINUM LAKE",
    "yellow 6 aluminum lake": "FD&C YELLOW NO. 6, ALUMINUM LAKE",
    "yellow 6 calcium lake": "FD&C YELLOW NO. 6, CALCIUM LAKE",

    # Red
    "red 3": "FD&C RED NO. 3",
    "red 40": "FD&C RED NO. 40",
    "red 40 lake": "FD&C RED NO. 40, ALUMINUM LAKE",
    "red 40 aluminum lake": "FD&C RED NO. 40, ALUMINUM LAKE",
    "red 40 calcium lake": "FD&C RED NO. 40, CALCIUM LAKE",

    # Green
    "green 3": "FD&C GREEN NO. 3",
    "green 3 lake": "FD&C GREEN NO. 3, ALUMINUM LAKE",
    "green 3 aluminum lake": "FD&C GREEN NO. 3, ALUMINUM LAKE",
    "green 3 calcium lake": "FD&C GREEN NO. 3, CALCIUM LAKE",

    # Common variations
    "fd&c blue 1": "FD&C BLUE NO. 1",
    "fd&c yellow 5": "FD&C YELLOW NO. 5",
    "fd&c red 40": "FD&C RED NO. 40",
})


@dataclass(frozen=True)
class AliasTables:
    """The flavor and color tables used by one resolver."""
    flavors: Mapping[str, FlavorKnowledge] = field(default_factory=lambda: FLAVOR_MAPPINGS)
    colors: Mapping[str, str] = field(default_factory=lambda: COLOR_MAPPINGS)

    def flavor(self, key: str) -> Optional[FlavorKnowledge]:
        """Exact flavor lookup on a lowercase key."""
        return self.flavors.get(key)

    def color(self, key: str) -> Optional[str]:
        """Exact color lookup on a lowercase key."""
        return self.colors.get(key)

    def color_partial(self, key: str) -> Optional[str]:
        """
        First color whose phrase contains ``key`` or is contained in it.

        Args:
            key: Non-empty lowercase query

        Returns:
            Canonical color name, or None
        """
        if not key:
            return None
        for pattern, canonical in self.colors.items():
            if pattern in key or key in pattern:
                return canonical
        return None


DEFAULT_ALIAS_TABLES = AliasTables()
