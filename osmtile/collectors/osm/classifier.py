"""
Feature classifier

Maps a tag set to a single feature kind using an ordered rule table
"""

from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ...models import FeatureType

Tags = Mapping[str, str]
Rule = Tuple[str, Callable[[Tags], bool], FeatureType]

# historic=* values that describe a structure rather than an area
HISTORIC_BUILDINGS = frozenset({"castle", "fort", "monastery", "tower", "ruins", "monument"})

WATER_LANDUSE = frozenset({"reservoir", "basin"})

LANDUSE_KEYS = frozenset({
    "landuse",
    "natural",
    "leisure",
    "amenity",
    "aeroway",
    "tourism",
    "man_made",
    "public_transport",
    "power",
    "military",
    "place",
    "historic",
    "wetland",
    "surface",
    "material",
    "golf",
    "craft",
    "office",
    "shop",
})


def is_building(tags: Tags) -> bool:
    if tags.get("building", "no") != "no":
        return True
    return tags.get("historic") in HISTORIC_BUILDINGS


def is_coastline(tags: Tags) -> bool:
    return tags.get("natural") == "coastline"


def is_water(tags: Tags) -> bool:
    return (
        tags.get("natural") == "water"
        or "waterway" in tags
        or tags.get("landuse") in WATER_LANDUSE
    )


def is_barrier(tags: Tags) -> bool:
    return "barrier" in tags


def is_landuse(tags: Tags) -> bool:
    return any(key in tags for key in LANDUSE_KEYS)


class FeatureClassifier:
    """
    Deterministic, priority-ordered tag classifier

    Rules are evaluated top to bottom and the first match wins. Roads are
    not classified here; the topology builder detects them directly.
    """

    RULES: List[Rule] = [
        ("building", is_building, FeatureType.BUILDING),
        ("coastline", is_coastline, FeatureType.COASTLINE),
        ("water", is_water, FeatureType.WATER),
        ("barrier", is_barrier, FeatureType.BARRIER),
        ("landuse", is_landuse, FeatureType.LANDUSE),
    ]

    def __init__(self, rules: Optional[List[Rule]] = None):
        self.rules = list(rules) if rules is not None else list(self.RULES)

    def classify(self, tags: Optional[Dict[str, str]]) -> Optional[FeatureType]:
        """Return the first matching feature kind, or None to drop the element"""
        if not tags:
            return None
        for _name, predicate, feature_type in self.rules:
            if predicate(tags):
                return feature_type
        return None

    def matching_rule(self, tags: Optional[Dict[str, str]]) -> Optional[str]:
        """Name of the rule that decided classify(tags)"""
        if not tags:
            return None
        for name, predicate, _feature_type in self.rules:
            if predicate(tags):
                return name
        return None
