"""
Feature parsing for point features, tree rows and standalone area/line ways

Handles parsing of non-road, non-relation OSM elements
"""

import math
from typing import Dict, List, Optional
from loguru import logger

from ...config import PipelineConfig, get_config
from ...models import Coordinate, Feature, FeatureType
from ...analysis.geometry_utils import haversine_distance, interpolate
from .classifier import FeatureClassifier
from .models import OSMNode, OSMWay

STREET_FURNITURE_HIGHWAY = frozenset({"street_lamp", "traffic_signals", "stop", "give_way"})
STREET_FURNITURE_AMENITY = frozenset({"bench", "waste_basket"})

# waterway=* values that describe an area when the way is closed
CLOSED_WATERWAYS = frozenset({"riverbank", "dock", "boatyard", "dam"})

# Keys that make a closed way a filled polygon
AREA_KEYS = frozenset({
    "building",
    "landuse",
    "natural",
    "leisure",
    "amenity",
    "aeroway",
    "tourism",
    "man_made",
    "military",
    "historic",
    "place",
    "wetland",
    "shop",
    "office",
    "craft",
    "public_transport",
    "area:highway",
})

# Tags that imply an area even when the way is not closed
AUTO_CLOSE_NATURAL = frozenset({"beach", "sand", "rock", "bare_rock", "scrub", "wetland", "wood"})
AUTO_CLOSE_LEISURE = frozenset({"park", "garden"})

LINEAR_BLOCKERS = ("highway", "railway", "barrier")


class FeatureProcessor:
    """Processes nodes and standalone ways into unclipped features"""

    def __init__(self, config: Optional[PipelineConfig] = None, classifier: Optional[FeatureClassifier] = None):
        self.config = config or get_config()
        self.classifier = classifier or FeatureClassifier()

    # ------------------------------------------------------------
    # Points
    # ------------------------------------------------------------

    @staticmethod
    def point_type(tags: Dict[str, str]) -> Optional[FeatureType]:
        """Point feature kind for a tagged node, if any"""
        if (
            tags.get("highway") in STREET_FURNITURE_HIGHWAY
            or tags.get("barrier") == "bollard"
            or tags.get("amenity") in STREET_FURNITURE_AMENITY
            or "traffic_sign" in tags
        ):
            return FeatureType.STREET_FURNITURE
        if tags.get("natural") == "tree":
            return FeatureType.VEGETATION
        return None

    def parse_point_features(self, nodes: Dict[int, OSMNode]) -> List[Feature]:
        """Parse street furniture and isolated trees from nodes"""
        points = []
        for node_id, node in nodes.items():
            if not node.tags:
                continue
            feature_type = self.point_type(node.tags)
            if feature_type is None:
                continue
            points.append(Feature(
                id=str(node_id),
                type=feature_type,
                geometry=[node.to_coordinate()],
                tags=dict(node.tags)
            ))
        return points

    # ------------------------------------------------------------
    # Tree rows
    # ------------------------------------------------------------

    def interpolate_tree_row(self, way: OSMWay) -> List[Feature]:
        """
        Place one tree every tree_row_spacing_m meters along a tree row

        Each segment is divided into floor(length / spacing) equal steps
        (at least one), endpoints included. Vertices shared by consecutive
        segments produce a single tree.
        """
        spacing = self.config.topology.tree_row_spacing_m
        radius = self.config.earth_radius_m
        positions: List[Coordinate] = []

        for i, (a, b) in enumerate(zip(way.nodes, way.nodes[1:])):
            distance = haversine_distance(a.lat, a.lng, b.lat, b.lng, radius_m=radius)
            steps = max(1, int(math.floor(distance / spacing)))
            first_step = 0 if i == 0 else 1
            for k in range(first_step, steps + 1):
                positions.append(interpolate(a, b, k / steps))

        tags = dict(way.tags)
        return [
            Feature(
                id=f"{way.id}_tree_{index}",
                type=FeatureType.VEGETATION,
                geometry=[position],
                tags=tags
            )
            for index, position in enumerate(positions)
        ]

    # ------------------------------------------------------------
    # Standalone ways
    # ------------------------------------------------------------

    @staticmethod
    def is_area_like(way: OSMWay) -> bool:
        """Decide whether a way describes a filled polygon"""
        tags = way.tags
        explicit = tags.get("area")
        if explicit == "yes":
            return True
        if explicit == "no":
            return False

        if not way.is_closed:
            return False
        if any(key in tags for key in LINEAR_BLOCKERS):
            return False
        if tags.get("waterway") in CLOSED_WATERWAYS:
            return True
        return any(key in tags for key in AREA_KEYS)

    @staticmethod
    def implies_area(tags: Dict[str, str]) -> bool:
        """Tags that describe an area strongly enough to auto-close the way"""
        if tags.get("area") == "no":
            return False
        if "highway" in tags or "barrier" in tags:
            return False
        return (
            tags.get("natural") in AUTO_CLOSE_NATURAL
            or tags.get("leisure") in AUTO_CLOSE_LEISURE
            or "landuse" in tags
        )

    def process_way(self, way: OSMWay) -> Optional[Feature]:
        """
        Turn a standalone (non-road, non-coastline) way into a feature

        Returns:
            Feature, or None if the way is dropped
        """
        feature_type = self.classifier.classify(way.tags)
        if feature_type is None:
            logger.debug(f"Dropping way {way.id}: no matching classification")
            return None

        geometry = list(way.nodes)
        area_like = self.is_area_like(way)
        if not area_like and self.implies_area(way.tags):
            if not way.is_closed:
                geometry.append(geometry[0])
            area_like = True

        linear_waterway = feature_type == FeatureType.WATER and "waterway" in way.tags
        if not (area_like or linear_waterway or feature_type == FeatureType.BARRIER):
            logger.debug(f"Dropping way {way.id}: {feature_type.value} way is not area-like")
            return None

        return Feature(
            id=str(way.id),
            type=feature_type,
            geometry=geometry,
            tags=dict(way.tags)
        )
