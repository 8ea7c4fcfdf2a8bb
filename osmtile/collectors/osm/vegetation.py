"""
Procedural vegetation

Scatters synthetic plant points inside wood, forest, scrub and wetland
polygons so that mesh generation can populate them with trees or shrubs.
"""

import math
from typing import List, Optional

import numpy as np
from loguru import logger

from ...config import PipelineConfig, get_config
from ...models import Coordinate, Feature, FeatureType, LINE_TYPES
from ...analysis.geometry_utils import bounding_box, point_in_polygon_with_holes, ring_area_m2

# Plant tag written onto generated points, by subtype
PLANT_BY_SUBTYPE = {
    "forest": "tree",
    "wood": "tree",
    "scrub": "shrub",
    "wetland": "wetland",
}


def vegetation_subtype(feature: Feature) -> Optional[str]:
    """Spacing class of a polygon feature, or None if it gets no vegetation"""
    if feature.type in LINE_TYPES or len(feature.geometry) <= 2:
        return None
    tags = feature.tags
    if tags.get("landuse") == "forest":
        return "forest"
    if tags.get("natural") == "wood":
        return "wood"
    if tags.get("natural") == "scrub":
        return "scrub"
    if tags.get("natural") == "wetland" or tags.get("landuse") == "wetland" or "wetland" in tags:
        return "wetland"
    return None


class VegetationSampler:
    """
    Rejection sampler for vegetation points

    The random generator is injected so callers can make output
    reproducible by seeding it.
    """

    def __init__(self, rng: np.random.Generator, config: Optional[PipelineConfig] = None):
        self.rng = rng
        self.config = config or get_config()

    def target_count(self, feature: Feature, subtype: str) -> int:
        """min(max_points, floor(area / spacing^2)) for one polygon"""
        south, north, _west, _east = bounding_box(feature.geometry)
        ref_lat = (south + north) / 2
        radius = self.config.earth_radius_m

        area = ring_area_m2(feature.geometry, ref_lat, radius_m=radius)
        for hole in feature.holes or []:
            area -= ring_area_m2(hole, ref_lat, radius_m=radius)
        area = max(area, 0.0)

        spacing = self.config.vegetation.spacing_m[subtype]
        return min(self.config.vegetation.max_points_per_polygon, int(math.floor(area / spacing ** 2)))

    def sample(self, feature: Feature) -> List[Feature]:
        """Generate vegetation points for one polygon feature"""
        subtype = vegetation_subtype(feature)
        if subtype is None:
            return []

        target = self.target_count(feature, subtype)
        if target <= 0:
            return []

        south, north, west, east = bounding_box(feature.geometry)
        max_attempts = target * self.config.vegetation.max_attempts_factor
        tags = {
            "natural": PLANT_BY_SUBTYPE[subtype],
            "generator": "procedural",
            "parent": feature.id,
        }

        points: List[Feature] = []
        attempts = 0
        while len(points) < target and attempts < max_attempts:
            batch = min(target - len(points), max_attempts - attempts)
            lats = self.rng.uniform(south, north, size=batch)
            lngs = self.rng.uniform(west, east, size=batch)
            attempts += batch

            for lat, lng in zip(lats, lngs):
                candidate = Coordinate(lat=float(lat), lng=float(lng))
                if not point_in_polygon_with_holes(candidate, feature.geometry, feature.holes):
                    continue
                points.append(Feature(
                    id=f"{feature.id}_veg_{len(points)}",
                    type=FeatureType.VEGETATION,
                    geometry=[candidate],
                    tags=dict(tags)
                ))

        if len(points) < target:
            logger.debug(f"Vegetation for {feature.id}: placed {len(points)}/{target} after {attempts} draws")
        return points

    def sample_all(self, features: List[Feature]) -> List[Feature]:
        """Generate vegetation points for every qualifying polygon"""
        generated = []
        for feature in features:
            generated.extend(self.sample(feature))
        logger.debug(f"Generated {len(generated)} procedural vegetation points")
        return generated
