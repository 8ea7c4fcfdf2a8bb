"""
Viewport clipping

Clips raw features to the tile rectangle:
- Sutherland-Hodgman for polygons (outer ring and each hole)
- Multi-segment clipping for polylines
"""

from typing import List, Optional, Sequence
from loguru import logger

from ...models import Bounds, Coordinate, Feature, FeatureType, LINE_TYPES
from ...analysis.geometry_utils import (
    CLIP_EDGES,
    boundary_intersection,
    half_plane_contains,
    is_closed_chain,
)


class ViewportClipper:
    """Clips features against one tile's bounds"""

    def __init__(self, bounds: Bounds):
        self.bounds = bounds

    def clip_polygon(self, ring: Sequence[Coordinate]) -> List[Coordinate]:
        """
        Clip a ring against all four tile edges

        The closing duplicate is ignored while clipping and restored on
        the result. Rings reduced below 3 distinct vertices return [].
        """
        output = list(ring)
        if len(output) > 1 and output[0] == output[-1]:
            output = output[:-1]

        for edge in CLIP_EDGES:
            source = output
            output = []
            if not source:
                break

            previous = source[-1]
            for current in source:
                if half_plane_contains(current, self.bounds, edge):
                    if not half_plane_contains(previous, self.bounds, edge):
                        output.append(boundary_intersection(previous, current, self.bounds, edge))
                    output.append(current)
                elif half_plane_contains(previous, self.bounds, edge):
                    output.append(boundary_intersection(previous, current, self.bounds, edge))
                previous = current

        if len(output) < 3:
            return []
        return output + [output[0]]

    def clip_line(self, points: Sequence[Coordinate]) -> List[List[Coordinate]]:
        """
        Clip a polyline, splitting it wherever it leaves the tile

        Returns:
            Sub-segments with at least 2 points each
        """
        segments: List[List[Coordinate]] = [list(points)]

        for edge in CLIP_EDGES:
            next_segments: List[List[Coordinate]] = []
            for segment in segments:
                current: List[Coordinate] = []
                for i, point in enumerate(segment):
                    inside = half_plane_contains(point, self.bounds, edge)
                    if i == 0:
                        if inside:
                            current.append(point)
                        continue

                    previous = segment[i - 1]
                    previous_inside = half_plane_contains(previous, self.bounds, edge)
                    if inside and previous_inside:
                        current.append(point)
                    elif inside:
                        # Entering
                        current.append(boundary_intersection(previous, point, self.bounds, edge))
                        current.append(point)
                    elif previous_inside:
                        # Leaving
                        current.append(boundary_intersection(previous, point, self.bounds, edge))
                        next_segments.append(current)
                        current = []
                if current:
                    next_segments.append(current)
            segments = next_segments

        segments = [segment for segment in segments if len(segment) >= 2]

        # A closed ring starting inside the tile is cut at its seam vertex too;
        # rejoin the last piece onto the first so only real crossings split it
        if (
            len(segments) > 1
            and is_closed_chain(points)
            and self.bounds.contains(points[0])
            and segments[0][0] == points[0]
            and segments[-1][-1] == points[-1]
        ):
            segments = [segments[-1] + segments[0][1:]] + segments[1:-1]

        return segments

    @staticmethod
    def uses_line_clip(feature: Feature) -> bool:
        """Roads, barriers, coastlines and open waterways are clipped as lines"""
        if feature.type in LINE_TYPES:
            return True
        return (
            feature.type == FeatureType.WATER
            and "waterway" in feature.tags
            and not is_closed_chain(feature.geometry)
        )

    def clip_feature(self, feature: Feature) -> List[Feature]:
        """Clip one feature; returns zero or more replacement features"""
        if feature.is_point:
            return [feature] if self.bounds.contains(feature.geometry[0]) else []

        if self.uses_line_clip(feature):
            return [
                feature.model_copy(update={"id": f"{feature.id}_seg_{index}", "geometry": segment})
                for index, segment in enumerate(self.clip_line(feature.geometry))
            ]

        outer = self.clip_polygon(feature.geometry)
        if not outer:
            return []

        holes: Optional[List[List[Coordinate]]] = None
        if feature.holes:
            clipped_holes = [self.clip_polygon(hole) for hole in feature.holes]
            holes = [hole for hole in clipped_holes if hole] or None

        return [feature.model_copy(update={"geometry": outer, "holes": holes})]

    def clip_features(self, features: List[Feature]) -> List[Feature]:
        """Clip every feature, preserving input order"""
        clipped = []
        for feature in features:
            clipped.extend(self.clip_feature(feature))
        logger.debug(f"Clipped {len(features)} raw features into {len(clipped)} tile features")
        return clipped
