"""
Coastline water reconstruction

Builds closed sea polygons from clipped coastline chains. OSM coastlines
are drawn with land on the left and water on the right, so a point offset
to the right of the chain tells which side of any candidate ring is sea.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple
from loguru import logger

from ...config import PipelineConfig, get_config
from ...models import Bounds, Coordinate, Feature, FeatureType
from ...analysis.geometry_utils import is_closed_chain, point_in_polygon

WATER_TAGS = {"natural": "water", "water": "sea", "source": "coastline"}

# Edge rotation and the corner crossed when leaving each edge
CLOCKWISE: Dict[str, Tuple[str, Tuple[str, str]]] = {
    "N": ("E", ("N", "E")),
    "E": ("S", ("S", "E")),
    "S": ("W", ("S", "W")),
    "W": ("N", ("N", "W")),
}
COUNTER_CLOCKWISE: Dict[str, Tuple[str, Tuple[str, str]]] = {
    "N": ("W", ("N", "W")),
    "W": ("S", ("S", "W")),
    "S": ("E", ("S", "E")),
    "E": ("N", ("N", "E")),
}


class CoastlineReconstructor:
    """Turns coastline chains into water polygons for one tile"""

    def __init__(self, bounds: Bounds, config: Optional[PipelineConfig] = None):
        self.bounds = bounds
        self.config = config or get_config()

    @property
    def boundary_epsilon(self) -> float:
        return self.config.coastline.boundary_epsilon_ratio * self.bounds.max_span

    @property
    def seaward_offset(self) -> float:
        return self.config.coastline.seaward_offset_ratio * self.bounds.min_span

    def reconstruct(self, features: List[Feature]) -> List[Feature]:
        """
        Build water features for every coastline in a clipped feature list

        Returns:
            New water features only; the input list is left untouched
        """
        water = []
        for feature in features:
            if feature.type != FeatureType.COASTLINE:
                continue
            reconstructed = self.reconstruct_one(feature)
            if reconstructed is not None:
                water.append(reconstructed)
        logger.debug(f"Reconstructed {len(water)} water polygons from coastlines")
        return water

    def reconstruct_one(self, coastline: Feature) -> Optional[Feature]:
        chain = coastline.geometry
        if len(chain) < 2:
            return None

        sample = self.seaward_sample_point(chain)
        if sample is None:
            logger.debug(f"Dropping coastline {coastline.id}: degenerate geometry")
            return None

        if is_closed_chain(chain):
            return self._closed_ring_water(coastline, sample)
        return self._open_chain_water(coastline, sample)

    # ------------------------------------------------------------
    # Sidedness
    # ------------------------------------------------------------

    def seaward_sample_point(self, chain: Sequence[Coordinate]) -> Optional[Coordinate]:
        """
        Point offset to the right of a segment near the chain's midpoint

        Zero-length segments are skipped by searching outward from the middle.
        """
        segment_count = len(chain) - 1
        middle = (segment_count - 1) // 2
        for distance in range(segment_count):
            for index in (middle + distance, middle - distance):
                if not 0 <= index < segment_count:
                    continue
                a, b = chain[index], chain[index + 1]
                dx = b.lng - a.lng
                dy = b.lat - a.lat
                length = math.hypot(dx, dy)
                if length == 0:
                    continue
                # Right-hand normal of (dx, dy) is (dy, -dx)
                offset = self.seaward_offset / length
                return Coordinate(
                    lat=(a.lat + b.lat) / 2 - dx * offset,
                    lng=(a.lng + b.lng) / 2 + dy * offset
                )
        return None

    def _water_feature(self, coastline: Feature, ring: List[Coordinate], holes=None) -> Feature:
        return Feature(
            id=f"{coastline.id}_water",
            type=FeatureType.WATER,
            geometry=ring,
            holes=holes,
            tags=dict(WATER_TAGS)
        )

    def _closed_ring_water(self, coastline: Feature, sample: Coordinate) -> Feature:
        ring = list(coastline.geometry)
        if point_in_polygon(sample, ring):
            # Lake-like ring: interior is water
            return self._water_feature(coastline, ring)
        # Island: the whole tile is sea except the ring
        return self._water_feature(coastline, self.bounds.rectangle(), holes=[ring])

    # ------------------------------------------------------------
    # Open chains
    # ------------------------------------------------------------

    def _open_chain_water(self, coastline: Feature, sample: Coordinate) -> Optional[Feature]:
        chain = list(coastline.geometry)
        start = self.boundary_anchor(chain[0], chain[1])
        end = self.boundary_anchor(chain[-1], chain[-2])
        if start is None or end is None:
            logger.debug(f"Dropping coastline {coastline.id}: no valid boundary crossing")
            return None

        start_anchor, start_edge = start
        end_anchor, end_edge = end

        for clockwise in (True, False):
            walk = self.boundary_walk(end_anchor, end_edge, start_anchor, start_edge, clockwise)
            ring = self._close_ring(chain + [end_anchor] + walk + [start_anchor, chain[0]])
            if ring is None:
                continue
            if point_in_polygon(sample, ring):
                return self._water_feature(coastline, ring)

        logger.debug(f"Dropping coastline {coastline.id}: no candidate ring contains the seaward point")
        return None

    @staticmethod
    def _close_ring(points: List[Coordinate]) -> Optional[List[Coordinate]]:
        ring: List[Coordinate] = []
        for point in points:
            if not ring or ring[-1] != point:
                ring.append(point)
        if ring[0] != ring[-1]:
            ring.append(ring[0])
        if len(ring) - 1 <= 2:
            return None
        return ring

    def nearest_edge(self, point: Coordinate) -> Tuple[str, float]:
        """Closest tile edge and the distance to it (degrees)"""
        distances = {
            "N": abs(self.bounds.north - point.lat),
            "S": abs(point.lat - self.bounds.south),
            "E": abs(self.bounds.east - point.lng),
            "W": abs(point.lng - self.bounds.west),
        }
        edge = min(distances, key=distances.get)
        return edge, distances[edge]

    def snap_to_edge(self, point: Coordinate, edge: str) -> Coordinate:
        """Perpendicular projection of a point onto one tile edge"""
        lat = min(max(point.lat, self.bounds.south), self.bounds.north)
        lng = min(max(point.lng, self.bounds.west), self.bounds.east)
        if edge == "N":
            lat = self.bounds.north
        elif edge == "S":
            lat = self.bounds.south
        elif edge == "E":
            lng = self.bounds.east
        else:
            lng = self.bounds.west
        return Coordinate(lat=lat, lng=lng)

    def boundary_anchor(self, endpoint: Coordinate, neighbour: Coordinate) -> Optional[Tuple[Coordinate, str]]:
        """
        Where a chain endpoint meets the tile boundary

        Endpoints within the boundary epsilon snap to the nearest edge.
        Others are extended along the ray neighbour->endpoint; the first
        edge hit decides which edge the endpoint is snapped onto.
        """
        edge, distance = self.nearest_edge(endpoint)
        if distance <= self.boundary_epsilon:
            return self.snap_to_edge(endpoint, edge), edge

        edge = self._ray_hit_edge(endpoint, neighbour)
        if edge is None:
            return None
        return self.snap_to_edge(endpoint, edge), edge

    def _ray_hit_edge(self, endpoint: Coordinate, neighbour: Coordinate) -> Optional[str]:
        dx = endpoint.lng - neighbour.lng
        dy = endpoint.lat - neighbour.lat

        hits = []
        if dy != 0:
            for edge, value in (("N", self.bounds.north), ("S", self.bounds.south)):
                t = (value - endpoint.lat) / dy
                if t > 0:
                    hits.append((t, edge))
        if dx != 0:
            for edge, value in (("E", self.bounds.east), ("W", self.bounds.west)):
                t = (value - endpoint.lng) / dx
                if t > 0:
                    hits.append((t, edge))

        if not hits:
            return None
        return min(hits)[1]

    def _edge_position(self, point: Coordinate, edge: str, clockwise: bool) -> float:
        # Distance travelled along the edge in the walking direction
        position = {
            "N": point.lng,
            "E": -point.lat,
            "S": -point.lng,
            "W": point.lat,
        }[edge]
        return position if clockwise else -position

    def boundary_walk(
        self,
        from_anchor: Coordinate,
        from_edge: str,
        to_anchor: Coordinate,
        to_edge: str,
        clockwise: bool
    ) -> List[Coordinate]:
        """
        Tile corners passed when walking the boundary between two anchors

        Stops on reaching the edge that holds to_anchor; two anchors on the
        same edge need no corners when the target lies ahead.
        """
        if from_edge == to_edge and (
            self._edge_position(to_anchor, to_edge, clockwise)
            >= self._edge_position(from_anchor, from_edge, clockwise)
        ):
            return []

        rotation = CLOCKWISE if clockwise else COUNTER_CLOCKWISE
        corners = []
        edge = from_edge
        for _ in range(self.config.coastline.max_boundary_transitions):
            edge, (vertical, horizontal) = rotation[edge]
            corners.append(self.bounds.corner(vertical, horizontal))
            if edge == to_edge:
                break
        return corners
