"""
Geometry utilities for tile clipping and coordinate calculations

All coordinates are WGS84 degrees; latitude is treated as y and
longitude as x wherever planar math is needed.
"""

import math
from typing import List, Optional, Sequence, Tuple

from ..models import Bounds, Coordinate

# Clip order used by both clippers
CLIP_EDGES = ("N", "S", "E", "W")


def half_plane_contains(point: Coordinate, bounds: Bounds, edge: str) -> bool:
    """Check if a point is inside the half-plane defined by one tile edge"""
    if edge == "N":
        return point.lat <= bounds.north
    if edge == "S":
        return point.lat >= bounds.south
    if edge == "E":
        return point.lng <= bounds.east
    if edge == "W":
        return point.lng >= bounds.west
    raise ValueError(f"Unknown edge: {edge!r}")


def boundary_intersection(a: Coordinate, b: Coordinate, bounds: Bounds, edge: str) -> Coordinate:
    """
    Intersect segment a->b with the boundary line of a tile edge

    A segment parallel to the boundary yields the boundary value paired
    with a's other coordinate.
    """
    x1, y1 = a.lng, a.lat
    x2, y2 = b.lng, b.lat

    if edge in ("N", "S"):
        boundary_y = bounds.north if edge == "N" else bounds.south
        if y2 == y1:
            x = x1
        else:
            x = x1 + (x2 - x1) * (boundary_y - y1) / (y2 - y1)
        return Coordinate(lat=boundary_y, lng=x)

    if edge in ("E", "W"):
        boundary_x = bounds.east if edge == "E" else bounds.west
        if x2 == x1:
            y = y1
        else:
            y = y1 + (y2 - y1) * (boundary_x - x1) / (x2 - x1)
        return Coordinate(lat=y, lng=boundary_x)

    raise ValueError(f"Unknown edge: {edge!r}")


def point_in_polygon(point: Coordinate, ring: Sequence[Coordinate]) -> bool:
    """Even-odd crossing-number test; rings shorter than 3 contain nothing"""
    n = len(ring)
    if n < 3:
        return False

    x, y = point.lng, point.lat
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i].lng, ring[i].lat
        xj, yj = ring[j].lng, ring[j].lat
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def point_in_polygon_with_holes(
    point: Coordinate,
    ring: Sequence[Coordinate],
    holes: Optional[Sequence[Sequence[Coordinate]]] = None
) -> bool:
    """Inside the outer ring and outside every hole"""
    if not point_in_polygon(point, ring):
        return False
    return not any(point_in_polygon(point, hole) for hole in (holes or []))


def is_closed_chain(chain: Sequence[Coordinate]) -> bool:
    """First equals last and the chain has more than 2 points"""
    return len(chain) > 2 and chain[0] == chain[-1]


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius_m: float = 6371000.0
) -> float:
    """Calculate great-circle distance between two points in meters"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return radius_m * c


def interpolate(a: Coordinate, b: Coordinate, t: float) -> Coordinate:
    """Linear interpolation between two coordinates (t in [0, 1])"""
    return Coordinate(lat=a.lat + (b.lat - a.lat) * t, lng=a.lng + (b.lng - a.lng) * t)


def bounding_box(coords: Sequence[Coordinate]) -> Tuple[float, float, float, float]:
    """Return (south, north, west, east) of a coordinate list"""
    lats = [c.lat for c in coords]
    lngs = [c.lng for c in coords]
    return min(lats), max(lats), min(lngs), max(lngs)


def ring_area_m2(ring: Sequence[Coordinate], ref_lat: float, radius_m: float = 6371000.0) -> float:
    """
    Approximate ring area in square meters

    Equirectangular projection at ref_lat followed by the shoelace formula.
    """
    if len(ring) < 3:
        return 0.0

    m_per_deg_lat = math.radians(1) * radius_m
    m_per_deg_lon = m_per_deg_lat * math.cos(math.radians(ref_lat))

    projected: List[Tuple[float, float]] = [(c.lng * m_per_deg_lon, c.lat * m_per_deg_lat) for c in ring]
    n = len(projected)
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += projected[i][0] * projected[j][1]
        area -= projected[j][0] * projected[i][1]

    return abs(area) / 2.0
