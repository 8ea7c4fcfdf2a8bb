"""
Pydantic models for clipped tile features
"""

from enum import Enum
from typing import List, Optional, Dict, Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from shapely.geometry import LineString, Point, Polygon, mapping


# ============================================================
# Geometry Types
# ============================================================

class Coordinate(BaseModel):
    """WGS84 position in degrees"""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    @property
    def key(self) -> Tuple[float, float]:
        """Exact-equality key used for endpoint matching"""
        return (self.lat, self.lng)


class Bounds(BaseModel):
    """Axis-aligned tile rectangle (antimeridian-safe by contract)"""
    model_config = ConfigDict(frozen=True)

    north: float
    south: float
    east: float
    west: float

    @model_validator(mode="after")
    def _check_extent(self) -> "Bounds":
        if not self.north > self.south:
            raise ValueError(f"north ({self.north}) must be greater than south ({self.south})")
        if not self.east > self.west:
            raise ValueError(f"east ({self.east}) must be greater than west ({self.west})")
        return self

    @property
    def lat_span(self) -> float:
        return self.north - self.south

    @property
    def lng_span(self) -> float:
        return self.east - self.west

    @property
    def min_span(self) -> float:
        return min(self.lat_span, self.lng_span)

    @property
    def max_span(self) -> float:
        return max(self.lat_span, self.lng_span)

    def contains(self, point: Coordinate) -> bool:
        """Inclusive bounding-box containment"""
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east

    def corner(self, vertical: str, horizontal: str) -> Coordinate:
        """Corner by edge names, e.g. corner("N", "E")"""
        lat = self.north if vertical == "N" else self.south
        lng = self.east if horizontal == "E" else self.west
        return Coordinate(lat=lat, lng=lng)

    def rectangle(self) -> List[Coordinate]:
        """Closed clockwise ring around the whole tile"""
        return [
            self.corner("N", "W"),
            self.corner("N", "E"),
            self.corner("S", "E"),
            self.corner("S", "W"),
            self.corner("N", "W"),
        ]


# ============================================================
# Features
# ============================================================

class FeatureType(str, Enum):
    """Kinds of features handed to the texture and mesh consumers"""
    BUILDING = "building"
    WATER = "water"
    COASTLINE = "coastline"
    BARRIER = "barrier"
    ROAD = "road"
    LANDUSE = "landuse"
    VEGETATION = "vegetation"
    STREET_FURNITURE = "street_furniture"


# Types whose geometry is always treated as a polyline
LINE_TYPES = frozenset({FeatureType.ROAD, FeatureType.BARRIER, FeatureType.COASTLINE})


class Feature(BaseModel):
    """
    A typed geographic feature

    Geometry is a closed ring for area types, an open chain for line
    types and a single coordinate for points. Features are immutable;
    transformations build new instances with model_copy().
    """
    model_config = ConfigDict(frozen=True)

    id: str
    type: FeatureType
    geometry: List[Coordinate]
    holes: Optional[List[List[Coordinate]]] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_point(self) -> bool:
        return len(self.geometry) == 1

    @property
    def is_closed(self) -> bool:
        return len(self.geometry) > 2 and self.geometry[0] == self.geometry[-1]

    def to_geojson(self) -> Dict[str, Any]:
        """Convert to a GeoJSON Feature dict ([lng, lat] order)"""
        coords = [(c.lng, c.lat) for c in self.geometry]
        if self.is_point:
            geometry = Point(coords[0])
        elif self.type in LINE_TYPES or not self.is_closed:
            geometry = LineString(coords)
        else:
            holes = [[(c.lng, c.lat) for c in hole] for hole in (self.holes or [])]
            geometry = Polygon(coords, holes)

        return {
            "type": "Feature",
            "id": self.id,
            "geometry": mapping(geometry),
            "properties": {
                "feature_type": self.type.value,
                **self.tags,
            },
        }
