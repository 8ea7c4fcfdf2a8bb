"""
OSM data models

Data classes for the raw nodes, ways and relations of one provider response
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, field

from ...models import Coordinate


@dataclass
class OSMNode:
    """Represents an OSM node (point)"""
    id: int
    lat: float
    lon: float
    tags: Dict[str, str] = field(default_factory=dict)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lon)


@dataclass
class OSMWay:
    """
    Represents an OSM way (line or polygon)

    Tags are only mutated by relation tag inheritance, which fills
    absent keys; coordinates never change after parsing.
    """
    id: int
    nodes: List[Coordinate]
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return len(self.nodes) > 2 and self.nodes[0] == self.nodes[-1]


@dataclass
class RelationMember:
    """One member reference of a relation"""
    type: str
    ref: int
    role: str = ""
    # Inline member geometry (Overpass 'out geom')
    geometry: Optional[List[Coordinate]] = None


@dataclass
class OSMRelation:
    """Represents an OSM relation (multipolygon, route, site, ...)"""
    id: int
    members: List[RelationMember]
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> Optional[str]:
        return self.tags.get("type")

    def way_members(self, *roles: str) -> List[RelationMember]:
        """Way members whose role is one of roles"""
        return [m for m in self.members if m.type == "way" and (m.role or "") in roles]


@dataclass
class ParsedResponse:
    """Indexed contents of one provider response"""
    nodes: Dict[int, OSMNode]
    ways: Dict[int, OSMWay]
    relations: List[OSMRelation]
