"""
OpenStreetMap tile feature module

Modular OSM processing with separate components for:
- Models: Raw data structures (OSMNode, OSMWay, OSMRelation)
- Parser: Provider response parsing
- Ring assembler: Joining way segments into rings
- Classifier: Tag -> feature kind rules
- Roads: Road merging
- Features: Point features, tree rows, standalone areas
- Topology: Relation resolution and way processing
- Clipper: Tile boundary clipping
- Coastline: Sea polygon reconstruction
- Vegetation: Procedural plant scattering
- Collector: Main orchestrator class
"""

from .models import OSMNode, OSMWay, OSMRelation, RelationMember
from .parser import OSMResponseParser, OSMResponseError
from .collector import OSMCollector, process_response

__all__ = [
    "OSMNode",
    "OSMWay",
    "OSMRelation",
    "RelationMember",
    "OSMResponseParser",
    "OSMResponseError",
    "OSMCollector",
    "process_response",
]
