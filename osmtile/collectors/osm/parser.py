"""
OSM response parser

Parses provider responses into indexed OSMNode, OSMWay and OSMRelation objects
"""

from typing import Dict, Any, List, Optional
from loguru import logger

from ...models import Coordinate
from .models import OSMNode, OSMWay, OSMRelation, RelationMember, ParsedResponse


class OSMResponseError(ValueError):
    """Raised when a provider response violates the element contract"""


class OSMResponseParser:
    """Parses Overpass-style responses"""

    @staticmethod
    def parse_elements(data: Dict[str, Any]) -> ParsedResponse:
        """
        Parse provider response into nodes, ways and relations

        Handles both node-reference ways ('out body') and inline geometry
        ('out geom'). Ways resolving to fewer than 2 coordinates are dropped.

        Args:
            data: Parsed JSON response with an 'elements' list

        Returns:
            ParsedResponse with nodes by id, ways by id (input order) and relations

        Raises:
            OSMResponseError: If an element is structurally invalid
        """
        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            raise OSMResponseError("Provider response must be a mapping with an 'elements' list")

        elements = data["elements"]
        nodes: Dict[int, OSMNode] = {}
        raw_ways: List[Dict[str, Any]] = []
        relations: List[OSMRelation] = []

        # Nodes first so ways can reference nodes listed after them
        for element in elements:
            element_type = OSMResponseParser._require(element, "type")
            OSMResponseParser._require(element, "id")
            if element_type == "node":
                nodes[element["id"]] = OSMNode(
                    id=element["id"],
                    lat=OSMResponseParser._require(element, "lat"),
                    lon=OSMResponseParser._longitude(element),
                    tags=dict(element.get("tags") or {})
                )
            elif element_type == "way":
                raw_ways.append(element)
            elif element_type == "relation":
                relations.append(OSMResponseParser._parse_relation(element))
            else:
                raise OSMResponseError(f"Unknown element type {element_type!r} (id {element['id']})")

        ways: Dict[int, OSMWay] = {}
        for element in raw_ways:
            coords = OSMResponseParser._way_coordinates(element, nodes)
            if len(coords) < 2:
                logger.debug(f"Dropping way {element['id']}: resolved to {len(coords)} coordinate(s)")
                continue
            ways[element["id"]] = OSMWay(
                id=element["id"],
                nodes=coords,
                tags=dict(element.get("tags") or {})
            )

        logger.debug(f"Parsed {len(nodes)} nodes, {len(ways)} ways, {len(relations)} relations")
        return ParsedResponse(nodes=nodes, ways=ways, relations=relations)

    @staticmethod
    def _require(element: Any, key: str) -> Any:
        if not isinstance(element, dict):
            raise OSMResponseError(f"Element must be a mapping, got {type(element).__name__}")
        if element.get(key) is None:
            raise OSMResponseError(f"Element {element.get('id', '?')} is missing required field '{key}'")
        return element[key]

    @staticmethod
    def _longitude(point: Dict[str, Any]) -> float:
        # Overpass uses 'lon', already-converted payloads use 'lng'
        lon = point.get("lon", point.get("lng"))
        if lon is None:
            raise OSMResponseError(f"Element {point.get('id', '?')} is missing required field 'lon'")
        return lon

    @staticmethod
    def _inline_geometry(points: Optional[List[Any]]) -> List[Coordinate]:
        coords = []
        for point in points or []:
            # Overpass emits null for nodes outside the query area
            if point is None:
                continue
            if isinstance(point, dict):
                coords.append(Coordinate(
                    lat=OSMResponseParser._require(point, "lat"),
                    lng=OSMResponseParser._longitude(point)
                ))
            elif isinstance(point, (list, tuple)) and len(point) >= 2:
                # [lon, lat] pairs
                coords.append(Coordinate(lat=point[1], lng=point[0]))
            else:
                raise OSMResponseError(f"Unsupported geometry point: {point!r}")
        return coords

    @staticmethod
    def _way_coordinates(element: Dict[str, Any], nodes: Dict[int, OSMNode]) -> List[Coordinate]:
        if element.get("geometry"):
            return OSMResponseParser._inline_geometry(element["geometry"])

        node_ids = element.get("nodes") or element.get("nodeIds") or []
        # Missing node references are skipped, not errors
        return [nodes[node_id].to_coordinate() for node_id in node_ids if node_id in nodes]

    @staticmethod
    def _parse_relation(element: Dict[str, Any]) -> OSMRelation:
        members = []
        for member in element.get("members") or []:
            if not isinstance(member, dict):
                raise OSMResponseError(f"Relation {element['id']} has a member that is not a mapping: {member!r}")
            if member.get("ref") is None or member.get("type") is None:
                raise OSMResponseError(f"Relation {element['id']} has a member without 'type'/'ref'")
            geometry = None
            if member.get("geometry"):
                geometry = OSMResponseParser._inline_geometry(member["geometry"])
            members.append(RelationMember(
                type=member["type"],
                ref=member["ref"],
                role=member.get("role") or "",
                geometry=geometry
            ))
        return OSMRelation(
            id=element["id"],
            members=members,
            tags=dict(element.get("tags") or {})
        )
