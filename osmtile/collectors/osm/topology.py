"""
Topology builder

Turns indexed OSM elements into unclipped features:
- Tag inheritance from route/site relations onto member ways
- Multipolygon relation resolution via ring assembly
- Standalone way processing (roads, tree rows, coastlines, areas)
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set
from loguru import logger

from ...config import PipelineConfig, get_config
from ...models import Coordinate, Feature, FeatureType
from .classifier import FeatureClassifier
from .features import FeatureProcessor
from .models import OSMRelation, OSMWay, ParsedResponse, RelationMember
from .ring_assembler import RingAssembler
from .roads import RoadProcessor, is_road


@dataclass
class TopologyResult:
    """Unclipped features of one response, in output order"""
    relation_features: List[Feature] = field(default_factory=list)
    road_features: List[Feature] = field(default_factory=list)
    coastline_features: List[Feature] = field(default_factory=list)
    standalone_features: List[Feature] = field(default_factory=list)
    consumed_way_ids: Set[int] = field(default_factory=set)

    @property
    def features(self) -> List[Feature]:
        return (
            self.relation_features
            + self.road_features
            + self.coastline_features
            + self.standalone_features
        )


class TopologyBuilder:
    """
    Builds raw features from a parsed provider response

    All indexes and the consumed-way set live in the TopologyResult of a
    single build() call; nothing is shared between calls.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_config()
        self.classifier = FeatureClassifier()
        self.assembler = RingAssembler()
        self.road_processor = RoadProcessor(self.config, self.assembler)
        self.feature_processor = FeatureProcessor(self.config, self.classifier)

    def build(self, parsed: ParsedResponse) -> TopologyResult:
        """
        Run inheritance, relation resolution and standalone way processing

        Args:
            parsed: Output of OSMResponseParser.parse_elements()

        Returns:
            TopologyResult with features grouped by origin
        """
        result = TopologyResult()

        point_features = self.feature_processor.parse_point_features(parsed.nodes)

        self.inherit_relation_tags(parsed)

        for relation in parsed.relations:
            result.relation_features.extend(self.resolve_relation(relation, parsed, result.consumed_way_ids))

        self._process_standalone_ways(parsed, result)
        result.standalone_features[:0] = point_features

        logger.debug(
            f"Topology: {len(result.relation_features)} relation features, "
            f"{len(result.road_features)} roads, {len(result.coastline_features)} coastlines, "
            f"{len(result.standalone_features)} standalone features, "
            f"{len(result.consumed_way_ids)} ways consumed by relations"
        )
        return result

    # ------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------

    def inherit_relation_tags(self, parsed: ParsedResponse) -> None:
        """Copy whitelisted route/site attributes onto member ways (absent keys only)"""
        topology = self.config.topology
        for relation in parsed.relations:
            if not self._inherits_tags(relation):
                continue
            inherited = {key: relation.tags[key] for key in topology.inherited_tags if key in relation.tags}
            if not inherited:
                continue
            for member in relation.members:
                way = parsed.ways.get(member.ref) if member.type == "way" else None
                if way is None:
                    continue
                for key, value in inherited.items():
                    way.tags.setdefault(key, value)

    def _inherits_tags(self, relation: OSMRelation) -> bool:
        kind = relation.kind
        if kind not in self.config.topology.inheriting_relation_types:
            return False
        if kind == "site":
            return "historic" in relation.tags or "heritage" in relation.tags
        return True

    def resolve_relation(
        self,
        relation: OSMRelation,
        parsed: ParsedResponse,
        consumed: Set[int]
    ) -> List[Feature]:
        """
        Build area features from a relation's outer/inner members

        Every inner ring is attached to every outer ring. Outer ways are
        marked consumed unless they carry highway or barrier tags.
        """
        if relation.kind in self.config.topology.skipped_relation_types:
            return []

        feature_type = self.classifier.classify(relation.tags)
        if feature_type is None:
            logger.debug(f"Skipping relation {relation.id}: no matching classification")
            return []

        logger.debug(
            f"Relation {relation.id} classified as {feature_type.value} "
            f"(rule '{self.classifier.matching_rule(relation.tags)}')"
        )

        outer_members = relation.way_members("outer", "")
        inner_members = relation.way_members("inner")

        outer_chains = []
        for member in outer_members:
            chain = self._member_geometry(relation, member, parsed)
            if chain is None:
                continue
            outer_chains.append(chain)
            way = parsed.ways.get(member.ref)
            if way is not None and not ("highway" in way.tags or "barrier" in way.tags):
                consumed.add(way.id)

        inner_chains = [
            chain
            for chain in (self._member_geometry(relation, m, parsed) for m in inner_members)
            if chain is not None
        ]

        if not outer_chains:
            logger.debug(f"Skipping relation {relation.id}: no usable outer ring")
            return []

        outer_rings = self.assembler.assemble(outer_chains)
        inner_rings = self.assembler.assemble(inner_chains)
        holes = inner_rings or None

        features = []
        for index, ring in enumerate(outer_rings):
            feature_id = f"rel_{relation.id}" if len(outer_rings) == 1 else f"rel_{relation.id}_{index}"
            features.append(Feature(
                id=feature_id,
                type=feature_type,
                geometry=ring,
                holes=holes,
                tags=dict(relation.tags)
            ))
        return features

    @staticmethod
    def _member_geometry(
        relation: OSMRelation,
        member: RelationMember,
        parsed: ParsedResponse
    ) -> Optional[List[Coordinate]]:
        way = parsed.ways.get(member.ref)
        if way is not None:
            return list(way.nodes)
        if member.geometry and len(member.geometry) >= 2:
            return list(member.geometry)
        logger.warning(f"Relation {relation.id} references way {member.ref} which is not in the response")
        return None

    # ------------------------------------------------------------
    # Standalone ways
    # ------------------------------------------------------------

    def _process_standalone_ways(self, parsed: ParsedResponse, result: TopologyResult) -> None:
        road_ways: List[OSMWay] = []
        coastline_ways: List[OSMWay] = []

        for way_id, way in parsed.ways.items():
            if way_id in result.consumed_way_ids:
                continue
            tags = way.tags

            if is_road(tags):
                road_ways.append(way)
            elif tags.get("natural") == "tree_row":
                result.standalone_features.extend(self.feature_processor.interpolate_tree_row(way))
            elif tags.get("natural") == "coastline":
                coastline_ways.append(way)
            else:
                feature = self.feature_processor.process_way(way)
                if feature is not None:
                    result.standalone_features.append(feature)

        result.road_features = self.road_processor.merge_roads(road_ways)
        result.coastline_features = self.join_coastlines(coastline_ways)

    def join_coastlines(self, ways: List[OSMWay]) -> List[Feature]:
        """Join all coastline ways into continuous coastline chains"""
        if not ways:
            return []
        coastlines = []
        for group in self.assembler.assemble_groups([way.nodes for way in ways]):
            first = ways[group.members[0]]
            coastlines.append(Feature(
                id=f"coastline_{first.id}",
                type=FeatureType.COASTLINE,
                geometry=group.coords,
                tags=dict(first.tags)
            ))
        logger.debug(f"Joined {len(ways)} coastline ways into {len(coastlines)} chains")
        return coastlines
