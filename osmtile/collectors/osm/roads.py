"""
Road-specific logic

Handles road detection and merging of contiguous road segments
"""

from typing import Dict, List, Optional, Tuple
from loguru import logger

from ...config import PipelineConfig, get_config
from ...models import Feature, FeatureType
from .models import OSMWay
from .ring_assembler import RingAssembler


def is_road(tags: Dict[str, str]) -> bool:
    """Roads are recognised from highway/bridge tags, not the classifier"""
    return "highway" in tags or tags.get("man_made") == "bridge"


class RoadProcessor:
    """Merges road ways that continue each other into single features"""

    def __init__(self, config: Optional[PipelineConfig] = None, assembler: Optional[RingAssembler] = None):
        self.config = config or get_config()
        self.assembler = assembler or RingAssembler()

    def signature(self, way: OSMWay) -> Tuple[str, ...]:
        """Ways only merge when every signature tag agrees"""
        return tuple(way.tags.get(key, "") for key in self.config.topology.road_signature_keys)

    def merge_roads(self, ways: List[OSMWay]) -> List[Feature]:
        """
        Group road ways by signature and join contiguous segments

        Args:
            ways: Road ways in input order

        Returns:
            One road Feature per joined chain (open or closed)
        """
        buckets: Dict[Tuple[str, ...], List[OSMWay]] = {}
        for way in ways:
            buckets.setdefault(self.signature(way), []).append(way)

        roads = []
        for bucket in buckets.values():
            groups = self.assembler.assemble_groups([way.nodes for way in bucket])
            for group in groups:
                first = bucket[group.members[0]]
                roads.append(Feature(
                    id=str(first.id),
                    type=FeatureType.ROAD,
                    geometry=group.coords,
                    tags=dict(first.tags)
                ))

        logger.debug(f"Merged {len(ways)} road ways into {len(roads)} road chains ({len(buckets)} signatures)")
        return roads
