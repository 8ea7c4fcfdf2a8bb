"""
Main OSM Collector

Orchestrates all tile feature processing components
"""

from typing import Any, Dict, List, Optional, Union

import numpy as np
from loguru import logger

from ...config import PipelineConfig, get_config
from ...models import Bounds, Feature
from .clipper import ViewportClipper
from .coastline import CoastlineReconstructor
from .parser import OSMResponseError, OSMResponseParser
from .topology import TopologyBuilder
from .vegetation import VegetationSampler


class OSMCollector:
    """
    Turn a provider response into clipped tile features

    Pipeline: parse -> topology -> clip -> coastline water -> procedural
    vegetation. Each call is self-contained; the collector holds only
    configuration and can be reused across tiles.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_config()
        self.parser = OSMResponseParser()
        self.topology_builder = TopologyBuilder(self.config)

    def process(
        self,
        data: Dict[str, Any],
        bounds: Union[Bounds, Dict[str, float]],
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None
    ) -> List[Feature]:
        """
        Process one provider response for one tile

        Args:
            data: Parsed provider response ({"elements": [...]})
            bounds: Tile bounds (Bounds or a north/south/east/west mapping)
            rng: Random generator for procedural vegetation
            seed: Seed for a fresh generator when rng is not given;
                with neither, vegetation is not reproducible

        Returns:
            Ordered features: relation-derived, merged roads and coastlines,
            standalone, reconstructed water, procedural vegetation

        Raises:
            OSMResponseError: If the response is structurally invalid
        """
        if not isinstance(bounds, Bounds):
            bounds = Bounds(**bounds)

        try:
            parsed = self.parser.parse_elements(data)
        except OSMResponseError as e:
            logger.error(f"Invalid provider response: {e}")
            raise

        element_count = len(data["elements"])
        logger.info(f"Processing {element_count} elements for bounds "
                    f"N:{bounds.north}, S:{bounds.south}, E:{bounds.east}, W:{bounds.west}")

        topology = self.topology_builder.build(parsed)
        raw_features = topology.features

        clipped = ViewportClipper(bounds).clip_features(raw_features)

        water = CoastlineReconstructor(bounds, self.config).reconstruct(clipped)
        features = clipped + water

        vegetation: List[Feature] = []
        if self.config.procedural_vegetation:
            if rng is None:
                rng = np.random.default_rng(seed)
            vegetation = VegetationSampler(rng, self.config).sample_all(features)
        features = features + vegetation

        logger.info(f"Tile results: {len(raw_features)} raw features, {len(clipped)} clipped, "
                    f"{len(water)} coastline water polygons, {len(vegetation)} vegetation points")
        return features

    @staticmethod
    def to_feature_collection(features: List[Feature]) -> Dict[str, Any]:
        """Convert features to a GeoJSON FeatureCollection dict"""
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in features],
        }


def process_response(
    data: Dict[str, Any],
    bounds: Union[Bounds, Dict[str, float]],
    seed: Optional[int] = None,
    config: Optional[PipelineConfig] = None
) -> List[Feature]:
    """Convenience wrapper around OSMCollector().process()"""
    return OSMCollector(config).process(data, bounds, seed=seed)
