"""
osmtile - OpenStreetMap tile feature extraction

Turns raw provider responses into typed, tile-clipped features ready for
texture rasterization and 3D extrusion.
"""

from .config import PipelineConfig, get_config, validate_config
from .models import Bounds, Coordinate, Feature, FeatureType
from .collectors import OSMCollector, process_response

__version__ = "1.0.0"

__all__ = [
    "PipelineConfig",
    "get_config",
    "validate_config",
    "Bounds",
    "Coordinate",
    "Feature",
    "FeatureType",
    "OSMCollector",
    "process_response",
]
