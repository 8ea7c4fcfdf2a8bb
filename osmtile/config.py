"""
Configuration settings for the OSM tile feature pipeline
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class TopologyConfig:
    """Way/relation assembly settings"""
    # Attributes copied from route/site relations onto member ways (absent keys only)
    inherited_tags: List[str] = field(default_factory=lambda: [
        "highway",
        "name",
        "lanes",
        "oneway",
        "surface",
        "layer",
        "bridge",
        "tunnel",
    ])
    inheriting_relation_types: List[str] = field(default_factory=lambda: [
        "route",
        "superroute",
        "site",
    ])
    # Relation types that never become features themselves
    skipped_relation_types: List[str] = field(default_factory=lambda: [
        "route",
        "superroute",
    ])
    # Road segments are only merged when all of these tags agree
    road_signature_keys: List[str] = field(default_factory=lambda: [
        "highway",
        "name",
        "lanes",
        "oneway",
        "layer",
    ])
    tree_row_spacing_m: float = 8.0


@dataclass
class CoastlineConfig:
    """Coastline water reconstruction settings"""
    # Seaward probe distance, as a fraction of the tile's smaller span
    seaward_offset_ratio: float = 0.003
    # "Already on the boundary" tolerance, as a fraction of the tile's larger span
    boundary_epsilon_ratio: float = 0.001
    max_boundary_transitions: int = 6


@dataclass
class VegetationConfig:
    """Procedural vegetation scattering settings"""
    # Average distance between synthetic plants (meters)
    spacing_m: Dict[str, float] = field(default_factory=lambda: {
        "forest": 12.0,
        "wood": 15.0,
        "scrub": 20.0,
        "wetland": 25.0,
    })
    max_points_per_polygon: int = 2000
    # Rejection sampling gives up after target * factor draws
    max_attempts_factor: int = 10


@dataclass
class PipelineConfig:
    """Pipeline configuration"""
    earth_radius_m: float = 6371000.0

    # Feature flags
    procedural_vegetation: bool = True

    topology: TopologyConfig = field(default_factory=TopologyConfig)
    coastline: CoastlineConfig = field(default_factory=CoastlineConfig)
    vegetation: VegetationConfig = field(default_factory=VegetationConfig)


# Global config instance
config = PipelineConfig()


def get_config() -> PipelineConfig:
    """Get global configuration"""
    return config


def validate_config(config: PipelineConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    if config.earth_radius_m is None or config.earth_radius_m <= 0:
        errors.append(f"earth_radius_m must be positive, got {config.earth_radius_m}")

    if config.topology is None:
        errors.append("topology configuration is required but not set")
    else:
        if config.topology.tree_row_spacing_m <= 0:
            errors.append(f"topology.tree_row_spacing_m must be positive, got {config.topology.tree_row_spacing_m}")
        if not config.topology.road_signature_keys:
            errors.append("topology.road_signature_keys must not be empty")

    if config.coastline is None:
        errors.append("coastline configuration is required but not set")
    else:
        if not 0 < config.coastline.seaward_offset_ratio < 1:
            errors.append(f"coastline.seaward_offset_ratio must be in (0, 1), got {config.coastline.seaward_offset_ratio}")
        if not 0 < config.coastline.boundary_epsilon_ratio < 1:
            errors.append(f"coastline.boundary_epsilon_ratio must be in (0, 1), got {config.coastline.boundary_epsilon_ratio}")
        if config.coastline.max_boundary_transitions < 4:
            errors.append(
                f"coastline.max_boundary_transitions must be at least 4, got {config.coastline.max_boundary_transitions}"
            )

    if config.vegetation is None:
        errors.append("vegetation configuration is required but not set")
    else:
        for subtype in ("forest", "wood", "scrub", "wetland"):
            spacing = config.vegetation.spacing_m.get(subtype)
            if spacing is None or spacing <= 0:
                errors.append(f"vegetation.spacing_m['{subtype}'] must be positive, got {spacing}")
        if config.vegetation.max_points_per_polygon < 0:
            errors.append(
                f"vegetation.max_points_per_polygon must not be negative, got {config.vegetation.max_points_per_polygon}"
            )
        if config.vegetation.max_attempts_factor < 1:
            errors.append(f"vegetation.max_attempts_factor must be at least 1, got {config.vegetation.max_attempts_factor}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
