"""
Shared fixtures and element builders for the osmtile test suite
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from osmtile.models import Bounds, Coordinate


def c(lat, lng):
    """Shorthand coordinate builder"""
    return Coordinate(lat=lat, lng=lng)


def node(node_id, lat, lon, tags=None):
    element = {"type": "node", "id": node_id, "lat": lat, "lon": lon}
    if tags:
        element["tags"] = tags
    return element


def way(way_id, node_ids, tags=None):
    element = {"type": "way", "id": way_id, "nodes": list(node_ids)}
    if tags:
        element["tags"] = tags
    return element


def way_geom(way_id, points, tags=None):
    """Way with inline geometry; points are (lat, lng) pairs"""
    element = {
        "type": "way",
        "id": way_id,
        "geometry": [{"lat": lat, "lon": lng} for lat, lng in points],
    }
    if tags:
        element["tags"] = tags
    return element


def relation(relation_id, members, tags=None):
    """members: (type, ref, role) tuples"""
    element = {
        "type": "relation",
        "id": relation_id,
        "members": [{"type": t, "ref": ref, "role": role} for t, ref, role in members],
    }
    if tags:
        element["tags"] = tags
    return element


@pytest.fixture
def unit_bounds():
    """Tile spanning lat 0..1, lng 0..1"""
    return Bounds(north=1.0, south=0.0, east=1.0, west=0.0)


@pytest.fixture
def rng():
    return np.random.default_rng(42)
