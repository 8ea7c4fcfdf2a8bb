"""
Tests for topology building: inheritance, relations and standalone ways
"""

from conftest import c, node, relation, way, way_geom
from osmtile.collectors.osm.parser import OSMResponseParser
from osmtile.collectors.osm.topology import TopologyBuilder
from osmtile.models import FeatureType


def build(elements):
    parsed = OSMResponseParser.parse_elements({"elements": elements})
    return TopologyBuilder().build(parsed), parsed


def square_nodes(start_id, south, west, north, east):
    """Four corner nodes, ids start_id..start_id+3 (SW, NW, NE, SE)"""
    return [
        node(start_id, south, west),
        node(start_id + 1, north, west),
        node(start_id + 2, north, east),
        node(start_id + 3, south, east),
    ]


# ------------------------------------------------------------
# Tag inheritance
# ------------------------------------------------------------

def test_route_relation_fills_absent_tags_only():
    elements = [
        node(1, 0.1, 0.1), node(2, 0.1, 0.2),
        way(10, [1, 2], {"highway": "primary", "lanes": "2"}),
        relation(50, [("way", 10, "")], {"type": "route", "route": "road", "name": "A1", "lanes": "4", "ref": "A1"}),
    ]
    _result, parsed = build(elements)
    tags = parsed.ways[10].tags
    assert tags["name"] == "A1"
    assert tags["lanes"] == "2"
    # Not whitelisted
    assert "ref" not in tags


def test_site_relation_inherits_only_when_historic():
    elements = [
        node(1, 0.1, 0.1), node(2, 0.1, 0.2), node(3, 0.2, 0.1), node(4, 0.2, 0.2),
        way(10, [1, 2], {"barrier": "wall"}),
        way(11, [3, 4], {"barrier": "wall"}),
        relation(60, [("way", 10, "")], {"type": "site", "historic": "archaeological_site", "name": "Old Fort"}),
        relation(61, [("way", 11, "")], {"type": "site", "name": "Car Park"}),
    ]
    _result, parsed = build(elements)
    assert parsed.ways[10].tags["name"] == "Old Fort"
    assert "name" not in parsed.ways[11].tags


def test_route_relation_is_not_a_feature():
    elements = [
        node(1, 0.1, 0.1), node(2, 0.1, 0.2),
        way(10, [1, 2], {"highway": "primary"}),
        relation(50, [("way", 10, "")], {"type": "route", "route": "road", "landuse": "odd"}),
    ]
    result, _parsed = build(elements)
    assert result.relation_features == []
    assert len(result.road_features) == 1


# ------------------------------------------------------------
# Relations
# ------------------------------------------------------------

def test_multipolygon_with_hole_and_consumption():
    elements = square_nodes(1, 0.1, 0.1, 0.9, 0.9) + square_nodes(11, 0.4, 0.4, 0.6, 0.6) + [
        way(100, [1, 2, 3]),
        way(101, [3, 4, 1]),
        way(102, [11, 12, 13, 14, 11]),
        relation(500, [("way", 100, "outer"), ("way", 101, "outer"), ("way", 102, "inner")],
                 {"type": "multipolygon", "building": "yes"}),
    ]
    result, _parsed = build(elements)
    assert len(result.relation_features) == 1
    feature = result.relation_features[0]
    assert feature.id == "rel_500"
    assert feature.type == FeatureType.BUILDING
    assert feature.is_closed
    assert set(feature.geometry) == {c(0.1, 0.1), c(0.9, 0.1), c(0.9, 0.9), c(0.1, 0.9)}
    assert feature.holes == [[c(0.4, 0.4), c(0.6, 0.4), c(0.6, 0.6), c(0.4, 0.6), c(0.4, 0.4)]]
    # Outer ways consumed, inner way left to standalone processing
    assert result.consumed_way_ids == {100, 101}


def test_outer_ways_with_highway_are_not_consumed():
    elements = square_nodes(1, 0.1, 0.1, 0.6, 0.6) + [
        way(100, [1, 2, 3], {"highway": "service"}),
        way(101, [3, 4, 1]),
        relation(500, [("way", 100, "outer"), ("way", 101, "outer")], {"type": "multipolygon", "landuse": "retail"}),
    ]
    result, _parsed = build(elements)
    assert result.consumed_way_ids == {101}
    assert [f.id for f in result.road_features] == ["100"]


def test_every_inner_ring_is_attached_to_every_outer_ring():
    elements = (
        square_nodes(1, 0.1, 0.1, 0.3, 0.3)
        + square_nodes(11, 0.6, 0.6, 0.8, 0.8)
        + square_nodes(21, 0.15, 0.15, 0.2, 0.2)
        + [
            way(100, [1, 2, 3, 4, 1]),
            way(101, [11, 12, 13, 14, 11]),
            way(102, [21, 22, 23, 24, 21]),
            relation(500, [("way", 100, "outer"), ("way", 101, "outer"), ("way", 102, "inner")],
                     {"type": "multipolygon", "natural": "wood"}),
        ]
    )
    result, _parsed = build(elements)
    features = result.relation_features
    assert [f.id for f in features] == ["rel_500_0", "rel_500_1"]
    assert all(f.type == FeatureType.LANDUSE for f in features)
    assert all(len(f.holes) == 1 for f in features)


def test_unclassified_relation_and_missing_members_are_skipped():
    elements = square_nodes(1, 0.1, 0.1, 0.6, 0.6) + [
        way(100, [1, 2, 3, 4, 1]),
        relation(500, [("way", 100, "outer")], {"type": "multipolygon"}),
        relation(501, [("way", 999, "outer")], {"type": "multipolygon", "building": "yes"}),
    ]
    result, _parsed = build(elements)
    assert result.relation_features == []
    assert result.consumed_way_ids == set()


def test_inline_member_geometry_is_used_when_way_is_absent():
    element = relation(500, [("way", 999, "outer")], {"type": "multipolygon", "leisure": "park"})
    element["members"][0]["geometry"] = [
        {"lat": 0.1, "lon": 0.1}, {"lat": 0.1, "lon": 0.3}, {"lat": 0.3, "lon": 0.3}, {"lat": 0.1, "lon": 0.1},
    ]
    result, _parsed = build([element])
    assert len(result.relation_features) == 1
    assert result.relation_features[0].geometry[0] == c(0.1, 0.1)


# ------------------------------------------------------------
# Standalone ways
# ------------------------------------------------------------

def test_contiguous_roads_with_same_signature_merge():
    elements = [
        node(1, 0.1, 0.1), node(2, 0.1, 0.2), node(3, 0.1, 0.3),
        way(10, [1, 2], {"highway": "residential", "name": "High St"}),
        way(11, [2, 3], {"highway": "residential", "name": "High St"}),
    ]
    result, _parsed = build(elements)
    assert len(result.road_features) == 1
    road = result.road_features[0]
    assert road.id == "10"
    assert road.geometry == [c(0.1, 0.1), c(0.1, 0.2), c(0.1, 0.3)]


def test_roads_with_different_signatures_stay_separate():
    elements = [
        node(1, 0.1, 0.1), node(2, 0.1, 0.2), node(3, 0.1, 0.3),
        way(10, [1, 2], {"highway": "residential", "name": "High St"}),
        way(11, [2, 3], {"highway": "residential", "name": "Low St"}),
        way(12, [3, 1], {"man_made": "bridge"}),
    ]
    result, _parsed = build(elements)
    assert sorted(f.id for f in result.road_features) == ["10", "11", "12"]


def test_tree_row_interpolation():
    # ~44.5 m per segment at the equator -> 5 steps each
    elements = [
        node(1, 0.0, 0.0), node(2, 0.0, 0.0004), node(3, 0.0, 0.0008),
        way(10, [1, 2, 3], {"natural": "tree_row"}),
    ]
    result, _parsed = build(elements)
    trees = result.standalone_features
    assert len(trees) == 11
    assert all(t.type == FeatureType.VEGETATION and t.is_point for t in trees)
    assert trees[0].geometry == [c(0.0, 0.0)]
    assert trees[-1].geometry == [c(0.0, 0.0008)]
    assert trees[0].id == "10_tree_0"
    assert len({t.geometry[0] for t in trees}) == 11


def test_short_tree_row_segment_keeps_both_ends():
    elements = [node(1, 0.0, 0.0), node(2, 0.0, 0.00001), way(10, [1, 2], {"natural": "tree_row"})]
    result, _parsed = build(elements)
    assert [t.geometry[0] for t in result.standalone_features] == [c(0.0, 0.0), c(0.0, 0.00001)]


def test_coastline_ways_are_joined():
    elements = [
        node(1, 0.5, 0.0), node(2, 0.5, 0.5), node(3, 0.5, 1.0),
        way(10, [1, 2], {"natural": "coastline"}),
        way(11, [2, 3], {"natural": "coastline"}),
    ]
    result, _parsed = build(elements)
    assert len(result.coastline_features) == 1
    coastline = result.coastline_features[0]
    assert coastline.id == "coastline_10"
    assert coastline.type == FeatureType.COASTLINE
    assert coastline.geometry == [c(0.5, 0.0), c(0.5, 0.5), c(0.5, 1.0)]


def test_area_like_and_linear_way_handling():
    elements = square_nodes(1, 0.1, 0.1, 0.2, 0.2) + [
        way(20, [1, 2, 3, 4, 1], {"landuse": "grass"}),
        way(21, [1, 2, 3, 4], {"natural": "wood"}),
        way(22, [1, 2, 3, 4], {"landuse": "meadow", "area": "no"}),
        way(23, [1, 2, 3], {"waterway": "stream"}),
        way(24, [1, 2, 3], {"barrier": "fence"}),
        way(25, [1, 2, 3], {"natural": "cliff"}),
        way(26, [1, 2, 3]),
        way(27, [1, 2, 3, 4, 1], {"building": "house"}),
        way(28, [1, 2, 3, 4, 1], {"waterway": "dock"}),
    ]
    result, _parsed = build(elements)
    by_id = {f.id: f for f in result.standalone_features}
    assert set(by_id) == {"20", "21", "23", "24", "27", "28"}

    assert by_id["20"].type == FeatureType.LANDUSE and by_id["20"].is_closed
    # Auto-closed
    assert by_id["21"].is_closed and len(by_id["21"].geometry) == 5
    assert by_id["23"].type == FeatureType.WATER and not by_id["23"].is_closed
    assert by_id["24"].type == FeatureType.BARRIER
    assert by_id["27"].type == FeatureType.BUILDING
    assert by_id["28"].type == FeatureType.WATER and by_id["28"].is_closed


def test_explicit_area_yes_keeps_unclosed_way():
    elements = square_nodes(1, 0.1, 0.1, 0.2, 0.2) + [way(30, [1, 2, 3], {"amenity": "parking", "area": "yes"})]
    result, _parsed = build(elements)
    assert [f.id for f in result.standalone_features] == ["30"]


def test_point_features_from_nodes():
    elements = [
        node(1, 0.1, 0.1, {"highway": "street_lamp"}),
        node(2, 0.2, 0.2, {"natural": "tree"}),
        node(3, 0.3, 0.3, {"amenity": "bench"}),
        node(4, 0.4, 0.4, {"name": "nothing"}),
        node(5, 0.5, 0.5),
    ]
    result, _parsed = build(elements)
    points = {f.id: f.type for f in result.standalone_features}
    assert points == {
        "1": FeatureType.STREET_FURNITURE,
        "2": FeatureType.VEGETATION,
        "3": FeatureType.STREET_FURNITURE,
    }


def test_feature_order_is_relations_roads_coastlines_standalone():
    elements = square_nodes(1, 0.1, 0.1, 0.2, 0.2) + [
        node(9, 0.5, 0.5, {"natural": "tree"}),
        node(20, 0.5, 0.0), node(21, 0.5, 1.0),
        way_geom(40, [(0.7, 0.7), (0.7, 0.8), (0.8, 0.8), (0.7, 0.7)], {"building": "yes"}),
        way(41, [20, 21], {"natural": "coastline"}),
        way(42, [1, 2], {"highway": "footway"}),
        way(43, [1, 2, 3, 4, 1]),
        relation(500, [("way", 43, "outer")], {"type": "multipolygon", "landuse": "farmland"}),
    ]
    result, _parsed = build(elements)
    assert [f.id for f in result.features] == ["rel_500", "42", "coastline_41", "9", "40"]
