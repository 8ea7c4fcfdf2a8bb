"""
Tests for the tag classifier rule table
"""

import pytest

from osmtile.collectors.osm.classifier import FeatureClassifier
from osmtile.models import FeatureType


@pytest.mark.parametrize("tags, expected", [
    ({"building": "yes"}, FeatureType.BUILDING),
    ({"historic": "castle"}, FeatureType.BUILDING),
    ({"natural": "coastline"}, FeatureType.COASTLINE),
    ({"natural": "water"}, FeatureType.WATER),
    ({"waterway": "river"}, FeatureType.WATER),
    ({"landuse": "reservoir"}, FeatureType.WATER),
    ({"barrier": "fence"}, FeatureType.BARRIER),
    ({"landuse": "grass"}, FeatureType.LANDUSE),
    ({"natural": "wood"}, FeatureType.LANDUSE),
    ({"historic": "memorial"}, FeatureType.LANDUSE),
    ({"aeroway": "apron"}, FeatureType.LANDUSE),
    ({"power": "substation"}, FeatureType.LANDUSE),
])
def test_single_rule_matches(tags, expected):
    assert FeatureClassifier().classify(tags) == expected


@pytest.mark.parametrize("tags, expected", [
    ({"building": "yes", "natural": "coastline"}, FeatureType.BUILDING),
    ({"natural": "coastline", "barrier": "wall"}, FeatureType.COASTLINE),
    ({"waterway": "dam", "barrier": "wall"}, FeatureType.WATER),
    ({"barrier": "hedge", "landuse": "grass"}, FeatureType.BARRIER),
    ({"building": "no", "landuse": "residential"}, FeatureType.LANDUSE),
])
def test_priority_order(tags, expected):
    assert FeatureClassifier().classify(tags) == expected


def test_unmatched_tags_return_none():
    classifier = FeatureClassifier()
    assert classifier.classify({}) is None
    assert classifier.classify(None) is None
    assert classifier.classify({"highway": "residential"}) is None
    assert classifier.classify({"name": "Nothing"}) is None


def test_matching_rule_names_the_winner():
    classifier = FeatureClassifier()
    assert classifier.matching_rule({"building": "yes", "landuse": "retail"}) == "building"
    assert classifier.matching_rule({"highway": "primary"}) is None


def test_custom_rule_table():
    rules = [("everything", lambda tags: True, FeatureType.LANDUSE)]
    classifier = FeatureClassifier(rules)
    assert classifier.classify({"building": "yes"}) == FeatureType.LANDUSE
    # Class default is untouched
    assert FeatureClassifier().classify({"building": "yes"}) == FeatureType.BUILDING
