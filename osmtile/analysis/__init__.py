"""
Geometry helpers shared by the OSM processing stages
"""
