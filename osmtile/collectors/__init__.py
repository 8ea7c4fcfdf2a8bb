"""
Feature collectors for OSM tile processing

- OSMCollector: Buildings, roads, water, vegetation and street furniture
  from an OpenStreetMap provider response, clipped to one tile
"""

from .osm import OSMCollector, process_response

__all__ = [
    "OSMCollector",
    "process_response",
]
