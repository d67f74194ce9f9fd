"""
Tract Lookup - Geographic Components

Tract geometry and point-in-polygon resolution:
- SchemaResolver: shapefile year -> attribute names
- TractPolygon: immutable rings + canonical attributes
- SpatialIndex / PointInPolygonEngine: R-tree candidates + ray casting
- Loader: TIGER/Line shapefiles via GeoPandas
"""

from tract_lookup.geo.geometry import TractPolygon
from tract_lookup.geo.loader import load_tracts, polygons_from_frame
from tract_lookup.geo.schema import (
    SCHEMA_FIELDS,
    SchemaFields,
    SchemaResolver,
    SchemaVersion,
    resolve_schema,
)
from tract_lookup.geo.spatial_index import PointInPolygonEngine, SpatialIndex

__all__ = [
    # Schema
    "SchemaResolver",
    "SchemaFields",
    "SchemaVersion",
    "SCHEMA_FIELDS",
    "resolve_schema",
    # Geometry
    "TractPolygon",
    "SpatialIndex",
    "PointInPolygonEngine",
    # Loader
    "load_tracts",
    "polygons_from_frame",
]
