"""
Tract Lookup

Resolves point coordinates to census tracts from TIGER/Line shapefiles,
tallies points per tract and classifies the tallies for choropleth maps.
"""

__version__ = "0.1.0"
