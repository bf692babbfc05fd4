"""
Módulo geoespacial.

Celdas S2 jerárquicas y distancias sobre la esfera.
"""

from terreno.geo.cells import (
    STORAGE_LEVELS,
    STORAGE_COLUMNS,
    token_at_level,
    ancestor_token,
    token_level,
    tokens_covering,
    MAX_COVER_DEPTH,
    cell_tokens_for,
    column_for_level,
    validate_point,
)
from terreno.geo.distance import haversine_km, bounding_box, BoundingBox

__all__ = [
    "STORAGE_LEVELS",
    "STORAGE_COLUMNS",
    "token_at_level",
    "ancestor_token",
    "token_level",
    "tokens_covering",
    "MAX_COVER_DEPTH",
    "cell_tokens_for",
    "column_for_level",
    "validate_point",
    "haversine_km",
    "bounding_box",
    "BoundingBox",
]
