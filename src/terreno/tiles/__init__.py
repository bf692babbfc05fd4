"""
Consulta de tiles del mapa.

Normaliza celdas visibles al nivel indexado, acota filas por zoom y
devuelve una proyección liviana de cada propiedad.
"""

from terreno.tiles.normalizer import NormalizedTiles, normalize, storage_level_for
from terreno.tiles.policy import cap_for_level
from terreno.tiles.filters import build_predicate
from terreno.tiles.service import TileQueryService

__all__ = [
    "NormalizedTiles",
    "normalize",
    "storage_level_for",
    "cap_for_level",
    "build_predicate",
    "TileQueryService",
]
