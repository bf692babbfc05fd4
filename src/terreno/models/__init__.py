"""
Modelos de datos del sistema.

- Property / Project: entidades indexadas por celdas S2
- TileRequest / TileResponse: consulta del mapa
- SimilarityWeights / SimilarityQuery / SimilarityPage: ranking de similares
"""

from terreno.models.property import Property, SpatialPoint, LightweightListing
from terreno.models.project import Project
from terreno.models.tiles import TileFilters, TileRequest, TileMeta, TileResponse
from terreno.models.similarity import (
    SimilarityWeights,
    SimilarityOverrides,
    SimilarityQuery,
    SimilarityProfile,
    RankedSummary,
    PageMeta,
    SimilarityPage,
    DEFAULT_WEIGHTS,
    resolve,
)

__all__ = [
    # Entidades
    "Property",
    "SpatialPoint",
    "LightweightListing",
    "Project",
    # Mapa
    "TileFilters",
    "TileRequest",
    "TileMeta",
    "TileResponse",
    # Similitud
    "SimilarityWeights",
    "SimilarityOverrides",
    "SimilarityQuery",
    "SimilarityProfile",
    "RankedSummary",
    "PageMeta",
    "SimilarityPage",
    "DEFAULT_WEIGHTS",
    "resolve",
]
