"""
Servicio de tiles del mapa.

Responde "qué puntos mostrar para estas celdas, este zoom y estos
filtros". Solo lectura: no tiene estado compartido y se puede llamar
concurrentemente.
"""

from typing import Optional

import structlog

from terreno.database import PropertyRepository
from terreno.models import LightweightListing, TileMeta, TileRequest, TileResponse
from terreno.tiles.filters import build_predicate
from terreno.tiles.normalizer import normalize
from terreno.tiles.policy import cap_for_level

logger = structlog.get_logger()


class TileQueryService:
    """
    Flujo:
    1. Normalizar tiles al nivel indexado y deduplicar
    2. Calcular el tope de filas para el zoom
    3. Armar el predicado con los filtros presentes
    4. Buscar por columna de token IN tokens + predicado, orden por id
    5. Proyectar cada fila a un punto liviano
    """

    def __init__(self, property_repo: Optional[PropertyRepository] = None):
        self.property_repo = property_repo or PropertyRepository()

    def get_tiles(self, request: TileRequest) -> TileResponse:
        norm = normalize(request.tiles, request.level)
        cap = cap_for_level(request.level)

        meta = TileMeta(
            cap=cap,
            level_used=norm.column,
            level=request.level,
            tiles_count=len(request.tiles),
        )

        # Sin tokens no hay nada que matchear (nunca "traer todo")
        if norm.is_empty:
            logger.debug("Pedido de tiles vacío", level=request.level)
            return TileResponse(items=[], meta=meta)

        predicates = build_predicate(request.filters)
        rows = self.property_repo.find_in_cells(
            column=norm.column,
            tokens=norm.tokens,
            predicates=predicates,
            limit=cap,
        )

        items = [LightweightListing.from_row(row) for row in rows[:cap]]

        logger.info(
            "Tiles resueltos",
            level=request.level,
            column=norm.column,
            tokens=len(norm.tokens),
            items=len(items),
            cap=cap,
        )
        return TileResponse(items=items, meta=meta)
