"""
Normalizador de tiles.

Lleva los tokens que manda el cliente (a cualquier precisión) al nivel
indexado más cercano y los deduplica. Un tile más fino sube a su ancestro;
uno más grueso (zoom 13 a 15 contra la columna de nivel 16) se expande
en sus descendientes.
"""

from dataclasses import dataclass
from typing import Iterable

from terreno.geo import STORAGE_COLUMNS, tokens_covering

# (umbral, nivel de storage): el primer umbral que cumple level <= umbral gana
_BUCKETS: tuple[tuple[int, int], ...] = (
    (6, 6),
    (8, 8),
    (10, 10),
    (12, 12),
)
_FINEST_LEVEL = 16


@dataclass(frozen=True)
class NormalizedTiles:
    """Resultado de normalizar: columna a consultar y tokens únicos."""

    storage_level: int
    column: str
    tokens: frozenset[str]

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def storage_level_for(level: int) -> int:
    """Nivel indexado para un nivel de zoom (función escalón no decreciente)."""
    for threshold, storage_level in _BUCKETS:
        if level <= threshold:
            return storage_level
    return _FINEST_LEVEL


def normalize(tiles: Iterable[str], level: int) -> NormalizedTiles:
    """
    Normaliza tiles a un nivel indexado.

    Asume un ``level`` entero ya validado por la capa que llama. Una lista
    vacía devuelve un set vacío: el que llama debe tratarlo como "no
    matchea nada", no como "sin filtro".
    """
    storage_level = storage_level_for(level)
    tokens = frozenset(
        token
        for tile in tiles
        for token in tokens_covering(tile, storage_level)
    )
    return NormalizedTiles(
        storage_level=storage_level,
        column=STORAGE_COLUMNS[storage_level],
        tokens=tokens,
    )
