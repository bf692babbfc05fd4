"""
Indexador de celdas S2.

Convierte un punto (lat, lng) en el token de su celda S2 a un nivel dado
y sube tokens a niveles más gruesos. Funciones puras: sin estado global,
sin I/O, mismo input => mismo token.

Las propiedades y proyectos guardan precalculados los tokens de los
niveles de STORAGE_LEVELS, uno por columna.
"""

import math
import re
from typing import Iterable

import s2sphere

from terreno.errors import InvalidCellTokenError, InvalidCoordinatesError

MIN_LEVEL = 0
MAX_LEVEL = s2sphere.CellId.MAX_LEVEL  # 30

# Niveles indexados, de grueso a fino
STORAGE_LEVELS: tuple[int, ...] = (6, 8, 10, 12, 16)

# Un tile se expande a lo sumo 4^4 = 256 celdas más finas
MAX_COVER_DEPTH = 4

_TOKEN_RE = re.compile(r"^[0-9a-fA-F]{1,16}$")


def column_for_level(level: int) -> str:
    """Nombre de la columna que guarda el token de un nivel indexado."""
    if level not in STORAGE_LEVELS:
        raise ValueError(f"Nivel {level} no está indexado: {STORAGE_LEVELS}")
    return f"s2_l{level}"


STORAGE_COLUMNS: dict[int, str] = {
    level: column_for_level(level) for level in STORAGE_LEVELS
}


def validate_point(latitude: float, longitude: float) -> None:
    """Rechaza coordenadas fuera de dominio. Nunca las recorta."""
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinatesError(latitude, longitude) from None

    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCoordinatesError(latitude, longitude)
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
        raise InvalidCoordinatesError(latitude, longitude)


def _check_level(level: int) -> None:
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValueError(f"Nivel inválido: {level!r}")
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Nivel fuera de rango [{MIN_LEVEL}, {MAX_LEVEL}]: {level}")


def _decode(token: str) -> s2sphere.CellId:
    if not isinstance(token, str) or not _TOKEN_RE.match(token):
        raise InvalidCellTokenError(token)
    cell = s2sphere.CellId.from_token(token.lower())
    if not cell.is_valid():
        raise InvalidCellTokenError(token)
    return cell


def token_at_level(latitude: float, longitude: float, level: int) -> str:
    """
    Token de la celda S2 que contiene al punto, al nivel pedido.

    Raises:
        InvalidCoordinatesError: lat/lng fuera de [-90, 90] / [-180, 180]
        ValueError: nivel fuera de [0, 30]
    """
    validate_point(latitude, longitude)
    _check_level(level)

    latlng = s2sphere.LatLng.from_degrees(float(latitude), float(longitude))
    leaf = s2sphere.CellId.from_lat_lng(latlng)
    return leaf.parent(level).to_token()


def ancestor_token(token: str, level: int) -> str:
    """
    Ancestro de ``token`` al nivel pedido (igual o más grueso).

    Raises:
        InvalidCellTokenError: el token no decodifica a una celda válida
        ValueError: el nivel pedido es más fino que el del token
    """
    _check_level(level)
    cell = _decode(token)
    if level > cell.level():
        raise ValueError(
            f"No se puede bajar a nivel {level} desde un token de nivel {cell.level()}"
        )
    return cell.parent(level).to_token()


def token_level(token: str) -> int:
    """Nivel de un token."""
    return _decode(token).level()


def tokens_covering(token: str, level: int) -> list[str]:
    """
    Celdas de nivel ``level`` que cubren exactamente a ``token``.

    Si el token es igual o más fino que ``level`` es un solo ancestro; si
    es más grueso, son sus 4^n descendientes (n = niveles de diferencia).

    Raises:
        InvalidCellTokenError: el token no decodifica a una celda válida
        ValueError: la diferencia supera MAX_COVER_DEPTH niveles
    """
    _check_level(level)
    cell = _decode(token)
    if level <= cell.level():
        return [cell.parent(level).to_token()]

    depth = level - cell.level()
    if depth > MAX_COVER_DEPTH:
        raise ValueError(
            f"Token de nivel {cell.level()} demasiado grueso para nivel {level} "
            f"(máximo {MAX_COVER_DEPTH} niveles)"
        )

    tokens = []
    child = cell.child_begin(level)
    end = cell.child_end(level)
    while child != end:
        tokens.append(child.to_token())
        child = child.next()
    return tokens


def cell_tokens_for(
    latitude: float,
    longitude: float,
    levels: Iterable[int] = STORAGE_LEVELS,
) -> dict[str, str]:
    """
    Tokens de las columnas indexadas para un punto.

    Es la única implementación del cálculo de tokens: la usan tanto el
    camino de escritura (create/update) como el backfill.

    Returns:
        Diccionario {columna: token}, ej: {"s2_l12": "3e9f...", ...}
    """
    validate_point(latitude, longitude)

    latlng = s2sphere.LatLng.from_degrees(float(latitude), float(longitude))
    leaf = s2sphere.CellId.from_lat_lng(latlng)
    return {
        column_for_level(level): leaf.parent(level).to_token()
        for level in levels
    }
