"""
Modelos de la consulta de tiles del mapa.

El cliente manda los tokens de las celdas visibles (a la precisión con
la que está renderizando), el nivel de zoom y, opcionalmente, filtros.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from terreno.models.property import LightweightListing

MIN_TILE_LEVEL = 6
MAX_TILE_LEVEL = 16


class TileFilters(BaseModel):
    """
    Filtros de atributos. Cada campo es opcional y solo los presentes
    se convierten en predicado.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search: Optional[str] = Field(None, description="Texto libre sobre título/descripción")
    types: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    unit_statuses: list[str] = Field(default_factory=list)
    cities: list[str] = Field(default_factory=list)

    owner_role: Optional[str] = Field(None, description="Rol del dueño: OWNER, BROKER, DEVELOPER")
    developer_id: Optional[str] = None
    broker_id: Optional[str] = None
    project_id: Optional[str] = None

    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_space: Optional[float] = Field(None, ge=0)
    max_space: Optional[float] = Field(None, ge=0)


class TileRequest(BaseModel):
    """
    Pedido del mapa.

    Un solo token suelto (query string ``?tiles=abc``) se acepta y se
    convierte en lista.
    """

    tiles: list[str] = Field(default_factory=list, description="Tokens de celdas visibles")
    level: int = Field(..., ge=MIN_TILE_LEVEL, le=MAX_TILE_LEVEL, description="Nivel de zoom")
    filters: Optional[TileFilters] = None

    @field_validator("tiles", mode="before")
    @classmethod
    def _coerce_tiles(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class TileMeta(BaseModel):
    """Metadatos de la respuesta."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cap: int
    level_used: str
    level: int
    tiles_count: int


class TileResponse(BaseModel):
    """Respuesta del mapa: lista de puntos livianos."""

    model_config = ConfigDict(populate_by_name=True)

    mode: str = "points"
    items: list[LightweightListing] = Field(default_factory=list)
    meta: TileMeta

    def to_dict(self) -> dict:
        """Serializa en camelCase para el cliente."""
        return self.model_dump(by_alias=True)
