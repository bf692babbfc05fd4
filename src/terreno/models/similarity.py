"""
Modelos del ranking de similitud.

Los pesos por defecto viven en SimilarityWeights. Cada pedido puede
pisar cualquier campo con SimilarityOverrides; ``resolve`` combina
ambos sin mutar nada.
"""

import math
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SimilarityWeights(BaseModel):
    """
    Configuración efectiva de pesos y umbrales.

    Con los defaults, el máximo para propiedades es
    12 + 10 + 8 + 15 + 10 + 8 = 63 (proyectos: 55, no puntúan superficie).

    Los tramos de distancia se evalúan en orden close, medium, far y no se
    exige orden entre umbrales: un override puede pisar uno solo.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    # Atributos categóricos
    type_weight: float = Field(12, ge=0)
    category_weight: float = Field(10, ge=0)
    city_weight: float = Field(8, ge=0)

    # Ubicación (km)
    location_weight: float = Field(15, ge=0)
    close_distance: float = Field(2.0, ge=0)
    medium_distance: float = Field(5.0, ge=0)
    far_distance: float = Field(10.0, ge=0)
    search_radius: float = Field(10.0, gt=0, description="Radio del pre-filtro (km)")

    # Precio
    price_weight: float = Field(10, ge=0)
    price_range_percentage: float = Field(0.3, ge=0, le=1)
    price_min_multiplier: float = Field(0.7, ge=0)
    price_max_multiplier: float = Field(1.3, ge=0)

    # Superficie (solo propiedades)
    space_weight: float = Field(8, ge=0)
    space_range_percentage: float = Field(0.4, ge=0, le=1)

    min_score: float = Field(0, description="Score mínimo para aparecer en resultados")


class SimilarityOverrides(BaseModel):
    """Overrides por pedido: todo opcional, solo se aplica lo presente."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type_weight: Optional[float] = None
    category_weight: Optional[float] = None
    city_weight: Optional[float] = None
    location_weight: Optional[float] = None
    close_distance: Optional[float] = None
    medium_distance: Optional[float] = None
    far_distance: Optional[float] = None
    search_radius: Optional[float] = None
    price_weight: Optional[float] = None
    price_range_percentage: Optional[float] = None
    price_min_multiplier: Optional[float] = None
    price_max_multiplier: Optional[float] = None
    space_weight: Optional[float] = None
    space_range_percentage: Optional[float] = None
    min_score: Optional[float] = None


DEFAULT_WEIGHTS = SimilarityWeights()


def resolve(
    defaults: SimilarityWeights,
    overrides: Optional[SimilarityOverrides] = None,
) -> SimilarityWeights:
    """
    Configuración efectiva = defaults pisados por los overrides presentes.

    Función pura: devuelve una instancia nueva y revalida rangos.
    """
    if overrides is None:
        return defaults
    data = defaults.model_dump()
    data.update(overrides.model_dump(exclude_none=True))
    return SimilarityWeights.model_validate(data)


class SimilarityQuery(BaseModel):
    """Pedido de "similares a X"."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=20)
    overrides: SimilarityOverrides = Field(default_factory=SimilarityOverrides)


@dataclass(frozen=True)
class SimilarityProfile:
    """Dimensiones que el scorer compara entre referencia y candidato."""

    id: str
    type: Optional[str]
    category: Optional[str]
    city: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    price: Optional[float]
    space: Optional[float] = None


class RankedSummary(BaseModel):
    """Resumen de un candidato puntuado."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    type: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    price: Optional[float] = None
    space: Optional[float] = None
    location: Optional[dict[str, float]] = None
    thumbnail: Optional[str] = None
    score: float
    distance_km: Optional[float] = None


class PageMeta(BaseModel):
    """Metadatos de paginación."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int
    has_more_pages: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_more_pages=page < total_pages,
        )


class SimilarityPage(BaseModel):
    """Página de resultados similares."""

    data: list[RankedSummary] = Field(default_factory=list)
    meta: PageMeta

    def to_dict(self) -> dict:
        """Serializa en camelCase para el cliente."""
        return self.model_dump(by_alias=True)
