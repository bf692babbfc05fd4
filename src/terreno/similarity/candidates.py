"""
Pre-filtro grueso de candidatos.

Acota cuántas filas se traen del store antes de puntuar: entra todo lo
que comparte (tipo Y categoría), o ciudad, o cae en la caja de
``search_radius`` km; las propiedades además entran por banda de
precio o de superficie.
"""

from terreno.geo import bounding_box
from terreno.models import SimilarityProfile, SimilarityWeights
from terreno.predicates import EQ, GTE, LTE, AllOf, AnyOf, Condition, Predicate


def build_prefilter(
    reference: SimilarityProfile,
    weights: SimilarityWeights,
    include_bands: bool = True,
) -> AnyOf:
    """
    Predicado OR de ramas para buscar candidatos.

    Args:
        reference: perfil de la entidad de referencia
        weights: configuración efectiva (radio, multiplicadores)
        include_bands: sumar bandas de precio/superficie (solo propiedades)
    """
    branches: list[Predicate] = []

    if reference.type is not None and reference.category is not None:
        branches.append(
            AllOf((
                Condition("type", EQ, reference.type),
                Condition("category", EQ, reference.category),
            ))
        )

    if reference.city is not None:
        branches.append(Condition("city", EQ, reference.city))

    if reference.latitude is not None and reference.longitude is not None:
        box = bounding_box(reference.latitude, reference.longitude, weights.search_radius)
        branches.append(
            AllOf((
                Condition("latitude", GTE, box.min_lat),
                Condition("latitude", LTE, box.max_lat),
                Condition("longitude", GTE, box.min_lng),
                Condition("longitude", LTE, box.max_lng),
            ))
        )

    if include_bands and reference.price:
        branches.append(
            AllOf((
                Condition("price", GTE, reference.price * weights.price_min_multiplier),
                Condition("price", LTE, reference.price * weights.price_max_multiplier),
            ))
        )

    if include_bands and reference.space:
        pct = weights.space_range_percentage
        branches.append(
            AllOf((
                Condition("space", GTE, reference.space * (1 - pct)),
                Condition("space", LTE, reference.space * (1 + pct)),
            ))
        )

    return AnyOf(tuple(branches))
