"""
Scorer de similitud.

Suma cinco señales ponderadas entre una referencia y un candidato:
tipo, categoría, ciudad, cercanía (por tramos) y precio (por tramos);
las propiedades suman además superficie.

Desempate: score desc, distancia asc (sin distancia al final), id asc.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from terreno.geo import haversine_km
from terreno.models import SimilarityProfile, SimilarityWeights

# Fracción del peso de ubicación por tramo
MEDIUM_DISTANCE_FACTOR = 0.7
FAR_DISTANCE_FACTOR = 0.4

# Fracción del peso de precio dentro del rango ancho
PRICE_PARTIAL_FACTOR = 0.5


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidato con su score y distancia a la referencia."""

    profile: SimilarityProfile
    score: float
    distance_km: Optional[float]


def distance_between(a: SimilarityProfile, b: SimilarityProfile) -> Optional[float]:
    """Distancia haversine en km, o None si a alguno le falta el punto."""
    if None in (a.latitude, a.longitude, b.latitude, b.longitude):
        return None
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def location_points(distance_km: Optional[float], weights: SimilarityWeights) -> float:
    """Tramos excluyentes: gana el más cercano."""
    if distance_km is None:
        return 0
    if distance_km <= weights.close_distance:
        return weights.location_weight
    if distance_km <= weights.medium_distance:
        return math.floor(weights.location_weight * MEDIUM_DISTANCE_FACTOR)
    if distance_km <= weights.far_distance:
        return math.floor(weights.location_weight * FAR_DISTANCE_FACTOR)
    return 0


def price_points(
    reference_price: Optional[float],
    candidate_price: Optional[float],
    weights: SimilarityWeights,
) -> float:
    """Peso completo dentro de ±pct; la mitad (piso) dentro de [min_mult, max_mult]."""
    if not reference_price or candidate_price is None:
        return 0
    pct = weights.price_range_percentage
    if reference_price * (1 - pct) <= candidate_price <= reference_price * (1 + pct):
        return weights.price_weight
    low = reference_price * weights.price_min_multiplier
    high = reference_price * weights.price_max_multiplier
    if low <= candidate_price <= high:
        return math.floor(weights.price_weight * PRICE_PARTIAL_FACTOR)
    return 0


def space_points(
    reference_space: Optional[float],
    candidate_space: Optional[float],
    weights: SimilarityWeights,
) -> float:
    """Peso plano dentro de ±space_range_percentage, sin crédito parcial."""
    if not reference_space or candidate_space is None:
        return 0
    pct = weights.space_range_percentage
    if reference_space * (1 - pct) <= candidate_space <= reference_space * (1 + pct):
        return weights.space_weight
    return 0


def score_candidate(
    reference: SimilarityProfile,
    candidate: SimilarityProfile,
    weights: SimilarityWeights,
    include_space: bool = True,
) -> ScoredCandidate:
    """Score aditivo de un candidato contra la referencia."""
    score = 0

    if candidate.type is not None and candidate.type == reference.type:
        score += weights.type_weight
    if candidate.category is not None and candidate.category == reference.category:
        score += weights.category_weight
    # Coincidencia exacta, sensible a mayúsculas
    if candidate.city is not None and candidate.city == reference.city:
        score += weights.city_weight

    distance = distance_between(reference, candidate)
    score += location_points(distance, weights)
    score += price_points(reference.price, candidate.price, weights)

    if include_space:
        score += space_points(reference.space, candidate.space, weights)

    return ScoredCandidate(profile=candidate, score=score, distance_km=distance)


def _sort_key(item: ScoredCandidate):
    no_distance = item.distance_km is None
    return (-item.score, no_distance, item.distance_km or 0.0, item.profile.id)


def rank(
    reference: SimilarityProfile,
    candidates: Iterable[SimilarityProfile],
    weights: SimilarityWeights,
    include_space: bool = True,
) -> list[ScoredCandidate]:
    """
    Puntúa, descarta los que no llegan a ``min_score`` y ordena.

    La paginación se aplica sobre esta lista completa, nunca antes.
    """
    scored = (
        score_candidate(reference, candidate, weights, include_space)
        for candidate in candidates
        if candidate.id != reference.id
    )
    kept = [item for item in scored if item.score >= weights.min_score]
    kept.sort(key=_sort_key)
    return kept


def paginate(items: list, page: int, limit: int) -> list:
    """Rebanada 1-indexada de una lista ya ordenada."""
    start = (page - 1) * limit
    return items[start:start + limit]
