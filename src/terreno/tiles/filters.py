"""
Traducción de TileFilters a predicado del store.

Se recorre campo por campo y solo los presentes aportan condiciones.

Ojo: el filtro de ciudades se suma al OR de la búsqueda de texto en vez
de combinarse con AND. Un listing entra si matchea el texto O alguna de
las ciudades pedidas. Se preserva tal cual; ver DESIGN.md.
"""

from typing import Optional

from terreno.models import TileFilters
from terreno.predicates import (
    GTE,
    IEQ,
    ILIKE,
    IN,
    EQ,
    LTE,
    AnyOf,
    Condition,
    Predicate,
)


def build_predicate(filters: Optional[TileFilters]) -> list[Predicate]:
    """Lista de predicados (combinados con AND) para los filtros presentes."""
    if filters is None:
        return []

    predicates: list[Predicate] = []
    any_of: list[Predicate] = []

    if filters.search:
        any_of.append(Condition("title", ILIKE, filters.search))
        any_of.append(Condition("description", ILIKE, filters.search))

    if filters.types:
        predicates.append(Condition("type", IN, tuple(filters.types)))
    if filters.categories:
        predicates.append(Condition("category", IN, tuple(filters.categories)))
    if filters.unit_statuses:
        predicates.append(Condition("unit_status", IN, tuple(filters.unit_statuses)))

    if filters.cities:
        any_of.extend(Condition("city", IEQ, city) for city in filters.cities)

    if filters.owner_role:
        predicates.append(Condition("owner.role", EQ, filters.owner_role))

    predicates.extend(_range("price", filters.min_price, filters.max_price))
    predicates.extend(_range("space", filters.min_space, filters.max_space))

    if filters.broker_id:
        predicates.append(Condition("broker_id", EQ, filters.broker_id))
    if filters.developer_id:
        predicates.append(Condition("project.developer_id", EQ, filters.developer_id))
    if filters.project_id:
        predicates.append(Condition("project_id", EQ, filters.project_id))

    if any_of:
        predicates.append(AnyOf(tuple(any_of)))

    return predicates


def _range(column: str, minimum: Optional[float], maximum: Optional[float]) -> list[Predicate]:
    out: list[Predicate] = []
    if minimum is not None:
        out.append(Condition(column, GTE, minimum))
    if maximum is not None:
        out.append(Condition(column, LTE, maximum))
    return out
