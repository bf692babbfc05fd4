"""
Repositorios para operaciones sobre Supabase.

Cada repositorio maneja una tabla/entidad específica. Los servicios les
pasan predicados armados con terreno.predicates y acá se traducen a la
API de PostgREST.
"""

from typing import Iterable, Optional, Sequence

import structlog

from terreno.database.supabase_client import get_supabase_client, SupabaseClient
from terreno.geo import cell_tokens_for
from terreno.models import Project, Property, SpatialPoint
from terreno.predicates import (
    EQ,
    GTE,
    IEQ,
    ILIKE,
    IN,
    LTE,
    NEQ,
    AllOf,
    AnyOf,
    Condition,
    Predicate,
    render_postgrest,
)

logger = structlog.get_logger()

# RPC que aplica un lote de tokens en una sola transacción
# (ver supabase/migrations/0001_cell_tokens.sql)
APPLY_TOKEN_BATCH_RPC = "apply_cell_token_batch"


def apply_predicates(query, predicates: Iterable[Predicate]):
    """Aplica predicados (combinados con AND) sobre un query builder de PostgREST."""
    for predicate in predicates:
        if isinstance(predicate, AnyOf):
            query = query.or_(render_postgrest(predicate))
        elif isinstance(predicate, AllOf):
            query = apply_predicates(query, predicate.branches)
        else:
            query = _apply_condition(query, predicate)
    return query


def _apply_condition(query, cond: Condition):
    if cond.op == EQ:
        return query.eq(cond.column, cond.value)
    if cond.op == NEQ:
        return query.neq(cond.column, cond.value)
    if cond.op == IN:
        return query.in_(cond.column, list(cond.value))
    if cond.op == GTE:
        return query.gte(cond.column, cond.value)
    if cond.op == LTE:
        return query.lte(cond.column, cond.value)
    if cond.op == ILIKE:
        return query.ilike(cond.column, f"%{_escape_like(cond.value)}%")
    if cond.op == IEQ:
        return query.ilike(cond.column, _escape_like(cond.value))
    raise ValueError(f"Operador no soportado: {cond.op}")


def _escape_like(value) -> str:
    return str(value).replace("%", r"\%").replace("_", r"\_")


def _embedded_tables(predicates: Iterable[Predicate]) -> set[str]:
    """Tablas embebidas referenciadas por columnas ``tabla.columna``."""
    found: set[str] = set()
    for predicate in predicates:
        if isinstance(predicate, (AnyOf, AllOf)):
            found |= _embedded_tables(predicate.branches)
        elif "." in predicate.column:
            found.add(predicate.column.split(".", 1)[0])
    return found


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client


class CellIndexedRepository(BaseRepository):
    """
    Operaciones comunes a tablas con columnas de tokens S2
    (``properties`` y ``projects``).
    """

    TABLE = ""

    def get_row(self, entity_id: str, select: str = "*") -> Optional[dict]:
        """Obtiene una fila cruda por su UUID."""
        response = (
            self.client.table(self.TABLE)
            .select(select)
            .eq("id", entity_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def update_location(self, entity_id: str, latitude: float, longitude: float) -> dict:
        """
        Mueve el punto de una fila y recalcula todos sus tokens.

        Raises:
            pydantic.ValidationError: coordenadas fuera de dominio
        """
        point = SpatialPoint(latitude=latitude, longitude=longitude)
        data = {
            "latitude": point.latitude,
            "longitude": point.longitude,
            **cell_tokens_for(point.latitude, point.longitude),
        }
        response = (
            self.client.table(self.TABLE)
            .update(data)
            .eq("id", entity_id)
            .execute()
        )
        logger.info("Ubicación actualizada", table=self.TABLE, id=entity_id)
        return response.data[0] if response.data else {}

    def find_missing_tokens(self, columns: Sequence[str], limit: int) -> list[dict]:
        """
        Filas con punto cargado y alguna columna de token nula o vacía,
        ordenadas por id.
        """
        missing = ",".join(f"{column}.is.null,{column}.eq." for column in columns)
        response = (
            self.client.table(self.TABLE)
            .select("id, latitude, longitude")
            .not_.is_("latitude", "null")
            .not_.is_("longitude", "null")
            .or_(missing)
            .order("id")
            .limit(limit)
            .execute()
        )
        return response.data

    def apply_token_batch(self, updates: list[dict]) -> int:
        """
        Escribe un lote de tokens de forma atómica.

        Una sola llamada a la RPC apply_cell_token_batch: corre en una
        única transacción de Postgres, así que si falla no queda ninguna
        fila del lote aplicada y el lote entero se puede reintentar.

        Args:
            updates: [{"id": ..., "s2_l12": ..., "s2_l16": ...}, ...]

        Returns:
            Cantidad de filas actualizadas
        """
        if not updates:
            return 0
        result = self.client.execute_rpc(
            APPLY_TOKEN_BATCH_RPC,
            {"p_table": self.TABLE, "p_rows": updates},
        )
        return result if isinstance(result, int) else len(updates)

    def find_similarity_candidates(
        self,
        exclude_id: str,
        prefilter: Predicate,
        select: str,
        limit: int,
    ) -> list[dict]:
        """Candidatos que pasan el pre-filtro grueso, sin la referencia."""
        query = self.client.table(self.TABLE).select(select).neq("id", exclude_id)
        query = apply_predicates(query, [prefilter])
        response = query.order("id").limit(limit).execute()
        return response.data


class PropertyRepository(CellIndexedRepository):
    """Repositorio para propiedades."""

    TABLE = "properties"

    # Proyección para el mapa: columnas livianas + portada + rol del dueño
    TILE_SELECT = (
        "id, title, price, currency, city, space, type, category, unit_status, "
        "latitude, longitude, number_of_living_rooms, number_of_rooms, "
        "number_of_kitchen, number_of_wc, number_of_floors, street_width, "
        "discount_percentage, media(url, created_at), "
        "owner:users!properties_owner_id_fkey{inner}(role, broker:brokers(license_number))"
    )

    CANDIDATE_SELECT = (
        "id, title, type, category, city, price, space, latitude, longitude, "
        "media(url, created_at)"
    )

    def create(self, listing: Property) -> dict:
        """
        Inserta una propiedad con sus tokens S2 calculados.

        Returns:
            El registro insertado con su ID
        """
        data = listing.to_db_dict()
        response = self.client.table(self.TABLE).insert(data).execute()
        logger.info("Propiedad creada", title=listing.title, city=listing.city)
        return response.data[0] if response.data else {}

    def get_by_id(self, property_id: str) -> Optional[dict]:
        """Obtiene una propiedad por su UUID."""
        return self.get_row(property_id, select="*, media(url, created_at)")

    def find_in_cells(
        self,
        column: str,
        tokens: Iterable[str],
        predicates: Sequence[Predicate],
        limit: int,
    ) -> list[dict]:
        """
        Propiedades cuyas celdas están en ``tokens``, filtradas y
        ordenadas por id ascendente, hasta ``limit`` filas.
        """
        tokens = sorted(tokens)
        if not tokens:
            return []

        embedded = _embedded_tables(predicates)
        select = self.TILE_SELECT.format(inner="!inner" if "owner" in embedded else "")
        if "project" in embedded:
            select += ", project:projects!inner(developer_id)"

        query = self.client.table(self.TABLE).select(select).in_(column, tokens)
        query = apply_predicates(query, predicates)
        response = query.order("id").limit(limit).execute()
        return response.data


class ProjectRepository(CellIndexedRepository):
    """Repositorio para proyectos."""

    TABLE = "projects"

    CANDIDATE_SELECT = (
        "id, name, type, category, city, latitude, longitude, "
        "properties(price, space), media(url, created_at)"
    )

    def create(self, project: Project) -> dict:
        """Inserta un proyecto con sus tokens S2 calculados."""
        data = project.to_db_dict()
        response = self.client.table(self.TABLE).insert(data).execute()
        logger.info("Proyecto creado", name=project.name, city=project.city)
        return response.data[0] if response.data else {}

    def get_by_id(self, project_id: str) -> Optional[dict]:
        """Obtiene un proyecto con los precios/superficies de sus unidades."""
        return self.get_row(project_id, select=self.CANDIDATE_SELECT)
