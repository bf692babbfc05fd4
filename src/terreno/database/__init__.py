"""
Módulo de base de datos.

Provee acceso a Supabase y a las tablas indexadas por celdas S2.
"""

from terreno.database.supabase_client import get_supabase_client, SupabaseClient
from terreno.database.repositories import (
    CellIndexedRepository,
    PropertyRepository,
    ProjectRepository,
    apply_predicates,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "CellIndexedRepository",
    "PropertyRepository",
    "ProjectRepository",
    "apply_predicates",
]
