"""
Backfill de columnas de tokens S2 para filas creadas antes del índice.
"""

from terreno.backfill.migrator import (
    BATCH_SIZE,
    LEVEL_GROUPS,
    BackfillMigrator,
    BackfillResult,
)

__all__ = [
    "BATCH_SIZE",
    "LEVEL_GROUPS",
    "BackfillMigrator",
    "BackfillResult",
]
