"""
Script para completar tokens S2 faltantes.

Recorre la tabla en lotes de 1000 filas (ordenadas por id) y escribe
los tokens del grupo pedido. Se puede cortar entre lotes y volver a
correr: retoma con las filas que sigan sin tokens.

Uso:
    python -m terreno.scripts.run_backfill
    python -m terreno.scripts.run_backfill --group extended
    python -m terreno.scripts.run_backfill --group all --table projects
"""

import argparse
import sys

import structlog

from terreno.backfill import LEVEL_GROUPS, BackfillMigrator
from terreno.config import get_settings
from terreno.database import PropertyRepository, ProjectRepository
from terreno.logging_config import configure_logging

logger = structlog.get_logger()

REPOSITORIES = {
    "properties": PropertyRepository,
    "projects": ProjectRepository,
}


def run_backfill(group: str = "base", table: str = "properties"):
    """
    Ejecuta una pasada de backfill.

    Args:
        group: grupo de niveles (base = 12/16, extended = 6/8/10, all)
        table: tabla a completar
    """
    settings = get_settings()
    migrator = BackfillMigrator(
        repository=REPOSITORIES[table](),
        levels=LEVEL_GROUPS[group],
        max_attempts=settings.backfill_max_attempts,
    )
    return migrator.run()


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(
        description="Completa columnas de tokens S2 faltantes"
    )
    parser.add_argument(
        "--group",
        default="base",
        choices=sorted(LEVEL_GROUPS),
        help="Grupo de niveles a completar (default: base = 12/16)",
    )
    parser.add_argument(
        "--table",
        default="properties",
        choices=sorted(REPOSITORIES),
        help="Tabla a completar",
    )
    args = parser.parse_args()

    configure_logging()

    try:
        result = run_backfill(group=args.group, table=args.table)
        logger.info(
            "Backfill finalizado",
            table=result.table,
            levels=result.levels,
            processed=result.processed,
            batches=result.batches,
        )
        sys.exit(0)

    except KeyboardInterrupt:
        logger.info("Backfill interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en backfill", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
