"""
Backfill de tokens S2.

Completa columnas de tokens nulas o vacías en filas viejas, en lotes
acotados y ordenados por id. Cada lote se escribe en una sola
transacción; si falla, no queda nada aplicado de ese lote y los lotes
anteriores siguen confirmados. El progreso sale del estado de los datos
(no hay cursor), así que cortar y volver a correr retoma donde quedó.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import structlog
from tenacity import Retrying, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from terreno.database import CellIndexedRepository
from terreno.errors import BackfillStalledError
from terreno.geo import STORAGE_LEVELS, cell_tokens_for, column_for_level

logger = structlog.get_logger()

BATCH_SIZE = 1000

# Grupos de columnas que se pueden completar por separado
LEVEL_GROUPS: dict[str, tuple[int, ...]] = {
    "base": (12, 16),
    "extended": (6, 8, 10),
    "all": STORAGE_LEVELS,
}


@dataclass
class BackfillResult:
    """Resultado de una corrida."""

    table: str
    levels: tuple[int, ...]
    processed: int = 0
    batches: int = 0


class BackfillMigrator:
    """
    Corre el backfill de un grupo de niveles sobre una tabla.

    Es idempotente: una segunda corrida tras una exitosa no encuentra
    filas y termina de inmediato. No correr dos instancias del mismo
    grupo a la vez (no hay claim de filas).
    """

    def __init__(
        self,
        repository: CellIndexedRepository,
        levels: Sequence[int] = LEVEL_GROUPS["base"],
        batch_size: int = BATCH_SIZE,
        max_attempts: int = 3,
        wait: Optional[wait_base] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size debe ser >= 1")
        self.repository = repository
        self.levels = tuple(levels)
        self.columns = [column_for_level(level) for level in self.levels]
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.wait = wait or wait_exponential(multiplier=1, min=2, max=10)

    def build_updates(self, rows: list[dict]) -> list[dict]:
        """
        Calcula los tokens de todo el lote antes de escribir nada.

        Raises:
            InvalidCoordinatesError: si alguna fila tiene un punto inválido
        """
        return [
            {
                "id": row["id"],
                **cell_tokens_for(row["latitude"], row["longitude"], self.levels),
            }
            for row in rows
        ]

    def _write_batch(self, updates: list[dict]) -> None:
        for attempt in Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Reintentando lote",
                        table=self.repository.TABLE,
                        attempt=attempt.retry_state.attempt_number,
                    )
                self.repository.apply_token_batch(updates)

    def run(self) -> BackfillResult:
        """Procesa lotes hasta que no quede ninguna fila pendiente."""
        table = self.repository.TABLE
        result = BackfillResult(table=table, levels=self.levels)
        previous_ids: Optional[list] = None

        logger.info("Iniciando backfill de tokens S2", table=table, levels=self.levels)

        while True:
            rows = self.repository.find_missing_tokens(self.columns, limit=self.batch_size)
            if not rows:
                break

            ids = [row["id"] for row in rows]
            if ids == previous_ids:
                raise BackfillStalledError(
                    f"El lote de {len(ids)} filas de {table} sigue pendiente tras escribirse"
                )

            logger.info("Procesando lote", table=table, size=len(rows))
            updates = self.build_updates(rows)
            self._write_batch(updates)

            previous_ids = ids
            result.processed += len(rows)
            result.batches += 1
            logger.info("Lote confirmado", table=table, processed=result.processed)

        logger.info(
            "Backfill completo",
            table=table,
            processed=result.processed,
            batches=result.batches,
        )
        return result
