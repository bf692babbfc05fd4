"""
Script para consultar propiedades o proyectos similares.

Imprime la página de resultados como JSON (camelCase).

Uso:
    python -m terreno.scripts.run_similar --property-id <uuid>
    python -m terreno.scripts.run_similar --project-id <uuid> --page 2 --limit 5
    python -m terreno.scripts.run_similar --property-id <uuid> --min-score 20
"""

import argparse
import json
import sys
from typing import Optional

import structlog

from terreno.errors import NotFoundError
from terreno.logging_config import configure_logging
from terreno.models import SimilarityOverrides, SimilarityQuery
from terreno.similarity import SimilarityEngine

logger = structlog.get_logger()


def run_similar(
    property_id: Optional[str] = None,
    project_id: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    min_score: Optional[float] = None,
    search_radius: Optional[float] = None,
) -> dict:
    """Calcula la página de similares y la devuelve serializada."""
    query = SimilarityQuery(
        page=page,
        limit=limit,
        overrides=SimilarityOverrides(min_score=min_score, search_radius=search_radius),
    )
    engine = SimilarityEngine()

    if property_id:
        result = engine.similar_properties(property_id, query)
    else:
        result = engine.similar_projects(project_id, query)
    return result.to_dict()


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Lista propiedades/proyectos similares")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--property-id", help="UUID de la propiedad de referencia")
    target.add_argument("--project-id", help="UUID del proyecto de referencia")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=10)
    parser.add_argument("--min-score", type=float, default=None)
    parser.add_argument("--search-radius", type=float, default=None, help="Radio en km")
    args = parser.parse_args()

    configure_logging()

    try:
        payload = run_similar(
            property_id=args.property_id,
            project_id=args.project_id,
            page=args.page,
            limit=args.limit,
            min_score=args.min_score,
            search_radius=args.search_radius,
        )
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        sys.exit(0)

    except NotFoundError as e:
        logger.error("Referencia no encontrada", error=str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Consulta interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en consulta de similares", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
