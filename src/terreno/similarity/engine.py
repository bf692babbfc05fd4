"""
Motor de similitud entre propiedades / proyectos.

Implementa:
- Pre-filtro grueso en el store (tipo+categoría, ciudad, caja, bandas)
- Scoring ponderado por candidato
- Filtro por score mínimo, orden y paginación
"""

from typing import Optional

import structlog

from terreno.config import get_settings
from terreno.database import PropertyRepository, ProjectRepository
from terreno.errors import NotFoundError
from terreno.models import (
    DEFAULT_WEIGHTS,
    PageMeta,
    RankedSummary,
    SimilarityPage,
    SimilarityProfile,
    SimilarityQuery,
    SimilarityWeights,
    resolve,
)
from terreno.models.project import unit_averages
from terreno.models.property import first_media_url
from terreno.similarity.candidates import build_prefilter
from terreno.similarity.scorer import ScoredCandidate, paginate, rank

logger = structlog.get_logger()


def property_profile(row: dict) -> SimilarityProfile:
    """Perfil de similitud de una fila de 'properties'."""
    return SimilarityProfile(
        id=str(row["id"]),
        type=row.get("type"),
        category=row.get("category"),
        city=row.get("city"),
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        price=_to_float(row.get("price")),
        space=_to_float(row.get("space")),
    )


def project_profile(row: dict) -> SimilarityProfile:
    """
    Perfil de similitud de una fila de 'projects'.

    El precio es el promedio de las unidades embebidas. Tolera columnas
    nulas igual que property_profile: un proyecto sin punto se puntúa
    sin ubicación.
    """
    average_price, _ = unit_averages(row.get("properties"))
    return SimilarityProfile(
        id=str(row["id"]),
        type=row.get("type"),
        category=row.get("category"),
        city=row.get("city"),
        latitude=_to_float(row.get("latitude")),
        longitude=_to_float(row.get("longitude")),
        price=average_price,
        space=None,
    )


def _to_float(value) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class SimilarityEngine:
    """
    Ranking de "similares a X".

    Flujo:
    1. Resolver la configuración efectiva (defaults + overrides)
    2. Cargar la referencia (NotFoundError si no existe)
    3. Traer candidatos con el pre-filtro grueso
    4. Puntuar, filtrar por min_score y ordenar
    5. Paginar sobre la lista completa
    """

    def __init__(
        self,
        property_repo: Optional[PropertyRepository] = None,
        project_repo: Optional[ProjectRepository] = None,
        defaults: SimilarityWeights = DEFAULT_WEIGHTS,
        candidate_limit: Optional[int] = None,
    ):
        self.property_repo = property_repo or PropertyRepository()
        self.project_repo = project_repo or ProjectRepository()
        self.defaults = defaults
        self.candidate_limit = candidate_limit or get_settings().similarity_candidate_limit

    def similar_properties(
        self, property_id: str, query: Optional[SimilarityQuery] = None
    ) -> SimilarityPage:
        """
        Propiedades similares a ``property_id``.

        Raises:
            NotFoundError: si la propiedad no existe
        """
        query = query or SimilarityQuery()
        weights = resolve(self.defaults, query.overrides)

        row = self.property_repo.get_by_id(property_id)
        if not row:
            raise NotFoundError("Propiedad", property_id)
        reference = property_profile(row)

        prefilter = build_prefilter(reference, weights, include_bands=True)
        if not prefilter.branches:
            return self._empty_page(query)

        rows = self.property_repo.find_similarity_candidates(
            exclude_id=reference.id,
            prefilter=prefilter,
            select=PropertyRepository.CANDIDATE_SELECT,
            limit=self.candidate_limit,
        )
        by_id = {str(r["id"]): r for r in rows}
        ranked = rank(
            reference,
            (property_profile(r) for r in rows),
            weights,
            include_space=True,
        )

        logger.info(
            "Similares calculados",
            entity="property",
            reference_id=property_id,
            candidates=len(rows),
            kept=len(ranked),
        )
        return self._page(ranked, by_id, query, title_key="title")

    def similar_projects(
        self, project_id: str, query: Optional[SimilarityQuery] = None
    ) -> SimilarityPage:
        """
        Proyectos similares a ``project_id``. No puntúan superficie ni
        usan bandas de precio/superficie en el pre-filtro.

        Raises:
            NotFoundError: si el proyecto no existe
        """
        query = query or SimilarityQuery()
        weights = resolve(self.defaults, query.overrides)

        row = self.project_repo.get_by_id(project_id)
        if not row:
            raise NotFoundError("Proyecto", project_id)
        reference = project_profile(row)

        prefilter = build_prefilter(reference, weights, include_bands=False)
        if not prefilter.branches:
            return self._empty_page(query)

        rows = self.project_repo.find_similarity_candidates(
            exclude_id=reference.id,
            prefilter=prefilter,
            select=ProjectRepository.CANDIDATE_SELECT,
            limit=self.candidate_limit,
        )
        by_id = {str(r["id"]): r for r in rows}
        ranked = rank(
            reference,
            (project_profile(r) for r in rows),
            weights,
            include_space=False,
        )

        logger.info(
            "Similares calculados",
            entity="project",
            reference_id=project_id,
            candidates=len(rows),
            kept=len(ranked),
        )
        return self._page(ranked, by_id, query, title_key="name")

    def _page(
        self,
        ranked: list[ScoredCandidate],
        rows_by_id: dict[str, dict],
        query: SimilarityQuery,
        title_key: str,
    ) -> SimilarityPage:
        page_items = paginate(ranked, query.page, query.limit)
        data = [
            self._summary(item, rows_by_id[item.profile.id], title_key)
            for item in page_items
        ]
        return SimilarityPage(
            data=data,
            meta=PageMeta.build(total=len(ranked), page=query.page, limit=query.limit),
        )

    def _empty_page(self, query: SimilarityQuery) -> SimilarityPage:
        return SimilarityPage(
            data=[], meta=PageMeta.build(total=0, page=query.page, limit=query.limit)
        )

    @staticmethod
    def _summary(item: ScoredCandidate, row: dict, title_key: str) -> RankedSummary:
        profile = item.profile
        location = None
        if profile.latitude is not None and profile.longitude is not None:
            location = {"lat": profile.latitude, "lng": profile.longitude}
        return RankedSummary(
            id=profile.id,
            title=row.get(title_key) or "",
            type=profile.type,
            category=profile.category,
            city=profile.city,
            price=profile.price,
            space=profile.space,
            location=location,
            thumbnail=first_media_url(row.get("media")),
            score=item.score,
            distance_km=round(item.distance_km, 3) if item.distance_km is not None else None,
        )
