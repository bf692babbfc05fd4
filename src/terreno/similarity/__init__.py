"""
Ranking de similitud.

Combina un pre-filtro grueso en el store con un score ponderado para
encontrar las propiedades o proyectos más parecidos a una referencia.
"""

from terreno.similarity.scorer import ScoredCandidate, score_candidate, rank, paginate
from terreno.similarity.candidates import build_prefilter
from terreno.similarity.engine import SimilarityEngine

__all__ = [
    "ScoredCandidate",
    "score_candidate",
    "rank",
    "paginate",
    "build_prefilter",
    "SimilarityEngine",
]
