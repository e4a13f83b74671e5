"""
Motor de matching.

Scorea propiedades contra criterios de clientes (y viceversa) en cinco
ejes ponderados: precio, ubicación, superficie, ambientes y tipo.
"""

from markler.exceptions import InvalidRequestError, MatchingError, MissingCriteriaError
from markler.matching.engine import MatchingEngine
from markler.matching.scoring import MatchTarget, ScoredTarget, score_target
from markler.matching.weights import combine_scores, normalize_weights

__all__ = [
    "MatchingEngine",
    "MatchTarget",
    "ScoredTarget",
    "score_target",
    "normalize_weights",
    "combine_scores",
    "MatchingError",
    "MissingCriteriaError",
    "InvalidRequestError",
]
