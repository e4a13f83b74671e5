"""
Modelos de datos del sistema.

- Entidades: Property, Client, SearchCriteria
- Matching: MatchConfig, MatchRequest, MatchResult, MatchResponse
"""

from markler.models.property import Property, PropertyType, PropertyStatus
from markler.models.criteria import SearchCriteria
from markler.models.client import Client
from markler.models.match import (
    MatchConfig,
    MatchRequest,
    MatchResponse,
    MatchResult,
    ScoreBreakdown,
)

__all__ = [
    # Entidades
    "Property",
    "PropertyType",
    "PropertyStatus",
    "SearchCriteria",
    "Client",
    # Matching
    "MatchConfig",
    "MatchRequest",
    "MatchResponse",
    "MatchResult",
    "ScoreBreakdown",
]
