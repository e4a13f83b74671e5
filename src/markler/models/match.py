"""
Modelos de Matching

Configuración por pedido, desglose de scores y resultados del motor.
Todos son objetos de valor efímeros: nada se persiste.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from markler.exceptions import InvalidRequestError
from markler.models.client import Client
from markler.models.criteria import SearchCriteria
from markler.models.property import Property


class MatchConfig(BaseModel):
    """
    Parámetros de scoring de un pedido.

    Los pesos son crudos (0-100) y se normalizan a fracciones que suman
    1.0 antes de combinar los scores por eje.
    """

    model_config = ConfigDict(frozen=True)

    match_threshold: int = Field(70, ge=0, le=100, description="Score mínimo a conservar")
    max_results: int = Field(50, ge=1, le=500, description="Tope de resultados")

    # Pesos crudos
    price_weight: int = Field(30, ge=0, le=100)
    location_weight: int = Field(25, ge=0, le=100)
    area_weight: int = Field(20, ge=0, le=100)
    room_weight: int = Field(15, ge=0, le=100)
    feature_weight: int = Field(10, ge=0, le=100)

    # Opciones
    allow_budget_flexibility: bool = Field(
        True, description="Ensancha el máximo de presupuesto un 10%"
    )
    exact_location_match: bool = Field(
        False, description="Sin proximidad por código postal"
    )
    include_unavailable: bool = Field(
        False, description="No descartar propiedades no disponibles"
    )

    @classmethod
    def build(cls, **options) -> "MatchConfig":
        """
        Construye la configuración a partir de opciones reconocidas.

        Las opciones en None se ignoran (se usa el default).

        Raises:
            InvalidRequestError: Si alguna opción está fuera de rango
        """
        values = {k: v for k, v in options.items() if v is not None}
        unknown = set(values) - set(cls.model_fields)
        if unknown:
            raise InvalidRequestError(
                f"Opciones de matching desconocidas: {', '.join(sorted(unknown))}"
            )
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidRequestError(str(e)) from e

    @classmethod
    def from_settings(cls, settings, **overrides) -> "MatchConfig":
        """Configuración con los defaults de Settings y overrides opcionales."""
        defaults = {
            "match_threshold": settings.match_threshold,
            "max_results": settings.max_results,
            "price_weight": settings.price_weight,
            "location_weight": settings.location_weight,
            "area_weight": settings.area_weight,
            "room_weight": settings.room_weight,
            "feature_weight": settings.feature_weight,
            "allow_budget_flexibility": settings.allow_budget_flexibility,
            "exact_location_match": settings.exact_location_match,
            "include_unavailable": settings.include_unavailable,
        }
        defaults.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**defaults)

    def raw_weights(self) -> tuple[int, int, int, int, int]:
        return (
            self.price_weight,
            self.location_weight,
            self.area_weight,
            self.room_weight,
            self.feature_weight,
        )

    def normalized_weights(self) -> tuple[float, float, float, float, float]:
        from markler.matching.weights import normalize_weights

        return normalize_weights(*self.raw_weights())


class ScoreBreakdown(BaseModel):
    """Scores por eje, cada uno en [0, 100]."""

    price_score: int = Field(ge=0, le=100)
    location_score: int = Field(ge=0, le=100)
    area_score: int = Field(ge=0, le=100)
    room_score: int = Field(ge=0, le=100)
    feature_score: int = Field(ge=0, le=100)

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (
            self.price_score,
            self.location_score,
            self.area_score,
            self.room_score,
            self.feature_score,
        )

    def average(self) -> float:
        scores = self.as_tuple()
        return sum(scores) / len(scores)

    def lowest(self) -> int:
        return min(self.as_tuple())

    def highest(self) -> int:
        return max(self.as_tuple())


class MatchResult(BaseModel):
    """Resultado anotado para un candidato."""

    candidate_id: Optional[str] = Field(None, description="ID del candidato scoreado")
    candidate_kind: Literal["property", "client"] = Field(...)
    candidate: Union[Property, Client, None] = Field(
        None, description="El candidato tal como se recibió"
    )
    overall_score: int = Field(..., ge=0, le=100)
    breakdown: ScoreBreakdown
    match_reasons: list[str] = Field(default_factory=list)
    mismatch_reasons: list[str] = Field(default_factory=list)


class MatchResponse(BaseModel):
    """Respuesta completa de una invocación del motor."""

    results: list[MatchResult] = Field(default_factory=list)
    total_matches: int = Field(0, description="Sobre el umbral, antes de truncar")
    returned_matches: int = Field(0, description="Después de truncar")
    match_threshold: int = Field(...)
    execution_time_ms: int = Field(0)


class MatchRequest(BaseModel):
    """
    Pedido de matching con selección de modo.

    Exactamente uno de client_id, property_id o custom_criteria.
    """

    client_id: Optional[str] = None
    property_id: Optional[str] = None
    custom_criteria: Optional[SearchCriteria] = None
    # None = defaults de Settings del motor
    config: Optional[MatchConfig] = None

    def mode_count(self) -> int:
        return sum(
            1
            for selected in (self.client_id, self.property_id, self.custom_criteria)
            if selected is not None
        )

    def validate_mode(self) -> None:
        """
        Raises:
            InvalidRequestError: Si no hay exactamente un modo seleccionado
        """
        count = self.mode_count()
        if count == 0:
            raise InvalidRequestError(
                "Se requiere client_id, property_id o custom_criteria"
            )
        if count > 1:
            raise InvalidRequestError(
                "Solo se admite un modo de matching por pedido"
            )
