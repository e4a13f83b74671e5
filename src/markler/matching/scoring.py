"""
Scoring por eje.

Cada scorer recibe el objetivo neutral (MatchTarget), los criterios y la
configuración, devuelve un entero en [0, 100] y agrega explicaciones a
las listas de razones del llamador.

Política común:
- Sin restricción en el eje: 100 (nada que descalificar).
- Dato faltante en el candidato: 50 neutral, nunca una excepción.

Los porcentajes se calculan en Decimal con 4 decimales (HALF_UP) y se
truncan a entero solo al producir el score del eje.
"""

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog

from markler.config import (
    AREA_TOLERANCE_PERCENTAGE,
    AREA_TOLERANCE_SCORE,
    BELOW_BUDGET_SCORE,
    BUDGET_FLEXIBILITY_MULTIPLIER,
    FLEXIBLE_BUDGET_SCORE,
    NEAR_LOCATION_SCORE,
    NEUTRAL_SCORE,
    ONE_ROOM_OFF_SCORE,
    PERCENT_PRECISION,
    PERFECT_SCORE,
    POSTAL_CODE_LENGTH,
    POSTAL_CODE_PROXIMITY_RANGE,
)
from markler.matching.weights import combine_scores
from markler.models import MatchConfig, Property, PropertyType, ScoreBreakdown, SearchCriteria

logger = structlog.get_logger()

_POSTAL_CODE_PATTERN = re.compile(rf"[0-9]{{{POSTAL_CODE_LENGTH}}}")
_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class MatchTarget:
    """
    Tupla neutral que se scorea contra unos criterios.

    Tanto "propiedades para un cliente" como "clientes para una
    propiedad" se reducen a esta forma, así ambos sentidos comparten
    exactamente la misma lógica.
    """

    price: Optional[Decimal] = None
    living_area_sqm: Optional[Decimal] = None
    rooms: Optional[Decimal] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    property_type: Optional[PropertyType] = None

    @classmethod
    def from_property(cls, prop: Property) -> "MatchTarget":
        return cls(
            price=prop.price,
            living_area_sqm=prop.living_area_sqm,
            rooms=prop.rooms,
            city=prop.address_city,
            postal_code=prop.address_postal_code,
            property_type=prop.property_type,
        )


@dataclass
class ScoredTarget:
    """Resultado de scorear un MatchTarget."""

    breakdown: ScoreBreakdown
    overall_score: int
    match_reasons: list[str] = field(default_factory=list)
    mismatch_reasons: list[str] = field(default_factory=list)


def _percent_off(value: Decimal, bound: Decimal) -> Decimal:
    """Desvío porcentual de value respecto de bound (4 decimales)."""
    if bound <= 0:
        # Cota no positiva: desvío total
        return _HUNDRED
    ratio = (abs(value - bound) / bound).quantize(PERCENT_PRECISION, rounding=ROUND_HALF_UP)
    return ratio * _HUNDRED


def _euros(amount: Decimal) -> str:
    return f"€{int(amount):,}"


def score_price(
    target: MatchTarget,
    criteria: SearchCriteria,
    config: MatchConfig,
    match_reasons: list[str],
    mismatch_reasons: list[str],
) -> int:
    """
    Score de precio (0-100).

    - 100: dentro de [min_budget, max_budget]
    - 85: hasta 10% sobre el máximo, si hay flexibilidad
    - 50-100: hasta 20% sobre el máximo (decae linealmente)
    - 0-50: más de 20% sobre el máximo
    - 30: por debajo del mínimo
    """
    if not criteria.has_budget_constraint():
        match_reasons.append("No budget constraints specified")
        return PERFECT_SCORE

    if target.price is None:
        match_reasons.append("Price not specified for this property")
        return NEUTRAL_SCORE

    price = target.price
    min_budget = criteria.min_budget
    max_budget = criteria.max_budget

    within_min = min_budget is None or price >= min_budget
    within_max = max_budget is None or price <= max_budget

    if within_min and within_max:
        match_reasons.append(f"Price {_euros(price)} is within budget range")
        return PERFECT_SCORE

    if max_budget is not None and price > max_budget:
        flexible = config.allow_budget_flexibility
        if flexible and within_min and price <= max_budget * BUDGET_FLEXIBILITY_MULTIPLIER:
            match_reasons.append(
                f"Price {_euros(price)} is slightly over budget but within 10% tolerance"
            )
            return FLEXIBLE_BUDGET_SCORE

        percent_over = _percent_off(price, max_budget)
        if percent_over <= 20:
            mismatch_reasons.append(
                f"Price {_euros(price)} is {percent_over:.1f}% over budget"
            )
            score = max(NEUTRAL_SCORE, PERFECT_SCORE - int(percent_over))
            # Tope en 85: el score de precio no puede subir cuando sube el precio
            if flexible:
                score = min(score, FLEXIBLE_BUDGET_SCORE)
            return score

        mismatch_reasons.append(
            f"Price {_euros(price)} significantly exceeds budget ({percent_over:.1f}% over)"
        )
        return max(0, NEUTRAL_SCORE - (int(percent_over) - 20))

    mismatch_reasons.append(f"Price {_euros(price)} is below minimum budget")
    return BELOW_BUDGET_SCORE


def _is_postal_code(location: str) -> bool:
    return _POSTAL_CODE_PATTERN.fullmatch(location) is not None


def _postal_distance(postal_code: str, preferred: str) -> Optional[int]:
    try:
        return abs(int(postal_code) - int(preferred))
    except ValueError:
        logger.debug(
            "Código postal no numérico, se omite proximidad",
            postal_code=postal_code,
            preferred=preferred,
        )
        return None


def score_location(
    target: MatchTarget,
    criteria: SearchCriteria,
    config: MatchConfig,
    match_reasons: list[str],
    mismatch_reasons: list[str],
) -> int:
    """
    Score de ubicación (0-100).

    - 100: ciudad (sin distinguir mayúsculas) o código postal exacto
    - 80: código postal a <= 50 de uno preferido (salvo exact_location_match)
    - 0: ninguna ubicación preferida coincide
    """
    locations = criteria.preferred_locations
    if not locations:
        match_reasons.append("No location preferences specified")
        return PERFECT_SCORE

    city = target.city.strip() if target.city else None
    postal_code = target.postal_code.strip() if target.postal_code else None

    if not city and not postal_code:
        match_reasons.append("Property location not fully specified")
        return NEUTRAL_SCORE

    city_key = city.casefold() if city else None

    # Coincidencias exactas antes que cualquier proximidad
    for location in locations:
        if city_key and location.casefold() == city_key:
            match_reasons.append(f"Property is in preferred city: {city}")
            return PERFECT_SCORE
        if postal_code and _is_postal_code(location) and postal_code == location:
            match_reasons.append(f"Property postal code {postal_code} matches exactly")
            return PERFECT_SCORE

    if postal_code and not config.exact_location_match:
        for location in locations:
            if not _is_postal_code(location):
                continue
            distance = _postal_distance(postal_code, location)
            if distance is not None and distance <= POSTAL_CODE_PROXIMITY_RANGE:
                match_reasons.append(
                    f"Property postal code {postal_code} is near preferred location "
                    f"{location} (within {POSTAL_CODE_PROXIMITY_RANGE})"
                )
                return NEAR_LOCATION_SCORE

    mismatch_reasons.append(
        f"Property location {city or postal_code} does not match preferred locations"
    )
    return 0


def score_area(
    target: MatchTarget,
    criteria: SearchCriteria,
    config: MatchConfig,
    match_reasons: list[str],
    mismatch_reasons: list[str],
) -> int:
    """
    Score de superficie habitable (0-100).

    - 100: dentro del rango
    - 85: hasta 15% sobre el máximo
    - 100 - % sobre el máximo, o 100 - % bajo el mínimo, con piso 0
    """
    if not criteria.has_area_constraint():
        match_reasons.append("No area constraints specified")
        return PERFECT_SCORE

    if target.living_area_sqm is None:
        match_reasons.append("Living area not specified for this property")
        return NEUTRAL_SCORE

    area = target.living_area_sqm
    min_area = Decimal(criteria.min_area_sqm) if criteria.min_area_sqm is not None else None
    max_area = Decimal(criteria.max_area_sqm) if criteria.max_area_sqm is not None else None

    within_min = min_area is None or area >= min_area
    within_max = max_area is None or area <= max_area

    if within_min and within_max:
        match_reasons.append(f"Living area {area:.0f} m² is within desired range")
        return PERFECT_SCORE

    if max_area is not None and area > max_area:
        if area <= max_area * (1 + AREA_TOLERANCE_PERCENTAGE):
            match_reasons.append(
                f"Living area {area:.0f} m² is slightly larger than preferred "
                f"(within 15% tolerance)"
            )
            return AREA_TOLERANCE_SCORE

        # Porcentaje sobre el máximo, no sobre el máximo con tolerancia
        percent_over = _percent_off(area, max_area)
        mismatch_reasons.append(
            f"Living area {area:.0f} m² is {percent_over:.1f}% larger than preferred maximum"
        )
        return max(0, PERFECT_SCORE - int(percent_over))

    percent_under = _percent_off(area, min_area)
    mismatch_reasons.append(
        f"Living area {area:.0f} m² is {percent_under:.1f}% smaller than preferred minimum"
    )
    return max(0, PERFECT_SCORE - int(percent_under))


def score_rooms(
    target: MatchTarget,
    criteria: SearchCriteria,
    config: MatchConfig,
    match_reasons: list[str],
    mismatch_reasons: list[str],
) -> int:
    """
    Score de ambientes (0-100), simétrico para exceso y defecto.

    - 100: dentro del rango
    - 75: hasta 1 ambiente fuera
    - 50: hasta 2 ambientes fuera
    - 50 - 10 por cada ambiente entero extra, con piso 0
    """
    if not criteria.has_room_constraint():
        match_reasons.append("No room count constraints specified")
        return PERFECT_SCORE

    if target.rooms is None:
        match_reasons.append("Room count not specified for this property")
        return NEUTRAL_SCORE

    rooms = target.rooms
    min_rooms = criteria.min_rooms
    max_rooms = criteria.max_rooms

    within_min = min_rooms is None or rooms >= min_rooms
    within_max = max_rooms is None or rooms <= max_rooms

    if within_min and within_max:
        match_reasons.append(f"{rooms:.1f} rooms is within desired range")
        return PERFECT_SCORE

    if max_rooms is not None and rooms > max_rooms:
        difference = rooms - max_rooms
        direction = "more"
    else:
        difference = min_rooms - rooms
        direction = "less"

    if difference <= 1:
        match_reasons.append(f"{rooms:.1f} rooms is 1 room {direction} than preferred")
        return ONE_ROOM_OFF_SCORE
    if difference <= 2:
        mismatch_reasons.append(f"{rooms:.1f} rooms is 2 rooms {direction} than preferred")
        return NEUTRAL_SCORE

    mismatch_reasons.append(
        f"{rooms:.1f} rooms is significantly {direction} than preferred"
    )
    return max(0, NEUTRAL_SCORE - (int(difference) - 2) * 10)


def score_property_type(
    target: MatchTarget,
    criteria: SearchCriteria,
    config: MatchConfig,
    match_reasons: list[str],
    mismatch_reasons: list[str],
) -> int:
    """
    Score de características (0-100).

    Por ahora solo compara el tipo de inmueble contra los aceptados.
    """
    accepted = criteria.property_types
    if not accepted:
        match_reasons.append("No specific property type preferences")
        return PERFECT_SCORE

    if target.property_type is None:
        match_reasons.append("Property type not specified")
        return NEUTRAL_SCORE

    type_name = target.property_type.value.casefold()
    display_name = target.property_type.english_name

    if any(type_name == preferred.casefold() for preferred in accepted):
        match_reasons.append(f"Property type {display_name} matches preferences")
        return PERFECT_SCORE

    mismatch_reasons.append(f"Property type {display_name} does not match preferred types")
    return 0


def score_target(
    target: MatchTarget,
    criteria: SearchCriteria,
    config: MatchConfig,
) -> ScoredTarget:
    """
    Scorea un objetivo en los cinco ejes y combina con los pesos normalizados.

    Args:
        target: Objetivo neutral (propiedad adaptada)
        criteria: Criterios contra los que se compara
        config: Pesos y opciones del pedido

    Returns:
        ScoredTarget con desglose, score general y razones en orden de eje
    """
    match_reasons: list[str] = []
    mismatch_reasons: list[str] = []

    breakdown = ScoreBreakdown(
        price_score=score_price(target, criteria, config, match_reasons, mismatch_reasons),
        location_score=score_location(target, criteria, config, match_reasons, mismatch_reasons),
        area_score=score_area(target, criteria, config, match_reasons, mismatch_reasons),
        room_score=score_rooms(target, criteria, config, match_reasons, mismatch_reasons),
        feature_score=score_property_type(
            target, criteria, config, match_reasons, mismatch_reasons
        ),
    )
    overall = combine_scores(breakdown.as_tuple(), config.raw_weights())

    return ScoredTarget(
        breakdown=breakdown,
        overall_score=overall,
        match_reasons=match_reasons,
        mismatch_reasons=mismatch_reasons,
    )
