"""
Normalización de pesos y combinación de scores.

Convierte los cinco pesos crudos (0-100) en fracciones que suman 1.0,
preservando las proporciones. Funciones puras, seguras entre threads.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

AXIS_COUNT = 5
_UNIFORM_WEIGHTS = (1,) * AXIS_COUNT
_ONE = Decimal(1)


def _effective_weights(weights: Sequence[int]) -> tuple[Sequence[int], int]:
    if len(weights) != AXIS_COUNT:
        raise ValueError(
            f"Se esperaban {AXIS_COUNT} pesos, se recibieron {len(weights)}"
        )
    if any(w < 0 for w in weights):
        raise ValueError(f"Los pesos no pueden ser negativos: {tuple(weights)}")

    total = sum(weights)
    if total == 0:
        # Sin información de preferencia: reparto uniforme (0.2 cada uno)
        return _UNIFORM_WEIGHTS, AXIS_COUNT
    return weights, total


def normalize_weights(
    price_weight: int,
    location_weight: int,
    area_weight: int,
    room_weight: int,
    feature_weight: int,
) -> tuple[float, float, float, float, float]:
    """
    Normaliza los pesos a fracciones que suman 1.0.

    Args:
        price_weight: Peso del eje precio
        location_weight: Peso del eje ubicación
        area_weight: Peso del eje superficie
        room_weight: Peso del eje ambientes
        feature_weight: Peso del eje tipo/características

    Returns:
        Tupla de 5 floats; (0.2,)*5 si todos los pesos son 0

    Raises:
        ValueError: Si algún peso es negativo
    """
    weights, total = _effective_weights(
        (price_weight, location_weight, area_weight, room_weight, feature_weight)
    )
    return tuple(w / total for w in weights)


def combine_scores(scores: Sequence[int], weights: Sequence[int]) -> int:
    """
    Combina los scores por eje en el score general (0-100).

    Equivale a sum(score_i * fraccion_i) con las fracciones de
    normalize_weights, calculado en Decimal como sum(score_i * w_i) / W
    para que el único redondeo (HALF_UP) sea el final.
    """
    if len(scores) != AXIS_COUNT:
        raise ValueError(
            f"Se esperaban {AXIS_COUNT} scores, se recibieron {len(scores)}"
        )
    weights, total = _effective_weights(weights)

    weighted = sum(score * weight for score, weight in zip(scores, weights))
    overall = Decimal(weighted) / Decimal(total)
    return int(overall.quantize(_ONE, rounding=ROUND_HALF_UP))
