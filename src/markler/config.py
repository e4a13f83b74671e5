"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> markler/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase (proveedor de candidatos y criterios)
    supabase_url: Optional[str] = Field(None, description="URL del proyecto Supabase")
    supabase_key: Optional[str] = Field(None, description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )

    # Matching: defaults de los endpoints
    match_threshold: int = Field(
        70, ge=0, le=100, description="Score mínimo para incluir un resultado"
    )
    max_results: int = Field(
        50, ge=1, le=500, description="Máximo de resultados en endpoints completos"
    )
    quick_match_max_results: int = Field(
        20, ge=1, le=500, description="Máximo de resultados en 'quick match'"
    )

    # Pesos por defecto (se normalizan antes de combinar)
    price_weight: int = Field(30, ge=0, le=100)
    location_weight: int = Field(25, ge=0, le=100)
    area_weight: int = Field(20, ge=0, le=100)
    room_weight: int = Field(15, ge=0, le=100)
    feature_weight: int = Field(10, ge=0, le=100)

    allow_budget_flexibility: bool = Field(
        True, description="Tolerar hasta 10% sobre el presupuesto máximo"
    )
    exact_location_match: bool = Field(
        False, description="Deshabilita la proximidad por código postal"
    )
    include_unavailable: bool = Field(
        False, description="Incluir propiedades vendidas, alquiladas, etc."
    )

    # Paralelismo opcional del scoring
    matching_workers: int = Field(
        1, ge=1, le=64, description="Threads para scorear candidatos (1 = secuencial)"
    )
    parallel_min_candidates: int = Field(
        200, ge=1, description="Mínimo de candidatos para usar el pool de threads"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")
    log_json: bool = Field(False, description="Renderizar logs como JSON")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
BUDGET_FLEXIBILITY_MULTIPLIER = Decimal("1.10")  # 10% sobre el presupuesto
AREA_TOLERANCE_PERCENTAGE = Decimal("0.15")
POSTAL_CODE_PROXIMITY_RANGE = 50

PERFECT_SCORE = 100
NEUTRAL_SCORE = 50
FLEXIBLE_BUDGET_SCORE = 85
AREA_TOLERANCE_SCORE = 85
BELOW_BUDGET_SCORE = 30
NEAR_LOCATION_SCORE = 80
ONE_ROOM_OFF_SCORE = 75

# Precisión de los porcentajes intermedios (4 decimales, HALF_UP)
PERCENT_PRECISION = Decimal("0.0001")

POSTAL_CODE_LENGTH = 5
