"""
Modelo de Criterios de Búsqueda

Preferencias declaradas por un cliente (presupuesto, superficie,
ambientes, ubicaciones y tipos de inmueble). Un campo ausente significa
"sin restricción" para ese eje.
"""

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _split_list(value) -> list[str]:
    """
    Normaliza listas persistidas como texto separado por comas.

    'Berlin, Charlottenburg' -> ['Berlin', 'Charlottenburg']
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")

    result = []
    for item in value:
        text = str(item).strip()
        # Sin vacíos ni duplicados, respetando el orden
        if text and text not in result:
            result.append(text)
    return result


class SearchCriteria(BaseModel):
    """Criterios de búsqueda de un cliente (tabla 'property_search_criteria')."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = Field(None, description="UUID de los criterios")

    # Presupuesto
    min_budget: Optional[Decimal] = Field(None, description="Presupuesto mínimo EUR")
    max_budget: Optional[Decimal] = Field(None, description="Presupuesto máximo EUR")

    # Superficie habitable
    min_area_sqm: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("min_area_sqm", "min_square_meters"),
        description="Superficie mínima m²",
    )
    max_area_sqm: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("max_area_sqm", "max_square_meters"),
        description="Superficie máxima m²",
    )

    # Ambientes (admite fracciones, ej: 3.5)
    min_rooms: Optional[Decimal] = Field(None, description="Mínimo de ambientes")
    max_rooms: Optional[Decimal] = Field(None, description="Máximo de ambientes")

    # Ubicación y tipo
    preferred_locations: list[str] = Field(
        default_factory=list,
        description="Ciudades o códigos postales de 5 dígitos, en orden de preferencia",
    )
    property_types: list[str] = Field(
        default_factory=list, description="Nombres de PropertyType aceptados"
    )

    # Texto libre, no participa del scoring
    additional_requirements: Optional[str] = Field(None)

    @field_validator("preferred_locations", "property_types", mode="before")
    @classmethod
    def _parse_list(cls, value):
        return _split_list(value)

    def has_budget_constraint(self) -> bool:
        return self.min_budget is not None or self.max_budget is not None

    def has_area_constraint(self) -> bool:
        return self.min_area_sqm is not None or self.max_area_sqm is not None

    def has_room_constraint(self) -> bool:
        return self.min_rooms is not None or self.max_rooms is not None

    def is_empty(self) -> bool:
        """True si no restringe ningún eje (matchea todo con 100)."""
        return not (
            self.has_budget_constraint()
            or self.has_area_constraint()
            or self.has_room_constraint()
            or self.preferred_locations
            or self.property_types
        )
