"""
Modelo de Cliente

Cliente de un agente junto con sus criterios de búsqueda guardados.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from markler.models.criteria import SearchCriteria


class Client(BaseModel):
    """Cliente con criterios de búsqueda opcionales."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = Field(None, description="UUID del cliente")
    agent_id: Optional[str] = Field(None, description="FK al agente")
    first_name: str = Field(default="")
    last_name: str = Field(default="")
    email: Optional[str] = Field(None)

    # Supabase devuelve la relación embebida como 'property_search_criteria'
    search_criteria: Optional[SearchCriteria] = Field(
        None,
        validation_alias=AliasChoices("search_criteria", "property_search_criteria"),
        description="Criterios guardados (None = sin configurar)",
    )

    @field_validator("search_criteria", mode="before")
    @classmethod
    def _unwrap_embedded(cls, value):
        # La relación 1:1 puede venir como lista de un elemento
        if isinstance(value, list):
            return value[0] if value else None
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_search_criteria(self) -> bool:
        return self.search_criteria is not None
