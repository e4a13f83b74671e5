"""
Modelo de Propiedad

Representa un inmueble de la cartera de un agente tal como lo entrega
la capa de persistencia (tabla 'properties').
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PropertyType(str, Enum):
    """Tipos de inmueble con su nombre alemán e inglés."""

    # Residenciales
    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    TOWNHOUSE = "TOWNHOUSE"
    VILLA = "VILLA"
    PENTHOUSE = "PENTHOUSE"
    LOFT = "LOFT"
    DUPLEX = "DUPLEX"
    STUDIO = "STUDIO"

    # Comerciales
    OFFICE = "OFFICE"
    RETAIL = "RETAIL"
    WAREHOUSE = "WAREHOUSE"
    INDUSTRIAL = "INDUSTRIAL"
    RESTAURANT = "RESTAURANT"
    HOTEL = "HOTEL"

    # Especiales
    PARKING_SPACE = "PARKING_SPACE"
    GARAGE = "GARAGE"
    LAND = "LAND"
    FARM = "FARM"
    CASTLE = "CASTLE"
    OTHER = "OTHER"

    @property
    def german_name(self) -> str:
        return _PROPERTY_TYPE_NAMES[self][0]

    @property
    def english_name(self) -> str:
        return _PROPERTY_TYPE_NAMES[self][1]

    def localized_name(self, language: str) -> str:
        return self.german_name if language == "de" else self.english_name


_PROPERTY_TYPE_NAMES = {
    PropertyType.APARTMENT: ("Wohnung", "Apartment"),
    PropertyType.HOUSE: ("Haus", "House"),
    PropertyType.TOWNHOUSE: ("Reihenhaus", "Townhouse"),
    PropertyType.VILLA: ("Villa", "Villa"),
    PropertyType.PENTHOUSE: ("Penthouse", "Penthouse"),
    PropertyType.LOFT: ("Loft", "Loft"),
    PropertyType.DUPLEX: ("Maisonette", "Duplex"),
    PropertyType.STUDIO: ("Apartment", "Studio"),
    PropertyType.OFFICE: ("Büro", "Office"),
    PropertyType.RETAIL: ("Einzelhandel", "Retail"),
    PropertyType.WAREHOUSE: ("Lager", "Warehouse"),
    PropertyType.INDUSTRIAL: ("Industrie", "Industrial"),
    PropertyType.RESTAURANT: ("Restaurant", "Restaurant"),
    PropertyType.HOTEL: ("Hotel", "Hotel"),
    PropertyType.PARKING_SPACE: ("Stellplatz", "Parking Space"),
    PropertyType.GARAGE: ("Garage", "Garage"),
    PropertyType.LAND: ("Grundstück", "Land"),
    PropertyType.FARM: ("Bauernhof", "Farm"),
    PropertyType.CASTLE: ("Schloss", "Castle"),
    PropertyType.OTHER: ("Sonstiges", "Other"),
}


class PropertyStatus(str, Enum):
    """Estado de disponibilidad del inmueble."""

    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    RENTED = "RENTED"
    WITHDRAWN = "WITHDRAWN"
    UNDER_CONSTRUCTION = "UNDER_CONSTRUCTION"

    @property
    def german_name(self) -> str:
        return _PROPERTY_STATUS_NAMES[self][0]

    @property
    def english_name(self) -> str:
        return _PROPERTY_STATUS_NAMES[self][1]

    def localized_name(self, language: str) -> str:
        return self.german_name if language == "de" else self.english_name


_PROPERTY_STATUS_NAMES = {
    PropertyStatus.AVAILABLE: ("Verfügbar", "Available"),
    PropertyStatus.RESERVED: ("Reserviert", "Reserved"),
    PropertyStatus.SOLD: ("Verkauft", "Sold"),
    PropertyStatus.RENTED: ("Vermietet", "Rented"),
    PropertyStatus.WITHDRAWN: ("Zurückgezogen", "Withdrawn"),
    PropertyStatus.UNDER_CONSTRUCTION: ("Im Bau", "Under Construction"),
}


class Property(BaseModel):
    """
    Inmueble candidato para el motor de matching.

    Solo incluye los campos que el scoring necesita; el resto de las
    columnas de la tabla se ignoran al validar la fila.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    # Identificadores
    id: Optional[str] = Field(None, description="UUID de la propiedad")
    agent_id: Optional[str] = Field(None, description="FK al agente dueño")
    title: Optional[str] = Field(None, description="Título del aviso")

    # Clasificación
    property_type: Optional[PropertyType] = Field(None, description="Tipo de inmueble")
    status: PropertyStatus = Field(
        default=PropertyStatus.AVAILABLE, description="Estado de disponibilidad"
    )

    # Ubicación
    address_city: Optional[str] = Field(None, description="Ciudad")
    address_postal_code: Optional[str] = Field(None, description="Código postal (5 dígitos)")

    # Datos económicos y físicos
    price: Optional[Decimal] = Field(None, description="Precio en EUR")
    living_area_sqm: Optional[Decimal] = Field(None, description="Superficie habitable m²")
    rooms: Optional[Decimal] = Field(None, description="Cantidad de ambientes (admite 3.5)")

    @field_validator("property_type", mode="before")
    @classmethod
    def _upper_type_name(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or None
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status_name(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or PropertyStatus.AVAILABLE
        if value is None:
            return PropertyStatus.AVAILABLE
        return value

    @field_validator("address_postal_code", mode="before")
    @classmethod
    def _postal_code_as_text(cls, value):
        # Algunas filas llegan con el código postal como número
        if isinstance(value, int):
            return f"{value:05d}"
        return value

    @property
    def is_available(self) -> bool:
        return self.status == PropertyStatus.AVAILABLE
