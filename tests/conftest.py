"""
Fixtures compartidos: fábricas de entidades y repositorios en memoria.
"""

from decimal import Decimal
from typing import Optional

import pytest
import structlog

from markler.config import Settings
from markler.exceptions import NotFoundError
from markler.matching import MatchingEngine
from markler.models import Client, Property, PropertyStatus, PropertyType, SearchCriteria

AGENT_ID = "a0eebc99-9c0b-4ef8-bb6d-6bb9bd380a11"
OTHER_AGENT_ID = "b1ffcd00-0000-4000-8000-000000000002"


def make_property(
    property_id: str = "p-1",
    agent_id: str = AGENT_ID,
    price: Optional[str] = "300000",
    living_area_sqm: Optional[str] = "100",
    rooms: Optional[str] = "3",
    city: Optional[str] = "München",
    postal_code: Optional[str] = "80331",
    property_type: Optional[PropertyType] = PropertyType.APARTMENT,
    status: PropertyStatus = PropertyStatus.AVAILABLE,
) -> Property:
    return Property(
        id=property_id,
        agent_id=agent_id,
        price=Decimal(price) if price is not None else None,
        living_area_sqm=Decimal(living_area_sqm) if living_area_sqm is not None else None,
        rooms=Decimal(rooms) if rooms is not None else None,
        address_city=city,
        address_postal_code=postal_code,
        property_type=property_type,
        status=status,
    )


def make_client(
    client_id: str = "c-1",
    agent_id: str = AGENT_ID,
    criteria: Optional[SearchCriteria] = None,
) -> Client:
    return Client(
        id=client_id,
        agent_id=agent_id,
        first_name="Anna",
        last_name="Schmidt",
        search_criteria=criteria,
    )


class FakePropertyRepository:
    """Repositorio de propiedades en memoria, filtrado por agente."""

    def __init__(self, properties: list[Property]):
        self.properties = properties

    def get_by_agent(self, agent_id: str) -> list[dict]:
        return [p.model_dump() for p in self.properties if p.agent_id == agent_id]

    def get_by_id(self, property_id: str, agent_id: str) -> dict:
        for p in self.properties:
            if p.id == property_id and p.agent_id == agent_id:
                return p.model_dump()
        raise NotFoundError("Propiedad", property_id)


class FakeClientRepository:
    """Repositorio de clientes en memoria, filtrado por agente."""

    def __init__(self, clients: list[Client]):
        self.clients = clients

    def get_by_id(self, client_id: str, agent_id: str) -> dict:
        for c in self.clients:
            if c.id == client_id and c.agent_id == agent_id:
                return c.model_dump()
        raise NotFoundError("Cliente", client_id)

    def get_with_search_criteria(self, agent_id: str) -> list[dict]:
        return [
            c.model_dump()
            for c in self.clients
            if c.agent_id == agent_id and c.search_criteria is not None
        ]


@pytest.fixture(autouse=True, scope="session")
def silent_logging():
    """structlog sin salida: los logs no se mezclan con stdout."""
    structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    # Sin .env: valores por defecto explícitos
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings) -> MatchingEngine:
    return MatchingEngine(
        property_repo=FakePropertyRepository([]),
        client_repo=FakeClientRepository([]),
        settings=settings,
    )


@pytest.fixture
def munich_criteria() -> SearchCriteria:
    return SearchCriteria(
        min_budget=Decimal("250000"),
        max_budget=Decimal("300000"),
        min_area_sqm=80,
        max_area_sqm=120,
        min_rooms=Decimal("2"),
        max_rooms=Decimal("3"),
        preferred_locations=["München", "80300"],
        property_types=["APARTMENT"],
    )
