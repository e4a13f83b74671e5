"""
Repositorios de lectura en Supabase.

Proveen al motor de matching los candidatos ya filtrados por el agente
dueño y los criterios de búsqueda guardados de cada cliente.
"""

from typing import Optional

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from markler.database.supabase_client import get_supabase_client, SupabaseClient
from markler.exceptions import NotFoundError

logger = structlog.get_logger()

CRITERIA_TABLE = "property_search_criteria"

# Solo fallas de red se reintentan; errores de PostgREST (4xx) no
TRANSIENT_ERRORS = (ConnectionError, TimeoutError, httpx.TransportError)


class BaseRepository:
    """Clase base para repositorios."""

    TABLE: str = ""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _execute(self, query) -> list[dict]:
        """Ejecuta una query con reintentos ante errores de transporte."""
        try:
            response = query.execute()
        except Exception as e:
            logger.warning("Error consultando Supabase", table=self.TABLE, error=str(e))
            raise
        return response.data or []

    def _get_one(self, query, entity: str, entity_id: str) -> dict:
        rows = self._execute(query.limit(1))
        if not rows:
            raise NotFoundError(entity, entity_id)
        return rows[0]


class PropertyRepository(BaseRepository):
    """Repositorio de propiedades (tabla 'properties')."""

    TABLE = "properties"

    def get_by_agent(self, agent_id: str) -> list[dict]:
        """
        Obtiene todas las propiedades de un agente.

        El filtro de disponibilidad lo aplica el motor según el pedido.
        """
        query = self.client.scoped(self.TABLE, agent_id).order("created_at", desc=True)
        rows = self._execute(query)
        logger.debug("Propiedades del agente", agent_id=agent_id, count=len(rows))
        return rows

    def get_by_id(self, property_id: str, agent_id: str) -> dict:
        """
        Obtiene una propiedad del agente.

        Raises:
            NotFoundError: Si no existe o pertenece a otro agente
        """
        query = self.client.scoped(self.TABLE, agent_id).eq("id", property_id)
        return self._get_one(query, "Propiedad", property_id)


class ClientRepository(BaseRepository):
    """Repositorio de clientes con sus criterios embebidos."""

    TABLE = "clients"

    def get_by_id(self, client_id: str, agent_id: str) -> dict:
        """
        Obtiene un cliente del agente con sus criterios (si los tiene).

        Raises:
            NotFoundError: Si no existe o pertenece a otro agente
        """
        query = self.client.scoped(
            self.TABLE, agent_id, columns=f"*, {CRITERIA_TABLE}(*)"
        ).eq("id", client_id)
        return self._get_one(query, "Cliente", client_id)

    def get_with_search_criteria(self, agent_id: str) -> list[dict]:
        """Obtiene los clientes del agente que tienen criterios guardados."""
        # !inner descarta los clientes sin criterios
        query = self.client.scoped(self.TABLE, agent_id, columns=f"*, {CRITERIA_TABLE}!inner(*)")
        rows = self._execute(query)
        logger.debug("Clientes con criterios", agent_id=agent_id, count=len(rows))
        return rows
