"""
Cliente de Supabase.

Acceso de solo lectura a las tablas del CRM, siempre acotado al agente
dueño de los datos.
"""

from functools import lru_cache

import structlog
from supabase import create_client, Client

from markler.config import get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Wrapper del cliente de Supabase para las lecturas del matching."""

    def __init__(self, client: Client):
        self._client = client

    @property
    def client(self) -> Client:
        return self._client

    def table(self, name: str):
        return self._client.table(name)

    def scoped(self, table: str, agent_id: str, columns: str = "*"):
        """
        Query sobre una tabla filtrada por agente.

        Args:
            table: Nombre de la tabla
            agent_id: Agente dueño de las filas
            columns: Columnas y relaciones embebidas a seleccionar

        Returns:
            Query builder listo para encadenar más filtros
        """
        return self.table(table).select(columns).eq("agent_id", agent_id)


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Cliente de Supabase cacheado.

    Raises:
        ValueError: Si faltan SUPABASE_URL o SUPABASE_KEY
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos para leer "
            "propiedades y clientes."
        )

    # Service key si está disponible (sin RLS)
    key = settings.supabase_service_key or settings.supabase_key
    logger.info(
        "Conectando a Supabase",
        url=settings.supabase_url,
        service_key=settings.supabase_service_key is not None,
    )

    return SupabaseClient(create_client(settings.supabase_url, key))
