"""
Módulo de base de datos.

Provee acceso de lectura a Supabase para el motor de matching.
"""

from markler.database.supabase_client import get_supabase_client, SupabaseClient
from markler.database.repositories import (
    BaseRepository,
    PropertyRepository,
    ClientRepository,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "BaseRepository",
    "PropertyRepository",
    "ClientRepository",
]
