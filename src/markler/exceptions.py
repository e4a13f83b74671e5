"""
Errores del dominio de matching.

Solo el mal uso por parte del llamador es un error: los datos faltantes
o malformados de un candidato degradan a un score neutral.
"""


class MatchingError(Exception):
    """Error base del motor de matching."""

    pass


class MissingCriteriaError(MatchingError):
    """El cliente no tiene criterios de búsqueda configurados."""

    pass


class InvalidRequestError(MatchingError):
    """Pedido mal formado: modo ambiguo, criterios ausentes o parámetros fuera de rango."""

    pass


class NotFoundError(Exception):
    """Entidad inexistente o no perteneciente al agente."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} no encontrado: {entity_id}")
