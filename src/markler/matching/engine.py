"""
Motor de matching entre clientes y propiedades.

Implementa:
- Propiedades para un cliente (criterios guardados)
- Clientes para una propiedad (sentido inverso)
- Propiedades para criterios ad-hoc (búsqueda exploratoria)

Los tres modos delegan en el mismo scorer genérico (score_target):
filtrar disponibilidad, scorear, filtrar por umbral, ordenar y truncar.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence, TypeVar

import structlog

from markler.config import Settings, get_settings
from markler.database import ClientRepository, PropertyRepository
from markler.exceptions import InvalidRequestError, MissingCriteriaError
from markler.matching.scoring import MatchTarget, ScoredTarget, score_target
from markler.models import (
    Client,
    MatchConfig,
    MatchRequest,
    MatchResponse,
    MatchResult,
    Property,
    SearchCriteria,
)

logger = structlog.get_logger()

T = TypeVar("T")


class MatchingEngine:
    """
    Motor de matching sin estado.

    Flujo:
    1. Obtener candidatos del agente (repositorios) o recibirlos ya cargados
    2. Descartar no disponibles, salvo include_unavailable
    3. Scorear cada candidato en los cinco ejes
    4. Filtrar por umbral, ordenar (estable) y truncar a max_results
    """

    def __init__(
        self,
        property_repo: Optional[PropertyRepository] = None,
        client_repo: Optional[ClientRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self._property_repo = property_repo
        self._client_repo = client_repo

    @property
    def property_repo(self) -> PropertyRepository:
        # Lazy: el scoring puro no necesita Supabase
        if self._property_repo is None:
            self._property_repo = PropertyRepository()
        return self._property_repo

    @property
    def client_repo(self) -> ClientRepository:
        if self._client_repo is None:
            self._client_repo = ClientRepository()
        return self._client_repo

    def default_config(self, **overrides) -> MatchConfig:
        """Configuración de los endpoints completos."""
        return MatchConfig.from_settings(self.settings, **overrides)

    def quick_config(self, **overrides) -> MatchConfig:
        """Configuración de los endpoints 'quick match'."""
        if overrides.get("max_results") is None:
            overrides["max_results"] = self.settings.quick_match_max_results
        return self.default_config(**overrides)

    # ------------------------------------------------------------------
    # Núcleo puro: candidatos ya cargados
    # ------------------------------------------------------------------

    def score_candidates_for_criteria(
        self,
        candidates: Sequence[Property],
        criteria: SearchCriteria,
        config: Optional[MatchConfig] = None,
    ) -> MatchResponse:
        """
        Scorea propiedades contra unos criterios.

        Args:
            candidates: Propiedades del agente (ya filtradas por ownership)
            criteria: Criterios a satisfacer
            config: Parámetros del pedido (None = defaults de Settings)

        Returns:
            MatchResponse ordenado por score descendente
        """
        started = time.perf_counter()
        config = config or self.default_config()

        if not config.include_unavailable:
            candidates = [p for p in candidates if p.is_available]

        results = self._score_all(
            candidates, lambda prop: self._score_property(prop, criteria, config)
        )
        return self._build_response(results, config, started, mode="properties")

    def score_clients_for_property(
        self,
        clients: Sequence[Client],
        prop: Property,
        config: Optional[MatchConfig] = None,
    ) -> MatchResponse:
        """
        Scorea clientes según cuánto la propiedad satisface sus criterios.

        Los clientes sin criterios guardados se ignoran.
        """
        started = time.perf_counter()
        config = config or self.default_config()

        target = MatchTarget.from_property(prop)
        eligible = [c for c in clients if c.search_criteria is not None]

        results = self._score_all(
            eligible, lambda client: self._score_client(client, target, config)
        )
        return self._build_response(results, config, started, mode="clients")

    # ------------------------------------------------------------------
    # Modos con resolución vía repositorios
    # ------------------------------------------------------------------

    def match_properties_for_client(
        self,
        client_id: str,
        agent_id: str,
        config: Optional[MatchConfig] = None,
    ) -> MatchResponse:
        """
        Propiedades del agente que matchean los criterios guardados del cliente.

        Raises:
            NotFoundError: Cliente inexistente o de otro agente
            MissingCriteriaError: El cliente no tiene criterios configurados
        """
        logger.info("Matching de propiedades para cliente", client_id=client_id, agent_id=agent_id)

        client = Client.model_validate(self.client_repo.get_by_id(client_id, agent_id))
        criteria = client.search_criteria
        if criteria is None:
            raise MissingCriteriaError(
                f"El cliente {client_id} no tiene criterios de búsqueda configurados"
            )

        logger.debug(
            "Criterios del cliente",
            min_budget=criteria.min_budget,
            max_budget=criteria.max_budget,
            min_rooms=criteria.min_rooms,
            max_rooms=criteria.max_rooms,
            locations=criteria.preferred_locations,
        )

        properties = self._load_properties(agent_id)
        return self.score_candidates_for_criteria(properties, criteria, config)

    def match_clients_for_property(
        self,
        property_id: str,
        agent_id: str,
        config: Optional[MatchConfig] = None,
    ) -> MatchResponse:
        """
        Clientes del agente cuyos criterios matchean la propiedad.

        Raises:
            NotFoundError: Propiedad inexistente o de otro agente
        """
        logger.info("Matching de clientes para propiedad", property_id=property_id, agent_id=agent_id)

        prop = Property.model_validate(self.property_repo.get_by_id(property_id, agent_id))
        clients = [
            Client.model_validate(row)
            for row in self.client_repo.get_with_search_criteria(agent_id)
        ]
        logger.debug("Clientes con criterios a evaluar", count=len(clients))

        return self.score_clients_for_property(clients, prop, config)

    def match_properties_with_custom_criteria(
        self,
        criteria: Optional[SearchCriteria],
        agent_id: str,
        config: Optional[MatchConfig] = None,
    ) -> MatchResponse:
        """
        Propiedades del agente contra criterios ad-hoc.

        Raises:
            InvalidRequestError: Si no se enviaron criterios
        """
        if criteria is None:
            raise InvalidRequestError("Los criterios de búsqueda son obligatorios")

        logger.info(
            "Matching de propiedades con criterios ad-hoc",
            agent_id=agent_id,
            unconstrained=criteria.is_empty(),
        )

        properties = self._load_properties(agent_id)
        return self.score_candidates_for_criteria(properties, criteria, config)

    def match(self, request: MatchRequest, agent_id: str) -> MatchResponse:
        """
        Despacha un MatchRequest al modo correspondiente.

        Raises:
            InvalidRequestError: Si el pedido no selecciona exactamente un modo
        """
        request.validate_mode()

        if request.client_id is not None:
            return self.match_properties_for_client(request.client_id, agent_id, request.config)
        if request.property_id is not None:
            return self.match_clients_for_property(request.property_id, agent_id, request.config)
        return self.match_properties_with_custom_criteria(
            request.custom_criteria, agent_id, request.config
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_properties(self, agent_id: str) -> list[Property]:
        rows = self.property_repo.get_by_agent(agent_id)
        properties = [Property.model_validate(row) for row in rows]
        logger.debug("Propiedades a evaluar", agent_id=agent_id, count=len(properties))
        return properties

    def _score_all(self, items: Sequence[T], score: Callable[[T], MatchResult]) -> list[MatchResult]:
        """Scorea en orden de entrada; en paralelo solo para conjuntos grandes."""
        workers = self.settings.matching_workers
        if workers > 1 and len(items) >= self.settings.parallel_min_candidates:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                # map preserva el orden de entrada
                return list(pool.map(score, items))
        return [score(item) for item in items]

    def _score_property(
        self, prop: Property, criteria: SearchCriteria, config: MatchConfig
    ) -> MatchResult:
        scored = score_target(MatchTarget.from_property(prop), criteria, config)
        self._log_scored("property", prop.id, scored)
        return self._to_result(scored, prop.id, "property", prop)

    def _score_client(
        self, client: Client, target: MatchTarget, config: MatchConfig
    ) -> MatchResult:
        scored = score_target(target, client.search_criteria, config)
        self._log_scored("client", client.id, scored)
        return self._to_result(scored, client.id, "client", client)

    @staticmethod
    def _to_result(scored: ScoredTarget, candidate_id, kind: str, candidate) -> MatchResult:
        return MatchResult(
            candidate_id=candidate_id,
            candidate_kind=kind,
            candidate=candidate,
            overall_score=scored.overall_score,
            breakdown=scored.breakdown,
            match_reasons=scored.match_reasons,
            mismatch_reasons=scored.mismatch_reasons,
        )

    @staticmethod
    def _log_scored(kind: str, candidate_id, scored: ScoredTarget) -> None:
        b = scored.breakdown
        logger.debug(
            "Candidato scoreado",
            kind=kind,
            candidate_id=candidate_id,
            overall=scored.overall_score,
            price=b.price_score,
            location=b.location_score,
            area=b.area_score,
            room=b.room_score,
            feature=b.feature_score,
        )

    @staticmethod
    def _build_response(
        results: list[MatchResult],
        config: MatchConfig,
        started: float,
        mode: str,
    ) -> MatchResponse:
        threshold = config.match_threshold

        matches = [r for r in results if r.overall_score >= threshold]
        # sort es estable: los empates conservan el orden de entrada
        matches.sort(key=lambda r: r.overall_score, reverse=True)
        returned = matches[: config.max_results]

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Matching completado",
            mode=mode,
            evaluated=len(results),
            total=len(matches),
            returned=len(returned),
            elapsed_ms=elapsed_ms,
        )

        return MatchResponse(
            results=returned,
            total_matches=len(matches),
            returned_matches=len(returned),
            match_threshold=threshold,
            execution_time_ms=elapsed_ms,
        )
