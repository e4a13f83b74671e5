"""
Script para ejecutar el matching propiedad-cliente.

Uso:
    python -m markler.scripts.run_matching --agent-id <uuid> --client-id <uuid>
    python -m markler.scripts.run_matching --agent-id <uuid> --property-id <uuid> --quick
    python -m markler.scripts.run_matching --agent-id <uuid> --criteria-file busqueda.json --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from markler.config import get_settings
from markler.exceptions import InvalidRequestError, MatchingError, NotFoundError
from markler.matching import MatchingEngine
from markler.models import MatchConfig, MatchRequest, MatchResponse, SearchCriteria

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2
EXIT_INTERRUPTED = 130


def configure_logging(log_level: str, log_json: bool = False) -> None:
    """Configura structlog sobre el logging estándar."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Matching de propiedades y clientes con scoring ponderado"
    )
    parser.add_argument("--agent-id", required=True, help="Agente dueño de la cartera")

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--client-id", help="Propiedades para los criterios del cliente")
    mode.add_argument("--property-id", help="Clientes interesados en la propiedad")
    mode.add_argument(
        "--criteria-file",
        type=Path,
        help="JSON con criterios ad-hoc (min_budget, preferred_locations, ...)",
    )

    parser.add_argument("--threshold", type=int, default=None, help="Score mínimo (0-100)")
    parser.add_argument("--max-results", type=int, default=None, help="Máximo de resultados")
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Defaults de 'quick match' (20 resultados)",
    )

    parser.add_argument("--price-weight", type=int, default=None)
    parser.add_argument("--location-weight", type=int, default=None)
    parser.add_argument("--area-weight", type=int, default=None)
    parser.add_argument("--room-weight", type=int, default=None)
    parser.add_argument("--feature-weight", type=int, default=None)

    parser.add_argument(
        "--include-unavailable",
        action="store_true",
        default=None,
        help="Incluir propiedades vendidas, alquiladas, etc.",
    )
    parser.add_argument(
        "--exact-location",
        action="store_true",
        default=None,
        help="Sin proximidad por código postal",
    )
    parser.add_argument(
        "--no-budget-flexibility",
        dest="allow_budget_flexibility",
        action="store_false",
        default=None,
        help="Sin tolerancia del 10%% sobre el presupuesto",
    )
    parser.add_argument("--json", action="store_true", help="Imprimir la respuesta como JSON")
    return parser


def load_criteria(path: Path) -> SearchCriteria:
    """
    Lee criterios ad-hoc desde un archivo JSON.

    Raises:
        InvalidRequestError: Si el archivo no existe o no es válido
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return SearchCriteria.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise InvalidRequestError(f"Criterios inválidos en {path}: {e}") from e


def build_request(args: argparse.Namespace, engine: MatchingEngine) -> MatchRequest:
    overrides = {
        "match_threshold": args.threshold,
        "max_results": args.max_results,
        "price_weight": args.price_weight,
        "location_weight": args.location_weight,
        "area_weight": args.area_weight,
        "room_weight": args.room_weight,
        "feature_weight": args.feature_weight,
        "include_unavailable": args.include_unavailable,
        "exact_location_match": args.exact_location,
        "allow_budget_flexibility": args.allow_budget_flexibility,
    }
    if args.quick:
        config = engine.quick_config(**overrides)
    else:
        config = engine.default_config(**overrides)

    custom_criteria = load_criteria(args.criteria_file) if args.criteria_file else None

    return MatchRequest(
        client_id=args.client_id,
        property_id=args.property_id,
        custom_criteria=custom_criteria,
        config=config,
    )


def format_response(response: MatchResponse) -> str:
    """Ranking legible para consola."""
    lines = [
        f"{response.returned_matches} de {response.total_matches} matches "
        f"(umbral {response.match_threshold}, {response.execution_time_ms} ms)"
    ]
    for position, result in enumerate(response.results, start=1):
        b = result.breakdown
        lines.append(
            f"{position:>3}. [{result.overall_score:>3}] {result.candidate_kind} "
            f"{result.candidate_id}  precio={b.price_score} ubicación={b.location_score} "
            f"superficie={b.area_score} ambientes={b.room_score} tipo={b.feature_score}"
        )
        for reason in result.match_reasons:
            lines.append(f"       + {reason}")
        for reason in result.mismatch_reasons:
            lines.append(f"       - {reason}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None, engine: Optional[MatchingEngine] = None) -> int:
    """Entry point del script."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)

    try:
        engine = engine or MatchingEngine(settings=settings)
        request = build_request(args, engine)
        response = engine.match(request, args.agent_id)
    except KeyboardInterrupt:
        logger.info("Matching interrumpido por usuario")
        return EXIT_INTERRUPTED
    except (MatchingError, NotFoundError) as e:
        logger.error("Pedido de matching inválido", error=str(e))
        return EXIT_INVALID
    except Exception as e:
        logger.error("Error fatal en matching", error=str(e), exc_info=True)
        return EXIT_ERROR

    if args.json:
        print(response.model_dump_json(indent=2))
    else:
        print(format_response(response))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
