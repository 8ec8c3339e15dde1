"""Entry point for the flight price analyzer.

Carga la configuración y las variables de entorno, corre cada búsqueda
guardada y muestra el reporte en consola.

Uso:
    python -m farescope.main                      # Usa config/searches.json
    python -m farescope.main --config otra.json   # Otro archivo de configuración
    python -m farescope.main --no-mock            # Sin datos simulados
    python -m farescope.main --best-price         # Solo la mejor fecha por fuente
    python -m farescope.main --details            # Vuelos de la primera fecha, por fuente
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from farescope.config import load_config
from farescope.dates import month_dates
from farescope.engine import (
    find_best_monthly_flights,
    get_best_price_recommendation,
    search_flights,
    search_multiple_dates,
)
from farescope.errors import FareScopeError
from farescope.models import AppSettings, SearchConfig
from farescope.reporter import (
    format_best_price,
    format_flight_results,
    format_report,
    print_report,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_details(search: SearchConfig, settings: AppSettings) -> bool:
    """Show the flights of each source for the search's first date.

    Cada fuente se consulta por separado; que una falle no corta las demás.
    """
    departure = month_dates(search.month)[0] if search.month else search.dates[0]

    ok = False
    for source in search.sources:
        try:
            quotes = await search_flights(
                source,
                search.origin,
                search.destination,
                departure,
                search.passengers,
                cabin_class=search.cabin_class,
                settings=settings,
            )
        except FareScopeError as e:
            logger.error("Búsqueda %s en %s falló: %s", search.label, source, e)
            continue

        print_report(format_flight_results(source, quotes))
        ok = True

    return ok


async def run_search(
    search: SearchConfig, settings: AppSettings, best_price: bool = False,
) -> bool:
    """Run one saved search and print its report. Devuelve False si falló."""
    try:
        if best_price:
            dates = month_dates(search.month) if search.month else search.dates
            summary = await get_best_price_recommendation(
                search.origin,
                search.destination,
                dates,
                search.passengers,
                sources=search.sources,
                settings=settings,
            )
            print_report(format_best_price(summary))
            return True

        if search.month:
            report = await find_best_monthly_flights(
                search.origin,
                search.destination,
                search.month,
                search.passengers,
                cabin_class=search.cabin_class,
                sources=search.sources,
                include_weekend_analysis=search.include_weekend_analysis,
                settings=settings,
            )
        else:
            report = await search_multiple_dates(
                search.origin,
                search.destination,
                search.dates,
                search.passengers,
                sources=search.sources,
                cabin_class=search.cabin_class,
                settings=settings,
            )
    except FareScopeError as e:
        logger.error("Búsqueda %s falló: %s", search.label, e)
        return False

    print_report(format_report(report))
    return True


async def main(
    config_path: Path | None = None,
    no_mock: bool = False,
    best_price: bool = False,
    details: bool = False,
) -> int:
    """Main execution flow. Devuelve el exit code."""
    logger.info("🛫 Flight price analyzer iniciando...")

    try:
        searches, settings = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Error de configuración: %s", e)
        return 1

    if no_mock:
        settings.use_mock_fallback = False

    # Las búsquedas corren en secuencia; cada una ya paraleliza sus llamadas
    ok = 0
    for search in searches:
        if details:
            done = await run_details(search, settings)
        else:
            done = await run_search(search, settings, best_price=best_price)
        if done:
            ok += 1

    logger.info("✅ %d/%d búsquedas completadas.", ok, len(searches))
    return 0 if ok else 1


if __name__ == "__main__":
    # Cargar .env para ejecución local (SKYSCANNER_API_KEY, SEARCHAPI_KEY)
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Flight price analyzer — compara precios por fecha y fuente",
    )
    parser.add_argument("--config", type=Path, default=None, help="Ruta al JSON de búsquedas")
    parser.add_argument(
        "--no-mock",
        action="store_true",
        help="No usar datos simulados cuando las fuentes reales no responden",
    )
    parser.add_argument(
        "--best-price",
        action="store_true",
        help="Mostrar solo la fecha más barata por fuente",
    )
    parser.add_argument(
        "--details",
        action="store_true",
        help="Listar los vuelos de la primera fecha de cada búsqueda, con observaciones",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(main(
        config_path=args.config,
        no_mock=args.no_mock,
        best_price=args.best_price,
        details=args.details,
    )))
