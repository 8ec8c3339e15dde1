"""Multi-source collection orchestrator.

Reparte un pedido en llamadas independientes (fecha, fuente), las ejecuta
en paralelo con un límite de concurrencia y junta las cotizaciones que
sobrevivan. Una llamada que falla se registra y se saltea; solo si no
queda ninguna cotización la corrida entera falla con NoDataError.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import date

from farescope.adapters import BaseAdapter, build_adapters
from farescope.errors import NoDataError
from farescope.models import (
    AppSettings,
    CabinClass,
    CollectionFailure,
    CollectionResult,
    Passengers,
    Quote,
    SearchRequest,
)

logger = logging.getLogger(__name__)


async def collect(
    origin: str,
    destination: str,
    dates: Sequence[date],
    passengers: Passengers,
    cabin_class: CabinClass,
    sources: Sequence[str],
    adapters: Mapping[str, BaseAdapter] | None = None,
    settings: AppSettings | None = None,
) -> CollectionResult:
    """Collect quotes for every (date, source) pair.

    Flujo:
    1. Validar el pedido (fechas, fuentes, pasajeros)
    2. Lanzar una tarea por cada par (fecha, fuente), con semáforo
    3. Registrar fallos y resultados vacíos sin cortar el resto
    4. Armar el resultado en orden (fecha, fuente), no en orden de llegada

    Args:
        origin: Código IATA de origen.
        destination: Código IATA de destino.
        dates: Fechas a consultar, en el orden pedido.
        passengers: Cantidad de pasajeros (adults >= 1).
        cabin_class: Clase de cabina.
        sources: Identificadores de fuente (ver adapters.VALID_SOURCES).
        adapters: Conectores por nombre. Si es None, se construyen los default.
        settings: Settings globales. Si es None, usa los valores por defecto.

    Returns:
        CollectionResult con al menos una cotización.

    Raises:
        ValueError: Si el pedido es inválido.
        NoDataError: Si ninguna llamada devolvió cotizaciones.
    """
    settings = settings or AppSettings()
    adapters = adapters if adapters is not None else build_adapters(settings)

    origin = origin.upper().strip()
    destination = destination.upper().strip()
    dates = list(dates)
    sources = list(dict.fromkeys(sources))

    _validate_request(dates, sources, passengers, adapters)

    semaphore = asyncio.Semaphore(max(1, settings.max_concurrent_requests))

    async def fetch(day: date, source: str) -> list[Quote] | CollectionFailure:
        """Una llamada (fecha, fuente). Nunca propaga excepciones."""
        request = SearchRequest(
            origin=origin,
            destination=destination,
            departure_date=day,
            passengers=passengers,
            cabin_class=cabin_class,
        )
        async with semaphore:
            try:
                quotes = await adapters[source].search(request)
            except Exception as e:
                logger.warning(
                    "%s: error al consultar %s→%s %s: %s",
                    source, origin, destination, day, e,
                )
                return CollectionFailure(day, source, str(e) or type(e).__name__)
            finally:
                if settings.delay_between_requests_seconds:
                    await asyncio.sleep(settings.delay_between_requests_seconds)

        if not quotes:
            logger.info("%s: sin resultados para %s→%s %s", source, origin, destination, day)
            return CollectionFailure(day, source, "no results")
        return quotes

    pairs = [(day, source) for day in dates for source in sources]
    logger.info(
        "━━━ Recolectando %s → %s: %d fechas × %d fuentes ━━━",
        origin, destination, len(dates), len(sources),
    )

    outcomes = await asyncio.gather(*[fetch(day, source) for day, source in pairs])

    quotes: list[Quote] = []
    failures: list[CollectionFailure] = []
    for outcome in outcomes:
        if isinstance(outcome, CollectionFailure):
            failures.append(outcome)
        else:
            quotes.extend(outcome)

    logger.info(
        "Recolección %s→%s: %d cotizaciones, %d/%d llamadas fallidas",
        origin, destination, len(quotes), len(failures), len(pairs),
    )

    if not quotes:
        raise NoDataError(origin, destination, dates)

    return CollectionResult(
        origin=origin,
        destination=destination,
        dates=dates,
        cabin_class=cabin_class,
        quotes=quotes,
        failures=failures,
    )


def _validate_request(
    dates: list[date],
    sources: list[str],
    passengers: Passengers,
    adapters: Mapping[str, BaseAdapter],
) -> None:
    """Reject requests the transport layer should never have sent."""
    if not dates:
        raise ValueError("At least one date is required")
    if not sources:
        raise ValueError("At least one source is required")

    unknown = [s for s in sources if s not in adapters]
    if unknown:
        raise ValueError(
            f"Unknown sources {unknown} (valid: {sorted(adapters)})"
        )

    if passengers.adults < 1:
        raise ValueError("At least one adult passenger is required")
