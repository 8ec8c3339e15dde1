"""Configuration loading and validation.

Carga las búsquedas guardadas y los settings desde config/searches.json.
Las API keys nunca van en el archivo: se leen del entorno (o del .env
que carga main.py).
"""

import json
import logging
import os
from pathlib import Path

from farescope.adapters import VALID_SOURCES
from farescope.dates import month_dates, parse_date
from farescope.models import AppSettings, CabinClass, Passengers, SearchConfig

logger = logging.getLogger(__name__)

# Ruta al archivo de configuración (relativa a la raíz del proyecto)
CONFIG_PATH = Path(__file__).parent.parent / "config" / "searches.json"


def load_config(config_path: Path | None = None) -> tuple[list[SearchConfig], AppSettings]:
    """Load saved searches and settings from the config file.

    Args:
        config_path: Ruta al archivo JSON. Si es None, usa la ruta por defecto.

    Returns:
        Tuple of (searches, settings)

    Raises:
        FileNotFoundError: Si el archivo de configuración no existe.
        ValueError: Si no hay ninguna búsqueda válida.
    """
    path = config_path or CONFIG_PATH

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}. "
            f"Copiá config/searches.json.example a config/searches.json y editalo."
        )

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    searches = _parse_searches(raw.get("searches", []))
    settings = _parse_settings(raw.get("settings", {}))

    logger.info(
        "Configuración cargada: %d búsquedas, concurrencia=%d, mock=%s",
        len(searches),
        settings.max_concurrent_requests,
        "sí" if settings.use_mock_fallback else "no",
    )

    return searches, settings


def _parse_searches(raw_searches: list[dict]) -> list[SearchConfig]:
    """Parse and validate saved searches.

    Cada búsqueda necesita origin, destination, al menos una fuente válida
    y exactamente uno de "month" o "dates". Las inválidas se saltean.
    """
    searches: list[SearchConfig] = []

    for i, s in enumerate(raw_searches):
        origin = str(s.get("origin") or "").upper().strip()
        destination = str(s.get("destination") or "").upper().strip()

        if not origin or not destination:
            logger.warning("Búsqueda #%d: falta origin o destination, salteando.", i)
            continue

        label = f"{origin}→{destination}"

        # Validar fuentes
        sources = [src.lower().strip() for src in s.get("sources", sorted(VALID_SOURCES))]
        invalid = set(sources) - VALID_SOURCES
        if invalid:
            logger.warning(
                "Búsqueda %s: fuentes inválidas %s (válidas: %s)",
                label, invalid, VALID_SOURCES,
            )
        sources = [src for src in sources if src in VALID_SOURCES]

        if not sources:
            logger.warning("Búsqueda %s: sin fuentes válidas, salteando.", label)
            continue

        # Mes completo o lista de fechas, no ambos
        month = s.get("month")
        raw_dates = s.get("dates") or []
        if bool(month) == bool(raw_dates):
            logger.warning(
                "Búsqueda %s: definí 'month' o 'dates' (uno solo), salteando.", label,
            )
            continue

        try:
            if month:
                month_dates(month)
            dates = [parse_date(d) for d in raw_dates]
            cabin_class = CabinClass(s.get("cabin_class", "economy"))
            passengers = Passengers(
                adults=int(s.get("adults", 1)),
                children=int(s.get("children", 0)),
                infants=int(s.get("infants", 0)),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Búsqueda %s: %s, salteando.", label, e)
            continue

        if passengers.adults < 1:
            logger.warning("Búsqueda %s: se necesita al menos un adulto, salteando.", label)
            continue

        searches.append(
            SearchConfig(
                origin=origin,
                destination=destination,
                sources=sources,
                month=month,
                dates=dates,
                passengers=passengers,
                cabin_class=cabin_class,
                include_weekend_analysis=bool(s.get("include_weekend_analysis", True)),
            )
        )

    if not searches:
        raise ValueError("No hay búsquedas válidas en la configuración.")

    return searches


def _parse_settings(raw: dict) -> AppSettings:
    """Parse global settings with defaults; API keys come from the environment."""
    defaults = AppSettings()
    return AppSettings(
        max_concurrent_requests=_number(raw, "max_concurrent_requests", int, defaults),
        request_timeout_seconds=_number(raw, "request_timeout_seconds", float, defaults),
        delay_between_requests_seconds=_number(raw, "delay_between_requests_seconds", float, defaults),
        user_agent=raw.get("user_agent", defaults.user_agent),
        use_mock_fallback=bool(raw.get("use_mock_fallback", defaults.use_mock_fallback)),
        top_deals_limit=_number(raw, "top_deals_limit", int, defaults),
        currency=str(raw.get("currency", defaults.currency)).upper(),
        skyscanner_api_key=os.getenv("SKYSCANNER_API_KEY") or None,
        searchapi_key=os.getenv("SEARCHAPI_KEY") or None,
    )


def _number(raw: dict, key: str, cast: type, defaults: AppSettings) -> int | float:
    """Numeric setting; un valor inválido se loggea y se usa el default."""
    default = getattr(defaults, key)
    try:
        return cast(raw.get(key, default))
    except (TypeError, ValueError):
        logger.warning("Setting %s inválido (%r), usando %s.", key, raw.get(key), default)
        return default
