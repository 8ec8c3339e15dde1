"""Deterministic mock quotes, the last strategy of every connector.

Genera precios plausibles cuando la API y el scraping no devuelven nada.
Los valores dependen solo de (fuente, ruta, fecha, cabina), así que dos
ejecuciones con el mismo pedido dan exactamente lo mismo.
"""

import random

from farescope.dates import is_weekend
from farescope.models import CabinClass, Quote, SearchRequest, round_half_up

# Multiplicador de precio respecto de economy
CABIN_MULTIPLIERS: dict[CabinClass, float] = {
    CabinClass.ECONOMY: 1.0,
    CabinClass.PREMIUM_ECONOMY: 1.8,
    CabinClass.BUSINESS: 3.2,
    CabinClass.FIRST: 5.5,
}

# Recargo aproximado de sábados y domingos
WEEKEND_SURCHARGE = 1.1

# Minutos extra por cada escala
LAYOVER_MINUTES = 95


def mock_quotes(
    source: str,
    request: SearchRequest,
    base_prices: list[float],
    airlines: list[str],
    currency: str = "USD",
) -> list[Quote]:
    """Build one quote per base price, scaled by date and cabin class."""
    seed = ":".join([
        source,
        request.origin,
        request.destination,
        request.departure_date.isoformat(),
    ])
    rng = random.Random(seed)

    # Variación diaria de ±15% para que el análisis tenga algo que mostrar
    day_factor = rng.uniform(0.85, 1.15)
    if is_weekend(request.departure_date):
        day_factor *= WEEKEND_SURCHARGE

    multiplier = CABIN_MULTIPLIERS[request.cabin_class]

    # Duración directa de la ruta; cada escala suma una conexión
    direct_minutes = rng.randint(75, 720)

    return [
        Quote(
            date=request.departure_date,
            source=source,
            cabin_class=request.cabin_class,
            price=float(round_half_up(base * day_factor * multiplier)),
            currency=currency,
            airline=airlines[i % len(airlines)],
            stops=i % 2,
            duration_minutes=direct_minutes + LAYOVER_MINUTES * (i % 2),
        )
        for i, base in enumerate(base_prices)
    ]
