"""Price aggregation and trend analysis.

Reduce las cotizaciones a un precio mínimo por fecha y calcula extremos,
promedio, distribución, fin de semana vs. día de semana, tendencia y
volatilidad. Todo es puro y determinístico: mismo input, mismo output.
"""

import logging
import math
import statistics
from collections.abc import Sequence
from datetime import date

from farescope.dates import is_weekend
from farescope.errors import EmptyInputError
from farescope.models import (
    PriceDistribution,
    PricePoint,
    PriceStatistics,
    Quote,
    TrendAnalysis,
    WeekendSplit,
    round_half_up,
)

logger = logging.getLogger(__name__)


def analyze(
    quotes: Sequence[Quote],
    include_weekend_analysis: bool = True,
) -> PriceStatistics:
    """Compute price statistics for a non-empty set of quotes.

    Args:
        quotes: Cotizaciones de cualquier fuente y fecha, en cualquier orden.
        include_weekend_analysis: Si es False, nunca se calcula el split
            fin de semana / día de semana.

    Returns:
        PriceStatistics calculado a partir de los mínimos por fecha.

    Raises:
        EmptyInputError: Si no hay cotizaciones.
    """
    if not quotes:
        raise EmptyInputError()

    daily = reduce_per_date(quotes)
    prices = [p.price for p in daily]
    average = statistics.fmean(prices)

    # min()/max() devuelven el primer extremo encontrado; como daily está
    # ordenado cronológicamente, los empates quedan en la fecha más temprana.
    cheapest = min(daily, key=lambda p: p.price)
    most_expensive = max(daily, key=lambda p: p.price)

    weekend = _weekend_split(daily) if include_weekend_analysis else None

    result = PriceStatistics(
        cheapest=cheapest,
        most_expensive=most_expensive,
        average_price=average,
        price_range=most_expensive.price - cheapest.price,
        distribution=price_distribution(prices),
        trend=_trend_analysis(prices),
        daily_prices=tuple(daily),
        weekend=weekend,
    )

    logger.info(
        "Análisis: %d cotizaciones, %d fechas, mínimo %.0f (%s), promedio %.0f",
        len(quotes), len(daily), cheapest.price, cheapest.date, average,
    )
    return result


def reduce_per_date(quotes: Sequence[Quote]) -> list[PricePoint]:
    """Reduce quotes to one minimum-price point per date, chronologically.

    Empates de precio dentro de una fecha: gana la primera cotización
    en el orden de entrada (solo se reemplaza con un precio estrictamente menor).
    """
    best: dict[date, PricePoint] = {}
    for quote in quotes:
        current = best.get(quote.date)
        if current is None or quote.price < current.price:
            best[quote.date] = PricePoint(quote.date, quote.price, quote.source)

    return [best[d] for d in sorted(best)]


def price_distribution(prices: Sequence[float]) -> PriceDistribution:
    """Quartiles by direct index floor(n * q) over the sorted prices.

    No interpola: con [100, 250, 400] el q25 es prices[0] = 100 y la
    mediana prices[1] = 250. El desvío estándar es poblacional.
    """
    ordered = sorted(prices)
    n = len(ordered)

    return PriceDistribution(
        min=ordered[0],
        q25=ordered[math.floor(n * 0.25)],
        median=ordered[math.floor(n * 0.5)],
        q75=ordered[math.floor(n * 0.75)],
        max=ordered[-1],
        std_dev=statistics.pstdev(ordered),
    )


def price_trend(prices: Sequence[float]) -> float:
    """Least-squares slope of prices against their index, divided by the mean.

    Usa índices 0..n-1 y no la distancia en días, así que fechas
    salteadas igual producen una tendencia sobre la secuencia buscada.
    """
    n = len(prices)
    if n < 2 or len(set(prices)) == 1:
        return 0.0

    mean_price = statistics.fmean(prices)
    if mean_price == 0:
        return 0.0

    sum_x = sum(range(n))
    sum_y = math.fsum(prices)
    sum_xy = math.fsum(i * p for i, p in enumerate(prices))
    sum_x2 = sum(i * i for i in range(n))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    return slope / mean_price


def price_volatility(prices: Sequence[float]) -> float:
    """Mean absolute change between consecutive prices, divided by the mean."""
    if len(prices) < 2:
        return 0.0

    mean_price = statistics.fmean(prices)
    if mean_price == 0:
        return 0.0

    changes = [abs(b - a) for a, b in zip(prices, prices[1:])]
    return statistics.fmean(changes) / mean_price


def _trend_analysis(prices: list[float]) -> TrendAnalysis:
    trend = price_trend(prices)

    if trend > 0:
        direction = "increasing"
    elif trend < 0:
        direction = "decreasing"
    else:
        direction = "stable"

    return TrendAnalysis(
        coefficient=trend,
        direction=direction,
        strength=abs(trend),
        volatility=price_volatility(prices),
    )


def _weekend_split(daily: list[PricePoint]) -> WeekendSplit | None:
    """Compare weekend and weekday averages.

    Devuelve None (no cero) si falta alguno de los dos grupos, o si el
    promedio de días de semana es 0 y el porcentaje no está definido.
    """
    weekend = [p for p in daily if is_weekend(p.date)]
    weekday = [p for p in daily if not is_weekend(p.date)]

    if not weekend or not weekday:
        return None

    avg_weekend = statistics.fmean(p.price for p in weekend)
    avg_weekday = statistics.fmean(p.price for p in weekday)

    if avg_weekday == 0:
        return None

    return WeekendSplit(
        avg_weekend=avg_weekend,
        avg_weekday=avg_weekday,
        premium_percent=round_half_up((avg_weekend - avg_weekday) / avg_weekday * 100),
        weekend_dates=tuple(p.date for p in weekend),
        weekday_dates=tuple(p.date for p in weekday),
    )
