"""High-level search pipelines.

Coordina recolección, análisis, recomendaciones y ranking de ofertas.
Cada pipeline corresponde a una de las búsquedas que expone la app:
una fuente y una fecha, varias fechas sueltas, un mes completo, o la
mejor fecha por fuente.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date

from farescope.adapters import BaseAdapter
from farescope.analyzer import analyze, reduce_per_date
from farescope.collector import collect
from farescope.dates import month_dates
from farescope.models import (
    AnalysisReport,
    AppSettings,
    BestPriceSummary,
    CabinClass,
    Passengers,
    PricePoint,
    Quote,
)
from farescope.recommender import (
    MONTHLY_PROFILE,
    MULTI_DATE_PROFILE,
    RecommendationProfile,
    group_by_source,
    recommend,
    top_deals,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = ("skyscanner", "google_flights")


async def search_flights(
    source: str,
    origin: str,
    destination: str,
    departure_date: date,
    passengers: Passengers,
    cabin_class: CabinClass = CabinClass.ECONOMY,
    adapters: Mapping[str, BaseAdapter] | None = None,
    settings: AppSettings | None = None,
) -> list[Quote]:
    """Search a single source for a single date, cheapest first.

    Raises:
        ValueError: Si la fuente no existe.
        NoDataError: Si la fuente no devolvió cotizaciones.
    """
    collection = await collect(
        origin, destination, [departure_date], passengers, cabin_class, [source],
        adapters=adapters, settings=settings,
    )
    # sorted() es estable: a igual precio se conserva el orden de la fuente
    return sorted(collection.quotes, key=lambda q: q.price)


async def search_multiple_dates(
    origin: str,
    destination: str,
    dates: Sequence[date],
    passengers: Passengers,
    sources: Sequence[str] = DEFAULT_SOURCES,
    cabin_class: CabinClass = CabinClass.ECONOMY,
    adapters: Mapping[str, BaseAdapter] | None = None,
    settings: AppSettings | None = None,
) -> AnalysisReport:
    """Compare prices across an explicit list of dates."""
    return await _run_analysis(
        origin, destination, dates, passengers, sources, cabin_class,
        include_weekend_analysis=True,
        profile=MULTI_DATE_PROFILE,
        adapters=adapters,
        settings=settings,
    )


async def find_best_monthly_flights(
    origin: str,
    destination: str,
    month: str,
    passengers: Passengers,
    cabin_class: CabinClass = CabinClass.ECONOMY,
    sources: Sequence[str] = DEFAULT_SOURCES,
    include_weekend_analysis: bool = True,
    adapters: Mapping[str, BaseAdapter] | None = None,
    settings: AppSettings | None = None,
) -> AnalysisReport:
    """Analyze every day of a 'YYYY-MM' month.

    Raises:
        ValueError: Si el mes no tiene formato YYYY-MM.
    """
    dates = month_dates(month)
    logger.info("Búsqueda mensual %s: %d fechas", month, len(dates))

    return await _run_analysis(
        origin, destination, dates, passengers, sources, cabin_class,
        include_weekend_analysis=include_weekend_analysis,
        profile=MONTHLY_PROFILE,
        adapters=adapters,
        settings=settings,
    )


async def get_best_price_recommendation(
    origin: str,
    destination: str,
    dates: Sequence[date],
    passengers: Passengers,
    sources: Sequence[str] = DEFAULT_SOURCES,
    adapters: Mapping[str, BaseAdapter] | None = None,
    settings: AppSettings | None = None,
) -> BestPriceSummary:
    """Find the cheapest date per source and the overall winner.

    Empates: gana la fecha más temprana y, con la misma fecha, la fuente
    que aparece primero en sources.
    """
    collection = await collect(
        origin, destination, dates, passengers, CabinClass.ECONOMY, sources,
        adapters=adapters, settings=settings,
    )

    by_source: dict[str, PricePoint] = {}
    for source, quotes in group_by_source(collection.quotes).items():
        by_source[source] = min(reduce_per_date(quotes), key=lambda p: p.price)

    order = {source: i for i, source in enumerate(dict.fromkeys(sources))}
    best = min(
        by_source.values(),
        key=lambda p: (p.price, p.date, order.get(p.source, len(order))),
    )

    logger.info(
        "Mejor precio %s→%s: %.0f el %s en %s",
        collection.origin, collection.destination, best.price, best.date, best.source,
    )
    return BestPriceSummary(best=best, by_source=by_source)


async def _run_analysis(
    origin: str,
    destination: str,
    dates: Sequence[date],
    passengers: Passengers,
    sources: Sequence[str],
    cabin_class: CabinClass,
    include_weekend_analysis: bool,
    profile: RecommendationProfile,
    adapters: Mapping[str, BaseAdapter] | None,
    settings: AppSettings | None,
) -> AnalysisReport:
    """collect → analyze → recommend, plus the top-N deal list."""
    settings = settings or AppSettings()

    collection = await collect(
        origin, destination, dates, passengers, cabin_class, sources,
        adapters=adapters, settings=settings,
    )

    stats = analyze(collection.quotes, include_weekend_analysis=include_weekend_analysis)
    recommendations = recommend(stats, group_by_source(collection.quotes), profile)
    deals = top_deals(collection.quotes, limit=settings.top_deals_limit)

    return AnalysisReport(
        profile=profile.name,
        collection=collection,
        statistics=stats,
        recommendations=recommendations,
        top_deals=deals,
    )
