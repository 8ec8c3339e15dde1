"""Booking recommendations derived from price statistics.

Evalúa un conjunto fijo de reglas sobre las estadísticas y devuelve
mensajes en orden de prioridad: precios atípicos, comparación de
fuentes, patrones temporales y notas generales. Los umbrales cambian
según el perfil (búsqueda de varias fechas vs. mes completo).
"""

import logging
import statistics
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from farescope.analyzer import reduce_per_date
from farescope.models import Deal, PriceStatistics, Quote, round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommendationProfile:
    """Thresholds and message texts for one call context.

    Los textos usan str.format con los campos date, pct, source y count;
    cada plantilla toma solo los que necesita.
    """

    name: str
    deal_ratio: float = 0.8  # cheapest < average * deal_ratio
    overpriced_ratio: float = 1.3  # most expensive > average * overpriced_ratio
    source_margin: float = 0.05  # 5% por debajo/encima del promedio
    warn_expensive_sources: bool = False
    weekend_expensive_percent: int = 20
    weekend_cheaper_percent: int = -10
    trend_threshold: float = 0.15
    variation_ratio: float = 0.5  # range > average * variation_ratio
    volume_threshold: int = 7  # más de N fechas distintas

    deal_message: str = "🚀 Great deal found! {date} is {pct}% below average price."
    overpriced_message: str = (
        "⚠️  {date} is {pct}% above average - consider avoiding this date."
    )
    trend_up_message: str = (
        "📈 Prices are trending upward. Consider booking earlier dates for better deals."
    )
    trend_down_message: str = (
        "📉 Prices are trending downward. Waiting might get you a better deal."
    )
    variation_message: str = (
        "💰 Significant price variation detected. Flexibility with dates can save you money."
    )
    volume_message: str = (
        "🔍 You've searched across {count} dates. "
        "This gives you a comprehensive view of pricing patterns."
    )


# search_multiple_dates: compara fuentes en ambos sentidos
MULTI_DATE_PROFILE = RecommendationProfile(
    name="multi_date",
    warn_expensive_sources=True,
    variation_ratio=0.5,
    volume_threshold=7,
)

# find_best_monthly_flights: solo destaca la mejor fuente
MONTHLY_PROFILE = RecommendationProfile(
    name="monthly",
    warn_expensive_sources=False,
    variation_ratio=0.6,
    volume_threshold=20,
    deal_message="🚀 Amazing deal found! {date} is {pct}% below average price on {source}.",
    overpriced_message="⚠️  {date} is {pct}% above average - avoid this date if possible.",
    trend_up_message=(
        "📈 Prices are trending significantly upward. Book earlier in the month for better deals."
    ),
    trend_down_message=(
        "📉 Prices are trending downward. Waiting might get you an even better deal."
    ),
    variation_message=(
        "💰 High price variation detected. Flexibility with dates can save you significant money."
    ),
    volume_message=(
        "🔍 Comprehensive month analysis complete. "
        "You have excellent visibility into pricing patterns."
    ),
)


def recommend(
    stats: PriceStatistics,
    quotes_by_source: Mapping[str, Sequence[Quote]],
    profile: RecommendationProfile = MULTI_DATE_PROFILE,
) -> list[str]:
    """Build the ordered list of advisory strings.

    Cada regla se evalúa de forma independiente; si no se cumple su
    condición, no agrega nada. No reordena ni deduplica mensajes.

    Args:
        stats: Resultado de analyze().
        quotes_by_source: Cotizaciones agrupadas por fuente (ver group_by_source).
        profile: Umbrales a usar.

    Returns:
        Lista de recomendaciones, posiblemente vacía.
    """
    average = stats.average_price
    recommendations: list[str] = []

    # === 1-2: Precios atípicos ===
    cheapest = stats.cheapest
    if cheapest.price < average * profile.deal_ratio:
        pct = round_half_up((1 - cheapest.price / average) * 100)
        recommendations.append(
            profile.deal_message.format(
                date=cheapest.date.isoformat(), pct=pct, source=cheapest.source,
            )
        )

    most_expensive = stats.most_expensive
    if most_expensive.price > average * profile.overpriced_ratio:
        pct = round_half_up((most_expensive.price / average - 1) * 100)
        recommendations.append(
            profile.overpriced_message.format(
                date=most_expensive.date.isoformat(), pct=pct, source=most_expensive.source,
            )
        )

    # === 3-4: Comparación de fuentes ===
    source_averages = _source_averages(quotes_by_source)
    if source_averages and average > 0:
        best_source, best_avg = min(source_averages.items(), key=lambda kv: kv[1])
        if best_avg <= average * (1 - profile.source_margin):
            pct = round_half_up((1 - best_avg / average) * 100)
            recommendations.append(
                f"💡 {best_source} tends to have better prices for this route "
                f"({pct}% below average)."
            )

        if profile.warn_expensive_sources:
            worst_source, worst_avg = max(source_averages.items(), key=lambda kv: kv[1])
            if worst_avg >= average * (1 + profile.source_margin):
                pct = round_half_up((worst_avg / average - 1) * 100)
                recommendations.append(
                    f"⚠️  {worst_source} tends to have higher prices for this route "
                    f"({pct}% above average)."
                )

    # === 5-6: Patrones temporales ===
    weekend = stats.weekend
    if weekend is not None:
        if weekend.premium_percent > profile.weekend_expensive_percent:
            recommendations.append(
                f"💡 Weekend flights are {weekend.premium_percent}% more expensive. "
                "Consider flying on weekdays to save money."
            )
        elif weekend.premium_percent < profile.weekend_cheaper_percent:
            recommendations.append(
                f"🎉 Weekend flights are actually {abs(weekend.premium_percent)}% "
                "cheaper! Great time to travel."
            )

    trend = stats.trend.coefficient
    if trend > profile.trend_threshold:
        recommendations.append(profile.trend_up_message)
    elif trend < -profile.trend_threshold:
        recommendations.append(profile.trend_down_message)

    # === 7-8: Notas generales ===
    if stats.price_range > average * profile.variation_ratio:
        recommendations.append(profile.variation_message)

    if stats.total_dates > profile.volume_threshold:
        recommendations.append(profile.volume_message.format(count=stats.total_dates))

    logger.debug(
        "Recomendaciones (%s): %d generadas", profile.name, len(recommendations),
    )
    return recommendations


def group_by_source(quotes: Sequence[Quote]) -> dict[str, list[Quote]]:
    """Group quotes by source, keeping the order in which sources first appear."""
    groups: dict[str, list[Quote]] = {}
    for quote in quotes:
        groups.setdefault(quote.source, []).append(quote)
    return groups


def top_deals(quotes: Sequence[Quote], limit: int = 5) -> list[Deal]:
    """Cheapest quote per (date, source), ranked by price.

    Empates: fecha más temprana, luego nombre de fuente.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    cheapest: dict[tuple, Quote] = {}
    for quote in quotes:
        key = (quote.date, quote.source)
        current = cheapest.get(key)
        if current is None or quote.price < current.price:
            cheapest[key] = quote

    deals = [
        Deal(
            date=q.date,
            source=q.source,
            price=q.price,
            currency=q.currency,
            airline=q.airline,
        )
        for q in cheapest.values()
    ]
    deals.sort(key=lambda d: (d.price, d.date, d.source))
    return deals[:limit]


# Umbrales de analyze_flight_details (minutos y moneda de la cotización)
LONG_FLIGHT_MINUTES = 480
SHORT_FLIGHT_MINUTES = 120
CHEAP_PRICE = 300
EXPENSIVE_PRICE = 800


def analyze_flight_details(quote: Quote) -> list[str]:
    """Rule-based insights about a single itinerary.

    Reglas independientes sobre duración, escalas, precio y aerolínea.
    Si la fuente no informó la duración, esa regla no aplica.
    """
    insights: list[str] = []

    duration = quote.duration_minutes
    if duration is not None:
        if duration > LONG_FLIGHT_MINUTES:
            insights.append(
                "⏰ This is a long flight. Consider bringing entertainment and comfort items."
            )
        elif duration < SHORT_FLIGHT_MINUTES:
            insights.append("⚡ Short flight - perfect for quick trips!")

    if quote.stops == 0:
        insights.append("✈️ Direct flight - no layovers to worry about.")
    elif quote.stops == 1:
        insights.append("🔄 One stop - reasonable compromise between price and convenience.")
    else:
        insights.append("🔄 Multiple stops - this route has several layovers.")

    if quote.price < CHEAP_PRICE:
        insights.append("💰 Excellent price for this route!")
    elif quote.price > EXPENSIVE_PRICE:
        insights.append("💸 Higher price point - consider if the convenience is worth the cost.")

    if quote.airline:
        insights.append(f"🏢 Flying with {quote.airline} - check their baggage and meal policies.")

    return insights


def _source_averages(quotes_by_source: Mapping[str, Sequence[Quote]]) -> dict[str, float]:
    """Average of each source's own per-date minimum prices.

    Se conserva el orden de las fuentes, así min()/max() desempatan
    a favor de la primera fuente agrupada.
    """
    averages: dict[str, float] = {}
    for source, quotes in quotes_by_source.items():
        if not quotes:
            continue
        daily = reduce_per_date(quotes)
        averages[source] = statistics.fmean(p.price for p in daily)
    return averages
