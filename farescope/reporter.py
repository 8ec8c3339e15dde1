"""Plain-text rendering of analysis reports for the console."""

from collections.abc import Sequence

from farescope.models import AnalysisReport, BestPriceSummary, Quote
from farescope.recommender import analyze_flight_details


def format_report(report: AnalysisReport) -> str:
    """Format an AnalysisReport into a readable block of text."""
    stats = report.statistics
    collection = report.collection
    currency = report.top_deals[0].currency if report.top_deals else ""

    lines = [
        f"✈️  {collection.origin} → {collection.destination} "
        f"({collection.cabin_class.value}, {stats.total_dates} fechas)",
        "",
        f"💰 Más barato: {stats.cheapest.date.isoformat()} — "
        f"{currency} {stats.cheapest.price:,.0f} ({stats.cheapest.source})",
        f"💸 Más caro: {stats.most_expensive.date.isoformat()} — "
        f"{currency} {stats.most_expensive.price:,.0f} ({stats.most_expensive.source})",
        f"📊 Promedio: {currency} {stats.rounded_average:,} | Rango: {stats.price_range:,.0f}",
        f"📈 Tendencia: {stats.trend.direction} "
        f"(fuerza {stats.trend.strength:.3f}, volatilidad {stats.trend.volatility:.3f})",
    ]

    if stats.weekend is not None:
        lines.append(
            f"📅 Fin de semana {stats.weekend.avg_weekend:,.0f} vs. semana "
            f"{stats.weekend.avg_weekday:,.0f} ({stats.weekend.premium_percent:+d}%)"
        )

    if report.top_deals:
        lines.extend(["", "🏆 Mejores ofertas:"])
        for i, deal in enumerate(report.top_deals, 1):
            airline = f" — {deal.airline}" if deal.airline else ""
            lines.append(
                f"  {i}. {deal.date.isoformat()} {deal.currency} {deal.price:,.0f} "
                f"({deal.source}){airline}"
            )

    if report.recommendations:
        lines.extend(["", "Recomendaciones:"])
        lines.extend(f"  {r}" for r in report.recommendations)

    if collection.failures:
        lines.extend(["", f"⚠️ {len(collection.failures)} consultas sin resultados"])

    return "\n".join(lines)


def format_best_price(summary: BestPriceSummary) -> str:
    """Format a BestPriceSummary. Primero el ganador, después una línea por fuente."""
    lines = [
        f"🏆 Mejor precio: {summary.best.date.isoformat()} — "
        f"{summary.best.price:,.0f} ({summary.best.source})",
    ]
    for source, point in summary.by_source.items():
        lines.append(f"  {source}: {point.date.isoformat()} — {point.price:,.0f}")
    return "\n".join(lines)


def format_flight_results(source: str, quotes: Sequence[Quote], limit: int = 3) -> str:
    """Format one source's quotes for a single date, with per-flight insights.

    Muestra los primeros `limit` vuelos (ya vienen ordenados por precio).
    """
    if not quotes:
        return f"🔎 {source}: sin vuelos"

    first = quotes[0]
    lines = [f"🔎 {source}: {len(quotes)} vuelos el {first.date.isoformat()}"]

    for i, quote in enumerate(quotes[:limit], 1):
        stops = "directo" if quote.stops == 0 else f"{quote.stops} escala(s)"
        detail = f"  {i}. {quote.currency} {quote.price:,.0f} — {quote.airline or '?'}, {stops}"
        # Duración (si está disponible)
        if quote.duration_minutes:
            hours = quote.duration_minutes // 60
            minutes = quote.duration_minutes % 60
            detail += f", ⏱️ {hours}h {minutes}m"
        lines.append(detail)
        lines.extend(f"     {insight}" for insight in analyze_flight_details(quote))

    return "\n".join(lines)


def print_report(text: str) -> None:
    """Print a formatted report, degrading emojis on consoles that can't encode them."""
    try:
        print(f"\n{'=' * 60}\n{text}\n{'=' * 60}\n")
    except UnicodeEncodeError:
        # cp1252 en Windows no soporta emojis
        clean = text.encode("ascii", errors="ignore").decode("ascii")
        print(f"\n{'=' * 60}\n{clean}\n{'=' * 60}\n")
