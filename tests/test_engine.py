"""Tests for the high-level search pipelines.

Tests del engine: perfiles, enumeración del mes, desempate del mejor
precio y determinismo de punta a punta con datos simulados.
"""

from datetime import date

import pytest

from farescope.adapters import BaseAdapter, SkyscannerAdapter
from farescope.engine import (
    find_best_monthly_flights,
    get_best_price_recommendation,
    search_flights,
    search_multiple_dates,
)
from farescope.errors import NoDataError
from farescope.models import AppSettings, CabinClass, Passengers, Quote

D1 = date(2024, 12, 2)
D2 = date(2024, 12, 3)
D3 = date(2024, 12, 4)


class StaticAdapter(BaseAdapter):
    """Conector de prueba: precio por fecha, o un precio fijo para cualquier fecha."""

    def __init__(self, name, prices=None, flat_price=None):
        super().__init__(AppSettings())
        self._name = name
        self.prices = prices or {}
        self.flat_price = flat_price

    @property
    def source_name(self) -> str:
        return self._name

    def strategies(self):
        return [("static", self._fetch)]

    async def _fetch(self, request):
        price = self.prices.get(request.departure_date, self.flat_price)
        if price is None:
            return []
        return [Quote(request.departure_date, self._name, request.cabin_class, price, airline="Test Air")]


class ListAdapter(BaseAdapter):
    """Conector de prueba que devuelve varias cotizaciones por fecha, desordenadas."""

    def __init__(self, name, quotes):
        super().__init__(AppSettings())
        self._name = name
        self.quotes = quotes

    @property
    def source_name(self) -> str:
        return self._name

    def strategies(self):
        return [("static", self._fetch)]

    async def _fetch(self, request):
        return [
            Quote(request.departure_date, self._name, request.cabin_class, price, airline=airline)
            for price, airline in self.quotes
        ]


@pytest.fixture
def settings():
    return AppSettings(delay_between_requests_seconds=0, top_deals_limit=2)


@pytest.mark.asyncio
async def test_search_multiple_dates_report(settings):
    adapters = {
        "skyscanner": StaticAdapter("skyscanner", {D1: 100, D2: 400, D3: 250}),
        "google_flights": StaticAdapter("google_flights", {D1: 120, D2: 410, D3: 260}),
    }

    report = await search_multiple_dates(
        "JFK", "LHR", [D1, D2, D3], Passengers(adults=2),
        adapters=adapters, settings=settings,
    )

    assert report.profile == "multi_date"
    assert report.statistics.cheapest.price == 100
    assert report.statistics.cheapest.source == "skyscanner"
    assert report.statistics.rounded_average == 250
    assert report.recommendations[0].startswith("🚀 Great deal found! 2024-12-02")
    assert [d.price for d in report.top_deals] == [100, 120]
    assert report.collection.failures == []


@pytest.mark.asyncio
async def test_monthly_search_covers_every_day(settings):
    """Febrero de 2024 tiene 29 días."""
    adapters = {"skyscanner": StaticAdapter("skyscanner", flat_price=300)}

    report = await find_best_monthly_flights(
        "JFK", "LHR", "2024-02", Passengers(),
        sources=["skyscanner"], adapters=adapters, settings=settings,
    )

    assert report.profile == "monthly"
    assert report.statistics.total_dates == 29
    assert report.collection.dates[0] == date(2024, 2, 1)
    assert report.collection.dates[-1] == date(2024, 2, 29)
    # Precio constante: sin tendencia ni variación, pero sí la nota de volumen
    assert len(report.recommendations) == 1
    assert report.recommendations[0].startswith("🔍 You've searched across 29 dates")


@pytest.mark.asyncio
@pytest.mark.parametrize("month", ["2024-13", "2024", "diciembre", "2024-00"])
async def test_monthly_search_rejects_invalid_month(settings, month):
    with pytest.raises(ValueError):
        await find_best_monthly_flights(
            "JFK", "LHR", month, Passengers(),
            adapters={"skyscanner": StaticAdapter("skyscanner", flat_price=1)},
            settings=settings,
        )


@pytest.mark.asyncio
async def test_monthly_search_without_weekend_analysis(settings):
    adapters = {"skyscanner": StaticAdapter("skyscanner", flat_price=300)}

    report = await find_best_monthly_flights(
        "JFK", "LHR", "2024-12", Passengers(),
        sources=["skyscanner"], include_weekend_analysis=False,
        adapters=adapters, settings=settings,
    )

    assert report.statistics.weekend is None


@pytest.mark.asyncio
async def test_no_data_propagates(settings):
    adapters = {"skyscanner": StaticAdapter("skyscanner")}

    with pytest.raises(NoDataError):
        await search_multiple_dates(
            "JFK", "LHR", [D1], Passengers(),
            sources=["skyscanner"], adapters=adapters, settings=settings,
        )


@pytest.mark.asyncio
async def test_best_price_per_source_and_overall(settings):
    adapters = {
        "skyscanner": StaticAdapter("skyscanner", {D1: 300, D2: 180, D3: 250}),
        "google_flights": StaticAdapter("google_flights", {D1: 210, D2: 400, D3: 190}),
    }

    summary = await get_best_price_recommendation(
        "JFK", "LHR", [D1, D2, D3], Passengers(),
        adapters=adapters, settings=settings,
    )

    assert summary.by_source["skyscanner"].date == D2
    assert summary.by_source["skyscanner"].price == 180
    assert summary.by_source["google_flights"].date == D3
    assert summary.best.source == "skyscanner"
    assert summary.best.price == 180


@pytest.mark.asyncio
async def test_best_price_tie_prefers_earliest_date_then_source_order(settings):
    adapters = {
        "skyscanner": StaticAdapter("skyscanner", {D1: 200, D2: 150}),
        "google_flights": StaticAdapter("google_flights", {D1: 150, D2: 150}),
    }

    summary = await get_best_price_recommendation(
        "JFK", "LHR", [D1, D2], Passengers(),
        sources=["skyscanner", "google_flights"],
        adapters=adapters, settings=settings,
    )

    # Mismo precio: D1 (google) gana sobre D2 (skyscanner) por fecha
    assert summary.best.date == D1
    assert summary.best.source == "google_flights"

    adapters = {
        "skyscanner": StaticAdapter("skyscanner", {D1: 150}),
        "google_flights": StaticAdapter("google_flights", {D1: 150}),
    }
    summary = await get_best_price_recommendation(
        "JFK", "LHR", [D1], Passengers(),
        sources=["google_flights", "skyscanner"],
        adapters=adapters, settings=settings,
    )

    assert summary.best.source == "google_flights"


@pytest.mark.asyncio
async def test_mock_pipeline_is_deterministic():
    """Sin API key, Skyscanner usa datos simulados: mismo pedido, mismo reporte."""
    settings = AppSettings(delay_between_requests_seconds=0, skyscanner_api_key=None)

    async def run():
        return await search_multiple_dates(
            "JFK", "LHR", [D1, D2, D3, date(2024, 12, 7)], Passengers(),
            sources=["skyscanner"], cabin_class=CabinClass.ECONOMY,
            adapters={"skyscanner": SkyscannerAdapter(settings)},
            settings=settings,
        )

    first = await run()
    second = await run()

    assert first.statistics == second.statistics
    assert first.recommendations == second.recommendations
    assert first.top_deals == second.top_deals
    assert all(q.source == "skyscanner" for q in first.collection.quotes)


@pytest.mark.asyncio
async def test_search_flights_returns_cheapest_first(settings):
    adapters = {
        "skyscanner": ListAdapter("skyscanner", [(450, "Iberia"), (210, "Delta"), (450, "KLM"), (300, "BA")]),
        "google_flights": ListAdapter("google_flights", [(90, "Nope")]),
    }

    quotes = await search_flights(
        "skyscanner", "JFK", "LHR", D1, Passengers(),
        adapters=adapters, settings=settings,
    )

    # Solo la fuente pedida; a igual precio se respeta el orden original
    assert [(q.price, q.airline) for q in quotes] == [
        (210, "Delta"), (300, "BA"), (450, "Iberia"), (450, "KLM"),
    ]
    assert all(q.date == D1 and q.source == "skyscanner" for q in quotes)


@pytest.mark.asyncio
async def test_search_flights_unknown_source(settings):
    with pytest.raises(ValueError):
        await search_flights(
            "kayak", "JFK", "LHR", D1, Passengers(),
            adapters={"skyscanner": ListAdapter("skyscanner", [(100, "BA")])},
            settings=settings,
        )


@pytest.mark.asyncio
async def test_search_flights_without_results_raises(settings):
    with pytest.raises(NoDataError):
        await search_flights(
            "skyscanner", "JFK", "LHR", D1, Passengers(),
            adapters={"skyscanner": ListAdapter("skyscanner", [])},
            settings=settings,
        )
