"""Tests for the multi-source collection orchestrator.

Tests del collector: tolerancia a fallos parciales, NoDataError cuando
no queda nada, orden determinístico del resultado y límite de concurrencia.
"""

import asyncio
from datetime import date

import pytest

from farescope.adapters import BaseAdapter
from farescope.collector import collect
from farescope.errors import NoDataError
from farescope.models import AppSettings, CabinClass, Passengers, Quote, SearchRequest

D1 = date(2024, 12, 2)
D2 = date(2024, 12, 3)
D3 = date(2024, 12, 4)


class FakeAdapter(BaseAdapter):
    """Conector de prueba con precios fijos por fecha."""

    def __init__(self, name, prices, fail_dates=(), delays=None, settings=None):
        super().__init__(settings or AppSettings())
        self._name = name
        self.prices = prices
        self.fail_dates = set(fail_dates)
        self.delays = delays or {}
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def source_name(self) -> str:
        return self._name

    def strategies(self):
        return [("fake", self._fetch)]

    async def _fetch(self, request: SearchRequest) -> list[Quote]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(request.departure_date, 0))
            if request.departure_date in self.fail_dates:
                raise RuntimeError("connection reset")
            price = self.prices.get(request.departure_date)
            if price is None:
                return []
            return [
                Quote(
                    date=request.departure_date,
                    source=self._name,
                    cabin_class=request.cabin_class,
                    price=price,
                )
            ]
        finally:
            self.in_flight -= 1


@pytest.fixture
def settings():
    return AppSettings(max_concurrent_requests=4, delay_between_requests_seconds=0)


@pytest.mark.asyncio
async def test_partial_failure_is_tolerated_and_recorded(settings):
    """Una fuente falla en una fecha → el resto se conserva, el fallo queda registrado."""
    adapters = {
        "skyscanner": FakeAdapter("skyscanner", {D1: 100, D2: 200}, fail_dates=[D2]),
        "google_flights": FakeAdapter("google_flights", {D1: 150, D2: 250}),
    }

    result = await collect(
        "jfk", "lhr", [D1, D2], Passengers(), CabinClass.ECONOMY,
        ["skyscanner", "google_flights"], adapters=adapters, settings=settings,
    )

    assert result.origin == "JFK"
    assert result.destination == "LHR"
    assert [(q.date, q.source) for q in result.quotes] == [
        (D1, "skyscanner"),
        (D1, "google_flights"),
        (D2, "google_flights"),
    ]
    assert len(result.failures) == 1
    assert result.failures[0].date == D2
    assert result.failures[0].source == "skyscanner"
    assert "connection reset" in result.failures[0].reason


@pytest.mark.asyncio
async def test_all_calls_failing_raises_no_data(settings):
    adapters = {"skyscanner": FakeAdapter("skyscanner", {}, fail_dates=[D1, D2])}

    with pytest.raises(NoDataError) as exc_info:
        await collect(
            "JFK", "LHR", [D1, D2], Passengers(), CabinClass.ECONOMY,
            ["skyscanner"], adapters=adapters, settings=settings,
        )

    message = str(exc_info.value)
    assert "JFK" in message
    assert "LHR" in message
    assert "2024-12-02" in message


@pytest.mark.asyncio
async def test_all_calls_empty_raises_no_data(settings):
    """Resultados vacíos no son error individual, pero si todo está vacío falla."""
    adapters = {"skyscanner": FakeAdapter("skyscanner", {})}

    with pytest.raises(NoDataError):
        await collect(
            "JFK", "LHR", [D1], Passengers(), CabinClass.ECONOMY,
            ["skyscanner"], adapters=adapters, settings=settings,
        )


@pytest.mark.asyncio
async def test_empty_result_recorded_as_failure(settings):
    adapters = {"skyscanner": FakeAdapter("skyscanner", {D1: 100})}

    result = await collect(
        "JFK", "LHR", [D1, D2], Passengers(), CabinClass.ECONOMY,
        ["skyscanner"], adapters=adapters, settings=settings,
    )

    assert len(result.quotes) == 1
    assert result.failures[0].date == D2
    assert result.failures[0].reason == "no results"


@pytest.mark.asyncio
async def test_result_order_does_not_depend_on_completion_order(settings):
    """La primera fecha tarda más, pero sigue primera en el resultado."""
    adapters = {
        "skyscanner": FakeAdapter(
            "skyscanner",
            {D1: 100, D2: 200, D3: 300},
            delays={D1: 0.05, D2: 0.01, D3: 0},
        ),
    }

    result = await collect(
        "JFK", "LHR", [D1, D2, D3], Passengers(), CabinClass.ECONOMY,
        ["skyscanner"], adapters=adapters, settings=settings,
    )

    assert [q.date for q in result.quotes] == [D1, D2, D3]


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    settings = AppSettings(max_concurrent_requests=2, delay_between_requests_seconds=0)
    days = [date(2024, 12, d) for d in range(1, 9)]
    adapter = FakeAdapter(
        "skyscanner",
        {d: 100 + i for i, d in enumerate(days)},
        delays={d: 0.01 for d in days},
    )

    result = await collect(
        "JFK", "LHR", days, Passengers(), CabinClass.ECONOMY,
        ["skyscanner"], adapters={"skyscanner": adapter}, settings=settings,
    )

    assert len(result.quotes) == 8
    assert 1 <= adapter.max_in_flight <= 2


@pytest.mark.asyncio
async def test_same_price_from_two_sources_is_kept_twice(settings):
    """El collector no deduplica entre fuentes."""
    adapters = {
        "skyscanner": FakeAdapter("skyscanner", {D1: 100}),
        "google_flights": FakeAdapter("google_flights", {D1: 100}),
    }

    result = await collect(
        "JFK", "LHR", [D1], Passengers(), CabinClass.ECONOMY,
        ["skyscanner", "google_flights"], adapters=adapters, settings=settings,
    )

    assert len(result.quotes) == 2
    assert result.sources == ["skyscanner", "google_flights"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "dates, sources, passengers",
    [
        ([], ["skyscanner"], Passengers()),
        ([D1], [], Passengers()),
        ([D1], ["kayak"], Passengers()),
        ([D1], ["skyscanner"], Passengers(adults=0)),
    ],
)
async def test_invalid_requests_are_rejected(settings, dates, sources, passengers):
    adapters = {"skyscanner": FakeAdapter("skyscanner", {D1: 100})}

    with pytest.raises(ValueError):
        await collect(
            "JFK", "LHR", dates, passengers, CabinClass.ECONOMY,
            sources, adapters=adapters, settings=settings,
        )
