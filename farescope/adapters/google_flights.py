"""Google Flights price connector.

Estrategias, en orden:
1. SearchAPI (engine google_flights), JSON estructurado. Requiere SEARCHAPI_KEY.
2. fast-flights: decodifica los parámetros Protobuf de las URLs de Google
   Flights y parsea el HTML, sin navegador. Es sincrónico, corre en un thread.
3. Datos simulados (si settings.use_mock_fallback está activo).

Install: pip install fast-flights
Docs: https://github.com/AWeirdDev/flights
"""

import asyncio
import logging
import re

import httpx

from farescope.adapters.base import BaseAdapter, Strategy
from farescope.adapters.mock import mock_quotes
from farescope.errors import ConnectorFailure
from farescope.models import CabinClass, Quote, SearchRequest

logger = logging.getLogger(__name__)

SEARCHAPI_URL = "https://www.searchapi.io/api/v1/search"

# Modo de fetch de fast-flights: "common" es el más rápido
FETCH_MODE = "common"

# fast-flights usa guión en premium-economy
FAST_FLIGHTS_SEAT: dict[CabinClass, str] = {
    CabinClass.ECONOMY: "economy",
    CabinClass.PREMIUM_ECONOMY: "premium-economy",
    CabinClass.BUSINESS: "business",
    CabinClass.FIRST: "first",
}

MOCK_BASE_PRICES = [289, 312, 348, 395, 472]
MOCK_AIRLINES = ["United", "Delta", "American Airlines", "JetBlue", "Alaska Airlines"]


def _parse_price(price_str: str | None) -> float | None:
    """Parse a display price like '$1,234', '€450' or '1.234,50 €' to float."""
    if not price_str:
        return None

    cleaned = re.sub(r"[^\d.,]", "", str(price_str))
    if not cleaned:
        return None

    if "," in cleaned and "." in cleaned:
        # El último separador es el decimal
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        # 1,234 (miles) vs 1,50 (decimal europeo)
        tail = cleaned.split(",")[-1]
        cleaned = cleaned.replace(",", "") if len(tail) == 3 else cleaned.replace(",", ".")

    try:
        return float(cleaned)
    except ValueError:
        logger.warning("No se pudo parsear precio: '%s' → '%s'", price_str, cleaned)
        return None


def _parse_stops(stops: str | int | None) -> int:
    """Parse 'Nonstop', '1 stop', '2 stops' or an int."""
    if stops is None:
        return 0
    if isinstance(stops, int):
        return stops

    text = str(stops).lower()
    if "nonstop" in text or "direct" in text:
        return 0

    match = re.search(r"(\d+)", text)
    return int(match.group(1)) if match else 0


def _parse_duration(duration: str | int | None) -> int | None:
    """Parse '2 hr 30 min', '2h 30m' or minutes as an int. None si no hay dato."""
    if duration is None or duration == "":
        return None
    if isinstance(duration, int):
        return duration

    text = str(duration).strip().lower()
    if text.isdigit():
        return int(text)

    hours = re.search(r"(\d+)\s*h", text)
    minutes = re.search(r"(\d+)\s*m", text)
    if not hours and not minutes:
        return None

    return (int(hours.group(1)) * 60 if hours else 0) + (int(minutes.group(1)) if minutes else 0)


def _detect_currency(price_str: str | None, default: str) -> str:
    """Guess the currency from the symbol or prefix of a display price."""
    if not price_str:
        return default

    text = str(price_str).upper()
    if "€" in text or "EUR" in text:
        return "EUR"
    if "£" in text or "GBP" in text:
        return "GBP"
    if "ARS" in text or "AR$" in text:
        return "ARS"
    if "$" in text or "USD" in text:
        return "USD"
    return default


class GoogleFlightsAdapter(BaseAdapter):
    """Connector for Google Flights via SearchAPI or fast-flights."""

    @property
    def source_name(self) -> str:
        return "google_flights"

    def strategies(self) -> list[tuple[str, Strategy]]:
        strategies: list[tuple[str, Strategy]] = [
            ("searchapi", self._search_searchapi),
            ("fast_flights", self._search_fast_flights),
        ]
        if self.settings.use_mock_fallback:
            strategies.append(("mock", self._search_mock))
        return strategies

    async def _search_searchapi(self, request: SearchRequest) -> list[Quote]:
        """Query SearchAPI's google_flights engine for a one-way trip."""
        api_key = self.settings.searchapi_key
        if not api_key:
            logger.debug("Google Flights: sin SEARCHAPI_KEY, salteando SearchAPI.")
            return []

        params = {
            "api_key": api_key,
            "engine": "google_flights",
            "flight_type": "one_way",
            "departure_id": request.origin,
            "arrival_id": request.destination,
            "outbound_date": request.departure_date.isoformat(),
            "adults": request.passengers.adults,
            "children": request.passengers.children,
            "infants_in_seat": request.passengers.infants,
            "travel_class": request.cabin_class.value,
            "currency": self.settings.currency,
            "gl": "us",
            "hl": "en",
        }

        async with httpx.AsyncClient(timeout=self.settings.request_timeout_seconds) as client:
            response = await client.get(
                SEARCHAPI_URL,
                params=params,
                headers={"User-Agent": self.settings.user_agent},
            )
            response.raise_for_status()

        data = response.json()

        # La respuesta separa best_flights y other_flights; usamos ambos
        offers = (data.get("best_flights") or []) + (data.get("other_flights") or [])

        quotes: list[Quote] = []
        for offer in offers:
            price = offer.get("price")
            if price is None:
                continue

            segments = offer.get("flights") or []
            quotes.append(
                Quote(
                    date=request.departure_date,
                    source=self.source_name,
                    cabin_class=request.cabin_class,
                    price=float(price),
                    currency=self.settings.currency,
                    airline=segments[0].get("airline", "") if segments else "",
                    stops=max(len(segments) - 1, 0),
                    duration_minutes=_parse_duration(offer.get("total_duration")),
                )
            )

        return quotes

    async def _search_fast_flights(self, request: SearchRequest) -> list[Quote]:
        """Scrape Google Flights through the fast-flights library."""
        try:
            from fast_flights import FlightData, Passengers, get_flights
        except ImportError:
            raise ConnectorFailure(
                self.source_name, "fast-flights no está instalado (pip install fast-flights)",
            ) from None

        flight_data = [
            FlightData(
                date=request.departure_date.isoformat(),
                from_airport=request.origin,
                to_airport=request.destination,
            )
        ]

        # fast-flights es sincrónico, lo ejecutamos en un thread
        result = await asyncio.to_thread(
            get_flights,
            flight_data=flight_data,
            trip="one-way",
            seat=FAST_FLIGHTS_SEAT[request.cabin_class],
            passengers=Passengers(
                adults=request.passengers.adults,
                children=request.passengers.children,
                infants_in_seat=request.passengers.infants,
            ),
            fetch_mode=FETCH_MODE,
        )

        if not result or not result.flights:
            return []

        quotes: list[Quote] = []
        skipped_currency = 0
        for flight in result.flights:
            price = _parse_price(flight.price)
            if price is None:
                continue

            # Mezclar monedas rompería los promedios
            currency = _detect_currency(flight.price, self.settings.currency)
            if currency != self.settings.currency:
                skipped_currency += 1
                continue

            quotes.append(
                Quote(
                    date=request.departure_date,
                    source=self.source_name,
                    cabin_class=request.cabin_class,
                    price=price,
                    currency=currency,
                    airline=str(flight.name) if flight.name else "",
                    stops=_parse_stops(flight.stops),
                    duration_minutes=_parse_duration(getattr(flight, "duration", None)),
                )
            )

        if skipped_currency:
            logger.warning(
                "Google Flights: %d precios descartados por moneda distinta de %s",
                skipped_currency, self.settings.currency,
            )
        return quotes

    async def _search_mock(self, request: SearchRequest) -> list[Quote]:
        return mock_quotes(
            self.source_name, request, MOCK_BASE_PRICES, MOCK_AIRLINES,
            currency=self.settings.currency,
        )
