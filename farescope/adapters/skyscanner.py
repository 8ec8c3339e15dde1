"""Skyscanner price connector.

Estrategias, en orden:
1. API oficial de Skyscanner (live search v3: create + poll). Requiere
   SKYSCANNER_API_KEY; sin key se saltea.
2. Datos simulados (si settings.use_mock_fallback está activo).

Endpoint: POST https://partners.api.skyscanner.net/apiservices/v3/flights/live/search/create
Auth: Header X-API-Key
"""

import asyncio
import logging

import httpx

from farescope.adapters.base import BaseAdapter, Strategy
from farescope.adapters.mock import mock_quotes
from farescope.errors import ConnectorFailure
from farescope.models import AppSettings, Quote, SearchRequest

logger = logging.getLogger(__name__)

SKYSCANNER_API_BASE = "https://partners.api.skyscanner.net/apiservices/v3"

# El create suele devolver resultados parciales; se pollea hasta completar
MAX_POLL_ATTEMPTS = 10
POLL_INTERVAL_SECONDS = 2.0

STATUS_COMPLETE = "RESULT_STATUS_COMPLETE"

# Precios base (economy) usados por los datos simulados
MOCK_BASE_PRICES = [295, 296, 356, 389, 450]
MOCK_AIRLINES = ["British Airways", "Lufthansa", "Air France", "KLM", "Iberia"]


class SkyscannerAdapter(BaseAdapter):
    """Connector for the Skyscanner live flight search."""

    def __init__(self, settings: AppSettings) -> None:
        super().__init__(settings)
        self.poll_interval = POLL_INTERVAL_SECONDS

    @property
    def source_name(self) -> str:
        return "skyscanner"

    def strategies(self) -> list[tuple[str, Strategy]]:
        strategies: list[tuple[str, Strategy]] = [("api", self._search_api)]
        if self.settings.use_mock_fallback:
            strategies.append(("mock", self._search_mock))
        return strategies

    async def _search_api(self, request: SearchRequest) -> list[Quote]:
        """Run a live search against the official API and parse the itineraries."""
        api_key = self.settings.skyscanner_api_key
        if not api_key:
            logger.debug("Skyscanner: sin SKYSCANNER_API_KEY, salteando la API.")
            return []

        headers = {
            "Content-Type": "application/json",
            "X-API-Key": api_key,
            "User-Agent": self.settings.user_agent,
        }

        async with httpx.AsyncClient(timeout=self.settings.request_timeout_seconds) as client:
            response = await client.post(
                f"{SKYSCANNER_API_BASE}/flights/live/search/create",
                json=self._build_query(request),
                headers=headers,
            )
            response.raise_for_status()
            data = response.json()

            # El token sale del create; los polls pueden no repetirlo
            session_token = data.get("sessionToken")
            attempts = 0
            while data.get("status") != STATUS_COMPLETE:
                if attempts >= MAX_POLL_ATTEMPTS:
                    raise ConnectorFailure(self.source_name, "live search timed out")

                if not session_token:
                    raise ConnectorFailure(self.source_name, "missing session token")

                await asyncio.sleep(self.poll_interval)
                response = await client.post(
                    f"{SKYSCANNER_API_BASE}/flights/live/search/poll/{session_token}",
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
                session_token = data.get("sessionToken") or session_token
                attempts += 1

        return self._parse_results(data, request)

    async def _search_mock(self, request: SearchRequest) -> list[Quote]:
        return mock_quotes(
            self.source_name, request, MOCK_BASE_PRICES, MOCK_AIRLINES,
            currency=self.settings.currency,
        )

    def _build_query(self, request: SearchRequest) -> dict:
        """Request body for the create endpoint."""
        departure = request.departure_date
        return {
            "query": {
                "market": "US",
                "locale": "en-US",
                "currency": self.settings.currency,
                "queryLegs": [
                    {
                        "originPlaceId": {"iata": request.origin},
                        "destinationPlaceId": {"iata": request.destination},
                        "date": {
                            "year": departure.year,
                            "month": departure.month,
                            "day": departure.day,
                        },
                    }
                ],
                "adults": request.passengers.adults,
                # La API pide edades; se asume 10 años para cada menor
                "childrenAges": [10] * request.passengers.children,
                "cabinClass": f"CABIN_CLASS_{request.cabin_class.value.upper()}",
            }
        }

    def _parse_results(self, data: dict, request: SearchRequest) -> list[Quote]:
        """Turn the API's itinerary map into quotes.

        La respuesta trae content.results con diccionarios indexados por id:
        itineraries, legs y carriers. Los montos vienen en milésimas.
        """
        results = (data.get("content") or {}).get("results") or {}
        legs = results.get("legs") or {}
        carriers = results.get("carriers") or {}

        quotes: list[Quote] = []
        for itinerary in (results.get("itineraries") or {}).values():
            options = itinerary.get("pricingOptions") or []
            if not options:
                continue

            price = _parse_amount(options[0].get("price") or {})
            if price is None:
                continue

            airline = ""
            stops = 0
            duration = None
            leg_ids = itinerary.get("legIds") or []
            leg = legs.get(leg_ids[0]) if leg_ids else None
            if leg:
                stops = int(leg.get("stopCount", 0))
                duration = leg.get("durationInMinutes")
                carrier_ids = leg.get("marketingCarrierIds") or []
                if carrier_ids:
                    airline = (carriers.get(carrier_ids[0]) or {}).get("name", "")

            quotes.append(
                Quote(
                    date=request.departure_date,
                    source=self.source_name,
                    cabin_class=request.cabin_class,
                    price=price,
                    currency=self.settings.currency,
                    airline=airline,
                    stops=stops,
                    duration_minutes=int(duration) if duration else None,
                )
            )

        logger.info(
            "Skyscanner API: %d itinerarios para %s→%s %s",
            len(quotes), request.origin, request.destination, request.departure_date,
        )
        return quotes


def _parse_amount(price: dict) -> float | None:
    """Parse a price object like {"amount": "312000", "unit": "PRICE_UNIT_MILLI"}."""
    amount = price.get("amount")
    if amount in (None, ""):
        return None

    try:
        value = float(amount)
    except (TypeError, ValueError):
        logger.warning("Skyscanner: monto inválido '%s'", amount)
        return None

    if price.get("unit") == "PRICE_UNIT_MILLI":
        value /= 1000
    return value
