"""Abstract base class for all flight price source connectors.

Cada conector expone una sola capacidad, search(), y por dentro prueba
una lista ordenada de estrategias (API oficial, scraping, datos simulados)
hasta que una devuelve resultados. El orquestador no sabe cuántas hay.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from farescope.errors import ConnectorFailure
from farescope.models import AppSettings, Quote, SearchRequest

logger = logging.getLogger(__name__)

Strategy = Callable[[SearchRequest], Awaitable[list[Quote]]]


class BaseAdapter(ABC):
    """Base class for flight price source connectors."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Unique identifier for this data source (e.g., 'skyscanner')."""
        ...

    @abstractmethod
    def strategies(self) -> list[tuple[str, Strategy]]:
        """Ordered (name, coroutine function) pairs to try for each request."""
        ...

    async def search(self, request: SearchRequest) -> list[Quote]:
        """Fetch quotes for one (origin, destination, date) request.

        Prueba las estrategias en orden y devuelve el primer resultado no
        vacío. Si una estrategia falla, se loggea y se sigue con la próxima.

        Raises:
            ConnectorFailure: Si todas las estrategias lanzaron error.
        """
        errors: list[str] = []
        strategies = self.strategies()

        for name, strategy in strategies:
            try:
                quotes = await strategy(request)
            except Exception as e:
                logger.warning(
                    "%s/%s: error al consultar %s→%s %s: %s",
                    self.source_name, name,
                    request.origin, request.destination, request.departure_date, e,
                )
                errors.append(f"{name}: {e}")
                continue

            if quotes:
                logger.debug(
                    "%s/%s: %d cotizaciones para %s→%s %s",
                    self.source_name, name, len(quotes),
                    request.origin, request.destination, request.departure_date,
                )
                return quotes

        if strategies and len(errors) == len(strategies):
            raise ConnectorFailure(self.source_name, "; ".join(errors))

        return []
