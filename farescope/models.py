"""Shared data models for the flight price analysis engine."""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class CabinClass(str, Enum):
    """Cabin classes accepted by every source connector."""

    ECONOMY = "economy"
    PREMIUM_ECONOMY = "premium_economy"
    BUSINESS = "business"
    FIRST = "first"


@dataclass(frozen=True)
class Passengers:
    """Passenger counts for a search. Al menos un adulto es obligatorio."""

    adults: int = 1
    children: int = 0
    infants: int = 0


@dataclass(frozen=True)
class Quote:
    """A single price observation, source-agnostic.

    Cotización de una fuente para una fecha. Todos los adapters devuelven
    objetos de este tipo; el engine nunca sabe de qué estrategia vino.
    """

    date: date
    source: str  # "skyscanner", "google_flights"
    cabin_class: CabinClass
    price: float  # Precio total, nunca negativo
    currency: str = "USD"
    airline: str = ""  # Solo descriptivo, no afecta las estadísticas
    stops: int = 0
    duration_minutes: int | None = None  # Duración total en minutos, si la fuente la informa

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"Quote price must be non-negative, got {self.price}")


@dataclass(frozen=True)
class SearchRequest:
    """One (origin, destination, date) request sent to a single connector."""

    origin: str
    destination: str
    departure_date: date
    passengers: Passengers
    cabin_class: CabinClass = CabinClass.ECONOMY


@dataclass(frozen=True)
class CollectionFailure:
    """Record of a (date, source) call that produced no quotes."""

    date: date
    source: str
    reason: str


@dataclass
class CollectionResult:
    """Quotes gathered by one orchestration run plus its failure log.

    Nunca está vacío: si no hubo ninguna cotización, el orquestador
    lanza NoDataError en vez de devolver esto.
    """

    origin: str
    destination: str
    dates: list[date]
    cabin_class: CabinClass
    quotes: list[Quote]
    failures: list[CollectionFailure] = field(default_factory=list)

    @property
    def sources(self) -> list[str]:
        """Sources that yielded at least one quote, in first-seen order."""
        return list(dict.fromkeys(q.source for q in self.quotes))


@dataclass(frozen=True)
class PricePoint:
    """A date's representative (minimum) price and the source that offered it."""

    date: date
    price: float
    source: str


@dataclass(frozen=True)
class PriceDistribution:
    """Spread of per-date minimum prices. Cuartiles por índice, sin interpolar."""

    min: float
    q25: float
    median: float
    q75: float
    max: float
    std_dev: float


@dataclass(frozen=True)
class WeekendSplit:
    """Weekend vs weekday comparison. Solo existe si hay fechas de ambos grupos."""

    avg_weekend: float
    avg_weekday: float
    premium_percent: int
    weekend_dates: tuple[date, ...]
    weekday_dates: tuple[date, ...]


@dataclass(frozen=True)
class TrendAnalysis:
    """Direction and size of the price slope across the searched dates.

    La pendiente se calcula contra el índice de cada fecha, no contra los
    días de calendario entre ellas.
    """

    coefficient: float  # Pendiente normalizada por el precio promedio
    direction: str  # "increasing", "decreasing" o "stable"
    strength: float
    volatility: float


@dataclass(frozen=True)
class PriceStatistics:
    """Read-only result of one analysis call.

    Se recalcula en cada llamada; nunca se muta ni se persiste.
    average_price queda sin redondear para que las recomendaciones
    no acumulen error de redondeo.
    """

    cheapest: PricePoint
    most_expensive: PricePoint
    average_price: float
    price_range: float
    distribution: PriceDistribution
    trend: TrendAnalysis
    daily_prices: tuple[PricePoint, ...]  # Orden cronológico
    weekend: WeekendSplit | None = None

    @property
    def rounded_average(self) -> int:
        """Average rounded half-up to a whole currency unit, for display."""
        return round_half_up(self.average_price)

    @property
    def total_dates(self) -> int:
        return len(self.daily_prices)


@dataclass(frozen=True)
class Deal:
    """Cheapest quote of one (date, source) pair, used for the top-N list."""

    date: date
    source: str
    price: float
    currency: str
    airline: str = ""


@dataclass
class AnalysisReport:
    """Everything a pipeline hands back to its caller."""

    profile: str  # "multi_date" o "monthly"
    collection: CollectionResult
    statistics: PriceStatistics
    recommendations: list[str]
    top_deals: list[Deal]


@dataclass(frozen=True)
class BestPriceSummary:
    """Best (date, price) per source plus the overall winner."""

    best: PricePoint
    by_source: dict[str, PricePoint]


@dataclass
class SearchConfig:
    """A saved search loaded from the config file.

    Cada búsqueda define la ruta, las fuentes y, o bien un mes completo
    ("YYYY-MM"), o bien una lista explícita de fechas.
    """

    origin: str
    destination: str
    sources: list[str]
    month: str | None = None
    dates: list[date] = field(default_factory=list)
    passengers: Passengers = field(default_factory=Passengers)
    cabin_class: CabinClass = CabinClass.ECONOMY
    include_weekend_analysis: bool = True

    @property
    def label(self) -> str:
        return f"{self.origin}-{self.destination}"


@dataclass
class AppSettings:
    """Global application settings loaded from config.

    Concurrencia, timeouts de los conectores y comportamiento de
    fallback a datos simulados.
    """

    # Máximo de llamadas (fecha, fuente) en vuelo al mismo tiempo
    max_concurrent_requests: int = 4
    request_timeout_seconds: float = 30.0
    delay_between_requests_seconds: float = 0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/145.0.0.0 Safari/537.36"
    )
    # Si está activo, cada conector termina generando datos simulados
    # cuando la API y el scraping no devuelven nada.
    use_mock_fallback: bool = True
    top_deals_limit: int = 5
    currency: str = "USD"
    skyscanner_api_key: str | None = None
    searchapi_key: str | None = None


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3, -2.5 -> -2) instead of to the nearest even."""
    return math.floor(value + 0.5)
