"""Exception hierarchy for collection and analysis failures."""

from datetime import date


class FareScopeError(Exception):
    """Base class for every error raised by farescope."""


class ConnectorFailure(FareScopeError):
    """A single connector call failed for one (date, source) pair.

    El orquestador la captura y la registra; nunca llega al usuario
    de forma individual.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class NoDataError(FareScopeError):
    """Every connector call failed or came back empty."""

    def __init__(self, origin: str, destination: str, dates: list[date]) -> None:
        self.origin = origin
        self.destination = destination
        self.dates = list(dates)
        if self.dates:
            span = f"{min(self.dates).isoformat()} to {max(self.dates).isoformat()}"
        else:
            span = "no dates"
        super().__init__(
            f"No flights found from {origin} to {destination} ({span})"
        )


class EmptyInputError(FareScopeError):
    """analyze() was called without any quotes."""

    def __init__(self) -> None:
        super().__init__("No quotes to analyze")
