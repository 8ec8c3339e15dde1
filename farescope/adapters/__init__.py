"""Flight price source connectors."""

from farescope.adapters.base import BaseAdapter
from farescope.adapters.google_flights import GoogleFlightsAdapter
from farescope.adapters.skyscanner import SkyscannerAdapter
from farescope.models import AppSettings

# Fuentes válidas que tienen conector implementado
ADAPTER_CLASSES: dict[str, type[BaseAdapter]] = {
    "skyscanner": SkyscannerAdapter,
    "google_flights": GoogleFlightsAdapter,
}

VALID_SOURCES = set(ADAPTER_CLASSES)


def build_adapters(settings: AppSettings) -> dict[str, BaseAdapter]:
    """Instantiate one connector per known source."""
    return {name: cls(settings) for name, cls in ADAPTER_CLASSES.items()}


__all__ = [
    "BaseAdapter",
    "SkyscannerAdapter",
    "GoogleFlightsAdapter",
    "ADAPTER_CLASSES",
    "VALID_SOURCES",
    "build_adapters",
]
