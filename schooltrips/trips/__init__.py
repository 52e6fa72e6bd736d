"""
Trip Catalog

Read-only lookup of trips and their price configuration. Catalog editing and
media handling live outside this service.
"""

from .service import TripCatalog
from .schemas import TransportType, PriceConfig

__all__ = [
    "TripCatalog",
    "TransportType",
    "PriceConfig"
]
