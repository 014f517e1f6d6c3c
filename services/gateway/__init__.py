"""Authenticated Kite Connect REST gateway."""

from .kite_gateway import KiteGateway
from .exceptions import KiteAPIError
from .models import OrderModification, OrderRequest

__all__ = [
    "KiteGateway",
    "KiteAPIError",
    "OrderModification",
    "OrderRequest",
]
