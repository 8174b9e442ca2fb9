"""API Routes - Domain-based routing"""

from .connection import router as connection_router
from .movement import router as movement_router
from .device import router as device_router

__all__ = [
    'connection_router',
    'movement_router',
    'device_router',
]
