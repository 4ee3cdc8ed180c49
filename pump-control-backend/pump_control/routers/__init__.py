from .pumps import router as pumps_router
from .pump_socket import router as pump_socket_router
from .health import router as health_router

__all__ = [
    "pumps_router",
    "pump_socket_router",
    "health_router"
]
