"""
API routes for the deliberation engine.

Available routers:
- health: Liveness and readiness endpoints
- deliberation: Deliberation commands and dashboard queries
"""

from src.api.routes.deliberation import router as deliberation_router
from src.api.routes.health import router as health_router

__all__: list[str] = ["deliberation_router", "health_router"]
