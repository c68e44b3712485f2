"""
API layer - FastAPI routes and HTTP concerns for the deliberation engine.

This layer contains:
- FastAPI route definitions
- Request/Response models
- HTTP middleware

IMPORT RULES:
- CAN import from: application
- CANNOT import from: infrastructure directly
- Uses dependency injection for infrastructure adapters
"""

__all__: list[str] = []
