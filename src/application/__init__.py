"""
Application layer - Use cases and orchestration for the deliberation engine.

This layer contains:
- Command service (deliberation workflow commands)
- Query service (queue counts, filtered lists, KPIs)
- Port definitions (abstract interfaces for host collaborators)
- DTOs (submission payloads, filters)

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, api
"""

__all__: list[str] = []
