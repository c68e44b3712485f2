"""
Infrastructure layer - External adapters for the deliberation engine.

This layer contains:
- System clock adapter
- In-memory stubs for host collaborators (repository, committee
  directory, actor provider, event publisher)
- Observability (structlog configuration, correlation ids)

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

__all__: list[str] = []
