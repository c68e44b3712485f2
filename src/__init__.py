"""
Deliberation Engine - Committee Governance Workflow

Routes corporate decision requests through ordered committee review and
voting stages, resolves outcomes under quorum and majority rules, and
keeps an append-only record of everything that happened along the way.

Guiding rules:
- Every transition is witnessed in the audit trail
- Outcome determination has exactly one source of truth
- Invalid commands never partially apply
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
