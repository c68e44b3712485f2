"""Composition root.

Wires the in-memory stubs and the system clock behind the application
ports; the API reaches services only through this package.
"""
