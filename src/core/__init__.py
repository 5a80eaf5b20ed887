"""
Core business logic package for Travexe.

All business logic, data access, and service integrations live here.
Lambda handlers in src/handlers/ are thin wrappers that call into core/.
"""

__all__: list[str] = []
