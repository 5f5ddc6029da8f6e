"""
Feature modules for the Transfers backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- service.py: Business logic implementation
- repository.py: Supabase and in-memory storage
- routes.py: FastAPI route handlers (where the module has an HTTP surface)
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
