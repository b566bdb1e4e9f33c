"""
Persistence package for graph documents.

Provides the async PersistenceService abstraction with in-memory and SQLite
implementations.
"""

from .base import PersistenceService
from .memory_backend import MemoryPersistenceService
from .sqlite_backend import SQLitePersistenceService


async def get_persistence_service(
    backend_type: str = "sqlite",
    **kwargs
) -> PersistenceService:
    """
    Factory function to create and initialize a persistence service.
    
    Args:
        backend_type: Type of backend ("sqlite" or "memory")
        **kwargs: Backend-specific configuration
            - sqlite: db_path (str) - path to database file
    
    Returns:
        Initialized PersistenceService instance
    """
    if backend_type == "sqlite":
        db_path = kwargs.get("db_path", "journey_canvas.db")
        backend = SQLitePersistenceService(db_path)
    elif backend_type == "memory":
        backend = MemoryPersistenceService()
    else:
        raise ValueError(f"Unknown persistence backend: {backend_type}")
    await backend.initialize()
    return backend


__all__ = [
    "PersistenceService",
    "MemoryPersistenceService",
    "SQLitePersistenceService",
    "get_persistence_service",
]
