"""
SQLModel database models for Journey Canvas.

These models map directly to database tables and provide ORM functionality.
"""

from .graph_document import GraphDocumentDB

__all__ = [
    "GraphDocumentDB",
]
