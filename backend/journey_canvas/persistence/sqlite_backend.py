"""
SQLite persistence service implementation.

Uses SQLModel over an aiosqlite-backed async SQLAlchemy engine.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from journey_canvas.exceptions import DocumentNotFound, PersistenceCommitFailed
from journey_canvas.models import GraphDocumentDB

from .base import PersistenceService

if TYPE_CHECKING:
    from journey_canvas.canvas.graph_document import GraphDocument


class SQLitePersistenceService(PersistenceService):
    """
    SQLite implementation of PersistenceService.

    One row per document; the graph is stored as a JSON payload.
    """

    def __init__(self, db_path: str = "journey_canvas.db"):
        """
        Initialize SQLite backend.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._engine = None
        self._session_factory: Optional[async_sessionmaker] = None

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize database connection and create schema."""
        self._engine = create_async_engine(
            f"sqlite+aiosqlite:///{self.db_path}",
            echo=False,
        )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info(f"SQLite persistence ready at {self.db_path}")

    async def close(self) -> None:
        """Close database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    # === Document Operations ===

    async def load(self, document_id: str) -> "GraphDocument":
        """Load a document by ID."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(GraphDocumentDB).where(GraphDocumentDB.id == document_id)
            )
            row = result.scalar_one_or_none()
            if row is None:
                raise DocumentNotFound(f"Document {document_id} not found")
            return row.to_document()

    async def save(self, document_id: str, document: "GraphDocument") -> None:
        """Create or replace a document."""
        incoming = GraphDocumentDB.from_document(document_id, document)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(GraphDocumentDB).where(GraphDocumentDB.id == document_id)
                )
                existing = result.scalar_one_or_none()

                if existing:
                    existing.version = incoming.version
                    existing.payload = incoming.payload
                    existing.node_positions = incoming.node_positions
                    existing.updated_at = datetime.now(timezone.utc)
                else:
                    session.add(incoming)

                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceCommitFailed(f"Saving document {document_id} failed: {e}") from e

    async def exists(self, document_id: str) -> bool:
        """Check if a document exists."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(GraphDocumentDB.id).where(GraphDocumentDB.id == document_id)
            )
            return result.scalar_one_or_none() is not None

    async def delete(self, document_id: str) -> None:
        """Delete a document."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(GraphDocumentDB).where(GraphDocumentDB.id == document_id)
            )
            row = result.scalar_one_or_none()
            if row:
                await session.delete(row)
                await session.commit()

    async def list_documents(self) -> list[dict]:
        """List all documents, most recently updated first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(GraphDocumentDB).order_by(GraphDocumentDB.updated_at.desc())
            )
            rows = result.scalars().all()
            return [
                {
                    "id": row.id,
                    "node_count": len((row.payload or {}).get("nodes") or []),
                    "edge_count": len((row.payload or {}).get("edges") or []),
                    "updated_at": row.updated_at.isoformat() if row.updated_at else None,
                }
                for row in rows
            ]
