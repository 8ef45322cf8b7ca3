"""Entity store service for persisting resources to a relational database.

Uses SQLAlchemy's native async support with aiosqlite for non-blocking
database operations. One store serves one entity definition.
"""

from datetime import datetime, timezone
from enum import Enum

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlmodel import SQLModel

from carsonrent.exceptions import InvalidSortError
from carsonrent.models.base import EntityModel
from carsonrent.models.definitions import EntityDefinition
from carsonrent.models.page import Page, PageRequest


class EntityStore:
    """Persists one kind of entity to SQLite via SQLModel.

    Accepts an AsyncEngine via dependency injection to support both
    persistent and in-memory databases for testing.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        definition: EntityDefinition,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._engine = engine
        self._definition = definition
        self._record_type = definition.record
        self._logger = logger or structlog.get_logger(__name__)

    async def initialize_schema(self) -> None:
        """Create database tables if they don't exist."""
        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        self._logger.info("entity_store_initialized", entity=self._definition.entity_name)

    async def save(self, entity: EntityModel) -> EntityModel:
        """Insert or update an entity.

        Entities without an id are inserted and receive a store-assigned id.
        Entities with an id replace the row holding that id, or are inserted
        under that id when no such row exists.

        Args:
            entity: The domain entity to persist.

        Returns:
            The entity as persisted, id included.
        """
        record = self._entity_to_record(entity)
        async with AsyncSession(self._engine, expire_on_commit=False) as session:
            existing = None
            if record.id is not None:
                existing = await session.get(self._record_type, record.id)
            if existing is not None:
                for name, value in record.model_dump(exclude={"id"}).items():
                    setattr(existing, name, value)
                record = existing
            else:
                session.add(record)
            await session.commit()
            saved = self._record_to_entity(record)
        self._logger.debug(
            "entity_saved",
            entity=self._definition.entity_name,
            entity_id=saved.id,
            created=existing is None,
        )
        return saved

    async def find_by_id(self, entity_id: int) -> EntityModel | None:
        """Retrieve an entity by its id.

        Args:
            entity_id: The id to look up.

        Returns:
            The entity if found, None otherwise.
        """
        async with AsyncSession(self._engine) as session:
            record = await session.get(self._record_type, entity_id)
            if record is None:
                return None
            return self._record_to_entity(record)

    async def find_page(self, page_request: PageRequest) -> Page:
        """Retrieve one page of entities.

        Rows are ordered by the requested sort orders, then by ascending id,
        so consecutive pages never overlap.

        Raises:
            InvalidSortError: If a sort order names an unknown field.
        """
        order_by = self._order_by(page_request)
        async with AsyncSession(self._engine) as session:
            total = await session.scalar(select(func.count()).select_from(self._record_type))
            statement = (
                select(self._record_type).order_by(*order_by).offset(page_request.offset).limit(page_request.size)
            )
            result = await session.execute(statement)
            records = result.scalars().all()
            content = [self._record_to_entity(r) for r in records]
        return Page(
            content=content,
            page=page_request.page,
            size=page_request.size,
            total_elements=total or 0,
        )

    async def delete(self, entity_id: int) -> bool:
        """Delete an entity.

        Args:
            entity_id: The id to delete.

        Returns:
            True if the entity was deleted, False if not found.
        """
        async with AsyncSession(self._engine) as session:
            record = await session.get(self._record_type, entity_id)
            if record is None:
                return False
            await session.delete(record)
            await session.commit()

        self._logger.debug("entity_deleted", entity=self._definition.entity_name, entity_id=entity_id)
        return True

    async def count(self) -> int:
        async with AsyncSession(self._engine) as session:
            total = await session.scalar(select(func.count()).select_from(self._record_type))
            return total or 0

    def _order_by(self, page_request: PageRequest) -> list:
        columns = self._record_type.model_fields
        clauses = []
        for order in page_request.sort:
            if order.field not in columns:
                raise InvalidSortError(self._definition.entity_name, order.field)
            column = getattr(self._record_type, order.field)
            clauses.append(column.desc() if order.descending else column.asc())
        if not any(order.field == "id" for order in page_request.sort):
            clauses.append(self._record_type.id.asc())
        return clauses

    def _entity_to_record(self, entity: EntityModel) -> SQLModel:
        """Convert a domain entity to its SQLModel record.

        Enums are stored as their value and aware datetimes as UTC.
        """
        data = entity.model_dump()
        for name, value in data.items():
            if isinstance(value, Enum):
                data[name] = value.value
            elif isinstance(value, datetime) and value.tzinfo is not None:
                data[name] = value.astimezone(timezone.utc)
        return self._record_type.model_validate(data)

    def _record_to_entity(self, record: SQLModel) -> EntityModel:
        """Convert a SQLModel record back to its domain entity.

        SQLite stores naive datetimes, so UTC is restored on the way out.
        """
        data = record.model_dump()
        for name, value in data.items():
            if isinstance(value, datetime) and value.tzinfo is None:
                data[name] = value.replace(tzinfo=timezone.utc)
        return self._definition.model.model_validate(data)


def create_async_engine_from_path(db_path: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine for the given database location.

    Args:
        db_path: Path to a SQLite database file, ":memory:" for an in-memory
            database, or a full SQLAlchemy URL (anything containing "://").

    Returns:
        AsyncEngine instance.
    """
    if "://" in db_path:
        url = db_path
    elif db_path == ":memory:":
        # aiosqlite in-memory databases use a StaticPool, so every session
        # shares the single connection and sees the same tables
        url = "sqlite+aiosqlite:///:memory:"
    else:
        url = f"sqlite+aiosqlite:///{db_path}"
    return create_async_engine(url)
