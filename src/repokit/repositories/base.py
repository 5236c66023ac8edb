"""Base repository shared by the read and write facades.

Holds the two things every facade needs: the mapped model class and the
session factory. Sessions are opened per call, so a repository instance
carries no per-call state and can be shared between concurrent tasks.
"""

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql.elements import ColumnElement

from repokit.core.constants import SoftDeleteConstants
from repokit.repositories.dynamic import resolve_column

# Generic type for SQLAlchemy models
ModelType = TypeVar("ModelType", bound=DeclarativeBase)


class BaseRepository(Generic[ModelType]):
    """Model and session-factory holder with common query helpers.

    Type Parameters:
        ModelType: The SQLAlchemy model class

    Example:
        >>> class PersonReader(ReadRepository[Person]):
        ...     pass
        >>>
        >>> repo = PersonReader(Person, session_factory)
        >>> person = await repo.find_one_by_id(1)
    """

    def __init__(
        self,
        model: type[ModelType],
        session_factory: async_sessionmaker[AsyncSession],
    ):
        """Initialize repository.

        Args:
            model: The SQLAlchemy model class (single-column primary key)
            session_factory: Factory producing AsyncSession instances. Any
                configuration works: entities returned by writes are loaded
                and detached before commit, so expire_on_commit does not
                affect them
        """
        self.model = model
        self.session_factory = session_factory

        mapper = inspect(model)
        pk_column = mapper.primary_key[0]
        self._pk_attribute = getattr(model, mapper.get_property_by_column(pk_column).key)

    @property
    def primary_key(self) -> Any:
        """Mapped attribute of the primary key column."""
        return self._pk_attribute

    @property
    def supports_soft_delete(self) -> bool:
        """Whether the model carries the deleted_at marker."""
        return hasattr(self.model, SoftDeleteConstants.DELETED_AT_COLUMN)

    def column(self, field: str) -> Any:
        """Resolve a field name to its mapped attribute.

        Raises:
            AttributeError: If the model has no such field
        """
        return resolve_column(self.model, field)

    def equals(self, conditions: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        """Build one equality clause per entry of an equality map.

        Field names resolve the same way as in ``column()``.

        Raises:
            AttributeError: If the model has no such field
        """
        return [self.column(field) == value for field, value in conditions.items()]

    def base_query(self, *, include_soft_deleted: bool = False) -> Select[tuple[ModelType]]:
        """Return a SELECT of the model excluding soft-deleted rows by default."""
        stmt = select(self.model)
        if self.supports_soft_delete and not include_soft_deleted:
            stmt = stmt.where(getattr(self.model, SoftDeleteConstants.DELETED_AT_COLUMN).is_(None))
        return stmt

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.model.__name__}>"
