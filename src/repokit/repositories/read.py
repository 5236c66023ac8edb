"""Read facade: every non-mutating repository operation.

Each call opens its own session from the factory, runs one or two SELECTs
and closes the session again. Soft-deleted rows are invisible to every
operation except ``find_all(include_soft_deleted=True)`` and builder queries
that opt in. Missing rows produce ``None`` or empty results, never errors;
database and mapping errors propagate unchanged.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Select, distinct, func, select

from repokit.core.constants import SoftDeleteConstants
from repokit.core.exceptions import InvalidPaginationError
from repokit.repositories.base import BaseRepository, ModelType
from repokit.repositories.dynamic import QueryBuilder, parse_method_name
from repokit.schemas.pagination import Page, SortOrder


class ReadRepository(BaseRepository[ModelType]):
    """Generic read operations for one SQLAlchemy model.

    Example:
        >>> people = ReadRepository(Person, session_factory)
        >>> page = await people.find_with_pagination(1, 20, "name", "ASC")
        >>> anns = await people.dynamic_find("findByNameAndAge", ["Ann", 30])
    """

    async def _scalars(self, stmt: Select[tuple[ModelType]]) -> list[ModelType]:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def _count(self, stmt: Select[Any]) -> int:
        count_stmt = select(func.count()).select_from(stmt.subquery())
        async with self.session_factory() as session:
            return (await session.execute(count_stmt)).scalar_one()

    def _sorted(self, stmt: Select[Any], sort_by: str, order: SortOrder | str) -> Select[Any]:
        # Primary key breaks ties so that consecutive pages never overlap
        column = self.column(sort_by)
        if SortOrder.coerce(order) is SortOrder.DESC:
            return stmt.order_by(column.desc(), self.primary_key.desc())
        return stmt.order_by(column.asc(), self.primary_key.asc())

    @staticmethod
    def _check_window(skip: int, take: int) -> None:
        if skip < 0 or take < 0:
            raise InvalidPaginationError(f"skip and take must be non-negative (got {skip}, {take})")

    def query(self) -> QueryBuilder[ModelType]:
        """Start a fluent equality query.

        Example:
            >>> await repo.query().where_equal("name", "Ann").or_().where_equal("age", 30).all()
        """
        return QueryBuilder(self)

    async def dynamic_find(self, method_name: str, params: Sequence[Any] = ()) -> list[ModelType]:
        """Resolve a finder name such as ``findByNameOrAge`` into a query.

        Args:
            method_name: Finder name (``findBy...`` or ``find_by_...``)
            params: One positional value per parsed condition

        Returns:
            Matching live entities; every live entity for a bare ``findBy``

        Raises:
            DynamicQueryError: On a bad prefix or an argument count mismatch
            AttributeError: If a parsed field is not an attribute of the model
        """
        conditions = parse_method_name(method_name)
        return await self.query().where_conditions(conditions, params).all()

    async def find_all(self, include_soft_deleted: bool = False) -> list[ModelType]:
        """Get all entities.

        Args:
            include_soft_deleted: Also return rows whose deleted_at is set

        Returns:
            List of model instances
        """
        return await self._scalars(self.base_query(include_soft_deleted=include_soft_deleted))

    async def find_one_by_id(self, id: Any) -> ModelType | None:
        """Get a single live entity by primary key.

        Returns:
            Model instance if found, None otherwise
        """
        async with self.session_factory() as session:
            result = await session.execute(self.base_query().where(self.primary_key == id))
            return result.scalar_one_or_none()

    async def find_by_conditions(self, conditions: Mapping[str, Any]) -> list[ModelType]:
        """Get entities whose fields equal every value in conditions.

        Args:
            conditions: Mapping of field name to required value; empty means all

        Returns:
            List of matching model instances
        """
        return await self._scalars(self.base_query().where(*self.equals(conditions)))

    async def find_paginated(self, skip: int, take: int) -> list[ModelType]:
        """Get up to take entities after skipping skip, in database order."""
        self._check_window(skip, take)
        return await self._scalars(self.base_query().offset(skip).limit(take))

    async def find_all_sorted(
        self,
        sort_by: str,
        order: SortOrder | str = SortOrder.ASC,
    ) -> list[ModelType]:
        """Get all live entities ordered by sort_by."""
        return await self._scalars(self._sorted(self.base_query(), sort_by, order))

    async def exists_by(self, field: str, value: Any) -> bool:
        """Check whether any live entity has field equal to value."""
        stmt = self.base_query().where(self.column(field) == value)
        return await self._count(stmt) > 0

    async def count_by_conditions(self, conditions: Mapping[str, Any]) -> int:
        """Count live entities matching an equality map."""
        return await self._count(self.base_query().where(*self.equals(conditions)))

    async def find_distinct(self, field: str) -> list[Any]:
        """Get the distinct values of field across live entities.

        Returns:
            Distinct values in database order
        """
        column = self.column(field)
        stmt = select(distinct(column))
        if self.supports_soft_delete:
            stmt = stmt.where(getattr(self.model, SoftDeleteConstants.DELETED_AT_COLUMN).is_(None))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_paginated_and_sorted(
        self,
        skip: int,
        take: int,
        sort_by: str,
        order: SortOrder | str = SortOrder.ASC,
    ) -> list[ModelType]:
        """Sort all live entities, then return up to take after skip."""
        self._check_window(skip, take)
        stmt = self._sorted(self.base_query(), sort_by, order).offset(skip).limit(take)
        return await self._scalars(stmt)

    async def find_with_pagination(
        self,
        page: int,
        items_per_page: int,
        sort_by: str,
        order: SortOrder | str = SortOrder.ASC,
    ) -> Page[ModelType]:
        """Get one page of sorted entities plus totals.

        Args:
            page: 1-based page number
            items_per_page: Page size
            sort_by: Field to sort by
            order: ASC or DESC

        Returns:
            Page with data, total and total_pages = ceil(total / items_per_page)

        Raises:
            InvalidPaginationError: If page or items_per_page is below 1

        Example:
            >>> page = await repo.find_with_pagination(2, 10, "created_at", "DESC")
            >>> print(f"{page.total} rows over {page.total_pages} pages")
        """
        if page < 1 or items_per_page < 1:
            raise InvalidPaginationError(
                f"page and items_per_page must be at least 1 (got {page}, {items_per_page})"
            )
        skip = (page - 1) * items_per_page
        stmt = self._sorted(self.base_query(), sort_by, order)

        async with self.session_factory() as session:
            total = (
                await session.execute(select(func.count()).select_from(stmt.subquery()))
            ).scalar_one()
            result = await session.execute(stmt.offset(skip).limit(items_per_page))
            data = list(result.scalars().all())

        return Page(
            data=data,
            total=total,
            total_pages=Page.count_pages(total, items_per_page),
            page=page,
            items_per_page=items_per_page,
        )

    async def count(self) -> int:
        """Count live entities."""
        return await self._count(self.base_query())
