"""Repository contracts, independent of the SQLAlchemy implementation.

Services that only read should depend on ``ReadRepositoryProtocol``, those
that write on ``WriteRepositoryProtocol``, and those needing both on
``RepositoryProtocol``. ``ReadRepository``, ``WriteRepository`` and
``Repository`` satisfy them structurally, and so can any in-memory fake.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from repokit.db.transaction import Transaction
from repokit.schemas.pagination import Page, SortOrder

T = TypeVar("T")
ResultType = TypeVar("ResultType")


@runtime_checkable
class ReadRepositoryProtocol(Protocol[T]):
    """Non-mutating operations over one entity type."""

    async def dynamic_find(self, method_name: str, params: Sequence[Any] = ()) -> list[T]:
        """Resolve a ``findBy<Field>[(And|Or)<Field>]*`` name into a query."""
        ...

    async def find_all(self, include_soft_deleted: bool = False) -> list[T]:
        """Return all live entities, optionally with soft-deleted ones."""
        ...

    async def find_one_by_id(self, id: Any) -> T | None:
        """Return the entity with the given primary key, or None."""
        ...

    async def find_by_conditions(self, conditions: Mapping[str, Any]) -> list[T]:
        """Return entities matching every key of an equality map."""
        ...

    async def find_paginated(self, skip: int, take: int) -> list[T]:
        """Return up to take entities after skipping skip."""
        ...

    async def find_all_sorted(self, sort_by: str, order: SortOrder | str = SortOrder.ASC) -> list[T]:
        """Return all entities ordered by sort_by."""
        ...

    async def exists_by(self, field: str, value: Any) -> bool:
        """Return True if an entity has field equal to value."""
        ...

    async def count_by_conditions(self, conditions: Mapping[str, Any]) -> int:
        """Count entities matching an equality map."""
        ...

    async def find_distinct(self, field: str) -> list[Any]:
        """Return the distinct values of field."""
        ...

    async def find_paginated_and_sorted(
        self, skip: int, take: int, sort_by: str, order: SortOrder | str = SortOrder.ASC
    ) -> list[T]:
        """Sort, then return up to take entities after skip."""
        ...

    async def find_with_pagination(
        self, page: int, items_per_page: int, sort_by: str, order: SortOrder | str = SortOrder.ASC
    ) -> Page[T]:
        """Return a 1-based page with total and total_pages."""
        ...

    async def count(self) -> int:
        """Count live entities."""
        ...


@runtime_checkable
class WriteRepositoryProtocol(Protocol[T]):
    """Mutating operations over one entity type.

    Every write accepts an optional started Transaction; without one the
    write commits on its own.
    """

    async def save(
        self, entity: T | BaseModel | Mapping[str, Any], transaction: Transaction | None = None
    ) -> T:
        """Insert or update by primary key and return the persisted entity."""
        ...

    async def save_all(
        self,
        entities: Sequence[T | BaseModel | Mapping[str, Any]],
        transaction: Transaction | None = None,
    ) -> list[T]:
        """Insert or update several entities, returned in input order."""
        ...

    async def update_by_id(
        self, id: Any, partial: BaseModel | Mapping[str, Any], transaction: Transaction | None = None
    ) -> None:
        """Apply a partial update; a missing id is a no-op."""
        ...

    async def delete_by_id(self, id: Any, transaction: Transaction | None = None) -> None:
        """Hard-delete by primary key; a missing id is a no-op."""
        ...

    async def delete_by_conditions(
        self, conditions: Mapping[str, Any], transaction: Transaction | None = None
    ) -> None:
        """Hard-delete entities matching a non-empty equality map."""
        ...

    async def delete_all(self, transaction: Transaction | None = None) -> None:
        """Hard-delete every entity."""
        ...

    async def soft_delete_by_id(self, id: Any, transaction: Transaction | None = None) -> None:
        """Set the soft-delete marker."""
        ...

    async def restore_by_id(self, id: Any, transaction: Transaction | None = None) -> None:
        """Clear the soft-delete marker."""
        ...

    def begin_transaction(self) -> Transaction:
        """Create an unstarted transaction handle."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[Transaction]:
        """Context manager form of execute_in_transaction."""
        ...

    async def execute_in_transaction(
        self, operation: Callable[[Transaction], Awaitable[ResultType]]
    ) -> ResultType:
        """Start, commit or roll back, and always release a fresh transaction."""
        ...


@runtime_checkable
class RepositoryProtocol(ReadRepositoryProtocol[T], WriteRepositoryProtocol[T], Protocol[T]):
    """Union of the read and write contracts."""
