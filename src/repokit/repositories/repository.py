"""Full repository: one read facade and one write facade behind one object."""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from repokit.db.transaction import Transaction
from repokit.repositories.base import ModelType
from repokit.repositories.dynamic import QueryBuilder
from repokit.repositories.read import ReadRepository
from repokit.repositories.write import WriteRepository
from repokit.schemas.pagination import Page, SortOrder

ResultType = TypeVar("ResultType")


class Repository(Generic[ModelType]):
    """Read and write operations for one model, by delegation only.

    Example:
        >>> people = Repository(Person, session_factory)
        >>> ann = await people.save(Person(name="Ann", age=30))
        >>> assert await people.exists_by("name", "Ann")
    """

    def __init__(
        self,
        model: type[ModelType],
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.model = model
        self.read = ReadRepository(model, session_factory)
        self.write = WriteRepository(model, session_factory)

    # Read operations (delegate to ReadRepository)

    def query(self) -> QueryBuilder[ModelType]:
        return self.read.query()

    def dynamic_find(self, method_name: str, params: Sequence[Any] = ()) -> Awaitable[list[ModelType]]:
        return self.read.dynamic_find(method_name, params)

    def find_all(self, include_soft_deleted: bool = False) -> Awaitable[list[ModelType]]:
        return self.read.find_all(include_soft_deleted)

    def find_one_by_id(self, id: Any) -> Awaitable[ModelType | None]:
        return self.read.find_one_by_id(id)

    def find_by_conditions(self, conditions: Mapping[str, Any]) -> Awaitable[list[ModelType]]:
        return self.read.find_by_conditions(conditions)

    def find_paginated(self, skip: int, take: int) -> Awaitable[list[ModelType]]:
        return self.read.find_paginated(skip, take)

    def find_all_sorted(
        self, sort_by: str, order: SortOrder | str = SortOrder.ASC
    ) -> Awaitable[list[ModelType]]:
        return self.read.find_all_sorted(sort_by, order)

    def exists_by(self, field: str, value: Any) -> Awaitable[bool]:
        return self.read.exists_by(field, value)

    def count_by_conditions(self, conditions: Mapping[str, Any]) -> Awaitable[int]:
        return self.read.count_by_conditions(conditions)

    def find_distinct(self, field: str) -> Awaitable[list[Any]]:
        return self.read.find_distinct(field)

    def find_paginated_and_sorted(
        self, skip: int, take: int, sort_by: str, order: SortOrder | str = SortOrder.ASC
    ) -> Awaitable[list[ModelType]]:
        return self.read.find_paginated_and_sorted(skip, take, sort_by, order)

    def find_with_pagination(
        self, page: int, items_per_page: int, sort_by: str, order: SortOrder | str = SortOrder.ASC
    ) -> Awaitable[Page[ModelType]]:
        return self.read.find_with_pagination(page, items_per_page, sort_by, order)

    def count(self) -> Awaitable[int]:
        return self.read.count()

    # Write operations (delegate to WriteRepository)

    def save(
        self,
        entity: ModelType | BaseModel | Mapping[str, Any],
        transaction: Transaction | None = None,
    ) -> Awaitable[ModelType]:
        return self.write.save(entity, transaction)

    def save_all(
        self,
        entities: Sequence[ModelType | BaseModel | Mapping[str, Any]],
        transaction: Transaction | None = None,
    ) -> Awaitable[list[ModelType]]:
        return self.write.save_all(entities, transaction)

    def update_by_id(
        self,
        id: Any,
        partial: BaseModel | Mapping[str, Any],
        transaction: Transaction | None = None,
    ) -> Awaitable[None]:
        return self.write.update_by_id(id, partial, transaction)

    def delete_by_id(self, id: Any, transaction: Transaction | None = None) -> Awaitable[None]:
        return self.write.delete_by_id(id, transaction)

    def delete_by_conditions(
        self, conditions: Mapping[str, Any], transaction: Transaction | None = None
    ) -> Awaitable[None]:
        return self.write.delete_by_conditions(conditions, transaction)

    def delete_all(self, transaction: Transaction | None = None) -> Awaitable[None]:
        return self.write.delete_all(transaction)

    def soft_delete_by_id(self, id: Any, transaction: Transaction | None = None) -> Awaitable[None]:
        return self.write.soft_delete_by_id(id, transaction)

    def restore_by_id(self, id: Any, transaction: Transaction | None = None) -> Awaitable[None]:
        return self.write.restore_by_id(id, transaction)

    def begin_transaction(self) -> Transaction:
        return self.write.begin_transaction()

    def transaction(self) -> AbstractAsyncContextManager[Transaction]:
        return self.write.transaction()

    def execute_in_transaction(
        self, operation: Callable[[Transaction], Awaitable[ResultType]]
    ) -> Awaitable[ResultType]:
        return self.write.execute_in_transaction(operation)

    def __repr__(self) -> str:
        return f"<Repository model={self.model.__name__}>"
