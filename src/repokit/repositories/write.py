"""Write facade: every mutating repository operation.

Every write takes an optional ``Transaction``:

- ``None``: the write gets its own session and runs inside ``transactional()``,
  so it commits on success and rolls back on error.
- a started ``Transaction``: the write runs on the transaction's session and
  nothing is committed; whoever owns the handle commits or rolls back.

Both paths are resolved in ``_unit_of_work``; no operation branches on the
transaction itself.
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from repokit.core.constants import SoftDeleteConstants
from repokit.core.exceptions import EmptyCriteriaError, SoftDeleteNotSupportedError
from repokit.db.session import transactional
from repokit.db.transaction import Transaction
from repokit.repositories.base import BaseRepository, ModelType

logger = logging.getLogger(__name__)

ResultType = TypeVar("ResultType")


class WriteRepository(BaseRepository[ModelType]):
    """Generic write operations for one SQLAlchemy model.

    Example:
        >>> people = WriteRepository(Person, session_factory)
        >>> ann = await people.save(Person(name="Ann", age=30))
        >>>
        >>> async def move(tx: Transaction) -> None:
        ...     await people.update_by_id(ann.id, {"age": 31}, tx)
        ...     await people.delete_by_conditions({"name": "Bob"}, tx)
        >>>
        >>> await people.execute_in_transaction(move)
    """

    @asynccontextmanager
    async def _unit_of_work(
        self,
        transaction: Transaction | None,
    ) -> AsyncGenerator[AsyncSession, None]:
        if transaction is None:
            async with self.session_factory() as session:
                async with transactional(session):
                    yield session
        else:
            yield transaction.session

    def _to_entity(self, obj_in: ModelType | BaseModel | Mapping[str, Any]) -> ModelType:
        if isinstance(obj_in, self.model):
            return obj_in
        if isinstance(obj_in, BaseModel):
            return self.model(**obj_in.model_dump(exclude_unset=True))
        return self.model(**dict(obj_in))

    @staticmethod
    async def _detach(session: AsyncSession, entities: Sequence[ModelType]) -> None:
        # Fully loaded and detached before any commit can expire them
        for obj in dict.fromkeys(entities):
            await session.refresh(obj)
            session.expunge(obj)

    def _require_soft_delete(self) -> None:
        if not self.supports_soft_delete:
            raise SoftDeleteNotSupportedError(
                f"{self.model.__name__} has no '{SoftDeleteConstants.DELETED_AT_COLUMN}' column"
            )

    async def save(
        self,
        entity: ModelType | BaseModel | Mapping[str, Any],
        transaction: Transaction | None = None,
    ) -> ModelType:
        """Insert or update an entity by primary key.

        Args:
            entity: Model instance, or a Pydantic model / dict of field values
                for a new instance
            transaction: Optional transaction to run in

        Returns:
            The persisted instance with generated fields (ids, defaults) loaded,
            detached from the session

        Example:
            >>> person = await repo.save(Person(name="Ann", age=30))
            >>> person.age = 31
            >>> person = await repo.save(person)
        """
        async with self._unit_of_work(transaction) as session:
            persisted = await session.merge(self._to_entity(entity))
            await session.flush()
            await self._detach(session, [persisted])
            return persisted

    async def save_all(
        self,
        entities: Sequence[ModelType | BaseModel | Mapping[str, Any]],
        transaction: Transaction | None = None,
    ) -> list[ModelType]:
        """Insert or update several entities in one flush.

        Returns:
            Persisted instances in input order
        """
        async with self._unit_of_work(transaction) as session:
            persisted = [await session.merge(self._to_entity(entity)) for entity in entities]
            await session.flush()
            await self._detach(session, persisted)
            return persisted

    async def update_by_id(
        self,
        id: Any,
        partial: BaseModel | Mapping[str, Any],
        transaction: Transaction | None = None,
    ) -> None:
        """Apply a partial update to the entity with the given primary key.

        A missing id updates nothing and is not an error.

        Args:
            id: Primary key value
            partial: Pydantic model (only explicitly set fields are used) or
                mapping of field names to new values
            transaction: Optional transaction to run in
        """
        if isinstance(partial, BaseModel):
            values = partial.model_dump(exclude_unset=True)
        else:
            values = dict(partial)
        if not values:
            return

        async with self._unit_of_work(transaction) as session:
            await session.execute(
                update(self.model).where(self.primary_key == id).values(**values)
            )

    async def delete_by_id(self, id: Any, transaction: Transaction | None = None) -> None:
        """Hard-delete by primary key. Deleting an absent id is a no-op."""
        async with self._unit_of_work(transaction) as session:
            await session.execute(delete(self.model).where(self.primary_key == id))

    async def delete_by_conditions(
        self,
        conditions: Mapping[str, Any],
        transaction: Transaction | None = None,
    ) -> None:
        """Hard-delete every entity matching an equality map.

        Raises:
            EmptyCriteriaError: If conditions is empty (use delete_all instead)
        """
        if not conditions:
            raise EmptyCriteriaError(
                f"Refusing to delete {self.model.__name__} rows without conditions"
            )
        async with self._unit_of_work(transaction) as session:
            await session.execute(delete(self.model).where(*self.equals(conditions)))

    async def delete_all(self, transaction: Transaction | None = None) -> None:
        """Hard-delete every row of the model, soft-deleted rows included."""
        async with self._unit_of_work(transaction) as session:
            await session.execute(delete(self.model))
        logger.info(f"Deleted all {self.model.__name__} rows")

    async def soft_delete_by_id(self, id: Any, transaction: Transaction | None = None) -> None:
        """Mark a live entity as deleted without removing the row.

        Already soft-deleted rows keep their original deleted_at.

        Raises:
            SoftDeleteNotSupportedError: If the model has no deleted_at column
        """
        self._require_soft_delete()
        deleted_at = getattr(self.model, SoftDeleteConstants.DELETED_AT_COLUMN)
        async with self._unit_of_work(transaction) as session:
            await session.execute(
                update(self.model)
                .where(self.primary_key == id)
                .where(deleted_at.is_(None))
                .values({SoftDeleteConstants.DELETED_AT_COLUMN: datetime.now(UTC)})
            )

    async def restore_by_id(self, id: Any, transaction: Transaction | None = None) -> None:
        """Clear the soft-delete marker of an entity.

        Raises:
            SoftDeleteNotSupportedError: If the model has no deleted_at column
        """
        self._require_soft_delete()
        async with self._unit_of_work(transaction) as session:
            await session.execute(
                update(self.model)
                .where(self.primary_key == id)
                .values({SoftDeleteConstants.DELETED_AT_COLUMN: None})
            )

    def begin_transaction(self) -> Transaction:
        """Create an unstarted transaction bound to this repository's database."""
        return Transaction(self.session_factory)

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Transaction, None]:
        """Run a block in a fresh transaction.

        Commits when the block exits normally. If the block (or the commit)
        raises, including on task cancellation, rolls back and re-raises the
        original error; a failing rollback is logged and does not replace it.
        The handle is released on every exit path.

        Example:
            ```python
            async with people.transaction() as tx:
                await people.save(Person(name="Ann", age=30), tx)
                await pets.save(Pet(name="Rex"), tx)
            ```
        """
        tx = self.begin_transaction()
        try:
            await tx.start()
            try:
                yield tx
                await tx.commit()
            except BaseException as e:
                try:
                    await tx.rollback()
                except Exception:
                    logger.exception(
                        f"Rollback failed after {type(e).__name__}; re-raising the original error"
                    )
                else:
                    logger.error(f"Transaction rolled back due to error: {type(e).__name__}: {e}")
                raise
        finally:
            await tx.release()

    async def execute_in_transaction(
        self,
        operation: Callable[[Transaction], Awaitable[ResultType]],
    ) -> ResultType:
        """Run operation with a fresh transaction handle.

        Args:
            operation: Coroutine function receiving the started Transaction;
                pass the handle to every write that must be atomic

        Returns:
            Whatever operation returns, once the commit succeeded

        Raises:
            Exception: The operation's own error, after rollback
        """
        async with self.transaction() as tx:
            return await operation(tx)
