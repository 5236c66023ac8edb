"""Transaction handle shared by write operations.

A Transaction owns one AsyncSession for the lifetime of a unit of work and
enforces the lifecycle::

    CREATED -> STARTED -> COMMITTED | ROLLED_BACK -> RELEASED

Release is allowed from any state except RELEASED, so a handle whose commit
or rollback failed can still be cleaned up. A released handle is never reused.
"""

import enum
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from repokit.core.exceptions import TransactionStateError

logger = logging.getLogger(__name__)


class TransactionState(str, enum.Enum):
    """Lifecycle states of a Transaction."""

    CREATED = "created"
    STARTED = "started"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    RELEASED = "released"


class Transaction:
    """Scoped unit of work over a single AsyncSession.

    Obtain one from ``WriteRepository.begin_transaction()`` and pass it to any
    number of write calls (on any repository sharing the same database) to make
    them atomic. The caller that created it must start it once and release it
    once; ``WriteRepository.execute_in_transaction`` does all of that.

    Example:
        >>> tx = people.begin_transaction()
        >>> await tx.start()
        >>> try:
        ...     await people.save(person, tx)
        ...     await pets.save(pet, tx)
        ...     await tx.commit()
        ... except Exception:
        ...     await tx.rollback()
        ...     raise
        ... finally:
        ...     await tx.release()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self.state = TransactionState.CREATED

    @property
    def session(self) -> AsyncSession:
        """Session acting as the unit-of-work manager while STARTED."""
        if self.state is not TransactionState.STARTED or self._session is None:
            raise TransactionStateError(
                f"Transaction session is only available while started (state: {self.state.value})"
            )
        return self._session

    @property
    def is_active(self) -> bool:
        return self.state is TransactionState.STARTED

    def _require(self, expected: TransactionState, action: str) -> None:
        if self.state is not expected:
            raise TransactionStateError(
                f"Cannot {action} a transaction in state '{self.state.value}'"
            )

    async def start(self) -> None:
        """Open the session and begin the database transaction."""
        self._require(TransactionState.CREATED, "start")
        self._session = self._session_factory()
        await self._session.begin()
        self.state = TransactionState.STARTED
        logger.debug("Transaction started")

    async def commit(self) -> None:
        self._require(TransactionState.STARTED, "commit")
        await self.session.commit()
        self.state = TransactionState.COMMITTED
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        self._require(TransactionState.STARTED, "roll back")
        await self.session.rollback()
        self.state = TransactionState.ROLLED_BACK
        logger.debug("Transaction rolled back")

    async def release(self) -> None:
        """Close the session. Uncommitted work is discarded by the close."""
        if self.state is TransactionState.RELEASED:
            raise TransactionStateError("Transaction has already been released")
        session, self._session = self._session, None
        self.state = TransactionState.RELEASED
        if session is not None:
            await session.close()
        logger.debug("Transaction released")

    def __repr__(self) -> str:
        return f"<Transaction state={self.state.value}>"
