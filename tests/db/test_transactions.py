"""Tests for database transaction utilities.

Tests verify that:
- transactional() commits on success and rolls back on exception
- Transaction enforces its CREATED -> STARTED -> COMMITTED/ROLLED_BACK -> RELEASED lifecycle
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from entities import Person
from repokit.core.exceptions import TransactionStateError
from repokit.db.session import transactional
from repokit.db.transaction import Transaction, TransactionState


@pytest.mark.asyncio
class TestTransactionalContextManager:
    """Tests for the transactional context manager."""

    async def test_transactional_commits_on_success(self, test_db: AsyncSession, session_factory) -> None:
        """Test that transactional context commits changes on successful exit."""
        async with transactional(test_db):
            test_db.add(Person(name="Committed", age=40))

        # Verify from a different session
        async with session_factory() as other:
            result = await other.execute(select(Person).where(Person.name == "Committed"))
            assert result.scalar_one_or_none() is not None

    async def test_transactional_rolls_back_on_exception(self, test_db: AsyncSession) -> None:
        """Test that transactional context rolls back on exception."""
        with pytest.raises(ValueError):
            async with transactional(test_db):
                test_db.add(Person(name="Rolled", age=40))
                await test_db.flush()
                raise ValueError("Intentional error for testing")

        result = await test_db.execute(select(Person).where(Person.name == "Rolled"))
        assert result.scalar_one_or_none() is None

    async def test_transactional_commit_false_does_not_commit(
        self, test_db: AsyncSession, session_factory
    ) -> None:
        """Test that commit=False prevents commits."""
        async with transactional(test_db, commit=False):
            test_db.add(Person(name="Uncommitted", age=40))
            await test_db.flush()

        await test_db.rollback()

        async with session_factory() as other:
            result = await other.execute(select(Person).where(Person.name == "Uncommitted"))
            assert result.scalar_one_or_none() is None

    async def test_transactional_re_raises_exception(self, test_db: AsyncSession) -> None:
        """Test that transactional context re-raises the original exception."""
        error = RuntimeError("Test error message")

        with pytest.raises(RuntimeError) as exc_info:
            async with transactional(test_db):
                raise error

        assert exc_info.value is error


@pytest.mark.asyncio
class TestTransactionLifecycle:
    """Tests for the Transaction handle state machine."""

    async def test_new_transaction_is_created(self, session_factory) -> None:
        tx = Transaction(session_factory)

        assert tx.state is TransactionState.CREATED
        assert tx.is_active is False
        with pytest.raises(TransactionStateError):
            tx.session

    async def test_commit_path(self, session_factory) -> None:
        tx = Transaction(session_factory)

        await tx.start()
        assert tx.state is TransactionState.STARTED
        assert isinstance(tx.session, AsyncSession)

        tx.session.add(Person(name="TxCommit", age=20))
        await tx.commit()
        assert tx.state is TransactionState.COMMITTED

        await tx.release()
        assert tx.state is TransactionState.RELEASED

        async with session_factory() as other:
            result = await other.execute(select(Person).where(Person.name == "TxCommit"))
            assert result.scalar_one_or_none() is not None

    async def test_rollback_path(self, session_factory) -> None:
        tx = Transaction(session_factory)
        await tx.start()

        tx.session.add(Person(name="TxRollback", age=20))
        await tx.session.flush()
        await tx.rollback()
        await tx.release()

        assert tx.state is TransactionState.RELEASED
        async with session_factory() as other:
            result = await other.execute(select(Person).where(Person.name == "TxRollback"))
            assert result.scalar_one_or_none() is None

    async def test_release_discards_uncommitted_work(self, session_factory) -> None:
        tx = Transaction(session_factory)
        await tx.start()
        tx.session.add(Person(name="TxAbandoned", age=20))
        await tx.session.flush()

        await tx.release()

        async with session_factory() as other:
            result = await other.execute(select(Person).where(Person.name == "TxAbandoned"))
            assert result.scalar_one_or_none() is None

    async def test_start_twice_raises(self, session_factory) -> None:
        tx = Transaction(session_factory)
        await tx.start()

        with pytest.raises(TransactionStateError):
            await tx.start()

        await tx.release()

    async def test_commit_and_rollback_require_started(self, session_factory) -> None:
        tx = Transaction(session_factory)

        with pytest.raises(TransactionStateError):
            await tx.commit()
        with pytest.raises(TransactionStateError):
            await tx.rollback()

        await tx.start()
        await tx.commit()

        with pytest.raises(TransactionStateError):
            await tx.rollback()
        with pytest.raises(TransactionStateError):
            await tx.commit()

        await tx.release()

    async def test_session_unavailable_after_commit(self, session_factory) -> None:
        tx = Transaction(session_factory)
        await tx.start()
        await tx.commit()

        with pytest.raises(TransactionStateError):
            tx.session

        await tx.release()

    async def test_release_twice_raises(self, session_factory) -> None:
        tx = Transaction(session_factory)
        await tx.start()
        await tx.release()

        with pytest.raises(TransactionStateError):
            await tx.release()

    async def test_release_without_start(self, session_factory) -> None:
        tx = Transaction(session_factory)

        await tx.release()

        assert tx.state is TransactionState.RELEASED
        with pytest.raises(TransactionStateError):
            await tx.start()
