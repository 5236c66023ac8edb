"""Pytest fixtures for testing."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from entities import Person, Tag
from repokit.db.base import Base
from repokit.db.session import build_session_factory
from repokit.repositories import ReadRepository, Repository, WriteRepository


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine.

    A file database gives every session its own connection, the same way a
    server database would.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return build_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
def people(session_factory) -> Repository[Person]:
    """Combined repository for Person."""
    return Repository(Person, session_factory)


@pytest.fixture(scope="function")
def people_reader(session_factory) -> ReadRepository[Person]:
    """Read facade for Person."""
    return ReadRepository(Person, session_factory)


@pytest.fixture(scope="function")
def people_writer(session_factory) -> WriteRepository[Person]:
    """Write facade for Person."""
    return WriteRepository(Person, session_factory)


@pytest.fixture(scope="function")
def tags(session_factory) -> Repository[Tag]:
    """Combined repository for Tag (no soft delete)."""
    return Repository(Tag, session_factory)


@pytest_asyncio.fixture(scope="function")
async def seeded_people(people_writer) -> list[Person]:
    """Five people; ages and names repeat so filters have something to do."""
    return await people_writer.save_all(
        [
            Person(name="Ann", age=30, email="ann@example.com", home_city="Oslo"),
            Person(name="Ann", age=41, email="ann.b@example.com", home_city="Bergen"),
            Person(name="Bob", age=30, email="bob@example.com", home_city="Oslo"),
            Person(name="Cid", age=25, email="cid@example.com"),
            Person(name="Dee", age=35, email="dee@example.com", home_city="Tromso"),
        ]
    )
