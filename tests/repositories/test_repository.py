"""Tests for the combined Repository."""

from unittest.mock import MagicMock, sentinel

import pytest

from entities import Person
from repokit.db.transaction import Transaction
from repokit.repositories import (
    ReadRepository,
    ReadRepositoryProtocol,
    Repository,
    RepositoryProtocol,
    WriteRepository,
    WriteRepositoryProtocol,
)
from repokit.schemas.pagination import Page, SortOrder


@pytest.fixture
def mocked(session_factory) -> Repository[Person]:
    """Repository whose facades are replaced by mocks."""
    repo = Repository(Person, session_factory)
    repo.read = MagicMock(spec=ReadRepository)
    repo.write = MagicMock(spec=WriteRepository)
    return repo


@pytest.mark.asyncio
async def test_save_then_find_all(people):
    """Test a save followed by a read through the same repository."""
    saved = await people.save(Person(name="Test User", age=25))

    found = await people.find_all()

    assert [(p.id, p.name, p.age) for p in found] == [(saved.id, "Test User", 25)]


@pytest.mark.asyncio
async def test_facades_share_the_model(people):
    """Test that both facades are built for the repository's model."""
    assert people.model is Person
    assert people.read.model is Person
    assert people.write.model is Person
    assert people.read.session_factory is people.write.session_factory
    assert repr(people) == "<Repository model=Person>"


def test_satisfies_protocols(people):
    """Test structural conformance of the concrete classes."""
    assert isinstance(people, RepositoryProtocol)
    assert isinstance(people.read, ReadRepositoryProtocol)
    assert isinstance(people.write, WriteRepositoryProtocol)
    assert not isinstance(people.read, WriteRepositoryProtocol)


@pytest.mark.asyncio
class TestReadDelegation:
    """Read operations are forwarded to the read facade unchanged."""

    async def test_find_all(self, mocked):
        mocked.read.find_all.return_value = [sentinel.person]

        assert await mocked.find_all(True) == [sentinel.person]
        mocked.read.find_all.assert_awaited_once_with(True)

    async def test_find_one_by_id(self, mocked):
        mocked.read.find_one_by_id.return_value = sentinel.person

        assert await mocked.find_one_by_id(7) is sentinel.person
        mocked.read.find_one_by_id.assert_awaited_once_with(7)

    async def test_dynamic_find(self, mocked):
        await mocked.dynamic_find("findByNameAndAge", ["Ann", 30])

        mocked.read.dynamic_find.assert_awaited_once_with("findByNameAndAge", ["Ann", 30])

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("find_by_conditions", ({"name": "Ann"},)),
            ("find_paginated", (5, 10)),
            ("find_all_sorted", ("age", SortOrder.DESC)),
            ("exists_by", ("email", "ann@example.com")),
            ("count_by_conditions", ({"age": 30},)),
            ("find_distinct", ("home_city",)),
            ("find_paginated_and_sorted", (0, 3, "name", "desc")),
            ("find_with_pagination", (2, 10, "id", SortOrder.ASC)),
            ("count", ()),
        ],
    )
    async def test_forwarding(self, mocked, method, args):
        getattr(mocked.read, method).return_value = sentinel.result

        assert await getattr(mocked, method)(*args) is sentinel.result
        getattr(mocked.read, method).assert_awaited_once_with(*args)
        mocked.write.assert_not_called()

    async def test_query(self, mocked):
        mocked.read.query.return_value = sentinel.builder

        assert mocked.query() is sentinel.builder


@pytest.mark.asyncio
class TestWriteDelegation:
    """Write operations are forwarded with their transaction handle."""

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("save", ({"name": "Ann", "age": 30},)),
            ("save_all", ([{"name": "Ann", "age": 30}],)),
            ("update_by_id", (1, {"age": 31})),
            ("delete_by_id", (1,)),
            ("delete_by_conditions", ({"name": "Ann"},)),
            ("soft_delete_by_id", (1,)),
            ("restore_by_id", (1,)),
        ],
    )
    async def test_forwarding_with_and_without_transaction(self, mocked, method, args):
        tx = MagicMock(spec=Transaction)

        await getattr(mocked, method)(*args)
        await getattr(mocked, method)(*args, tx)

        facade_method = getattr(mocked.write, method)
        assert facade_method.await_count == 2
        assert facade_method.await_args_list[0].args == (*args, None)
        assert facade_method.await_args_list[1].args == (*args, tx)

    async def test_delete_all(self, mocked):
        await mocked.delete_all()

        mocked.write.delete_all.assert_awaited_once_with(None)

    async def test_execute_in_transaction(self, mocked):
        mocked.write.execute_in_transaction.return_value = sentinel.result

        async def operation(tx: Transaction) -> None:
            return None

        assert await mocked.execute_in_transaction(operation) is sentinel.result
        mocked.write.execute_in_transaction.assert_awaited_once_with(operation)

    async def test_transaction_helpers(self, mocked):
        mocked.write.begin_transaction.return_value = sentinel.tx
        mocked.write.transaction.return_value = sentinel.context

        assert mocked.begin_transaction() is sentinel.tx
        assert mocked.transaction() is sentinel.context


@pytest.mark.asyncio
async def test_paginated_page_through_repository(people, seeded_people):
    """Test the combined repository end to end on a paginated read."""
    page = await people.find_with_pagination(1, 2, "age", "desc")

    assert isinstance(page, Page)
    assert [p.age for p in page.data] == [41, 35]
    assert page.total == len(seeded_people)
    assert page.total_pages == 3
