"""Generic async repositories for SQLAlchemy models.

Provides read and write facades over any mapped model, a combined
repository, method-name based dynamic finders, and a transaction handle
that lets several writes share one unit of work.

Usage:
    >>> from repokit import Repository, build_engine, build_session_factory
    >>>
    >>> engine = build_engine()
    >>> people = Repository(Person, build_session_factory(engine))
    >>> ann = await people.save(Person(name="Ann", age=30))
    >>> same = await people.dynamic_find("findByNameAndAge", ["Ann", 30])
"""

from repokit.core.exceptions import (
    DynamicQueryError,
    EmptyCriteriaError,
    InvalidPaginationError,
    RepositoryError,
    SoftDeleteNotSupportedError,
    TransactionStateError,
)
from repokit.db.base import Base, SoftDeleteMixin, TimestampMixin
from repokit.db.session import build_engine, build_session_factory, transactional
from repokit.db.transaction import Transaction, TransactionState
from repokit.repositories import (
    Condition,
    Logic,
    QueryBuilder,
    ReadRepository,
    Repository,
    WriteRepository,
)
from repokit.schemas.pagination import Page, SortOrder

__all__ = [
    "Base",
    "Condition",
    "DynamicQueryError",
    "EmptyCriteriaError",
    "InvalidPaginationError",
    "Logic",
    "Page",
    "QueryBuilder",
    "ReadRepository",
    "Repository",
    "RepositoryError",
    "SoftDeleteMixin",
    "SoftDeleteNotSupportedError",
    "SortOrder",
    "TimestampMixin",
    "Transaction",
    "TransactionState",
    "TransactionStateError",
    "WriteRepository",
    "build_engine",
    "build_session_factory",
    "transactional",
]
