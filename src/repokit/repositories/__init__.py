"""Repository layer for database operations.

This package provides the repository pattern implementation, centralizing
all database access logic behind a uniform read/write contract.

Repositories:
    - BaseRepository: Model and session-factory holder shared by the facades
    - ReadRepository: Queries, pagination, sorting, dynamic finders
    - WriteRepository: Saves, updates, deletes, soft deletes, transactions
    - Repository: Read and write facades combined by delegation

Usage:
    >>> from repokit.repositories import Repository
    >>>
    >>> people = Repository(Person, session_factory)
    >>> adults = await people.find_by_conditions({"age": 30})
"""

from repokit.repositories.base import BaseRepository
from repokit.repositories.dynamic import (
    Condition,
    Logic,
    QueryBuilder,
    build_predicate,
    parse_method_name,
)
from repokit.repositories.interfaces import (
    ReadRepositoryProtocol,
    RepositoryProtocol,
    WriteRepositoryProtocol,
)
from repokit.repositories.read import ReadRepository
from repokit.repositories.repository import Repository
from repokit.repositories.write import WriteRepository

__all__ = [
    "BaseRepository",
    "Condition",
    "Logic",
    "QueryBuilder",
    "ReadRepository",
    "ReadRepositoryProtocol",
    "Repository",
    "RepositoryProtocol",
    "WriteRepository",
    "WriteRepositoryProtocol",
    "build_predicate",
    "parse_method_name",
]
