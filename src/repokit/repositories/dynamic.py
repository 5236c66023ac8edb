"""Dynamic finders: method-name parsing and a fluent equality query builder.

A finder name such as ``findByNameOrEmailAndAge`` is parsed into an ordered
list of conditions::

    [Condition("name", AND), Condition("email", OR), Condition("age", AND)]

A connective is the logic tag of the condition that follows it. The first
condition seeds the predicate and each later one is folded onto everything
accumulated so far with its own tag, so the example above compiles to
``((name = ? OR email = ?) AND age = ?)``.

``QueryBuilder`` produces the same conditions without string parsing::

    await repo.query().where_equal("name", "Ann").or_().where_equal("age", 30).all()
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from repokit.core.constants import DynamicQueryConstants
from repokit.core.exceptions import DynamicQueryError

if TYPE_CHECKING:
    from repokit.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")

_CAMEL_CONNECTIVE = re.compile(
    rf"({DynamicQueryConstants.AND_TOKEN}|{DynamicQueryConstants.OR_TOKEN})(?=[A-Z]|$)"
)
_SNAKE_CONNECTIVE = re.compile(r"_(and|or)(?:_|$)")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


class Logic(str, enum.Enum):
    """How a condition joins the predicate accumulated before it."""

    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Condition:
    """One equality condition parsed from a finder name."""

    field: str
    logic: Logic = Logic.AND


def _lower_first(segment: str) -> str:
    return segment[:1].lower() + segment[1:]


def to_snake_case(name: str) -> str:
    """Convert a camelCase attribute name to snake_case (``firstName`` -> ``first_name``)."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def parse_method_name(method_name: str) -> list[Condition]:
    """Parse a finder name into ordered conditions.

    Both ``findByFirstNameOrAge`` and ``find_by_first_name_or_age`` are
    accepted. Leading or trailing connectives produce no condition.

    Args:
        method_name: Finder name starting with ``findBy`` or ``find_by_``

    Returns:
        Conditions in the order they appear in the name (empty for ``findBy``)

    Raises:
        DynamicQueryError: If the name does not start with a finder prefix
    """
    if method_name.startswith(DynamicQueryConstants.METHOD_PREFIX):
        remainder = method_name[len(DynamicQueryConstants.METHOD_PREFIX) :]
        parts = _CAMEL_CONNECTIVE.split(remainder)
        connectives = {
            DynamicQueryConstants.AND_TOKEN: Logic.AND,
            DynamicQueryConstants.OR_TOKEN: Logic.OR,
        }
        normalize = _lower_first
    elif method_name.startswith(DynamicQueryConstants.SNAKE_METHOD_PREFIX):
        remainder = method_name[len(DynamicQueryConstants.SNAKE_METHOD_PREFIX) :]
        parts = _SNAKE_CONNECTIVE.split(remainder)
        connectives = {"and": Logic.AND, "or": Logic.OR}

        def normalize(segment: str) -> str:
            return segment

    else:
        raise DynamicQueryError(
            f"Dynamic finder '{method_name}' must start with "
            f"'{DynamicQueryConstants.METHOD_PREFIX}' or '{DynamicQueryConstants.SNAKE_METHOD_PREFIX}'"
        )

    conditions: list[Condition] = []
    logic = Logic.AND
    # re.split with a capture group alternates segment, connective, segment...
    for index, part in enumerate(parts):
        if index % 2 == 1:
            logic = connectives[part]
        elif part:
            conditions.append(Condition(field=normalize(part), logic=logic))
            logic = Logic.AND

    logger.debug(f"Parsed dynamic finder {method_name!r} into {conditions}")
    return conditions


def resolve_column(model: type[Any], field: str) -> Any:
    """Return the mapped attribute for field.

    The exact name is tried first, then its snake_case form, so finder names
    built from camelCase tokens work against snake_case Python models.

    Raises:
        AttributeError: If the model has neither attribute
    """
    attribute = getattr(model, field, None)
    if attribute is not None:
        return attribute
    return getattr(model, to_snake_case(field))


def check_arity(conditions: Sequence[Condition], params: Sequence[Any]) -> None:
    """Reject argument lists that do not line up with the parsed conditions."""
    if len(conditions) != len(params):
        raise DynamicQueryError(
            f"Expected {len(conditions)} argument(s) for fields "
            f"{[c.field for c in conditions]}, got {len(params)}"
        )


def build_predicate(
    model: type[Any],
    conditions: Sequence[Condition],
    params: Sequence[Any],
) -> ColumnElement[bool] | None:
    """Fold equality conditions into one boolean expression.

    Returns:
        The combined predicate, or None when there are no conditions

    Raises:
        DynamicQueryError: If the number of params differs from the conditions
        AttributeError: If a condition names an unknown field
    """
    check_arity(conditions, params)

    predicate: ColumnElement[bool] | None = None
    for condition, value in zip(conditions, params):
        clause = resolve_column(model, condition.field) == value
        if predicate is None:
            predicate = clause
        elif condition.logic is Logic.OR:
            predicate = or_(predicate, clause)
        else:
            predicate = and_(predicate, clause)
    return predicate


class QueryBuilder(Generic[ModelType]):
    """Fluent builder for equality queries against one repository.

    Connectives apply to the next ``where_equal`` call and default to AND.
    The builder is single-use state; create a new one per query via
    ``ReadRepository.query()``.
    """

    def __init__(self, repository: BaseRepository[ModelType]):
        self._repository = repository
        self._conditions: list[Condition] = []
        self._params: list[Any] = []
        self._next_logic = Logic.AND
        self._include_soft_deleted = False

    def where_equal(self, field: str, value: Any) -> QueryBuilder[ModelType]:
        self._conditions.append(Condition(field=field, logic=self._next_logic))
        self._params.append(value)
        self._next_logic = Logic.AND
        return self

    def where_conditions(
        self,
        conditions: Sequence[Condition],
        params: Sequence[Any],
    ) -> QueryBuilder[ModelType]:
        """Append parsed conditions with their positional values.

        Raises:
            DynamicQueryError: If the lengths differ
        """
        check_arity(conditions, params)
        self._conditions.extend(conditions)
        self._params.extend(params)
        return self

    def and_(self) -> QueryBuilder[ModelType]:
        self._next_logic = Logic.AND
        return self

    def or_(self) -> QueryBuilder[ModelType]:
        self._next_logic = Logic.OR
        return self

    def include_soft_deleted(self) -> QueryBuilder[ModelType]:
        self._include_soft_deleted = True
        return self

    @property
    def conditions(self) -> list[Condition]:
        return list(self._conditions)

    def statement(self) -> Select[tuple[ModelType]]:
        """Compile the builder into a SELECT statement."""
        stmt = self._repository.base_query(include_soft_deleted=self._include_soft_deleted)
        predicate = build_predicate(self._repository.model, self._conditions, self._params)
        if predicate is not None:
            stmt = stmt.where(predicate)
        return stmt

    async def all(self) -> list[ModelType]:
        async with self._repository.session_factory() as session:
            result = await session.execute(self.statement())
            return list(result.scalars().all())

    async def first(self) -> ModelType | None:
        async with self._repository.session_factory() as session:
            result = await session.execute(self.statement().limit(1))
            return result.scalars().first()

    async def count(self) -> int:
        count_stmt = select(func.count()).select_from(self.statement().subquery())
        async with self._repository.session_factory() as session:
            return (await session.execute(count_stmt)).scalar_one()
