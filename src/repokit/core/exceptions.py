"""Centralized exception hierarchy for the repository layer.

Only errors raised by repokit itself live here. Errors coming from
SQLAlchemy or the database driver (integrity violations, connection
failures, unknown columns) are never translated and reach the caller as-is.

Exception Hierarchy:
    RepositoryError (base)
    ├── DynamicQueryError
    ├── InvalidPaginationError
    ├── EmptyCriteriaError
    ├── SoftDeleteNotSupportedError
    └── TransactionStateError

Usage:
    from repokit.core.exceptions import DynamicQueryError

    try:
        people = await repo.dynamic_find("findByNameAndAge", ["Ann"])
    except DynamicQueryError as e:
        print(e.error_code)  # "DYNAMIC_QUERY_ERROR"
"""


class RepositoryError(Exception):
    """
    Base exception class for all repository errors.

    Attributes:
        detail: Human-readable error message
        error_code: Machine-readable error code (optional)
    """

    detail: str = "Repository error"
    error_code: str | None = None

    def __init__(
        self,
        detail: str | None = None,
        *,
        error_code: str | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            detail: Custom error message (overrides class default)
            error_code: Machine-readable error identifier
        """
        self.detail = detail or self.__class__.detail
        self.error_code = error_code or self.__class__.error_code
        super().__init__(self.detail)


class DynamicQueryError(RepositoryError):
    """
    Raised when a dynamic finder cannot be resolved.

    Used for method names without the ``findBy`` prefix and for calls whose
    argument count differs from the number of parsed conditions.
    """

    detail = "Invalid dynamic query"
    error_code = "DYNAMIC_QUERY_ERROR"


class InvalidPaginationError(RepositoryError):
    """Raised for non-positive page numbers or page sizes and negative offsets."""

    detail = "Invalid pagination parameters"
    error_code = "INVALID_PAGINATION"


class EmptyCriteriaError(RepositoryError):
    """
    Raised when a conditional delete receives no conditions.

    Deleting every row must go through ``delete_all`` explicitly.
    """

    detail = "Empty criteria are not allowed for conditional deletes"
    error_code = "EMPTY_CRITERIA"


class SoftDeleteNotSupportedError(RepositoryError):
    """Raised when soft delete or restore is used on a model without ``deleted_at``."""

    detail = "Model does not support soft delete"
    error_code = "SOFT_DELETE_NOT_SUPPORTED"


class TransactionStateError(RepositoryError):
    """Raised when a transaction handle is used out of order."""

    detail = "Invalid transaction state"
    error_code = "TRANSACTION_STATE_ERROR"
