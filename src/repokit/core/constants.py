"""Constants shared by the repository layer.

Constants are organized into logical groups for easy navigation.
"""


class DynamicQueryConstants:
    """Constants for method-name based dynamic finders."""

    # Prefix of camelCase finder names, e.g. "findByNameAndAge"
    METHOD_PREFIX = "findBy"
    # Prefix of snake_case finder names, e.g. "find_by_name_and_age"
    SNAKE_METHOD_PREFIX = "find_by_"

    # Connective tokens of camelCase names. They only count when they start a
    # new PascalCase word ("Brand" and "Order" are not split).
    AND_TOKEN = "And"
    OR_TOKEN = "Or"


class SoftDeleteConstants:
    """Constants for the soft-delete marker column."""

    DELETED_AT_COLUMN = "deleted_at"
