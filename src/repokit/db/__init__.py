"""Database base classes, sessions and transactions."""
