"""Pydantic schemas returned by repositories."""

from repokit.schemas.pagination import Page, SortOrder

__all__ = ["Page", "SortOrder"]
