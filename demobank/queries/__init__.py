"""Derived query package."""

from demobank.queries.derived import DUE_CATEGORIES, HANDLED_CATEGORIES, DerivedQueries

__all__ = ["DUE_CATEGORIES", "HANDLED_CATEGORIES", "DerivedQueries"]
