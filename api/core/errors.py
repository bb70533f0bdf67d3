"""
Error taxonomy.

Generation-time errors (`SchemaQueryError`, `DuplicateResourceError`) abort
startup. Request-time errors (`StatementExecutionError`, `NotFoundError`) are
converted to a response at the handler boundary.
"""

from __future__ import annotations


class AutoRestError(Exception):
    """Base class for every error raised by this service."""


class SchemaQueryError(AutoRestError):
    """The catalog query failed or returned rows of an unexpected shape."""


class DuplicateResourceError(AutoRestError):
    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table {table_name!r} appears more than once in the schema snapshot.")
        self.table_name = table_name


class StatementExecutionError(AutoRestError):
    """A single request's SQL statement failed."""


class NotFoundError(AutoRestError):
    """No row matched the addressed record."""
