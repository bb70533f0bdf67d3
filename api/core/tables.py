"""
Schema snapshot types shared by the document and route generators.

A `TableDescriptor` list is built once at startup and passed by reference to
both generators. Both ask `operations_for()` which operations a table gets, so
the document and the registered handlers always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .errors import DuplicateResourceError

ID_PARAM = "id"


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    data_type: str
    is_nullable: bool


@dataclass(frozen=True)
class TableDescriptor:
    table_name: str
    columns: tuple[ColumnDescriptor, ...]
    primary_key: tuple[str, ...] = ()

    @property
    def has_primary_key(self) -> bool:
        return len(self.primary_key) > 0

    def column(self, name: str) -> ColumnDescriptor | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def data_type_of(self, name: str) -> str | None:
        column = self.column(name)
        return column.data_type if column is not None else None


class Operation(str, Enum):
    LIST = "list"
    CREATE = "create"
    GET_ONE = "get-one"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def method(self) -> str:
        return _METHODS[self]

    @property
    def addresses_record(self) -> bool:
        """True for operations scoped to one record (`/{table}/{id}`)."""
        return self in _RECORD_OPERATIONS


_METHODS = {
    Operation.LIST: "GET",
    Operation.CREATE: "POST",
    Operation.GET_ONE: "GET",
    Operation.UPDATE: "PUT",
    Operation.DELETE: "DELETE",
}

_RECORD_OPERATIONS = frozenset({Operation.GET_ONE, Operation.UPDATE, Operation.DELETE})


def collection_path(table_name: str) -> str:
    return f"/{table_name}"


def record_path(table_name: str) -> str:
    return f"/{table_name}/{{{ID_PARAM}}}"


def path_for(table_name: str, operation: Operation) -> str:
    if operation.addresses_record:
        return record_path(table_name)
    return collection_path(table_name)


def operations_for(table: TableDescriptor) -> tuple[Operation, ...]:
    if not table.has_primary_key:
        return (Operation.LIST, Operation.CREATE)
    return (
        Operation.LIST,
        Operation.CREATE,
        Operation.GET_ONE,
        Operation.UPDATE,
        Operation.DELETE,
    )


def ensure_unique(tables: Iterable[TableDescriptor]) -> None:
    seen: set[str] = set()
    for table in tables:
        if table.table_name in seen:
            raise DuplicateResourceError(table.table_name)
        seen.add(table.table_name)
