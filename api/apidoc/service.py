"""
OpenAPI document synthesis from the schema snapshot.

One resource per table: `/{table}` always carries list and create; the
`/{table}/{id}` path is added only for tables with a primary key. The
operation set comes from `core.tables.operations_for`, the same source the
route generator uses.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

from core import settings
from core.tables import (
    ID_PARAM,
    Operation,
    TableDescriptor,
    ensure_unique,
    operations_for,
    path_for,
)

from .type_map import map_type

OPENAPI_VERSION = "3.0.0"
DEFAULT_DESCRIPTION = "Automatically generated REST API from PostgreSQL database schema"

def _server_error() -> dict:
    return {"description": "Internal server error"}


def _not_found() -> dict:
    return {"description": "Record not found"}


def schema_name_for(table_name: str) -> str:
    return f"{table_name}Schema"


def _ref(table_name: str) -> dict:
    return {"$ref": f"#/components/schemas/{schema_name_for(table_name)}"}


def _json_content(schema: dict) -> dict:
    return {"application/json": {"schema": schema}}


def table_schema(table: TableDescriptor) -> dict:
    properties: dict[str, dict] = {}
    required: list[str] = []
    for column in table.columns:
        prop = map_type(column.data_type).as_schema()
        prop["nullable"] = column.is_nullable
        properties[column.name] = prop
        if not column.is_nullable:
            required.append(column.name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    # OpenAPI 3.0 requires a non-empty `required` list when present.
    if required:
        schema["required"] = required
    return schema


def _id_parameter(table_name: str) -> dict:
    return {
        "name": ID_PARAM,
        "in": "path",
        "required": True,
        "schema": {"type": "string"},
        "description": f"ID of the {table_name}",
    }


def _request_body(table_name: str) -> dict:
    return {"required": True, "content": _json_content(_ref(table_name))}


def _list_operation(table_name: str) -> dict:
    return {
        "summary": f"List all {table_name}",
        "responses": {
            "200": {
                "description": "Successful operation",
                "content": _json_content({"type": "array", "items": _ref(table_name)}),
            },
            "500": _server_error(),
        },
    }


def _create_operation(table_name: str) -> dict:
    return {
        "summary": f"Create a new {table_name}",
        "requestBody": _request_body(table_name),
        "responses": {
            "201": {"description": "Successfully created", "content": _json_content(_ref(table_name))},
            "500": _server_error(),
        },
    }


def _get_one_operation(table_name: str) -> dict:
    return {
        "summary": f"Get a single {table_name}",
        "parameters": [_id_parameter(table_name)],
        "responses": {
            "200": {"description": "Successful operation", "content": _json_content(_ref(table_name))},
            "404": _not_found(),
            "500": _server_error(),
        },
    }


def _update_operation(table_name: str) -> dict:
    return {
        "summary": f"Update a {table_name}",
        "parameters": [_id_parameter(table_name)],
        "requestBody": _request_body(table_name),
        "responses": {
            "200": {"description": "Successful operation", "content": _json_content(_ref(table_name))},
            "404": _not_found(),
            "500": _server_error(),
        },
    }


def _delete_operation(table_name: str) -> dict:
    return {
        "summary": f"Delete a {table_name}",
        "parameters": [_id_parameter(table_name)],
        "responses": {
            "204": {"description": "Successfully deleted"},
            "404": _not_found(),
            "500": _server_error(),
        },
    }


_BUILDERS: dict[Operation, Callable[[str], dict]] = {
    Operation.LIST: _list_operation,
    Operation.CREATE: _create_operation,
    Operation.GET_ONE: _get_one_operation,
    Operation.UPDATE: _update_operation,
    Operation.DELETE: _delete_operation,
}


def operation_id(table_name: str, operation: Operation) -> str:
    return f"{operation.value.replace('-', '_')}_{table_name}"


def synthesize(
    tables: Sequence[TableDescriptor],
    *,
    title: str | None = None,
    version: str | None = None,
    description: str = DEFAULT_DESCRIPTION,
) -> dict:
    """
    Build the complete OpenAPI document. Raises `DuplicateResourceError` when
    a table name appears twice.
    """
    ensure_unique(tables)

    document: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": title or settings.api_title(),
            "version": version or settings.api_version(),
            "description": description,
        },
        "paths": {},
        "components": {"schemas": {}},
    }

    for table in tables:
        name = table.table_name
        document["components"]["schemas"][schema_name_for(name)] = table_schema(table)
        for operation in operations_for(table):
            op = _BUILDERS[operation](name)
            op["tags"] = [name]
            op["operationId"] = operation_id(name, operation)
            path_item = document["paths"].setdefault(path_for(name, operation), {})
            path_item[operation.method.lower()] = op

    return document


def declared_operations(document: dict, table_name: str) -> set[tuple[str, str]]:
    """
    `(METHOD, path)` pairs the document declares for one table.
    """
    pairs: set[tuple[str, str]] = set()
    for path, item in document.get("paths", {}).items():
        for method, op in item.items():
            if table_name in op.get("tags", []):
                pairs.add((method.upper(), path))
    return pairs
