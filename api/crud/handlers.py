"""
Generated CRUD handlers.

Each table gets one handler per operation in `operations_for(table)`. A
handler is a closure over its `TableDescriptor` and the injected `execute`
capability; it holds no other state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from core.db import StatementResult
from core.errors import NotFoundError, StatementExecutionError
from core.tables import ID_PARAM, Operation, TableDescriptor, ensure_unique, operations_for, path_for

from . import params, statements

logger = logging.getLogger(__name__)

Execute = Callable[[str, Sequence[Any]], Awaitable[StatementResult]]
Endpoint = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class Handler:
    table_name: str
    operation: Operation
    method: str
    path: str
    endpoint: Endpoint

    @property
    def name(self) -> str:
        return f"{self.operation.value.replace('-', '_')}_{self.table_name}"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_body(request: Request) -> dict[str, Any]:
    body = await request.json()
    if not isinstance(body, dict):
        raise ValueError(f"Request body must be a JSON object, got {type(body).__name__}.")
    return body


def _key_values(table: TableDescriptor, request: Request) -> list[Any]:
    """
    Bind the single path identifier to every primary-key column, converted
    for each column's type. An identifier that cannot represent a key column
    cannot match any row.
    """
    raw = request.path_params[ID_PARAM]
    try:
        return [params.coerce(table.data_type_of(key), raw) for key in table.primary_key]
    except ValueError as exc:
        raise NotFoundError(f"Identifier {raw!r} does not fit the key of {table.table_name}.") from exc


def _body_values(table: TableDescriptor, body: dict[str, Any]) -> tuple[list[str], list[Any]]:
    columns = list(body.keys())
    values = [params.coerce(table.data_type_of(col), body[col]) for col in columns]
    return columns, values


def _list(table: TableDescriptor, execute: Execute) -> Endpoint:
    async def endpoint(request: Request) -> Response:
        stmt = statements.select_all(table)
        result = await execute(stmt.text, stmt.params)
        return JSONResponse(params.to_json(result.rows))

    return endpoint


def _get_one(table: TableDescriptor, execute: Execute) -> Endpoint:
    async def endpoint(request: Request) -> Response:
        stmt = statements.select_one(table, _key_values(table, request))
        result = await execute(stmt.text, stmt.params)
        if not result.rows:
            raise NotFoundError(f"No {table.table_name} row matched.")
        return JSONResponse(params.to_json(result.rows[0]))

    return endpoint


def _create(table: TableDescriptor, execute: Execute) -> Endpoint:
    async def endpoint(request: Request) -> Response:
        columns, values = _body_values(table, await _read_body(request))
        stmt = statements.insert(table, columns, values)
        result = await execute(stmt.text, stmt.params)
        row = result.rows[0] if result.rows else {}
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=params.to_json(row))

    return endpoint


def _update(table: TableDescriptor, execute: Execute) -> Endpoint:
    async def endpoint(request: Request) -> Response:
        columns, values = _body_values(table, await _read_body(request))
        stmt = statements.update(table, columns, values, _key_values(table, request))
        result = await execute(stmt.text, stmt.params)
        if not result.rows:
            raise NotFoundError(f"No {table.table_name} row matched.")
        return JSONResponse(params.to_json(result.rows[0]))

    return endpoint


def _delete(table: TableDescriptor, execute: Execute) -> Endpoint:
    async def endpoint(request: Request) -> Response:
        stmt = statements.delete(table, _key_values(table, request))
        result = await execute(stmt.text, stmt.params)
        if result.row_count <= 0:
            raise NotFoundError(f"No {table.table_name} row matched.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return endpoint


_FACTORIES: dict[Operation, Callable[[TableDescriptor, Execute], Endpoint]] = {
    Operation.LIST: _list,
    Operation.CREATE: _create,
    Operation.GET_ONE: _get_one,
    Operation.UPDATE: _update,
    Operation.DELETE: _delete,
}


def _guarded(table: TableDescriptor, operation: Operation, inner: Endpoint) -> Endpoint:
    """
    Convert request-time failures into responses. Nothing raised by a handler
    reaches the server; SQL text and driver detail stay in the log.
    """

    async def endpoint(request: Request) -> Response:
        try:
            return await inner(request)
        except NotFoundError as exc:
            logger.debug("record_not_found table=%s operation=%s detail=%s", table.table_name, operation.value, exc)
            return _error(status.HTTP_404_NOT_FOUND, "Record not found")
        except StatementExecutionError as exc:
            logger.error("statement_failed table=%s operation=%s error=%s", table.table_name, operation.value, exc)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
        except Exception:
            logger.exception("request_failed table=%s operation=%s", table.table_name, operation.value)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    return endpoint


def build_handler(table: TableDescriptor, operation: Operation, execute: Execute) -> Handler:
    inner = _FACTORIES[operation](table, execute)
    return Handler(
        table_name=table.table_name,
        operation=operation,
        method=operation.method,
        path=path_for(table.table_name, operation),
        endpoint=_guarded(table, operation, inner),
    )


def generate_routes(tables: Sequence[TableDescriptor], execute: Execute) -> list[Handler]:
    """
    Build every handler for the snapshot. Raises `DuplicateResourceError`
    when a table name appears twice.
    """
    ensure_unique(tables)
    handlers = [
        build_handler(table, operation, execute)
        for table in tables
        for operation in operations_for(table)
    ]
    logger.info("routes_generated tables=%s handlers=%s", len(tables), len(handlers))
    return handlers
