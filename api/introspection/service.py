"""
Schema inspection: catalog rows -> ordered list of `TableDescriptor`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from core import settings
from core.errors import SchemaQueryError
from core.tables import ColumnDescriptor, TableDescriptor

from . import repository
from .schemas import CatalogRow

logger = logging.getLogger(__name__)


def _unique(names: Iterable[str | None]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        if name is None or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


def to_descriptor(row: CatalogRow) -> TableDescriptor:
    columns: list[ColumnDescriptor] = []
    seen: set[str] = set()
    for col in row.columns:
        if col.name in seen:
            continue
        seen.add(col.name)
        columns.append(
            ColumnDescriptor(
                name=col.name,
                data_type=col.data_type.strip().lower(),
                is_nullable=col.is_nullable,
            )
        )

    # Key columns follow catalog column order; names the column list does not
    # know about keep their relative order at the end.
    position = {col.name: idx for idx, col in enumerate(columns)}
    primary_key = sorted(
        _unique(row.primary_keys or []),
        key=lambda name: position.get(name, len(position)),
    )
    return TableDescriptor(
        table_name=row.table_name,
        columns=tuple(columns),
        primary_key=tuple(primary_key),
    )


def normalize(rows: Iterable[Any]) -> list[TableDescriptor]:
    """
    Validate raw catalog rows and turn them into descriptors ordered by table
    name. Raises `SchemaQueryError` on any row of unexpected shape.
    """
    tables: list[TableDescriptor] = []
    for raw in rows:
        try:
            row = CatalogRow.model_validate(dict(raw))
        except (ValidationError, TypeError, ValueError) as exc:
            raise SchemaQueryError(f"Malformed catalog row: {exc}") from exc
        tables.append(to_descriptor(row))
    tables.sort(key=lambda t: t.table_name)
    return tables


async def inspect(
    fetch: repository.FetchAll | None = None,
    *,
    schema_name: str | None = None,
) -> list[TableDescriptor]:
    """
    Run the catalog query once and return every base table of the schema.
    """
    schema = schema_name or settings.schema_name()
    try:
        rows = await repository.fetch_catalog(schema, fetch=fetch)
    except Exception as exc:
        raise SchemaQueryError(f"Catalog query failed for schema {schema!r}: {exc}") from exc

    tables = normalize(rows)
    for table in tables:
        if not table.has_primary_key:
            logger.info("table_without_primary_key table=%s operations=list,create", table.table_name)
    logger.info("schema_inspected schema=%s tables=%s", schema, len(tables))
    return tables
