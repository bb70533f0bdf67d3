"""
Catalog queries (raw SQL over information_schema).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from core import db

FetchAll = Callable[..., Awaitable[list[dict[str, Any]]]]

# One row per base table: columns in ordinal order, and the PRIMARY KEY columns
# (NULL when the table has none).
CATALOG_QUERY = """
SELECT
    c.table_name,
    json_agg(
        json_build_object(
            'name', c.column_name,
            'dataType', c.data_type,
            'isNullable', c.is_nullable = 'YES'
        )
        ORDER BY c.ordinal_position
    ) AS columns,
    json_agg(pk.column_name ORDER BY c.ordinal_position)
        FILTER (WHERE pk.column_name IS NOT NULL) AS primary_keys
FROM information_schema.tables t
JOIN information_schema.columns c
  ON c.table_schema = t.table_schema
 AND c.table_name = t.table_name
LEFT JOIN (
    SELECT kcu.table_name, kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON kcu.constraint_name = tc.constraint_name
     AND kcu.table_schema = tc.table_schema
     AND kcu.table_name = tc.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
      AND tc.table_schema = $1
) pk
  ON pk.table_name = c.table_name
 AND pk.column_name = c.column_name
WHERE t.table_schema = $1
  AND t.table_type = 'BASE TABLE'
GROUP BY c.table_name
ORDER BY c.table_name
"""


async def fetch_catalog(schema_name: str, *, fetch: FetchAll | None = None) -> list[dict[str, Any]]:
    fetch_all = fetch or db.fetch_all
    return await fetch_all(CATALOG_QUERY, schema_name)
