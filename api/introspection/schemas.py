"""
Pydantic models for raw catalog rows.

asyncpg returns `json` aggregates as text, so list fields accept either a JSON
string or an already decoded list.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogColumn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    data_type: str = Field(..., alias="dataType")
    is_nullable: bool = Field(..., alias="isNullable")


class CatalogRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1)
    columns: list[CatalogColumn] = Field(..., min_length=1)
    primary_keys: list[str | None] | None = None

    @field_validator("columns", "primary_keys", mode="before")
    @classmethod
    def _decode_json(cls, value: Any) -> Any:
        if isinstance(value, (str, bytes)):
            return json.loads(value)
        return value
