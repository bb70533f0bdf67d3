"""
tests/conftest.py
Shared fixtures for the test suite.

No database is required: generated handlers run against `FakeDatabase`
(tests/fakes.py).
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import main
from apidoc import service as apidoc_service
from core.tables import ColumnDescriptor, TableDescriptor
from crud import handlers as crud_handlers
from fakes import FakeDatabase


# ---------------------------------------------------------------------------
# Table fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def users_table() -> TableDescriptor:
    return TableDescriptor(
        table_name="users",
        columns=(
            ColumnDescriptor("id", "integer", False),
            ColumnDescriptor("name", "text", False),
            ColumnDescriptor("email", "text", True),
        ),
        primary_key=("id",),
    )


@pytest.fixture()
def logs_table() -> TableDescriptor:
    return TableDescriptor(
        table_name="logs",
        columns=(
            ColumnDescriptor("ts", "timestamp without time zone", True),
            ColumnDescriptor("msg", "text", True),
        ),
        primary_key=(),
    )


@pytest.fixture()
def memberships_table() -> TableDescriptor:
    """Composite primary key (user_id, group_id)."""
    return TableDescriptor(
        table_name="memberships",
        columns=(
            ColumnDescriptor("user_id", "integer", False),
            ColumnDescriptor("group_id", "integer", False),
            ColumnDescriptor("role", "character varying", True),
        ),
        primary_key=("user_id", "group_id"),
    )


@pytest.fixture()
def tables(users_table, logs_table) -> List[TableDescriptor]:
    return [logs_table, users_table]


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_db(tables) -> FakeDatabase:
    return FakeDatabase(tables)


@pytest.fixture()
def document(tables) -> Dict[str, Any]:
    return apidoc_service.synthesize(tables, title="Test API", version="0.0.1")


@pytest.fixture()
def handlers(tables, fake_db) -> List[crud_handlers.Handler]:
    return crud_handlers.generate_routes(tables, fake_db.execute)


@pytest.fixture()
def client(document, handlers) -> TestClient:
    app = FastAPI()
    main.install(app, document, handlers)
    return TestClient(app)
