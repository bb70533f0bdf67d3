"""
tests/test_handlers.py
Generated handlers exercised over HTTP against the in-memory FakeDatabase.
"""

from __future__ import annotations

import base64
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import main
from apidoc.service import declared_operations, synthesize
from core.db import StatementResult
from core.errors import StatementExecutionError
from core.tables import ColumnDescriptor, Operation, TableDescriptor
from crud.handlers import generate_routes

from fakes import FakeDatabase


def _registered(handlers, table_name):
    return {(h.method, h.path) for h in handlers if h.table_name == table_name}


def test_handlers_match_document_per_table(tables, document, handlers):
    for table in tables:
        assert _registered(handlers, table.table_name) == declared_operations(document, table.table_name)


def test_operation_sets(handlers):
    users = {h.operation for h in handlers if h.table_name == "users"}
    logs = {h.operation for h in handlers if h.table_name == "logs"}
    assert users == set(Operation)
    assert logs == {Operation.LIST, Operation.CREATE}


def test_consistency_holds_for_composite_keys(memberships_table, logs_table):
    snapshot = [memberships_table, logs_table]
    doc = synthesize(snapshot, title="t", version="1")
    registered = generate_routes(snapshot, FakeDatabase(snapshot).execute)
    for table in snapshot:
        assert _registered(registered, table.table_name) == declared_operations(doc, table.table_name)


def test_create_then_get_round_trip(client):
    created = client.post("/users", json={"name": "a"})
    assert created.status_code == 201
    row = created.json()
    assert row["name"] == "a"
    assert row["id"] is not None

    fetched = client.get(f"/users/{row['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == row


def test_create_with_several_fields(client):
    row = client.post("/users", json={"name": "b", "email": "b@example.com"}).json()
    fetched = client.get(f"/users/{row['id']}").json()
    assert fetched["name"] == "b"
    assert fetched["email"] == "b@example.com"


def test_list_returns_all_rows(client):
    assert client.get("/users").json() == []
    client.post("/users", json={"name": "a"})
    client.post("/users", json={"name": "b"})
    names = [r["name"] for r in client.get("/users").json()]
    assert names == ["a", "b"]


def test_table_without_primary_key_has_no_record_routes(client):
    assert client.post("/logs", json={"msg": "hello"}).status_code == 201
    assert client.get("/logs").status_code == 200
    assert client.get("/logs/1").status_code in (404, 405)
    assert client.delete("/logs/1").status_code in (404, 405)


def test_get_missing_record_returns_404(client):
    resp = client.get("/users/999999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Record not found"}


def test_identifier_that_does_not_fit_key_type_returns_404(client, fake_db):
    assert client.get("/users/not-a-number").status_code == 404
    assert fake_db.statements == []


def test_delete_missing_record_returns_404(client, fake_db):
    resp = client.delete("/users/999999")
    assert resp.status_code == 404
    assert fake_db.rows["users"] == {}


def test_delete_is_idempotent(client):
    row = client.post("/users", json={"name": "a"}).json()
    first = client.delete(f"/users/{row['id']}")
    assert first.status_code == 204
    assert first.content == b""
    assert client.delete(f"/users/{row['id']}").status_code == 404
    assert client.get(f"/users/{row['id']}").status_code == 404


def test_update_converges(client):
    row = client.post("/users", json={"name": "a"}).json()
    first = client.put(f"/users/{row['id']}", json={"name": "z", "email": "z@example.com"})
    second = client.put(f"/users/{row['id']}", json={"name": "z", "email": "z@example.com"})
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert client.get(f"/users/{row['id']}").json() == second.json()


def test_update_missing_record_returns_404(client):
    assert client.put("/users/999999", json={"name": "z"}).status_code == 404


def test_update_binds_body_then_identifier(client, fake_db):
    row = client.post("/users", json={"name": "a"}).json()
    client.put(f"/users/{row['id']}", json={"name": "b"})
    sql, params = fake_db.statements[-1]
    assert sql == "UPDATE users SET name = $1 WHERE id = $2 RETURNING *"
    assert params == ["b", row["id"]]


def test_unknown_column_is_generic_server_error(client):
    resp = client.post("/users", json={"nope": 1})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "nope" not in resp.text


def test_statement_failure_does_not_leak_detail(client, fake_db):
    fake_db.fail_with = StatementExecutionError('relation "users" does not exist')
    resp = client.get("/users")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "relation" not in resp.text


def test_unexpected_failure_is_contained(client, fake_db):
    fake_db.fail_with = RuntimeError("boom")
    assert client.get("/users").status_code == 500
    fake_db.fail_with = None
    assert client.get("/users").status_code == 200


def test_malformed_json_body_is_generic_server_error(client):
    resp = client.post("/users", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_non_object_body_is_generic_server_error(client):
    assert client.post("/users", json=[{"name": "a"}]).status_code == 500


def test_empty_create_body_inserts_defaults(client, fake_db):
    resp = client.post("/users", json={})
    assert resp.status_code == 201
    assert fake_db.statements[-1] == ("INSERT INTO users DEFAULT VALUES RETURNING *", [])


def test_composite_key_binds_identifier_to_every_placeholder(memberships_table):
    seen = []

    async def execute(sql, params):
        seen.append((sql, list(params)))
        return StatementResult(rows=[], row_count=0)

    app = FastAPI()
    snapshot = [memberships_table]
    main.install(app, synthesize(snapshot, title="t", version="1"), generate_routes(snapshot, execute))
    client = TestClient(app)

    assert client.delete("/memberships/5").status_code == 404
    assert seen == [("DELETE FROM memberships WHERE user_id = $1 AND group_id = $2", [5, 5])]


def test_docs_are_served(client, document):
    assert client.get("/api-docs/openapi.json").json() == document
    ui = client.get("/api-docs")
    assert ui.status_code == 200
    assert "swagger" in ui.text.lower()


SAMPLE_ID = UUID("12345678-1234-5678-1234-567812345678")

SAMPLE_ROW = {
    "id": SAMPLE_ID,
    "data": b"\xff\x00\x10",
    "doc": {"tags": ["a", "b"], "n": 1},
    "price": Decimal("19.99"),
    "created_at": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    "opens_at": time(9, 30, tzinfo=timezone.utc),
    "wait": timedelta(hours=1, minutes=30),
}


@pytest.fixture()
def samples_table() -> TableDescriptor:
    return TableDescriptor(
        table_name="samples",
        columns=(
            ColumnDescriptor("id", "uuid", False),
            ColumnDescriptor("data", "bytea", True),
            ColumnDescriptor("doc", "jsonb", True),
            ColumnDescriptor("price", "numeric", True),
            ColumnDescriptor("created_at", "timestamp with time zone", True),
            ColumnDescriptor("opens_at", "time with time zone", True),
            ColumnDescriptor("wait", "interval", True),
        ),
        primary_key=("id",),
    )


@pytest.fixture()
def samples_client(samples_table):
    seen = []

    async def execute(sql, params):
        seen.append((sql, list(params)))
        return StatementResult(rows=[dict(SAMPLE_ROW)], row_count=1)

    snapshot = [samples_table]
    doc = synthesize(snapshot, title="t", version="1")
    app = FastAPI()
    main.install(app, doc, generate_routes(snapshot, execute))
    return TestClient(app), doc, seen


def _matches_schema(value, prop):
    if value is None:
        return prop["nullable"]
    kind, fmt = prop["type"], prop.get("format")
    if kind == "object":
        return isinstance(value, dict)
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind != "string" or not isinstance(value, str):
        return False
    parsers = {
        "binary": lambda v: base64.b64decode(v, validate=True),
        "uuid": UUID,
        "date-time": datetime.fromisoformat,
        "time": time.fromisoformat,
    }
    if fmt in parsers:
        parsers[fmt](value)
    return True


def test_driver_values_are_encoded_per_document(samples_client):
    client, doc, _ = samples_client
    props = doc["components"]["schemas"]["samplesSchema"]["properties"]
    for resp in (client.get("/samples"), client.get(f"/samples/{SAMPLE_ID}")):
        assert resp.status_code == 200
        body = resp.json()
        row = body[0] if isinstance(body, list) else body
        assert set(row) == set(props)
        for name, value in row.items():
            assert _matches_schema(value, props[name]), name


def test_driver_values_wire_forms(samples_client):
    client, _, _ = samples_client
    row = client.get(f"/samples/{SAMPLE_ID}").json()
    assert row["data"] == "/wAQ"
    assert row["doc"] == {"tags": ["a", "b"], "n": 1}
    assert row["price"] == 19.99
    assert row["created_at"] == "2024-01-02T03:04:05+00:00"
    assert row["opens_at"] == "09:30:00+00:00"
    assert row["wait"] == "P0DT1H30M0S"


def test_create_binds_driver_types(samples_client):
    client, _, seen = samples_client
    resp = client.post(
        "/samples",
        json={
            "data": "/wAQ",
            "doc": {"k": [1]},
            "price": "19.99",
            "created_at": "2024-01-02T03:04:05+00:00",
            "opens_at": "09:30:00+00:00",
            "wait": "1 day 00:30:00",
        },
    )
    assert resp.status_code == 201
    _, bound = seen[-1]
    assert bound == [
        b"\xff\x00\x10",
        {"k": [1]},
        Decimal("19.99"),
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        time(9, 30, tzinfo=timezone.utc),
        timedelta(days=1, minutes=30),
    ]


def test_binary_and_json_round_trip():
    blobs = TableDescriptor(
        table_name="blobs",
        columns=(
            ColumnDescriptor("id", "integer", False),
            ColumnDescriptor("data", "bytea", True),
            ColumnDescriptor("doc", "jsonb", True),
        ),
        primary_key=("id",),
    )
    snapshot = [blobs]
    fake = FakeDatabase(snapshot)
    app = FastAPI()
    main.install(app, synthesize(snapshot, title="t", version="1"), generate_routes(snapshot, fake.execute))
    client = TestClient(app)

    created = client.post("/blobs", json={"data": "/wAQ", "doc": {"a": 1}})
    assert created.status_code == 201
    stored = fake.rows["blobs"][created.json()["id"]]
    assert stored["data"] == b"\xff\x00\x10"

    fetched = client.get(f"/blobs/{created.json()['id']}").json()
    assert fetched == {"id": created.json()["id"], "data": "/wAQ", "doc": {"a": 1}}
    assert client.get("/blobs").status_code == 200
