# backend/tests/database/test_presence_statements.py
"""
The presence primitives must be single UPDATE statements: membership change
and status transition in one round-trip, evaluated by PostgreSQL.
These tests compile the statements; no database is needed.
"""
from sqlalchemy.dialects import postgresql

from roombridge.modules.rooms.repositories.room_repository import (
    build_add_socket_stmt,
    build_remove_socket_stmt,
    build_reset_presence_stmt,
)
from tests.fakes import T0


def compile_pg(stmt):
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


def test_add_socket_is_one_guarded_append():
    sql, params = compile_pg(build_add_socket_stmt("r1", "s1", T0))

    assert sql.startswith("UPDATE rooms SET")
    assert "array_append(rooms.connected_sockets" in sql
    assert "ANY" in sql
    assert "RETURNING rooms.id, rooms.status, rooms.connected_sockets, rooms.opened_at, rooms.closed_at" in sql
    assert "r1" in params.values()
    assert "s1" in params.values()


def test_remove_socket_closes_in_same_statement():
    sql, params = compile_pg(build_remove_socket_stmt("r1", "s1", T0))

    assert sql.startswith("UPDATE rooms SET")
    assert sql.count("array_remove(rooms.connected_sockets") >= 2  # new value and emptiness check
    assert "cardinality" in sql
    assert "CASE" in sql
    assert "RETURNING" in sql
    assert T0 in params.values()


def test_reset_presence_targets_open_or_non_empty_rooms():
    sql, _ = compile_pg(build_reset_presence_stmt(T0))

    assert sql.startswith("UPDATE rooms SET")
    assert "WHERE rooms.status = " in sql
    assert "cardinality(rooms.connected_sockets)" in sql
