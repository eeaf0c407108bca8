import sqlite3

import pytest

from poolbench.tests.fakes import FakeConnection
from poolbench.workload import ExistsQuery


def test_default_is_select_one():
    conn = FakeConnection()

    assert ExistsQuery()(conn) is True
    cursor = conn.cursors[0]
    assert cursor.executed == [("SELECT 1", ())]
    assert cursor.closed


def test_existence_check_sql():
    query = ExistsQuery("question", "id", "q1")
    conn = FakeConnection(row=(0,))

    assert query(conn) is False
    assert conn.cursors[0].executed == [
        ("SELECT EXISTS(SELECT 1 FROM question WHERE id = %s)", ("q1",))
    ]


def test_named_paramstyle_uses_mapping():
    query = ExistsQuery("question", paramstyle="pyformat")
    assert query.sql.endswith("= %(value)s)")
    assert query.parameters == {"value": ""}


def test_cursor_closed_when_query_fails():
    conn = FakeConnection()

    def boom(sql, parameters=()):
        raise RuntimeError("syntax error")

    cursor = conn.cursor()
    cursor.execute = boom
    conn.cursor = lambda: cursor

    with pytest.raises(RuntimeError):
        ExistsQuery("question")(conn)
    assert cursor.closed


@pytest.mark.parametrize("table", ["question; DROP TABLE x", "1abc", "a b"])
def test_rejects_unsafe_identifiers(table):
    with pytest.raises(ValueError):
        ExistsQuery(table)


def test_rejects_unknown_paramstyle():
    with pytest.raises(ValueError):
        ExistsQuery(paramstyle="dollar")


def test_against_sqlite():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE question (id TEXT PRIMARY KEY)")
    conn.execute("INSERT INTO question VALUES ('q1')")

    assert ExistsQuery("question", "id", "q1", paramstyle="qmark")(conn) is True
    assert ExistsQuery("question", "id", "", paramstyle="qmark")(conn) is False
    assert ExistsQuery()(conn) is True
