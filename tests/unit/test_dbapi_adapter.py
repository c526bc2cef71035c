"""Unit tests for the DB-API statement adapter, without proxies."""

import sqlite3
from collections.abc import Iterator

import pytest

from sqlproxy.adapters.dbapi import DBAPIConnection, DBAPIPreparedStatement, DBAPIResultSet, dbapi_connector
from sqlproxy.exceptions import MissingParameterError, ParameterError, SQLProxyError
from sqlproxy.protocols import (
    CallableStatementProtocol,
    ConnectionProtocol,
    PreparedStatementProtocol,
    ResultSetProtocol,
    StatementProtocol,
)


@pytest.fixture
def connection() -> Iterator[DBAPIConnection]:
    connection = dbapi_connector(sqlite3.connect)(":memory:")
    try:
        statement = connection.create_statement()
        statement.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
        statement.close()
        yield connection
    finally:
        connection.close()


def test_result_set_navigation() -> None:
    result_set = DBAPIResultSet([(1, "ann"), (2, None)], ["id", "Name"])

    assert result_set.next()
    assert result_set.get_int(1) == 1
    assert result_set.get_string("name") == "ann"
    assert result_set.next()
    assert result_set.get_object("NAME") is None
    assert result_set.get_string(2) is None
    assert not result_set.next()
    assert len(result_set) == 2
    assert result_set.get_column_names() == ["id", "Name"]


def test_result_set_errors() -> None:
    result_set = DBAPIResultSet([(1,)], ["id"])
    with pytest.raises(SQLProxyError, match="not positioned"):
        result_set.get_object(1)
    result_set.next()
    with pytest.raises(SQLProxyError, match="out of range"):
        result_set.get_object(2)
    with pytest.raises(SQLProxyError, match="Unknown column"):
        result_set.get_object("missing")
    result_set.close()
    assert result_set.is_closed()
    with pytest.raises(SQLProxyError, match="closed"):
        result_set.next()


def test_result_set_iteration_and_fetchall() -> None:
    assert list(DBAPIResultSet([(1,), (2,)], ["id"])) == [(1,), (2,)]
    result_set = DBAPIResultSet([(1,), (2,), (3,)], ["id"])
    result_set.next()
    assert result_set.fetchall() == [(2,), (3,)]
    assert not result_set.next()


def test_positional_parameters_bind_in_index_order() -> None:
    assert DBAPIPreparedStatement._to_driver_parameters({2: "b", 1: "a"}) == ["a", "b"]
    assert DBAPIPreparedStatement._to_driver_parameters({}) == ()


def test_named_parameters_bind_as_mapping() -> None:
    assert DBAPIPreparedStatement._to_driver_parameters({"id": 1, "name": "x"}) == {"id": 1, "name": "x"}


def test_parameter_gaps_and_mixing_are_rejected() -> None:
    with pytest.raises(MissingParameterError, match="index 2"):
        DBAPIPreparedStatement._to_driver_parameters({1: "a", 3: "c"})
    with pytest.raises(ParameterError, match="mix"):
        DBAPIPreparedStatement._to_driver_parameters({1: "a", "name": "b"})


def test_invalid_binding_keys(connection: DBAPIConnection) -> None:
    statement = connection.prepare_statement("SELECT ?")
    with pytest.raises(ParameterError):
        statement.set_int(0, 1)
    with pytest.raises(ParameterError):
        statement.set_object(True, 1)


def test_plain_statement_generated_keys(connection: DBAPIConnection) -> None:
    statement = connection.create_statement()

    assert statement.execute_update("INSERT INTO users (name) VALUES ('ann')") == 1
    keys = statement.get_generated_keys()

    assert keys.get_column_names() == ["generated_key"]
    assert list(keys) == [(1,)]


def test_update_reports_no_generated_keys(connection: DBAPIConnection) -> None:
    statement = connection.create_statement()
    statement.execute_update("INSERT INTO users (name) VALUES ('ann')")

    assert statement.execute_update("UPDATE users SET name = 'bob'") == 1
    assert list(statement.get_generated_keys()) == []


def test_prepared_statement_batch(connection: DBAPIConnection) -> None:
    statement = connection.prepare_statement("INSERT INTO users (name) VALUES (?)")
    for name in ("ann", "bob"):
        statement.set_string(1, name)
        statement.add_batch()

    assert statement.execute_batch() == [1, 1]
    assert list(statement.get_generated_keys()) == [(1,), (2,)]

    query = connection.prepare_statement("SELECT name FROM users WHERE id = :id")
    query.set_int("id", 2)
    result_set = query.execute_query()
    assert result_set.next()
    assert result_set.get_string("name") == "bob"
    assert result_set.get_statement() is query


def test_execute_query_requires_rows(connection: DBAPIConnection) -> None:
    with pytest.raises(SQLProxyError, match="did not produce a result set"):
        connection.create_statement().execute_query("DELETE FROM users")


def test_callable_statement_reads_output_from_first_row(connection: DBAPIConnection) -> None:
    statement = connection.prepare_call("SELECT ? * 2 AS doubled")
    statement.set_int(1, 21)
    statement.register_out_parameter(2, "INTEGER")

    assert statement.execute() is True
    assert statement.get_object(2) == 42
    with pytest.raises(ParameterError):
        statement.get_object(3)


def test_closed_statement_and_connection(connection: DBAPIConnection) -> None:
    statement = connection.create_statement()
    statement.close()
    assert statement.is_closed()
    with pytest.raises(SQLProxyError, match="Statement is closed"):
        statement.execute("SELECT 1")

    connection.close()
    connection.close()
    assert connection.is_closed()
    with pytest.raises(SQLProxyError, match="Connection is closed"):
        connection.commit()


def test_connection_str_names_driver(connection: DBAPIConnection) -> None:
    assert str(connection) == "sqlite3.Connection"


def test_adapter_objects_satisfy_driver_protocols(connection: DBAPIConnection) -> None:
    assert isinstance(connection, ConnectionProtocol)
    assert isinstance(connection.create_statement(), StatementProtocol)
    assert isinstance(connection.prepare_statement("SELECT 1"), PreparedStatementProtocol)
    assert isinstance(connection.prepare_call("SELECT 1"), CallableStatementProtocol)
    assert isinstance(DBAPIResultSet([], []), ResultSetProtocol)
