"""Statement-style access to PEP 249 (DB-API 2.0) connections.

The proxies in :mod:`sqlproxy.proxy` wrap drivers exposing statement objects
(``prepare_statement``, ``set_int``, ``add_batch``, ``get_generated_keys`` ...).
This module offers that surface on top of any DB-API connection so its queries
can be intercepted::

    connect = ProxyConnectionFactory(dbapi_connector(sqlite3.connect), ProxyConfig())
    with connect(":memory:") as conn:
        ...

Parameters bound by index are passed to the driver as a sequence, parameters
bound by name as a mapping, so the query must use a placeholder style the
driver accepts for that shape.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from sqlproxy.exceptions import MissingParameterError, ParameterError, SQLProxyError
from sqlproxy.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from sqlproxy.typing import ParameterKeyValue

__all__ = (
    "DBAPICallableStatement",
    "DBAPIConnection",
    "DBAPIPreparedStatement",
    "DBAPIResultSet",
    "DBAPIStatement",
    "dbapi_connector",
)

logger = get_logger("adapters.dbapi")

GENERATED_KEY_COLUMN = "generated_key"
_CALL_PATTERN = re.compile(r"^\s*\{?\s*(?:\?\s*=\s*)?call\s+([\w.$]+)", re.IGNORECASE)


class DBAPIResultSet:
    """Rows fetched from a cursor, read one row at a time.

    Args:
        rows: The fetched rows.
        column_names: Column names in cursor order.
        statement: Statement that produced the rows.
    """

    def __init__(self, rows: Sequence[Sequence[Any]], column_names: Sequence[str], statement: Any = None) -> None:
        self._rows = list(rows)
        self._column_names = list(column_names)
        self._statement = statement
        self._position = -1
        self._closed = False

    @classmethod
    def from_cursor(cls, cursor: Any, statement: Any = None) -> DBAPIResultSet:
        column_names = [column[0] for column in cursor.description]
        return cls(cursor.fetchall(), column_names, statement)

    def _check_open(self) -> None:
        if self._closed:
            msg = "Result set is closed"
            raise SQLProxyError(msg)

    def next(self) -> bool:
        self._check_open()
        if self._position + 1 >= len(self._rows):
            self._position = len(self._rows)
            return False
        self._position += 1
        return True

    def _column_index(self, column: int | str) -> int:
        if isinstance(column, int):
            if not 1 <= column <= len(self._column_names):
                msg = f"Column index {column} out of range 1..{len(self._column_names)}"
                raise SQLProxyError(msg)
            return column - 1
        lowered = [name.lower() for name in self._column_names]
        try:
            return lowered.index(column.lower())
        except ValueError:
            msg = f"Unknown column {column!r}"
            raise SQLProxyError(msg) from None

    def get_object(self, column: int | str) -> Any:
        """Value of ``column`` (1-based index or name) in the current row."""
        self._check_open()
        if not 0 <= self._position < len(self._rows):
            msg = "Result set is not positioned on a row"
            raise SQLProxyError(msg)
        return self._rows[self._position][self._column_index(column)]

    def get_int(self, column: int | str) -> int | None:
        value = self.get_object(column)
        return None if value is None else int(value)

    def get_string(self, column: int | str) -> str | None:
        value = self.get_object(column)
        return None if value is None else str(value)

    def get_column_names(self) -> list[str]:
        return list(self._column_names)

    def get_statement(self) -> Any:
        return self._statement

    def fetchall(self) -> list[tuple[Any, ...]]:
        """Remaining rows, moving the cursor past the end."""
        self._check_open()
        remaining = [tuple(row) for row in self._rows[self._position + 1 :]]
        self._position = len(self._rows)
        return remaining

    def close(self) -> None:
        self._closed = True

    def is_closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        while self.next():
            yield tuple(self._rows[self._position])

    def __len__(self) -> int:
        return len(self._rows)

    def __enter__(self) -> DBAPIResultSet:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class _StatementBase:
    """Execution bookkeeping shared by every statement kind."""

    def __init__(self, connection: DBAPIConnection) -> None:
        self._connection = connection
        self._result_set: DBAPIResultSet | None = None
        self._update_count = -1
        self._generated_ids: list[Any] = []
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            msg = "Statement is closed"
            raise SQLProxyError(msg)

    def _run(self, sql: str, parameters: Any = None) -> bool:
        """Execute on a fresh cursor and capture results, row count and generated id."""
        self._check_open()
        cursor = self._connection.raw_connection.cursor()
        try:
            if parameters is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, parameters)
            if cursor.description:
                self._result_set = DBAPIResultSet.from_cursor(cursor, self)
                self._update_count = -1
                return True
            self._result_set = None
            self._update_count = cursor.rowcount
            lastrowid = getattr(cursor, "lastrowid", None)
            if cursor.rowcount > 0 and self._connection.track_generated_id(lastrowid):
                self._generated_ids.append(lastrowid)
            return False
        finally:
            cursor.close()

    def _reset_generated_ids(self) -> None:
        self._generated_ids = []

    def get_result_set(self) -> DBAPIResultSet | None:
        return self._result_set

    def get_update_count(self) -> int:
        return self._update_count

    def get_generated_keys(self) -> DBAPIResultSet:
        """Row ids generated by the last execution, one row per id."""
        self._check_open()
        return DBAPIResultSet([(value,) for value in self._generated_ids], [GENERATED_KEY_COLUMN], self)

    def get_connection(self) -> DBAPIConnection:
        return self._connection

    def close(self) -> None:
        if self._result_set is not None:
            self._result_set.close()
        self._closed = True

    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Any:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class DBAPIStatement(_StatementBase):
    """Executes literal query text."""

    def __init__(self, connection: DBAPIConnection) -> None:
        super().__init__(connection)
        self._batch: list[str] = []

    def execute(self, sql: str, generated_keys: Any = None) -> bool:
        self._reset_generated_ids()
        return self._run(sql)

    def execute_query(self, sql: str) -> DBAPIResultSet:
        self._reset_generated_ids()
        if not self._run(sql):
            msg = f"Query did not produce a result set: {sql}"
            raise SQLProxyError(msg)
        assert self._result_set is not None
        return self._result_set

    def execute_update(self, sql: str, generated_keys: Any = None) -> int:
        self._reset_generated_ids()
        self._run(sql)
        return self._update_count

    def add_batch(self, sql: str) -> None:
        self._check_open()
        self._batch.append(sql)

    def clear_batch(self) -> None:
        self._batch.clear()

    def execute_batch(self) -> list[int]:
        self._reset_generated_ids()
        counts = []
        try:
            for sql in self._batch:
                self._run(sql)
                counts.append(self._update_count)
        finally:
            self._batch.clear()
        return counts


def _binder(method: str) -> Callable[..., None]:
    def bind(self: DBAPIPreparedStatement, key: ParameterKeyValue, value: Any, *args: Any) -> None:
        self._bind(key, value)

    bind.__name__ = method
    return bind


class DBAPIPreparedStatement(_StatementBase):
    """Executes one query with bound parameters.

    Args:
        connection: Owning connection.
        sql: The query, using the driver's placeholder style.
    """

    def __init__(self, connection: DBAPIConnection, sql: str) -> None:
        super().__init__(connection)
        self._sql = sql
        self._bindings: dict[ParameterKeyValue, Any] = {}
        self._batch: list[dict[ParameterKeyValue, Any]] = []

    @property
    def sql(self) -> str:
        return self._sql

    def _bind(self, key: ParameterKeyValue, value: Any) -> None:
        self._check_open()
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            msg = f"Parameter key must be an int index or a str name, got {key!r}"
            raise ParameterError(msg)
        if isinstance(key, int) and key < 1:
            msg = f"Parameter index must be 1 or greater, got {key}"
            raise ParameterError(msg)
        self._bindings[key] = value

    def set_object(self, key: ParameterKeyValue, value: Any, sql_type: Any = None) -> None:
        self._bind(key, value)

    def set_null(self, key: ParameterKeyValue, sql_type: Any = None) -> None:
        self._bind(key, None)

    set_int = _binder("set_int")
    set_long = _binder("set_long")
    set_short = _binder("set_short")
    set_float = _binder("set_float")
    set_double = _binder("set_double")
    set_big_decimal = _binder("set_big_decimal")
    set_boolean = _binder("set_boolean")
    set_string = _binder("set_string")
    set_bytes = _binder("set_bytes")
    set_date = _binder("set_date")
    set_time = _binder("set_time")
    set_timestamp = _binder("set_timestamp")

    def clear_parameters(self) -> None:
        self._bindings.clear()

    @staticmethod
    def _to_driver_parameters(bindings: dict[ParameterKeyValue, Any]) -> Sequence[Any] | dict[str, Any]:
        if not bindings:
            return ()
        indexes = [key for key in bindings if isinstance(key, int)]
        names = [key for key in bindings if isinstance(key, str)]
        if indexes and names:
            msg = "Cannot mix parameters bound by index and by name"
            raise ParameterError(msg)
        if names:
            return {name: bindings[name] for name in names}
        highest = max(indexes)
        missing = sorted(set(range(1, highest + 1)) - set(indexes))
        if missing:
            msg = f"No value bound for parameter index {', '.join(map(str, missing))}"
            raise MissingParameterError(msg)
        return [bindings[index] for index in range(1, highest + 1)]

    def execute(self) -> bool:
        self._reset_generated_ids()
        return self._run(self._sql, self._to_driver_parameters(self._bindings))

    def execute_query(self) -> DBAPIResultSet:
        if not self.execute():
            msg = f"Query did not produce a result set: {self._sql}"
            raise SQLProxyError(msg)
        assert self._result_set is not None
        return self._result_set

    def execute_update(self) -> int:
        self.execute()
        return self._update_count

    def add_batch(self) -> None:
        self._check_open()
        self._batch.append(dict(self._bindings))
        self._bindings.clear()

    def clear_batch(self) -> None:
        self._batch.clear()

    def execute_batch(self) -> list[int]:
        self._reset_generated_ids()
        counts = []
        try:
            for bindings in self._batch:
                self._run(self._sql, self._to_driver_parameters(bindings))
                counts.append(self._update_count)
        finally:
            self._batch.clear()
        return counts


class DBAPICallableStatement(DBAPIPreparedStatement):
    """Calls a stored procedure and exposes its output parameters.

    ``{call name(?, ?)}`` and ``CALL name(?, ?)`` queries go through the
    cursor's ``callproc`` when the driver offers it; output values are read from
    the sequence it returns. Otherwise the query is executed as is and output
    parameters take the columns of the first returned row in registration order.
    """

    def __init__(self, connection: DBAPIConnection, sql: str) -> None:
        super().__init__(connection, sql)
        self._out_parameters: dict[ParameterKeyValue, Any] = {}
        self._out_values: dict[ParameterKeyValue, Any] = {}

    def register_out_parameter(self, key: ParameterKeyValue, sql_type: Any = None, *args: Any) -> None:
        self._check_open()
        self._out_parameters[key] = sql_type

    def execute(self) -> bool:
        self._reset_generated_ids()
        self._out_values = {}
        cursor = self._connection.raw_connection.cursor()
        match = _CALL_PATTERN.match(self._sql)
        if match is not None and hasattr(cursor, "callproc"):
            # output-only parameters still occupy a position in the argument list
            bindings = {key: None for key in self._out_parameters}
            bindings.update(self._bindings)
            try:
                returned = cursor.callproc(match.group(1), self._to_driver_parameters(bindings))
            finally:
                cursor.close()
            if returned is not None:
                for key in self._out_parameters:
                    self._out_values[key] = returned[key - 1] if isinstance(key, int) else returned[key]
            return False
        cursor.close()
        has_rows = self._run(self._sql, self._to_driver_parameters(self._bindings))
        if has_rows and self._result_set is not None and self._result_set.next():
            for position, key in enumerate(self._out_parameters, start=1):
                self._out_values[key] = self._result_set.get_object(position)
        return has_rows

    def get_object(self, key: ParameterKeyValue) -> Any:
        """Value of a registered output parameter after execution."""
        if key not in self._out_values:
            msg = f"No output value for parameter {key!r}"
            raise ParameterError(msg)
        return self._out_values[key]


class DBAPIConnection:
    """Statement-style wrapper of a DB-API connection.

    Args:
        connection: An open DB-API connection.
    """

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._closed = False
        self._last_generated_id: Any = None

    @property
    def raw_connection(self) -> Any:
        if self._closed:
            msg = "Connection is closed"
            raise SQLProxyError(msg)
        return self._connection

    def track_generated_id(self, lastrowid: Any) -> bool:
        """Whether ``lastrowid`` is a row id generated by the statement just run.

        Some drivers (sqlite3 among them) report the connection's last inserted
        row id after any statement, so an id equal to the previous one is stale.
        """
        if not lastrowid or lastrowid == self._last_generated_id:
            return False
        self._last_generated_id = lastrowid
        return True

    def create_statement(self) -> DBAPIStatement:
        return DBAPIStatement(self)

    def prepare_statement(self, sql: str, generated_keys: Any = None) -> DBAPIPreparedStatement:
        return DBAPIPreparedStatement(self, sql)

    def prepare_call(self, sql: str) -> DBAPICallableStatement:
        return DBAPICallableStatement(self, sql)

    def commit(self) -> None:
        self.raw_connection.commit()

    def rollback(self) -> None:
        self.raw_connection.rollback()

    def close(self) -> None:
        if self._closed:
            return
        self._connection.close()
        self._closed = True

    def is_closed(self) -> bool:
        return self._closed

    def __str__(self) -> str:
        return f"{type(self._connection).__module__}.{type(self._connection).__name__}"

    def __enter__(self) -> DBAPIConnection:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def dbapi_connector(connect: Callable[..., Any]) -> Callable[..., DBAPIConnection]:
    """Turn a DB-API ``connect`` function into one returning :class:`DBAPIConnection`."""

    def connector(*args: Any, **kwargs: Any) -> DBAPIConnection:
        connection = DBAPIConnection(connect(*args, **kwargs))
        logger.debug("Opened DB-API connection %s", connection)
        return connection

    return connector
