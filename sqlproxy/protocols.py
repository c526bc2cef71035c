"""Runtime-checkable protocols for proxied driver objects and collaborators.

The delegate protocols describe the synchronous call surface a driver object
must offer to be wrapped. Proxies only rely on the methods listed here; any
other attribute of the delegate is reached through pass-through access.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlproxy.core.execution import ExecutionInfo
    from sqlproxy.core.transform import TransformInfo
    from sqlproxy.listener.method import MethodExecutionContext

__all__ = (
    "CallableStatementProtocol",
    "ConnectionProtocol",
    "MethodExecutionListener",
    "PreparedStatementProtocol",
    "QueryExecutionListener",
    "QueryTransformer",
    "ResultSetProtocol",
    "StatementProtocol",
)


@runtime_checkable
class ResultSetProtocol(Protocol):
    """Protocol for result sets, including generated-keys result sets."""

    def next(self) -> bool:
        """Advance to the next row."""
        ...

    def get_object(self, column: Any) -> Any:
        """Value of a column of the current row."""
        ...

    def close(self) -> None:
        """Release the result set."""
        ...

    def is_closed(self) -> bool:
        """Whether the result set was closed."""
        ...


@runtime_checkable
class StatementProtocol(Protocol):
    """Protocol for plain statements executing literal query text."""

    def execute(self, sql: str, *args: Any, **kwargs: Any) -> bool:
        """Execute a query; True when it produced a result set."""
        ...

    def execute_query(self, sql: str) -> Any:
        """Execute a query returning a result set."""
        ...

    def execute_update(self, sql: str, *args: Any, **kwargs: Any) -> int:
        """Execute a data modification; returns the affected row count."""
        ...

    def add_batch(self, sql: str) -> None:
        """Queue a query for batch execution."""
        ...

    def clear_batch(self) -> None:
        """Drop queued batch queries."""
        ...

    def execute_batch(self) -> "list[int]":
        """Execute the queued batch."""
        ...

    def get_result_set(self) -> Any:
        """Result set produced by the last execution."""
        ...

    def get_generated_keys(self) -> Any:
        """Keys generated by the last execution."""
        ...

    def close(self) -> None:
        """Release the statement."""
        ...


@runtime_checkable
class PreparedStatementProtocol(Protocol):
    """Protocol for statements with bound parameters."""

    def execute(self) -> bool:
        """Execute the prepared query."""
        ...

    def execute_query(self) -> Any:
        """Execute the prepared query returning a result set."""
        ...

    def execute_update(self) -> int:
        """Execute the prepared data modification."""
        ...

    def add_batch(self) -> None:
        """Snapshot the current bindings into the batch."""
        ...

    def clear_batch(self) -> None:
        """Drop batched bindings."""
        ...

    def execute_batch(self) -> "list[int]":
        """Execute the query once per batched binding set."""
        ...

    def clear_parameters(self) -> None:
        """Drop current bindings."""
        ...

    def set_object(self, key: Any, value: Any, *args: Any) -> None:
        """Bind a value."""
        ...

    def get_generated_keys(self) -> Any:
        """Keys generated by the last execution."""
        ...

    def close(self) -> None:
        """Release the statement."""
        ...


@runtime_checkable
class CallableStatementProtocol(PreparedStatementProtocol, Protocol):
    """Protocol for stored procedure calls with output parameters."""

    def register_out_parameter(self, key: Any, sql_type: Any, *args: Any) -> None:
        """Declare an output parameter."""
        ...


@runtime_checkable
class ConnectionProtocol(Protocol):
    """Protocol for connections creating statements."""

    def create_statement(self, *args: Any, **kwargs: Any) -> Any:
        """Create a plain statement."""
        ...

    def prepare_statement(self, sql: str, *args: Any, **kwargs: Any) -> Any:
        """Create a prepared statement."""
        ...

    def prepare_call(self, sql: str, *args: Any, **kwargs: Any) -> Any:
        """Create a callable statement."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self, *args: Any) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


@runtime_checkable
class QueryTransformer(Protocol):
    """Rewrites query text before it reaches the driver."""

    def __call__(self, transform_info: "TransformInfo") -> str: ...


@runtime_checkable
class QueryExecutionListener(Protocol):
    """Notified immediately before and after every query execution."""

    def before_query(self, execution_info: "ExecutionInfo") -> None: ...

    def after_query(self, execution_info: "ExecutionInfo") -> None: ...


@runtime_checkable
class MethodExecutionListener(Protocol):
    """Notified around every explicit call on a proxy."""

    def before_method(self, context: "MethodExecutionContext") -> None: ...

    def after_method(self, context: "MethodExecutionContext") -> None: ...
