from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlproxy.core.execution import ExecutionInfo
    from sqlproxy.protocols import QueryExecutionListener

__all__ = ("ChainListener", "NoOpQueryExecutionListener")


class NoOpQueryExecutionListener:
    """Listener that ignores every notification."""

    __slots__ = ()

    def before_query(self, execution_info: "ExecutionInfo") -> None:
        return

    def after_query(self, execution_info: "ExecutionInfo") -> None:
        return


class ChainListener:
    """Dispatches notifications to several listeners in registration order.

    A listener raising stops the chain; the exception reaches the caller.
    """

    __slots__ = ("_listeners",)

    def __init__(self, listeners: "Iterable[QueryExecutionListener]" = ()) -> None:
        self._listeners: tuple[QueryExecutionListener, ...] = tuple(listeners)

    @property
    def listeners(self) -> "tuple[QueryExecutionListener, ...]":
        return self._listeners

    def before_query(self, execution_info: "ExecutionInfo") -> None:
        for listener in self._listeners:
            listener.before_query(execution_info)

    def after_query(self, execution_info: "ExecutionInfo") -> None:
        for listener in self._listeners:
            listener.after_query(execution_info)

    def __len__(self) -> int:
        return len(self._listeners)
