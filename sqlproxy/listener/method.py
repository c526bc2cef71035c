"""Method-level listeners invoked around every explicit proxy call."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from time import perf_counter
from typing import TYPE_CHECKING, Any, Optional

from sqlproxy.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlproxy.core.connection import ConnectionInfo
    from sqlproxy.protocols import MethodExecutionListener

__all__ = ("MethodExecutionContext", "TracingMethodListener", "invoke_with_method_listeners")


@dataclass(slots=True)
class MethodExecutionContext:
    """One call made on a proxy, passed to method listeners."""

    target: Any
    method: str
    args: "tuple[Any, ...]"
    kwargs: "dict[str, Any]" = field(default_factory=dict)
    connection_info: "Optional[ConnectionInfo]" = None
    result: Any = None
    thrown: "Optional[BaseException]" = None
    elapsed_time: float = 0.0


def invoke_with_method_listeners(
    listeners: "Sequence[MethodExecutionListener]",
    target: Any,
    connection_info: "Optional[ConnectionInfo]",
    method: str,
    args: "tuple[Any, ...]",
    kwargs: "dict[str, Any]",
    call: "Callable[[], Any]",
) -> Any:
    """Run ``call`` surrounded by method listener notifications.

    Without listeners ``call`` runs directly. A raised exception is recorded on
    the context and re-raised after ``after_method`` ran.
    """
    if not listeners:
        return call()

    context = MethodExecutionContext(
        target=target, method=method, args=args, kwargs=kwargs, connection_info=connection_info
    )
    for listener in listeners:
        listener.before_method(context)

    started = perf_counter()
    try:
        context.result = call()
    except Exception as exc:
        context.thrown = exc
        raise
    finally:
        context.elapsed_time = perf_counter() - started
        for listener in listeners:
            listener.after_method(context)
    return context.result


class TracingMethodListener:
    """Logs every proxied method call.

    Args:
        logger: Logger to write to, ``sqlproxy.trace`` by default.
        level: Level used for successful calls; failures log at WARNING.
    """

    __slots__ = ("_level", "_logger")

    def __init__(self, logger: "Optional[logging.Logger]" = None, level: int = logging.DEBUG) -> None:
        self._logger = logger or get_logger("trace")
        self._level = level

    def before_method(self, context: MethodExecutionContext) -> None:
        return

    def after_method(self, context: MethodExecutionContext) -> None:
        connection_id = context.connection_info.connection_id if context.connection_info else None
        target_name = type(context.target).__name__
        if context.thrown is not None:
            self._logger.warning(
                "[conn=%s] %s.%s failed after %.6fs: %r",
                connection_id,
                target_name,
                context.method,
                context.elapsed_time,
                context.thrown,
            )
            return
        self._logger.log(
            self._level,
            "[conn=%s] %s.%s args=%r took %.6fs",
            connection_id,
            target_name,
            context.method,
            context.args,
            context.elapsed_time,
        )
