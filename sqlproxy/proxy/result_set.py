"""Result set proxy, also used for generated-keys result sets."""

from typing import TYPE_CHECKING, Any

import wrapt

from sqlproxy.core.classifier import CallCategory, classify_result_set_call
from sqlproxy.listener.method import invoke_with_method_listeners
from sqlproxy.proxy._common import ProxyObjectMixin, describe, handle_wrapper_call, intercepted

if TYPE_CHECKING:
    from sqlproxy.config import ProxyConfig
    from sqlproxy.core.connection import ConnectionInfo

__all__ = ("ResultSetInterceptor", "ResultSetProxy")


class ResultSetInterceptor:
    __slots__ = ("config", "connection_info", "proxy_statement", "result_set")

    def __init__(
        self, result_set: Any, connection_info: "ConnectionInfo", config: "ProxyConfig", proxy_statement: Any = None
    ) -> None:
        self.result_set = result_set
        self.connection_info = connection_info
        self.config = config
        self.proxy_statement = proxy_statement

    def invoke(self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        return invoke_with_method_listeners(
            self.config.method_listeners,
            self.result_set,
            self.connection_info,
            method,
            args,
            kwargs,
            lambda: self._dispatch(method, args, kwargs),
        )

    def _dispatch(self, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        category = classify_result_set_call(method)
        if category is CallCategory.IDENTITY:
            if method == "__str__":
                return describe(self.result_set)
            if method == "get_data_source_name":
                return self.connection_info.data_source_name
            return self.result_set
        if category is CallCategory.WRAPPER:
            return handle_wrapper_call(method, self.result_set, args)
        if method == "get_statement" and self.proxy_statement is not None:
            return self.proxy_statement
        return getattr(self.result_set, method)(*args, **kwargs)


class ResultSetProxy(ProxyObjectMixin, wrapt.ObjectProxy):
    """Proxy for a driver result set.

    ``get_statement`` returns the statement proxy that produced the result set;
    row access passes straight through to the driver.
    """

    def __init__(self, result_set: Any, interceptor: ResultSetInterceptor) -> None:
        wrapt.ObjectProxy.__init__(self, result_set)
        self._self_interceptor = interceptor

    get_statement = intercepted("get_statement")
    close = intercepted("close")
