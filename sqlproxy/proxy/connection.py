"""Connection proxy creating statement proxies and counting lifecycle calls."""

import logging
from typing import TYPE_CHECKING, Any

import wrapt

from sqlproxy.core.classifier import CallCategory, classify_connection_call
from sqlproxy.core.execution import StatementType
from sqlproxy.core.generated_keys import requests_generated_keys
from sqlproxy.core.transform import TransformInfo, find_query_argument, replace_query_argument, transform_query
from sqlproxy.listener.method import invoke_with_method_listeners
from sqlproxy.proxy._common import ProxyObjectMixin, describe, handle_wrapper_call, intercepted
from sqlproxy.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from sqlproxy.config import ProxyConfig
    from sqlproxy.core.connection import ConnectionInfo

__all__ = ("ConnectionInterceptor", "ConnectionProxy")

logger = get_logger("proxy.connection")

_PREPARE_METHODS = {"prepare_statement": StatementType.PREPARED, "prepare_call": StatementType.CALLABLE}


class ConnectionInterceptor:
    """Routes calls made on a connection proxy.

    Query text passed to ``prepare_statement`` and ``prepare_call`` is
    transformed before it reaches the driver, and every statement the driver
    returns is wrapped in a statement proxy. Successful ``commit``,
    ``rollback`` and ``close`` calls update the shared connection record.
    """

    __slots__ = ("config", "connection", "connection_info")

    def __init__(self, connection: Any, connection_info: "ConnectionInfo", config: "ProxyConfig") -> None:
        self.connection = connection
        self.connection_info = connection_info
        self.config = config

    def invoke(self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        return invoke_with_method_listeners(
            self.config.method_listeners,
            self.connection,
            self.connection_info,
            method,
            args,
            kwargs,
            lambda: self._dispatch(proxy, method, args, kwargs),
        )

    def _dispatch(self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        result = self._perform(proxy, method, args, kwargs)
        if method == "commit":
            self.connection_info.increment_commit_count()
        elif method == "rollback":
            self.connection_info.increment_rollback_count()
        elif method == "close":
            self.connection_info.mark_closed()
            self.config.connection_id_manager.add_closed_id(self.connection_info.connection_id)
            log_with_context(
                logger,
                logging.DEBUG,
                "Connection closed",
                connection_id=self.connection_info.connection_id,
                data_source_name=self.connection_info.data_source_name,
            )
        return result

    def _perform(self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        category = classify_connection_call(method)
        if category is CallCategory.IDENTITY:
            if method == "__str__":
                return describe(self.connection)
            if method == "get_data_source_name":
                return self.connection_info.data_source_name
            return self.connection
        if category is CallCategory.WRAPPER:
            return handle_wrapper_call(method, self.connection, args)

        statement_type = _PREPARE_METHODS.get(method)
        query = find_query_argument(args, kwargs) if statement_type is not None else None
        if query is not None:
            assert statement_type is not None
            query = transform_query(
                self.config.query_transformer,
                TransformInfo(
                    statement_type=statement_type,
                    data_source_name=self.connection_info.data_source_name,
                    query=query,
                ),
            )
            args, kwargs = replace_query_argument(args, kwargs, query)

        result = getattr(self.connection, method)(*args, **kwargs)

        factory = self.config.factory
        if method == "create_statement":
            return factory.create_statement(result, self.connection_info, proxy, self.config)
        if query is None:
            return result
        if statement_type is StatementType.PREPARED:
            return factory.create_prepared_statement(
                result,
                query,
                self.connection_info,
                proxy,
                self.config,
                generate_key=requests_generated_keys(args, kwargs),
            )
        return factory.create_callable_statement(result, query, self.connection_info, proxy, self.config)


class ConnectionProxy(ProxyObjectMixin, wrapt.ObjectProxy):
    """Proxy for a driver connection."""

    def __init__(self, connection: Any, interceptor: ConnectionInterceptor) -> None:
        wrapt.ObjectProxy.__init__(self, connection)
        self._self_interceptor = interceptor

    @property
    def connection_info(self) -> "ConnectionInfo":
        return self._self_interceptor.connection_info  # type: ignore[no-any-return]

    create_statement = intercepted("create_statement")
    prepare_statement = intercepted("prepare_statement")
    prepare_call = intercepted("prepare_call")
    commit = intercepted("commit")
    rollback = intercepted("rollback")
    close = intercepted("close")
