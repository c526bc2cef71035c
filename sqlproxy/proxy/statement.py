"""Statement proxies and the interceptor recording their executions.

One :class:`StatementInterceptor` is created per statement proxy. It owns the
parameter registry, the queued plain-statement batch and the generated-keys
cache of that proxy. Statement proxies are not meant to be shared between
threads, mirroring the driver objects they wrap, so this state is not locked.
"""

from time import perf_counter
from typing import TYPE_CHECKING, Any, Optional

import wrapt

from sqlproxy.core.classifier import (
    GET_GENERATED_KEYS_METHOD,
    PARAMETER_METHODS,
    QUERY_EXECUTION_METHODS,
    CallCategory,
    can_retrieve_generated_keys,
    classify_statement_call,
    is_batch_execution,
    returns_result_set,
)
from sqlproxy.core.execution import ExecutionInfo, QueryInfo, StatementType
from sqlproxy.core.generated_keys import GeneratedKeysCache, requests_generated_keys
from sqlproxy.core.parameters import ParameterKey, ParameterRegistry, ParameterSetOperation
from sqlproxy.core.transform import TransformInfo, find_query_argument, replace_query_argument, transform_query
from sqlproxy.listener.method import invoke_with_method_listeners
from sqlproxy.proxy._common import ProxyObjectMixin, describe, handle_wrapper_call, intercepted
from sqlproxy.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlproxy.config import ProxyConfig
    from sqlproxy.core.connection import ConnectionInfo

__all__ = ("CallableStatementProxy", "PreparedStatementProxy", "StatementInterceptor", "StatementProxy")

logger = get_logger("proxy.statement")


class StatementInterceptor:
    """Routes calls made on a statement proxy and records query executions.

    Args:
        statement: The driver statement being wrapped.
        statement_type: Kind of the wrapped statement.
        connection_info: Record of the connection that created the statement.
        config: Shared proxy configuration.
        proxy_connection: The connection proxy returned by ``get_connection``.
        query: Query text of a prepared or callable statement.
        generate_key: Whether generated keys were requested when the statement was prepared.
    """

    __slots__ = (
        "_batch_queries",
        "_generated_keys",
        "_registry",
        "config",
        "connection_info",
        "generate_key",
        "proxy_connection",
        "query",
        "statement",
        "statement_type",
    )

    def __init__(
        self,
        statement: Any,
        statement_type: StatementType,
        connection_info: "ConnectionInfo",
        config: "ProxyConfig",
        proxy_connection: Any = None,
        query: "Optional[str]" = None,
        generate_key: bool = False,
    ) -> None:
        self.statement = statement
        self.statement_type = statement_type
        self.connection_info = connection_info
        self.config = config
        self.proxy_connection = proxy_connection
        self.query = query
        self.generate_key = generate_key
        self._registry = ParameterRegistry()
        self._batch_queries: list[str] = []
        self._generated_keys = GeneratedKeysCache()

    @property
    def registry(self) -> ParameterRegistry:
        return self._registry

    @property
    def batch_queries(self) -> "tuple[str, ...]":
        return tuple(self._batch_queries)

    @property
    def generated_keys(self) -> GeneratedKeysCache:
        return self._generated_keys

    def invoke(self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        """Handle one call made on ``proxy``.

        Args:
            proxy: The statement proxy the call was made on.
            method: Name of the invoked method.
            args: Positional arguments as supplied by the caller.
            kwargs: Keyword arguments as supplied by the caller.

        Returns:
            The value to hand back to the caller.
        """
        return invoke_with_method_listeners(
            self.config.method_listeners,
            self.statement,
            self.connection_info,
            method,
            args,
            kwargs,
            lambda: self._dispatch(proxy, method, args, kwargs),
        )

    def _delegate(self, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        return getattr(self.statement, method)(*args, **kwargs)

    def _dispatch(self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> Any:
        category = classify_statement_call(method, self.statement_type)

        if category is CallCategory.IDENTITY:
            if method == "__str__":
                return describe(self.statement)
            if method == "get_data_source_name":
                return self.connection_info.data_source_name
            return self.statement

        if category is CallCategory.WRAPPER:
            return handle_wrapper_call(method, self.statement, args)

        if category is CallCategory.CONNECTION:
            if self.proxy_connection is not None:
                return self.proxy_connection
            return self._delegate(method, args, kwargs)

        if category is CallCategory.STATEMENT_BATCH:
            if method == "add_batch":
                query = find_query_argument(args, kwargs)
                if query is not None:
                    query = self._transform(query, is_batch=True, batch_count=len(self._batch_queries))
                    args, kwargs = replace_query_argument(args, kwargs, query)
                    self._batch_queries.append(query)
            else:
                self._batch_queries.clear()
            return self._delegate(method, args, kwargs)

        if category is CallCategory.PARAMETER:
            if method == "clear_parameters":
                self._registry.clear_current()
            elif args and isinstance(args[0], (int, str)) and not isinstance(args[0], bool):
                self._registry.bind(ParameterKey(args[0]), ParameterSetOperation(method, args))
            return self._delegate(method, args, kwargs)

        if category is CallCategory.PARAMETER_BATCH:
            if method == "add_batch":
                self._registry.snapshot_to_batch()
            else:
                self._registry.clear_batch()
            return self._delegate(method, args, kwargs)

        if category in {CallCategory.EXECUTION, CallCategory.RESULT_RETRIEVAL}:
            return self._execute(proxy, method, args, kwargs, notify=category is CallCategory.EXECUTION)

        if method == "close":
            try:
                return self._delegate(method, args, kwargs)
            finally:
                self._generated_keys.invalidate()

        return self._delegate(method, args, kwargs)

    def _transform(self, query: str, *, is_batch: bool = False, batch_count: int = 0) -> str:
        transform_info = TransformInfo(
            statement_type=StatementType.STATEMENT,
            data_source_name=self.connection_info.data_source_name,
            query=query,
            is_batch=is_batch,
            batch_count=batch_count,
        )
        return transform_query(self.config.query_transformer, transform_info)

    def _collect_queries(
        self, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]"
    ) -> "tuple[tuple[QueryInfo, ...], int, tuple[Any, ...], dict[str, Any]]":
        """Build the query records of an execution.

        Returns:
            The query records, the batch size, and the positional and keyword
            arguments to delegate with.
        """
        is_plain = self.statement_type is StatementType.STATEMENT
        if is_batch_execution(method):
            if is_plain:
                queries = tuple(QueryInfo(query) for query in self._batch_queries)
                self._batch_queries.clear()
                return queries, len(queries), args, kwargs
            parameter_sets = self._registry.collect_for_batch_execution()
            return (QueryInfo(self.query or "", parameter_sets),), len(parameter_sets), args, kwargs

        if method in QUERY_EXECUTION_METHODS:
            if is_plain:
                query = find_query_argument(args, kwargs)
                if query is None:
                    return (), 0, args, kwargs
                query = self._transform(query)
                args, kwargs = replace_query_argument(args, kwargs, query)
                return (QueryInfo(query),), 0, args, kwargs
            parameters = self._registry.collect_for_single_execution()
            return (QueryInfo(self.query or "", (parameters,)),), 0, args, kwargs

        return (), 0, args, kwargs

    def _should_retrieve_generated_keys(
        self, is_batch: bool, args: "tuple[Any, ...]", kwargs: "dict[str, Any]"
    ) -> bool:
        is_plain = self.statement_type is StatementType.STATEMENT
        if is_batch:
            if is_plain:
                return self.config.retrieve_generated_keys_for_batch_statement
            return self.generate_key and self.config.retrieve_generated_keys_for_batch_prepared_or_callable
        if is_plain:
            return requests_generated_keys(args, kwargs)
        return self.generate_key

    def _wrap_generated_keys(self, proxy: Any, generated_keys: Any) -> Any:
        if self.config.generated_keys_proxy_enabled and generated_keys is not None:
            return self.config.factory.create_generated_keys(generated_keys, self.connection_info, self.config, proxy)
        return generated_keys

    def _execute(
        self, proxy: Any, method: str, args: "tuple[Any, ...]", kwargs: "dict[str, Any]", *, notify: bool
    ) -> Any:
        config = self.config
        is_batch = is_batch_execution(method)
        is_get_generated_keys = method == GET_GENERATED_KEYS_METHOD

        queries, batch_size, args, kwargs = self._collect_queries(method, args, kwargs)

        if is_get_generated_keys:
            cached = self._generated_keys.get()
            if cached is not None:
                return cached

        execution_info = ExecutionInfo(
            data_source_name=self.connection_info.data_source_name,
            connection_id=self.connection_info.connection_id,
            statement=self.statement,
            statement_type=self.statement_type,
            method=method,
            args=args,
            kwargs=dict(kwargs),
            queries=queries,
            is_batch=is_batch,
            batch_size=batch_size,
        )

        listener = config.query_listener
        if notify:
            listener.before_query(execution_info)

        started = perf_counter()
        try:
            result = self._delegate(method, args, kwargs)
            elapsed = perf_counter() - started

            if is_get_generated_keys:
                result = self._wrap_generated_keys(proxy, result)
            elif config.result_set_proxy_enabled and returns_result_set(method) and result is not None:
                result = config.factory.create_result_set(result, self.connection_info, config, proxy)

            if config.auto_retrieve_generated_keys:
                if is_get_generated_keys:
                    self._generated_keys.put(result)
                elif can_retrieve_generated_keys(method) and self._should_retrieve_generated_keys(
                    is_batch, args, kwargs
                ):
                    logger.debug("Retrieving generated keys after %s", method)
                    generated_keys = self._wrap_generated_keys(proxy, self.statement.get_generated_keys())
                    self._generated_keys.put(generated_keys)

            execution_info.result = result
            execution_info.generated_keys = self._generated_keys.get()
            execution_info.elapsed_time = elapsed
            execution_info.success = True
            return result
        except Exception as exc:
            execution_info.elapsed_time = perf_counter() - started
            execution_info.throwable = exc
            execution_info.success = False
            raise
        finally:
            if notify:
                listener.after_query(execution_info)
            if not is_get_generated_keys and config.auto_close_generated_keys:
                self._generated_keys.close()


class StatementProxy(ProxyObjectMixin, wrapt.ObjectProxy):
    """Proxy for a plain statement executing literal query text."""

    def __init__(self, statement: Any, interceptor: StatementInterceptor) -> None:
        wrapt.ObjectProxy.__init__(self, statement)
        self._self_interceptor = interceptor

    execute = intercepted("execute")
    execute_query = intercepted("execute_query")
    execute_update = intercepted("execute_update")
    execute_large_update = intercepted("execute_large_update")
    add_batch = intercepted("add_batch")
    clear_batch = intercepted("clear_batch")
    execute_batch = intercepted("execute_batch")
    execute_large_batch = intercepted("execute_large_batch")
    get_result_set = intercepted("get_result_set")
    get_generated_keys = intercepted("get_generated_keys")
    get_connection = intercepted("get_connection")
    close = intercepted("close")


class PreparedStatementProxy(StatementProxy):
    """Proxy for a prepared statement; binding calls are recorded."""

    clear_parameters = intercepted("clear_parameters")


for _method in sorted(PARAMETER_METHODS - {"clear_parameters", "register_out_parameter"}):
    setattr(PreparedStatementProxy, _method, intercepted(_method))
del _method


class CallableStatementProxy(PreparedStatementProxy):
    """Proxy for a stored procedure call; output parameter registrations are recorded."""

    register_out_parameter = intercepted("register_out_parameter")
