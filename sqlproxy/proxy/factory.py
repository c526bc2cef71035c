"""Creation of proxies and wrapping of connections."""

from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, runtime_checkable

from sqlproxy.core.connection import ConnectionInfo
from sqlproxy.core.execution import StatementType
from sqlproxy.proxy.connection import ConnectionInterceptor, ConnectionProxy
from sqlproxy.proxy.result_set import ResultSetInterceptor, ResultSetProxy
from sqlproxy.proxy.statement import (
    CallableStatementProxy,
    PreparedStatementProxy,
    StatementInterceptor,
    StatementProxy,
)
from sqlproxy.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlproxy.config import ProxyConfig

__all__ = ("DefaultProxyFactory", "ProxyConnectionFactory", "ProxyFactory", "wrap_connection")

logger = get_logger("proxy.factory")


@runtime_checkable
class ProxyFactory(Protocol):
    """Creates the proxy for each kind of driver object."""

    def create_connection(self, connection: Any, connection_info: ConnectionInfo, config: "ProxyConfig") -> Any: ...

    def create_statement(
        self, statement: Any, connection_info: ConnectionInfo, proxy_connection: Any, config: "ProxyConfig"
    ) -> Any: ...

    def create_prepared_statement(
        self,
        statement: Any,
        query: str,
        connection_info: ConnectionInfo,
        proxy_connection: Any,
        config: "ProxyConfig",
        generate_key: bool = False,
    ) -> Any: ...

    def create_callable_statement(
        self, statement: Any, query: str, connection_info: ConnectionInfo, proxy_connection: Any, config: "ProxyConfig"
    ) -> Any: ...

    def create_result_set(
        self, result_set: Any, connection_info: ConnectionInfo, config: "ProxyConfig", proxy_statement: Any = None
    ) -> Any: ...

    def create_generated_keys(
        self, result_set: Any, connection_info: ConnectionInfo, config: "ProxyConfig", proxy_statement: Any = None
    ) -> Any: ...


class DefaultProxyFactory:
    """Builds the proxies defined in :mod:`sqlproxy.proxy`."""

    __slots__ = ()

    def create_connection(
        self, connection: Any, connection_info: ConnectionInfo, config: "ProxyConfig"
    ) -> ConnectionProxy:
        return ConnectionProxy(connection, ConnectionInterceptor(connection, connection_info, config))

    def create_statement(
        self, statement: Any, connection_info: ConnectionInfo, proxy_connection: Any, config: "ProxyConfig"
    ) -> StatementProxy:
        interceptor = StatementInterceptor(
            statement, StatementType.STATEMENT, connection_info, config, proxy_connection=proxy_connection
        )
        return StatementProxy(statement, interceptor)

    def create_prepared_statement(
        self,
        statement: Any,
        query: str,
        connection_info: ConnectionInfo,
        proxy_connection: Any,
        config: "ProxyConfig",
        generate_key: bool = False,
    ) -> PreparedStatementProxy:
        interceptor = StatementInterceptor(
            statement,
            StatementType.PREPARED,
            connection_info,
            config,
            proxy_connection=proxy_connection,
            query=query,
            generate_key=generate_key,
        )
        return PreparedStatementProxy(statement, interceptor)

    def create_callable_statement(
        self, statement: Any, query: str, connection_info: ConnectionInfo, proxy_connection: Any, config: "ProxyConfig"
    ) -> CallableStatementProxy:
        interceptor = StatementInterceptor(
            statement, StatementType.CALLABLE, connection_info, config, proxy_connection=proxy_connection, query=query
        )
        return CallableStatementProxy(statement, interceptor)

    def create_result_set(
        self, result_set: Any, connection_info: ConnectionInfo, config: "ProxyConfig", proxy_statement: Any = None
    ) -> ResultSetProxy:
        return ResultSetProxy(result_set, ResultSetInterceptor(result_set, connection_info, config, proxy_statement))

    def create_generated_keys(
        self, result_set: Any, connection_info: ConnectionInfo, config: "ProxyConfig", proxy_statement: Any = None
    ) -> ResultSetProxy:
        return self.create_result_set(result_set, connection_info, config, proxy_statement)


def wrap_connection(connection: Any, config: "ProxyConfig", isolation_level: "Optional[str]" = None) -> Any:
    """Wrap an already opened driver connection.

    A connection id is drawn from the configured id manager.
    """
    connection_id = config.connection_id_manager.get_id(connection)
    connection_info = ConnectionInfo(
        connection_id=connection_id, data_source_name=config.data_source_name, isolation_level=isolation_level
    )
    logger.debug("Wrapping connection %s for data source %r", connection_id, config.data_source_name)
    return config.factory.create_connection(connection, connection_info, config)


class ProxyConnectionFactory:
    """Callable opening driver connections and returning them proxied.

    Args:
        connect: Callable opening a driver connection.
        config: Configuration applied to every connection opened.
    """

    __slots__ = ("_config", "_connect")

    def __init__(self, connect: "Callable[..., Any]", config: "ProxyConfig") -> None:
        self._connect = connect
        self._config = config

    @property
    def config(self) -> "ProxyConfig":
        return self._config

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return wrap_connection(self._connect(*args, **kwargs), self._config)
