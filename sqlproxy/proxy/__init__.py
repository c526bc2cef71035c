"""Proxies for connections, statements and result sets."""

from sqlproxy.proxy.connection import ConnectionInterceptor, ConnectionProxy
from sqlproxy.proxy.factory import DefaultProxyFactory, ProxyConnectionFactory, ProxyFactory, wrap_connection
from sqlproxy.proxy.result_set import ResultSetInterceptor, ResultSetProxy
from sqlproxy.proxy.statement import (
    CallableStatementProxy,
    PreparedStatementProxy,
    StatementInterceptor,
    StatementProxy,
)

__all__ = (
    "CallableStatementProxy",
    "ConnectionInterceptor",
    "ConnectionProxy",
    "DefaultProxyFactory",
    "PreparedStatementProxy",
    "ProxyConnectionFactory",
    "ProxyFactory",
    "ResultSetInterceptor",
    "ResultSetProxy",
    "StatementInterceptor",
    "StatementProxy",
    "wrap_connection",
)
