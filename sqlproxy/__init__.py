"""SQLProxy: observe, measure and rewrite every call crossing a database driver boundary."""

from sqlproxy import adapters, core, exceptions, listener, proxy
from sqlproxy.config import ProxyConfig
from sqlproxy.core import (
    RETURN_GENERATED_KEYS,
    ConnectionInfo,
    DefaultConnectionIdManager,
    ExecutionInfo,
    ParameterKey,
    ParameterSetOperation,
    QueryInfo,
    StatementType,
    TransformInfo,
    UuidConnectionIdManager,
)
from sqlproxy.listener import (
    ChainListener,
    LoggingQueryListener,
    QueryCountHolder,
    QueryCountListener,
    TracingMethodListener,
)
from sqlproxy.proxy import (
    CallableStatementProxy,
    ConnectionProxy,
    DefaultProxyFactory,
    PreparedStatementProxy,
    ProxyConnectionFactory,
    ResultSetProxy,
    StatementProxy,
    wrap_connection,
)

__all__ = (
    "RETURN_GENERATED_KEYS",
    "CallableStatementProxy",
    "ChainListener",
    "ConnectionInfo",
    "ConnectionProxy",
    "DefaultConnectionIdManager",
    "DefaultProxyFactory",
    "ExecutionInfo",
    "LoggingQueryListener",
    "ParameterKey",
    "ParameterSetOperation",
    "PreparedStatementProxy",
    "ProxyConfig",
    "ProxyConnectionFactory",
    "QueryCountHolder",
    "QueryCountListener",
    "QueryInfo",
    "ResultSetProxy",
    "StatementProxy",
    "StatementType",
    "TracingMethodListener",
    "TransformInfo",
    "UuidConnectionIdManager",
    "adapters",
    "core",
    "exceptions",
    "listener",
    "proxy",
    "wrap_connection",
)
