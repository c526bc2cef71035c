"""Query execution and method listeners."""

from sqlproxy.listener._chain import ChainListener, NoOpQueryExecutionListener
from sqlproxy.listener.formatting import DefaultQueryLogEntryCreator, OutputParameterLogEntryCreator
from sqlproxy.listener.logging import LoggingQueryListener
from sqlproxy.listener.method import MethodExecutionContext, TracingMethodListener, invoke_with_method_listeners
from sqlproxy.listener.query_count import (
    DefaultQueryCountLogFormatter,
    QueryCount,
    QueryCountHolder,
    QueryCountListener,
    QueryType,
    get_query_type,
    log_query_counts,
)

__all__ = (
    "ChainListener",
    "DefaultQueryCountLogFormatter",
    "DefaultQueryLogEntryCreator",
    "LoggingQueryListener",
    "MethodExecutionContext",
    "NoOpQueryExecutionListener",
    "OutputParameterLogEntryCreator",
    "QueryCount",
    "QueryCountHolder",
    "QueryCountListener",
    "QueryType",
    "TracingMethodListener",
    "get_query_type",
    "invoke_with_method_listeners",
    "log_query_counts",
)
