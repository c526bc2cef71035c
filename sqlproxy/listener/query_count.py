"""Per data source query statistics.

:class:`QueryCountListener` counts executions, outcomes, elapsed time, and
query kinds into a :class:`QueryCountHolder`. Query kinds are detected with
sqlglot; text sqlglot cannot parse counts as :attr:`QueryType.OTHER`.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from sqlproxy._serialization import encode_json
from sqlproxy.core.execution import StatementType
from sqlproxy.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlproxy.core.execution import ExecutionInfo

__all__ = (
    "DefaultQueryCountLogFormatter",
    "QueryCount",
    "QueryCountHolder",
    "QueryCountListener",
    "QueryType",
    "default_query_count_holder",
    "get_query_type",
    "log_query_counts",
)

logger = get_logger("listener.query_count")


class QueryType(Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    OTHER = "other"


@lru_cache(maxsize=512)
def get_query_type(query: str, dialect: "Optional[str]" = None) -> QueryType:
    """Classify a query by its top-level statement."""
    try:
        expression = sqlglot.parse_one(query, read=dialect)
    except (ParseError, TokenError):
        logger.debug("Could not classify query: %s", query)
        return QueryType.OTHER
    if isinstance(expression, exp.Query):
        return QueryType.SELECT
    if isinstance(expression, exp.Insert):
        return QueryType.INSERT
    if isinstance(expression, exp.Update):
        return QueryType.UPDATE
    if isinstance(expression, exp.Delete):
        return QueryType.DELETE
    return QueryType.OTHER


@dataclass(slots=True)
class QueryCount:
    """Counters for one data source. ``time`` is in milliseconds."""

    select: int = 0
    insert: int = 0
    update: int = 0
    delete: int = 0
    other: int = 0
    statement: int = 0
    prepared: int = 0
    callable: int = 0
    total: int = 0
    success: int = 0
    failure: int = 0
    time: int = 0

    def increment(self, query_type: QueryType) -> None:
        setattr(self, query_type.value, getattr(self, query_type.value) + 1)

    def increment_statement_type(self, statement_type: StatementType) -> None:
        setattr(self, statement_type.value, getattr(self, statement_type.value) + 1)

    def add(self, other: "QueryCount") -> None:
        for name in self.__slots__:
            setattr(self, name, getattr(self, name) + getattr(other, name))


class QueryCountHolder:
    """Thread-safe store of :class:`QueryCount` keyed by data source name."""

    __slots__ = ("_counts", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, QueryCount] = {}

    def record(self, execution_info: "ExecutionInfo", query_types: "list[QueryType]") -> None:
        name = execution_info.data_source_name or ""
        with self._lock:
            count = self._counts.setdefault(name, QueryCount())
            count.time += execution_info.elapsed_ms
            if execution_info.success:
                count.success += 1
            else:
                count.failure += 1
            count.increment_statement_type(execution_info.statement_type)
            for query_type in query_types:
                count.increment(query_type)
                count.total += 1

    def get(self, data_source_name: "Optional[str]") -> QueryCount:
        """A copy of the counters of one data source."""
        with self._lock:
            count = self._counts.get(data_source_name or "")
            snapshot = QueryCount()
            if count is not None:
                snapshot.add(count)
            return snapshot

    def get_grand_total(self) -> QueryCount:
        with self._lock:
            grand_total = QueryCount()
            for count in self._counts.values():
                grand_total.add(count)
            return grand_total

    @property
    def data_source_names(self) -> "list[str]":
        with self._lock:
            return list(self._counts)

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()


default_query_count_holder = QueryCountHolder()


class QueryCountListener:
    """Counts executions into a :class:`QueryCountHolder`.

    Args:
        holder: Destination, the module level holder by default.
        dialect: sqlglot dialect used to classify queries.
    """

    __slots__ = ("_dialect", "_holder")

    def __init__(self, holder: "Optional[QueryCountHolder]" = None, dialect: "Optional[str]" = None) -> None:
        self._holder = holder if holder is not None else default_query_count_holder
        self._dialect = dialect

    @property
    def holder(self) -> QueryCountHolder:
        return self._holder

    def before_query(self, execution_info: "ExecutionInfo") -> None:
        return

    def after_query(self, execution_info: "ExecutionInfo") -> None:
        query_types = [get_query_type(query.query, self._dialect) for query in execution_info.queries]
        self._holder.record(execution_info, query_types)


class DefaultQueryCountLogFormatter:
    __slots__ = ()

    def get_log_message(self, data_source_name: "Optional[str]", query_count: QueryCount) -> str:
        return (
            f'Name:"{data_source_name or ""}", Time:{query_count.time}, Total:{query_count.total}, '
            f"Success:{query_count.success}, Failure:{query_count.failure}, Select:{query_count.select}, "
            f"Insert:{query_count.insert}, Update:{query_count.update}, Delete:{query_count.delete}, "
            f"Other:{query_count.other}"
        )

    def get_log_message_as_json(self, data_source_name: "Optional[str]", query_count: QueryCount) -> str:
        return (
            f'{{"name":{encode_json(data_source_name)}, "time":{query_count.time}, "total":{query_count.total}, '
            f'"success":{query_count.success}, "failure":{query_count.failure}, "select":{query_count.select}, '
            f'"insert":{query_count.insert}, "update":{query_count.update}, "delete":{query_count.delete}, '
            f'"other":{query_count.other}}}'
        )


def log_query_counts(
    holder: "Optional[QueryCountHolder]" = None,
    *,
    target_logger: "Optional[logging.Logger]" = None,
    level: int = logging.INFO,
    write_as_json: bool = False,
    formatter: "Optional[DefaultQueryCountLogFormatter]" = None,
) -> None:
    """Write one line per data source with its current counters."""
    holder = holder if holder is not None else default_query_count_holder
    target_logger = target_logger or get_logger("query_count")
    formatter = formatter or DefaultQueryCountLogFormatter()
    for name in holder.data_source_names:
        count = holder.get(name)
        if write_as_json:
            message = formatter.get_log_message_as_json(name or None, count)
        else:
            message = formatter.get_log_message(name or None, count)
        target_logger.log(level, message)
