"""Execution records handed to query execution listeners."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from sqlproxy.core.parameters import ParameterSet

__all__ = ("ExecutionInfo", "QueryInfo", "StatementType")


class StatementType(Enum):
    """Kind of statement a proxy wraps."""

    STATEMENT = "statement"
    PREPARED = "prepared"
    CALLABLE = "callable"

    @property
    def is_parameterized(self) -> bool:
        return self is not StatementType.STATEMENT

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True, slots=True)
class QueryInfo:
    """One query and the parameter sets it was executed with.

    ``parameters_list`` holds one parameter set per batch entry, a single set
    for a non-batched prepared execution, and nothing for plain statements.
    """

    query: str
    parameters_list: "tuple[ParameterSet, ...]" = ()


@dataclass(slots=True)
class ExecutionInfo:
    """Record of one call that crossed a statement proxy.

    The record is created before the delegate is invoked and completed (result,
    timing, outcome) once it returns or raises.
    """

    data_source_name: "Optional[str]"
    connection_id: "Optional[str]"
    statement: Any
    statement_type: StatementType
    method: str
    args: "tuple[Any, ...]"
    kwargs: "dict[str, Any]" = field(default_factory=dict)
    queries: "tuple[QueryInfo, ...]" = ()
    is_batch: bool = False
    batch_size: int = 0
    result: Any = None
    elapsed_time: float = 0.0
    success: bool = False
    throwable: "Optional[BaseException]" = None
    generated_keys: Any = None
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)

    @property
    def query_count(self) -> int:
        return len(self.queries)

    @property
    def elapsed_ms(self) -> int:
        """Elapsed time rounded down to whole milliseconds."""
        return int(self.elapsed_time * 1000)
