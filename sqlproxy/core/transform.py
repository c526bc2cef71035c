"""Query rewriting performed before query text reaches the driver."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlproxy.core.execution import StatementType
from sqlproxy.exceptions import QueryTransformationError
from sqlproxy.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlproxy.protocols import QueryTransformer

__all__ = (
    "QUERY_ARGUMENT",
    "TransformInfo",
    "find_query_argument",
    "noop_transformer",
    "replace_query_argument",
    "transform_query",
)

logger = get_logger("core.transform")

QUERY_ARGUMENT: Final = "sql"


@dataclass(frozen=True, slots=True)
class TransformInfo:
    """Context handed to a query transformer.

    Attributes:
        statement_type: Kind of statement the query is destined for.
        data_source_name: Logical name of the proxied data source.
        query: The query text as supplied by the caller.
        is_batch: True when the query is being added to a plain statement batch.
        batch_count: Number of queries already queued in that batch.
    """

    statement_type: StatementType
    data_source_name: "Optional[str]"
    query: str
    is_batch: bool = False
    batch_count: int = 0


def noop_transformer(transform_info: TransformInfo) -> str:
    return transform_info.query


def transform_query(transformer: "QueryTransformer", transform_info: TransformInfo) -> str:
    """Run the transformer and return the text to send to the driver.

    Exceptions raised by the transformer propagate unchanged. The returned text
    is used verbatim.

    Raises:
        QueryTransformationError: The transformer returned ``None``.
    """
    transformed = transformer(transform_info)
    if transformed is None:
        msg = f"Query transformer {transformer!r} returned None for query: {transform_info.query}"
        raise QueryTransformationError(msg)
    if transformed != transform_info.query:
        logger.debug("Transformed %s query: %s -> %s", transform_info.statement_type, transform_info.query, transformed)
    return transformed


def find_query_argument(args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> "Optional[str]":
    """Query text of a call, given as the first positional argument or as ``sql=``."""
    if args:
        return args[0] if isinstance(args[0], str) else None
    query = kwargs.get(QUERY_ARGUMENT)
    return query if isinstance(query, str) else None


def replace_query_argument(
    args: "tuple[Any, ...]", kwargs: "dict[str, Any]", query: str
) -> "tuple[tuple[Any, ...], dict[str, Any]]":
    """Put ``query`` back where :func:`find_query_argument` found the original."""
    if args:
        return (query, *args[1:]), kwargs
    return args, {**kwargs, QUERY_ARGUMENT: query}
