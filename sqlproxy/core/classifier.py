"""Routing of intercepted calls by method name.

Every call reaching a proxy's ``invoke`` is placed in exactly one
:class:`CallCategory`. Categories are checked in declaration order and the
first match wins; anything unrecognized is :attr:`CallCategory.PASSTHROUGH`
so driver extension methods keep working untouched.
"""

from enum import Enum, auto
from typing import Final

from sqlproxy.core.execution import StatementType

__all__ = (
    "BATCH_EXECUTION_METHODS",
    "BATCH_METHODS",
    "CONNECTION_METHODS",
    "EXECUTION_METHODS",
    "GENERATED_KEYS_METHODS",
    "GET_GENERATED_KEYS_METHOD",
    "GET_RESULT_SET_METHOD",
    "IDENTITY_METHODS",
    "PARAMETER_METHODS",
    "QUERY_EXECUTION_METHODS",
    "RESULT_RETRIEVAL_METHODS",
    "RESULT_SET_METHODS",
    "WRAPPER_METHODS",
    "CallCategory",
    "can_retrieve_generated_keys",
    "classify_connection_call",
    "classify_result_set_call",
    "classify_statement_call",
    "is_batch_execution",
    "returns_result_set",
)


class CallCategory(Enum):
    IDENTITY = auto()
    WRAPPER = auto()
    CONNECTION = auto()
    STATEMENT_BATCH = auto()
    PARAMETER = auto()
    PARAMETER_BATCH = auto()
    EXECUTION = auto()
    RESULT_RETRIEVAL = auto()
    PASSTHROUGH = auto()


IDENTITY_METHODS: Final = frozenset({"__str__", "get_data_source_name", "get_target"})
WRAPPER_METHODS: Final = frozenset({"unwrap", "is_wrapper_for"})
CONNECTION_METHODS: Final = frozenset({"get_connection"})
BATCH_METHODS: Final = frozenset({"add_batch", "clear_batch"})

PARAMETER_METHODS: Final = frozenset({
    "clear_parameters",
    "register_out_parameter",
    "set_array",
    "set_ascii_stream",
    "set_big_decimal",
    "set_binary_stream",
    "set_blob",
    "set_boolean",
    "set_byte",
    "set_bytes",
    "set_character_stream",
    "set_clob",
    "set_date",
    "set_double",
    "set_float",
    "set_int",
    "set_long",
    "set_n_character_stream",
    "set_n_clob",
    "set_n_string",
    "set_null",
    "set_object",
    "set_ref",
    "set_row_id",
    "set_short",
    "set_sqlxml",
    "set_string",
    "set_time",
    "set_timestamp",
    "set_url",
})

QUERY_EXECUTION_METHODS: Final = frozenset({"execute", "execute_query", "execute_update", "execute_large_update"})
BATCH_EXECUTION_METHODS: Final = frozenset({"execute_batch", "execute_large_batch"})
EXECUTION_METHODS: Final = QUERY_EXECUTION_METHODS | BATCH_EXECUTION_METHODS

GET_RESULT_SET_METHOD: Final = "get_result_set"
GET_GENERATED_KEYS_METHOD: Final = "get_generated_keys"
RESULT_RETRIEVAL_METHODS: Final = frozenset({GET_RESULT_SET_METHOD, GET_GENERATED_KEYS_METHOD})

RESULT_SET_METHODS: Final = frozenset({"execute_query", GET_RESULT_SET_METHOD, GET_GENERATED_KEYS_METHOD})
GENERATED_KEYS_METHODS: Final = frozenset({
    "execute",
    "execute_update",
    "execute_large_update",
    "execute_batch",
    "execute_large_batch",
})


def classify_statement_call(method_name: str, statement_type: StatementType) -> CallCategory:
    """Categorize a call made on a statement proxy.

    Args:
        method_name: Name of the invoked method.
        statement_type: Kind of the statement the proxy wraps.

    Returns:
        The category of the call.
    """
    if method_name in IDENTITY_METHODS:
        return CallCategory.IDENTITY
    if method_name in WRAPPER_METHODS:
        return CallCategory.WRAPPER
    if method_name in CONNECTION_METHODS:
        return CallCategory.CONNECTION
    if statement_type is StatementType.STATEMENT and method_name in BATCH_METHODS:
        return CallCategory.STATEMENT_BATCH
    if statement_type.is_parameterized and method_name in PARAMETER_METHODS:
        return CallCategory.PARAMETER
    if statement_type.is_parameterized and method_name in BATCH_METHODS:
        return CallCategory.PARAMETER_BATCH
    if method_name in EXECUTION_METHODS:
        return CallCategory.EXECUTION
    if method_name in RESULT_RETRIEVAL_METHODS:
        return CallCategory.RESULT_RETRIEVAL
    return CallCategory.PASSTHROUGH


def classify_connection_call(method_name: str) -> CallCategory:
    """Categorize a call made on a connection proxy."""
    if method_name in IDENTITY_METHODS:
        return CallCategory.IDENTITY
    if method_name in WRAPPER_METHODS:
        return CallCategory.WRAPPER
    return CallCategory.PASSTHROUGH


def classify_result_set_call(method_name: str) -> CallCategory:
    """Categorize a call made on a result set proxy."""
    if method_name in IDENTITY_METHODS:
        return CallCategory.IDENTITY
    if method_name in WRAPPER_METHODS:
        return CallCategory.WRAPPER
    return CallCategory.PASSTHROUGH


def is_batch_execution(method_name: str) -> bool:
    return method_name in BATCH_EXECUTION_METHODS


def returns_result_set(method_name: str) -> bool:
    return method_name in RESULT_SET_METHODS


def can_retrieve_generated_keys(method_name: str) -> bool:
    """Whether the call can leave generated keys behind on the statement."""
    return method_name in GENERATED_KEYS_METHODS
