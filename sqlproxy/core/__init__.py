"""Interception core: call routing, parameter state and execution records."""

from sqlproxy.core.classifier import CallCategory, classify_connection_call, classify_statement_call
from sqlproxy.core.connection import (
    ConnectionIdManager,
    ConnectionInfo,
    DefaultConnectionIdManager,
    UuidConnectionIdManager,
)
from sqlproxy.core.execution import ExecutionInfo, QueryInfo, StatementType
from sqlproxy.core.generated_keys import RETURN_GENERATED_KEYS, GeneratedKeysCache, requests_generated_keys
from sqlproxy.core.parameters import ParameterKey, ParameterRegistry, ParameterSet, ParameterSetOperation
from sqlproxy.core.transform import TransformInfo, noop_transformer, transform_query

__all__ = (
    "RETURN_GENERATED_KEYS",
    "CallCategory",
    "ConnectionIdManager",
    "ConnectionInfo",
    "DefaultConnectionIdManager",
    "ExecutionInfo",
    "GeneratedKeysCache",
    "ParameterKey",
    "ParameterRegistry",
    "ParameterSet",
    "ParameterSetOperation",
    "QueryInfo",
    "StatementType",
    "TransformInfo",
    "UuidConnectionIdManager",
    "classify_connection_call",
    "classify_statement_call",
    "noop_transformer",
    "requests_generated_keys",
    "transform_query",
)
