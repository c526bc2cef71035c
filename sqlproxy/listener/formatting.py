"""Rendering of execution records into log entries."""

from typing import TYPE_CHECKING, Any

from sqlproxy._serialization import encode_json
from sqlproxy.core.parameters import ParameterKey

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlproxy.core.execution import ExecutionInfo, QueryInfo
    from sqlproxy.core.parameters import ParameterSet, ParameterSetOperation

__all__ = ("DefaultQueryLogEntryCreator", "OutputParameterLogEntryCreator")

FAILED_TO_RETRIEVE = "[FAILED TO RETRIEVE]"


def _display_value(operation: "ParameterSetOperation") -> Any:
    if operation.method == "set_null":
        return None
    if operation.is_register_out_parameter:
        return "OUTPARAM"
    return operation.value


def _text(value: Any) -> str:
    return "NULL" if value is None else str(value)


def _sorted_operations(parameters: "ParameterSet") -> "list[ParameterSetOperation]":
    return sorted(parameters, key=lambda op: ParameterKey(op.key))


def _is_named(parameters: "ParameterSet") -> bool:
    return any(isinstance(op.key, str) for op in parameters)


class DefaultQueryLogEntryCreator:
    """Builds the one-line text or JSON log entry for an execution.

    Text entries look like::

        Name:ds, Connection:1, Time:3, Success:True, Type:Prepared, Batch:False,
        QuerySize:1, BatchSize:0, Query:["SELECT ..."], Params:[(1,foo)]
    """

    __slots__ = ()

    def get_log_entry(
        self, execution_info: "ExecutionInfo", queries: "Sequence[QueryInfo]", write_data_source_name: bool = True
    ) -> str:
        parts: list[str] = []
        if write_data_source_name:
            parts.append(f"Name:{execution_info.data_source_name or ''}")
        parts.extend((
            f"Connection:{execution_info.connection_id}",
            f"Time:{execution_info.elapsed_ms}",
            f"Success:{execution_info.success}",
            f"Type:{execution_info.statement_type}",
            f"Batch:{execution_info.is_batch}",
            f"QuerySize:{len(queries)}",
            f"BatchSize:{execution_info.batch_size}",
            "Query:[{}]".format(",".join(f'"{query.query}"' for query in queries)),
            f"Params:[{self._format_parameters(queries)}]",
        ))
        return ", ".join(parts)

    def get_log_entry_as_json(
        self, execution_info: "ExecutionInfo", queries: "Sequence[QueryInfo]", write_data_source_name: bool = True
    ) -> str:
        return encode_json(self.build_json_payload(execution_info, queries, write_data_source_name))

    def build_json_payload(
        self, execution_info: "ExecutionInfo", queries: "Sequence[QueryInfo]", write_data_source_name: bool = True
    ) -> "dict[str, Any]":
        payload: dict[str, Any] = {}
        if write_data_source_name:
            payload["name"] = execution_info.data_source_name
        payload.update({
            "connection": execution_info.connection_id,
            "time": execution_info.elapsed_ms,
            "success": execution_info.success,
            "type": str(execution_info.statement_type),
            "batch": execution_info.is_batch,
            "querySize": len(queries),
            "batchSize": execution_info.batch_size,
            "query": [query.query for query in queries],
            "params": [self._json_parameters(parameters) for query in queries for parameters in query.parameters_list],
        })
        return payload

    def _format_parameters(self, queries: "Sequence[QueryInfo]") -> str:
        rendered = []
        for query in queries:
            for parameters in query.parameters_list:
                operations = _sorted_operations(parameters)
                if _is_named(parameters):
                    body = ",".join(f"{op.key}={_text(_display_value(op))}" for op in operations)
                else:
                    body = ",".join(_text(_display_value(op)) for op in operations)
                rendered.append(f"({body})")
        return ",".join(rendered)

    def _json_parameters(self, parameters: "ParameterSet") -> Any:
        operations = _sorted_operations(parameters)
        if _is_named(parameters):
            return {str(op.key): _display_value(op) for op in operations}
        return [_display_value(op) for op in operations]


class OutputParameterLogEntryCreator(DefaultQueryLogEntryCreator):
    """Appends the values of registered output parameters of callable statements.

    Values are read back from the executed statement with ``get_object(key)``.
    """

    __slots__ = ()

    def get_log_entry(
        self, execution_info: "ExecutionInfo", queries: "Sequence[QueryInfo]", write_data_source_name: bool = True
    ) -> str:
        entry = super().get_log_entry(execution_info, queries, write_data_source_name)
        groups = []
        for query in queries:
            for parameters in query.parameters_list:
                values = self._output_parameters(parameters, execution_info.statement)
                groups.append("({})".format(",".join(f"{key}={value}" for key, value in values)))
        return f"{entry}, OutParams:[{','.join(groups)}]"

    def build_json_payload(
        self, execution_info: "ExecutionInfo", queries: "Sequence[QueryInfo]", write_data_source_name: bool = True
    ) -> "dict[str, Any]":
        payload = super().build_json_payload(execution_info, queries, write_data_source_name)
        payload["outParams"] = [
            {str(key): value for key, value in self._output_parameters(parameters, execution_info.statement)}
            for query in queries
            for parameters in query.parameters_list
        ]
        return payload

    def _output_parameters(self, parameters: "ParameterSet", statement: Any) -> "list[tuple[Any, Any]]":
        return [
            (op.key, self.get_output_value_for_display(op.key, statement))
            for op in parameters
            if op.is_register_out_parameter
        ]

    def get_output_value_for_display(self, key: Any, statement: Any) -> Any:
        try:
            return statement.get_object(key)
        except Exception:  # noqa: BLE001
            return FAILED_TO_RETRIEVE
