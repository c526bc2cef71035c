"""Unit tests for query log entry creators."""

from typing import Any

from sqlproxy._serialization import decode_json
from sqlproxy.core.execution import ExecutionInfo, QueryInfo, StatementType
from sqlproxy.core.parameters import ParameterSetOperation
from sqlproxy.listener.formatting import DefaultQueryLogEntryCreator, OutputParameterLogEntryCreator


def _info(
    queries: "tuple[QueryInfo, ...]",
    statement_type: StatementType = StatementType.PREPARED,
    statement: Any = None,
    **overrides: Any,
) -> ExecutionInfo:
    return ExecutionInfo(
        data_source_name=overrides.pop("data_source_name", "ds"),
        connection_id="1",
        statement=statement,
        statement_type=statement_type,
        method="execute",
        args=(),
        queries=queries,
        elapsed_time=0.0125,
        success=True,
        **overrides,
    )


def _positional() -> QueryInfo:
    return QueryInfo(
        "INSERT INTO t VALUES (?, ?)",
        ((ParameterSetOperation("set_string", (2, "b")), ParameterSetOperation("set_int", (1, 10))),),
    )


def _named() -> QueryInfo:
    return QueryInfo(
        "UPDATE t SET name = :name WHERE id = :id",
        ((ParameterSetOperation("set_null", ("name", 12)), ParameterSetOperation("set_int", ("id", 3))),),
    )


def test_text_entry_for_prepared_statement() -> None:
    info = _info((_positional(),))
    entry = DefaultQueryLogEntryCreator().get_log_entry(info, info.queries)
    assert entry == (
        "Name:ds, Connection:1, Time:12, Success:True, Type:Prepared, Batch:False, QuerySize:1, BatchSize:0, "
        'Query:["INSERT INTO t VALUES (?, ?)"], Params:[(10,b)]'
    )


def test_text_entry_renders_named_and_null_parameters() -> None:
    info = _info((_named(),))
    entry = DefaultQueryLogEntryCreator().get_log_entry(info, info.queries, write_data_source_name=False)
    assert entry.startswith("Connection:1, ")
    assert entry.endswith("Params:[(id=3,name=NULL)]")


def test_text_entry_for_plain_batch() -> None:
    queries = (QueryInfo("INSERT INTO a VALUES (1)"), QueryInfo("INSERT INTO b VALUES (2)"))
    info = _info(queries, StatementType.STATEMENT, is_batch=True, batch_size=2, data_source_name=None)
    entry = DefaultQueryLogEntryCreator().get_log_entry(info, info.queries)
    assert entry == (
        "Name:, Connection:1, Time:12, Success:True, Type:Statement, Batch:True, QuerySize:2, BatchSize:2, "
        'Query:["INSERT INTO a VALUES (1)","INSERT INTO b VALUES (2)"], Params:[]'
    )


def test_json_entry() -> None:
    info = _info((_positional(), _named()))
    payload = decode_json(DefaultQueryLogEntryCreator().get_log_entry_as_json(info, info.queries))
    assert payload == {
        "name": "ds",
        "connection": "1",
        "time": 12,
        "success": True,
        "type": "Prepared",
        "batch": False,
        "querySize": 2,
        "batchSize": 0,
        "query": ["INSERT INTO t VALUES (?, ?)", "UPDATE t SET name = :name WHERE id = :id"],
        "params": [[10, "b"], {"id": 3, "name": None}],
    }


def test_json_entry_without_name() -> None:
    info = _info((_positional(),))
    payload = decode_json(
        DefaultQueryLogEntryCreator().get_log_entry_as_json(info, info.queries, write_data_source_name=False)
    )
    assert "name" not in payload


def test_json_entry_encodes_unknown_values_with_repr() -> None:
    class Blob:
        def __repr__(self) -> str:
            return "<blob>"

    info = _info((QueryInfo("INSERT INTO t VALUES (?)", ((ParameterSetOperation("set_blob", (1, Blob())),),)),))
    payload = decode_json(DefaultQueryLogEntryCreator().get_log_entry_as_json(info, info.queries))
    assert payload["params"] == [["<blob>"]]


class _OutStatement:
    def get_object(self, key: Any) -> Any:
        if key == "missing":
            raise LookupError(key)
        return 42


def _callable_query() -> QueryInfo:
    return QueryInfo(
        "{call totals(?, ?, ?)}",
        (
            (
                ParameterSetOperation("set_int", ("in", 1)),
                ParameterSetOperation("register_out_parameter", ("total", 4)),
                ParameterSetOperation("register_out_parameter", ("missing", 4)),
            ),
        ),
    )


def test_output_parameters_are_appended() -> None:
    info = _info((_callable_query(),), StatementType.CALLABLE, statement=_OutStatement())
    entry = OutputParameterLogEntryCreator().get_log_entry(info, info.queries)
    assert "Params:[(in=1,missing=OUTPARAM,total=OUTPARAM)]" in entry
    assert entry.endswith(", OutParams:[(total=42,missing=[FAILED TO RETRIEVE])]")


def test_output_parameters_in_json() -> None:
    info = _info((_callable_query(),), StatementType.CALLABLE, statement=_OutStatement())
    payload = decode_json(OutputParameterLogEntryCreator().get_log_entry_as_json(info, info.queries))
    assert payload["outParams"] == [{"total": 42, "missing": "[FAILED TO RETRIEVE]"}]
    assert payload["type"] == "Callable"
