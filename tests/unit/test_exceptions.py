"""Unit tests for the exception hierarchy."""

from sqlproxy.exceptions import (
    ImproperConfigurationError,
    MissingParameterError,
    ParameterError,
    ProxyUnwrapError,
    QueryTransformationError,
    SQLProxyError,
)


def test_message_becomes_detail() -> None:
    error = SQLProxyError("something broke")
    assert error.detail == "something broke"
    assert str(error) == "something broke"
    assert repr(error) == "SQLProxyError - something broke"


def test_explicit_detail_is_appended() -> None:
    error = ImproperConfigurationError("bad config", detail="listener missing after_query")
    assert str(error) == "bad config listener missing after_query"


def test_error_without_message() -> None:
    error = ProxyUnwrapError()
    assert str(error) == ""
    assert repr(error) == "ProxyUnwrapError"


def test_query_transformation_error_default_message() -> None:
    assert str(QueryTransformationError()) == "Query transformer did not return query text."


def test_hierarchy() -> None:
    for error_type in (ImproperConfigurationError, QueryTransformationError, ProxyUnwrapError, ParameterError):
        assert issubclass(error_type, SQLProxyError)
    assert issubclass(MissingParameterError, ParameterError)
