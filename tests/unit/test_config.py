"""Unit tests for ProxyConfig."""

import dataclasses

import pytest

from sqlproxy import ProxyConfig
from sqlproxy.core.connection import DefaultConnectionIdManager
from sqlproxy.core.transform import noop_transformer
from sqlproxy.exceptions import ImproperConfigurationError
from sqlproxy.listener import ChainListener, NoOpQueryExecutionListener, TracingMethodListener
from sqlproxy.proxy import DefaultProxyFactory


def test_defaults() -> None:
    config = ProxyConfig()
    assert config.data_source_name is None
    assert config.query_transformer is noop_transformer
    assert config.listeners == ()
    assert config.method_listeners == ()
    assert isinstance(config.factory, DefaultProxyFactory)
    assert isinstance(config.connection_id_manager, DefaultConnectionIdManager)
    assert config.result_set_proxy_enabled is False
    assert config.generated_keys_proxy_enabled is False
    assert config.auto_retrieve_generated_keys is False
    assert config.auto_close_generated_keys is False
    assert config.retrieve_generated_keys_for_batch_statement is False
    assert config.retrieve_generated_keys_for_batch_prepared_or_callable is True


def test_listeners_are_chained_in_order() -> None:
    first, second = NoOpQueryExecutionListener(), NoOpQueryExecutionListener()
    config = ProxyConfig(listeners=[first, second])  # type: ignore[arg-type]

    assert config.listeners == (first, second)
    assert isinstance(config.query_listener, ChainListener)
    assert config.query_listener.listeners == (first, second)


def test_each_config_gets_its_own_id_manager() -> None:
    assert ProxyConfig().connection_id_manager is not ProxyConfig().connection_id_manager


def test_config_is_frozen() -> None:
    config = ProxyConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.data_source_name = "other"  # type: ignore[misc]


def test_rejects_non_callable_transformer() -> None:
    with pytest.raises(ImproperConfigurationError, match="query_transformer"):
        ProxyConfig(query_transformer="SELECT 1")  # type: ignore[arg-type]


def test_rejects_incomplete_listener() -> None:
    class HalfListener:
        def before_query(self, execution_info: object) -> None:
            return

    with pytest.raises(ImproperConfigurationError, match="before_query/after_query"):
        ProxyConfig(listeners=(HalfListener(),))  # type: ignore[arg-type]


def test_rejects_incomplete_method_listener() -> None:
    with pytest.raises(ImproperConfigurationError, match="before_method/after_method"):
        ProxyConfig(method_listeners=(object(),))  # type: ignore[arg-type]


def test_replace_returns_validated_copy() -> None:
    config = ProxyConfig(data_source_name="a")
    changed = config.replace(data_source_name="b", auto_retrieve_generated_keys=True)

    assert changed.data_source_name == "b"
    assert changed.auto_retrieve_generated_keys is True
    assert config.data_source_name == "a"
    assert changed.connection_id_manager is config.connection_id_manager
    with pytest.raises(ImproperConfigurationError):
        config.replace(query_transformer=None)


def test_with_listeners_appends() -> None:
    first, second = NoOpQueryExecutionListener(), NoOpQueryExecutionListener()
    config = ProxyConfig(listeners=(first,), method_listeners=(TracingMethodListener(),))

    extended = config.with_listeners(second)

    assert extended.listeners == (first, second)
    assert len(extended.query_listener) == 2
    assert len(config.query_listener) == 1
    assert extended.query_listener.listeners == extended.listeners
    assert extended.method_listeners == config.method_listeners
