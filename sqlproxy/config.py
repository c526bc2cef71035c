"""Proxy configuration shared read-only by every proxy instance."""

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from sqlproxy.core.connection import ConnectionIdManager, DefaultConnectionIdManager
from sqlproxy.core.transform import noop_transformer
from sqlproxy.exceptions import ImproperConfigurationError
from sqlproxy.listener._chain import ChainListener
from sqlproxy.protocols import MethodExecutionListener, QueryExecutionListener

if TYPE_CHECKING:
    from sqlproxy.protocols import QueryTransformer
    from sqlproxy.proxy.factory import ProxyFactory

__all__ = ("ProxyConfig",)


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    """Collaborators and policy flags applied by connection and statement proxies.

    Attributes:
        data_source_name: Logical name reported in execution records and logs.
        query_transformer: Rewrites query text before it reaches the driver.
        listeners: Notified before and after every query execution, in order.
        method_listeners: Notified around every explicit proxy method call.
        proxy_factory: Creates child proxies for statements and result sets.
        connection_id_manager: Assigns connection ids and tracks closed ones.
        result_set_proxy_enabled: Wrap result sets returned by queries.
        generated_keys_proxy_enabled: Wrap generated-keys result sets.
        auto_retrieve_generated_keys: Fetch generated keys right after executions that can produce them.
        auto_close_generated_keys: Close auto-retrieved generated keys once the execution finished.
        retrieve_generated_keys_for_batch_statement: Auto retrieval for plain statement batches.
        retrieve_generated_keys_for_batch_prepared_or_callable: Auto retrieval for prepared and
            callable batches whose statement was prepared with generated keys requested.
    """

    data_source_name: "Optional[str]" = None
    query_transformer: "QueryTransformer" = noop_transformer
    listeners: "tuple[QueryExecutionListener, ...]" = ()
    method_listeners: "tuple[MethodExecutionListener, ...]" = ()
    proxy_factory: "Optional[ProxyFactory]" = None
    connection_id_manager: ConnectionIdManager = field(default_factory=DefaultConnectionIdManager)
    result_set_proxy_enabled: bool = False
    generated_keys_proxy_enabled: bool = False
    auto_retrieve_generated_keys: bool = False
    auto_close_generated_keys: bool = False
    retrieve_generated_keys_for_batch_statement: bool = False
    retrieve_generated_keys_for_batch_prepared_or_callable: bool = True
    query_listener: ChainListener = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not callable(self.query_transformer):
            msg = f"query_transformer must be callable, got {type(self.query_transformer).__name__}"
            raise ImproperConfigurationError(msg)
        listeners = tuple(self.listeners)
        for listener in listeners:
            if not isinstance(listener, QueryExecutionListener):
                msg = f"{listener!r} does not implement before_query/after_query"
                raise ImproperConfigurationError(msg)
        method_listeners = tuple(self.method_listeners)
        for method_listener in method_listeners:
            if not isinstance(method_listener, MethodExecutionListener):
                msg = f"{method_listener!r} does not implement before_method/after_method"
                raise ImproperConfigurationError(msg)
        object.__setattr__(self, "listeners", listeners)
        object.__setattr__(self, "method_listeners", method_listeners)
        object.__setattr__(self, "query_listener", ChainListener(listeners))
        if self.proxy_factory is None:
            from sqlproxy.proxy.factory import DefaultProxyFactory

            object.__setattr__(self, "proxy_factory", DefaultProxyFactory())

    @property
    def factory(self) -> "ProxyFactory":
        assert self.proxy_factory is not None  # set in __post_init__
        return self.proxy_factory

    def replace(self, **changes: Any) -> "ProxyConfig":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def with_listeners(self, *listeners: "QueryExecutionListener") -> "ProxyConfig":
        """Return a copy with ``listeners`` appended to the existing ones."""
        return self.replace(listeners=(*self.listeners, *listeners))
