"""Behaviour shared by every proxy type."""

from typing import TYPE_CHECKING, Any, Optional

from mypy_extensions import trait

from sqlproxy.exceptions import ProxyUnwrapError

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ("ProxyObjectMixin", "describe", "handle_wrapper_call", "intercepted")


def describe(target: Any) -> str:
    """String form of a proxy: delegate class name plus the delegate's own text."""
    return f"{type(target).__name__} [{target}]"


def handle_wrapper_call(method: str, target: Any, args: "tuple[Any, ...]") -> Any:
    """Answer ``unwrap`` and ``is_wrapper_for`` against the delegate.

    The delegate itself satisfies the request when it is an instance of the
    requested type; otherwise the request is forwarded to the delegate when it
    supports it.

    Raises:
        ProxyUnwrapError: ``unwrap`` was requested for a type neither the
            delegate nor anything it wraps is an instance of.
    """
    requested = args[0]
    if isinstance(target, requested):
        return target if method == "unwrap" else True
    forward = getattr(target, method, None)
    if callable(forward):
        return forward(*args)
    if method == "is_wrapper_for":
        return False
    msg = f"{type(target).__name__} does not wrap {getattr(requested, '__name__', requested)!r}"
    raise ProxyUnwrapError(msg)


def intercepted(method: str) -> "Callable[..., Any]":
    """Build a proxy method routing ``method`` through the proxy's interceptor."""

    def proxy_method(self: Any, *args: Any, **kwargs: Any) -> Any:
        return self._self_interceptor.invoke(self, method, args, kwargs)

    proxy_method.__name__ = method
    proxy_method.__qualname__ = method
    proxy_method.__doc__ = f"Intercepted ``{method}`` call."
    return proxy_method


@trait
class ProxyObjectMixin:
    """Identity, unwrap and context manager handling common to all proxies.

    Concrete proxies store their interceptor as ``_self_interceptor`` so the
    attribute lives on the proxy rather than on the wrapped object.
    """

    _self_interceptor: Any

    def invoke(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Generic entry point: route any method name through the interceptor."""
        return self._self_interceptor.invoke(self, method, args, kwargs)

    def get_data_source_name(self) -> "Optional[str]":
        return self._self_interceptor.invoke(self, "get_data_source_name", (), {})  # type: ignore[no-any-return]

    def get_target(self) -> Any:
        return self._self_interceptor.invoke(self, "get_target", (), {})

    def unwrap(self, requested: type) -> Any:
        return self._self_interceptor.invoke(self, "unwrap", (requested,), {})

    def is_wrapper_for(self, requested: type) -> bool:
        return self._self_interceptor.invoke(self, "is_wrapper_for", (requested,), {})  # type: ignore[no-any-return]

    def __str__(self) -> str:
        return self._self_interceptor.invoke(self, "__str__", (), {})  # type: ignore[no-any-return]

    def __enter__(self) -> Any:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()  # type: ignore[attr-defined]
