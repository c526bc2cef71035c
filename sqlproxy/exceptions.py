from typing import Any, Optional

__all__ = (
    "ImproperConfigurationError",
    "MissingParameterError",
    "ParameterError",
    "ProxyUnwrapError",
    "QueryTransformationError",
    "SQLProxyError",
)


class SQLProxyError(Exception):
    """Base exception class from which all SQLProxy exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLProxyError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLProxyError):
    """Improper configuration.

    Raised when a ``ProxyConfig`` or one of its collaborators is not usable.
    """


class QueryTransformationError(SQLProxyError):
    """The query transformer broke its contract."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Query transformer did not return query text."
        super().__init__(message)


class ProxyUnwrapError(SQLProxyError):
    """The proxied object cannot be unwrapped to the requested type."""


class ParameterError(SQLProxyError):
    """Base class for parameter binding errors."""


class MissingParameterError(ParameterError):
    """A positional parameter was never bound."""
