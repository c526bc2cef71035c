"""Per-statement cache of the generated-keys result set."""

from collections.abc import Mapping, Sequence
from typing import Any, Final, Optional

__all__ = (
    "GENERATED_KEYS_ARGUMENT",
    "NO_GENERATED_KEYS",
    "RETURN_GENERATED_KEYS",
    "GeneratedKeysCache",
    "requests_generated_keys",
)

RETURN_GENERATED_KEYS: Final = 1
NO_GENERATED_KEYS: Final = 2
GENERATED_KEYS_ARGUMENT: Final = "generated_keys"


def requests_generated_keys(args: "Sequence[Any]", kwargs: "Optional[Mapping[str, Any]]" = None) -> bool:
    """Whether the caller asked the driver to make generated keys available.

    The request is the argument following the query text, given positionally or
    as ``generated_keys=``: either ``RETURN_GENERATED_KEYS`` or a non-empty
    sequence of column indexes or column names.
    """
    if kwargs and GENERATED_KEYS_ARGUMENT in kwargs:
        flag = kwargs[GENERATED_KEYS_ARGUMENT]
    elif len(args) == 2:  # noqa: PLR2004
        flag = args[1]
    else:
        return False
    if flag is None or isinstance(flag, bool):
        return False
    if isinstance(flag, int):
        return flag == RETURN_GENERATED_KEYS
    if isinstance(flag, (list, tuple)):
        return len(flag) != 0
    return False


class GeneratedKeysCache:
    """Holds at most one live generated-keys handle.

    A handle that reports itself closed is treated as absent.
    """

    __slots__ = ("_handle",)

    def __init__(self) -> None:
        self._handle: Any = None

    def get(self) -> Any:
        if self._handle is not None and self._handle.is_closed():
            self._handle = None
        return self._handle

    def put(self, handle: Any) -> None:
        self._handle = handle

    def invalidate(self) -> None:
        self._handle = None

    def close(self) -> bool:
        """Close a live handle and clear the slot.

        Returns:
            True when a handle was closed.
        """
        handle = self.get()
        if handle is None:
            return False
        try:
            handle.close()
        finally:
            self._handle = None
        return True

    def __repr__(self) -> str:
        return f"GeneratedKeysCache(handle={self._handle!r})"
